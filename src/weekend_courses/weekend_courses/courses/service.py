from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from werkzeug.security import generate_password_hash

from ..common.validators import check_email, check_name, check_password, check_title, raise_for_fields
from ..core.constants import COURSE_NAME_MAX_LENGTH, COURSE_NAME_MIN_LENGTH
from ..core.enums import CourseStatus, Role, TeacherRole
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..database.connection import TransactionManager
from ..users.access import CourseAccess
from ..users.model import Teacher
from ..users.repository import AdminRepository, TeacherRepository
from .model import Course
from .repository import CourseRepository

logger = logging.getLogger(__name__)


class CourseService:
    """Use cases: courses and the teachers attached to them."""

    def __init__(
        self,
        courses: CourseRepository,
        teachers: TeacherRepository,
        admins: AdminRepository,
        *,
        tx: TransactionManager,
        access: CourseAccess,
    ):
        self._courses = courses
        self._teachers = teachers
        self._admins = admins
        self._tx = tx
        self._access = access

    def get_course(self, course_id: int) -> Course:
        course = self._courses.get_by_id(int(course_id))
        if not course:
            raise NotFoundError("Course not found")
        return course

    def list_courses(self, *, status: Optional[CourseStatus] = None) -> Sequence[Course]:
        return self._courses.list_all(status=status)

    def list_teachers(self, course_id: int) -> Sequence[Teacher]:
        self.get_course(course_id)
        return self._teachers.list_for_course(int(course_id))

    def _require_admin(self, current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin access required")

    def _email_taken(self, email: str) -> bool:
        return bool(self._teachers.get_by_email(email) or self._admins.get_by_email(email))

    def _validate_staff_account(self, *, email: str, full_name: str, password: str, prefix: str = "") -> str:
        email = (email or "").strip().lower()
        raise_for_fields(
            {
                f"{prefix}email": check_email(email),
                f"{prefix}full_name": check_name(full_name, "Full name"),
                f"{prefix}password": check_password(password),
            }
        )
        if self._email_taken(email):
            raise ConflictError("A user with this email already exists")
        return email

    def create_course_with_head_teacher(
        self,
        *,
        current_role: Role,
        name: str,
        head_email: str,
        head_full_name: str,
        head_password: str,
        end_date: Optional[date] = None,
    ) -> Course:
        """Create a course and its head teacher account in one transaction."""
        self._require_admin(current_role)

        raise_for_fields(
            {
                "name": check_title(
                    name, "Course name", min_len=COURSE_NAME_MIN_LENGTH, max_len=COURSE_NAME_MAX_LENGTH
                ),
            }
        )
        email = self._validate_staff_account(
            email=head_email, full_name=head_full_name, password=head_password, prefix="head_"
        )

        with self._tx.transaction():
            course_id = self._courses.create(name=name.strip(), end_date=end_date)
            teacher_id = self._teachers.create(
                email=email,
                full_name=head_full_name.strip(),
                password_hash=generate_password_hash(head_password),
                course_id=course_id,
                role=TeacherRole.HEAD,
            )
            self._courses.set_head_teacher(course_id=course_id, teacher_id=teacher_id)

        logger.info("Course %s created with head teacher %s", course_id, teacher_id)
        return self.get_course(course_id)

    def update_course(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        course_id: int,
        name: str,
        end_date: Optional[date] = None,
    ) -> Course:
        course = self.get_course(course_id)
        self._access.require_head(
            current_role=current_role, current_user_id=current_user_id, course_id=course.course_id
        )
        raise_for_fields(
            {
                "name": check_title(
                    name, "Course name", min_len=COURSE_NAME_MIN_LENGTH, max_len=COURSE_NAME_MAX_LENGTH
                ),
            }
        )
        self._courses.update(course_id=course.course_id, name=name.strip(), end_date=end_date)
        return self.get_course(course_id)

    def replace_head_teacher(
        self,
        *,
        current_role: Role,
        course_id: int,
        new_teacher_id: int,
        remove_old: bool = False,
    ) -> Course:
        """Promote another teacher to head.

        The previous head is demoted to ADDITIONAL, or detached from the
        course entirely when `remove_old` is set.
        """
        self._require_admin(current_role)
        course = self.get_course(course_id)

        new_head = self._teachers.get_by_id(int(new_teacher_id))
        if not new_head or not new_head.is_active:
            raise NotFoundError("Teacher not found")
        if course.head_teacher_id == new_head.teacher_id:
            raise ValidationError("The new head teacher must be different from the current one")
        if new_head.is_head:
            raise ConflictError("This teacher is already a head teacher of another course")

        with self._tx.transaction():
            if course.head_teacher_id is not None:
                self._teachers.update_assignment(
                    teacher_id=course.head_teacher_id,
                    course_id=None if remove_old else course.course_id,
                    role=TeacherRole.ADDITIONAL,
                    is_active=True,
                )
                # Release the unique head slot before taking it.
                self._courses.set_head_teacher(course_id=course.course_id, teacher_id=None)

            self._teachers.update_assignment(
                teacher_id=new_head.teacher_id,
                course_id=course.course_id,
                role=TeacherRole.HEAD,
                is_active=True,
            )
            self._courses.set_head_teacher(course_id=course.course_id, teacher_id=new_head.teacher_id)

        logger.info(
            "Course %s head teacher replaced: %s -> %s", course.course_id, course.head_teacher_id, new_head.teacher_id
        )
        return self.get_course(course_id)

    def deactivate_course(self, *, current_role: Role, course_id: int) -> Course:
        """Mark the course INACTIVE and release its head teacher."""
        self._require_admin(current_role)
        course = self.get_course(course_id)
        if course.status == CourseStatus.COMPLETED:
            raise ConflictError("A completed course cannot be deactivated")

        with self._tx.transaction():
            if course.head_teacher_id is not None:
                self._courses.set_head_teacher(course_id=course.course_id, teacher_id=None)
                self._teachers.update_assignment(
                    teacher_id=course.head_teacher_id,
                    course_id=None,
                    role=TeacherRole.ADDITIONAL,
                    is_active=False,
                )
            self._courses.set_status(course_id=course.course_id, status=CourseStatus.INACTIVE)

        logger.info("Course %s deactivated", course.course_id)
        return self.get_course(course_id)

    def complete_course(self, *, current_role: Role, course_id: int) -> Course:
        self._require_admin(current_role)
        course = self.get_course(course_id)
        if course.status != CourseStatus.ACTIVE:
            raise ConflictError("Only an active course can be completed")
        self._courses.set_status(course_id=course.course_id, status=CourseStatus.COMPLETED)
        return self.get_course(course_id)

    def add_teacher(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        course_id: int,
        email: str,
        full_name: str,
        password: str,
    ) -> Teacher:
        course = self.get_course(course_id)
        self._access.require_head(
            current_role=current_role, current_user_id=current_user_id, course_id=course.course_id
        )
        if not course.is_active:
            raise ConflictError("Teachers can only be added to an active course")

        email = self._validate_staff_account(email=email, full_name=full_name, password=password)
        teacher_id = self._teachers.create(
            email=email,
            full_name=full_name.strip(),
            password_hash=generate_password_hash(password),
            course_id=course.course_id,
            role=TeacherRole.ADDITIONAL,
        )
        logger.info("Teacher %s added to course %s", teacher_id, course.course_id)
        teacher = self._teachers.get_by_id(teacher_id)
        if not teacher:
            raise NotFoundError("Teacher not found")
        return teacher

    def remove_teacher(self, *, current_role: Role, current_user_id: int, course_id: int, teacher_id: int) -> None:
        course = self.get_course(course_id)
        self._access.require_head(
            current_role=current_role, current_user_id=current_user_id, course_id=course.course_id
        )

        teacher = self._teachers.get_by_id(int(teacher_id))
        if not teacher or teacher.course_id != course.course_id:
            raise NotFoundError("Teacher not found in this course")
        if teacher.is_head:
            raise ConflictError("The head teacher cannot be removed; replace them instead")

        self._teachers.update_assignment(
            teacher_id=teacher.teacher_id,
            course_id=None,
            role=TeacherRole.ADDITIONAL,
            is_active=False,
        )
        logger.info("Teacher %s removed from course %s", teacher.teacher_id, course.course_id)
