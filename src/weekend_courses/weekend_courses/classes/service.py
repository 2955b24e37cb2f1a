from __future__ import annotations

import logging
from typing import Sequence

from ..common.validators import check_capacity, check_title, raise_for_fields
from ..core.constants import CLASS_NAME_MAX_LENGTH, CLASS_NAME_MIN_LENGTH, DEFAULT_CLASS_CAPACITY
from ..core.enums import Role
from ..core.exceptions import ConflictError, NotFoundError
from ..courses.repository import CourseRepository
from ..database.connection import TransactionManager
from ..sessions.repository import SessionRepository
from ..students.repository import StudentRepository
from ..users.access import CourseAccess
from .model import CourseClass
from .repository import ClassRepository

logger = logging.getLogger(__name__)


class ClassService:
    def __init__(
        self,
        classes: ClassRepository,
        courses: CourseRepository,
        students: StudentRepository,
        sessions: SessionRepository,
        *,
        access: CourseAccess,
        tx: TransactionManager,
    ):
        self._classes = classes
        self._courses = courses
        self._students = students
        self._sessions = sessions
        self._access = access
        self._tx = tx

    def get_class(self, class_id: int) -> CourseClass:
        klass = self._classes.get_by_id(int(class_id))
        if not klass:
            raise NotFoundError("Class not found")
        return klass

    def list_for_course(self, course_id: int) -> Sequence[CourseClass]:
        if not self._courses.get_by_id(int(course_id)):
            raise NotFoundError("Course not found")
        return self._classes.list_for_course(int(course_id))

    def _check_name_unique(self, *, course_id: int, name: str, exclude_class_id: int | None = None) -> None:
        for other in self._classes.list_for_course(course_id):
            if other.class_id != exclude_class_id and other.name.lower() == name.lower():
                raise ConflictError("A class with this name already exists in the course")

    def create_class(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        course_id: int,
        name: str,
        capacity=DEFAULT_CLASS_CAPACITY,
    ) -> CourseClass:
        course = self._courses.get_by_id(int(course_id))
        if not course:
            raise NotFoundError("Course not found")
        self._access.require_staff(current_role=current_role, current_user_id=current_user_id, course_id=course.course_id)
        if not course.is_active:
            raise ConflictError("Classes can only be added to an active course")

        raise_for_fields(
            {
                "name": check_title(name, "Class name", min_len=CLASS_NAME_MIN_LENGTH, max_len=CLASS_NAME_MAX_LENGTH),
                "capacity": check_capacity(capacity),
            }
        )
        name = name.strip()
        self._check_name_unique(course_id=course.course_id, name=name)

        class_id = self._classes.create(course_id=course.course_id, name=name, capacity=int(capacity))
        logger.info("Class %s created in course %s", class_id, course.course_id)
        return self.get_class(class_id)

    def update_class(self, *, current_role: Role, current_user_id: int, class_id: int, name: str, capacity) -> CourseClass:
        klass = self.get_class(class_id)
        self._access.require_staff(current_role=current_role, current_user_id=current_user_id, course_id=klass.course_id)
        raise_for_fields(
            {
                "name": check_title(name, "Class name", min_len=CLASS_NAME_MIN_LENGTH, max_len=CLASS_NAME_MAX_LENGTH),
                "capacity": check_capacity(capacity),
            }
        )
        name = name.strip()
        self._check_name_unique(course_id=klass.course_id, name=name, exclude_class_id=klass.class_id)

        enrolled = self._students.count_for_class(klass.class_id)
        if int(capacity) < enrolled:
            raise ConflictError(f"Capacity cannot be lower than the {enrolled} students in the class")

        self._classes.update(class_id=klass.class_id, name=name, capacity=int(capacity))
        return self.get_class(klass.class_id)

    def delete_class(self, *, current_role: Role, current_user_id: int, class_id: int) -> None:
        """Delete an empty class together with its sessions."""
        klass = self.get_class(class_id)
        self._access.require_staff(current_role=current_role, current_user_id=current_user_id, course_id=klass.course_id)

        with self._tx.transaction():
            if self._students.count_for_class(klass.class_id):
                raise ConflictError("Cannot delete a class that still has students")
            for session in self._sessions.list_for_class(klass.class_id):
                self._sessions.delete(session.session_id)
            self._classes.delete(klass.class_id)

        logger.info("Class %s deleted", klass.class_id)
