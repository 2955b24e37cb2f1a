from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import check_password, raise_for_fields, require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from ..notifications.notifier import Notifier
from ..students.repository import StudentRepository
from .repository import AdminRepository, TeacherRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    full_name: str
    role: Role
    course_id: Optional[int] = None
    class_id: Optional[int] = None


def _password_matches(password_hash: str, password: str) -> bool:
    try:
        return check_password_hash(password_hash, password)
    except (TypeError, ValueError):
        # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
        return False


class AuthService:
    """Use case: authenticate an admin, a teacher or a student (login)."""

    def __init__(self, admins: AdminRepository, teachers: TeacherRepository, students: StudentRepository):
        self._admins = admins
        self._teachers = teachers
        self._students = students

    def authenticate(self, email: str, password: str) -> SessionUser:
        email = require_non_empty(email, "Email").lower()

        admin = self._admins.get_by_email(email)
        if admin and _password_matches(admin.password_hash, password):
            logger.info("Admin %s logged in", admin.admin_id)
            return SessionUser(user_id=admin.admin_id, full_name=admin.full_name, role=Role.ADMIN)

        teacher = self._teachers.get_by_email(email)
        if teacher and teacher.is_active and _password_matches(teacher.password_hash, password):
            logger.info("Teacher %s logged in", teacher.teacher_id)
            return SessionUser(
                user_id=teacher.teacher_id,
                full_name=teacher.full_name,
                role=Role.TEACHER,
                course_id=teacher.course_id,
            )

        raise AuthenticationError("Invalid email or password")

    def authenticate_student(
        self, student_number: str, *, phone_number: Optional[str] = None, email: Optional[str] = None
    ) -> SessionUser:
        """Students sign in with their number plus the phone or email on record."""
        number = require_non_empty(student_number, "Student number").upper()
        phone = (phone_number or "").replace(" ", "")
        mail = (email or "").strip().lower()
        if not phone and not mail:
            raise ValidationError("Phone number or email is required")

        student = self._students.get_by_student_number(number)
        if student and (
            (phone and student.phone_number and student.phone_number.replace(" ", "") == phone)
            or (mail and student.email.lower() == mail)
        ):
            logger.info("Student %s logged in", student.student_id)
            return SessionUser(
                user_id=student.student_id,
                full_name=student.full_name,
                role=Role.STUDENT,
                class_id=student.class_id,
            )

        raise AuthenticationError("Invalid student number or contact details")


class AccountService:
    """Password changes for staff accounts."""

    def __init__(self, admins: AdminRepository, teachers: TeacherRepository, *, notifier: Notifier):
        self._admins = admins
        self._teachers = teachers
        self._notifier = notifier

    def change_password(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        current_password: str,
        new_password: str,
    ) -> None:
        raise_for_fields({"new_password": check_password(new_password)})

        if current_role == Role.ADMIN:
            account = self._admins.get_by_id(int(current_user_id))
        elif current_role == Role.TEACHER:
            account = self._teachers.get_by_id(int(current_user_id))
        else:
            raise AuthorizationError("Only staff accounts have a password")
        if not account:
            raise NotFoundError("Account not found")
        if not _password_matches(account.password_hash, current_password or ""):
            raise ValidationError("Current password is incorrect")
        if current_password == new_password:
            raise ValidationError("New password must be different from the current one")

        new_hash = generate_password_hash(new_password)
        if current_role == Role.ADMIN:
            self._admins.update_password(int(current_user_id), new_hash)
        else:
            self._teachers.update_password(int(current_user_id), new_hash)
        logger.info("%s %s changed their password", current_role.value, current_user_id)

    def reset_teacher_password(self, *, current_role: Role, teacher_id: int) -> None:
        """Admin issues a temporary password and mails it to the teacher."""
        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin access required")
        teacher = self._teachers.get_by_id(int(teacher_id))
        if not teacher:
            raise NotFoundError("Teacher not found")

        # Prefix and suffix keep it within the password rule.
        temporary = "Tmp" + secrets.token_urlsafe(9) + "9"
        self._teachers.update_password(teacher.teacher_id, generate_password_hash(temporary))
        logger.info("Password reset for teacher %s", teacher.teacher_id)
        self._notifier.password_reset(to=teacher.email, full_name=teacher.full_name, temporary_password=temporary)
