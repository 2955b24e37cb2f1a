from __future__ import annotations

from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from .repository import TeacherRepository


class CourseAccess:
    """Who may act on a course: admins, or active teachers assigned to it."""

    def __init__(self, teachers: TeacherRepository):
        self._teachers = teachers

    def require_staff(self, *, current_role: Role, current_user_id: int, course_id: int) -> None:
        if current_role == Role.ADMIN:
            return
        if current_role == Role.TEACHER:
            teacher = self._teachers.get_by_id(int(current_user_id))
            if teacher and teacher.is_active and teacher.course_id == int(course_id):
                return
        raise AuthorizationError("You do not have access to this course")

    def require_head(self, *, current_role: Role, current_user_id: int, course_id: int) -> None:
        if current_role == Role.ADMIN:
            return
        if current_role == Role.TEACHER:
            teacher = self._teachers.get_by_id(int(current_user_id))
            if teacher and teacher.is_active and teacher.is_head and teacher.course_id == int(course_id):
                return
        raise AuthorizationError("Only the head teacher of this course can do this")
