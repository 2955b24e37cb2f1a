from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import TeacherRole
from .model import Admin, Teacher


class AdminRepository(Protocol):
    def get_by_id(self, admin_id: int) -> Optional[Admin]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Admin]:
        raise NotImplementedError

    def update_password(self, admin_id: int, password_hash: str) -> bool:
        raise NotImplementedError


class TeacherRepository(Protocol):
    """Teacher accounts and their course assignment."""

    def get_by_id(self, teacher_id: int) -> Optional[Teacher]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Teacher]:
        raise NotImplementedError

    def create(
        self,
        *,
        email: str,
        full_name: str,
        password_hash: str,
        course_id: Optional[int],
        role: TeacherRole,
    ) -> int:
        raise NotImplementedError

    def list_for_course(self, course_id: int) -> Sequence[Teacher]:
        raise NotImplementedError

    def update_assignment(
        self,
        *,
        teacher_id: int,
        course_id: Optional[int],
        role: TeacherRole,
        is_active: bool,
    ) -> bool:
        raise NotImplementedError

    def update_password(self, teacher_id: int, password_hash: str) -> bool:
        raise NotImplementedError
