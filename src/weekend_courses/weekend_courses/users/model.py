from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import TeacherRole


@dataclass(frozen=True)
class Admin:
    admin_id: int
    email: str
    full_name: str
    password_hash: str


@dataclass(frozen=True)
class Teacher:
    """Teacher account. `course_id` is None once removed from a course."""

    teacher_id: int
    email: str
    full_name: str
    password_hash: str
    course_id: Optional[int]
    role: TeacherRole
    is_active: bool = True

    @property
    def is_head(self) -> bool:
        return self.role == TeacherRole.HEAD
