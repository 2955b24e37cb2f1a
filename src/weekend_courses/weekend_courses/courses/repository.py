from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import CourseStatus
from .model import Course


class CourseRepository(Protocol):
    def get_by_id(self, course_id: int) -> Optional[Course]:
        raise NotImplementedError

    def list_all(self, *, status: Optional[CourseStatus] = None) -> Sequence[Course]:
        raise NotImplementedError

    def create(self, *, name: str, end_date: Optional[date] = None) -> int:
        raise NotImplementedError

    def update(self, *, course_id: int, name: str, end_date: Optional[date]) -> bool:
        raise NotImplementedError

    def set_head_teacher(self, *, course_id: int, teacher_id: Optional[int]) -> bool:
        raise NotImplementedError

    def set_status(self, *, course_id: int, status: CourseStatus) -> bool:
        raise NotImplementedError
