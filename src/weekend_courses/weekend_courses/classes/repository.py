from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import CourseClass


class ClassRepository(Protocol):
    def get_by_id(self, class_id: int) -> Optional[CourseClass]:
        raise NotImplementedError

    def list_for_course(self, course_id: int) -> Sequence[CourseClass]:
        raise NotImplementedError

    def create(self, *, course_id: int, name: str, capacity: int) -> int:
        raise NotImplementedError

    def update(self, *, class_id: int, name: str, capacity: int) -> bool:
        raise NotImplementedError

    def delete(self, class_id: int) -> bool:
        raise NotImplementedError
