from __future__ import annotations

from typing import Dict, Optional, Protocol, Sequence

from ..core.enums import WeekDay
from .model import Session


class SessionRepository(Protocol):
    """Sessions plus the session/student membership table."""

    def get_by_id(self, session_id: int) -> Optional[Session]:
        raise NotImplementedError

    def list_for_class(self, class_id: int, *, day: Optional[WeekDay] = None) -> Sequence[Session]:
        raise NotImplementedError

    def create(self, *, class_id: int, day: WeekDay, start_time: str, end_time: str, capacity: int) -> int:
        raise NotImplementedError

    def update(self, *, session_id: int, day: WeekDay, start_time: str, end_time: str, capacity: int) -> bool:
        raise NotImplementedError

    def delete(self, session_id: int) -> bool:
        raise NotImplementedError

    def count_students(self, session_id: int) -> int:
        """Active (not soft-deleted) students enrolled in the session."""

        raise NotImplementedError

    def enrollment_counts(self, session_ids: Sequence[int]) -> Dict[int, int]:
        raise NotImplementedError

    def list_student_ids(self, session_id: int) -> Sequence[int]:
        raise NotImplementedError

    def is_enrolled(self, *, session_id: int, student_id: int) -> bool:
        raise NotImplementedError

    def add_student(self, *, session_id: int, student_id: int) -> None:
        raise NotImplementedError

    def remove_student(self, *, session_id: int, student_id: int) -> bool:
        raise NotImplementedError

    def list_for_student(self, student_id: int) -> Sequence[Session]:
        raise NotImplementedError
