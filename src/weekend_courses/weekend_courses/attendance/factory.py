from __future__ import annotations

from dataclasses import dataclass
from typing import Collection

from ..core.exceptions import NotEnrolled
from ..sessions.model import Session
from ..students.model import Student
from .strategies.base import AttendanceStrategy
from .strategies.present_strategy import PresentStrategy
from .strategies.wrong_session_strategy import WrongSessionStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on enrollment."""

    def for_scan(
        self, *, student: Student, session: Session, assigned_session_ids: Collection[int]
    ) -> AttendanceStrategy:
        if session.session_id in assigned_session_ids:
            return PresentStrategy()
        if session.class_id == student.class_id:
            return WrongSessionStrategy()
        raise NotEnrolled("Student is not enrolled in this class")
