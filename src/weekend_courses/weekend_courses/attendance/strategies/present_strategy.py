from __future__ import annotations

from ...core.enums import AttendanceStatus
from ...sessions.model import Session
from ...students.model import Student
from .base import AttendanceStrategy, StatusDecision


class PresentStrategy(AttendanceStrategy):
    """Scanned in one of the student's own sessions."""

    def decide(self, *, student: Student, session: Session) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT, note="Attendance marked successfully")
