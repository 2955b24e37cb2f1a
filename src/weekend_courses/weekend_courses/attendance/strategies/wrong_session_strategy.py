from __future__ import annotations

from ...core.enums import AttendanceStatus
from ...sessions.model import Session
from ...students.model import Student
from .base import AttendanceStrategy, StatusDecision


class WrongSessionStrategy(AttendanceStrategy):
    """Scanned in a session of the student's class they are not assigned to."""

    def decide(self, *, student: Student, session: Session) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.WRONG_SESSION, note="Student scanned in wrong session")
