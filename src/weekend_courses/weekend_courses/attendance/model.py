from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, WeekDay


@dataclass(frozen=True)
class AttendanceRecord:
    """One row per (student, session, calendar day)."""

    attendance_id: int
    student_id: int
    session_id: int
    attend_date: date
    status: AttendanceStatus
    scan_time: Optional[datetime] = None
    teacher_id: Optional[int] = None


@dataclass(frozen=True)
class AttendanceExportRow:
    """Read-model for reports and file export."""

    attend_date: date
    status: AttendanceStatus
    scan_time: Optional[datetime]
    student_id: int
    student_number: str
    student_name: str
    email: str
    class_id: int
    class_name: str
    session_id: int
    session_day: WeekDay
    start_time: str
    end_time: str


@dataclass(frozen=True)
class SessionStats:
    """Counts for one session on one day.

    `attendance_rate` is PRESENT over enrolled; WRONG_SESSION scans are
    reported separately for review and do not count as attended.
    """

    session_id: int
    attend_date: date
    enrolled: int
    present: int
    absent: int
    wrong_session: int
    unmarked: int
    attendance_rate: float
