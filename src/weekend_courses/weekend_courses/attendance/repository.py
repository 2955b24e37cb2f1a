from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence, Set

from ..core.enums import AttendanceStatus
from .model import AttendanceExportRow, AttendanceRecord


class AttendanceRepository(Protocol):
    def get_for_student_session_date(
        self, *, student_id: int, session_id: int, attend_date: date
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert(
        self,
        *,
        student_id: int,
        session_id: int,
        attend_date: date,
        status: AttendanceStatus,
        scan_time: Optional[datetime],
        teacher_id: Optional[int],
    ) -> int:
        """Insert, or update the existing row for the same student/session/day. Returns its id."""

        raise NotImplementedError

    def list_student_ids_for_session_date(self, *, session_id: int, attend_date: date) -> Set[int]:
        raise NotImplementedError

    def bulk_create_absent(
        self,
        *,
        session_id: int,
        attend_date: date,
        student_ids: Sequence[int],
        teacher_id: Optional[int] = None,
    ) -> int:
        """Insert ABSENT rows; rows that already exist are left untouched."""

        raise NotImplementedError

    def list_for_session_date(self, *, session_id: int, attend_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_student(self, student_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_export_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        course_id: Optional[int] = None,
        class_id: Optional[int] = None,
        session_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[AttendanceExportRow]:
        raise NotImplementedError
