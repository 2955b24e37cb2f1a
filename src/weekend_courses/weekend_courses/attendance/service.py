from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..classes.model import CourseClass
from ..classes.repository import ClassRepository
from ..common.datetime_utils import is_scheduled_day, is_within_window, now_local
from ..core.constants import DEFAULT_HISTORY_LIMIT, AttendanceRules
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import (
    IdentityMismatch,
    NotEnrolled,
    NotFoundError,
    OutsideWindow,
    SessionNotFound,
    StudentNotFound,
    ValidationError,
    WrongDay,
)
from ..database.connection import TransactionManager
from ..sessions.model import Session
from ..sessions.repository import SessionRepository
from ..students.model import Student
from ..students.repository import StudentRepository
from ..users.access import CourseAccess
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, SessionStats
from .repository import AttendanceRepository
from .scan import ScanPayload

logger = logging.getLogger(__name__)

UPDATED_PREFIX = "Updated attendance: "


@dataclass(frozen=True)
class ScanOutcome:
    record: AttendanceRecord
    status: AttendanceStatus
    message: str
    student: Student


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        sessions: SessionRepository,
        classes: ClassRepository,
        *,
        rules: AttendanceRules,
        tx: TransactionManager,
        access: CourseAccess,
        strategy_factory: AttendanceStrategyFactory | None = None,
    ):
        self._attendance = attendance
        self._students = students
        self._sessions = sessions
        self._classes = classes
        self._rules = rules
        self._tx = tx
        self._access = access
        self._factory = strategy_factory or AttendanceStrategyFactory()

    def _get_session(self, session_id: int) -> Session:
        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise SessionNotFound()
        return session

    def _get_class(self, class_id: int) -> CourseClass:
        klass = self._classes.get_by_id(int(class_id))
        if not klass:
            raise NotFoundError("Class not found")
        return klass

    def _require_staff_for_session(self, *, current_role: Role, current_user_id: Optional[int], session: Session) -> None:
        klass = self._get_class(session.class_id)
        self._access.require_staff(
            current_role=current_role, current_user_id=int(current_user_id or 0), course_id=klass.course_id
        )

    @staticmethod
    def _marker_id(current_role: Role, current_user_id: Optional[int]) -> Optional[int]:
        # Admin marks are stored without a teacher.
        return int(current_user_id) if current_role == Role.TEACHER and current_user_id is not None else None

    def mark_from_scan(
        self,
        payload: ScanPayload | str | bytes | Dict[str, Any],
        session_id: int,
        teacher_id: Optional[int],
        *,
        current_role: Role = Role.TEACHER,
        now: datetime | None = None,
    ) -> ScanOutcome:
        """Record a QR scan for `session_id`.

        Scanning again the same day overwrites the earlier row; the returned
        message then starts with "Updated attendance: ".
        """
        now = now or now_local()
        today = now.date()
        if not isinstance(payload, ScanPayload):
            payload = ScanPayload.parse(payload)

        with self._tx.transaction():
            student = self._students.get_by_uuid(payload.uuid)
            if not student:
                raise StudentNotFound()
            if student.student_number.upper() != payload.student_id.upper():
                raise IdentityMismatch("QR code does not match the student record")

            session = self._get_session(session_id)
            self._require_staff_for_session(current_role=current_role, current_user_id=teacher_id, session=session)

            if not is_scheduled_day(now, session.day):
                raise WrongDay(f"This session runs on {session.day.value.title()}, not today")
            if not is_within_window(
                now,
                session.day,
                session.start_time,
                session.end_time,
                self._rules.early_entry_minutes,
                self._rules.late_entry_minutes,
            ):
                raise OutsideWindow("QR scanning is only allowed during session hours")

            assigned = {s.session_id for s in self._sessions.list_for_student(student.student_id)}
            strategy = self._factory.for_scan(student=student, session=session, assigned_session_ids=assigned)
            decision = strategy.decide(student=student, session=session)

            existing = self._attendance.get_for_student_session_date(
                student_id=student.student_id, session_id=session.session_id, attend_date=today
            )
            marker = self._marker_id(current_role, teacher_id)
            attendance_id = self._attendance.upsert(
                student_id=student.student_id,
                session_id=session.session_id,
                attend_date=today,
                status=decision.status,
                scan_time=now,
                teacher_id=marker,
            )

        message = decision.note or decision.status.value
        if existing:
            message = UPDATED_PREFIX + message

        logger.info(
            "Scan: student %s session %s on %s -> %s%s",
            student.student_id,
            session.session_id,
            today,
            decision.status.value,
            " (updated)" if existing else "",
        )
        record = AttendanceRecord(
            attendance_id=attendance_id,
            student_id=student.student_id,
            session_id=session.session_id,
            attend_date=today,
            status=decision.status,
            scan_time=now,
            teacher_id=marker,
        )
        return ScanOutcome(record=record, status=decision.status, message=message, student=student)

    def mark_manual(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        student_id: int,
        session_id: int,
        status: AttendanceStatus,
        attend_date: date | None = None,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        """Teacher override: set a status directly, no scan window applies."""
        now = now or now_local()
        attend_date = attend_date or now.date()
        try:
            status = AttendanceStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown attendance status: {status}")

        with self._tx.transaction():
            student = self._students.get_by_id(int(student_id))
            if not student:
                raise StudentNotFound()
            session = self._get_session(session_id)
            self._require_staff_for_session(
                current_role=current_role, current_user_id=current_user_id, session=session
            )
            if session.class_id != student.class_id:
                raise NotEnrolled("Student is not enrolled in this class")
            if not is_scheduled_day(attend_date, session.day):
                raise WrongDay(f"This session runs on {session.day.value.title()}")

            marker = self._marker_id(current_role, current_user_id)
            attendance_id = self._attendance.upsert(
                student_id=student.student_id,
                session_id=session.session_id,
                attend_date=attend_date,
                status=status,
                scan_time=now,
                teacher_id=marker,
            )

        logger.info(
            "Manual mark: student %s session %s on %s -> %s", student.student_id, session.session_id, attend_date, status.value
        )
        return AttendanceRecord(
            attendance_id=attendance_id,
            student_id=student.student_id,
            session_id=session.session_id,
            attend_date=attend_date,
            status=status,
            scan_time=now,
            teacher_id=marker,
        )

    # -------- Absence sweep --------
    def _sweep(self, *, session: Session, attend_date: date, teacher_id: Optional[int]) -> int:
        enrolled = set(self._sessions.list_student_ids(session.session_id))
        marked = self._attendance.list_student_ids_for_session_date(
            session_id=session.session_id, attend_date=attend_date
        )
        missing = sorted(enrolled - marked)
        if not missing:
            return 0
        return self._attendance.bulk_create_absent(
            session_id=session.session_id, attend_date=attend_date, student_ids=missing, teacher_id=teacher_id
        )

    def sweep_absences(
        self,
        session_id: int,
        attend_date: date,
        *,
        current_role: Role,
        current_user_id: Optional[int],
    ) -> int:
        """Mark every enrolled student without a row for the day ABSENT.

        Existing rows are never touched, so running it twice adds nothing.
        """
        session = self._get_session(session_id)
        self._require_staff_for_session(current_role=current_role, current_user_id=current_user_id, session=session)
        if not is_scheduled_day(attend_date, session.day):
            raise WrongDay(f"This session runs on {session.day.value.title()}")

        with self._tx.transaction():
            created = self._sweep(
                session=session, attend_date=attend_date, teacher_id=self._marker_id(current_role, current_user_id)
            )

        logger.info("Absence sweep: session %s on %s, %s marked absent", session.session_id, attend_date, created)
        return created

    def sweep_class_absences(
        self,
        class_id: int,
        attend_date: date,
        *,
        current_role: Role,
        current_user_id: Optional[int],
    ) -> Dict[int, int]:
        """Sweep every session of the class scheduled on `attend_date`'s weekday."""
        klass = self._get_class(class_id)
        self._access.require_staff(
            current_role=current_role, current_user_id=int(current_user_id or 0), course_id=klass.course_id
        )
        marker = self._marker_id(current_role, current_user_id)

        swept: Dict[int, int] = {}
        with self._tx.transaction():
            for session in self._sessions.list_for_class(klass.class_id):
                if is_scheduled_day(attend_date, session.day):
                    swept[session.session_id] = self._sweep(session=session, attend_date=attend_date, teacher_id=marker)

        logger.info("Absence sweep: class %s on %s, %s marked absent", klass.class_id, attend_date, sum(swept.values()))
        return swept

    # -------- Read side --------
    def list_for_session(
        self, *, current_role: Role, current_user_id: int, session_id: int, attend_date: date
    ) -> Sequence[AttendanceRecord]:
        session = self._get_session(session_id)
        self._require_staff_for_session(current_role=current_role, current_user_id=current_user_id, session=session)
        return self._attendance.list_for_session_date(session_id=session.session_id, attend_date=attend_date)

    def session_stats(
        self, *, current_role: Role, current_user_id: int, session_id: int, attend_date: date
    ) -> SessionStats:
        session = self._get_session(session_id)
        self._require_staff_for_session(current_role=current_role, current_user_id=current_user_id, session=session)

        enrolled_ids = set(self._sessions.list_student_ids(session.session_id))
        records = self._attendance.list_for_session_date(session_id=session.session_id, attend_date=attend_date)
        counts = {status: 0 for status in AttendanceStatus}
        for r in records:
            counts[r.status] += 1
        marked = {r.student_id for r in records}

        enrolled = len(enrolled_ids)
        present = counts[AttendanceStatus.PRESENT]
        return SessionStats(
            session_id=session.session_id,
            attend_date=attend_date,
            enrolled=enrolled,
            present=present,
            absent=counts[AttendanceStatus.ABSENT],
            wrong_session=counts[AttendanceStatus.WRONG_SESSION],
            unmarked=len(enrolled_ids - marked),
            attendance_rate=round(present * 100.0 / enrolled, 1) if enrolled else 0.0,
        )

    def history_for_student(self, student_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceRecord]:
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise StudentNotFound()
        return self._attendance.list_for_student(student.student_id, int(limit))
