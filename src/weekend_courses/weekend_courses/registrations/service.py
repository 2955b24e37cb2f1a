from __future__ import annotations

import logging
import re
import uuid as uuidlib
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..classes.model import CourseClass
from ..classes.repository import ClassRepository
from ..common.datetime_utils import now_local
from ..common.validators import check_email, check_name, check_phone, raise_for_fields
from ..core.enums import RegistrationStatus, Role, WeekDay
from ..core.exceptions import (
    AlreadyProcessed,
    ConflictError,
    DomainError,
    FieldValidationError,
    NotFoundError,
    SessionFull,
    ValidationError,
)
from ..courses.model import Course
from ..courses.repository import CourseRepository
from ..database.connection import TransactionManager
from ..notifications.notifier import Notifier
from ..sessions.model import Session, SessionLoad
from ..sessions.repository import SessionRepository
from ..students.model import NewStudent, Student
from ..students.qr import render_qr_png
from ..students.repository import StudentRepository
from ..users.access import CourseAccess
from .model import BulkApproveResult, NewRegistration, StudentRegistration
from .repository import RegistrationRepository

logger = logging.getLogger(__name__)

STUDENT_NUMBER_PREFIX = "STU"
_SEQUENCE_RE = re.compile(rf"^{STUDENT_NUMBER_PREFIX}(\d+)$")
REJECTION_REASON_MAX_LENGTH = 500


def next_student_number(latest: Optional[str]) -> str:
    """STU00001, STU00002, ... continuing from the highest issued number."""
    number = 1
    m = _SEQUENCE_RE.match(latest or "")
    if m:
        number = int(m.group(1)) + 1
    return f"{STUDENT_NUMBER_PREFIX}{number:05d}"


class RegistrationService:
    def __init__(
        self,
        registrations: RegistrationRepository,
        students: StudentRepository,
        courses: CourseRepository,
        classes: ClassRepository,
        sessions: SessionRepository,
        *,
        tx: TransactionManager,
        access: CourseAccess,
        notifier: Notifier,
    ):
        self._registrations = registrations
        self._students = students
        self._courses = courses
        self._classes = classes
        self._sessions = sessions
        self._tx = tx
        self._access = access
        self._notifier = notifier

    def _get_course(self, course_id: int) -> Course:
        course = self._courses.get_by_id(int(course_id))
        if not course:
            raise NotFoundError("Course not found")
        return course

    def _get_class(self, class_id: int, course_id: int) -> CourseClass:
        klass = self._classes.get_by_id(int(class_id))
        if not klass or klass.course_id != int(course_id):
            raise NotFoundError("Class not found")
        return klass

    def get_registration(self, registration_id: int) -> StudentRegistration:
        reg = self._registrations.get_by_id(int(registration_id))
        if not reg:
            raise NotFoundError("Registration not found")
        return reg

    def available_sessions(self, *, course_id: int, class_id: int) -> Sequence[SessionLoad]:
        """Sessions of an active course's class, with seats left, for the sign-up form."""
        course = self._get_course(course_id)
        if not course.is_active:
            raise ConflictError("This course is not accepting registrations")
        klass = self._get_class(class_id, course.course_id)
        sessions = list(self._sessions.list_for_class(klass.class_id))
        counts = self._sessions.enrollment_counts([s.session_id for s in sessions])
        return [SessionLoad(session=s, enrolled=counts.get(s.session_id, 0)) for s in sessions]

    def _session_check(self, session_id: Any, *, class_id: int, day: WeekDay) -> tuple[Optional[Session], Optional[str]]:
        try:
            session = self._sessions.get_by_id(int(session_id))
        except (TypeError, ValueError):
            return None, "Please choose a session"
        if not session or session.class_id != class_id:
            return None, "Session not found in this class"
        if session.day != day:
            return None, f"Session is not on {day.value.title()}"
        return session, None

    def _ensure_room(self, session: Session) -> None:
        if self._sessions.count_students(session.session_id) >= session.capacity:
            raise SessionFull(f"{session.label} is at full capacity")

    def submit_registration(self, data: Mapping[str, Any]) -> StudentRegistration:
        """Public sign-up. Field problems are reported together."""
        email = (str(data.get("email") or "")).strip().lower()
        phone = (str(data.get("phone_number") or "")).strip()
        raise_for_fields(
            {
                "surname": check_name(data.get("surname"), "Surname"),
                "first_name": check_name(data.get("first_name"), "First name"),
                "last_name": check_name(data.get("last_name"), "Last name", required=False),
                "email": check_email(email),
                "phone_number": check_phone(phone, required=True),
            }
        )

        try:
            course = self._get_course(int(data.get("course_id")))
            klass = self._get_class(int(data.get("class_id")), course.course_id)
        except (TypeError, ValueError):
            raise FieldValidationError({"class_id": "Please choose a course and class"})
        if not course.is_active:
            raise ConflictError("This course is not accepting registrations")

        saturday, sat_error = self._session_check(
            data.get("saturday_session_id"), class_id=klass.class_id, day=WeekDay.SATURDAY
        )
        sunday, sun_error = self._session_check(
            data.get("sunday_session_id"), class_id=klass.class_id, day=WeekDay.SUNDAY
        )
        raise_for_fields({"saturday_session_id": sat_error, "sunday_session_id": sun_error})

        if self._students.existing_emails([email]):
            raise ConflictError("A student with this email is already registered")
        if self._registrations.get_pending_by_email(email):
            raise ConflictError("A registration with this email is already awaiting review")
        self._ensure_room(saturday)
        self._ensure_room(sunday)

        registration_id = self._registrations.create(
            NewRegistration(
                surname=str(data.get("surname")).strip(),
                first_name=str(data.get("first_name")).strip(),
                last_name=(str(data.get("last_name") or "")).strip() or None,
                email=email,
                phone_number=phone.replace(" ", ""),
                course_id=course.course_id,
                class_id=klass.class_id,
                saturday_session_id=saturday.session_id,
                sunday_session_id=sunday.session_id,
            )
        )
        logger.info("Registration %s submitted for course %s", registration_id, course.course_id)
        return self.get_registration(registration_id)

    def list_for_course(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        course_id: int,
        status: Optional[RegistrationStatus] = None,
    ) -> Sequence[StudentRegistration]:
        self._access.require_staff(current_role=current_role, current_user_id=current_user_id, course_id=course_id)
        return self._registrations.list_for_course(int(course_id), status=status)

    def _reviewer(self, current_role: Role, current_user_id: int) -> Optional[int]:
        return int(current_user_id) if current_role == Role.TEACHER else None

    def approve(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        registration_id: int,
        now: datetime | None = None,
    ) -> Student:
        """Create the student with both memberships and close the registration, atomically."""
        reg = self.get_registration(registration_id)
        self._access.require_staff(current_role=current_role, current_user_id=current_user_id, course_id=reg.course_id)
        if reg.status != RegistrationStatus.PENDING:
            raise AlreadyProcessed("This registration has already been reviewed")

        klass = self._get_class(reg.class_id, reg.course_id)
        with self._tx.transaction():
            sessions = []
            for session_id in (reg.saturday_session_id, reg.sunday_session_id):
                session = self._sessions.get_by_id(session_id)
                if not session:
                    raise NotFoundError("Session not found")
                self._ensure_room(session)
                sessions.append(session)
            if self._students.count_for_class(klass.class_id) >= klass.capacity:
                raise SessionFull(f"{klass.name} is at full capacity")
            if self._students.existing_emails([reg.email]):
                raise ConflictError("A student with this email is already registered")

            student_id = self._students.create(
                uuid=str(uuidlib.uuid4()),
                class_id=klass.class_id,
                data=NewStudent(
                    student_number=next_student_number(self._students.latest_student_number(STUDENT_NUMBER_PREFIX)),
                    surname=reg.surname,
                    first_name=reg.first_name,
                    last_name=reg.last_name,
                    email=reg.email,
                    phone_number=reg.phone_number,
                ),
            )
            for session in sessions:
                self._sessions.add_student(session_id=session.session_id, student_id=student_id)
            if not self._registrations.review(
                registration_id=reg.registration_id,
                status=RegistrationStatus.APPROVED,
                reviewed_by=self._reviewer(current_role, current_user_id),
                reviewed_at=now or now_local(),
            ):
                raise AlreadyProcessed("This registration has already been reviewed")

        student = self._students.get_by_id(student_id)
        logger.info("Registration %s approved as student %s", reg.registration_id, student_id)

        course = self._get_course(reg.course_id)
        self._notifier.registration_approved(
            to=student.email,
            full_name=student.full_name,
            course_name=course.name,
            class_name=klass.name,
            sessions=[s.label for s in sessions],
            qr_png=render_qr_png(student),
        )
        return student

    def reject(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        registration_id: int,
        reason: Optional[str] = None,
        now: datetime | None = None,
    ) -> StudentRegistration:
        reg = self.get_registration(registration_id)
        self._access.require_staff(current_role=current_role, current_user_id=current_user_id, course_id=reg.course_id)
        if reg.status != RegistrationStatus.PENDING:
            raise AlreadyProcessed("This registration has already been reviewed")
        reason = (reason or "").strip() or None
        if reason and len(reason) > REJECTION_REASON_MAX_LENGTH:
            raise ValidationError(f"Reason must not exceed {REJECTION_REASON_MAX_LENGTH} characters")

        if not self._registrations.review(
            registration_id=reg.registration_id,
            status=RegistrationStatus.REJECTED,
            reviewed_by=self._reviewer(current_role, current_user_id),
            reviewed_at=now or now_local(),
            rejection_reason=reason,
        ):
            raise AlreadyProcessed("This registration has already been reviewed")

        logger.info("Registration %s rejected", reg.registration_id)
        course = self._get_course(reg.course_id)
        self._notifier.registration_rejected(to=reg.email, full_name=reg.full_name, course_name=course.name, reason=reason)
        return self.get_registration(reg.registration_id)

    def bulk_approve(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        registration_ids: Sequence[int],
    ) -> BulkApproveResult:
        """Approve each registration on its own; one failure does not stop the rest."""
        if not registration_ids:
            raise ValidationError("No registrations selected")

        approved: list[int] = []
        errors: list[str] = []
        for registration_id in registration_ids:
            try:
                student = self.approve(
                    current_role=current_role, current_user_id=current_user_id, registration_id=registration_id
                )
            except DomainError as exc:
                errors.append(f"Registration {registration_id}: {exc.message}")
                continue
            approved.append(student.student_id)

        if errors:
            logger.warning("Bulk approve: %s approved, %s failed", len(approved), len(errors))
        return BulkApproveResult(approved=approved, failed=len(errors), errors=errors)
