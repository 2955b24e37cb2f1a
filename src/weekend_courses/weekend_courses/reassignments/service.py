from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from ..classes.repository import ClassRepository
from ..common.datetime_utils import now_local
from ..core.constants import AttendanceRules
from ..core.enums import RequestStatus, Role
from ..core.exceptions import (
    AlreadyProcessed,
    MaxRequestsReached,
    NotAssignedToSource,
    NotFoundError,
    PendingRequestExists,
    RequestNotFound,
    SameClassOnly,
    SameDayOnly,
    SessionFull,
    SessionNotFound,
    StudentNotFound,
    ValidationError,
)
from ..database.connection import TransactionManager
from ..sessions.model import Session, SessionLoad
from ..sessions.repository import SessionRepository
from ..students.model import Student
from ..students.repository import StudentRepository
from ..users.access import CourseAccess
from .model import ReassignmentOption, ReassignmentRequest
from .repository import ReassignmentRepository

logger = logging.getLogger(__name__)

REASON_MAX_LENGTH = 500


class ReassignmentService:
    """Students ask to move one weekend session; teachers approve or deny."""

    def __init__(
        self,
        requests: ReassignmentRepository,
        students: StudentRepository,
        sessions: SessionRepository,
        classes: ClassRepository,
        *,
        rules: AttendanceRules,
        tx: TransactionManager,
        access: CourseAccess,
    ):
        self._requests = requests
        self._students = students
        self._sessions = sessions
        self._classes = classes
        self._rules = rules
        self._tx = tx
        self._access = access

    def _get_student(self, student_id: int) -> Student:
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise StudentNotFound()
        return student

    def _get_session(self, session_id: int) -> Session:
        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise SessionNotFound()
        return session

    def _course_id_for_session(self, session: Session) -> int:
        klass = self._classes.get_by_id(session.class_id)
        if not klass:
            raise NotFoundError("Class not found")
        return klass.course_id

    def request_reassignment(
        self,
        *,
        student_id: int,
        from_session_id: int,
        to_session_id: int,
        reason: Optional[str] = None,
        now: datetime | None = None,
    ) -> ReassignmentRequest:
        """Open a PENDING request. Checks run in a fixed order and stop at the first failure."""
        reason = (reason or "").strip() or None
        if reason and len(reason) > REASON_MAX_LENGTH:
            raise ValidationError(f"Reason must not exceed {REASON_MAX_LENGTH} characters")

        with self._tx.transaction():
            student = self._get_student(student_id)
            source = self._get_session(from_session_id)
            target = self._get_session(to_session_id)

            if self._requests.get_pending_for_student(student.student_id):
                raise PendingRequestExists("You already have a pending reassignment request")
            limit = self._rules.max_reassignment_requests
            if self._requests.count_for_student(student.student_id) >= limit:
                raise MaxRequestsReached(f"You have reached the maximum of {limit} reassignment requests")
            if source.day != target.day:
                raise SameDayOnly("You can only move to another session on the same day")
            if source.class_id != target.class_id or source.class_id != student.class_id:
                raise SameClassOnly("You can only move between sessions of your own class")
            if not self._sessions.is_enrolled(session_id=source.session_id, student_id=student.student_id):
                raise NotAssignedToSource("You are not assigned to the session you want to leave")
            if source.session_id == target.session_id:
                raise ValidationError("Choose a different session")
            if self._sessions.count_students(target.session_id) >= target.capacity:
                raise SessionFull(f"{target.label} is at full capacity")

            request_id = self._requests.create(
                student_id=student.student_id,
                from_session_id=source.session_id,
                to_session_id=target.session_id,
                reason=reason,
                requested_at=now or now_local(),
            )

        logger.info(
            "Reassignment request %s: student %s %s -> %s",
            request_id,
            student.student_id,
            source.session_id,
            target.session_id,
        )
        return self._requests.get_by_id(request_id)

    def process_request(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        request_id: int,
        decision: RequestStatus,
        now: datetime | None = None,
    ) -> ReassignmentRequest:
        """Approve or deny a PENDING request.

        Approval swaps the one membership from the source to the target
        session in the same transaction that closes the request.
        """
        try:
            decision = RequestStatus(decision)
        except ValueError:
            raise ValidationError("Decision must be APPROVED or DENIED")
        if decision == RequestStatus.PENDING:
            raise ValidationError("Decision must be APPROVED or DENIED")

        with self._tx.transaction():
            req = self._requests.get_by_id(int(request_id))
            if not req:
                raise RequestNotFound()

            source = self._get_session(req.from_session_id)
            self._access.require_staff(
                current_role=current_role,
                current_user_id=current_user_id,
                course_id=self._course_id_for_session(source),
            )
            if not req.is_pending:
                raise AlreadyProcessed("This request has already been processed")

            if decision == RequestStatus.APPROVED:
                target = self._get_session(req.to_session_id)
                if not self._sessions.is_enrolled(session_id=source.session_id, student_id=req.student_id):
                    raise NotAssignedToSource("The student is no longer assigned to the original session")
                if self._sessions.count_students(target.session_id) >= target.capacity:
                    raise SessionFull(f"{target.label} is at full capacity")
                self._sessions.remove_student(session_id=source.session_id, student_id=req.student_id)
                self._sessions.add_student(session_id=target.session_id, student_id=req.student_id)

            teacher_id = int(current_user_id) if current_role == Role.TEACHER else None
            if not self._requests.decide(
                request_id=req.request_id, status=decision, teacher_id=teacher_id, decided_at=now or now_local()
            ):
                raise AlreadyProcessed("This request has already been processed")

        logger.info("Reassignment request %s %s by %s %s", req.request_id, decision.value, current_role.value, current_user_id)
        return self._requests.get_by_id(req.request_id)

    def cancel_request(self, *, student_id: int, request_id: int) -> None:
        """Withdraw the student's own PENDING request."""
        req = self._requests.get_by_id(int(request_id))
        if not req or req.student_id != int(student_id):
            raise RequestNotFound()
        if not req.is_pending:
            raise AlreadyProcessed("Only pending requests can be cancelled")
        if not self._requests.delete_pending(req.request_id):
            raise AlreadyProcessed("Only pending requests can be cancelled")
        logger.info("Reassignment request %s cancelled by student %s", req.request_id, req.student_id)

    def list_for_student(self, student_id: int) -> Sequence[ReassignmentRequest]:
        student = self._get_student(student_id)
        return self._requests.list_for_student(student.student_id)

    def list_for_course(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        course_id: int,
        status: Optional[RequestStatus] = None,
    ) -> Sequence[ReassignmentRequest]:
        self._access.require_staff(current_role=current_role, current_user_id=current_user_id, course_id=course_id)
        return self._requests.list_for_course(int(course_id), status=status)

    def reassignment_options(self, student_id: int) -> List[ReassignmentOption]:
        """For each current session, the same-day sessions of the class with room left."""
        student = self._get_student(student_id)
        current = list(self._sessions.list_for_student(student.student_id))
        siblings = list(self._sessions.list_for_class(student.class_id))
        counts = self._sessions.enrollment_counts([s.session_id for s in siblings])
        current_ids = {s.session_id for s in current}

        options: List[ReassignmentOption] = []
        for session in current:
            alternatives = [
                SessionLoad(session=s, enrolled=counts.get(s.session_id, 0))
                for s in siblings
                if s.day == session.day and s.session_id not in current_ids
            ]
            options.append(
                ReassignmentOption(current=session, alternatives=[a for a in alternatives if not a.is_full])
            )
        return options
