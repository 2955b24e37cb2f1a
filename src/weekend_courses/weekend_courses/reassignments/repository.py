from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import ReassignmentRequest


class ReassignmentRepository(Protocol):
    def get_by_id(self, request_id: int) -> Optional[ReassignmentRequest]:
        raise NotImplementedError

    def create(
        self,
        *,
        student_id: int,
        from_session_id: int,
        to_session_id: int,
        reason: Optional[str],
        requested_at: datetime,
    ) -> int:
        raise NotImplementedError

    def count_for_student(self, student_id: int) -> int:
        """Every request the student has made, whatever its status."""

        raise NotImplementedError

    def get_pending_for_student(self, student_id: int) -> Optional[ReassignmentRequest]:
        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        teacher_id: Optional[int],
        decided_at: datetime,
    ) -> bool:
        """Move a PENDING request to `status`; False if it was no longer pending."""

        raise NotImplementedError

    def delete_pending(self, request_id: int) -> bool:
        raise NotImplementedError

    def list_for_student(self, student_id: int) -> Sequence[ReassignmentRequest]:
        raise NotImplementedError

    def list_for_course(
        self, course_id: int, *, status: Optional[RequestStatus] = None
    ) -> Sequence[ReassignmentRequest]:
        raise NotImplementedError
