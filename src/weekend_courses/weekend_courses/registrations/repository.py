from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RegistrationStatus
from .model import NewRegistration, StudentRegistration


class RegistrationRepository(Protocol):
    def get_by_id(self, registration_id: int) -> Optional[StudentRegistration]:
        raise NotImplementedError

    def get_pending_by_email(self, email: str) -> Optional[StudentRegistration]:
        raise NotImplementedError

    def create(self, data: NewRegistration) -> int:
        raise NotImplementedError

    def list_for_course(
        self, course_id: int, *, status: Optional[RegistrationStatus] = None
    ) -> Sequence[StudentRegistration]:
        raise NotImplementedError

    def review(
        self,
        *,
        registration_id: int,
        status: RegistrationStatus,
        reviewed_by: Optional[int],
        reviewed_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        """Close a PENDING registration; False if it was already reviewed."""

        raise NotImplementedError
