from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ..core.enums import RegistrationStatus


@dataclass(frozen=True)
class StudentRegistration:
    """Self-service sign-up waiting for a teacher's review."""

    registration_id: int
    surname: str
    first_name: str
    last_name: Optional[str]
    email: str
    phone_number: str
    course_id: int
    class_id: int
    saturday_session_id: int
    sunday_session_id: int
    status: RegistrationStatus
    rejection_reason: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name, self.surname) if p)


@dataclass(frozen=True)
class NewRegistration:
    surname: str
    first_name: str
    last_name: Optional[str]
    email: str
    phone_number: str
    course_id: int
    class_id: int
    saturday_session_id: int
    sunday_session_id: int


@dataclass(frozen=True)
class BulkApproveResult:
    approved: List[int] = field(default_factory=list)
    failed: int = 0
    errors: List[str] = field(default_factory=list)
