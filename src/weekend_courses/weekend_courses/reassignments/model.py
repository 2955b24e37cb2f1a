from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ..core.enums import RequestStatus
from ..sessions.model import Session, SessionLoad


@dataclass(frozen=True)
class ReassignmentRequest:
    """A student's request to move one weekend membership to another session."""

    request_id: int
    student_id: int
    from_session_id: int
    to_session_id: int
    status: RequestStatus
    reason: Optional[str] = None
    requested_at: Optional[datetime] = None
    teacher_id: Optional[int] = None
    decided_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING


@dataclass(frozen=True)
class ReassignmentOption:
    """Sessions a student could move to from one of their current sessions."""

    current: Session
    alternatives: List[SessionLoad] = field(default_factory=list)
