from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Student:
    student_id: int
    uuid: str
    student_number: str
    surname: str
    first_name: str
    last_name: Optional[str]
    email: str
    phone_number: Optional[str]
    class_id: int
    is_deleted: bool = False
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name, self.surname) if p)


@dataclass(frozen=True)
class NewStudent:
    """Validated input for one student row."""

    student_number: str
    surname: str
    first_name: str
    last_name: Optional[str]
    email: str
    phone_number: Optional[str] = None


@dataclass(frozen=True)
class ImportResult:
    imported: int
    failed: int
    errors: List[str] = field(default_factory=list)
    student_ids: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class AutoAssignResult:
    """Outcome of spreading a class's unassigned students over its sessions."""

    assigned: int
    failed: int
    errors: List[str] = field(default_factory=list)
    # student_id -> {"SATURDAY": session_id, "SUNDAY": session_id}
    assignments: Dict[int, Dict[str, int]] = field(default_factory=dict)
    unassigned: List[int] = field(default_factory=list)
