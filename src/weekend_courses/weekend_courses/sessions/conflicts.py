"""Session time rules and overlap detection within a class and day."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from ..common.datetime_utils import parse_time_to_minutes
from ..core.constants import (
    EARLIEST_SESSION_START,
    LATEST_SESSION_END,
    MAX_SESSION_DURATION_MINUTES,
    MIN_SESSION_DURATION_MINUTES,
)
from ..core.enums import WeekDay
from .model import Session


@dataclass(frozen=True)
class SessionTimeValidation:
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    conflicts: List[Session] = field(default_factory=list)


def ranges_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Half-open ranges: touching at a boundary is not an overlap."""
    return start1 < end2 and start2 < end1


def validate_session_time(
    *,
    existing: Iterable[Session],
    day: WeekDay,
    start_time: str,
    end_time: str,
    exclude_session_id: Optional[int] = None,
) -> SessionTimeValidation:
    """Check a proposed slot against the time policy and the class's other sessions.

    `existing` is every session of the class; sessions on the other day and
    `exclude_session_id` (the one being edited) are ignored. All problems are
    collected; nothing is raised for a conflict.
    """
    try:
        start = parse_time_to_minutes(start_time)
        end = parse_time_to_minutes(end_time)
    except ValueError:
        return SessionTimeValidation(is_valid=False, errors=["Times must use the HH:MM format"])

    errors: List[str] = []
    if end <= start:
        errors.append("End time must be after start time")
    else:
        duration = end - start
        if duration < MIN_SESSION_DURATION_MINUTES:
            errors.append(f"Session must be at least {MIN_SESSION_DURATION_MINUTES} minutes long")
        if duration > MAX_SESSION_DURATION_MINUTES:
            errors.append(f"Session cannot be longer than {MAX_SESSION_DURATION_MINUTES} minutes")

    if start < parse_time_to_minutes(EARLIEST_SESSION_START):
        errors.append(f"Session cannot start before {EARLIEST_SESSION_START}")
    if end > parse_time_to_minutes(LATEST_SESSION_END):
        errors.append(f"Session cannot end after {LATEST_SESSION_END}")

    conflicts = [
        s
        for s in existing
        if s.day == WeekDay(day)
        and s.session_id != exclude_session_id
        and ranges_overlap(start, end, parse_time_to_minutes(s.start_time), parse_time_to_minutes(s.end_time))
    ]
    for s in conflicts:
        errors.append(f"Overlaps with existing session {s.start_time}-{s.end_time}")

    return SessionTimeValidation(is_valid=not errors, errors=errors, conflicts=conflicts)
