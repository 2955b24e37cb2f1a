"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from __future__ import annotations

from dataclasses import dataclass

# Session scheduling
MIN_SESSION_DURATION_MINUTES = 30
MAX_SESSION_DURATION_MINUTES = 240
EARLIEST_SESSION_START = "08:00"
LATEST_SESSION_END = "18:00"

# Scan window buffers around a session
DEFAULT_EARLY_ENTRY_MINUTES = 15
DEFAULT_LATE_ENTRY_MINUTES = 30

# Class capacity
MIN_CLASS_CAPACITY = 5
MAX_CLASS_CAPACITY = 100
DEFAULT_CLASS_CAPACITY = 25

# Reassignment
DEFAULT_MAX_REASSIGNMENT_REQUESTS = 3

# Student import
IMPORT_BATCH_SIZE = 50
IMPORT_MAX_ROWS = 1000

# Transactions
DEFAULT_LOCK_WAIT_TIMEOUT_SECONDS = 10

# Form validation
COURSE_NAME_MIN_LENGTH = 3
COURSE_NAME_MAX_LENGTH = 100
CLASS_NAME_MIN_LENGTH = 2
CLASS_NAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 8

DEFAULT_HISTORY_LIMIT = 30
DEFAULT_REPORT_DAYS = 7


@dataclass(frozen=True)
class AttendanceRules:
    """Tunable business rules, read from the settings module at startup."""

    early_entry_minutes: int = DEFAULT_EARLY_ENTRY_MINUTES
    late_entry_minutes: int = DEFAULT_LATE_ENTRY_MINUTES
    max_reassignment_requests: int = DEFAULT_MAX_REASSIGNMENT_REQUESTS

    @classmethod
    def from_settings(cls, settings) -> "AttendanceRules":
        return cls(
            early_entry_minutes=int(getattr(settings, "EARLY_ENTRY_MINUTES", DEFAULT_EARLY_ENTRY_MINUTES)),
            late_entry_minutes=int(getattr(settings, "LATE_ENTRY_MINUTES", DEFAULT_LATE_ENTRY_MINUTES)),
            max_reassignment_requests=int(
                getattr(settings, "MAX_REASSIGNMENT_REQUESTS", DEFAULT_MAX_REASSIGNMENT_REQUESTS)
            ),
        )
