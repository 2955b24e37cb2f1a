from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class TeacherRole(str, Enum):
    HEAD = "HEAD"
    ADDITIONAL = "ADDITIONAL"


class CourseStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    COMPLETED = "COMPLETED"


class WeekDay(str, Enum):
    """Weekend days a session can be scheduled on."""

    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @property
    def calendar_number(self) -> int:
        # Sunday-zero numbering (Sunday=0 ... Saturday=6)
        return 6 if self is WeekDay.SATURDAY else 0


class AttendanceStatus(str, Enum):
    """Attendance status stored in the database."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    WRONG_SESSION = "WRONG_SESSION"


class RequestStatus(str, Enum):
    """Reassignment request workflow state."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DENIED = "DENIED"


class RegistrationStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ErrorKind(str, Enum):
    """Machine-checkable error kinds returned to callers."""

    NOT_FOUND = "NOT_FOUND"
    IDENTITY_MISMATCH = "IDENTITY_MISMATCH"
    WRONG_DAY = "WRONG_DAY"
    OUTSIDE_WINDOW = "OUTSIDE_WINDOW"
    NOT_ENROLLED = "NOT_ENROLLED"
    PENDING_REQUEST_EXISTS = "PENDING_REQUEST_EXISTS"
    MAX_REQUESTS_REACHED = "MAX_REQUESTS_REACHED"
    SAME_DAY_ONLY = "SAME_DAY_ONLY"
    SAME_CLASS_ONLY = "SAME_CLASS_ONLY"
    NOT_ASSIGNED_TO_SOURCE = "NOT_ASSIGNED_TO_SOURCE"
    SESSION_FULL = "SESSION_FULL"
    ALREADY_PROCESSED = "ALREADY_PROCESSED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    STORAGE_ERROR = "STORAGE_ERROR"
    CONFLICT = "CONFLICT"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
