from __future__ import annotations

from typing import Mapping, Optional

from .enums import ErrorKind


class DomainError(Exception):
    """Base exception for business rule violations."""

    kind: ErrorKind = ErrorKind.VALIDATION_FAILED

    def __init__(self, message: str, *, kind: Optional[ErrorKind] = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class FieldValidationError(ValidationError):
    """Form input errors, collected per field rather than first-fail."""

    def __init__(self, fields: Mapping[str, str], message: str = "Validation failed"):
        super().__init__(message)
        self.fields = dict(fields)


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    kind = ErrorKind.UNAUTHENTICATED


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    kind = ErrorKind.FORBIDDEN


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND


class StudentNotFound(NotFoundError):
    def __init__(self, message: str = "Student not found"):
        super().__init__(message)


class SessionNotFound(NotFoundError):
    def __init__(self, message: str = "Session not found"):
        super().__init__(message)


class RequestNotFound(NotFoundError):
    def __init__(self, message: str = "Reassignment request not found"):
        super().__init__(message)


class ConflictError(DomainError):
    """State conflicts in management operations (overlaps, non-empty deletes)."""

    kind = ErrorKind.CONFLICT


# Attendance marking

class IdentityMismatch(DomainError):
    kind = ErrorKind.IDENTITY_MISMATCH


class WrongDay(DomainError):
    kind = ErrorKind.WRONG_DAY


class OutsideWindow(DomainError):
    kind = ErrorKind.OUTSIDE_WINDOW


class NotEnrolled(DomainError):
    kind = ErrorKind.NOT_ENROLLED


# Reassignment

class PendingRequestExists(DomainError):
    kind = ErrorKind.PENDING_REQUEST_EXISTS


class MaxRequestsReached(DomainError):
    kind = ErrorKind.MAX_REQUESTS_REACHED


class SameDayOnly(DomainError):
    kind = ErrorKind.SAME_DAY_ONLY


class SameClassOnly(DomainError):
    kind = ErrorKind.SAME_CLASS_ONLY


class NotAssignedToSource(DomainError):
    kind = ErrorKind.NOT_ASSIGNED_TO_SOURCE


class SessionFull(DomainError):
    kind = ErrorKind.SESSION_FULL


class AlreadyProcessed(DomainError):
    kind = ErrorKind.ALREADY_PROCESSED


class StorageError(DomainError):
    """Wraps a database driver failure with a stable, friendly message."""

    kind = ErrorKind.STORAGE_ERROR

    def __init__(self, message: str, *, errno: Optional[int] = None):
        super().__init__(message)
        self.errno = errno
