from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

from .enums import ErrorKind
from .exceptions import DomainError, FieldValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Tagged result handed to callers instead of raw exceptions."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    kind: Optional[ErrorKind] = None
    fields: Optional[Dict[str, str]] = None

    @classmethod
    def ok(cls, data: T) -> "OperationResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, exc: DomainError) -> "OperationResult[T]":
        fields = exc.fields if isinstance(exc, FieldValidationError) else None
        return cls(success=False, error=exc.message, kind=exc.kind, fields=fields)

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data}
        out: Dict[str, Any] = {"success": False, "error": self.error, "code": self.kind.value if self.kind else None}
        if self.fields:
            out["fields"] = self.fields
        return out


def run_operation(fn: Callable[..., T], *args: Any, **kwargs: Any) -> OperationResult[T]:
    """Call a service operation and fold domain failures into a result."""
    try:
        return OperationResult.ok(fn(*args, **kwargs))
    except DomainError as exc:
        logger.info("%s rejected: %s (%s)", getattr(fn, "__name__", "operation"), exc.message, exc.kind.value)
        return OperationResult.fail(exc)
