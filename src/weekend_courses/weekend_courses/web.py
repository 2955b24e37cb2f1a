"""Shared helpers for the JSON controllers."""

from __future__ import annotations

import logging
from datetime import date, datetime
from enum import Enum
from functools import wraps
from typing import Any, Callable, Optional

from flask import jsonify, request, session
from flask.json.provider import DefaultJSONProvider

from .common.datetime_utils import parse_iso_date
from .core.enums import ErrorKind, Role
from .core.exceptions import FieldValidationError
from .core.result import OperationResult, run_operation

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.CONFLICT: 409,
    ErrorKind.PENDING_REQUEST_EXISTS: 409,
    ErrorKind.MAX_REQUESTS_REACHED: 409,
    ErrorKind.SESSION_FULL: 409,
    ErrorKind.ALREADY_PROCESSED: 409,
    ErrorKind.SAME_DAY_ONLY: 422,
    ErrorKind.SAME_CLASS_ONLY: 422,
    ErrorKind.NOT_ASSIGNED_TO_SOURCE: 422,
    ErrorKind.VALIDATION_FAILED: 422,
    ErrorKind.IDENTITY_MISMATCH: 400,
    ErrorKind.WRONG_DAY: 400,
    ErrorKind.OUTSIDE_WINDOW: 400,
    ErrorKind.NOT_ENROLLED: 400,
    ErrorKind.STORAGE_ERROR: 503,
}


class AppJSONProvider(DefaultJSONProvider):
    """ISO dates instead of Flask's HTTP-date default."""

    @staticmethod
    def default(o: Any) -> Any:
        if isinstance(o, (datetime, date)):
            return o.isoformat()
        if isinstance(o, Enum):
            return o.value
        return DefaultJSONProvider.default(o)


def to_response(result: OperationResult, *, success_status: int = 200):
    if result.success:
        return jsonify(result.to_dict()), success_status
    return jsonify(result.to_dict()), STATUS_BY_KIND.get(result.kind, 400)


def respond(fn: Callable[..., Any], *args: Any, success_status: int = 200, **kwargs: Any):
    """Run a service call and render the JSON envelope."""
    try:
        result = run_operation(fn, *args, **kwargs)
    except Exception:
        logger.exception("Unexpected error in %s", getattr(fn, "__name__", "operation"))
        return jsonify({"success": False, "error": "An unexpected error occurred", "code": None}), 500
    return to_response(result, success_status=success_status)


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def int_field(data: dict, name: str, *, required: bool = True) -> Optional[int]:
    value = data.get(name)
    if value in (None, ""):
        if required:
            raise FieldValidationError({name: "This field is required"})
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise FieldValidationError({name: "Must be a whole number"})


def date_arg(value: Optional[str], name: str) -> Optional[date]:
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise FieldValidationError({name: "Use the YYYY-MM-DD format"})


def enum_arg(enum_cls, value: Optional[str], name: str):
    if value in (None, ""):
        return None
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise FieldValidationError({name: f"Must be one of: {allowed}"})


def current_role() -> Optional[Role]:
    role = session.get("role")
    return Role(role) if role else None


def current_user_id() -> int:
    return int(session["user_id"])


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "error": "Please log in to continue", "code": "UNAUTHENTICATED"}), 401
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "error": "Please log in to continue", "code": "UNAUTHENTICATED"}), 401
            if session.get("role") not in allowed:
                return jsonify({"success": False, "error": "You do not have permission", "code": "FORBIDDEN"}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


admin_required = roles_required(Role.ADMIN)
staff_required = roles_required(Role.ADMIN, Role.TEACHER)
student_required = roles_required(Role.STUDENT)
