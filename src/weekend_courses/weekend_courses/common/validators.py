from __future__ import annotations

import re
from typing import Mapping, Optional

from ..core.constants import MAX_CLASS_CAPACITY, MIN_CLASS_CAPACITY, PASSWORD_MIN_LENGTH
from ..core.exceptions import FieldValidationError, ValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
EMAIL_MAX_LENGTH = 254
EMAIL_DOMAIN_BLOCKLIST = frozenset({"tempmail.com", "10minutemail.com", "guerrillamail.com"})

PHONE_RE = re.compile(r"^\+?[1-9]\d{0,15}$")
PHONE_MIN_LENGTH = 10
PHONE_MAX_LENGTH = 15

STUDENT_NUMBER_RE = re.compile(r"^[A-Z0-9]{3,20}$")

NAME_RE = re.compile(r"^[a-zA-Z\s\-'.]+$")
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50

TITLE_RE = re.compile(r"^[a-zA-Z0-9\s\-'.()]+$")

REQUIRED = "This field is required"


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


# Field checks below return an error message or None so that a form can
# report every offending field at once.

def check_email(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    if not value:
        return REQUIRED
    if len(value) > EMAIL_MAX_LENGTH:
        return f"Email must be less than {EMAIL_MAX_LENGTH} characters"
    if not EMAIL_RE.match(value):
        return "Please enter a valid email address"
    if value.split("@")[1].lower() in EMAIL_DOMAIN_BLOCKLIST:
        return "This email domain is not allowed"
    return None


def check_phone(value: Optional[str], *, required: bool = False) -> Optional[str]:
    cleaned = re.sub(r"\s", "", value or "")
    if not cleaned:
        return REQUIRED if required else None
    if not PHONE_RE.match(cleaned):
        return "Please enter a valid phone number"
    digits = len(cleaned.lstrip("+"))
    if not PHONE_MIN_LENGTH <= digits <= PHONE_MAX_LENGTH:
        return f"Phone number must have {PHONE_MIN_LENGTH}-{PHONE_MAX_LENGTH} digits"
    return None


def check_student_number(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    if not value:
        return REQUIRED
    if not STUDENT_NUMBER_RE.match(value):
        return "Student number must be 3-20 characters (letters and numbers only)"
    return None


def check_name(value: Optional[str], label: str = "Name", *, required: bool = True) -> Optional[str]:
    value = (value or "").strip()
    if not value:
        return REQUIRED if required else None
    if len(value) < NAME_MIN_LENGTH:
        return f"{label} must be at least {NAME_MIN_LENGTH} characters"
    if len(value) > NAME_MAX_LENGTH:
        return f"{label} must be less than {NAME_MAX_LENGTH} characters"
    if not NAME_RE.match(value):
        return f"{label} contains invalid characters"
    return None


def check_title(value: Optional[str], label: str, *, min_len: int, max_len: int) -> Optional[str]:
    """Course and class names."""
    value = (value or "").strip()
    if not value:
        return REQUIRED
    if not (min_len <= len(value) <= max_len):
        return f"{label} must be {min_len}-{max_len} characters"
    if not TITLE_RE.match(value):
        return f"{label} contains invalid characters"
    return None


def check_capacity(value, *, minimum: int = MIN_CLASS_CAPACITY, maximum: int = MAX_CLASS_CAPACITY) -> Optional[str]:
    try:
        capacity = int(value)
    except (TypeError, ValueError):
        return "Capacity must be a whole number"
    if capacity < minimum or capacity > maximum:
        return f"Capacity must be between {minimum} and {maximum}"
    return None


def raise_for_fields(checks: Mapping[str, Optional[str]]) -> None:
    """Raise FieldValidationError carrying every failed field."""
    errors = {field: message for field, message in checks.items() if message}
    if errors:
        raise FieldValidationError(errors)


def check_password(value: Optional[str]) -> Optional[str]:
    """Staff passwords: min length plus upper, lower and a digit."""
    value = value or ""
    if not value:
        return REQUIRED
    if len(value) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters"
    if not (re.search(r"[A-Z]", value) and re.search(r"[a-z]", value) and re.search(r"\d", value)):
        return "Password must contain uppercase, lowercase and a number"
    return None
