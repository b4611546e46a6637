from __future__ import annotations

import re
from datetime import date, time
from typing import Optional

from ..core.exceptions import ValidationError
from .datetime_utils import parse_hhmm, parse_iso_date

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_RE = re.compile(r"^\+?[\d\s\-()]{10,}$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_SUBJECT_CODE_RE = re.compile(r"^[A-Z0-9]+$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_int(value, field_name: str) -> int:
    # bool is an int subclass; floats pass only when integral.
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError(f"{field_name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer") from None


def require_int_range(value, field_name: str, low: int, high: int) -> int:
    number = require_int(value, field_name)
    if not low <= number <= high:
        raise ValidationError(f"{field_name} must be between {low} and {high}")
    return number


def normalize_email(value: Optional[str], field_name: str = "Email") -> Optional[str]:
    if value is None or not str(value).strip():
        return None
    email = str(value).strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError(f"Invalid {field_name.lower()} format")
    return email


def normalize_phone(value: Optional[str], field_name: str = "Phone") -> Optional[str]:
    if value is None or not str(value).strip():
        return None
    phone = str(value).strip()
    if not _PHONE_RE.match(phone):
        raise ValidationError(f"Invalid {field_name.lower()} format")
    return phone


def require_iso_date(value, field_name: str = "Date") -> date:
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise ValidationError(f"Invalid {field_name.lower()} format. Use YYYY-MM-DD")
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"Invalid {field_name.lower()}") from None


def require_hhmm(value, field_name: str) -> time:
    if isinstance(value, time):
        return value
    try:
        return parse_hhmm(str(value))
    except ValueError:
        raise ValidationError(f"{field_name} must use HH:MM format") from None


def normalize_subject_code(value: str) -> str:
    code = require_non_empty(value, "Subject code").upper()
    if not _SUBJECT_CODE_RE.match(code):
        raise ValidationError("Subject code must contain only letters and digits")
    return code


def require_id_list(values, field_name: str) -> list[int]:
    if values is None:
        return []
    if not isinstance(values, (list, tuple)):
        raise ValidationError(f"{field_name} must be a list")
    return [require_int(v, field_name) for v in values]
