from __future__ import annotations

import re
from datetime import date
from typing import Any, Optional

from ..core.constants import ACTOR_MAX_LENGTH, MAX_RANGE_DAYS, NOTES_MAX_LENGTH, QUOTA_MAX, QUOTA_MIN
from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_max_length(value: Optional[str], field_name: str, max_len: int) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    if len(value) > max_len:
        raise ValidationError(f"{field_name} cannot exceed {max_len} characters")
    return value


def require_iso_date(value: Any, field_name: str = "Date") -> date:
    if not isinstance(value, str) or not _ISO_DATE_RE.match(value):
        raise ValidationError(f"{field_name} must be in YYYY-MM-DD format")
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid calendar date")


def optional_iso_date(value: Any, field_name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    return require_iso_date(value, field_name)


def require_date_order(start: date, end: date) -> None:
    if end < start:
        raise ValidationError("End date must be after or equal to start date")


def require_bounded_range(start: date, end: date) -> None:
    require_date_order(start, end)
    if (end - start).days + 1 > MAX_RANGE_DAYS:
        raise ValidationError(f"Date range cannot exceed {MAX_RANGE_DAYS} days")


def require_quota(value: Any) -> int:
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError("Quota must be a number")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError("Quota must be a whole number")
    if value < QUOTA_MIN:
        raise ValidationError("Quota must be a positive number")
    if value > QUOTA_MAX:
        raise ValidationError("Quota cannot exceed 10,000")
    return int(value)


def require_notes(value: Any) -> Optional[str]:
    return require_max_length(value, "Notes", NOTES_MAX_LENGTH)


def require_actor(value: Any, field_name: str) -> str:
    actor = require_non_empty(value, field_name)
    require_max_length(actor, field_name, ACTOR_MAX_LENGTH)
    return actor


def require_positive_int(value: Any, field_name: str, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a positive integer")
    if number <= 0:
        raise ValidationError(f"{field_name} must be a positive integer")
    return number


def require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a boolean")
    return value
