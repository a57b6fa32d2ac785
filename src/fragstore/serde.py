"""Shared validation utilities for to_dict / from_dict round-trips."""

from collections.abc import Mapping
from datetime import datetime, timezone

from fragstore.errors import ValidationError


def utc_now() -> datetime:
    """Return the current timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def as_str_object_dict(value: object, *, field_name: str) -> dict[str, object]:
    """Validate and normalize a mapping value into ``dict[str, object]``."""
    if not isinstance(value, Mapping):
        msg = f"{field_name} must be a mapping."
        raise ValidationError(msg)
    return {str(key): item for key, item in value.items()}


def require_string(value: object, *, field_name: str) -> str:
    """Validate a required non-empty string field."""
    if not isinstance(value, str) or not value:
        msg = f"{field_name} is required."
        raise ValidationError(msg)
    return value


def optional_string(value: object, *, field_name: str) -> str | None:
    """Validate an optional string field, treating empty strings as absent."""
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        msg = f"{field_name} must be a string or None."
        raise ValidationError(msg)
    return value


def require_size(value: object, *, field_name: str) -> int:
    """Validate a non-negative integer field (rejects booleans and floats)."""
    if not isinstance(value, int) or isinstance(value, bool):
        msg = f"{field_name} must be a number."
        raise ValidationError(msg)
    if value < 0:
        msg = f"{field_name} cannot be negative."
        raise ValidationError(msg)
    return value


def to_utc(value: datetime) -> datetime:
    """Normalize a datetime into timezone-aware UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def optional_timestamp(value: object, *, field_name: str) -> datetime | None:
    """Validate an optional timestamp given as a datetime or ISO-8601 string."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return to_utc(value)
    if not isinstance(value, str):
        msg = f"{field_name} must be an ISO-8601 string or datetime."
        raise ValidationError(msg)
    try:
        # fromisoformat() only accepts the "Z" suffix from 3.11 on.
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        msg = f"{field_name} is not a valid ISO-8601 timestamp: {value!r}"
        raise ValidationError(msg) from exc
    return to_utc(parsed)


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as ISO-8601 UTC."""
    return to_utc(value).isoformat()
