"""
Small shared helpers: timestamps, verification codes, email format.
"""

import random
import re
from datetime import datetime, timezone
from typing import Any, Optional


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def generate_verification_code() -> str:
    """6-digit email verification code."""
    return str(random.randint(100000, 999999))


def validate_email(email: str) -> bool:
    return bool(email) and bool(EMAIL_PATTERN.match(email))


def to_datetime(value: Any) -> Optional[datetime]:
    """
    Coerce the timestamp shapes found in stored documents into one aware datetime.

    Accepts:
    - datetime (naive values are taken as UTC)
    - {"seconds": ..., "nanoseconds": ...} / {"_seconds": ..., "_nanoseconds": ...}
    - epoch seconds (int / float)
    - ISO-8601 strings

    Returns None when the value is not a recognizable timestamp.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, dict):
        seconds = value.get("seconds", value.get("_seconds"))
        if seconds is None:
            return None
        nanos = value.get("nanoseconds", value.get("_nanoseconds")) or 0
        return datetime.fromtimestamp(float(seconds) + float(nanos) / 1e9, tz=timezone.utc)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return None


def is_timestamp_field(key: str) -> bool:
    return key.endswith("At")


def normalize_timestamps(record: dict) -> dict:
    """Convert every `*At` field of a record to an aware datetime in place."""
    for key, value in record.items():
        if is_timestamp_field(key) and value is not None:
            converted = to_datetime(value)
            if converted is not None:
                record[key] = converted
    return record


def timestamp_sort_key(value: Any) -> float:
    """Epoch seconds for sorting; unknown shapes sort first."""
    converted = to_datetime(value)
    return converted.timestamp() if converted else 0.0
