"""
Input coercion shared by every service that reads requirement fields.

Numeric fields arrive as numbers, numeric strings, empty strings or None.
Set-valued fields arrive as a comma-separated string or a list.
"""

import math
from typing import Any, List


def to_number(value: Any, default: float = 0.0) -> float:
    """Parse a number, falling back to `default` on anything unparseable."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def to_list(value: Any) -> List[str]:
    """
    Normalize a comma-separated string or a list into a list of trimmed,
    non-empty strings.

    >>> to_list("AWS, , Python ")
    ['AWS', 'Python']
    """
    if not value:
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple, set)):
        items = list(value)
    else:
        return []

    cleaned = []
    for item in items:
        if item is None:
            continue
        text = str(item).strip()
        if text:
            cleaned.append(text)
    return cleaned


def to_lower_list(value: Any) -> List[str]:
    return [item.lower() for item in to_list(value)]


def to_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)
