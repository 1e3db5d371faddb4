#!/usr/bin/env python3
"""Safe field accessors over parsed JSON values.

Order documents are loosely schematized: a field may be missing, null or of an
unexpected kind. Every accessor returns ``None`` (or an empty list) instead of
raising, so callers can skip a rule when the value is not usable.
"""
import re
from datetime import datetime
from typing import Any

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_FRACTION = re.compile(r"(T\d{2}:\d{2}:\d{2})\.(\d+)")


def is_number(value: Any) -> bool:
    """True for JSON numbers. bool is an int subclass in Python and is excluded."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def get_number(obj: Any, key: str) -> int | float | None:
    if isinstance(obj, dict):
        value = obj.get(key)
        if is_number(value):
            return value
    return None


def get_string(obj: Any, key: str) -> str | None:
    if isinstance(obj, dict):
        value = obj.get(key)
        if isinstance(value, str):
            return value
    return None


def get_dict(obj: Any, key: str) -> dict[str, Any] | None:
    if isinstance(obj, dict):
        value = obj.get(key)
        if isinstance(value, dict):
            return value
    return None


def get_list(obj: Any, key: str) -> list[Any]:
    if isinstance(obj, dict):
        value = obj.get(key)
        if isinstance(value, list):
            return value
    return []


def get_dicts(obj: Any, key: str) -> list[dict[str, Any]]:
    """Return the dict elements of ``obj[key]`` when it is a list."""
    return [item for item in get_list(obj, key) if isinstance(item, dict)]


def parse_leading_int(value: Any) -> int | None:
    """Parse an integer from the start of a string ("12", " 7abc").

    Numbers are truncated toward zero. Anything else yields None.
    """
    if is_number(value):
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            return int(match.group(1))
    return None


def format_value(value: Any) -> str:
    """Render a JSON value for use inside a node label."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _normalize_timestamp(value: str) -> str:
    """Rewrite a timestamp into the subset datetime.fromisoformat accepts on Python 3.10.

    A trailing "Z" becomes "+00:00" and fractional seconds are padded or cut to
    six digits ("11:00:00.12Z" -> "11:00:00.120000+00:00").
    """
    value = value.replace("Z", "+00:00")
    return _FRACTION.sub(lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", value, count=1)


def format_date(value: Any) -> str:
    """Render an ISO-8601 timestamp as YYYY-MM-DD, or the raw value when it does not parse."""
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(_normalize_timestamp(value)).date().isoformat()
        except ValueError:
            return value
    return format_value(value)
