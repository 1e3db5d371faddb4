#!/usr/bin/env python3
"""
Utility functions for reading environment variables with cross-platform support.

Values copied out of .env files edited on Windows often carry CRLF line endings
(GRAPH_STRATEGY=auto\r\n). These readers clean such values before they reach
the graph builder settings.
"""

import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)


def getenv_clean(key: str, default: str = None) -> Optional[str]:
    """Get environment variable with line endings and surrounding whitespace removed.

    Args:
        key: Environment variable name
        default: Default value if variable is not set

    Returns:
        Cleaned environment variable value, or default if not set

    Example:
        >>> # .env file has: GRAPH_STRATEGY=generic\r\n
        >>> getenv_clean("GRAPH_STRATEGY", "auto")
        'generic'
    """
    raw_value = os.getenv(key, default)
    if raw_value is None:
        return None

    cleaned = raw_value.strip()
    if raw_value != cleaned:
        logger.warning(
            f"Environment variable {key} had trailing whitespace/line endings: "
            f"raw={repr(raw_value)}, cleaned={repr(cleaned)}"
        )
    return cleaned


def getenv_int(key: str, default: int) -> int:
    """Get environment variable as integer, falling back to default when unset or invalid.

    Args:
        key: Environment variable name
        default: Default integer value

    Returns:
        Integer value
    """
    raw_value = getenv_clean(key, None)
    if raw_value is None or raw_value == "":
        return default

    try:
        return int(raw_value)
    except ValueError:
        logger.warning(
            f"Environment variable {key} is not a valid integer: {repr(raw_value)}. "
            f"Using default: {default}"
        )
        return default


def getenv_list(key: str, default: list[str] = None, separator: str = ",") -> list[str]:
    """Get environment variable as a list of cleaned, non-empty items.

    Example:
        >>> # .env file has: CORS_ORIGINS=http://localhost:3000,http://localhost:5173\r\n
        >>> getenv_list("CORS_ORIGINS")
        ['http://localhost:3000', 'http://localhost:5173']
    """
    if default is None:
        default = []

    raw_value = getenv_clean(key, None)
    if not raw_value:
        return default

    items = [item.strip() for item in raw_value.split(separator) if item.strip()]
    return items if items else default
