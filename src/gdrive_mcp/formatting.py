"""Formatting and validation helpers shared by the Drive tool handlers.

All functions here are pure: they turn raw Drive metadata into display
strings or reject blank arguments before any remote call is made.
"""

import re
from datetime import datetime
from typing import Any

from gdrive_mcp.errors import DriveMCPError, ValidationError

SIZE_UNITS = ["B", "KB", "MB", "GB", "TB"]

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Leading integer of a page size: "3.7" -> 3, "20abc" -> 20
LEADING_INT_PATTERN = re.compile(r"\s*([+-]?\d+)")

ERROR_PREFIX = "❌ Error: "


def format_byte_size(raw: str | int | None) -> str:
    """Render a byte count using binary (1024) scaling.

    Args:
        raw: Byte count as returned by Drive (a decimal string) or an int.

    Returns:
        Size with two decimals and the largest unit keeping it under 1024,
        e.g. ``"1.50 KB"``. TB is never scaled further. ``"N/A"`` when the
        value is absent or not an integer.
    """
    if raw is None or raw == "":
        return "N/A"
    try:
        size = float(int(raw))
    except (TypeError, ValueError):
        return "N/A"

    unit_index = 0
    while size >= 1024 and unit_index < len(SIZE_UNITS) - 1:
        size /= 1024
        unit_index += 1

    return f"{size:.2f} {SIZE_UNITS[unit_index]}"


def format_timestamp(raw: str | None) -> str:
    """Render an RFC 3339 timestamp in the local timezone and locale format.

    Args:
        raw: Timestamp such as ``"2024-01-15T10:30:00.000Z"``.

    Returns:
        Locale-default date and time, ``"N/A"`` when absent, or the input
        unchanged when it cannot be parsed.
    """
    if not raw:
        return "N/A"
    # fromisoformat() only accepts a trailing "Z" from Python 3.11 on
    normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return raw
    return parsed.astimezone().strftime("%c")


def format_error(error: Any) -> str:
    """Render an error as a single user-facing line.

    Args:
        error: Exception (or any value) raised while serving a tool.

    Returns:
        ``"❌ Error: <message>"``.
    """
    if isinstance(error, DriveMCPError):
        message = error.message
    else:
        message = str(error)
    return f"{ERROR_PREFIX}{message}"


def require_non_empty(value: str | None, field_name: str) -> str:
    """Validate a required string argument.

    Args:
        value: Raw argument value.
        field_name: Argument name used in the error message.

    Returns:
        The value with surrounding whitespace removed.

    Raises:
        ValidationError: If the value is missing or only whitespace.
    """
    trimmed = (value or "").strip()
    if not trimmed:
        raise ValidationError(f"{field_name} is required")
    return trimmed


def parse_page_size(raw: str | None) -> int:
    """Parse a page size argument, clamped to [1, 100].

    Only the leading integer is read, so ``"3.7"`` is 3 and ``"20abc"`` is 20.
    Values without one and ``"0"`` fall back to the default of 10.
    """
    match = LEADING_INT_PATTERN.match(raw or "")
    size = int(match.group(1)) if match else 0
    if size == 0:
        size = DEFAULT_PAGE_SIZE
    return min(max(size, 1), MAX_PAGE_SIZE)
