# =============================================================================
# BACKOFFICE SERVICE - UTILITIES
# =============================================================================
# File: backoffice/utils/helpers.py
# Description: Small helpers shared by configuration, services and routes
# =============================================================================

from typing import Tuple, Union
from datetime import datetime, timedelta, timezone
import re


# Go-style duration units ("300ms", "90s", "5m", "24h", "1h30m")
_DURATION_UNITS = {
    "ms": 0.001,
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h|d)")

DEFAULT_PAGE = 1
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100

# Offsets must fit a signed 64-bit column on every backend
MAX_OFFSET = 2 ** 63 - 1
MAX_PAGE = MAX_OFFSET // MAX_PAGE_LIMIT + 1

_INTEGER = re.compile(r"[+-]?\d+")


def utc_now() -> datetime:
    """
    Get current UTC timestamp.

    Returns:
        datetime: Current UTC time with timezone info
    """
    return datetime.now(timezone.utc)


def parse_duration(value: Union[str, int, float, timedelta]) -> Union[str, timedelta]:
    """
    Parse a Go-style duration string into a timedelta.

    Plain numbers are treated as seconds. Strings that do not look like a
    Go duration (for example ISO-8601 "PT5M") are returned unchanged so
    pydantic can apply its own timedelta parsing.

    Args:
        value: Duration as timedelta, seconds, or string

    Returns:
        timedelta, or the original string when it is not a Go duration

    Example:
        >>> parse_duration("1h30m")
        datetime.timedelta(seconds=5400)
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)

    text = value.strip().lower()
    if re.fullmatch(r"\d+(\.\d+)?", text):
        return timedelta(seconds=float(text))

    if not text or _DURATION_PART.sub("", text):
        return value

    seconds = sum(
        float(amount) * _DURATION_UNITS[unit]
        for amount, unit in _DURATION_PART.findall(text)
    )
    return timedelta(seconds=seconds)


def parse_int(value: Union[int, str, None]) -> int:
    """
    Lenient integer parsing for query parameters.

    Missing, malformed or out of 64-bit range values become 0.
    """
    if value is None:
        return 0
    if isinstance(value, str):
        if not _INTEGER.fullmatch(value):
            return 0
        value = int(value)
    if not -MAX_OFFSET - 1 <= value <= MAX_OFFSET:
        return 0
    return value


def clamp_pagination(
    page: Union[int, str, None],
    limit: Union[int, str, None],
) -> Tuple[int, int, int]:
    """
    Normalize page/limit query parameters.

    Values are parsed with parse_int, so garbage counts as 0. page < 1
    becomes 1, limit < 1 becomes the default (10) and limit > 100 is capped
    at 100. page is capped so the offset fits a 64-bit integer.

    Returns:
        Tuple of (page, limit, offset)
    """
    page = parse_int(page)
    limit = parse_int(limit)

    if page < 1:
        page = DEFAULT_PAGE
    if limit < 1:
        limit = DEFAULT_PAGE_LIMIT
    if limit > MAX_PAGE_LIMIT:
        limit = MAX_PAGE_LIMIT
    if page > MAX_PAGE:
        page = MAX_PAGE
    return page, limit, (page - 1) * limit


def format_uptime(delta: timedelta) -> str:
    """Render an uptime like 2h3m4s."""
    total = int(delta.total_seconds())
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours:
        return f"{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{minutes}m{seconds}s"
    return f"{seconds}s"
