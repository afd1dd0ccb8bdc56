# =============================================================================
# UTILS MODULE INITIALIZATION
# =============================================================================
# File: backoffice/utils/__init__.py
# Description: Utils module exports
# =============================================================================

from backoffice.utils.helpers import (
    utc_now,
    parse_duration,
    clamp_pagination,
    parse_int,
    format_uptime,
    DEFAULT_PAGE,
    DEFAULT_PAGE_LIMIT,
    MAX_PAGE_LIMIT,
    MAX_PAGE,
)

__all__ = [
    "utc_now",
    "parse_duration",
    "clamp_pagination",
    "parse_int",
    "format_uptime",
    "DEFAULT_PAGE",
    "DEFAULT_PAGE_LIMIT",
    "MAX_PAGE_LIMIT",
    "MAX_PAGE",
]
