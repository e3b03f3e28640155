"""
Utilities Module
================

Helper functions and utility classes.
"""

from incubate.utils.helpers import (
    ensure_utc,
    format_datetime,
    generate_id,
    parse_datetime,
    utc_now,
)

__all__ = ["ensure_utc", "format_datetime", "generate_id", "parse_datetime", "utc_now"]
