"""
Helper Functions
================

Common utility functions used across the application.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional


def generate_id() -> str:
    """Generate a new opaque entry id (UUID v4 text)."""
    return str(uuid.uuid4()).upper()


def utc_now() -> datetime:
    """Get current UTC datetime with timezone info."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes; leave aware ones untouched."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def format_datetime(dt: datetime) -> str:
    """
    Format datetime to ISO 8601 with millisecond precision.

    Naive datetimes are taken to be UTC. Output always ends in ``Z`` so
    stored values sort lexicographically in time order.
    """
    dt = ensure_utc(dt).astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 string; returns None when it can't be parsed."""
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return ensure_utc(dt)
