"""
Database Base Model
===================

Provides the base class for all SQLAlchemy models and the column types
used by the on-disk schema (ISO 8601 text timestamps, JSON text tags).
"""

import json
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from incubate.utils.helpers import format_datetime, parse_datetime, utc_now


class ISODateTime(TypeDecorator):
    """
    Timestamp stored as ISO 8601 text with fractional seconds.

    Unparseable stored values load as None rather than raising.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[str]:
        if value is None:
            return None
        return format_datetime(value)

    def process_result_value(self, value: Optional[str], dialect) -> Optional[datetime]:
        return parse_datetime(value)


class JSONStringList(TypeDecorator):
    """
    List of strings stored as a JSON array string.

    Missing or corrupt JSON decodes to an empty list.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Optional[list[str]], dialect) -> str:
        return json.dumps(list(value or []))

    def process_result_value(self, value: Optional[str], dialect) -> list[str]:
        if not value:
            return []
        try:
            decoded: Any = json.loads(value)
        except (TypeError, ValueError):
            return []
        if not isinstance(decoded, list):
            return []
        return [item for item in decoded if isinstance(item, str)]


class Base(DeclarativeBase):
    """
    Base class for all database models.
    """

    # Type annotation for class attributes
    type_annotation_map = {
        datetime: ISODateTime(),
    }


class TimestampMixin:
    """
    Mixin that adds created_at and updated_at timestamps.

    Timestamps are produced in Python so the stored text format is
    identical regardless of which statement wrote the row.
    """

    created_at: Mapped[datetime] = mapped_column(
        ISODateTime(),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        ISODateTime(),
        default=utc_now,
        nullable=False,
    )
