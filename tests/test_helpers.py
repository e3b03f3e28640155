"""
Helper and Error Tests
======================

Tests for the ISO-8601 codec, id generation and the exception payloads.
"""

from datetime import datetime, timedelta, timezone

from incubate.core.errors import (
    AppException,
    ErrorCodes,
    NotFoundError,
    StorageError,
    ValidationError,
    user_facing_message,
)
from incubate.utils.helpers import ensure_utc, format_datetime, generate_id, parse_datetime


class TestDatetimeCodec:
    """Tests for format_datetime / parse_datetime."""

    def test_format_uses_milliseconds_and_z(self):
        dt = datetime(2026, 2, 10, 9, 30, 5, 123456, tzinfo=timezone.utc)
        assert format_datetime(dt) == "2026-02-10T09:30:05.123Z"

    def test_naive_is_treated_as_utc(self):
        assert format_datetime(datetime(2026, 2, 10)) == "2026-02-10T00:00:00.000Z"

    def test_other_offsets_are_normalised(self):
        dt = datetime(2026, 2, 10, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_datetime(dt) == "2026-02-10T10:00:00.000Z"

    def test_parse(self):
        parsed = parse_datetime("2026-02-10T09:30:05.123Z")
        assert parsed == datetime(2026, 2, 10, 9, 30, 5, 123000, tzinfo=timezone.utc)

    def test_ensure_utc(self):
        naive = datetime(2026, 2, 10, 9, 30)
        shifted = datetime(2026, 2, 10, 9, 30, tzinfo=timezone(timedelta(hours=2)))

        assert ensure_utc(naive) == datetime(2026, 2, 10, 9, 30, tzinfo=timezone.utc)
        assert ensure_utc(shifted) is shifted

    def test_parse_garbage(self):
        assert parse_datetime("yesterday") is None
        assert parse_datetime("") is None
        assert parse_datetime(None) is None

    def test_ids_are_unique_uppercase(self):
        first, second = generate_id(), generate_id()
        assert first != second
        assert first == first.upper()


class TestErrors:
    """Tests for the exception taxonomy."""

    def test_detail_payload(self):
        exc = ValidationError("Title is too long", field="title", max_length=200)

        assert exc.code == ErrorCodes.VALIDATION_ERROR
        assert exc.detail == {
            "code": "VALIDATION_ERROR",
            "message": "Title is too long",
            "field": "title",
            "max_length": 200,
        }

    def test_not_found_defaults(self):
        exc = NotFoundError(entry_id="ABC")

        assert exc.code == ErrorCodes.ENTRY_NOT_FOUND
        assert exc.detail["entry_id"] == "ABC"

    def test_user_facing_message(self):
        assert user_facing_message(StorageError()) == "The journal could not be read or saved"
        assert user_facing_message(AppException(ErrorCodes.INTERNAL_ERROR, "Oops")) == "Oops"
        assert user_facing_message(RuntimeError("boom")) == "An unexpected error occurred"
