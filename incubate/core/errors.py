"""
Error Handling
==============

Standardized error codes and the exception taxonomy shared by the
storage and reflection layers.
"""

from typing import Any, Optional


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """Standardized error codes."""

    # Storage (STORAGE_001 - STORAGE_010)
    STORAGE_OPEN_FAILED = "STORAGE_001"
    STORAGE_QUERY_FAILED = "STORAGE_002"
    WORKER_NOT_RUNNING = "STORAGE_003"

    # Journal (JOURNAL_001 - JOURNAL_010)
    ENTRY_NOT_FOUND = "JOURNAL_001"
    ITEM_NOT_FOUND = "JOURNAL_002"

    # General
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# =============================================================================
# Custom Exceptions
# =============================================================================

class AppException(Exception):
    """Base application exception with a structured detail payload."""

    def __init__(
        self,
        code: str,
        message: str,
        field: Optional[str] = None,
        **extra: Any,
    ):
        self.code = code
        self.message = message
        self.field = field
        self.extra = extra

        detail: dict[str, Any] = {
            "code": code,
            "message": message,
        }

        if field:
            detail["field"] = field

        detail.update(extra)
        self.detail = detail

        super().__init__(message)


class StorageOpenError(AppException):
    """The database file could not be opened or migrated. Fatal at startup."""

    def __init__(
        self,
        message: str = "Failed to open database",
        **extra: Any,
    ):
        super().__init__(
            code=ErrorCodes.STORAGE_OPEN_FAILED,
            message=message,
            **extra,
        )


class StorageError(AppException):
    """A single query or statement failed; the request was rolled back."""

    def __init__(
        self,
        message: str = "The journal could not be read or saved",
        **extra: Any,
    ):
        super().__init__(
            code=ErrorCodes.STORAGE_QUERY_FAILED,
            message=message,
            **extra,
        )


class WorkerNotRunningError(AppException):
    """A storage request was submitted before start() or after stop()."""

    def __init__(
        self,
        message: str = "Database worker is not running",
        **extra: Any,
    ):
        super().__init__(
            code=ErrorCodes.WORKER_NOT_RUNNING,
            message=message,
            **extra,
        )


class NotFoundError(AppException):
    """Resource not found errors."""

    def __init__(
        self,
        code: str = ErrorCodes.ENTRY_NOT_FOUND,
        message: str = "Entry not found",
        **extra: Any,
    ):
        super().__init__(
            code=code,
            message=message,
            **extra,
        )


class ValidationError(AppException):
    """Validation errors."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        **extra: Any,
    ):
        super().__init__(
            code=ErrorCodes.VALIDATION_ERROR,
            message=message,
            field=field,
            **extra,
        )


def user_facing_message(exc: Exception) -> str:
    """Alert text for an exception raised by the core layers."""
    if isinstance(exc, AppException):
        return exc.message
    return "An unexpected error occurred"
