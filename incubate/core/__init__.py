"""
Core Module
===========

Error codes and exceptions.
"""

from incubate.core.errors import (
    AppException,
    ErrorCodes,
    NotFoundError,
    StorageError,
    StorageOpenError,
    ValidationError,
    WorkerNotRunningError,
)

__all__ = [
    "AppException",
    "ErrorCodes",
    "NotFoundError",
    "StorageError",
    "StorageOpenError",
    "ValidationError",
    "WorkerNotRunningError",
]
