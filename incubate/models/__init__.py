"""
Database Models
===============

SQLAlchemy ORM models for all database entities.

All models are imported here to ensure they are registered
with SQLAlchemy's metadata before the schema is created.
"""

from incubate.models.journal import (
    Entry,
    EntryType,
    GoalItem,
    ReflectionQA,
    TodoItem,
)

__all__ = [
    "Entry",
    "EntryType",
    "GoalItem",
    "ReflectionQA",
    "TodoItem",
]
