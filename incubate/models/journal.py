"""
Journal Models
==============

SQLAlchemy models for journal entries and their ordered child items.

Child tables carry a plain ``entry_id`` column rather than a foreign key:
entries are only ever soft-deleted, and their children stay behind as
rows that active queries never reach.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Boolean,
    Enum as SQLEnum,
    Index,
    Integer,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from incubate.db.base import Base, ISODateTime, JSONStringList, TimestampMixin


class EntryType(str, Enum):
    """Kinds of journal entry."""
    RAW = "raw"
    TODOS = "todos"
    GOALS = "goals"
    REFLECTION = "reflection"

    @property
    def display_name(self) -> str:
        return ENTRY_TYPE_TITLES[self]


ENTRY_TYPE_TITLES = {
    EntryType.REFLECTION: "Reflection",
    EntryType.GOALS: "Goals",
    EntryType.TODOS: "To-Do's",
    EntryType.RAW: "Raw",
}


class Entry(Base, TimestampMixin):
    """
    Journal entry model.

    One row per note, to-do list, goal list or guided reflection.
    """

    __tablename__ = "entries"

    # Primary Key
    id: Mapped[str] = mapped_column(
        Text,
        primary_key=True,
    )

    user_id: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    # Values are stored as the lowercase enum value, guarded by a CHECK
    type: Mapped[EntryType] = mapped_column(
        SQLEnum(
            EntryType,
            name="entry_type",
            native_enum=False,
            create_constraint=True,
            length=16,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
    )

    # Content
    title: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )
    tags: Mapped[list[str]] = mapped_column(
        JSONStringList(),
        nullable=True,
        default=list,
    )

    # Soft delete marker
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        ISODateTime(),
        nullable=True,
    )

    __table_args__ = (
        Index("idx_entries_user", "user_id"),
        Index("idx_entries_type", "type"),
    )

    def __repr__(self) -> str:
        return f"<Entry(id={self.id}, type={self.type})>"


# Declared outside the class so the column can be ordered descending
Index("idx_entries_created", Entry.type, Entry.created_at.desc())


class TodoItem(Base):
    """
    To-do item model.

    Positions are dense and zero-based within an entry.
    """

    __tablename__ = "todo_items"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    entry_id: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    is_done: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    __table_args__ = (
        Index("idx_todo_entry_pos", "entry_id", "position"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<TodoItem(entry_id={self.entry_id}, position={self.position})>"


class GoalItem(Base):
    """
    Goal bullet model.
    """

    __tablename__ = "goal_items"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    entry_id: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    bullet: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    __table_args__ = (
        Index("idx_goal_entry_pos", "entry_id", "position"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<GoalItem(entry_id={self.entry_id}, position={self.position})>"


class ReflectionQA(Base):
    """
    Question/answer pair belonging to a reflection entry.
    """

    __tablename__ = "reflection_qas"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    entry_id: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    question: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    answer: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    __table_args__ = (
        Index("idx_reflection_entry_pos", "entry_id", "position"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<ReflectionQA(entry_id={self.entry_id}, position={self.position})>"
