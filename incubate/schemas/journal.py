"""
Journal Schemas
===============

Pydantic value types returned by the data-access layer, and the
inputs accepted by its save/replace operations.
"""

from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from incubate.models.journal import EntryType
from incubate.utils.helpers import ensure_utc


# ---------------------------------------------------------------------------
# Entries and child items
# ---------------------------------------------------------------------------

class EntryRead(BaseModel):
    """A journal entry as stored."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    type: EntryType
    title: Optional[str] = None
    text: str = ""
    tags: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    @field_validator("created_at", "updated_at", "deleted_at")
    @classmethod
    def validate_timezone(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Naive timestamps are taken to be UTC."""
        if v is None:
            return None
        return ensure_utc(v)

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None

    @property
    def display_title(self) -> str:
        """The entry's title, or its kind when untitled."""
        if self.title and self.title.strip():
            return self.title
        return self.type.display_name


class TodoItemRead(BaseModel):
    """A stored to-do item."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    entry_id: str
    position: int
    text: str
    is_done: bool = False


class GoalItemRead(BaseModel):
    """A stored goal bullet."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    entry_id: str
    position: int
    bullet: str


class ReflectionQARead(BaseModel):
    """A stored reflection question and answer."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    entry_id: str
    position: int
    question: str
    answer: str


class TodoItemCreate(BaseModel):
    """A to-do item to be written; its position comes from list order."""

    text: str
    is_done: bool = False


class ReflectionQACreate(BaseModel):
    """A question/answer pair to be written; position comes from list order."""

    question: str
    answer: str = ""


# ---------------------------------------------------------------------------
# Entry detail (one variant per entry type)
# ---------------------------------------------------------------------------

class _DetailBase(BaseModel):
    entry: EntryRead

    @property
    def id(self) -> str:
        return self.entry.id


class RawDetail(_DetailBase):
    """A raw note; the body is ``entry.text``."""

    kind: Literal["raw"] = "raw"


class TodosDetail(_DetailBase):
    """A to-do list with its items in position order."""

    kind: Literal["todos"] = "todos"
    items: list[TodoItemRead] = Field(default_factory=list)


class GoalsDetail(_DetailBase):
    """A goal list with its bullets in position order."""

    kind: Literal["goals"] = "goals"
    items: list[GoalItemRead] = Field(default_factory=list)


class ReflectionDetail(_DetailBase):
    """A guided reflection with its Q&A pairs in position order."""

    kind: Literal["reflection"] = "reflection"
    qas: list[ReflectionQARead] = Field(default_factory=list)


EntryDetail = Annotated[
    Union[RawDetail, TodosDetail, GoalsDetail, ReflectionDetail],
    Field(discriminator="kind"),
]
