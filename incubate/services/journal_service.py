"""
Journal Service
===============

Session-scoped CRUD for journal entries and their child items.

Every method works inside the caller's ``AsyncSession``; the database
worker owns the session and commits or rolls back once per request, so
a multi-statement method is a single transaction.
"""

from datetime import datetime
from typing import Iterable, Optional, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from incubate.core.errors import ErrorCodes, NotFoundError
from incubate.models.journal import Entry, EntryType, GoalItem, ReflectionQA, TodoItem
from incubate.schemas.journal import (
    EntryDetail,
    EntryRead,
    GoalItemRead,
    GoalsDetail,
    RawDetail,
    ReflectionDetail,
    ReflectionQACreate,
    ReflectionQARead,
    TodoItemCreate,
    TodoItemRead,
    TodosDetail,
)
from incubate.utils.helpers import generate_id, utc_now


def entry_to_read(entry: Entry) -> EntryRead:
    """
    Map an ORM row to its value type.

    Timestamps that failed to parse fall back to now (created_at) and to
    created_at (updated_at).
    """
    created_at = entry.created_at or utc_now()
    return EntryRead(
        id=entry.id,
        user_id=entry.user_id,
        type=entry.type,
        title=entry.title,
        text=entry.text or "",
        tags=entry.tags or [],
        created_at=created_at,
        updated_at=entry.updated_at or created_at,
        deleted_at=entry.deleted_at,
    )


def _require_rows(
    result,
    key,
    code: str = ErrorCodes.ENTRY_NOT_FOUND,
    message: str = "Entry not found",
) -> None:
    """Raise NotFoundError when an UPDATE matched nothing."""
    if result.rowcount == 0:
        raise NotFoundError(code=code, message=message, id=key)


class JournalService:
    """Service for journal storage operations."""

    def __init__(self, db: AsyncSession, user_id: str = "local-user"):
        self.db = db
        self.user_id = user_id

    # -- entries -----------------------------------------------------------

    async def insert(self, entry: EntryRead) -> None:
        """Upsert an entry by primary key."""
        values = {
            "id": entry.id,
            "user_id": entry.user_id,
            "type": entry.type,
            "title": entry.title,
            "text": entry.text,
            "tags": entry.tags,
            "created_at": entry.created_at,
            "updated_at": entry.updated_at,
            "deleted_at": entry.deleted_at,
        }
        stmt = sqlite_insert(Entry).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={key: stmt.excluded[key] for key in values if key != "id"},
        )
        await self.db.execute(stmt)

    async def fetch_all_active(self, limit: int) -> list[EntryRead]:
        """Get active entries, newest first."""
        stmt = (
            select(Entry)
            .where(Entry.deleted_at.is_(None))
            .order_by(Entry.created_at.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [entry_to_read(row) for row in result.scalars().all()]

    async def fetch_by_type(self, entry_type: EntryType, limit: int) -> list[EntryRead]:
        """Get active entries of one type, newest first."""
        stmt = (
            select(Entry)
            .where(
                Entry.type == entry_type,
                Entry.deleted_at.is_(None),
            )
            .order_by(Entry.created_at.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [entry_to_read(row) for row in result.scalars().all()]

    async def get_active_entry(self, entry_id: str) -> Optional[Entry]:
        """Get an entry by id unless it is missing or soft-deleted."""
        stmt = select(Entry).where(
            Entry.id == entry_id,
            Entry.deleted_at.is_(None),
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def fetch_entry_detail(self, entry_id: str) -> Optional[EntryDetail]:
        """
        Get an entry together with the child collection matching its type.

        Returns None if the entry is absent or soft-deleted.
        """
        entry = await self.get_active_entry(entry_id)
        if entry is None:
            return None

        entry_read = entry_to_read(entry)

        if entry.type == EntryType.TODOS:
            return TodosDetail(
                entry=entry_read,
                items=await self.fetch_todo_items([entry_id]),
            )
        if entry.type == EntryType.GOALS:
            return GoalsDetail(
                entry=entry_read,
                items=await self.fetch_goal_items([entry_id]),
            )
        if entry.type == EntryType.REFLECTION:
            return ReflectionDetail(
                entry=entry_read,
                qas=await self.fetch_reflection_qas(entry_id),
            )
        return RawDetail(entry=entry_read)

    # -- creation ----------------------------------------------------------

    def _new_entry(
        self,
        entry_type: EntryType,
        title: Optional[str],
        text: str = "",
    ) -> EntryRead:
        now = utc_now()
        return EntryRead(
            id=generate_id(),
            user_id=self.user_id,
            type=entry_type,
            title=title,
            text=text,
            tags=[],
            created_at=now,
            updated_at=now,
        )

    async def save_new_raw(self, title: Optional[str], body: str) -> EntryRead:
        """Create a raw note."""
        entry = self._new_entry(EntryType.RAW, title, body)
        await self.insert(entry)
        return entry

    async def save_new_todos(
        self,
        title: Optional[str],
        items: Sequence[TodoItemCreate],
    ) -> EntryRead:
        """Create a to-do list entry and its items."""
        entry = self._new_entry(EntryType.TODOS, title)
        await self.insert(entry)
        await self._insert_todo_items(entry.id, items)
        return entry

    async def save_new_goals(
        self,
        title: Optional[str],
        bullets: Sequence[str],
    ) -> EntryRead:
        """Create a goal list entry and its bullets."""
        entry = self._new_entry(EntryType.GOALS, title)
        await self.insert(entry)
        await self._insert_goal_items(entry.id, bullets)
        return entry

    async def save_new_reflection(
        self,
        title: Optional[str],
        qas: Sequence[ReflectionQACreate],
    ) -> EntryRead:
        """Create a reflection entry and its Q&A pairs."""
        entry = self._new_entry(EntryType.REFLECTION, title)
        await self.insert(entry)
        await self._insert_reflection_qas(entry.id, qas)
        return entry

    # -- updates -----------------------------------------------------------

    async def update_entry_meta(
        self,
        entry_id: str,
        title: Optional[str],
        text: str,
    ) -> None:
        """Update title, text and updated_at only."""
        stmt = (
            update(Entry)
            .where(Entry.id == entry_id)
            .values(title=title, text=text, updated_at=utc_now())
        )
        result = await self.db.execute(stmt)
        _require_rows(result, entry_id)

    async def update_entry_date(self, entry_id: str, created_at: datetime) -> None:
        """Back-date an entry."""
        stmt = (
            update(Entry)
            .where(Entry.id == entry_id)
            .values(created_at=created_at)
        )
        result = await self.db.execute(stmt)
        _require_rows(result, entry_id)

    async def update_todo_item(self, item_id: int, is_done: bool) -> None:
        """Tick or untick one to-do item."""
        stmt = update(TodoItem).where(TodoItem.id == item_id).values(is_done=is_done)
        result = await self.db.execute(stmt)
        _require_rows(result, item_id, ErrorCodes.ITEM_NOT_FOUND, "Item not found")

    async def update_goal_bullet(self, item_id: int, bullet: str) -> None:
        """Rewrite one goal bullet."""
        stmt = update(GoalItem).where(GoalItem.id == item_id).values(bullet=bullet)
        result = await self.db.execute(stmt)
        _require_rows(result, item_id, ErrorCodes.ITEM_NOT_FOUND, "Item not found")

    async def replace_todo_items(
        self,
        entry_id: str,
        items: Sequence[TodoItemCreate],
    ) -> None:
        """Delete every to-do item of the entry and insert ``items`` in order."""
        await self._touch(entry_id)
        await self.db.execute(delete(TodoItem).where(TodoItem.entry_id == entry_id))
        await self._insert_todo_items(entry_id, items)

    async def replace_goal_items(self, entry_id: str, bullets: Sequence[str]) -> None:
        """Delete every goal bullet of the entry and insert ``bullets`` in order."""
        await self._touch(entry_id)
        await self.db.execute(delete(GoalItem).where(GoalItem.entry_id == entry_id))
        await self._insert_goal_items(entry_id, bullets)

    async def update_reflection_qas(
        self,
        entry_id: str,
        items: Sequence[ReflectionQACreate],
    ) -> None:
        """Delete every Q&A of the entry and insert ``items`` in order."""
        await self._touch(entry_id)
        await self.db.execute(
            delete(ReflectionQA).where(ReflectionQA.entry_id == entry_id)
        )
        await self._insert_reflection_qas(entry_id, items)

    async def soft_delete_entry(self, entry_id: str) -> None:
        """Hide an entry from active queries. Children are left untouched."""
        stmt = (
            update(Entry)
            .where(Entry.id == entry_id)
            .values(deleted_at=utc_now())
        )
        result = await self.db.execute(stmt)
        _require_rows(result, entry_id)

    # -- children ----------------------------------------------------------

    async def fetch_todo_items(self, entry_ids: Iterable[str]) -> list[TodoItemRead]:
        """Get to-do items of the given entries ordered by entry then position."""
        ids = list(entry_ids)
        if not ids:
            return []
        stmt = (
            select(TodoItem)
            .where(TodoItem.entry_id.in_(ids))
            .order_by(TodoItem.entry_id, TodoItem.position)
        )
        result = await self.db.execute(stmt)
        return [TodoItemRead.model_validate(row) for row in result.scalars().all()]

    async def fetch_goal_items(self, entry_ids: Iterable[str]) -> list[GoalItemRead]:
        """Get goal bullets of the given entries ordered by entry then position."""
        ids = list(entry_ids)
        if not ids:
            return []
        stmt = (
            select(GoalItem)
            .where(GoalItem.entry_id.in_(ids))
            .order_by(GoalItem.entry_id, GoalItem.position)
        )
        result = await self.db.execute(stmt)
        return [GoalItemRead.model_validate(row) for row in result.scalars().all()]

    async def fetch_reflection_qas(self, entry_id: str) -> list[ReflectionQARead]:
        stmt = (
            select(ReflectionQA)
            .where(ReflectionQA.entry_id == entry_id)
            .order_by(ReflectionQA.position)
        )
        result = await self.db.execute(stmt)
        return [ReflectionQARead.model_validate(row) for row in result.scalars().all()]

    async def _insert_todo_items(
        self,
        entry_id: str,
        items: Sequence[TodoItemCreate],
    ) -> None:
        for position, item in enumerate(items):
            self.db.add(
                TodoItem(
                    entry_id=entry_id,
                    position=position,
                    text=item.text,
                    is_done=item.is_done,
                )
            )
        await self.db.flush()

    async def _insert_goal_items(self, entry_id: str, bullets: Sequence[str]) -> None:
        for position, bullet in enumerate(bullets):
            self.db.add(GoalItem(entry_id=entry_id, position=position, bullet=bullet))
        await self.db.flush()

    async def _insert_reflection_qas(
        self,
        entry_id: str,
        items: Sequence[ReflectionQACreate],
    ) -> None:
        for position, item in enumerate(items):
            self.db.add(
                ReflectionQA(
                    entry_id=entry_id,
                    position=position,
                    question=item.question,
                    answer=item.answer,
                )
            )
        await self.db.flush()

    async def _touch(self, entry_id: str) -> None:
        """Bump the parent entry's updated_at; the entry must exist."""
        stmt = update(Entry).where(Entry.id == entry_id).values(updated_at=utc_now())
        result = await self.db.execute(stmt)
        _require_rows(result, entry_id)
