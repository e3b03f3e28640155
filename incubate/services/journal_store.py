"""
Journal Store
=============

Async data-access API used by the reflection session and the UI layer.
Each call is routed through the single ``DatabaseWorker`` so reads and
writes are totally ordered within the process.
"""

import logging
from datetime import datetime
from typing import Iterable, Optional, Sequence, Union

from sqlalchemy.ext.asyncio import AsyncSession

from incubate.config import Settings
from incubate.core.errors import ValidationError
from incubate.models.journal import EntryType
from incubate.schemas.journal import (
    EntryDetail,
    EntryRead,
    GoalItemRead,
    ReflectionQACreate,
    TodoItemCreate,
    TodoItemRead,
)
from incubate.services.db_worker import DatabaseWorker
from incubate.services.journal_service import JournalService

logger = logging.getLogger(__name__)

TodoInput = Union[TodoItemCreate, tuple[str, bool]]
QAInput = Union[ReflectionQACreate, tuple[str, str]]


def _todo_items(items: Iterable[TodoInput]) -> list[TodoItemCreate]:
    return [
        item if isinstance(item, TodoItemCreate)
        else TodoItemCreate(text=item[0], is_done=item[1])
        for item in items
    ]


def _qa_items(items: Iterable[QAInput]) -> list[ReflectionQACreate]:
    return [
        item if isinstance(item, ReflectionQACreate)
        else ReflectionQACreate(question=item[0], answer=item[1])
        for item in items
    ]


class JournalStore:
    """
    Durable CRUD for entries and their child items.

    Structured saves write the entry and its children in one transaction:
    if the entry insert fails, no children are written.
    """

    def __init__(self, worker: DatabaseWorker, settings: Settings):
        self.worker = worker
        self.user_id = settings.LOCAL_USER_ID
        self.default_limit = settings.DEFAULT_FETCH_LIMIT

    def _service(self, db: AsyncSession) -> JournalService:
        return JournalService(db, user_id=self.user_id)

    def _resolve_limit(self, limit: Optional[int]) -> int:
        if limit is None:
            return self.default_limit
        if limit < 0:
            raise ValidationError("Limit must not be negative", field="limit", value=limit)
        return limit

    # -- reads -------------------------------------------------------------

    async def fetch_all_active(self, limit: Optional[int] = None) -> list[EntryRead]:
        limit = self._resolve_limit(limit)
        return await self.worker.submit(
            lambda db: self._service(db).fetch_all_active(limit),
            name="fetch_all_active",
        )

    async def fetch_by_type(
        self,
        entry_type: EntryType,
        limit: Optional[int] = None,
    ) -> list[EntryRead]:
        limit = self._resolve_limit(limit)
        return await self.worker.submit(
            lambda db: self._service(db).fetch_by_type(EntryType(entry_type), limit),
            name="fetch_by_type",
        )

    async def fetch_entry_detail(self, entry_id: str) -> Optional[EntryDetail]:
        return await self.worker.submit(
            lambda db: self._service(db).fetch_entry_detail(entry_id),
            name="fetch_entry_detail",
        )

    async def fetch_todo_items(self, entry_ids: Iterable[str]) -> list[TodoItemRead]:
        ids = list(entry_ids)
        return await self.worker.submit(
            lambda db: self._service(db).fetch_todo_items(ids),
            name="fetch_todo_items",
        )

    async def fetch_goal_items(self, entry_ids: Iterable[str]) -> list[GoalItemRead]:
        ids = list(entry_ids)
        return await self.worker.submit(
            lambda db: self._service(db).fetch_goal_items(ids),
            name="fetch_goal_items",
        )

    # -- creation ----------------------------------------------------------

    async def insert(self, entry: EntryRead) -> None:
        await self.worker.submit(
            lambda db: self._service(db).insert(entry),
            name="insert",
        )

    async def save_new_raw(self, title: Optional[str], body: str) -> EntryRead:
        entry = await self.worker.submit(
            lambda db: self._service(db).save_new_raw(title, body),
            name="save_new_raw",
        )
        logger.debug("Saved raw entry %s", entry.id)
        return entry

    async def save_new_todos(
        self,
        title: Optional[str],
        items: Sequence[TodoInput],
    ) -> EntryRead:
        todos = _todo_items(items)
        entry = await self.worker.submit(
            lambda db: self._service(db).save_new_todos(title, todos),
            name="save_new_todos",
        )
        logger.debug("Saved todos entry %s with %d items", entry.id, len(todos))
        return entry

    async def save_new_goals(self, title: Optional[str], bullets: Sequence[str]) -> EntryRead:
        bullets = list(bullets)
        entry = await self.worker.submit(
            lambda db: self._service(db).save_new_goals(title, bullets),
            name="save_new_goals",
        )
        logger.debug("Saved goals entry %s with %d bullets", entry.id, len(bullets))
        return entry

    async def save_new_reflection(
        self,
        title: Optional[str],
        qas: Sequence[QAInput],
    ) -> EntryRead:
        pairs = _qa_items(qas)
        entry = await self.worker.submit(
            lambda db: self._service(db).save_new_reflection(title, pairs),
            name="save_new_reflection",
        )
        logger.debug("Saved reflection entry %s with %d Q&As", entry.id, len(pairs))
        return entry

    # -- updates -----------------------------------------------------------

    async def update_entry_meta(self, entry_id: str, title: Optional[str], text: str) -> None:
        await self.worker.submit(
            lambda db: self._service(db).update_entry_meta(entry_id, title, text),
            name="update_entry_meta",
        )

    async def update_entry_date(self, entry_id: str, created_at: datetime) -> None:
        await self.worker.submit(
            lambda db: self._service(db).update_entry_date(entry_id, created_at),
            name="update_entry_date",
        )

    async def update_todo_item(self, item_id: int, is_done: bool) -> None:
        await self.worker.submit(
            lambda db: self._service(db).update_todo_item(item_id, is_done),
            name="update_todo_item",
        )

    async def update_goal_bullet(self, item_id: int, bullet: str) -> None:
        await self.worker.submit(
            lambda db: self._service(db).update_goal_bullet(item_id, bullet),
            name="update_goal_bullet",
        )

    async def replace_todo_items(self, entry_id: str, items: Sequence[TodoInput]) -> None:
        todos = _todo_items(items)
        await self.worker.submit(
            lambda db: self._service(db).replace_todo_items(entry_id, todos),
            name="replace_todo_items",
        )

    async def replace_goal_items(self, entry_id: str, bullets: Sequence[str]) -> None:
        bullets = list(bullets)
        await self.worker.submit(
            lambda db: self._service(db).replace_goal_items(entry_id, bullets),
            name="replace_goal_items",
        )

    async def update_reflection_qas(self, entry_id: str, items: Sequence[QAInput]) -> None:
        pairs = _qa_items(items)
        await self.worker.submit(
            lambda db: self._service(db).update_reflection_qas(entry_id, pairs),
            name="update_reflection_qas",
        )

    async def soft_delete_entry(self, entry_id: str) -> None:
        await self.worker.submit(
            lambda db: self._service(db).soft_delete_entry(entry_id),
            name="soft_delete_entry",
        )
