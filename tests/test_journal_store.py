"""
Journal Store Tests
===================

End-to-end tests against a real SQLite file:
- Raw, to-do, goal and reflection saves and their detail variants
- Soft delete hides entries but keeps children
- Dense child positions and replace-in-place semantics
- Ordering, limits and type filtering
- Upsert by id
- Corrupt stored tags
- Structured saves are all-or-nothing
- Updates on missing rows raise NotFoundError
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from incubate.core.errors import ErrorCodes, NotFoundError, StorageError, ValidationError
from incubate.models.journal import EntryType
from incubate.schemas.journal import (
    EntryRead,
    GoalsDetail,
    RawDetail,
    ReflectionDetail,
    ReflectionQACreate,
    TodoItemCreate,
    TodosDetail,
)
from incubate.services.journal_service import JournalService
from incubate.utils.helpers import generate_id


BASE_TIME = datetime(2026, 2, 10, 9, 30, tzinfo=timezone.utc)


def _make_entry(
    *,
    entry_type: EntryType = EntryType.RAW,
    created_at: datetime = BASE_TIME,
    text_value: str = "",
    title: str | None = None,
    entry_id: str | None = None,
) -> EntryRead:
    """Build an entry value for direct insertion."""
    return EntryRead(
        id=entry_id or generate_id(),
        user_id="local-user",
        type=entry_type,
        title=title,
        text=text_value,
        tags=["test"],
        created_at=created_at,
        updated_at=created_at,
    )


# ---------------------------------------------------------------------------
# Saves and detail
# ---------------------------------------------------------------------------

class TestSaveAndFetch:
    """Tests for structured saves and fetch_entry_detail."""

    @pytest.mark.asyncio
    async def test_raw_round_trip(self, store):
        """A saved raw note comes back as a RawDetail with the same body."""
        entry = await store.save_new_raw("Morning", "Feeling great today")

        detail = await store.fetch_entry_detail(entry.id)

        assert isinstance(detail, RawDetail)
        assert detail.kind == "raw"
        assert detail.id == entry.id
        assert detail.entry.title == "Morning"
        assert detail.entry.text == "Feeling great today"
        assert detail.entry.type == EntryType.RAW
        assert detail.entry.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_entry_ids_are_uppercase_uuids(self, store):
        entry = await store.save_new_raw(None, "x")

        assert entry.id == entry.id.upper()
        assert len(entry.id) == 36

    @pytest.mark.asyncio
    async def test_todos_have_dense_positions(self, store):
        """Items are stored at positions 0..N-1 in input order."""
        entry = await store.save_new_todos(
            "Today",
            [("Walk", True), TodoItemCreate(text="Read"), ("Cook", False)],
        )

        detail = await store.fetch_entry_detail(entry.id)

        assert isinstance(detail, TodosDetail)
        assert [item.position for item in detail.items] == [0, 1, 2]
        assert [item.text for item in detail.items] == ["Walk", "Read", "Cook"]
        assert [item.is_done for item in detail.items] == [True, False, False]

    @pytest.mark.asyncio
    async def test_goals_detail(self, store):
        entry = await store.save_new_goals("Week", ["Sleep more", "Ship it"])

        detail = await store.fetch_entry_detail(entry.id)

        assert isinstance(detail, GoalsDetail)
        assert [item.bullet for item in detail.items] == ["Sleep more", "Ship it"]
        assert [item.position for item in detail.items] == [0, 1]

    @pytest.mark.asyncio
    async def test_reflection_detail(self, store):
        entry = await store.save_new_reflection(
            "Evening",
            [("How was today?", "Good"), ReflectionQACreate(question="Why?")],
        )

        detail = await store.fetch_entry_detail(entry.id)

        assert isinstance(detail, ReflectionDetail)
        assert [(qa.question, qa.answer) for qa in detail.qas] == [
            ("How was today?", "Good"),
            ("Why?", ""),
        ]

    @pytest.mark.asyncio
    async def test_untitled_entries_show_their_kind(self, store):
        untitled = await store.save_new_todos(None, [("A", False)])
        blank = await store.save_new_reflection("  ", [])
        titled = await store.save_new_goals("Week", ["Run"])

        assert untitled.display_title == "To-Do's"
        assert blank.display_title == "Reflection"
        assert titled.display_title == "Week"
        assert EntryType.RAW.display_name == "Raw"
        assert EntryType.GOALS.display_name == "Goals"

    @pytest.mark.asyncio
    async def test_missing_entry_returns_none(self, store):
        assert await store.fetch_entry_detail("NOPE") is None

    @pytest.mark.asyncio
    async def test_failed_child_insert_rolls_back_entry(self, store):
        """If writing the children fails, the entry row isn't kept either."""
        error = OperationalError("INSERT INTO todo_items", {}, Exception("disk I/O error"))

        with patch.object(JournalService, "_insert_todo_items", side_effect=error):
            with pytest.raises(StorageError):
                await store.save_new_todos("Broken", [("A", False)])

        assert await store.fetch_all_active() == []

    @pytest.mark.asyncio
    async def test_failed_entry_insert_writes_no_children(self, app, store):
        """A structured save whose entry insert fails leaves no child rows."""
        error = OperationalError("INSERT INTO entries", {}, Exception("disk I/O error"))

        with patch.object(JournalService, "insert", side_effect=error):
            with pytest.raises(StorageError):
                await store.save_new_todos("Broken", [("A", False), ("B", True)])
            with pytest.raises(StorageError):
                await store.save_new_reflection("Broken", [("Q", "A")])

        assert await store.fetch_all_active() == []
        async with app.engine.connect() as conn:
            todo_count = await conn.scalar(text("SELECT COUNT(*) FROM todo_items"))
            qa_count = await conn.scalar(text("SELECT COUNT(*) FROM reflection_qas"))
        assert todo_count == 0
        assert qa_count == 0


# ---------------------------------------------------------------------------
# Soft delete
# ---------------------------------------------------------------------------

class TestSoftDelete:
    """Tests for soft_delete_entry."""

    @pytest.mark.asyncio
    async def test_deleted_entry_is_hidden(self, store):
        entry = await store.save_new_raw(None, "to be removed")

        await store.soft_delete_entry(entry.id)

        assert await store.fetch_entry_detail(entry.id) is None
        assert await store.fetch_all_active() == []
        assert await store.fetch_by_type(EntryType.RAW) == []

    @pytest.mark.asyncio
    async def test_children_survive_soft_delete(self, store):
        entry = await store.save_new_todos("List", [("A", False), ("B", True)])

        await store.soft_delete_entry(entry.id)

        items = await store.fetch_todo_items([entry.id])
        assert [item.text for item in items] == ["A", "B"]


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------

class TestListing:
    """Tests for fetch_all_active and fetch_by_type."""

    @pytest.mark.asyncio
    async def test_newest_first(self, store):
        oldest = _make_entry(created_at=BASE_TIME - timedelta(days=2))
        newest = _make_entry(created_at=BASE_TIME)
        middle = _make_entry(created_at=BASE_TIME - timedelta(days=1))
        for entry in (oldest, newest, middle):
            await store.insert(entry)

        result = await store.fetch_all_active()

        assert [entry.id for entry in result] == [newest.id, middle.id, oldest.id]

    @pytest.mark.asyncio
    async def test_limit(self, store):
        for i in range(5):
            await store.insert(_make_entry(created_at=BASE_TIME - timedelta(hours=i)))

        result = await store.fetch_all_active(limit=2)

        assert len(result) == 2
        assert result[0].created_at == BASE_TIME

    @pytest.mark.asyncio
    async def test_zero_limit_returns_nothing(self, store):
        await store.save_new_raw(None, "note")

        assert await store.fetch_all_active(limit=0) == []
        assert await store.fetch_by_type(EntryType.RAW, limit=0) == []
        assert len(await store.fetch_all_active()) == 1

    @pytest.mark.asyncio
    async def test_negative_limit_is_rejected(self, store):
        with pytest.raises(ValidationError) as exc_info:
            await store.fetch_all_active(limit=-1)

        assert exc_info.value.detail["field"] == "limit"

        with pytest.raises(ValidationError):
            await store.fetch_by_type(EntryType.RAW, limit=-5)

    @pytest.mark.asyncio
    async def test_fetch_by_type(self, store):
        await store.save_new_raw(None, "note")
        goals = await store.save_new_goals("Goals", ["One"])
        await store.save_new_todos("Todos", [("Task", False)])

        result = await store.fetch_by_type(EntryType.GOALS)

        assert [entry.id for entry in result] == [goals.id]

    @pytest.mark.asyncio
    async def test_fetch_children_for_no_entries(self, store):
        assert await store.fetch_todo_items([]) == []
        assert await store.fetch_goal_items([]) == []

    @pytest.mark.asyncio
    async def test_corrupt_tags_decode_to_empty_list(self, app, store):
        entry = await store.save_new_raw(None, "tagged")
        async with app.engine.begin() as conn:
            await conn.execute(
                text("UPDATE entries SET tags = :tags WHERE id = :id"),
                {"tags": "{not json", "id": entry.id},
            )

        result = await store.fetch_all_active()

        assert result[0].tags == []


# ---------------------------------------------------------------------------
# Upsert and updates
# ---------------------------------------------------------------------------

class TestUpdates:
    """Tests for insert-as-upsert and in-place updates."""

    @pytest.mark.asyncio
    async def test_insert_replaces_existing_row(self, store):
        entry = _make_entry(text_value="first")
        await store.insert(entry)

        await store.insert(entry.model_copy(update={"text": "second", "tags": ["a", "b"]}))

        result = await store.fetch_all_active()
        assert len(result) == 1
        assert result[0].text == "second"
        assert result[0].tags == ["a", "b"]

    @pytest.mark.asyncio
    async def test_update_entry_meta(self, store):
        entry = _make_entry(text_value="draft", title="Old")
        await store.insert(entry)

        await store.update_entry_meta(entry.id, "New", "final")

        detail = await store.fetch_entry_detail(entry.id)
        assert detail.entry.title == "New"
        assert detail.entry.text == "final"
        assert detail.entry.created_at == BASE_TIME
        assert detail.entry.updated_at > BASE_TIME

    @pytest.mark.asyncio
    async def test_update_entry_date(self, store):
        entry = await store.save_new_raw(None, "back-dated")
        new_date = BASE_TIME - timedelta(days=30)

        await store.update_entry_date(entry.id, new_date)

        detail = await store.fetch_entry_detail(entry.id)
        assert detail.entry.created_at == new_date

    @pytest.mark.asyncio
    async def test_update_todo_item(self, store):
        entry = await store.save_new_todos("List", [("A", False), ("B", False)])
        items = await store.fetch_todo_items([entry.id])

        await store.update_todo_item(items[1].id, True)

        items = await store.fetch_todo_items([entry.id])
        assert [item.is_done for item in items] == [False, True]

    @pytest.mark.asyncio
    async def test_update_goal_bullet(self, store):
        entry = await store.save_new_goals("Goals", ["Run", "Read"])
        items = await store.fetch_goal_items([entry.id])

        await store.update_goal_bullet(items[0].id, "Run 5k")

        items = await store.fetch_goal_items([entry.id])
        assert [item.bullet for item in items] == ["Run 5k", "Read"]

    @pytest.mark.asyncio
    async def test_replace_todo_items(self, store):
        entry = await store.save_new_todos("List", [("A", False), ("B", False), ("C", False)])

        await store.replace_todo_items(entry.id, [("Z", True)])

        items = await store.fetch_todo_items([entry.id])
        assert [(item.text, item.is_done, item.position) for item in items] == [("Z", True, 0)]

    @pytest.mark.asyncio
    async def test_replace_goal_items(self, store):
        entry = await store.save_new_goals("Goals", ["One"])

        await store.replace_goal_items(entry.id, ["Two", "Three"])

        items = await store.fetch_goal_items([entry.id])
        assert [(item.bullet, item.position) for item in items] == [("Two", 0), ("Three", 1)]

    @pytest.mark.asyncio
    async def test_repeated_qa_updates_do_not_accumulate(self, store):
        """Replacing Q&As many times leaves exactly the latest set."""
        entry = await store.save_new_reflection("Reflection", [("Q", "A")])
        pairs = [("Q1", "A1"), ("Q2", "A2"), ("Q3", "A3")]

        for _ in range(10):
            await store.update_reflection_qas(entry.id, pairs)

        detail = await store.fetch_entry_detail(entry.id)
        assert len(detail.qas) == 3
        assert [qa.position for qa in detail.qas] == [0, 1, 2]
        assert [qa.question for qa in detail.qas] == ["Q1", "Q2", "Q3"]


# ---------------------------------------------------------------------------
# Missing targets
# ---------------------------------------------------------------------------

class TestMissingTargets:
    """Updates aimed at rows that don't exist raise NotFoundError."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "call",
        [
            lambda store: store.update_entry_meta("MISSING", "Title", "text"),
            lambda store: store.update_entry_date("MISSING", BASE_TIME),
            lambda store: store.soft_delete_entry("MISSING"),
            lambda store: store.replace_todo_items("MISSING", [("A", False)]),
            lambda store: store.replace_goal_items("MISSING", ["Run"]),
            lambda store: store.update_reflection_qas("MISSING", [("Q", "A")]),
        ],
    )
    async def test_missing_entry(self, store, call):
        with pytest.raises(NotFoundError) as exc_info:
            await call(store)

        assert exc_info.value.code == ErrorCodes.ENTRY_NOT_FOUND
        assert exc_info.value.detail["id"] == "MISSING"

    @pytest.mark.asyncio
    async def test_missing_items(self, store):
        with pytest.raises(NotFoundError) as exc_info:
            await store.update_todo_item(999, True)
        assert exc_info.value.code == ErrorCodes.ITEM_NOT_FOUND

        with pytest.raises(NotFoundError) as exc_info:
            await store.update_goal_bullet(999, "Run")
        assert exc_info.value.code == ErrorCodes.ITEM_NOT_FOUND

    @pytest.mark.asyncio
    async def test_replace_on_missing_entry_writes_nothing(self, app, store):
        with pytest.raises(NotFoundError):
            await store.replace_todo_items("MISSING", [("A", False), ("B", False)])

        assert await store.fetch_todo_items(["MISSING"]) == []
        async with app.engine.connect() as conn:
            assert await conn.scalar(text("SELECT COUNT(*) FROM todo_items")) == 0

    @pytest.mark.asyncio
    async def test_worker_keeps_serving_after_not_found(self, store):
        with pytest.raises(NotFoundError):
            await store.soft_delete_entry("MISSING")

        entry = await store.save_new_raw(None, "still works")

        assert [e.id for e in await store.fetch_all_active()] == [entry.id]
