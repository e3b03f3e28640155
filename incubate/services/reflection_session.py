"""
Reflection Session
==================

View-model for one daily reflection. Holds the conversation and the
insights behind it, feeds user turns through the conversation state
machine, and paces Inky's replies.

UI timing lives only in ``ResponsePacer``; stage logic lives in
``incubate.services.conversation``.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional

from incubate.config import Settings
from incubate.core.errors import AppException, user_facing_message
from incubate.models.journal import EntryType
from incubate.schemas.journal import EntryRead, GoalItemRead, ReflectionQACreate, TodoItemRead
from incubate.schemas.reflection import (
    ConversationMessage,
    ConversationStage,
    DailyReflection,
    GrowthInsight,
    MessageSender,
    MessageType,
)
from incubate.services import conversation
from incubate.services.insights import (
    InsightEngine,
    generate_demo_entries,
    generate_demo_goal_items,
    generate_demo_todo_items,
)
from incubate.services.journal_store import JournalStore
from incubate.services.sentiment import SentimentAnalyzer, detect_emotional_needs
from incubate.utils.helpers import utc_now

logger = logging.getLogger(__name__)

RECENT_KEYWORD_ENTRIES = 10
RECENT_KEYWORD_COUNT = 3


class ResponsePacer:
    """Waits a random "thinking" delay before Inky replies."""

    def __init__(
        self,
        min_delay: float = 1.0,
        max_delay: float = 3.0,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.rng = rng or random.Random()
        self.sleep = sleep

    def next_delay(self) -> float:
        if self.max_delay <= self.min_delay:
            return self.min_delay
        return self.rng.uniform(self.min_delay, self.max_delay)

    async def pause(self) -> None:
        delay = self.next_delay()
        if delay > 0:
            await self.sleep(delay)

    @classmethod
    def from_settings(cls, settings: Settings, rng: Optional[random.Random] = None) -> "ResponsePacer":
        return cls(settings.THINKING_DELAY_MIN_SECS, settings.THINKING_DELAY_MAX_SECS, rng=rng)


class ReflectionSession:
    """
    Today's reflection conversation.

    Storage errors never escape the public methods: they are logged and
    exposed through ``error_message``.
    """

    def __init__(
        self,
        store: JournalStore,
        analyzer: SentimentAnalyzer,
        insight_engine: InsightEngine,
        settings: Settings,
        pacer: Optional[ResponsePacer] = None,
        rng: Optional[random.Random] = None,
    ):
        self.store = store
        self.analyzer = analyzer
        self.insight_engine = insight_engine
        self.settings = settings
        self.rng = rng or random.Random()
        self.pacer = pacer or ResponsePacer.from_settings(settings, rng=self.rng)

        self.reflection = DailyReflection(date=utc_now().date())
        self.stage = ConversationStage.GREETING
        self.insights: list[GrowthInsight] = []
        self.weekly_momentum = 0.0
        self.recent_keywords: list[str] = []
        self.is_loading = False
        self.error_message: Optional[str] = None
        self.saved_entry_id: Optional[str] = None
        self._turn_lock = asyncio.Lock()

    @property
    def showing_error(self) -> bool:
        return self.error_message is not None

    @property
    def is_completed(self) -> bool:
        return self.stage == ConversationStage.COMPLETED

    @property
    def stage_title(self) -> str:
        return self.stage.display_name

    # -- public API --------------------------------------------------------

    async def start(self) -> None:
        """Post the greeting (for a fresh conversation) and load insights."""
        if not self.reflection.conversation:
            self.stage = ConversationStage.GREETING
            greeting = conversation.opening_message(self.rng)
            self._add_message(MessageSender.INKY, greeting.content, greeting.message_type)

        await self.generate_insights()

    async def send_user_message(self, content: str) -> None:
        """
        Record a user turn and, after a pause, Inky's reply.

        Turns are serialised: a message sent while Inky is still
        "thinking" waits for the previous turn to finish.
        """
        content = content.strip()
        if not content:
            return

        async with self._turn_lock:
            if self.is_completed:
                return
            await self._take_turn(content)

    async def _take_turn(self, content: str) -> None:
        self._add_message(MessageSender.USER, content)

        context = conversation.ConversationContext(
            sentiment=self.analyzer.analyze_enhanced_sentiment(content),
            needs=detect_emotional_needs(content),
            insights=self.insights,
            recent_keywords=self.recent_keywords,
            weekly_momentum=self.weekly_momentum,
            conversation_length=len(self.reflection.conversation),
        )
        transition = conversation.advance(self.stage, content, context, self.rng)
        if not transition.advanced:
            return

        await self.pacer.pause()

        self.stage = transition.stage
        logger.debug("Reflection moved to %s", self.stage.display_name)
        self._add_message(MessageSender.INKY, transition.reply.content, transition.reply.message_type)

        if transition.stage == ConversationStage.COMPLETED:
            await self._complete(transition.growth_score)

    async def generate_insights(self) -> None:
        """Analyse stored entries (or demo data if there are none)."""
        self.is_loading = True
        try:
            entries, todo_items, goal_items = await self._load_journal()

            self.insights = self.insight_engine.generate_insights(entries, todo_items, goal_items)
            self.weekly_momentum = self.insight_engine.calculate_weekly_growth_momentum(entries)
            self.recent_keywords = self._recent_keywords(entries)
        except AppException as exc:
            logger.error("Failed to generate insights: %s", exc)
            self.error_message = f"Failed to generate insights: {user_facing_message(exc)}"
        finally:
            self.is_loading = False

    def dismiss_error(self) -> None:
        self.error_message = None

    # -- internals ---------------------------------------------------------

    async def _load_journal(
        self,
    ) -> tuple[list[EntryRead], list[TodoItemRead], list[GoalItemRead]]:
        entries = await self.store.fetch_all_active()

        if not entries and self.settings.USE_DEMO_DATA_WHEN_EMPTY:
            logger.info("Journal is empty; generating insights from demo data")
            entries = generate_demo_entries()
            todo_items = generate_demo_todo_items(
                [entry.id for entry in entries if entry.type == EntryType.TODOS]
            )
            goal_items = generate_demo_goal_items(
                [entry.id for entry in entries if entry.type == EntryType.GOALS]
            )
            return entries, todo_items, goal_items

        todo_items = await self.store.fetch_todo_items(
            entry.id for entry in entries if entry.type == EntryType.TODOS
        )
        goal_items = await self.store.fetch_goal_items(
            entry.id for entry in entries if entry.type == EntryType.GOALS
        )
        return entries, todo_items, goal_items

    def _recent_keywords(self, entries: list[EntryRead]) -> list[str]:
        raw_texts = [
            entry.text for entry in entries if entry.type == EntryType.RAW
        ][:RECENT_KEYWORD_ENTRIES]
        if not raw_texts:
            return []
        return self.analyzer.extract_keywords(" ".join(raw_texts), RECENT_KEYWORD_COUNT)

    def _add_message(
        self,
        sender: MessageSender,
        content: str,
        message_type: MessageType = MessageType.TEXT,
    ) -> None:
        self.reflection.conversation.append(
            ConversationMessage(sender=sender, content=content, message_type=message_type)
        )

    def question_answer_pairs(self) -> list[ReflectionQACreate]:
        """Each Inky question paired with the user reply that followed it."""
        pairs: list[ReflectionQACreate] = []
        messages = self.reflection.conversation
        for current, following in zip(messages, messages[1:]):
            if current.sender == MessageSender.INKY and following.sender == MessageSender.USER:
                pairs.append(ReflectionQACreate(question=current.content, answer=following.content))
        return pairs

    async def _complete(self, growth_score: Optional[int]) -> None:
        self.reflection.growth_score = growth_score
        self.reflection.is_completed = True
        logger.info("Daily reflection completed with score: %s", growth_score)

        if not self.settings.PERSIST_COMPLETED_REFLECTIONS:
            return

        title = f"Daily Reflection {self.reflection.date.isoformat()}"
        try:
            entry = await self.store.save_new_reflection(title, self.question_answer_pairs())
        except AppException as exc:
            logger.error("Failed to save reflection: %s", exc)
            self.error_message = f"Failed to save reflection: {user_facing_message(exc)}"
            return
        self.saved_entry_id = entry.id
