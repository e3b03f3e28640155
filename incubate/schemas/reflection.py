"""
Reflection Schemas
==================

Value types for the daily reflection conversation and the insights
surfaced alongside it.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional
import uuid

from pydantic import BaseModel, Field

from incubate.utils.helpers import utc_now


def _new_id() -> str:
    return str(uuid.uuid4())


class MessageSender(str, Enum):
    """Who wrote a conversation message."""
    USER = "user"
    INKY = "inky"


class MessageType(str, Enum):
    """How an assistant message should be presented."""
    TEXT = "text"
    QUESTION = "question"
    INSIGHT = "insight"
    CELEBRATION = "celebration"


class InsightCategory(str, Enum):
    """Categories of generated growth insight."""
    SENTIMENT = "sentiment"
    PRODUCTIVITY = "productivity"
    GOAL_PROGRESS = "goal_progress"
    PATTERNS = "patterns"
    MOMENTUM = "momentum"


class ConversationStage(str, Enum):
    """Steps of the daily reflection, in order."""
    GREETING = "greeting"
    CONTEXTUAL = "contextual"
    GOAL_SETTING = "goal_setting"
    COMPLETED = "completed"

    @property
    def display_name(self) -> str:
        return STAGE_TITLES[self]


STAGE_TITLES = {
    ConversationStage.GREETING: "Daily Check-in",
    ConversationStage.CONTEXTUAL: "Insights & Patterns",
    ConversationStage.GOAL_SETTING: "Looking Forward",
    ConversationStage.COMPLETED: "Complete",
}


class ConversationMessage(BaseModel):
    """One message in a reflection conversation."""

    id: str = Field(default_factory=_new_id)
    timestamp: datetime = Field(default_factory=utc_now)
    sender: MessageSender
    content: str
    message_type: MessageType = MessageType.TEXT


class DailyReflection(BaseModel):
    """A single day's reflection session."""

    id: str = Field(default_factory=_new_id)
    date: date
    conversation: list[ConversationMessage] = Field(default_factory=list)
    is_completed: bool = False
    growth_score: Optional[int] = Field(default=None, ge=1, le=10)


class GrowthInsight(BaseModel):
    """A canned insight triggered by a statistic over recent entries."""

    id: str = Field(default_factory=_new_id)
    title: str
    description: str
    category: InsightCategory
    confidence: float = Field(ge=0.0, le=1.0)
    related_entries: list[str] = Field(default_factory=list)


class MonthlyScore(BaseModel):
    """Share of positive entries in one calendar month, 0-100."""

    month: str
    score: int = Field(ge=0, le=100)
