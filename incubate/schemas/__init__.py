"""
Pydantic Schemas
================

Value types exchanged between the storage, analysis and reflection layers.
"""

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
from incubate.schemas.profile import UserProfile
from incubate.schemas.reflection import (
    ConversationMessage,
    ConversationStage,
    DailyReflection,
    GrowthInsight,
    InsightCategory,
    MessageSender,
    MessageType,
    MonthlyScore,
)

__all__ = [
    "ConversationMessage",
    "ConversationStage",
    "DailyReflection",
    "EntryDetail",
    "EntryRead",
    "GoalItemRead",
    "GoalsDetail",
    "GrowthInsight",
    "InsightCategory",
    "MessageSender",
    "MessageType",
    "MonthlyScore",
    "RawDetail",
    "ReflectionDetail",
    "ReflectionQACreate",
    "ReflectionQARead",
    "TodoItemCreate",
    "TodoItemRead",
    "TodosDetail",
    "UserProfile",
]
