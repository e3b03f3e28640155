"""
Services Module
===============

Storage access, text analysis, insight generation and the daily
reflection conversation.
"""

from incubate.services.db_worker import DatabaseWorker
from incubate.services.insights import InsightEngine
from incubate.services.journal_service import JournalService
from incubate.services.journal_store import JournalStore
from incubate.services.profile import ProfileStore
from incubate.services.reflection_session import ReflectionSession, ResponsePacer
from incubate.services.sentiment import EmotionalNeed, SentimentAnalyzer

__all__ = [
    "DatabaseWorker",
    "EmotionalNeed",
    "InsightEngine",
    "JournalService",
    "JournalStore",
    "ProfileStore",
    "ReflectionSession",
    "ResponsePacer",
    "SentimentAnalyzer",
]
