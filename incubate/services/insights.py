"""
Insight Service
===============

Pattern detection over recent journal entries. Each detector applies a
fixed threshold to one statistic over a trailing window (30 days by
default) and either emits a canned ``GrowthInsight`` or nothing.

Also provides the chart data for the insights screen and the demo data
shown when the journal is still empty.
"""

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional, Sequence

from incubate.models.journal import EntryType
from incubate.schemas.journal import EntryRead, GoalItemRead, TodoItemRead
from incubate.schemas.reflection import GrowthInsight, InsightCategory, MonthlyScore
from incubate.services.sentiment import NEUTRAL_SCORE, SentimentAnalyzer, calculate_trend
from incubate.utils.helpers import generate_id, utc_now

logger = logging.getLogger(__name__)


HIGH_COMPLETION_RATE = 0.7
LOW_COMPLETION_RATE = 0.3
TREND_THRESHOLD = 0.1
MIN_TREND_ENTRIES = 3
POSITIVE_SENTIMENT = 0.6
GOAL_CORRELATION_THRESHOLD = 0.3
MOMENTUM_DAYS = 7

GOAL_KEYWORDS = ("goal", "target", "achieve", "progress", "milestone", "success")

MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


class InsightEngine:
    """Turns entries and their child items into growth insights."""

    def __init__(
        self,
        analyzer: SentimentAnalyzer,
        window_days: int = 30,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.analyzer = analyzer
        self.window_days = window_days
        self.clock = clock

    def _recent(self, entries: Iterable[EntryRead], days: Optional[int] = None) -> list[EntryRead]:
        cutoff = self.clock() - timedelta(days=days or self.window_days)
        return [entry for entry in entries if entry.created_at >= cutoff]

    # -- detectors ---------------------------------------------------------

    def detect_productivity_patterns(
        self,
        entries: Sequence[EntryRead],
        todo_items: Sequence[TodoItemRead],
    ) -> Optional[GrowthInsight]:
        """Flag very high or very low to-do completion over the window."""
        if not entries:
            return None

        recent_entries = self._recent(entries)
        recent_ids = {entry.id for entry in recent_entries}
        recent_todos = [todo for todo in todo_items if todo.entry_id in recent_ids]
        if not recent_todos:
            return None

        completion_rate = sum(1 for todo in recent_todos if todo.is_done) / len(recent_todos)
        related = [entry.id for entry in recent_entries]

        if completion_rate >= HIGH_COMPLETION_RATE:
            return GrowthInsight(
                title="High Productivity Streak!",
                description=(
                    f"You've been completing {int(completion_rate * 100)}% of your todos "
                    "in the last 30 days. This shows great focus and follow-through!"
                ),
                category=InsightCategory.PRODUCTIVITY,
                confidence=completion_rate,
                related_entries=related,
            )
        if completion_rate <= LOW_COMPLETION_RATE:
            return GrowthInsight(
                title="Room for Growth",
                description=(
                    f"You're completing {int(completion_rate * 100)}% of your todos. "
                    "Consider breaking down larger tasks or setting more achievable daily goals."
                ),
                category=InsightCategory.PRODUCTIVITY,
                confidence=1.0 - completion_rate,
                related_entries=related,
            )
        return None

    def detect_sentiment_trends(self, entries: Sequence[EntryRead]) -> Optional[GrowthInsight]:
        """Flag a rising or falling sentiment slope across recent raw entries."""
        if len(entries) < MIN_TREND_ENTRIES:
            return None

        recent = [entry for entry in self._recent(entries) if entry.type == EntryType.RAW]
        if len(recent) < MIN_TREND_ENTRIES:
            return None

        recent.sort(key=lambda entry: entry.created_at)
        trend = calculate_trend([self.analyzer.analyze_sentiment(entry.text) for entry in recent])
        related = [entry.id for entry in recent]

        if trend > TREND_THRESHOLD:
            return GrowthInsight(
                title="Positive Momentum Building!",
                description=(
                    "Your journal entries show an upward trend in positive sentiment. "
                    "You're developing a more optimistic outlook!"
                ),
                category=InsightCategory.SENTIMENT,
                confidence=min(trend * 2, 1.0),
                related_entries=related,
            )
        if trend < -TREND_THRESHOLD:
            return GrowthInsight(
                title="Navigating Challenges",
                description=(
                    "Your recent entries suggest you're working through some difficulties. "
                    "Remember, growth often comes from challenging times."
                ),
                category=InsightCategory.SENTIMENT,
                confidence=min(abs(trend) * 2, 1.0),
                related_entries=related,
            )
        return None

    def detect_goal_progress_correlation(
        self,
        entries: Sequence[EntryRead],
        goal_items: Sequence[GoalItemRead],
    ) -> Optional[GrowthInsight]:
        """Flag when upbeat raw entries keep mentioning goals."""
        if not entries:
            return None

        recent = self._recent(entries)
        if not recent:
            return None

        goal_mentions = [
            entry for entry in recent
            if entry.type == EntryType.RAW
            and self.analyzer.analyze_sentiment(entry.text) > POSITIVE_SENTIMENT
            and any(keyword in entry.text.lower() for keyword in GOAL_KEYWORDS)
        ]
        if not goal_mentions:
            return None

        correlation = len(goal_mentions) / len(recent)
        if correlation <= GOAL_CORRELATION_THRESHOLD:
            return None

        return GrowthInsight(
            title="Goals Fueling Positivity!",
            description=(
                "When you focus on your goals, your mood tends to improve. "
                f"{len(goal_mentions)} out of {len(recent)} positive entries "
                "mention goal-related topics."
            ),
            category=InsightCategory.GOAL_PROGRESS,
            confidence=correlation,
            related_entries=[entry.id for entry in goal_mentions],
        )

    def generate_insights(
        self,
        entries: Sequence[EntryRead],
        todo_items: Sequence[TodoItemRead],
        goal_items: Sequence[GoalItemRead],
    ) -> list[GrowthInsight]:
        """Run every detector, keeping the ones that fired."""
        candidates = (
            self.detect_productivity_patterns(entries, todo_items),
            self.detect_sentiment_trends(entries),
            self.detect_goal_progress_correlation(entries, goal_items),
        )
        insights = [insight for insight in candidates if insight is not None]
        logger.debug("Generated %d insights from %d entries", len(insights), len(entries))
        return insights

    # -- aggregates --------------------------------------------------------

    def calculate_weekly_growth_momentum(self, entries: Sequence[EntryRead]) -> float:
        """Mean sentiment of the last 7 days minus that of the 7 days before."""
        now = self.clock()
        week_ago = now - timedelta(days=MOMENTUM_DAYS)
        two_weeks_ago = now - timedelta(days=2 * MOMENTUM_DAYS)

        this_week = [entry for entry in entries if entry.created_at >= week_ago]
        last_week = [
            entry for entry in entries
            if two_weeks_ago <= entry.created_at < week_ago
        ]

        return self._mean_sentiment(this_week) - self._mean_sentiment(last_week)

    def _mean_sentiment(self, entries: Sequence[EntryRead]) -> float:
        if not entries:
            return NEUTRAL_SCORE
        return sum(self.analyzer.analyze_sentiment(entry.text) for entry in entries) / len(entries)

    def monthly_high_moments(
        self,
        entries: Sequence[EntryRead],
        months: int = 6,
    ) -> list[MonthlyScore]:
        """
        Percentage of positive raw entries per month, oldest month first.

        Months without raw entries score 0.
        """
        now = self.clock()
        year, month = now.year, now.month
        buckets: list[tuple[int, int]] = []
        for _ in range(months):
            buckets.append((year, month))
            month -= 1
            if month == 0:
                year, month = year - 1, 12
        buckets.reverse()

        totals: Counter[tuple[int, int]] = Counter()
        positives: Counter[tuple[int, int]] = Counter()
        for entry in entries:
            if entry.type != EntryType.RAW:
                continue
            key = (entry.created_at.year, entry.created_at.month)
            totals[key] += 1
            if self.analyzer.analyze_enhanced_sentiment(entry.text) > POSITIVE_SENTIMENT:
                positives[key] += 1

        return [
            MonthlyScore(
                month=MONTH_LABELS[m - 1],
                score=round(100 * positives[(y, m)] / totals[(y, m)]) if totals[(y, m)] else 0,
            )
            for y, m in buckets
        ]

    def top_themes(self, entries: Sequence[EntryRead], count: int = 4) -> list[str]:
        """Most frequent keywords across recent raw entries, title-cased."""
        recent_text = " ".join(
            entry.text for entry in self._recent(entries) if entry.type == EntryType.RAW
        )
        return [word.title() for word in self.analyzer.extract_keywords(recent_text, count)]


# ---------------------------------------------------------------------------
# Demo data
# ---------------------------------------------------------------------------

DEMO_USER_ID = "demo-user"

DEMO_RAW_TEXTS = (
    "Today was amazing! I accomplished so much and felt really productive.",
    "Feeling grateful for the small wins today. Every step forward counts.",
    "Had some challenges but I'm learning to navigate them better.",
    "Feeling energized and motivated to tackle my goals.",
    "Reflecting on my progress and feeling proud of how far I've come.",
    "Today was a bit challenging but I'm staying positive.",
    "Celebrating another day of growth and self-improvement.",
    "Feeling overwhelmed but reminding myself that this too shall pass.",
    "Great energy today! Everything seems to be falling into place.",
    "Taking time to appreciate the journey, not just the destination.",
)

DEMO_TODOS = (
    "Complete morning routine",
    "Review daily goals",
    "Take a short break",
    "Reflect on progress",
    "Plan tomorrow's priorities",
)

DEMO_GOALS = (
    "Improve daily productivity",
    "Build consistent habits",
    "Learn new skills",
    "Maintain work-life balance",
    "Grow personal relationships",
)


def _demo_entry(
    entry_type: EntryType,
    created_at: datetime,
    text: str = "",
    title: Optional[str] = None,
) -> EntryRead:
    return EntryRead(
        id=generate_id(),
        user_id=DEMO_USER_ID,
        type=entry_type,
        title=title,
        text=text,
        tags=["demo", entry_type.value],
        created_at=created_at,
        updated_at=created_at,
    )


def generate_demo_entries(now: Optional[datetime] = None) -> list[EntryRead]:
    """30 days of raw notes, 15 to-do lists and 10 goal lists, one per day back from ``now``."""
    now = now or utc_now()
    entries = [
        _demo_entry(EntryType.RAW, now - timedelta(days=i), text=DEMO_RAW_TEXTS[i % len(DEMO_RAW_TEXTS)])
        for i in range(30)
    ]
    entries += [
        _demo_entry(EntryType.TODOS, now - timedelta(days=i), title=f"Daily Tasks {i + 1}")
        for i in range(15)
    ]
    entries += [
        _demo_entry(EntryType.GOALS, now - timedelta(days=i), title=f"Weekly Goals {i + 1}")
        for i in range(10)
    ]
    return entries


def generate_demo_todo_items(entry_ids: Sequence[str]) -> list[TodoItemRead]:
    """Five to-dos per entry; the first ten entries have theirs done."""
    items: list[TodoItemRead] = []
    for index, entry_id in enumerate(entry_ids):
        for position, text in enumerate(DEMO_TODOS):
            items.append(
                TodoItemRead(
                    id=len(items) + 1,
                    entry_id=entry_id,
                    position=position,
                    text=text,
                    is_done=index < 10,
                )
            )
    return items


def generate_demo_goal_items(entry_ids: Sequence[str]) -> list[GoalItemRead]:
    """Five goal bullets per entry."""
    items: list[GoalItemRead] = []
    for entry_id in entry_ids:
        for position, bullet in enumerate(DEMO_GOALS):
            items.append(
                GoalItemRead(
                    id=len(items) + 1,
                    entry_id=entry_id,
                    position=position,
                    bullet=bullet,
                )
            )
    return items
