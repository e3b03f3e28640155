"""
Conversation Service
====================

The scripted "Inky" daily reflection as a pure state machine.

``advance(stage, user_message, context, rng)`` returns the next stage and
the one assistant message to append. Nothing here sleeps, stores or reads
the clock; randomness comes only from the ``random.Random`` passed in.

Stages::

    greeting -> contextual -> goal_setting -> completed
"""

import random
from dataclasses import dataclass, field
from typing import Optional, Sequence

from incubate.schemas.reflection import (
    ConversationStage,
    GrowthInsight,
    InsightCategory,
    MessageType,
)
from incubate.services.sentiment import NEUTRAL_SCORE, EmotionalNeed


LOW_SENTIMENT = 0.4
HIGH_SENTIMENT = 0.6
POSITIVE_MOMENTUM = 0.1

GREETINGS = (
    "Good morning! How are you feeling today?",
    "Hello there! Ready to reflect on your day?",
    "Hi! I've been looking at your recent entries. How's everything going?",
    "Welcome back! I noticed some interesting patterns in your journal. Want to chat about them?",
)

FALLBACK_QUESTION = "How has your week been going so far? Any highlights or challenges?"

NEED_QUESTIONS: dict[EmotionalNeed, tuple[str, ...]] = {
    EmotionalNeed.VALIDATION: (
        "That sounds really isolating, and your feelings make complete sense. "
        "What would feeling supported look like for you right now?",
        "I hear you. Feeling unseen is hard. Who or what usually helps you feel understood?",
    ),
    EmotionalNeed.PERSPECTIVE: (
        "It sounds like a lot is weighing on you. If you zoom out a little, "
        "is there one part of today that went even slightly okay?",
        "When everything feels one way, it can help to look for exceptions. "
        "Can you think of a recent moment that didn't fit that pattern?",
    ),
    EmotionalNeed.ENCOURAGEMENT: (
        "You're carrying a lot, and you're still showing up. "
        "What's one small thing that could make tomorrow a little lighter?",
        "It's okay to feel worn out. What has helped you recharge in the past?",
    ),
    EmotionalNeed.CELEBRATION: (
        "That's worth celebrating! What do you think made it possible?",
        "Look at you go! How does it feel to see that effort pay off?",
    ),
}

KEYWORD_QUESTION = (
    "I've noticed \"{keyword}\" coming up a lot in your entries lately. "
    "What's on your mind about it?"
)

SENTIMENT_QUESTIONS = {
    "low": (
        "It sounds like today has been heavy. What's been taking up the most space in your mind?",
        "Thanks for being honest about how you feel. What would help you most right now?",
    ),
    "high": (
        "Love that energy! What's been the best part of your day so far?",
        "You sound upbeat today. What's contributing to that good feeling?",
    ),
}

GOAL_PROMPTS = (
    "Looking ahead, what's one small step you could take tomorrow to move closer to your goals?",
    "If you could accomplish just one thing this week, what would make you feel most proud?",
    "What's a challenge you're facing that you'd like to tackle differently?",
    "How can you make tomorrow even better than today?",
)

GENTLE_GOAL_PROMPTS = (
    "No pressure to fix everything. What's one kind thing you could do for yourself tomorrow?",
    "What's the smallest step that would feel manageable this week?",
)

COMPLETION_MESSAGES = (
    (8, "Amazing work today! You're really building momentum and self-awareness. Keep this energy going!"),
    (6, "Great reflection session! You're making solid progress and staying engaged with your growth journey."),
    (4, "Good effort today! Every reflection builds your self-awareness muscle. Keep showing up!"),
    (1, "Thanks for taking time to reflect today. Every small step counts toward your growth!"),
)


@dataclass(frozen=True)
class ConversationContext:
    """Inputs that steer template selection for one turn."""

    sentiment: float = NEUTRAL_SCORE
    needs: Sequence[EmotionalNeed] = ()
    insights: Sequence[GrowthInsight] = ()
    recent_keywords: Sequence[str] = ()
    weekly_momentum: float = 0.0
    conversation_length: int = 0


@dataclass(frozen=True)
class AssistantReply:
    content: str
    message_type: MessageType = MessageType.QUESTION


@dataclass(frozen=True)
class Transition:
    """Result of one user turn."""

    stage: ConversationStage
    reply: Optional[AssistantReply] = None
    growth_score: Optional[int] = field(default=None)

    @property
    def advanced(self) -> bool:
        return self.reply is not None


NEXT_STAGE = {
    ConversationStage.GREETING: ConversationStage.CONTEXTUAL,
    ConversationStage.CONTEXTUAL: ConversationStage.GOAL_SETTING,
    ConversationStage.GOAL_SETTING: ConversationStage.COMPLETED,
}


def opening_message(rng: random.Random) -> AssistantReply:
    """Greeting posted when a fresh reflection starts."""
    return AssistantReply(rng.choice(GREETINGS), MessageType.QUESTION)


def insight_question(insight: GrowthInsight) -> str:
    if insight.category == InsightCategory.SENTIMENT:
        mood = "improving" if "Positive" in insight.title else "challenging"
        return f"I noticed your mood has been {mood} lately. What do you think is contributing to this?"
    if insight.category == InsightCategory.PRODUCTIVITY:
        effort = "crushing" if "High" in insight.title else "working on"
        return f"You've been {effort} your todos! What's your secret to staying focused?"
    if insight.category == InsightCategory.GOAL_PROGRESS:
        return "Your goals seem to really energize you. What's one goal you're most excited about right now?"
    if insight.category == InsightCategory.PATTERNS:
        return (
            "I'm seeing some interesting patterns in your entries. "
            "What do you think they're telling you about yourself?"
        )
    return "How do you feel about your current momentum? Are you where you want to be?"


def contextual_question(context: ConversationContext, rng: random.Random) -> str:
    """
    Pick the follow-up to the user's first answer.

    Priority: detected emotional need, then the first insight, then the
    most frequent recent keyword, then the sentiment band, then a fallback.
    """
    if context.needs:
        return rng.choice(NEED_QUESTIONS[context.needs[0]])
    if context.insights:
        return insight_question(context.insights[0])
    if context.recent_keywords:
        return KEYWORD_QUESTION.format(keyword=context.recent_keywords[0])
    if context.sentiment < LOW_SENTIMENT:
        return rng.choice(SENTIMENT_QUESTIONS["low"])
    if context.sentiment > HIGH_SENTIMENT:
        return rng.choice(SENTIMENT_QUESTIONS["high"])
    return FALLBACK_QUESTION


def goal_setting_prompt(context: ConversationContext, rng: random.Random) -> str:
    if context.sentiment < LOW_SENTIMENT:
        return rng.choice(GENTLE_GOAL_PROMPTS)
    return rng.choice(GOAL_PROMPTS)


def calculate_growth_score(
    conversation_length: int,
    insight_count: int,
    weekly_momentum: float,
) -> int:
    """
    1-10 rating for a finished reflection.

    Base 5, plus up to 3 for conversation depth, up to 2 for insights and
    1 for positive weekly momentum.
    """
    score = 5
    score += min(conversation_length // 2, 3)
    score += min(insight_count, 2)
    if weekly_momentum > POSITIVE_MOMENTUM:
        score += 1
    return max(1, min(score, 10))


def completion_message(score: int) -> str:
    for threshold, message in COMPLETION_MESSAGES:
        if score >= threshold:
            return message
    return COMPLETION_MESSAGES[-1][1]


def advance(
    stage: ConversationStage,
    user_message: str,
    context: ConversationContext,
    rng: random.Random,
) -> Transition:
    """
    Apply one user turn.

    A blank message, or any message once completed, leaves the stage
    unchanged and produces no reply. Otherwise the stage moves forward by
    exactly one and one reply is produced for the stage entered.
    """
    if not user_message.strip() or stage not in NEXT_STAGE:
        return Transition(stage=stage)

    next_stage = NEXT_STAGE[stage]

    if next_stage == ConversationStage.CONTEXTUAL:
        return Transition(next_stage, AssistantReply(contextual_question(context, rng)))

    if next_stage == ConversationStage.GOAL_SETTING:
        return Transition(next_stage, AssistantReply(goal_setting_prompt(context, rng)))

    score = calculate_growth_score(
        context.conversation_length,
        len(context.insights),
        context.weekly_momentum,
    )
    return Transition(
        next_stage,
        AssistantReply(completion_message(score), MessageType.CELEBRATION),
        growth_score=score,
    )
