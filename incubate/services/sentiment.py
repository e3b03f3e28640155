"""
Sentiment Service
=================

Heuristic text analysis for journal entries:

- Keyword sentiment (positive / negative word counts)
- VADER sentiment via NLTK, rescaled to 0-1
- Enhanced sentiment (base score blended with keyword density and a
  gratitude boost)
- Keyword extraction via NLTK part-of-speech tagging
- Least-squares trend over a series of scores
- Emotional-need detection for the reflection conversation

All scores are in [0.0, 1.0] with 0.5 as neutral. Nothing here touches
storage, so every function is safe to call from anywhere.
"""

import logging
from collections import Counter
from enum import Enum
from typing import Optional, Sequence

import nltk
from nltk.tokenize import RegexpTokenizer

logger = logging.getLogger(__name__)


NEUTRAL_SCORE = 0.5

POSITIVE_WORDS = frozenset({
    "amazing", "great", "awesome", "wonderful", "excellent", "fantastic",
    "happy", "joy", "love", "excited", "motivated", "energized", "grateful",
    "proud", "successful", "accomplished", "productive", "inspired",
    "confident", "optimistic",
})

NEGATIVE_WORDS = frozenset({
    "terrible", "awful", "horrible", "bad", "sad", "angry", "frustrated",
    "disappointed", "worried", "anxious", "stressed", "overwhelmed", "tired",
    "exhausted", "defeated", "hopeless", "lonely", "afraid", "scared",
    "nervous",
})

# Wider vocabularies used only by the enhanced score
ENHANCED_POSITIVE_WORDS = POSITIVE_WORDS | frozenset({
    "joyful", "thankful", "blessed", "content", "hopeful", "calm",
    "peaceful", "relaxed", "good", "better", "glad", "appreciate",
    "appreciative", "progress", "win", "wins", "celebrate", "celebrating",
    "growth", "strong", "energetic", "enjoyed", "fun", "beautiful", "kind",
    "supported", "loved", "satisfied", "achieved", "positive",
})

ENHANCED_NEGATIVE_WORDS = NEGATIVE_WORDS | frozenset({
    "drained", "struggling", "struggle", "disconnected", "difficult",
    "upset", "hurt", "pain", "lost", "stuck", "failure", "failed", "worse",
    "worst", "crying", "tense", "irritated", "annoyed", "miserable",
    "depressed", "regret", "guilty", "ashamed", "panic", "burnout",
    "negative",
})

GRATITUDE_WORDS = frozenset({
    "grateful", "thankful", "blessed", "appreciate", "appreciative",
    "appreciated", "gratitude", "thanks",
})

BASE_WEIGHT = 0.4
BOOST_WEIGHT = 0.6
GRATITUDE_BOOST = 0.3
DENSITY_SCALE = 2.5

KEYWORD_TAG_PREFIXES = ("NN", "JJ")

_tokenizer = RegexpTokenizer(r"[A-Za-z]+(?:'[A-Za-z]+)?")


class EmotionalNeed(str, Enum):
    """What a user message seems to ask of the conversation."""
    VALIDATION = "validation"
    PERSPECTIVE = "perspective"
    ENCOURAGEMENT = "encouragement"
    CELEBRATION = "celebration"


# Literal substrings checked against the lowercased message
EMOTIONAL_NEED_TRIGGERS: dict[EmotionalNeed, tuple[str, ...]] = {
    EmotionalNeed.VALIDATION: (
        "nobody", "no one", "alone", "lonely", "ignored", "invisible",
        "unappreciated", "doesn't care", "don't care",
    ),
    EmotionalNeed.PERSPECTIVE: (
        "always", "never", "everything is", "nothing works", "ruined",
        "worst", "pointless",
    ),
    EmotionalNeed.ENCOURAGEMENT: (
        "give up", "giving up", "tired", "exhausted", "struggling",
        "overwhelmed", "can't", "hard", "difficult",
    ),
    EmotionalNeed.CELEBRATION: (
        "finally", "did it", "proud", "accomplished", "achieved", "nailed",
        "promotion", "finished",
    ),
}


def tokenize(text: str) -> list[str]:
    """Lowercased word tokens."""
    return _tokenizer.tokenize(text.lower())


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def analyze_sentiment(text: str) -> float:
    """
    Keyword sentiment score.

    ``positive / (positive + negative)`` over the fixed word lists, or
    0.5 when the text has no emotional words.
    """
    positive = negative = 0
    for word in tokenize(text):
        if word in POSITIVE_WORDS:
            positive += 1
        elif word in NEGATIVE_WORDS:
            negative += 1

    total = positive + negative
    if total == 0:
        return NEUTRAL_SCORE
    return positive / total


def calculate_trend(values: Sequence[float]) -> float:
    """
    Ordinary least-squares slope of ``values`` against their index.

    Returns 0.0 for fewer than two points.
    """
    n = len(values)
    if n < 2:
        return 0.0

    sum_x = n * (n - 1) / 2
    sum_y = sum(values)
    sum_xy = sum(i * y for i, y in enumerate(values))
    sum_x2 = sum(i * i for i in range(n))

    return (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)


def detect_emotional_needs(text: str) -> list[EmotionalNeed]:
    """Needs whose trigger phrases occur in ``text``, in priority order."""
    lowered = text.lower()
    return [
        need
        for need, triggers in EMOTIONAL_NEED_TRIGGERS.items()
        if any(trigger in lowered for trigger in triggers)
    ]


class SentimentAnalyzer:
    """
    Sentiment and keyword analysis with an optional NLTK backend.

    ``backend`` selects the base score: ``"keywords"`` for the word-count
    ratio, ``"vader"`` for NLTK's VADER compound score. Missing NLTK data
    degrades to neutral scores and empty keyword lists.
    """

    def __init__(self, backend: str = "keywords", auto_download: bool = False):
        self.backend = backend
        self.auto_download = auto_download
        self._vader = None
        self._vader_unavailable = False

    # -- NLTK resources ----------------------------------------------------

    def _ensure_resource(self, path: str, package: str) -> bool:
        try:
            nltk.data.find(path)
            return True
        except LookupError:
            if not self.auto_download:
                return False
        logger.info("Downloading NLTK %s...", package)
        try:
            return bool(nltk.download(package, quiet=True))
        except OSError as exc:
            logger.warning("NLTK download of %s failed: %s", package, exc)
            return False

    def _vader_analyzer(self):
        if self._vader is None and not self._vader_unavailable:
            if not self._ensure_resource("sentiment/vader_lexicon.zip", "vader_lexicon"):
                logger.warning("VADER lexicon not available; using neutral scores")
                self._vader_unavailable = True
                return None
            from nltk.sentiment.vader import SentimentIntensityAnalyzer

            self._vader = SentimentIntensityAnalyzer()
        return self._vader

    # -- scores ------------------------------------------------------------

    def analyze_sentiment(self, text: str) -> float:
        """Keyword sentiment score (see module-level ``analyze_sentiment``)."""
        return analyze_sentiment(text)

    def platform_sentiment(self, text: str) -> float:
        """VADER compound score rescaled from [-1, 1] to [0, 1]."""
        if not text.strip():
            return NEUTRAL_SCORE
        analyzer = self._vader_analyzer()
        if analyzer is None:
            return NEUTRAL_SCORE
        compound = analyzer.polarity_scores(text).get("compound")
        if compound is None:
            return NEUTRAL_SCORE
        return clamp((compound + 1.0) / 2.0)

    def base_sentiment(self, text: str) -> float:
        if self.backend == "vader":
            return self.platform_sentiment(text)
        return self.analyze_sentiment(text)

    def analyze_enhanced_sentiment(self, text: str) -> float:
        """
        Base score blended with keyword density, plus a gratitude boost.

        ``0.4 * base + 0.6 * boost`` where ``boost`` moves away from 0.5 in
        proportion to the net count of emotional words per token. Any
        gratitude word adds 0.3. The result is clamped to [0, 1].
        """
        base = self.base_sentiment(text)
        tokens = tokenize(text)

        if tokens:
            positive = sum(1 for word in tokens if word in ENHANCED_POSITIVE_WORDS)
            negative = sum(1 for word in tokens if word in ENHANCED_NEGATIVE_WORDS)
            boost = clamp(NEUTRAL_SCORE + DENSITY_SCALE * (positive - negative) / len(tokens))
        else:
            boost = NEUTRAL_SCORE

        score = BASE_WEIGHT * base + BOOST_WEIGHT * boost
        if any(word in GRATITUDE_WORDS for word in tokens):
            score += GRATITUDE_BOOST

        return clamp(score)

    # -- keywords ----------------------------------------------------------

    def extract_keywords(self, text: str, max_count: int = 10) -> list[str]:
        """
        Most frequent nouns and adjectives in ``text``, lowercased.

        Ties keep first-seen order. Returns an empty list when the POS
        tagger data isn't installed.
        """
        tokens = _tokenizer.tokenize(text)
        if not tokens or max_count <= 0:
            return []

        tagged = self._pos_tag(tokens)
        if tagged is None:
            return []

        counts: Counter[str] = Counter()
        for word, tag in tagged:
            if tag.startswith(KEYWORD_TAG_PREFIXES) and len(word) > 1:
                counts[word.lower()] += 1

        return [word for word, _ in counts.most_common(max_count)]

    def _pos_tag(self, tokens: list[str]) -> Optional[list[tuple[str, str]]]:
        try:
            return nltk.pos_tag(tokens)
        except LookupError:
            if self.auto_download and self._ensure_resource(
                "taggers/averaged_perceptron_tagger_eng/", "averaged_perceptron_tagger_eng"
            ):
                try:
                    return nltk.pos_tag(tokens)
                except LookupError:
                    pass
            logger.warning("NLTK POS tagger data not available; no keywords extracted")
            return None
