"""Core types and DTOs for the brand analysis engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Platform(str, Enum):
    """Answer engines a keyword can be analyzed against."""

    CHATGPT = "ChatGPT"
    PERPLEXITY = "Perplexity"
    CLAUDE = "Claude"
    GEMINI = "Gemini"
    GOOGLE_AI = "Google AI"

    @property
    def visibility_field(self) -> str | None:
        """Keyword column holding this platform's visibility score (Google AI has none)."""
        return _VISIBILITY_FIELDS.get(self)


_VISIBILITY_FIELDS: dict[Platform, str] = {
    Platform.CHATGPT: "visibility_chatgpt",
    Platform.PERPLEXITY: "visibility_perplexity",
    Platform.CLAUDE: "visibility_claude",
    Platform.GEMINI: "visibility_gemini",
}

# Keyword visibility columns, in dashboard order
VISIBILITY_FIELDS: tuple[str, ...] = tuple(_VISIBILITY_FIELDS.values())


class BrandSentiment(str, Enum):
    """5-point sentiment toward the tracked brand."""

    VERY_POSITIVE = "Very Positive"
    POSITIVE = "Positive"
    NEUTRAL = "Neutral"
    NEGATIVE = "Negative"
    VERY_NEGATIVE = "Very Negative"


class OverallSentiment(str, Enum):
    """3-point sentiment of the answer as a whole."""

    POSITIVE = "Positive"
    NEUTRAL = "Neutral"
    NEGATIVE = "Negative"


class KeywordCategory(str, Enum):
    GENERAL = "General"
    GAMBLING = "Gambling"
    CRYPTOCURRENCY = "Cryptocurrency"
    SPORTS_BETTING = "Sports Betting"
    CASINO_GAMES = "Casino Games"
    PROMOTIONS = "Promotions"
    BANKING = "Banking"
    SUPPORT = "Support"


class KeywordStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    ARCHIVED = "archived"


# ---------------------------------------------------------------------------
# Data containers
# ---------------------------------------------------------------------------


@dataclass
class Citation:
    """A URL found in an answer. Never dereferenced."""

    url: str = ""
    position: int = 0  # 1-based extraction order
    title: str = ""

    def to_dict(self) -> dict:
        return {"url": self.url, "position": self.position, "title": self.title}


@dataclass
class ClassifiedAnswer:
    """All lexicon signals extracted from one raw answer."""

    mentioned: bool = False
    brand_sentiment: BrandSentiment = BrandSentiment.NEUTRAL
    overall_sentiment: OverallSentiment = OverallSentiment.NEUTRAL
    confidence_score: float = 0.5
    word_count: int = 0
    topics: list[str] = field(default_factory=list)
    citations: list[Citation] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "stakeMentioned": self.mentioned,
            "brandSentiment": self.brand_sentiment.value,
            "overallSentiment": self.overall_sentiment.value,
            "confidenceScore": self.confidence_score,
            "wordCount": self.word_count,
            "keyTopics": list(self.topics),
            "citations": [c.to_dict() for c in self.citations],
        }
