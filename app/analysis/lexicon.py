"""Lexicons driving the answer classifier.

A ``Lexicon`` is immutable data: brand patterns, weighted sentiment word lists,
confidence/uncertainty phrases and topic vocabularies. The classifier takes one
as a parameter, so alternative lexicons can be swapped in without touching the
scoring rules.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache

# ---------------------------------------------------------------------------
# Default word lists
# ---------------------------------------------------------------------------

VERY_POSITIVE_WORDS = ("excellent", "outstanding", "amazing", "exceptional", "superior", "best")
POSITIVE_WORDS = ("good", "great", "solid", "reliable", "trusted", "popular", "recommended")
NEGATIVE_WORDS = ("bad", "poor", "terrible", "awful", "unreliable", "risky")
VERY_NEGATIVE_WORDS = ("scam", "fraud", "dangerous", "avoid", "illegal", "banned")

OVERALL_POSITIVE_WORDS = (
    "good",
    "great",
    "excellent",
    "amazing",
    "wonderful",
    "fantastic",
    "outstanding",
    "positive",
    "beneficial",
)
OVERALL_NEGATIVE_WORDS = (
    "bad",
    "terrible",
    "awful",
    "horrible",
    "poor",
    "disappointing",
    "negative",
    "problematic",
    "concerning",
)

CONFIDENCE_PHRASES = (
    "definitely",
    "certainly",
    "clearly",
    "obviously",
    "according to",
    "research shows",
    "studies indicate",
    "data suggests",
    "evidence shows",
)
UNCERTAINTY_PHRASES = (
    "maybe",
    "perhaps",
    "possibly",
    "might",
    "could",
    "seems",
    "appears",
    "allegedly",
    "reportedly",
)

TOPIC_VOCABULARIES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Gambling", ("betting", "casino", "gambling", "poker", "slots", "sports betting")),
    ("Crypto", ("bitcoin", "cryptocurrency", "crypto", "blockchain", "digital currency")),
)

# Brand pattern templates; {brand} is the regex-escaped brand name
_BRAND_TEMPLATES = (
    r"\b{brand}\b",
    r"\b{brand}\.com\b",
    r"\b{brand} casino\b",
    r"\b{brand} platform\b",
)


def _phrase_patterns(phrases: tuple[str, ...]) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(re.escape(p), re.IGNORECASE) for p in phrases)


def brand_patterns(brand: str) -> tuple[re.Pattern, ...]:
    """Case-insensitive, word-boundary anchored patterns for a brand name."""
    escaped = re.escape(brand.strip())
    return tuple(re.compile(t.format(brand=escaped), re.IGNORECASE) for t in _BRAND_TEMPLATES)


# ---------------------------------------------------------------------------
# Lexicon value
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Lexicon:
    """Immutable classifier configuration."""

    brand: str
    brand_patterns: tuple[re.Pattern, ...]
    very_positive: tuple[str, ...] = VERY_POSITIVE_WORDS
    positive: tuple[str, ...] = POSITIVE_WORDS
    negative: tuple[str, ...] = NEGATIVE_WORDS
    very_negative: tuple[str, ...] = VERY_NEGATIVE_WORDS
    overall_positive: tuple[str, ...] = OVERALL_POSITIVE_WORDS
    overall_negative: tuple[str, ...] = OVERALL_NEGATIVE_WORDS
    confidence_patterns: tuple[re.Pattern, ...] = field(default_factory=lambda: _phrase_patterns(CONFIDENCE_PHRASES))
    uncertainty_patterns: tuple[re.Pattern, ...] = field(
        default_factory=lambda: _phrase_patterns(UNCERTAINTY_PHRASES)
    )
    topic_vocabularies: tuple[tuple[str, tuple[str, ...]], ...] = TOPIC_VOCABULARIES

    @classmethod
    def for_brand(cls, brand: str, **overrides) -> Lexicon:
        """Build a lexicon with the default word lists for *brand*."""
        if not brand or not brand.strip():
            raise ValueError("brand name must not be empty")
        return cls(brand=brand.strip(), brand_patterns=brand_patterns(brand), **overrides)


@lru_cache(maxsize=8)
def default_lexicon(brand: str | None = None) -> Lexicon:
    """Default lexicon for *brand*, falling back to the configured brand name."""
    if brand is None:
        from app.core.config import settings

        brand = settings.brand_name
    return Lexicon.for_brand(brand)
