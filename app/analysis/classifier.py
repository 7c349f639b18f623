"""Lexicon classifier. Turns one raw answer into brand signals.

Every function is pure: the result depends only on the text and the lexicon.
Brand sentiment is conditioned on a mention, so ``detect_mention`` always runs
first and a text without a mention is Neutral regardless of its wording.
"""

from __future__ import annotations

import logging

from app.analysis.citation_extractor import extract_citations
from app.analysis.lexicon import Lexicon, default_lexicon
from app.analysis.types import BrandSentiment, ClassifiedAnswer, OverallSentiment

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 0.5
CONFIDENCE_BOOST = 0.1
UNCERTAINTY_PENALTY = 0.05


def _count_hits(lower_text: str, words: tuple[str, ...]) -> int:
    """Number of distinct list entries contained in the text (repeats ignored)."""
    return sum(1 for word in words if word in lower_text)


def detect_mention(text: str, lexicon: Lexicon | None = None) -> bool:
    """True if any brand pattern matches the text."""
    lexicon = lexicon or default_lexicon()
    return any(pattern.search(text) for pattern in lexicon.brand_patterns)


def classify_brand_sentiment(text: str, lexicon: Lexicon | None = None) -> BrandSentiment:
    """Weighted 5-point sentiment toward the brand.

    Very-positive and very-negative hits weigh 2, plain hits weigh 1. The
    decision order matters on ties: a positive lead with any very-positive
    hit wins first, and Very Negative is only reached when neither side leads.
    """
    lexicon = lexicon or default_lexicon()
    if not detect_mention(text, lexicon):
        return BrandSentiment.NEUTRAL

    lower = text.lower()
    very_positive = _count_hits(lower, lexicon.very_positive) * 2
    positive = _count_hits(lower, lexicon.positive)
    negative = _count_hits(lower, lexicon.negative)
    very_negative = _count_hits(lower, lexicon.very_negative) * 2

    pos_score = very_positive + positive
    neg_score = negative + very_negative

    if very_positive > 0 and pos_score > neg_score:
        return BrandSentiment.VERY_POSITIVE
    if pos_score > neg_score:
        return BrandSentiment.POSITIVE
    if neg_score > pos_score:
        return BrandSentiment.NEGATIVE
    if very_negative > 0:
        return BrandSentiment.VERY_NEGATIVE
    return BrandSentiment.NEUTRAL


def classify_overall_sentiment(text: str, lexicon: Lexicon | None = None) -> OverallSentiment:
    """Unweighted 3-point sentiment of the whole answer; ties are Neutral."""
    lexicon = lexicon or default_lexicon()
    lower = text.lower()
    positive = _count_hits(lower, lexicon.overall_positive)
    negative = _count_hits(lower, lexicon.overall_negative)

    if positive > negative:
        return OverallSentiment.POSITIVE
    if negative > positive:
        return OverallSentiment.NEGATIVE
    return OverallSentiment.NEUTRAL


def confidence_score(text: str, lexicon: Lexicon | None = None) -> float:
    """Assertiveness heuristic in [0, 1].

    Every occurrence counts: 0.5 + 0.1 per confidence phrase match
    − 0.05 per uncertainty phrase match, clamped.
    """
    lexicon = lexicon or default_lexicon()
    boosts = sum(len(p.findall(text)) for p in lexicon.confidence_patterns)
    penalties = sum(len(p.findall(text)) for p in lexicon.uncertainty_patterns)

    score = BASE_CONFIDENCE + boosts * CONFIDENCE_BOOST - penalties * UNCERTAINTY_PENALTY
    return max(0.0, min(1.0, score))


def extract_topics(text: str, lexicon: Lexicon | None = None) -> list[str]:
    """Topic labels ``"<Vocabulary>: <topic>"`` in vocabulary-then-entry order."""
    lexicon = lexicon or default_lexicon()
    lower = text.lower()
    return [
        f"{label}: {topic}"
        for label, topics in lexicon.topic_vocabularies
        for topic in topics
        if topic in lower
    ]


def count_words(text: str) -> int:
    """Whitespace-delimited token count."""
    return len(text.split())


def classify_answer(text: str, lexicon: Lexicon | None = None) -> ClassifiedAnswer:
    """Run every classifier over one answer."""
    lexicon = lexicon or default_lexicon()
    result = ClassifiedAnswer(
        mentioned=detect_mention(text, lexicon),
        brand_sentiment=classify_brand_sentiment(text, lexicon),
        overall_sentiment=classify_overall_sentiment(text, lexicon),
        confidence_score=confidence_score(text, lexicon),
        word_count=count_words(text),
        topics=extract_topics(text, lexicon),
        citations=extract_citations(text),
    )

    logger.debug(
        "Classified answer: brand=%s, mentioned=%s, brand_sentiment=%s, overall=%s, confidence=%.2f, "
        "topics=%d, citations=%d",
        lexicon.brand,
        result.mentioned,
        result.brand_sentiment.value,
        result.overall_sentiment.value,
        result.confidence_score,
        len(result.topics),
        len(result.citations),
    )
    return result
