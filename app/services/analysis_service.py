"""Keyword analysis: one provider call turned into one stored observation.

Flow for a single (keyword, platform, query):
  1. validate input and load the keyword
  2. ask the answer provider, bounded by a timeout
  3. classify the answer with the lexicon classifier
  4. insert the Analysis row and refresh the keyword's visibility score
     in one commit

Nothing is written when the provider fails. Retries belong to the caller.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any

from app.analysis.classifier import classify_answer
from app.analysis.lexicon import Lexicon
from app.analysis.scoring import RandomSource, draw_visibility_score, round_half_up
from app.analysis.types import ClassifiedAnswer, Platform
from app.collectors.llm_base import BaseLlmCollector, LlmResponse
from app.core.config import settings
from app.core.exceptions import InvalidInputError, NotFoundError, ProviderError
from app.core.metrics import ANALYSIS_RUNS, PROVIDER_LATENCY
from app.models.analysis import Analysis
from app.models.keyword import Keyword
from app.schemas.analysis import AnalyzeKeywordResponse, StoredAnalysis, VisibilityUpdate

logger = logging.getLogger(__name__)


def parse_platform(platform: str | Platform) -> Platform:
    try:
        return Platform(platform)
    except ValueError:
        valid = ", ".join(p.value for p in Platform)
        raise InvalidInputError(f"Unknown platform {platform!r} (expected one of: {valid})") from None


def build_analysis_record(
    keyword_id: int,
    platform: Platform,
    query: str,
    answer: LlmResponse,
    classified: ClassifiedAnswer,
    response_time_ms: int,
    now: datetime,
) -> Analysis:
    """Assemble the persisted-shape record for one classified answer."""
    return Analysis(
        keyword_id=keyword_id,
        platform=platform.value,
        query=query,
        response=answer.text,
        citations=[c.to_dict() for c in classified.citations],
        brand_mentioned=classified.mentioned,
        brand_sentiment=classified.brand_sentiment.value,
        overall_sentiment=classified.overall_sentiment.value,
        confidence_score=round_half_up(classified.confidence_score, 2),
        word_count=classified.word_count,
        response_time_ms=response_time_ms,
        analysis_metadata={
            "keyTopics": list(classified.topics),
            "model": answer.model,
            "timestamp": now.isoformat(),
            "usage": answer.usage,
        },
        created_at=now,
    )


def apply_visibility(keyword: Keyword, platform: Platform, score: int, now: datetime) -> bool:
    """Store *score* on the keyword's platform column and stamp last_analyzed.

    Returns False when the platform has no visibility column (Google AI).
    """
    keyword.last_analyzed = now
    field_name = platform.visibility_field
    if field_name is None:
        return False
    setattr(keyword, field_name, score)
    return True


async def _query_provider(
    provider: BaseLlmCollector,
    keyword: Keyword,
    platform: Platform,
    query: str,
    context: dict[str, Any],
    timeout: float | None,
) -> LlmResponse:
    try:
        return await asyncio.wait_for(provider.query_llm(keyword.keyword, query, context), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise ProviderError(
            f"Answer provider timed out after {timeout}s", cause=e, keyword_id=keyword.id, platform=platform.value
        ) from e
    except ProviderError as e:
        e.context.update(keyword_id=keyword.id, platform=platform.value)
        raise
    except Exception as e:
        raise ProviderError(
            f"Answer provider failed: {e}", cause=e, keyword_id=keyword.id, platform=platform.value
        ) from e


async def analyze_keyword(
    db,  # AsyncSession
    keyword_id: int,
    platform: str | Platform,
    query: str,
    provider: BaseLlmCollector,
    context: dict[str, Any] | None = None,
    rng: RandomSource | None = None,
    timeout: float | None = None,
    lexicon: Lexicon | None = None,
    now: datetime | None = None,
) -> AnalyzeKeywordResponse:
    """Analyze one query for a keyword on a platform and persist the result."""
    if not query or not query.strip():
        raise InvalidInputError("Query is required")
    parsed_platform = parse_platform(platform)

    from sqlalchemy.orm import selectinload

    keyword = await db.get(Keyword, keyword_id, options=[selectinload(Keyword.client)])
    if keyword is None:
        raise NotFoundError(f"Keyword not found: {keyword_id}", keyword_id=keyword_id)

    provider_context = {
        **(context or {}),
        "keyword": keyword.keyword,
        "category": keyword.category,
        "client": keyword.client.name if keyword.client else "Unknown",
        "platform": parsed_platform.value,
    }
    if timeout is None:
        timeout = settings.provider_timeout_seconds

    start = time.perf_counter()
    try:
        answer = await _query_provider(provider, keyword, parsed_platform, query, provider_context, timeout)
    except ProviderError as e:
        ANALYSIS_RUNS.labels(platform=parsed_platform.value, status="provider_error").inc()
        logger.warning(
            "Analysis aborted: keyword_id=%d platform=%s: %s",
            keyword.id,
            parsed_platform.value,
            e.message,
            extra={"keyword_id": keyword.id, "platform": parsed_platform.value},
        )
        raise
    elapsed = time.perf_counter() - start
    response_time_ms = int(round(elapsed * 1000))
    PROVIDER_LATENCY.labels(platform=parsed_platform.value).observe(elapsed)

    now = now or datetime.now(timezone.utc)
    classified = classify_answer(answer.text, lexicon)
    record = build_analysis_record(
        keyword_id=keyword.id,
        platform=parsed_platform,
        query=query,
        answer=answer,
        classified=classified,
        response_time_ms=response_time_ms,
        now=now,
    )
    score = draw_visibility_score(classified.mentioned, rng)
    has_column = apply_visibility(keyword, parsed_platform, score, now)

    db.add(record)
    await db.flush()
    await db.commit()

    ANALYSIS_RUNS.labels(platform=parsed_platform.value, status="ok").inc()
    logger.info(
        "Analyzed keyword_id=%d platform=%s: mentioned=%s sentiment=%s confidence=%.2f visibility=%s (%d ms)",
        keyword.id,
        parsed_platform.value,
        classified.mentioned,
        classified.brand_sentiment.value,
        record.confidence_score,
        score if has_column else "n/a",
        response_time_ms,
        extra={"keyword_id": keyword.id, "platform": parsed_platform.value},
    )

    return AnalyzeKeywordResponse(
        keyword=keyword.keyword,
        analysis={
            **classified.to_dict(),
            "response": answer.text,
            "usage": answer.usage,
            "responseTime": response_time_ms,
            "platform": parsed_platform.value,
        },
        analytics=StoredAnalysis(
            id=record.id,
            brand_mentioned=record.brand_mentioned,
            brand_sentiment=record.brand_sentiment,
            confidence_score=record.confidence_score,
        ),
        visibility=VisibilityUpdate(platform=parsed_platform.value, score=score if has_column else None),
    )
