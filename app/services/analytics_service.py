"""Analytics aggregation: overview, trends, citation and per-keyword dashboards.

Pure-function computation layer + async DB fetch layer.
All business logic is in pure functions over lightweight row DTOs, so the
same grouping, tie-break and rounding rules apply whatever fetched the rows.
Ratios with a zero denominator report 0.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone

from app.analysis.citation_extractor import extract_hostname
from app.analysis.scoring import percentage, round_half_up
from app.analysis.types import VISIBILITY_FIELDS, BrandSentiment, KeywordStatus, Platform
from app.core.config import settings
from app.core.exceptions import ComputationError, InvalidInputError, NotFoundError
from app.schemas.analytics import (
    CitationAnalysisResponse,
    CitationSummary,
    DailyTrend,
    DomainCount,
    KeywordAnalysisItem,
    KeywordAnalyticsResponse,
    KeywordAnalyticsStats,
    OverviewResponse,
    OverviewStats,
    Period,
    PlatformCitationStats,
    PlatformDayStats,
    PlatformStats,
    PlatformVisibility,
    RecentCitedAnalysis,
    TrendingKeyword,
    TrendsResponse,
    TrendSummary,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TRENDING_LIMIT = 10
TOP_DOMAINS_LIMIT = 10
CITATION_SCAN_LIMIT = 100  # most recent analyses with citations
RECENT_CITED_LIMIT = 20
KEYWORD_ANALYTICS_LIMIT = 20
KEYWORD_ANALYTICS_MAX_LIMIT = 100


# ---------------------------------------------------------------------------
# Parameter validation
# ---------------------------------------------------------------------------


def _parse_days(days: int | None) -> int:
    if days is None:
        return settings.default_window_days
    if isinstance(days, bool) or not isinstance(days, int):
        raise InvalidInputError(f"days must be an integer, got {days!r}")
    if not 1 <= days <= settings.max_window_days:
        raise InvalidInputError(f"days must be between 1 and {settings.max_window_days}, got {days}")
    return days


def _parse_platform_filter(platform: str | None) -> Platform | None:
    if not platform:
        return None
    try:
        return Platform(platform)
    except ValueError:
        valid = ", ".join(p.value for p in Platform)
        raise InvalidInputError(f"Unknown platform {platform!r} (expected one of: {valid})") from None


def _parse_limit(limit: int | None) -> int:
    if limit is None:
        return KEYWORD_ANALYTICS_LIMIT
    if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= KEYWORD_ANALYTICS_MAX_LIMIT:
        raise InvalidInputError(f"limit must be between 1 and {KEYWORD_ANALYTICS_MAX_LIMIT}, got {limit!r}")
    return limit


# ---------------------------------------------------------------------------
# DTOs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AggregationWindow:
    """Client scope + last ``days`` days + optional platform filter."""

    client_name: str
    days: int
    platform: Platform | None = None

    @classmethod
    def create(cls, client_name: str | None, days: int | None = None, platform: str | None = None) -> AggregationWindow:
        """Validate raw window parameters."""
        name = (client_name or "").strip() or settings.default_client_name
        return cls(client_name=name, days=_parse_days(days), platform=_parse_platform_filter(platform))

    def since(self, now: datetime) -> datetime:
        return now - timedelta(days=self.days)


@dataclass
class KeywordRow:
    """Keyword fields needed by the overview."""

    id: int
    keyword: str
    category: str = "General"
    status: str = KeywordStatus.ACTIVE.value
    visibility_chatgpt: int = 0
    visibility_perplexity: int = 0
    visibility_claude: int = 0
    visibility_gemini: int = 0
    last_analyzed: datetime | None = None


@dataclass
class AnalysisRow:
    """Minimal row extracted from JOIN of analyses + keywords."""

    id: int
    keyword_id: int
    keyword: str
    category: str
    platform: str
    brand_mentioned: bool
    brand_sentiment: str
    confidence_score: float
    created_at: datetime
    citations: list = field(default_factory=list)  # [{"url", ...}] or plain URL strings
    # Per-keyword listing only
    query: str = ""
    overall_sentiment: str = "Neutral"
    word_count: int = 0
    response_time_ms: int = 0


def _citation_url(citation) -> str | None:
    if isinstance(citation, str):
        return citation
    if isinstance(citation, dict):
        return citation.get("url")
    return None


def _utc_date(value: datetime) -> date:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.date()


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0



# ---------------------------------------------------------------------------
# Pure functions: overview
# ---------------------------------------------------------------------------


def compute_platform_visibility(keywords: list[KeywordRow]) -> tuple[PlatformVisibility, int]:
    """Per-platform average visibility and the overall score (mean of the four averages)."""
    averages = [_mean([getattr(k, f) or 0 for k in keywords]) for f in VISIBILITY_FIELDS]
    visibility = PlatformVisibility(
        **{f.removeprefix("visibility_"): int(round_half_up(avg)) for f, avg in zip(VISIBILITY_FIELDS, averages)}
    )
    overall = int(round_half_up(sum(averages) / len(VISIBILITY_FIELDS)))
    return visibility, overall


def compute_overview(keywords: list[KeywordRow], rows: list[AnalysisRow], since: datetime) -> OverviewStats:
    """Headline counters for a client window."""
    total_keywords = sum(1 for k in keywords if k.status == KeywordStatus.ACTIVE.value)
    analyzed_keywords = sum(1 for k in keywords if k.last_analyzed is not None and k.last_analyzed >= since)
    mentions = sum(1 for r in rows if r.brand_mentioned)
    _, avg_visibility = compute_platform_visibility(keywords)

    return OverviewStats(
        total_keywords=total_keywords,
        analyzed_keywords=analyzed_keywords,
        recent_analytics=len(rows),
        brand_mentions=mentions,
        avg_visibility_score=avg_visibility,
        mention_rate=percentage(mentions, len(rows)),
    )


def compute_sentiment_distribution(rows: list[AnalysisRow]) -> dict[str, int]:
    """Analyses per brand-sentiment class; absent classes are omitted."""
    counts: dict[str, int] = {}
    for r in rows:
        counts[r.brand_sentiment] = counts.get(r.brand_sentiment, 0) + 1
    return counts


def _platform_stats(rows: list[AnalysisRow]) -> tuple[int, int, float, float]:
    total = len(rows)
    mentions = sum(1 for r in rows if r.brand_mentioned)
    avg_confidence = round_half_up(_mean([float(r.confidence_score) for r in rows]), 2)
    return total, mentions, percentage(mentions, total), avg_confidence


def _group_by_platform(rows: list[AnalysisRow]) -> dict[str, list[AnalysisRow]]:
    groups: dict[str, list[AnalysisRow]] = defaultdict(list)
    for r in rows:
        groups[r.platform].append(r)
    return groups


def compute_platform_breakdown(rows: list[AnalysisRow]) -> list[PlatformStats]:
    """Per-platform totals, mention rate and mean confidence (platforms in first-seen order)."""
    breakdown = []
    for platform, group in _group_by_platform(rows).items():
        total, mentions, rate, avg_confidence = _platform_stats(group)
        breakdown.append(
            PlatformStats(
                platform=platform,
                total_analyses=total,
                mentions=mentions,
                mention_rate=rate,
                avg_confidence=avg_confidence,
            )
        )
    return breakdown


def compute_trending_keywords(rows: list[AnalysisRow], limit: int = TRENDING_LIMIT) -> list[TrendingKeyword]:
    """Keywords ranked by analysis count; ties keep first-seen order."""
    stats: dict[int, dict] = {}
    for r in rows:
        entry = stats.get(r.keyword_id)
        if entry is None:
            entry = stats[r.keyword_id] = {"keyword": r.keyword, "category": r.category, "count": 0, "mentions": 0}
        entry["count"] += 1
        if r.brand_mentioned:
            entry["mentions"] += 1

    # sorted() is stable, so equal counts keep discovery order
    ranked = sorted(stats.items(), key=lambda item: item[1]["count"], reverse=True)[:limit]
    return [
        TrendingKeyword(
            id=keyword_id,
            keyword=data["keyword"],
            category=data["category"],
            analysis_count=data["count"],
            mention_count=data["mentions"],
            mention_rate=percentage(data["mentions"], data["count"]),
        )
        for keyword_id, data in ranked
    ]


# ---------------------------------------------------------------------------
# Pure functions: daily visibility trend
# ---------------------------------------------------------------------------


def compute_visibility_trends(rows: list[AnalysisRow], platform: Platform | None = None) -> TrendsResponse:
    """Daily series grouped by (UTC date, platform), days ascending."""
    buckets: dict[date, dict[str, list[AnalysisRow]]] = defaultdict(lambda: defaultdict(list))
    for r in rows:
        buckets[_utc_date(r.created_at)][r.platform].append(r)

    trends: list[DailyTrend] = []
    seen_platforms: list[str] = []
    for day in sorted(buckets):
        platforms: dict[str, PlatformDayStats] = {}
        total_analyses = 0
        total_mentions = 0
        for name, group in buckets[day].items():
            analyses, mentions, rate, avg_confidence = _platform_stats(group)
            platforms[name] = PlatformDayStats(
                analyses=analyses,
                mentions=mentions,
                mention_rate=rate,
                avg_confidence=avg_confidence,
            )
            total_analyses += analyses
            total_mentions += mentions
            if name not in seen_platforms:
                seen_platforms.append(name)

        trends.append(
            DailyTrend(
                date=day,
                total_analyses=total_analyses,
                total_mentions=total_mentions,
                mention_rate=percentage(total_mentions, total_analyses),
                platforms=platforms,
            )
        )

    summary = TrendSummary(
        total_days=len(trends),
        avg_daily_analyses=int(round_half_up(_mean([t.total_analyses for t in trends]))),
        avg_mention_rate=round_half_up(_mean([t.mention_rate for t in trends]), 1),
        platforms=[platform.value] if platform else seen_platforms,
    )
    return TrendsResponse(trends=trends, summary=summary)


# ---------------------------------------------------------------------------
# Pure functions: citation analysis
# ---------------------------------------------------------------------------


def compute_citation_analysis(
    rows: list[AnalysisRow],
    scan_limit: int = CITATION_SCAN_LIMIT,
    top_n: int = TOP_DOMAINS_LIMIT,
    recent_n: int = RECENT_CITED_LIMIT,
) -> CitationAnalysisResponse:
    """Domain and per-platform citation statistics.

    *rows* is every analysis in the window: the newest ``scan_limit`` rows that
    carry citations are scanned, while per-platform citation rates divide by
    the platform's full in-window analysis count.
    """
    with_citations = [r for r in rows if r.citations]
    scanned = sorted(with_citations, key=lambda r: (r.created_at, r.id), reverse=True)[:scan_limit]
    platform_totals = {name: len(group) for name, group in _group_by_platform(rows).items()}

    total_citations = 0
    domain_count: dict[str, int] = {}
    per_platform: dict[str, dict[str, int]] = {}

    for r in scanned:
        total_citations += len(r.citations)
        for citation in r.citations:
            hostname = extract_hostname(_citation_url(citation))
            if hostname is None:
                continue
            domain_count[hostname] = domain_count.get(hostname, 0) + 1

        entry = per_platform.setdefault(r.platform, {"with_citations": 0, "total_citations": 0})
        entry["with_citations"] += 1
        entry["total_citations"] += len(r.citations)

    top_domains = sorted(domain_count.items(), key=lambda item: item[1], reverse=True)[:top_n]

    return CitationAnalysisResponse(
        summary=CitationSummary(
            total_citations=total_citations,
            unique_domains=len(domain_count),
            analyses_with_citations=len(scanned),
            avg_citations_per_analysis=round_half_up(total_citations / len(scanned), 1) if scanned else 0.0,
        ),
        top_domains=[DomainCount(domain=domain, count=count) for domain, count in top_domains],
        platform_breakdown=[
            PlatformCitationStats(
                platform=platform,
                total_analyses=platform_totals.get(platform, 0),
                with_citations=data["with_citations"],
                total_citations=data["total_citations"],
                citation_rate=percentage(data["with_citations"], platform_totals.get(platform, 0)),
            )
            for platform, data in per_platform.items()
        ],
        recent_analyses=[
            RecentCitedAnalysis(
                id=r.id,
                keyword=r.keyword,
                category=r.category,
                platform=r.platform,
                citation_count=len(r.citations),
                brand_mentioned=r.brand_mentioned,
                created_at=r.created_at,
            )
            for r in scanned[:recent_n]
        ],
    )


# ---------------------------------------------------------------------------
# Pure functions: per-keyword analytics
# ---------------------------------------------------------------------------


def compute_keyword_analytics(rows: list[AnalysisRow]) -> KeywordAnalyticsStats:
    """Stats over one keyword's listed analyses.

    Every brand-sentiment class is present in the breakdown, zero-filled;
    platforms appear in first-seen order.
    """
    sentiment = {s.value: 0 for s in BrandSentiment}
    platforms: dict[str, int] = {}
    for r in rows:
        if r.brand_sentiment in sentiment:
            sentiment[r.brand_sentiment] += 1
        platforms[r.platform] = platforms.get(r.platform, 0) + 1

    return KeywordAnalyticsStats(
        total_analyses=len(rows),
        brand_mentions=sum(1 for r in rows if r.brand_mentioned),
        avg_confidence_score=round_half_up(_mean([float(r.confidence_score) for r in rows]), 2),
        sentiment_breakdown=sentiment,
        platform_breakdown=platforms,
    )


def _analysis_item(r: AnalysisRow) -> KeywordAnalysisItem:
    return KeywordAnalysisItem(
        id=r.id,
        platform=r.platform,
        query=r.query,
        brand_mentioned=r.brand_mentioned,
        brand_sentiment=r.brand_sentiment,
        overall_sentiment=r.overall_sentiment,
        confidence_score=r.confidence_score,
        word_count=r.word_count,
        response_time_ms=r.response_time_ms,
        citations=r.citations,
        created_at=r.created_at,
    )


# ---------------------------------------------------------------------------
# Async DB layer (statement builders + thin fetch + delegate to pure functions)
# ---------------------------------------------------------------------------


def _client_id_stmt(client_name: str):
    from sqlalchemy import select

    from app.models.client import Client

    return select(Client.id).where(Client.name == client_name)


def _keyword_rows_stmt(client_id: int):
    from sqlalchemy import select

    from app.models.keyword import Keyword

    return select(
        Keyword.id,
        Keyword.keyword,
        Keyword.category,
        Keyword.status,
        Keyword.visibility_chatgpt,
        Keyword.visibility_perplexity,
        Keyword.visibility_claude,
        Keyword.visibility_gemini,
        Keyword.last_analyzed,
    ).where(Keyword.client_id == client_id)


def _analysis_rows_stmt(client_id: int, since: datetime, platform: Platform | None = None):
    """In-window analyses of a client's keywords, oldest first."""
    from sqlalchemy import and_, select

    from app.models.analysis import Analysis
    from app.models.keyword import Keyword

    conditions = [
        Keyword.client_id == client_id,
        Analysis.created_at >= since,
    ]
    if platform:
        conditions.append(Analysis.platform == platform.value)

    return (
        select(
            Analysis.id,
            Analysis.keyword_id,
            Keyword.keyword,
            Keyword.category,
            Analysis.platform,
            Analysis.brand_mentioned,
            Analysis.brand_sentiment,
            Analysis.confidence_score,
            Analysis.citations,
            Analysis.created_at,
        )
        .join(Keyword, Analysis.keyword_id == Keyword.id)
        .where(and_(*conditions))
        .order_by(Analysis.created_at, Analysis.id)
    )


def _keyword_analysis_rows_stmt(keyword_id: int, since: datetime, platform: Platform | None, limit: int):
    """Newest ``limit`` in-window analyses of one keyword."""
    from sqlalchemy import and_, select

    from app.models.analysis import Analysis
    from app.models.keyword import Keyword

    conditions = [
        Analysis.keyword_id == keyword_id,
        Analysis.created_at >= since,
    ]
    if platform:
        conditions.append(Analysis.platform == platform.value)

    return (
        select(
            Analysis.id,
            Analysis.keyword_id,
            Keyword.keyword,
            Keyword.category,
            Analysis.platform,
            Analysis.query,
            Analysis.brand_mentioned,
            Analysis.brand_sentiment,
            Analysis.overall_sentiment,
            Analysis.confidence_score,
            Analysis.word_count,
            Analysis.response_time_ms,
            Analysis.citations,
            Analysis.created_at,
        )
        .join(Keyword, Analysis.keyword_id == Keyword.id)
        .where(and_(*conditions))
        .order_by(Analysis.created_at.desc(), Analysis.id.desc())
        .limit(limit)
    )


def _to_analysis_row(row) -> AnalysisRow:
    mapping = row._mapping
    return AnalysisRow(
        id=row.id,
        keyword_id=row.keyword_id,
        keyword=row.keyword,
        category=row.category,
        platform=row.platform,
        brand_mentioned=bool(row.brand_mentioned),
        brand_sentiment=row.brand_sentiment,
        confidence_score=float(row.confidence_score or 0.0),
        citations=row.citations or [],
        created_at=row.created_at,
        query=mapping.get("query", ""),
        overall_sentiment=mapping.get("overall_sentiment", "Neutral"),
        word_count=mapping.get("word_count", 0) or 0,
        response_time_ms=mapping.get("response_time_ms", 0) or 0,
    )


async def _get_client_id(db, client_name: str) -> int:
    result = await db.execute(_client_id_stmt(client_name))
    client_id = result.scalar_one_or_none()
    if client_id is None:
        raise NotFoundError(f"Client not found: {client_name}", client=client_name)
    return client_id


async def _get_keyword(db, keyword_id: int):
    from sqlalchemy import select

    from app.models.keyword import Keyword

    result = await db.execute(select(Keyword.id, Keyword.keyword, Keyword.category).where(Keyword.id == keyword_id))
    keyword = result.one_or_none()
    if keyword is None:
        raise NotFoundError(f"Keyword not found: {keyword_id}", keyword_id=keyword_id)
    return keyword


async def _fetch_keyword_rows(db, client_id: int) -> list[KeywordRow]:
    result = await db.execute(_keyword_rows_stmt(client_id))
    return [
        KeywordRow(
            id=row.id,
            keyword=row.keyword,
            category=row.category,
            status=row.status,
            visibility_chatgpt=row.visibility_chatgpt,
            visibility_perplexity=row.visibility_perplexity,
            visibility_claude=row.visibility_claude,
            visibility_gemini=row.visibility_gemini,
            last_analyzed=row.last_analyzed,
        )
        for row in result
    ]


async def _fetch_analysis_rows(
    db,  # AsyncSession, imported lazily to keep module importable without DB
    client_id: int,
    since: datetime,
    platform: Platform | None = None,
) -> list[AnalysisRow]:
    """Fetch in-window analyses of a client, oldest first."""
    result = await db.execute(_analysis_rows_stmt(client_id, since, platform))
    return [_to_analysis_row(row) for row in result]


async def _fetch_keyword_analysis_rows(
    db, keyword_id: int, since: datetime, platform: Platform | None, limit: int
) -> list[AnalysisRow]:
    result = await db.execute(_keyword_analysis_rows_stmt(keyword_id, since, platform, limit))
    return [_to_analysis_row(row) for row in result]


def _reduce(name: str, compute, **context):
    """Run a pure reduction; failures on fetched rows are defects, not user errors."""
    try:
        return compute()
    except (ArithmeticError, TypeError, ValueError) as e:
        logger.error("Aggregation %s failed (%s): %s", name, context, e)
        raise ComputationError(f"{name} aggregation failed on stored records: {e}", **context) from e


def _window_context(window: AggregationWindow) -> dict:
    return {
        "client": window.client_name,
        "days": window.days,
        "platform": window.platform.value if window.platform else None,
    }


async def get_overview(db, window: AggregationWindow, now: datetime | None = None) -> OverviewResponse:
    """Overview dashboard: counters, visibility, sentiment, platforms, trending keywords."""
    now = now or datetime.now(timezone.utc)
    since = window.since(now)
    client_id = await _get_client_id(db, window.client_name)

    keywords = await _fetch_keyword_rows(db, client_id)
    rows = await _fetch_analysis_rows(db, client_id, since, window.platform)

    def compute() -> OverviewResponse:
        visibility, _ = compute_platform_visibility(keywords)
        return OverviewResponse(
            overview=compute_overview(keywords, rows, since),
            visibility=visibility,
            sentiment=compute_sentiment_distribution(rows),
            platforms=compute_platform_breakdown(rows),
            trending_keywords=compute_trending_keywords(rows),
            period=Period(days=window.days, from_=since, to=now),
        )

    return _reduce("overview", compute, **_window_context(window))


async def get_visibility_trends(db, window: AggregationWindow, now: datetime | None = None) -> TrendsResponse:
    """Daily visibility series."""
    now = now or datetime.now(timezone.utc)
    client_id = await _get_client_id(db, window.client_name)
    rows = await _fetch_analysis_rows(db, client_id, window.since(now), window.platform)
    return _reduce(
        "trends", lambda: compute_visibility_trends(rows, platform=window.platform), **_window_context(window)
    )


async def get_citation_analysis(db, window: AggregationWindow, now: datetime | None = None) -> CitationAnalysisResponse:
    """Citation and domain statistics."""
    now = now or datetime.now(timezone.utc)
    client_id = await _get_client_id(db, window.client_name)
    rows = await _fetch_analysis_rows(db, client_id, window.since(now), window.platform)
    return _reduce("citations", lambda: compute_citation_analysis(rows), **_window_context(window))


async def get_keyword_analytics(
    db,
    keyword_id: int,
    days: int | None = None,
    platform: str | None = None,
    limit: int | None = None,
    now: datetime | None = None,
) -> KeywordAnalyticsResponse:
    """Newest analyses of one keyword with mention, confidence, sentiment and platform stats."""
    days = _parse_days(days)
    parsed_platform = _parse_platform_filter(platform)
    limit = _parse_limit(limit)
    now = now or datetime.now(timezone.utc)
    since = now - timedelta(days=days)

    keyword = await _get_keyword(db, keyword_id)
    rows = await _fetch_keyword_analysis_rows(db, keyword_id, since, parsed_platform, limit)

    def compute() -> KeywordAnalyticsResponse:
        return KeywordAnalyticsResponse(
            keyword=keyword.keyword,
            category=keyword.category,
            analytics=[_analysis_item(r) for r in rows],
            stats=compute_keyword_analytics(rows),
            period=Period(days=days, from_=since, to=now),
        )

    return _reduce("keyword_analytics", compute, keyword_id=keyword_id, days=days)
