"""Tests for analytics aggregation: pure computation functions and the async entry points."""

from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.dialects import postgresql

from app.analysis.types import Platform
from app.core.exceptions import ComputationError, InvalidInputError, NotFoundError
from app.services.analytics_service import (
    AggregationWindow,
    AnalysisRow,
    KeywordRow,
    _analysis_rows_stmt,
    _client_id_stmt,
    _fetch_analysis_rows,
    _fetch_keyword_rows,
    _get_client_id,
    _keyword_analysis_rows_stmt,
    _keyword_rows_stmt,
    compute_citation_analysis,
    compute_keyword_analytics,
    compute_overview,
    compute_platform_breakdown,
    compute_platform_visibility,
    compute_sentiment_distribution,
    compute_trending_keywords,
    compute_visibility_trends,
    get_citation_analysis,
    get_keyword_analytics,
    get_overview,
    get_visibility_trends,
)

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)
SINCE = NOW - timedelta(days=30)

_ids = iter(range(1, 100_000))


def _row(
    keyword_id: int = 1,
    platform: str = "ChatGPT",
    brand_mentioned: bool = False,
    brand_sentiment: str = "Neutral",
    confidence_score: float = 0.5,
    created_at: datetime | None = None,
    citations: list | None = None,
    keyword: str | None = None,
    category: str = "Gambling",
    id: int | None = None,
) -> AnalysisRow:
    return AnalysisRow(
        id=id if id is not None else next(_ids),
        keyword_id=keyword_id,
        keyword=keyword or f"keyword {keyword_id}",
        category=category,
        platform=platform,
        brand_mentioned=brand_mentioned,
        brand_sentiment=brand_sentiment,
        confidence_score=confidence_score,
        created_at=created_at or NOW - timedelta(days=1),
        citations=citations or [],
    )


def _kw(id: int = 1, status: str = "active", last_analyzed: datetime | None = None, **visibility) -> KeywordRow:
    return KeywordRow(id=id, keyword=f"keyword {id}", status=status, last_analyzed=last_analyzed, **visibility)


# ===================================================================
# Window validation
# ===================================================================


class TestAggregationWindow:
    def test_defaults(self):
        window = AggregationWindow.create(None)
        assert window.client_name == "Stake"
        assert window.days == 30
        assert window.platform is None

    def test_blank_client_falls_back(self):
        assert AggregationWindow.create("   ").client_name == "Stake"

    def test_platform_parsed(self):
        assert AggregationWindow.create("Acme", 7, "Gemini").platform == Platform.GEMINI

    @pytest.mark.parametrize("days", [0, -5, 366])
    def test_days_out_of_range(self, days):
        with pytest.raises(InvalidInputError):
            AggregationWindow.create("Stake", days)

    def test_days_not_integer(self):
        with pytest.raises(InvalidInputError):
            AggregationWindow.create("Stake", True)

    def test_unknown_platform(self):
        with pytest.raises(InvalidInputError) as exc_info:
            AggregationWindow.create("Stake", 30, "Bing")
        assert exc_info.value.status_code == 400

    def test_since(self):
        assert AggregationWindow.create("Stake", 7).since(NOW) == NOW - timedelta(days=7)


# ===================================================================
# Overview
# ===================================================================


class TestPlatformVisibility:
    def test_averages_rounded_half_up(self):
        keywords = [_kw(1, visibility_chatgpt=80), _kw(2, visibility_chatgpt=61)]
        visibility, overall = compute_platform_visibility(keywords)
        assert visibility.chatgpt == 71  # 70.5
        assert visibility.perplexity == 0
        assert overall == 18  # (70.5 + 0 + 0 + 0) / 4 = 17.625

    def test_no_keywords(self):
        visibility, overall = compute_platform_visibility([])
        assert visibility.model_dump() == {"chatgpt": 0, "perplexity": 0, "claude": 0, "gemini": 0}
        assert overall == 0


class TestOverview:
    def test_empty_window(self):
        keywords = [_kw(1), _kw(2), _kw(3)]
        stats = compute_overview(keywords, [], SINCE)
        assert stats.total_keywords == 3
        assert stats.analyzed_keywords == 0
        assert stats.recent_analytics == 0
        assert stats.brand_mentions == 0
        assert stats.mention_rate == 0.0

    def test_only_active_keywords_counted(self):
        keywords = [_kw(1), _kw(2, status="paused"), _kw(3, status="archived")]
        assert compute_overview(keywords, [], SINCE).total_keywords == 1

    def test_analyzed_inside_window(self):
        keywords = [
            _kw(1, last_analyzed=NOW - timedelta(days=2)),
            _kw(2, last_analyzed=NOW - timedelta(days=45)),
            _kw(3),
        ]
        assert compute_overview(keywords, [], SINCE).analyzed_keywords == 1

    def test_mention_rate(self):
        rows = [_row(brand_mentioned=True), _row(), _row()]
        stats = compute_overview([_kw(1)], rows, SINCE)
        assert stats.recent_analytics == 3
        assert stats.brand_mentions == 1
        assert stats.mention_rate == 33.3

    def test_wire_alias(self):
        stats = compute_overview([], [_row(brand_mentioned=True)], SINCE)
        data = stats.model_dump(by_alias=True)
        assert data["stakeMentions"] == 1
        assert data["mentionRate"] == 100.0
        assert "totalKeywords" in data


def test_sentiment_distribution_omits_absent_classes():
    rows = [_row(brand_sentiment="Positive"), _row(brand_sentiment="Positive"), _row(brand_sentiment="Negative")]
    assert compute_sentiment_distribution(rows) == {"Positive": 2, "Negative": 1}


def test_platform_breakdown_first_seen_order():
    rows = [
        _row(platform="Perplexity", brand_mentioned=True, confidence_score=0.5),
        _row(platform="ChatGPT", confidence_score=0.9),
        _row(platform="Perplexity", confidence_score=0.8),
    ]
    breakdown = compute_platform_breakdown(rows)
    assert [p.platform for p in breakdown] == ["Perplexity", "ChatGPT"]
    perplexity = breakdown[0]
    assert perplexity.total_analyses == 2
    assert perplexity.mentions == 1
    assert perplexity.mention_rate == 50.0
    assert perplexity.avg_confidence == 0.65


class TestTrendingKeywords:
    def test_limited_to_ten_and_stable(self):
        sequence = [1, 2, 5, 5, 5, 3, 4, 6, 7, 8, 9, 10, 11]
        rows = [_row(keyword_id=k) for k in sequence]
        trending = compute_trending_keywords(rows)
        assert len(trending) == 10
        assert [t.id for t in trending] == [5, 1, 2, 3, 4, 6, 7, 8, 9, 10]
        assert trending[0].analysis_count == 3

    def test_counts_and_rate(self):
        rows = [_row(keyword_id=1, brand_mentioned=True), _row(keyword_id=1), _row(keyword_id=1)]
        (top,) = compute_trending_keywords(rows)
        assert top.keyword == "keyword 1"
        assert top.category == "Gambling"
        assert top.mention_count == 1
        assert top.mention_rate == 33.3

    def test_empty(self):
        assert compute_trending_keywords([]) == []


# ===================================================================
# Daily trends
# ===================================================================


class TestVisibilityTrends:
    def test_same_day_platforms_merge(self):
        day1 = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)
        rows = [
            _row(platform="ChatGPT", brand_mentioned=True, created_at=day1),
            _row(platform="Perplexity", created_at=day1 + timedelta(hours=3)),
            _row(platform="ChatGPT", created_at=day1 + timedelta(days=1)),
        ]
        result = compute_visibility_trends(rows)

        assert [t.date for t in result.trends] == [date(2025, 3, 1), date(2025, 3, 2)]
        first = result.trends[0]
        assert first.total_analyses == 2
        assert first.total_mentions == 1
        assert first.mention_rate == 50.0
        assert set(first.platforms) == {"ChatGPT", "Perplexity"}
        assert first.platforms["ChatGPT"].mention_rate == 100.0

        assert result.summary.total_days == 2
        assert result.summary.avg_daily_analyses == 2  # 1.5 rounds up
        assert result.summary.avg_mention_rate == 25.0
        assert result.summary.platforms == ["ChatGPT", "Perplexity"]

    def test_buckets_by_utc_date(self):
        local = timezone(timedelta(hours=-5))
        row = _row(created_at=datetime(2025, 3, 1, 23, 30, tzinfo=local))
        result = compute_visibility_trends([row])
        assert result.trends[0].date == date(2025, 3, 2)

    def test_days_ascending(self):
        rows = [
            _row(created_at=datetime(2025, 3, 5, tzinfo=timezone.utc)),
            _row(created_at=datetime(2025, 3, 2, tzinfo=timezone.utc)),
        ]
        assert [t.date.day for t in compute_visibility_trends(rows).trends] == [2, 5]

    def test_platform_filter_in_summary(self):
        result = compute_visibility_trends([], platform=Platform.CLAUDE)
        assert result.trends == []
        assert result.summary.total_days == 0
        assert result.summary.avg_mention_rate == 0.0
        assert result.summary.platforms == ["Claude"]

    def test_wire_format(self):
        rows = [_row(created_at=datetime(2025, 3, 1, tzinfo=timezone.utc))]
        data = compute_visibility_trends(rows).model_dump(by_alias=True, mode="json")
        assert data["trends"][0]["date"] == "2025-03-01"
        assert data["trends"][0]["platforms"]["ChatGPT"]["avgConfidence"] == 0.5
        assert data["summary"]["avgDailyAnalyses"] == 1


# ===================================================================
# Citations
# ===================================================================


class TestCitationAnalysis:
    def test_hostnames_and_malformed(self):
        rows = [
            _row(citations=["https://www.example.com/a", "http://example.com/b", "not a url"]),
        ]
        result = compute_citation_analysis(rows)
        assert result.summary.total_citations == 3
        assert result.summary.unique_domains == 1
        assert result.summary.analyses_with_citations == 1
        assert result.summary.avg_citations_per_analysis == 3.0
        assert [(d.domain, d.count) for d in result.top_domains] == [("example.com", 2)]

    def test_dict_citations(self):
        rows = [_row(citations=[{"url": "https://stake.com/x", "position": 1, "title": "Citation 1"}])]
        result = compute_citation_analysis(rows)
        assert result.top_domains[0].domain == "stake.com"

    def test_citation_rate_uses_all_platform_analyses(self):
        rows = [
            _row(platform="ChatGPT", citations=["https://a.com"]),
            _row(platform="ChatGPT"),
            _row(platform="ChatGPT"),
            _row(platform="ChatGPT"),
        ]
        (stats,) = compute_citation_analysis(rows).platform_breakdown
        assert stats.total_analyses == 4
        assert stats.with_citations == 1
        assert stats.total_citations == 1
        assert stats.citation_rate == 25.0

    def test_scan_limit_and_recent(self):
        rows = [
            _row(id=i, citations=["https://a.com"], created_at=NOW - timedelta(hours=200 - i)) for i in range(1, 106)
        ]
        result = compute_citation_analysis(rows)
        assert result.summary.analyses_with_citations == 100
        assert result.summary.total_citations == 100
        assert len(result.recent_analyses) == 20
        assert result.recent_analyses[0].id == 105  # newest first
        assert result.recent_analyses[0].citation_count == 1

    def test_top_domains_ties_first_seen(self):
        t = NOW - timedelta(days=1)
        rows = [
            _row(id=1, citations=["https://b.com"], created_at=t),
            _row(id=2, citations=["https://a.com", "https://c.com"], created_at=t + timedelta(hours=1)),
        ]
        domains = [d.domain for d in compute_citation_analysis(rows).top_domains]
        # scanned newest first: a.com, c.com, then b.com
        assert domains == ["a.com", "c.com", "b.com"]

    def test_empty(self):
        result = compute_citation_analysis([_row()])
        assert result.summary.total_citations == 0
        assert result.summary.avg_citations_per_analysis == 0.0
        assert result.top_domains == []
        assert result.platform_breakdown == []
        assert result.recent_analyses == []

    def test_recent_wire_alias(self):
        result = compute_citation_analysis([_row(brand_mentioned=True, citations=["https://a.com"])])
        data = result.model_dump(by_alias=True)
        assert data["recentAnalyses"][0]["stakeMentioned"] is True
        assert "avgCitationsPerAnalysis" in data["summary"]


# ===================================================================
# Async entry points
# ===================================================================

_SVC = "app.services.analytics_service"


class TestAsyncEntryPoints:
    async def test_overview_delegates(self):
        window = AggregationWindow.create("Stake", 30)
        keywords = [_kw(1, visibility_chatgpt=90)]
        rows = [_row(keyword_id=1, brand_mentioned=True, brand_sentiment="Positive")]

        with (
            patch(f"{_SVC}._get_client_id", AsyncMock(return_value=7)),
            patch(f"{_SVC}._fetch_keyword_rows", AsyncMock(return_value=keywords)),
            patch(f"{_SVC}._fetch_analysis_rows", AsyncMock(return_value=rows)) as fetch_rows,
        ):
            result = await get_overview(MagicMock(), window, now=NOW)

        fetch_rows.assert_awaited_once()
        assert fetch_rows.await_args.args[1:] == (7, NOW - timedelta(days=30), None)
        assert result.overview.total_keywords == 1
        assert result.overview.brand_mentions == 1
        assert result.visibility.chatgpt == 90
        assert result.sentiment == {"Positive": 1}
        assert result.period.days == 30
        assert result.period.to == NOW
        assert result.model_dump(by_alias=True)["period"]["from"] == NOW - timedelta(days=30)

    async def test_platform_filter_forwarded(self):
        window = AggregationWindow.create("Stake", 7, "Claude")
        with (
            patch(f"{_SVC}._get_client_id", AsyncMock(return_value=1)),
            patch(f"{_SVC}._fetch_analysis_rows", AsyncMock(return_value=[])) as fetch_rows,
        ):
            result = await get_visibility_trends(MagicMock(), window, now=NOW)
        assert fetch_rows.await_args.args[3] == Platform.CLAUDE
        assert result.summary.platforms == ["Claude"]

    async def test_unknown_client(self, mock_db):
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        mock_db.execute.return_value = result

        with pytest.raises(NotFoundError) as exc_info:
            await get_citation_analysis(mock_db, AggregationWindow.create("Nobody", 30), now=NOW)
        assert exc_info.value.status_code == 404
        assert exc_info.value.context == {"client": "Nobody"}

    async def test_corrupt_rows_raise_computation_error(self):
        window = AggregationWindow.create("Stake", 30)
        bad = _row(confidence_score="not-a-number")
        with (
            patch(f"{_SVC}._get_client_id", AsyncMock(return_value=1)),
            patch(f"{_SVC}._fetch_analysis_rows", AsyncMock(return_value=[bad])),
        ):
            with pytest.raises(ComputationError):
                await get_visibility_trends(MagicMock(), window, now=NOW)

    async def test_keyword_analytics_newest_first_with_stats(self, mock_db):
        keyword = SimpleNamespace(id=5, keyword="stake casino review", category="Casino Games")
        lookup = MagicMock()
        lookup.one_or_none.return_value = keyword
        newer = _db_row(
            id=2, keyword_id=5, keyword="stake casino review", category="Casino Games", platform="Claude",
            query="Is Stake safe?", brand_mentioned=True, brand_sentiment="Positive", overall_sentiment="Positive",
            confidence_score=0.7, word_count=120, response_time_ms=840, citations=[],
            created_at=NOW - timedelta(days=1),
        )
        older = _db_row(
            id=1, keyword_id=5, keyword="stake casino review", category="Casino Games", platform="ChatGPT",
            query="Best casinos", brand_mentioned=False, brand_sentiment="Neutral", overall_sentiment="Neutral",
            confidence_score=0.5, word_count=80, response_time_ms=610, citations=None,
            created_at=NOW - timedelta(days=3),
        )
        mock_db.execute.side_effect = [lookup, [newer, older]]

        result = await get_keyword_analytics(mock_db, 5, days=7, now=NOW)

        assert result.keyword == "stake casino review"
        assert result.category == "Casino Games"
        assert [a.id for a in result.analytics] == [2, 1]
        assert result.analytics[0].query == "Is Stake safe?"
        assert result.analytics[0].response_time_ms == 840
        assert result.analytics[1].citations == []
        assert result.stats.total_analyses == 2
        assert result.stats.brand_mentions == 1
        assert result.stats.avg_confidence_score == 0.6
        assert result.stats.platform_breakdown == {"Claude": 1, "ChatGPT": 1}
        assert result.period.days == 7

        sql, params = _compiled(mock_db.execute.await_args_list[1].args[0])
        assert "LIMIT" in sql
        assert 20 in params.values()
        assert NOW - timedelta(days=7) in params.values()

    async def test_unknown_keyword(self, mock_db):
        lookup = MagicMock()
        lookup.one_or_none.return_value = None
        mock_db.execute.return_value = lookup

        with pytest.raises(NotFoundError) as exc_info:
            await get_keyword_analytics(mock_db, 9, now=NOW)
        assert exc_info.value.context == {"keyword_id": 9}

    @pytest.mark.parametrize("limit", [0, 101, True])
    async def test_keyword_analytics_bad_limit(self, mock_db, limit):
        with pytest.raises(InvalidInputError):
            await get_keyword_analytics(mock_db, 5, limit=limit, now=NOW)
        mock_db.execute.assert_not_awaited()

    async def test_keyword_analytics_bad_platform(self, mock_db):
        with pytest.raises(InvalidInputError):
            await get_keyword_analytics(mock_db, 5, platform="Bing", now=NOW)
        mock_db.execute.assert_not_awaited()


# ===================================================================
# Per-keyword analytics
# ===================================================================


class TestKeywordAnalytics:
    def test_sentiment_breakdown_zero_filled(self):
        rows = [
            _row(platform="ChatGPT", brand_mentioned=True, brand_sentiment="Very Positive", confidence_score=0.6),
            _row(platform="Gemini", brand_mentioned=True, brand_sentiment="Very Positive", confidence_score=0.7),
            _row(platform="ChatGPT", brand_sentiment="Negative", confidence_score=0.8),
        ]
        stats = compute_keyword_analytics(rows)

        assert stats.sentiment_breakdown == {
            "Very Positive": 2,
            "Positive": 0,
            "Neutral": 0,
            "Negative": 1,
            "Very Negative": 0,
        }
        assert stats.platform_breakdown == {"ChatGPT": 2, "Gemini": 1}
        assert stats.total_analyses == 3
        assert stats.brand_mentions == 2
        assert stats.avg_confidence_score == 0.7

    def test_empty(self):
        stats = compute_keyword_analytics([])
        assert stats.total_analyses == 0
        assert stats.brand_mentions == 0
        assert stats.avg_confidence_score == 0.0
        assert stats.platform_breakdown == {}
        assert set(stats.sentiment_breakdown) == {"Very Positive", "Positive", "Neutral", "Negative", "Very Negative"}
        assert sum(stats.sentiment_breakdown.values()) == 0

    def test_wire_aliases(self):
        data = compute_keyword_analytics([_row(brand_mentioned=True)]).model_dump(by_alias=True)
        assert data["stakeMentions"] == 1
        assert data["totalAnalyses"] == 1
        assert data["sentimentBreakdown"]["Neutral"] == 1


# ===================================================================
# SQL statements and fetchers
# ===================================================================


def _compiled(stmt) -> tuple[str, dict]:
    compiled = stmt.compile(dialect=postgresql.dialect())
    return " ".join(str(compiled).split()), compiled.params


def _db_row(**fields) -> SimpleNamespace:
    """Stand-in for a SQLAlchemy Row: attribute access plus ``_mapping``."""
    return SimpleNamespace(_mapping=fields, **fields)


class TestStatements:
    def test_client_lookup_by_name(self):
        sql, params = _compiled(_client_id_stmt("Stake"))
        assert "FROM clients WHERE clients.name = " in sql
        assert list(params.values()) == ["Stake"]

    def test_keyword_rows_scoped_to_client(self):
        sql, params = _compiled(_keyword_rows_stmt(7))
        assert "FROM keywords WHERE keywords.client_id = " in sql
        assert list(params.values()) == [7]

    def test_analysis_rows_window_and_order(self):
        sql, params = _compiled(_analysis_rows_stmt(7, SINCE))
        assert "FROM analyses JOIN keywords ON analyses.keyword_id = keywords.id" in sql
        assert "keywords.client_id = " in sql
        assert "analyses.created_at >= " in sql
        assert "analyses.platform" not in sql.split("WHERE", 1)[1]
        assert sql.endswith("ORDER BY analyses.created_at, analyses.id")
        assert sorted(params.values(), key=str) == sorted([7, SINCE], key=str)

    def test_analysis_rows_platform_filter(self):
        sql, params = _compiled(_analysis_rows_stmt(7, SINCE, Platform.GEMINI))
        assert "analyses.platform = " in sql.split("WHERE", 1)[1]
        assert "Gemini" in params.values()

    def test_keyword_analysis_rows_newest_first_limited(self):
        sql, params = _compiled(_keyword_analysis_rows_stmt(5, SINCE, Platform.CLAUDE, 20))
        where = sql.split("WHERE", 1)[1]
        assert "analyses.keyword_id = " in where
        assert "analyses.created_at >= " in where
        assert "analyses.platform = " in where
        assert "ORDER BY analyses.created_at DESC, analyses.id DESC LIMIT" in sql
        assert {5, SINCE, "Claude", 20} <= set(params.values())


class TestFetchers:
    async def test_get_client_id(self, mock_db):
        result = MagicMock()
        result.scalar_one_or_none.return_value = 7
        mock_db.execute.return_value = result

        assert await _get_client_id(mock_db, "Stake") == 7
        sql, params = _compiled(mock_db.execute.await_args.args[0])
        assert "clients.name" in sql
        assert "Stake" in params.values()

    async def test_fetch_keyword_rows(self, mock_db):
        analyzed = NOW - timedelta(days=2)
        mock_db.execute.return_value = [
            _db_row(
                id=3, keyword="stake bonus", category="Promotions", status="paused", visibility_chatgpt=80,
                visibility_perplexity=0, visibility_claude=65, visibility_gemini=0, last_analyzed=analyzed,
            )
        ]
        rows = await _fetch_keyword_rows(mock_db, 7)

        assert rows == [
            KeywordRow(
                id=3, keyword="stake bonus", category="Promotions", status="paused", visibility_chatgpt=80,
                visibility_claude=65, last_analyzed=analyzed,
            )
        ]
        _, params = _compiled(mock_db.execute.await_args.args[0])
        assert 7 in params.values()

    async def test_fetch_analysis_rows(self, mock_db):
        created = NOW - timedelta(days=1)
        mock_db.execute.return_value = [
            _db_row(
                id=11, keyword_id=3, keyword="stake bonus", category="Promotions", platform="Perplexity",
                brand_mentioned=1, brand_sentiment="Positive", confidence_score=None, citations=None,
                created_at=created,
            )
        ]
        rows = await _fetch_analysis_rows(mock_db, 7, SINCE, Platform.PERPLEXITY)

        assert len(rows) == 1
        row = rows[0]
        assert (row.id, row.keyword_id, row.platform) == (11, 3, "Perplexity")
        assert row.brand_mentioned is True
        assert row.confidence_score == 0.0
        assert row.citations == []
        assert row.query == ""
        assert row.overall_sentiment == "Neutral"

        sql, params = _compiled(mock_db.execute.await_args.args[0])
        assert "JOIN keywords" in sql
        assert sql.endswith("ORDER BY analyses.created_at, analyses.id")
        assert {7, SINCE, "Perplexity"} <= set(params.values())
