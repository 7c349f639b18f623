"""Pydantic response models for the analytics dashboards.

Fields are snake_case in Python and camelCase on the wire.
"""

from datetime import date as date_type
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Overview
# ---------------------------------------------------------------------------


class OverviewStats(CamelModel):
    total_keywords: int = Field(ge=0, description="Active keywords of the client")
    analyzed_keywords: int = Field(ge=0, description="Keywords analyzed inside the window")
    recent_analytics: int = Field(ge=0, description="Analyses inside the window")
    brand_mentions: int = Field(ge=0, alias="stakeMentions", description="Analyses mentioning the brand")
    avg_visibility_score: int = Field(default=0, ge=0, le=100)
    mention_rate: float = Field(ge=0, le=100, description="Mentions / analyses (%), 1 dp")


class PlatformVisibility(CamelModel):
    chatgpt: int = Field(default=0, ge=0, le=100)
    perplexity: int = Field(default=0, ge=0, le=100)
    claude: int = Field(default=0, ge=0, le=100)
    gemini: int = Field(default=0, ge=0, le=100)


class PlatformStats(CamelModel):
    platform: str
    total_analyses: int = Field(ge=0)
    mentions: int = Field(ge=0)
    mention_rate: float = Field(ge=0, le=100)
    avg_confidence: float = Field(ge=0, le=1)


class TrendingKeyword(CamelModel):
    id: int
    keyword: str
    category: str
    analysis_count: int = Field(ge=1)
    mention_count: int = Field(ge=0)
    mention_rate: float = Field(ge=0, le=100)


class Period(CamelModel):
    days: int = Field(ge=1)
    from_: datetime = Field(alias="from")
    to: datetime


class OverviewResponse(CamelModel):
    overview: OverviewStats
    visibility: PlatformVisibility
    sentiment: dict[str, int]
    platforms: list[PlatformStats]
    trending_keywords: list[TrendingKeyword]
    period: Period


# ---------------------------------------------------------------------------
# Visibility trends
# ---------------------------------------------------------------------------


class PlatformDayStats(CamelModel):
    analyses: int = Field(ge=0)
    mentions: int = Field(ge=0)
    mention_rate: float = Field(ge=0, le=100)
    avg_confidence: float = Field(ge=0, le=1)


class DailyTrend(CamelModel):
    date: date_type
    total_analyses: int = Field(ge=0)
    total_mentions: int = Field(ge=0)
    mention_rate: float = Field(ge=0, le=100)
    platforms: dict[str, PlatformDayStats]


class TrendSummary(CamelModel):
    total_days: int = Field(ge=0)
    avg_daily_analyses: int = Field(ge=0)
    avg_mention_rate: float = Field(ge=0, le=100)
    platforms: list[str]


class TrendsResponse(CamelModel):
    trends: list[DailyTrend]
    summary: TrendSummary


# ---------------------------------------------------------------------------
# Citation analysis
# ---------------------------------------------------------------------------


class CitationSummary(CamelModel):
    total_citations: int = Field(ge=0)
    unique_domains: int = Field(ge=0)
    analyses_with_citations: int = Field(ge=0)
    avg_citations_per_analysis: float = Field(ge=0)


class DomainCount(CamelModel):
    domain: str
    count: int = Field(ge=1)


class PlatformCitationStats(CamelModel):
    platform: str
    total_analyses: int = Field(ge=0)
    with_citations: int = Field(ge=0)
    total_citations: int = Field(ge=0)
    citation_rate: float = Field(ge=0, le=100)


class RecentCitedAnalysis(CamelModel):
    id: int
    keyword: str
    category: str
    platform: str
    citation_count: int = Field(ge=0)
    brand_mentioned: bool = Field(alias="stakeMentioned")
    created_at: datetime


class CitationAnalysisResponse(CamelModel):
    summary: CitationSummary
    top_domains: list[DomainCount]
    platform_breakdown: list[PlatformCitationStats]
    recent_analyses: list[RecentCitedAnalysis]


# ---------------------------------------------------------------------------
# Per-keyword analytics
# ---------------------------------------------------------------------------


class KeywordAnalysisItem(CamelModel):
    id: int
    platform: str
    query: str
    brand_mentioned: bool = Field(alias="stakeMentioned")
    brand_sentiment: str
    overall_sentiment: str
    confidence_score: float = Field(ge=0, le=1)
    word_count: int = Field(ge=0)
    response_time_ms: int = Field(ge=0)
    citations: list
    created_at: datetime


class KeywordAnalyticsStats(CamelModel):
    total_analyses: int = Field(ge=0)
    brand_mentions: int = Field(ge=0, alias="stakeMentions")
    avg_confidence_score: float = Field(ge=0, le=1, description="2 dp; 0 when there are no analyses")
    sentiment_breakdown: dict[str, int] = Field(description="Every brand-sentiment class, zero-filled")
    platform_breakdown: dict[str, int]


class KeywordAnalyticsResponse(CamelModel):
    keyword: str
    category: str
    analytics: list[KeywordAnalysisItem]  # newest first
    stats: KeywordAnalyticsStats
    period: Period
