from typing import Any

from pydantic import Field

from app.analysis.types import Platform
from app.schemas.analytics import CamelModel


class AnalyzeKeywordRequest(CamelModel):
    query: str = Field(default="", max_length=5000)
    platform: str = Platform.CHATGPT.value  # validated by the service
    context: dict[str, Any] = Field(default_factory=dict)


class StoredAnalysis(CamelModel):
    id: int
    brand_mentioned: bool = Field(alias="stakeMentioned")
    brand_sentiment: str
    confidence_score: float = Field(ge=0, le=1)


class VisibilityUpdate(CamelModel):
    platform: str
    score: int | None = Field(default=None, ge=0, le=100, description="None when the platform has no score column")


class AnalyzeKeywordResponse(CamelModel):
    keyword: str
    analysis: dict[str, Any]  # classifier signals + responseTime + platform + usage
    analytics: StoredAnalysis
    visibility: VisibilityUpdate
