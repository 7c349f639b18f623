from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.collectors.llm_base import BaseLlmCollector
from app.core.dependencies import get_answer_provider
from app.db.postgres import get_db
from app.schemas.analysis import AnalyzeKeywordRequest, AnalyzeKeywordResponse
from app.schemas.analytics import KeywordAnalyticsResponse
from app.services.analysis_service import analyze_keyword
from app.services.analytics_service import get_keyword_analytics

router = APIRouter(prefix="/keywords", tags=["keywords"])


@router.post("/{keyword_id}/analyze", response_model=AnalyzeKeywordResponse)
async def analyze(
    keyword_id: int,
    body: AnalyzeKeywordRequest,
    db: AsyncSession = Depends(get_db),
    provider: BaseLlmCollector = Depends(get_answer_provider),
):
    """Run one query for the keyword against the answer provider and store the analysis."""
    return await analyze_keyword(
        db,
        keyword_id=keyword_id,
        platform=body.platform,
        query=body.query,
        provider=provider,
        context=body.context,
    )


@router.get("/{keyword_id}/analytics", response_model=KeywordAnalyticsResponse)
async def keyword_analytics(
    keyword_id: int,
    days: int | None = Query(None),
    platform: str | None = Query(None),
    limit: int | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Newest analyses of the keyword with sentiment and platform breakdowns."""
    return await get_keyword_analytics(db, keyword_id, days=days, platform=platform, limit=limit)
