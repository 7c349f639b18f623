"""Analytics API: overview, visibility trends and citation dashboards."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.postgres import get_db
from app.schemas.analytics import CitationAnalysisResponse, OverviewResponse, TrendsResponse
from app.services.analytics_service import (
    AggregationWindow,
    get_citation_analysis,
    get_overview,
    get_visibility_trends,
)

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/overview", response_model=OverviewResponse)
async def overview(
    client_name: str | None = Query(None, alias="clientName"),
    days: int | None = Query(None),
    platform: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Overview: counters, per-platform visibility, sentiment, platform stats, trending keywords."""
    window = AggregationWindow.create(client_name, days, platform)
    return await get_overview(db, window)


@router.get("/trends", response_model=TrendsResponse)
async def visibility_trends(
    client_name: str | None = Query(None, alias="clientName"),
    days: int | None = Query(None),
    platform: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Daily analyses and mention rate, broken down by platform."""
    window = AggregationWindow.create(client_name, days, platform)
    return await get_visibility_trends(db, window)


@router.get("/citations", response_model=CitationAnalysisResponse)
async def citation_analysis(
    client_name: str | None = Query(None, alias="clientName"),
    days: int | None = Query(None),
    platform: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Most cited domains and per-platform citation rates."""
    window = AggregationWindow.create(client_name, days, platform)
    return await get_citation_analysis(db, window)
