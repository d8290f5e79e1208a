"""Statistics API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from streakboard.database import get_session
from streakboard.stats.schemas import GlobalStatsResponse, UserStatisticsResponse
from streakboard.stats.service import global_summary, summarize

router = APIRouter(prefix="/api/v1", tags=["Statistics"])


@router.get("/users/{user_id}/statistics", response_model=UserStatisticsResponse)
async def get_user_statistics(
    user_id: int,
    timezone: str | None = Query(None, max_length=64),
    db: AsyncSession = Depends(get_session),
):
    """Today, this week and all-time totals plus streaks for one user."""
    return UserStatisticsResponse(**await summarize(db, user_id, tz_name=timezone))


@router.get("/stats/global", response_model=GlobalStatsResponse)
async def get_global_statistics(
    timezone: str | None = Query(None, max_length=64),
    db: AsyncSession = Depends(get_session),
):
    """Challenge-wide numbers for today."""
    return GlobalStatsResponse(**await global_summary(db, tz_name=timezone))
