"""Leaderboard API endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from streakboard.competition.leaderboard_service import get_leaderboard
from streakboard.competition.schemas import (
    FocusUserResponse,
    LeaderboardEntryResponse,
    LeaderboardResponse,
)
from streakboard.database import get_session

router = APIRouter(prefix="/api/v1", tags=["Leaderboard"])


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard_endpoint(
    period: str = Query("all_time", description="daily, weekly or all_time"),
    metric: str = Query("overall", description="overall, reading or distance"),
    limit: int | None = Query(None, description="Top entries to return (1-500)"),
    user_id: int | None = Query(None, description="Focus user to locate in the full ranking"),
    timezone: str | None = Query(None, max_length=64),
    db: AsyncSession = Depends(get_session),
):
    """Ranked users for a period and metric; ties broken by lower user id."""
    data = await get_leaderboard(
        db,
        period=period,
        metric=metric,
        limit=limit,
        focus_user_id=user_id,
        tz_name=timezone,
    )
    focus = data["focus_user"]
    return LeaderboardResponse(
        period=data["period"],
        metric=data["metric"],
        entries=[LeaderboardEntryResponse(**e) for e in data["entries"]],
        total_participants=data["total_participants"],
        focus_user=FocusUserResponse(**focus) if focus else None,
    )
