"""Achievement API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from streakboard.database import get_session
from streakboard.gamification.achievement_service import get_achievement_progress
from streakboard.gamification.catalogue import ACHIEVEMENTS
from streakboard.gamification.schemas import (
    AchievementDefinitionResponse,
    AchievementProgressResponse,
    AllAchievementsResponse,
    UserAchievementsResponse,
)

router = APIRouter(prefix="/api/v1", tags=["Achievements"])


@router.get("/achievements", response_model=AllAchievementsResponse)
async def list_achievements():
    """All achievement definitions in display order."""
    return AllAchievementsResponse(
        achievements=[
            AchievementDefinitionResponse(
                id=a.id,
                name=a.name,
                description=a.description,
                icon=a.icon,
                color=a.color,
                kind=a.rule.kind,
                threshold=a.threshold,
            )
            for a in ACHIEVEMENTS
        ]
    )


@router.get("/users/{user_id}/achievements", response_model=UserAchievementsResponse)
async def get_user_achievements(
    user_id: int,
    timezone: str | None = Query(None, max_length=64),
    db: AsyncSession = Depends(get_session),
):
    """Earned achievements and progress bars toward the rest."""
    items = await get_achievement_progress(db, user_id, tz_name=timezone)
    earned = [item["id"] for item in items if item["earned"]]
    return UserAchievementsResponse(
        user_id=user_id,
        earned=earned,
        total_available=len(items),
        total_earned=len(earned),
        achievements=[AchievementProgressResponse(**item) for item in items],
    )
