"""Progress API endpoints: submission, daily task view, history."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from streakboard.database import get_session
from streakboard.progress.schemas import (
    DailyProgressResponse,
    DailyTasksResponse,
    HistoryResponse,
    SubmitProgressRequest,
    SubmitProgressResponse,
    TaskDefinitionResponse,
    TaskDefinitionsResponse,
)
from streakboard.progress.service import (
    TASK_DEFINITIONS,
    daily_tasks,
    get_progress,
    history_summary,
    serialize_progress,
    submit_progress,
)
from streakboard.users.service import require_approved_user

router = APIRouter(prefix="/api/v1", tags=["Progress"])


@router.get("/tasks/definitions", response_model=TaskDefinitionsResponse)
async def list_task_definitions():
    """The ten fixed daily tasks."""
    return TaskDefinitionsResponse(
        tasks=[TaskDefinitionResponse(**t) for t in TASK_DEFINITIONS],
        total=len(TASK_DEFINITIONS),
    )


@router.post("/progress", response_model=SubmitProgressResponse)
async def submit_daily_progress(
    body: SubmitProgressRequest,
    db: AsyncSession = Depends(get_session),
):
    """Save today's progress (replacing any earlier submission today)."""
    result = await submit_progress(
        db,
        body.user_id,
        body.flags(),
        body.pages_read,
        body.distance_km,
        tz_name=body.timezone,
    )
    return SubmitProgressResponse(
        progress=DailyProgressResponse(**serialize_progress(result.progress, result.date)),
        new_achievements=result.new_achievements,
    )


@router.get("/progress/{user_id}/today", response_model=DailyTasksResponse)
async def get_today(
    user_id: int,
    timezone: str | None = Query(None, max_length=64),
    db: AsyncSession = Depends(get_session),
):
    """Today's record with per-task completion; zeros when nothing was submitted."""
    return DailyTasksResponse(**await daily_tasks(db, user_id, tz_name=timezone))


@router.get("/progress/{user_id}/history", response_model=HistoryResponse)
async def get_history(
    user_id: int,
    days: int = Query(30, ge=1, le=365),
    timezone: str | None = Query(None, max_length=64),
    db: AsyncSession = Depends(get_session),
):
    """Recorded days over the last ``days`` days, newest first."""
    return HistoryResponse(**await history_summary(db, user_id, days=days, tz_name=timezone))


@router.get("/progress/{user_id}/{day}", response_model=DailyProgressResponse)
async def get_day(
    user_id: int,
    day: date,
    db: AsyncSession = Depends(get_session),
):
    """Record for a specific calendar date; zeros when nothing was submitted."""
    await require_approved_user(db, user_id)
    record = await get_progress(db, user_id, day)
    return DailyProgressResponse(**serialize_progress(record, day))
