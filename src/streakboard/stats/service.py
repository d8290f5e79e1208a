"""Per-user statistics: today, the current Monday–Sunday week, and all time.

``build_summary`` is pure; ``summarize`` fetches the snapshot it needs (the
lookback window plus all-time aggregates) and hands it over.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import case, func, select

from streakboard.config import get_settings
from streakboard.db.models import DailyProgress, User
from streakboard.gamification.catalogue import EARLY_RISE_TASK
from streakboard.gamification.streak import (
    all_tasks_done,
    any_activity,
    consecutive_streak,
    index_by_date,
    longest_run,
    longest_streak,
    task_done,
)
from streakboard.progress import day_resolver
from streakboard.progress.service import (
    ProgressTotals,
    active_dates,
    progress_totals,
    recent_history,
    serialize_progress,
    to_decimal,
)
from streakboard.users.service import count_approved_users, require_approved_user

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from streakboard.gamification.streak import DayRecord


DAYS_IN_WEEK = 7


def week_daily_points(history: Sequence[DayRecord], monday: date) -> list[int]:
    """Points per day for the week starting ``monday``. Always seven entries; missing days are 0."""
    by_date = index_by_date(history)
    points = []
    for offset in range(DAYS_IN_WEEK):
        record = by_date.get(monday + timedelta(days=offset))
        points.append(record.total_points if record else 0)
    return points


def best_day(daily_points: Sequence[int]) -> dict[str, Any]:
    """Weekday with the most points; the earliest day wins ties, Monday when all are zero."""
    index = max(range(len(daily_points)), key=lambda i: (daily_points[i], -i))
    return {
        "index": index,
        "weekday": day_resolver.WEEKDAY_NAMES[index],
        "points": daily_points[index],
    }


def build_summary(
    history: Sequence[DayRecord],
    totals: ProgressTotals,
    today: date,
    week: day_resolver.WeekBounds,
    streak_cap: int | None = None,
    longest: int | None = None,
) -> dict[str, Any]:
    """Assemble the today / this_week / all_time summary from a history snapshot.

    ``history`` must cover at least the current week and ``streak_cap`` days back from today.
    ``longest`` is the all-time longest active run; without it the run is measured
    over ``history`` alone.
    """
    if streak_cap is None:
        streak_cap = get_settings().history_lookback_days
    if longest is None:
        longest = longest_streak(history, any_activity)
    by_date = index_by_date(history)

    week_records = [r for r in history if week.monday <= r.date <= week.sunday]
    daily_points = week_daily_points(week_records, week.monday)

    return {
        "today": serialize_progress(by_date.get(today), today),
        "this_week": {
            "start": week.monday,
            "end": week.sunday,
            "today_index": week.today_index,
            "daily_points": daily_points,
            "total_points": sum(daily_points),
            "total_pages": sum(r.pages_read for r in week_records),
            "total_distance": sum((to_decimal(r.distance_km) for r in week_records), Decimal("0.00")),
            "best_day": best_day(daily_points),
        },
        "all_time": {
            "total_points": totals.points,
            "total_pages": totals.pages,
            "total_distance": totals.distance,
            "total_days": totals.days,
            "current_streak": consecutive_streak(history, today, any_activity, cap=streak_cap),
            "longest_streak": longest,
            "perfectionist_streak": consecutive_streak(history, today, all_tasks_done, cap=streak_cap),
            "early_bird_streak": consecutive_streak(
                history, today, task_done(EARLY_RISE_TASK), cap=streak_cap
            ),
        },
    }


async def summarize(
    db: AsyncSession,
    user_id: int,
    tz_name: str | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Statistics summary for one approved user in their local calendar.

    Raises:
        UnknownUserError: If the user does not exist.
        UserNotApprovedError: If the user is still pending approval.
    """
    user = await require_approved_user(db, user_id)
    if now is None:
        now = datetime.now(timezone.utc)
    today = day_resolver.today(tz_name, now)
    week = day_resolver.week_bounds(tz_name, now)

    # The lookback window always reaches back past this week's Monday.
    history = await recent_history(db, user_id, today)
    totals = await progress_totals(db, user_id)
    longest = longest_run(await active_dates(db, user_id))

    summary = build_summary(history, totals, today, week, longest=longest)
    summary["user"] = {
        "id": user.id,
        "name": user.name,
        "username": user.username,
        "photo_url": user.photo_url,
        "achievements": list(user.achievements or []),
    }
    return summary


async def global_summary(
    db: AsyncSession,
    tz_name: str | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Challenge-wide numbers for today: participants, active users, points."""
    today = day_resolver.today(tz_name, now)
    total_users = await count_approved_users(db)

    result = await db.execute(
        select(
            func.coalesce(func.sum(case((DailyProgress.total_points > 0, 1), else_=0)), 0),
            func.coalesce(func.sum(DailyProgress.total_points), 0),
        )
        .join(User, User.id == DailyProgress.user_id)
        .where(DailyProgress.date == today, User.is_approved.is_(True))
    )
    active_today, points_today = result.one()
    active_today = int(active_today)
    points_today = int(points_today)

    return {
        "date": today,
        "total_users": total_users,
        "active_users_today": active_today,
        "total_points_today": points_today,
        "average_points_per_user": round(points_today / active_today, 1) if active_today else 0.0,
    }
