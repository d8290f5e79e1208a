"""Leaderboard service: period × metric rankings over daily progress.

Scores are aggregated in PostgreSQL (one row per approved user with a
positive score in the period window) and ranked deterministically in
``competition.ranking``. Entries are enriched with profiles in one batch.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import func, select

from streakboard.competition.ranking import locate, rank_scores, standing
from streakboard.config import get_settings
from streakboard.db.models import DailyProgress, User
from streakboard.errors import ValidationError
from streakboard.progress import day_resolver
from streakboard.progress.service import to_decimal

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

PERIODS = ("daily", "weekly", "all_time")

METRICS: dict[str, str] = {
    "overall": "total_points",
    "reading": "pages_read",
    "distance": "distance_km",
}


def period_window(
    period: str, tz_name: str | None = None, now: datetime | None = None
) -> tuple[date | None, date | None]:
    """Inclusive (start, end) dates for a period; ``(None, None)`` means no filter.

    Raises:
        ValidationError: If the period is unknown.
    """
    if period == "daily":
        current = day_resolver.today(tz_name, now)
        return current, current
    if period == "weekly":
        week = day_resolver.week_bounds(tz_name, now)
        return week.monday, week.sunday
    if period == "all_time":
        return None, None
    raise ValidationError("period", f"Unknown period: {period}. Expected one of {', '.join(PERIODS)}")


def metric_column(metric: str) -> Any:
    """ORM column summed for a metric.

    Raises:
        ValidationError: If the metric is unknown.
    """
    try:
        return getattr(DailyProgress, METRICS[metric])
    except KeyError:
        raise ValidationError(
            "metric", f"Unknown metric: {metric}. Expected one of {', '.join(METRICS)}"
        ) from None


def _score_value(metric: str, raw: Any) -> int | float:
    if metric == "distance":
        return float(to_decimal(raw))
    return int(raw or 0)


async def aggregate_scores(
    db: AsyncSession,
    metric: str,
    start: date | None,
    end: date | None,
) -> list[dict[str, Any]]:
    """Per-user metric sums in the window, for approved users with a positive sum."""
    column = metric_column(metric)
    score = func.sum(column).label("score")
    query = (
        select(DailyProgress.user_id, score)
        .join(User, User.id == DailyProgress.user_id)
        .where(User.is_approved.is_(True))
        .group_by(DailyProgress.user_id)
        .having(func.sum(column) > 0)
    )
    if start is not None:
        query = query.where(DailyProgress.date >= start)
    if end is not None:
        query = query.where(DailyProgress.date <= end)

    result = await db.execute(query)
    return [{"user_id": row.user_id, "score": _score_value(metric, row.score)} for row in result]


async def get_user_profiles_batch(
    db: AsyncSession, user_ids: list[int],
) -> dict[int, dict]:
    """Batch-load user profiles for leaderboard enrichment."""
    if not user_ids:
        return {}

    result = await db.execute(select(User).where(User.id.in_(user_ids)))
    users = {u.id: u for u in result.scalars()}

    profiles = {}
    for uid in user_ids:
        u = users.get(uid)
        profiles[uid] = {
            "name": u.name if u else f"User {uid}",
            "username": u.username if u else None,
            "photo_url": u.photo_url if u else None,
            "achievements": list(u.achievements or []) if u else [],
        }
    return profiles


def _entry(row: dict[str, Any], profile: dict[str, Any]) -> dict[str, Any]:
    return {
        "rank": row["rank"],
        "user_id": row["user_id"],
        "name": profile.get("name", f"User {row['user_id']}"),
        "username": profile.get("username"),
        "photo_url": profile.get("photo_url"),
        "achievements": profile.get("achievements", []),
        "score": row["score"],
    }


async def get_leaderboard(
    db: AsyncSession,
    period: str = "all_time",
    metric: str = "overall",
    limit: int | None = None,
    focus_user_id: int | None = None,
    tz_name: str | None = None,
    now: datetime | None = None,
) -> dict:
    """Top ``limit`` users for a period and metric, plus the focus user's standing.

    ``total_participants`` counts every user with a positive score regardless
    of ``limit``. A focus user outside the top list is ranked by how many
    participants score strictly higher, plus one, which places an approved
    focus user without a score right after the last participant. Unknown or
    pending focus users yield None.

    Raises:
        ValidationError: If period, metric or limit is invalid.
    """
    settings = get_settings()
    if limit is None:
        limit = settings.leaderboard_default_limit
    if not 1 <= limit <= settings.leaderboard_max_limit:
        raise ValidationError("limit", f"limit must be between 1 and {settings.leaderboard_max_limit}")
    if now is None:
        now = datetime.now(timezone.utc)
    start, end = period_window(period, tz_name, now)

    ranked = rank_scores(await aggregate_scores(db, metric, start, end))
    total_participants = len(ranked)
    top = ranked[:limit]

    focus_row = locate(ranked, focus_user_id) if focus_user_id is not None else None
    in_top_list = focus_row is not None and focus_row["rank"] <= limit
    profile_ids = [row["user_id"] for row in top]
    if focus_row is not None and not in_top_list:
        profile_ids.append(focus_row["user_id"])
    profiles = await get_user_profiles_batch(db, profile_ids)

    entries = [_entry(row, profiles.get(row["user_id"], {})) for row in top]

    focus_user = None
    if focus_row is not None:
        focus_user = {
            **_entry(focus_row, profiles.get(focus_row["user_id"], {})),
            "in_top_list": in_top_list,
        }
        if not in_top_list:
            focus_user["rank"] = standing(ranked, focus_row["score"])
    elif focus_user_id is not None:
        user = await db.get(User, focus_user_id)
        if user is not None and user.is_approved:
            focus_user = {
                "rank": standing(ranked, 0),
                "user_id": user.id,
                "name": user.name,
                "username": user.username,
                "photo_url": user.photo_url,
                "achievements": list(user.achievements or []),
                "score": _score_value(metric, 0),
                "in_top_list": False,
            }

    logger.debug(
        "leaderboard_built",
        period=period,
        metric=metric,
        limit=limit,
        participants=total_participants,
    )
    return {
        "period": period,
        "metric": metric,
        "entries": entries,
        "total_participants": total_participants,
        "focus_user": focus_user,
    }
