"""Achievement evaluation and progress reporting.

Earning and progress share one code path per rule: a streak rule asks the
streak walker for a run capped at its threshold, a cumulative rule reads the
all-time total for its field. Earned ids only ever accumulate on the user.
"""

from __future__ import annotations

from collections.abc import Collection, Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy.exc import SQLAlchemyError

from streakboard.gamification.catalogue import (
    ACHIEVEMENTS,
    AchievementDefinition,
    CumulativeRule,
    StreakRule,
)
from streakboard.gamification.streak import DayRecord, consecutive_streak
from streakboard.progress import day_resolver
from streakboard.progress.service import ProgressTotals, progress_totals, recent_history, to_decimal
from streakboard.users.service import add_achievements, get_user, require_user

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


def _history_totals(history: Sequence[DayRecord]) -> ProgressTotals:
    return ProgressTotals(
        points=sum(r.total_points for r in history),
        pages=sum(r.pages_read for r in history),
        distance=sum((to_decimal(r.distance_km) for r in history), Decimal("0.00")),
        days=len({r.date for r in history}),
    )


def rule_value(
    achievement: AchievementDefinition,
    history: Sequence[DayRecord],
    today: date,
    totals: ProgressTotals,
) -> int | Decimal:
    """Current value measured by an achievement's rule (streak length or cumulative sum)."""
    rule = achievement.rule
    if isinstance(rule, StreakRule):
        return consecutive_streak(history, today, rule.predicate, cap=rule.threshold)
    if isinstance(rule, CumulativeRule):
        return totals.pages if rule.field == "pages_read" else totals.distance
    msg = f"Unsupported rule for {achievement.id}"
    raise TypeError(msg)


def earned_achievements(
    held: Collection[str],
    history: Sequence[DayRecord],
    today: date,
    totals: ProgressTotals | None = None,
) -> list[str]:
    """Catalogue ids not in ``held`` whose rule is satisfied, in catalogue order.

    Cumulative rules use ``totals`` when given, otherwise sums over ``history``.
    """
    if totals is None:
        totals = _history_totals(history)
    return [
        a.id
        for a in ACHIEVEMENTS
        if a.id not in held and rule_value(a, history, today, totals) >= a.threshold
    ]


def achievement_progress(
    held: Collection[str],
    history: Sequence[DayRecord],
    today: date,
    totals: ProgressTotals | None = None,
) -> list[dict[str, Any]]:
    """Progress bar data for every achievement, with ``current`` capped at ``max``."""
    if totals is None:
        totals = _history_totals(history)
    items = []
    for a in ACHIEVEMENTS:
        current = min(rule_value(a, history, today, totals), a.threshold)
        items.append({
            "id": a.id,
            "name": a.name,
            "description": a.description,
            "icon": a.icon,
            "color": a.color,
            "kind": a.rule.kind,
            "earned": a.id in held,
            "current": float(current) if isinstance(current, Decimal) else current,
            "max": a.threshold,
            "percentage": round(min(float(current) / a.threshold * 100, 100.0), 1),
        })
    return items


async def evaluate_achievements(db: AsyncSession, user_id: int, today: date) -> list[str]:
    """Grant newly satisfied achievements to the user and return their ids.

    Any database failure while loading or saving is logged and yields ``[]``;
    callers treat achievements as a side effect that must not fail them.
    """
    try:
        user = await get_user(db, user_id)
        if user is None:
            return []
        history = await recent_history(db, user_id, today)
        totals = await progress_totals(db, user_id)
        candidates = earned_achievements(user.achievements or [], history, today, totals)
        if not candidates:
            return []
        added = await add_achievements(db, user, candidates)
    except SQLAlchemyError:
        logger.warning("achievement_evaluation_failed", user_id=user_id, exc_info=True)
        await db.rollback()
        return []

    if added:
        logger.info("achievements_earned", user_id=user_id, achievements=added)
    return added


async def get_achievement_progress(
    db: AsyncSession,
    user_id: int,
    tz_name: str | None = None,
    now: datetime | None = None,
) -> list[dict[str, Any]]:
    """Achievement progress for one user as of their local today.

    Raises:
        UnknownUserError: If the user does not exist.
    """
    user = await require_user(db, user_id)
    today = day_resolver.today(tz_name, now)
    history = await recent_history(db, user_id, today)
    totals = await progress_totals(db, user_id)
    return achievement_progress(user.achievements or [], history, today, totals)
