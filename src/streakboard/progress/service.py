"""Daily progress store: the single write path plus range reads and aggregates.

One row per (user, calendar date). A second submission for the same day
replaces the first in full; ``total_points`` is always recomputed here from
the ten flags so the invariant holds on every storage engine.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, NamedTuple

import structlog
from sqlalchemy import func, select

from streakboard.config import get_settings
from streakboard.db.models import TASK_COLUMNS, TASK_COUNT, DailyProgress
from streakboard.errors import ValidationError
from streakboard.gamification.catalogue import MAX_STREAK_THRESHOLD
from streakboard.progress import day_resolver
from streakboard.users.service import require_approved_user

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

CENT = Decimal("0.01")

TASK_DEFINITIONS: tuple[dict[str, Any], ...] = (
    {"id": 1, "title": "Daily remembrance", "category": "prayer"},
    {"id": 2, "title": "Keep in touch with family", "category": "family"},
    {"id": 3, "title": "Listen to recitation", "category": "quran"},
    {"id": 4, "title": "Give to charity", "category": "charity"},
    {"id": 5, "title": "Read a book", "category": "knowledge"},
    {"id": 6, "title": "Lesson or course", "category": "education"},
    {"id": 7, "title": "Audiobook", "category": "audio"},
    {"id": 8, "title": "Sleep early", "category": "sleep"},
    {"id": 9, "title": "Wake up early", "category": "wake"},
    {"id": 10, "title": "Sport or exercise", "category": "sport"},
)


class ProgressTotals(NamedTuple):
    """All-time sums for one user."""

    points: int = 0
    pages: int = 0
    distance: Decimal = Decimal("0.00")
    days: int = 0


class ValidatedProgress(NamedTuple):
    flags: tuple[int, ...]
    pages_read: int
    distance_km: Decimal

    @property
    def total_points(self) -> int:
        return sum(self.flags)


@dataclass
class SubmissionResult:
    progress: DailyProgress
    date: date
    new_achievements: list[str] = field(default_factory=list)


def to_decimal(value: Any) -> Decimal:
    """Coerce a numeric DB/aggregate value to a 2-decimal Decimal (None → 0.00)."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_progress(flags: Sequence[Any], pages_read: Any, distance_km: Any) -> ValidatedProgress:
    """Check a submission payload and normalize it.

    Raises:
        ValidationError: naming the first offending field.
    """
    settings = get_settings()

    if len(flags) != TASK_COUNT:
        raise ValidationError("tasks", f"Exactly {TASK_COUNT} task flags are required, got {len(flags)}")
    normalized: list[int] = []
    for number, flag in enumerate(flags, start=1):
        if isinstance(flag, str) or flag not in (0, 1):
            raise ValidationError(f"task_{number}", f"task_{number} must be 0 or 1")
        normalized.append(int(flag))

    if isinstance(pages_read, bool) or not isinstance(pages_read, (int, float, Decimal)):
        raise ValidationError("pages_read", "pages_read must be an integer")
    try:
        pages = int(pages_read)
    except (ValueError, OverflowError, InvalidOperation):
        raise ValidationError("pages_read", "pages_read must be an integer") from None
    if pages != pages_read:
        raise ValidationError("pages_read", "pages_read must be an integer")
    if not 0 <= pages <= settings.max_pages_per_day:
        raise ValidationError("pages_read", f"pages_read must be between 0 and {settings.max_pages_per_day}")

    if isinstance(distance_km, bool):
        raise ValidationError("distance_km", "distance_km must be a number")
    try:
        distance = Decimal(str(distance_km))
    except (InvalidOperation, ValueError):
        raise ValidationError("distance_km", "distance_km must be a number") from None
    if not distance.is_finite():
        raise ValidationError("distance_km", "distance_km must be a number")
    if not 0 <= distance <= settings.max_distance_per_day:
        raise ValidationError(
            "distance_km", f"distance_km must be between 0 and {settings.max_distance_per_day}"
        )
    # In range, so the quantized value fits the context precision.
    distance = distance.quantize(CENT)

    return ValidatedProgress(tuple(normalized), pages, distance)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


def _dialect_insert(db: AsyncSession) -> Any:
    """INSERT construct with ON CONFLICT support for the bound dialect."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        msg = f"Upsert is not supported on dialect {dialect!r}"
        raise RuntimeError(msg)
    return insert


async def upsert_progress(
    db: AsyncSession,
    user_id: int,
    day: date,
    flags: Sequence[Any],
    pages_read: Any,
    distance_km: Any,
) -> DailyProgress:
    """Create or fully replace the (user_id, day) record and return the stored row.

    The write is a single ``INSERT ... ON CONFLICT (user_id, date) DO UPDATE``,
    so concurrent submissions for the same key land as one whole payload.

    Raises:
        ValidationError: If a flag or metric is out of range.
        UnknownUserError: If the user does not exist.
        UserNotApprovedError: If the user has not been approved.
    """
    payload = validate_progress(flags, pages_read, distance_km)
    await require_approved_user(db, user_id)

    now = datetime.now(timezone.utc)
    values: dict[str, Any] = dict(zip(TASK_COLUMNS, payload.flags, strict=True))
    values.update(
        pages_read=payload.pages_read,
        distance_km=payload.distance_km,
        total_points=payload.total_points,
        updated_at=now,
    )

    insert = _dialect_insert(db)
    stmt = insert(DailyProgress).values(user_id=user_id, date=day, created_at=now, **values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[DailyProgress.user_id, DailyProgress.date],
        set_={name: stmt.excluded[name] for name in values},
    )
    await db.execute(stmt)

    result = await db.execute(
        select(DailyProgress)
        .where(DailyProgress.user_id == user_id, DailyProgress.date == day)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def get_progress(db: AsyncSession, user_id: int, day: date) -> DailyProgress | None:
    """The record for one day, or None when nothing was submitted."""
    result = await db.execute(
        select(DailyProgress).where(DailyProgress.user_id == user_id, DailyProgress.date == day)
    )
    return result.scalar_one_or_none()


async def progress_range(
    db: AsyncSession, user_id: int, from_date: date, to_date: date
) -> list[DailyProgress]:
    """Records with ``from_date <= date <= to_date``, newest first. Gaps are not filled."""
    result = await db.execute(
        select(DailyProgress)
        .where(
            DailyProgress.user_id == user_id,
            DailyProgress.date >= from_date,
            DailyProgress.date <= to_date,
        )
        .order_by(DailyProgress.date.desc())
    )
    return list(result.scalars().all())


async def recent_history(db: AsyncSession, user_id: int, today: date) -> list[DailyProgress]:
    """The bounded lookback window used by streak computations.

    Never shorter than the longest streak rule, so no achievement is cut off.
    """
    days = max(get_settings().history_lookback_days, MAX_STREAK_THRESHOLD)
    return await progress_range(db, user_id, day_resolver.lookback_start(today, days), today)


async def active_dates(db: AsyncSession, user_id: int) -> list[date]:
    """Every date with at least one completed task, oldest first, unbounded."""
    result = await db.execute(
        select(DailyProgress.date)
        .where(DailyProgress.user_id == user_id, DailyProgress.total_points > 0)
        .order_by(DailyProgress.date)
    )
    return list(result.scalars())


async def progress_totals(db: AsyncSession, user_id: int) -> ProgressTotals:
    """All-time sums of points, pages and distance, plus the number of recorded days."""
    result = await db.execute(
        select(
            func.coalesce(func.sum(DailyProgress.total_points), 0),
            func.coalesce(func.sum(DailyProgress.pages_read), 0),
            func.coalesce(func.sum(DailyProgress.distance_km), 0),
            func.count(func.distinct(DailyProgress.date)),
        ).where(DailyProgress.user_id == user_id)
    )
    points, pages, distance, days = result.one()
    return ProgressTotals(int(points), int(pages), to_decimal(distance), int(days))


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


async def submit_progress(
    db: AsyncSession,
    user_id: int,
    flags: Sequence[Any],
    pages_read: Any,
    distance_km: Any,
    tz_name: str | None = None,
    now: datetime | None = None,
) -> SubmissionResult:
    """Store today's record for the user and grant any achievements it unlocks.

    The record is committed before achievements are evaluated; an achievement
    failure is logged and leaves ``new_achievements`` empty.
    """
    from streakboard.gamification.achievement_service import evaluate_achievements

    day = day_resolver.today(tz_name, now)
    progress = await upsert_progress(db, user_id, day, flags, pages_read, distance_km)
    await db.commit()

    logger.info(
        "progress_saved",
        user_id=user_id,
        date=day.isoformat(),
        total_points=progress.total_points,
        pages_read=progress.pages_read,
        distance_km=str(progress.distance_km),
    )

    new_achievements = await evaluate_achievements(db, user_id, day)
    if new_achievements:
        await db.commit()

    return SubmissionResult(progress=progress, date=day, new_achievements=new_achievements)


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------


def serialize_progress(record: DailyProgress | None, day: date) -> dict[str, Any]:
    """Record as a plain dict; an absent day is reported as all zeros."""
    if record is None:
        return {
            "date": day,
            "exists": False,
            "tasks": [0] * TASK_COUNT,
            "total_points": 0,
            "pages_read": 0,
            "distance_km": Decimal("0.00"),
            "completion_percentage": 0,
            "updated_at": None,
        }
    return {
        "date": record.date,
        "exists": True,
        "tasks": record.tasks,
        "total_points": record.total_points,
        "pages_read": record.pages_read,
        "distance_km": to_decimal(record.distance_km),
        "completion_percentage": round(record.total_points / TASK_COUNT * 100),
        "updated_at": record.updated_at,
    }


async def daily_tasks(
    db: AsyncSession, user_id: int, tz_name: str | None = None, now: datetime | None = None
) -> dict[str, Any]:
    """Today's task list with per-task completion for an approved user."""
    await require_approved_user(db, user_id)
    day = day_resolver.today(tz_name, now)
    record = await get_progress(db, user_id, day)
    flags = record.tasks if record else [0] * TASK_COUNT

    return {
        **serialize_progress(record, day),
        "items": [{**task, "completed": bool(flags[task["id"] - 1])} for task in TASK_DEFINITIONS],
        "total_tasks": TASK_COUNT,
    }


async def history_summary(
    db: AsyncSession,
    user_id: int,
    days: int = 30,
    tz_name: str | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Last ``days`` days of records (clamped to 1..history_max_days) with simple aggregates."""
    await require_approved_user(db, user_id)
    days = min(max(days, 1), get_settings().history_max_days)
    end = day_resolver.today(tz_name, now)
    start = day_resolver.lookback_start(end, days)
    history = await progress_range(db, user_id, start, end)

    recorded = len(history)
    total_points = sum(r.total_points for r in history)
    return {
        "user_id": user_id,
        "start": start,
        "end": end,
        "days_requested": days,
        "days_with_data": recorded,
        "history": [serialize_progress(r, r.date) for r in history],
        "total_points": total_points,
        "total_pages": sum(r.pages_read for r in history),
        "total_distance": sum((to_decimal(r.distance_km) for r in history), Decimal("0.00")),
        "perfect_days": sum(1 for r in history if r.total_points == TASK_COUNT),
        "average_points_per_day": round(total_points / recorded, 1) if recorded else 0.0,
        "completion_rate": round(total_points / (recorded * TASK_COUNT) * 100) if recorded else 0,
    }
