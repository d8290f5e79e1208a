"""Calendar-day resolution in the submitter's timezone.

Every "today" and "this week" in the system goes through here. Weeks are
Monday-first: Monday is index 0, Sunday is index 6.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import NamedTuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from streakboard.config import get_settings

logger = structlog.get_logger()

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


class WeekBounds(NamedTuple):
    monday: date
    sunday: date
    today_index: int


def _load_zone(name: str | None) -> tzinfo | None:
    if not name or not isinstance(name, str):
        return None
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return None


def resolve_timezone(name: str | None = None) -> tzinfo:
    """Resolve an IANA timezone name, degrading to the configured default, then UTC.

    Never raises: an unusable name is logged and replaced.
    """
    zone = _load_zone(name)
    if zone is not None:
        return zone
    if name:
        logger.debug("timezone_fallback", requested=name)
    default = _load_zone(get_settings().default_timezone)
    return default if default is not None else timezone.utc


def today(tz_name: str | None = None, now: datetime | None = None) -> date:
    """Calendar date of ``now`` (default: current instant) in the resolved timezone."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(resolve_timezone(tz_name)).date()


def get_monday(d: date) -> date:
    """Monday of the week containing ``d``."""
    return d - timedelta(days=d.weekday())


def week_bounds(tz_name: str | None = None, now: datetime | None = None) -> WeekBounds:
    """(Monday, Sunday, index of today within the week) for the current local week."""
    current = today(tz_name, now)
    monday = get_monday(current)
    return WeekBounds(monday, monday + timedelta(days=6), current.weekday())


def lookback_start(day: date, days: int) -> date:
    """First date of a ``days``-long window ending at ``day`` (inclusive)."""
    return day - timedelta(days=max(days, 1) - 1)
