"""Calendar-day streak detection over a sparse daily history.

A streak is the run of consecutive qualifying days ending at (and including)
``today``. Missing days are never filled in: a day without a record breaks
the run exactly like a day whose record fails the predicate.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date, timedelta
from decimal import Decimal
from typing import Protocol


class DayRecord(Protocol):
    date: date
    total_points: int
    pages_read: int
    distance_km: Decimal

    def task(self, number: int) -> int: ...


Predicate = Callable[[DayRecord], bool]


def any_activity(record: DayRecord) -> bool:
    return record.total_points > 0


def all_tasks_done(record: DayRecord) -> bool:
    return record.total_points == 10


def task_done(number: int) -> Predicate:
    """Predicate for a single task flag, e.g. ``task_done(9)`` for the early wake-up task."""
    if not 1 <= number <= 10:
        msg = f"Task number must be 1..10, got {number}"
        raise ValueError(msg)

    def _check(record: DayRecord) -> bool:
        return record.task(number) == 1

    _check.__name__ = f"task_{number}_done"
    return _check


def index_by_date(history: Iterable[DayRecord]) -> dict[date, DayRecord]:
    """Map each record to its date. Later duplicates win, which never happens with a unique day key."""
    return {record.date: record for record in history}


def consecutive_streak(
    history: Iterable[DayRecord],
    today: date,
    predicate: Predicate,
    cap: int,
) -> int:
    """Count consecutive qualifying days walking backward from ``today``.

    Stops at the first missing or non-qualifying day, or once ``cap`` is reached.
    ``history`` may be in any order; callers usually pass it newest first.
    """
    by_date = index_by_date(history)
    streak = 0
    day = today
    while streak < cap:
        record = by_date.get(day)
        if record is None or not predicate(record):
            break
        streak += 1
        day -= timedelta(days=1)
    return streak


def longest_streak(history: Iterable[DayRecord], predicate: Predicate) -> int:
    """Longest run of consecutive qualifying days anywhere in ``history``."""
    return longest_run(record.date for record in history if predicate(record))


def longest_run(days: Iterable[date]) -> int:
    """Longest run of consecutive calendar dates; duplicates count once."""
    qualifying = sorted(set(days))
    longest = 0
    current = 0
    previous: date | None = None
    for day in qualifying:
        if previous is not None and day - previous == timedelta(days=1):
            current += 1
        else:
            current = 1
        longest = max(longest, current)
        previous = day
    return longest
