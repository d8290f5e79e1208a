"""Deterministic leaderboard ranking.

Users ranked by score DESC, then by user_id ASC. Users with no positive
score are not ranked at all.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Any

Score = int | float | Decimal


def rank_scores(rows: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Rank rows deterministically by score.

    Input: dicts with at least ``user_id`` (int) and ``score`` (number).

    Output: rows with ``score > 0`` sorted and augmented with a 1-indexed,
    gap-free ``rank``. Equal scores still get distinct ranks.
    """
    eligible = [row for row in rows if row["score"] > 0]

    def sort_key(row: dict[str, Any]) -> tuple[Score, int]:
        return (-row["score"], row["user_id"])

    ranked = sorted(eligible, key=sort_key)
    for idx, row in enumerate(ranked):
        row["rank"] = idx + 1
    return ranked


def locate(ranked: Sequence[dict[str, Any]], user_id: int) -> dict[str, Any] | None:
    """The ranked row for ``user_id``, or None when the user is not ranked."""
    for row in ranked:
        if row["user_id"] == user_id:
            return row
    return None


def standing(ranked: Sequence[dict[str, Any]], score: Score) -> int:
    """Standing of a score among ranked rows: users strictly ahead, plus one.

    Tied users share a standing here, unlike ``rank``, so a user tied with
    the last entry of a truncated list is placed level with it.
    """
    return 1 + sum(1 for row in ranked if row["score"] > score)
