"""Achievement definitions.

The catalogue is a fixed tuple iterated in display order. Each entry carries
its own rule, so evaluation never dispatches on achievement ids.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from streakboard.gamification.streak import Predicate, all_tasks_done, any_activity, task_done

# Task 9 is the early wake-up task.
EARLY_RISE_TASK = 9

CumulativeField = Literal["pages_read", "distance_km"]


@dataclass(frozen=True)
class StreakRule:
    """Earned when ``predicate`` holds for ``threshold`` consecutive days ending today."""

    predicate: Predicate
    threshold: int

    kind = "streak"


@dataclass(frozen=True)
class CumulativeRule:
    """Earned when the all-time sum of ``field`` reaches ``threshold``."""

    field: CumulativeField
    threshold: int

    kind = "cumulative"


@dataclass(frozen=True)
class AchievementDefinition:
    id: str
    name: str
    description: str
    icon: str
    color: str
    rule: StreakRule | CumulativeRule

    @property
    def threshold(self) -> int:
        return self.rule.threshold


ACHIEVEMENTS: tuple[AchievementDefinition, ...] = (
    AchievementDefinition(
        id="consistent",
        name="Consistent",
        description="Be active 21 days in a row",
        icon="\U0001f525",
        color="#ef4444",
        rule=StreakRule(any_activity, 21),
    ),
    AchievementDefinition(
        id="reader",
        name="Bookworm",
        description="Read 6,000 pages in total",
        icon="\U0001f4da",
        color="#3b82f6",
        rule=CumulativeRule("pages_read", 6000),
    ),
    AchievementDefinition(
        id="athlete",
        name="Athlete",
        description="Cover 100 km in total",
        icon="\U0001f3c3",
        color="#10b981",
        rule=CumulativeRule("distance_km", 100),
    ),
    AchievementDefinition(
        id="early_bird",
        name="Early Bird",
        description="Wake up early 21 days in a row",
        icon="\U0001f305",
        color="#8b5cf6",
        rule=StreakRule(task_done(EARLY_RISE_TASK), 21),
    ),
    AchievementDefinition(
        id="perfectionist",
        name="Perfectionist",
        description="Complete all 10 tasks 21 days in a row",
        icon="⭐",
        color="#f59e0b",
        rule=StreakRule(all_tasks_done, 21),
    ),
)

ACHIEVEMENT_IDS: frozenset[str] = frozenset(a.id for a in ACHIEVEMENTS)

# Longest streak threshold in the catalogue; history windows must cover at least this many days.
MAX_STREAK_THRESHOLD = max(a.threshold for a in ACHIEVEMENTS if isinstance(a.rule, StreakRule))
