"""Pydantic response models for achievement endpoints."""

from __future__ import annotations

from pydantic import BaseModel


class AchievementDefinitionResponse(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    color: str
    kind: str
    threshold: int


class AllAchievementsResponse(BaseModel):
    achievements: list[AchievementDefinitionResponse]


class AchievementProgressResponse(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    color: str
    kind: str
    earned: bool
    current: float
    max: int
    percentage: float


class UserAchievementsResponse(BaseModel):
    user_id: int
    earned: list[str]
    total_available: int
    total_earned: int
    achievements: list[AchievementProgressResponse]
