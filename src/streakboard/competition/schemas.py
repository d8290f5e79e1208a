"""Pydantic response models for leaderboard endpoints."""

from __future__ import annotations

from pydantic import BaseModel


class LeaderboardEntryResponse(BaseModel):
    rank: int
    user_id: int
    name: str
    username: str | None = None
    photo_url: str | None = None
    achievements: list[str] = []
    score: float


class FocusUserResponse(LeaderboardEntryResponse):
    in_top_list: bool


class LeaderboardResponse(BaseModel):
    period: str
    metric: str
    entries: list[LeaderboardEntryResponse]
    total_participants: int
    focus_user: FocusUserResponse | None = None
