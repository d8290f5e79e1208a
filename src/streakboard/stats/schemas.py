"""Pydantic response models for statistics endpoints."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel


class TodayStats(BaseModel):
    date: date
    exists: bool
    tasks: list[int]
    total_points: int
    pages_read: int
    distance_km: float
    completion_percentage: int
    updated_at: datetime | None = None


class BestDay(BaseModel):
    index: int
    weekday: str
    points: int


class WeekStats(BaseModel):
    start: date
    end: date
    today_index: int
    daily_points: list[int]
    total_points: int
    total_pages: int
    total_distance: float
    best_day: BestDay


class AllTimeStats(BaseModel):
    total_points: int
    total_pages: int
    total_distance: float
    total_days: int
    current_streak: int
    longest_streak: int
    perfectionist_streak: int
    early_bird_streak: int


class StatsUser(BaseModel):
    id: int
    name: str
    username: str | None = None
    photo_url: str | None = None
    achievements: list[str] = []


class UserStatisticsResponse(BaseModel):
    user: StatsUser
    today: TodayStats
    this_week: WeekStats
    all_time: AllTimeStats


class GlobalStatsResponse(BaseModel):
    date: date
    total_users: int
    active_users_today: int
    total_points_today: int
    average_points_per_user: float
