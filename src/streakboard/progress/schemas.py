"""Pydantic request/response models for progress endpoints."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


# --- Submission ---


class SubmitProgressRequest(BaseModel):
    user_id: int
    task_1: int = 0
    task_2: int = 0
    task_3: int = 0
    task_4: int = 0
    task_5: int = 0
    task_6: int = 0
    task_7: int = 0
    task_8: int = 0
    task_9: int = 0
    task_10: int = 0
    pages_read: int = 0
    distance_km: Decimal = Decimal("0")
    timezone: str | None = Field(None, max_length=64, description="IANA zone, e.g. Asia/Tashkent")

    def flags(self) -> list[int]:
        return [getattr(self, f"task_{n}") for n in range(1, 11)]


class DailyProgressResponse(BaseModel):
    date: date
    exists: bool
    tasks: list[int]
    total_points: int
    pages_read: int
    distance_km: float
    completion_percentage: int
    updated_at: datetime | None = None


class SubmitProgressResponse(BaseModel):
    success: bool = True
    progress: DailyProgressResponse
    new_achievements: list[str] = []


# --- Tasks ---


class TaskDefinitionResponse(BaseModel):
    id: int
    title: str
    category: str


class TaskDefinitionsResponse(BaseModel):
    tasks: list[TaskDefinitionResponse]
    total: int


class TaskItemResponse(TaskDefinitionResponse):
    completed: bool


class DailyTasksResponse(DailyProgressResponse):
    items: list[TaskItemResponse]
    total_tasks: int


# --- History ---


class HistoryResponse(BaseModel):
    user_id: int
    start: date
    end: date
    days_requested: int
    days_with_data: int
    history: list[DailyProgressResponse]
    total_points: int
    total_pages: int
    total_distance: float
    perfect_days: int
    average_points_per_day: float
    completion_rate: int
