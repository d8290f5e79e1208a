"""Request/response schemas for user endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    user_id: int = Field(..., gt=0)
    name: str = Field(..., min_length=2, max_length=200)
    username: str | None = Field(None, max_length=100)
    photo_url: str | None = None


class AuthStatusResponse(BaseModel):
    is_registered: bool
    is_approved: bool
    message: str


class UserResponse(BaseModel):
    id: int
    name: str
    username: str | None = None
    photo_url: str | None = None
    is_approved: bool
    achievements: list[str] = []
    created_at: datetime | None = None


class UserProfileResponse(BaseModel):
    status: AuthStatusResponse
    user: UserResponse | None = None


class RejectResponse(BaseModel):
    user_id: int
    status: str = "rejected"
