"""User management router: all /api/v1/users/* registration endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from streakboard.database import get_session
from streakboard.db.models import User
from streakboard.dependencies import require_admin
from streakboard.users.schemas import (
    AuthStatusResponse,
    RegisterRequest,
    RejectResponse,
    UserProfileResponse,
    UserResponse,
)
from streakboard.users.service import (
    approve_user,
    auth_status,
    get_user,
    register_user,
    reject_user,
)

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


def _user_response(user: User) -> UserResponse:
    """Build a UserResponse from a User model."""
    return UserResponse(
        id=user.id,
        name=user.name,
        username=user.username,
        photo_url=user.photo_url,
        is_approved=user.is_approved,
        achievements=list(user.achievements or []),
        created_at=user.created_at,
    )


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_session),
):
    """Register a participant; they stay pending until an admin approves them."""
    user = await register_user(db, body.user_id, body.name, body.username, body.photo_url)
    await db.commit()
    return _user_response(user)


@router.get("/{user_id}", response_model=UserProfileResponse)
async def get_profile(
    user_id: int,
    db: AsyncSession = Depends(get_session),
):
    """Profile and registration/approval status. Unknown users get a status, not a 404."""
    user = await get_user(db, user_id)
    return UserProfileResponse(
        status=AuthStatusResponse(**auth_status(user)),
        user=_user_response(user) if user else None,
    )


@router.post("/{user_id}/approve", response_model=UserResponse, dependencies=[Depends(require_admin)])
async def approve(
    user_id: int,
    db: AsyncSession = Depends(get_session),
):
    """Approve a pending participant."""
    user = await approve_user(db, user_id)
    await db.commit()
    return _user_response(user)


@router.post("/{user_id}/reject", response_model=RejectResponse, dependencies=[Depends(require_admin)])
async def reject(
    user_id: int,
    db: AsyncSession = Depends(get_session),
):
    """Reject a pending participant and remove their registration."""
    await reject_user(db, user_id)
    await db.commit()
    return RejectResponse(user_id=user_id)
