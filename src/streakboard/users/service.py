"""Participant registration, approval and achievement bookkeeping."""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, func, select

from streakboard.db.models import DailyProgress, User
from streakboard.errors import ConflictError, UnknownUserError, UserNotApprovedError, ValidationError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 200
USERNAME_MAX_LENGTH = 100

_WHITESPACE = re.compile(r"\s+")


async def get_user(db: AsyncSession, user_id: int) -> User | None:
    """Fetch a user by id, or None."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def require_user(db: AsyncSession, user_id: int) -> User:
    """Fetch a user by id.

    Raises:
        UnknownUserError: If no such user is registered.
    """
    user = await get_user(db, user_id)
    if user is None:
        raise UnknownUserError(user_id)
    return user


async def require_approved_user(db: AsyncSession, user_id: int) -> User:
    """Fetch a user that has passed admin approval.

    Raises:
        UnknownUserError: If no such user is registered.
        UserNotApprovedError: If the user is still pending.
    """
    user = await require_user(db, user_id)
    if not user.is_approved:
        raise UserNotApprovedError(user_id)
    return user


def normalize_name(name: str) -> str:
    """Collapse whitespace and check the full-name rules used at registration.

    Raises:
        ValidationError: If the name is too short, too long, or a single word.
    """
    clean = _WHITESPACE.sub(" ", name or "").strip()
    if not NAME_MIN_LENGTH <= len(clean) <= NAME_MAX_LENGTH:
        raise ValidationError("name", f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters")
    if any(ch.isdigit() for ch in clean):
        raise ValidationError("name", "Name contains invalid characters")
    if len(clean.split(" ")) < 2:
        raise ValidationError("name", "Please provide both first and last name")
    return clean


async def register_user(
    db: AsyncSession,
    user_id: int,
    name: str,
    username: str | None = None,
    photo_url: str | None = None,
) -> User:
    """Create a pending (unapproved) participant.

    Raises:
        ValidationError: If the id or name is malformed.
        ConflictError: If the id is already registered.
    """
    if user_id <= 0:
        raise ValidationError("user_id", "user_id must be a positive integer")
    clean_name = normalize_name(name)
    if username is not None:
        username = username.strip().lstrip("@")[:USERNAME_MAX_LENGTH] or None

    if await get_user(db, user_id) is not None:
        msg = "User already registered"
        raise ConflictError(msg)

    user = User(
        id=user_id,
        name=clean_name,
        username=username,
        photo_url=photo_url or None,
        is_approved=False,
        achievements=[],
    )
    db.add(user)
    await db.flush()

    logger.info("user_registered", user_id=user_id)
    return user


async def approve_user(db: AsyncSession, user_id: int) -> User:
    """Flip a pending user to approved.

    Raises:
        UnknownUserError: If no such user is registered.
        ConflictError: If the user is already approved.
    """
    user = await require_user(db, user_id)
    if user.is_approved:
        msg = "User is already approved"
        raise ConflictError(msg)
    user.is_approved = True
    user.updated_at = datetime.now(timezone.utc)
    await db.flush()

    logger.info("user_approved", user_id=user_id)
    return user


async def reject_user(db: AsyncSession, user_id: int) -> None:
    """Remove a pending registration.

    Raises:
        UnknownUserError: If no such user is registered.
        ConflictError: If the user was already approved.
    """
    user = await require_user(db, user_id)
    if user.is_approved:
        msg = "Approved users cannot be rejected"
        raise ConflictError(msg)
    await delete_user(db, user_id)
    logger.info("user_rejected", user_id=user_id)


async def delete_user(db: AsyncSession, user_id: int) -> None:
    """Delete a user and, with them, all of their daily progress rows."""
    await db.execute(delete(DailyProgress).where(DailyProgress.user_id == user_id))
    await db.execute(delete(User).where(User.id == user_id))
    await db.flush()


async def add_achievements(db: AsyncSession, user: User, achievement_ids: Iterable[str]) -> list[str]:
    """Union ``achievement_ids`` into the user's set. Never removes anything.

    The row is re-read under a row lock first, so the union is taken against
    the stored set even when ``user`` was loaded earlier or another request
    grants achievements at the same time. Returns the ids that were not held
    before, in the order given.
    """
    wanted = list(dict.fromkeys(achievement_ids))
    if not wanted:
        return []
    result = await db.execute(
        select(User)
        .where(User.id == user.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    user = result.scalar_one()
    held = list(user.achievements or [])
    added = [a for a in wanted if a not in held]
    if not added:
        return []
    # Reassign so the JSON column is marked dirty.
    user.achievements = held + added
    user.updated_at = datetime.now(timezone.utc)
    await db.flush()
    return added


async def count_approved_users(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(User).where(User.is_approved.is_(True)))
    return int(result.scalar_one())


def auth_status(user: User | None) -> dict:
    """Registration/approval summary used by clients before showing the app."""
    if user is None:
        return {
            "is_registered": False,
            "is_approved": False,
            "message": "User needs to register first",
        }
    return {
        "is_registered": True,
        "is_approved": user.is_approved,
        "message": (
            "User is approved and can access the app"
            if user.is_approved
            else "User is registered but waiting for admin approval"
        ),
    }
