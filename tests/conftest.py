"""Shared test fixtures.

Every test gets a fresh in-memory SQLite database; Redis is never
initialized, so the rate limiter lets all requests through.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable, Sequence
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from streakboard.config import get_settings
from streakboard.database import close_db, create_tables, get_session, init_db
from streakboard.db.models import TASK_COLUMNS, DailyProgress, User

TEST_DATABASE_URL = "sqlite+aiosqlite://"
ADMIN_TOKEN = "test-admin-token"


@pytest.fixture(autouse=True)
def _test_settings(monkeypatch: pytest.MonkeyPatch):
    """Pin settings that tests depend on, independent of the host environment."""
    monkeypatch.setenv("SB_ADMIN_TOKEN", ADMIN_TOKEN)
    monkeypatch.setenv("SB_DEFAULT_TIMEZONE", "UTC")
    monkeypatch.setenv("SB_LOG_FORMAT", "console")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """A session on a freshly created schema."""
    await init_db(TEST_DATABASE_URL)
    await create_tables()
    async for session in get_session():
        yield session
    await close_db()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the app; shares the database with ``db_session``."""
    from streakboard.main import create_app

    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-Admin-Token": ADMIN_TOKEN}


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable:
    """Factory: insert a user (approved by default) and commit."""

    async def _make(
        user_id: int,
        name: str = "Test User",
        approved: bool = True,
        achievements: Sequence[str] = (),
    ) -> User:
        user = User(
            id=user_id,
            name=name,
            username=f"user{user_id}",
            is_approved=approved,
            achievements=list(achievements),
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


def build_day(
    day: date,
    flags: Sequence[int] | None = None,
    points: int | None = None,
    pages_read: int = 0,
    distance_km: Decimal | str | int = 0,
    user_id: int = 1,
) -> DailyProgress:
    """Unsaved DailyProgress row. ``points`` sets the first N flags when ``flags`` is omitted."""
    if flags is None:
        n = points or 0
        flags = [1] * n + [0] * (len(TASK_COLUMNS) - n)
    record = DailyProgress(
        user_id=user_id,
        date=day,
        pages_read=pages_read,
        distance_km=Decimal(str(distance_km)),
        total_points=sum(flags),
    )
    for col, flag in zip(TASK_COLUMNS, flags, strict=True):
        setattr(record, col, flag)
    return record


@pytest.fixture
def make_day() -> Callable[..., DailyProgress]:
    return build_day
