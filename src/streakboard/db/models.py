"""ORM models for challenge participants and their daily progress."""

from __future__ import annotations

import datetime as dt
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
    false,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from streakboard.db.base import Base

TASK_COUNT = 10
TASK_COLUMNS: tuple[str, ...] = tuple(f"task_{i}" for i in range(1, TASK_COUNT + 1))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """A challenge participant, keyed by their chat-platform id."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    username: Mapped[str | None] = mapped_column(String(100), nullable=True)
    photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_approved: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false(), index=True)
    achievements: Mapped[list[str]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), default=list, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    progress: Mapped[list[DailyProgress]] = relationship(
        "DailyProgress",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


# ---------------------------------------------------------------------------
# Daily progress
# ---------------------------------------------------------------------------


class DailyProgress(Base):
    """One row per user per calendar day. total_points is written by the service layer."""

    __tablename__ = "daily_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="daily_progress_user_id_date_key"),
        CheckConstraint("pages_read >= 0", name="ck_daily_progress_pages_nonneg"),
        CheckConstraint("distance_km >= 0", name="ck_daily_progress_distance_nonneg"),
        CheckConstraint("total_points BETWEEN 0 AND 10", name="ck_daily_progress_points_range"),
        *(CheckConstraint(f"{col} IN (0, 1)", name=f"ck_daily_progress_{col}") for col in TASK_COLUMNS),
        Index("ix_daily_progress_user_date", "user_id", "date"),
        Index("ix_daily_progress_date_points", "date", "total_points"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    task_1: Mapped[int] = mapped_column(SmallInteger, default=0, nullable=False)
    task_2: Mapped[int] = mapped_column(SmallInteger, default=0, nullable=False)
    task_3: Mapped[int] = mapped_column(SmallInteger, default=0, nullable=False)
    task_4: Mapped[int] = mapped_column(SmallInteger, default=0, nullable=False)
    task_5: Mapped[int] = mapped_column(SmallInteger, default=0, nullable=False)
    task_6: Mapped[int] = mapped_column(SmallInteger, default=0, nullable=False)
    task_7: Mapped[int] = mapped_column(SmallInteger, default=0, nullable=False)
    task_8: Mapped[int] = mapped_column(SmallInteger, default=0, nullable=False)
    task_9: Mapped[int] = mapped_column(SmallInteger, default=0, nullable=False)
    task_10: Mapped[int] = mapped_column(SmallInteger, default=0, nullable=False)

    pages_read: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    distance_km: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    total_points: Mapped[int] = mapped_column(SmallInteger, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    user: Mapped[User] = relationship("User", back_populates="progress")

    @property
    def tasks(self) -> list[int]:
        """The ten task flags in order, task_1 first."""
        return [int(getattr(self, col) or 0) for col in TASK_COLUMNS]

    def task(self, number: int) -> int:
        """Flag for task ``number`` (1-based)."""
        return int(getattr(self, f"task_{number}") or 0)
