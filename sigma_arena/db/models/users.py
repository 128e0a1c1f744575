from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Double,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from sigma_arena.db.models.base import Base

DEFAULT_USERNAME = "Guest Player"


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("status IN ('ACTIVE','MERGED')", name="ck_users_status"),
        CheckConstraint(
            "(status = 'MERGED') = (merged_into_user_id IS NOT NULL)",
            name="ck_users_merged_link",
        ),
        CheckConstraint("questions_captured <= questions_answered", name="ck_users_captured_le_answered"),
        CheckConstraint("games_played >= 0", name="ck_users_games_played_non_negative"),
        UniqueConstraint("device_id", name="uq_users_device_id"),
        UniqueConstraint("auth_id", name="uq_users_auth_id"),
        UniqueConstraint("email", name="uq_users_email"),
        Index(
            "uq_users_username_ci",
            text("lower(username)"),
            unique=True,
            postgresql_where=text("username IS NOT NULL AND username <> 'Guest Player'"),
        ),
        Index("idx_users_total_score", "total_score"),
        Index("idx_users_merged_into", "merged_into_user_id"),
    )

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("true"))
    device_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    auth_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    username: Mapped[str | None] = mapped_column(Text, nullable=True)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, server_default=text("'UTC'"))
    status: Mapped[str] = mapped_column(String(16), nullable=False, server_default=text("'ACTIVE'"))
    merged_into_user_id: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("users.id"),
        nullable=True,
    )

    total_score: Mapped[float] = mapped_column(Double, nullable=False, server_default=text("0"))
    average_score: Mapped[float] = mapped_column(Double, nullable=False, server_default=text("0"))
    games_played: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    session_count: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    questions_answered: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    questions_captured: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    calibration_rate: Mapped[float] = mapped_column(Double, nullable=False, server_default=text("0"))
    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    best_streak: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    last_streak_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    best_single_score: Mapped[float] = mapped_column(Double, nullable=False, server_default=text("0"))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    last_played_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    username_claimed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    account_claimed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
