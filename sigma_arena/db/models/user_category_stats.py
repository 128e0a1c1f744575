from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, Double, ForeignKey, Integer, String, text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from sigma_arena.db.models.base import Base


class UserCategoryStat(Base):
    __tablename__ = "user_category_stats"
    __table_args__ = (
        CheckConstraint(
            "questions_captured <= questions_answered",
            name="ck_user_category_stats_captured_le_answered",
        ),
    )

    user_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("users.id"),
        primary_key=True,
    )
    category: Mapped[str] = mapped_column(String(128), primary_key=True)
    questions_answered: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    questions_captured: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    total_score: Mapped[float] = mapped_column(Double, nullable=False, server_default=text("0"))
    last_answered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
