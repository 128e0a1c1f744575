from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Double, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from sigma_arena.db.models.base import Base


class Question(Base):
    __tablename__ = "questions"
    __table_args__ = (
        Index("idx_questions_tier_active", "distribution_tier", "is_active"),
        Index("idx_questions_category", "category"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    unit: Mapped[str | None] = mapped_column(String(64), nullable=True)
    true_value: Mapped[float] = mapped_column(Double, nullable=False)
    source_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    answer_context: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(128), nullable=True)
    distribution_tier: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("true"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
