from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    Boolean,
    Date,
    DateTime,
    Double,
    ForeignKey,
    Index,
    String,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from sigma_arena.db.models.base import Base


class AnswerRecord(Base):
    __tablename__ = "answer_records"
    __table_args__ = (
        Index("idx_answer_records_user_answered", "user_id", "answered_at"),
        Index("idx_answer_records_play_date", "play_date"),
        Index("idx_answer_records_score", "score"),
        Index("idx_answer_records_session", "session_id"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    user_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    session_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("game_sessions.id"),
        nullable=False,
    )
    question_id: Mapped[str] = mapped_column(String(64), ForeignKey("questions.id"), nullable=False)
    play_date: Mapped[date] = mapped_column(Date, nullable=False)
    lower_bound: Mapped[float | None] = mapped_column(Double, nullable=True)
    upper_bound: Mapped[float | None] = mapped_column(Double, nullable=True)
    true_value_at_response: Mapped[float] = mapped_column(Double, nullable=False)
    is_hit: Mapped[bool] = mapped_column(Boolean, nullable=False)
    was_answered: Mapped[bool] = mapped_column(Boolean, nullable=False)
    score: Mapped[float] = mapped_column(Double, nullable=False)
    category: Mapped[str | None] = mapped_column(String(128), nullable=True)
    answered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
