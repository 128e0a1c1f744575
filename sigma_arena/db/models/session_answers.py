from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import BigInteger, CheckConstraint, DateTime, Double, ForeignKey, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from sigma_arena.db.models.base import Base


class SessionAnswer(Base):
    __tablename__ = "session_answers"
    __table_args__ = (
        CheckConstraint("lower_bound <= upper_bound", name="ck_session_answers_bounds_order"),
        UniqueConstraint("session_id", "question_id", name="uq_session_answers_session_question"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    session_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("game_sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    question_id: Mapped[str] = mapped_column(String(64), ForeignKey("questions.id"), nullable=False)
    lower_bound: Mapped[float] = mapped_column(Double, nullable=False)
    upper_bound: Mapped[float] = mapped_column(Double, nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
