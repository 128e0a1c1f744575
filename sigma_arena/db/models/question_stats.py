from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Double, ForeignKey, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from sigma_arena.db.models.base import Base


class QuestionStat(Base):
    __tablename__ = "question_stats"
    __table_args__ = (
        CheckConstraint("response_count >= 0", name="ck_question_stats_count_non_negative"),
    )

    question_id: Mapped[str] = mapped_column(String(64), ForeignKey("questions.id"), primary_key=True)
    response_count: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    score_sum: Mapped[float] = mapped_column(Double, nullable=False, server_default=text("0"))
    score_max: Mapped[float] = mapped_column(Double, nullable=False, server_default=text("0"))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
