from __future__ import annotations

from datetime import date

from sqlalchemy import Boolean, CheckConstraint, Date, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from sigma_arena.db.models.base import Base


class DailyQuestionSlot(Base):
    __tablename__ = "daily_question_slots"
    __table_args__ = (
        CheckConstraint("display_order >= 0", name="ck_daily_question_slots_order_non_negative"),
        Index("idx_daily_question_slots_question_id", "question_id"),
    )

    slot_date: Mapped[date] = mapped_column(Date, primary_key=True)
    display_order: Mapped[int] = mapped_column(Integer, primary_key=True)
    question_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("questions.id"),
        nullable=False,
    )
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("true"))
