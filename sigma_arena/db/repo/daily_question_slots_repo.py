from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.db.models.daily_question_slots import DailyQuestionSlot
from sigma_arena.db.models.questions import Question


class DailyQuestionSlotsRepo:
    @staticmethod
    async def list_published_questions_for_date(
        session: AsyncSession,
        *,
        slot_date: date,
    ) -> list[Question]:
        stmt = (
            select(Question)
            .join(DailyQuestionSlot, DailyQuestionSlot.question_id == Question.id)
            .where(
                DailyQuestionSlot.slot_date == slot_date,
                DailyQuestionSlot.is_published.is_(True),
            )
            .order_by(DailyQuestionSlot.display_order.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_published_dates(
        session: AsyncSession,
        *,
        dates: Sequence[date],
    ) -> set[date]:
        if not dates:
            return set()
        stmt = (
            select(DailyQuestionSlot.slot_date)
            .where(
                DailyQuestionSlot.slot_date.in_(tuple(dates)),
                DailyQuestionSlot.is_published.is_(True),
            )
            .distinct()
        )
        result = await session.execute(stmt)
        return set(result.scalars().all())

    @staticmethod
    async def delete_all(session: AsyncSession) -> int:
        result = await session.execute(delete(DailyQuestionSlot))
        return result.rowcount or 0

    @staticmethod
    async def insert_slots(
        session: AsyncSession,
        *,
        rows: Sequence[dict[str, object]],
    ) -> int:
        if not rows:
            return 0
        stmt = (
            insert(DailyQuestionSlot)
            .values(list(rows))
            .on_conflict_do_nothing(
                index_elements=[DailyQuestionSlot.slot_date, DailyQuestionSlot.display_order],
            )
            .returning(DailyQuestionSlot.question_id)
        )
        result = await session.execute(stmt)
        return len(result.scalars().all())
