from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.db.models.questions import Question


class QuestionsRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, question_id: str) -> Question | None:
        return await session.get(Question, question_id)

    @staticmethod
    async def list_by_ids(session: AsyncSession, question_ids: Sequence[str]) -> list[Question]:
        ids = tuple(set(question_ids))
        if not ids:
            return []
        stmt = select(Question).where(Question.id.in_(ids))
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_active_ids_by_tier(
        session: AsyncSession,
        *,
        distribution_tier: str,
    ) -> list[str]:
        stmt = (
            select(Question.id)
            .where(
                Question.distribution_tier == distribution_tier,
                Question.is_active.is_(True),
            )
            .order_by(Question.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
