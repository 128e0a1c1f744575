from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.db.models.user_category_stats import UserCategoryStat


class UserCategoryStatsRepo:
    @staticmethod
    async def list_for_user(session: AsyncSession, *, user_id: UUID) -> list[UserCategoryStat]:
        stmt = (
            select(UserCategoryStat)
            .where(UserCategoryStat.user_id == user_id)
            .order_by(UserCategoryStat.category.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def add_counts(
        session: AsyncSession,
        *,
        user_id: UUID,
        category: str,
        questions_answered: int,
        questions_captured: int,
        total_score: float,
        last_answered_at: datetime | None,
    ) -> None:
        stmt = insert(UserCategoryStat).values(
            user_id=user_id,
            category=category,
            questions_answered=questions_answered,
            questions_captured=questions_captured,
            total_score=total_score,
            last_answered_at=last_answered_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserCategoryStat.user_id, UserCategoryStat.category],
            set_={
                "questions_answered": UserCategoryStat.questions_answered + stmt.excluded.questions_answered,
                "questions_captured": UserCategoryStat.questions_captured + stmt.excluded.questions_captured,
                "total_score": UserCategoryStat.total_score + stmt.excluded.total_score,
                "last_answered_at": func.greatest(
                    UserCategoryStat.last_answered_at,
                    stmt.excluded.last_answered_at,
                ),
            },
        )
        await session.execute(stmt)

    @staticmethod
    async def delete_for_user(session: AsyncSession, *, user_id: UUID) -> int:
        stmt = delete(UserCategoryStat).where(UserCategoryStat.user_id == user_id)
        result = await session.execute(stmt)
        return result.rowcount or 0
