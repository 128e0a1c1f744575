from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.db.models.question_stats import QuestionStat


class QuestionStatsRepo:
    @staticmethod
    async def record_score(
        session: AsyncSession,
        *,
        question_id: str,
        score: float,
        now_utc: datetime,
    ) -> tuple[int, float, float]:
        stmt = insert(QuestionStat).values(
            question_id=question_id,
            response_count=1,
            score_sum=score,
            score_max=score,
            updated_at=now_utc,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[QuestionStat.question_id],
            set_={
                "response_count": QuestionStat.response_count + 1,
                "score_sum": QuestionStat.score_sum + stmt.excluded.score_sum,
                "score_max": func.greatest(QuestionStat.score_max, stmt.excluded.score_max),
                "updated_at": stmt.excluded.updated_at,
            },
        ).returning(
            QuestionStat.response_count,
            QuestionStat.score_sum,
            QuestionStat.score_max,
        )
        result = await session.execute(stmt)
        count, score_sum, score_max = result.one()
        return int(count), float(score_sum), float(score_max)

    @staticmethod
    async def list_by_question_ids(
        session: AsyncSession,
        question_ids: Sequence[str],
    ) -> dict[str, QuestionStat]:
        ids = tuple(set(question_ids))
        if not ids:
            return {}
        stmt = select(QuestionStat).where(QuestionStat.question_id.in_(ids))
        result = await session.execute(stmt)
        return {row.question_id: row for row in result.scalars().all()}
