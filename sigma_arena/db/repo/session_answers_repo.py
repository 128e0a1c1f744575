from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.db.models.session_answers import SessionAnswer


class SessionAnswersRepo:
    @staticmethod
    async def list_for_session(session: AsyncSession, session_id: UUID) -> list[SessionAnswer]:
        stmt = (
            select(SessionAnswer)
            .where(SessionAnswer.session_id == session_id)
            .order_by(SessionAnswer.submitted_at.asc(), SessionAnswer.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        session_id: UUID,
        question_id: str,
        lower_bound: float,
        upper_bound: float,
        submitted_at: datetime,
    ) -> SessionAnswer:
        answer = SessionAnswer(
            session_id=session_id,
            question_id=question_id,
            lower_bound=lower_bound,
            upper_bound=upper_bound,
            submitted_at=submitted_at,
        )
        session.add(answer)
        await session.flush()
        return answer
