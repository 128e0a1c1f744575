from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.db.models.feedback import Feedback


class FeedbackRepo:
    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        user_id: UUID | None,
        feedback_text: str,
        user_agent: str | None,
        page_url: str | None,
        now_utc: datetime,
    ) -> Feedback:
        feedback = Feedback(
            id=uuid4(),
            user_id=user_id,
            feedback_text=feedback_text,
            user_agent=user_agent,
            page_url=page_url,
            created_at=now_utc,
        )
        session.add(feedback)
        await session.flush()
        return feedback
