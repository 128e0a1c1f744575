from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.core.config import get_settings
from sigma_arena.db.models.feedback import Feedback
from sigma_arena.db.repo.feedback_repo import FeedbackRepo
from sigma_arena.feedback.errors import FeedbackTextInvalidError

logger = structlog.get_logger(__name__)


def normalize_feedback_text(text: str, *, max_length: int | None = None) -> str:
    resolved_max = max_length or get_settings().feedback_max_length
    trimmed = text.strip()
    if not trimmed:
        raise FeedbackTextInvalidError("feedback text must not be empty")
    if len(trimmed) > resolved_max:
        raise FeedbackTextInvalidError(f"feedback text must be at most {resolved_max} characters")
    return trimmed


async def submit_feedback(
    session: AsyncSession,
    *,
    user_id: UUID | None,
    text: str,
    user_agent: str | None,
    page_url: str | None,
    now_utc: datetime,
) -> Feedback:
    feedback = await FeedbackRepo.create(
        session,
        user_id=user_id,
        feedback_text=normalize_feedback_text(text),
        user_agent=user_agent,
        page_url=page_url,
        now_utc=now_utc,
    )
    logger.info(
        "feedback_submitted",
        feedback_id=str(feedback.id),
        has_user=user_id is not None,
        length=len(feedback.feedback_text),
    )
    return feedback
