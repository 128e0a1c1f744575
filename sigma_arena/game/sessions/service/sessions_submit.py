from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.db.repo.session_answers_repo import SessionAnswersRepo
from sigma_arena.game.sessions.errors import AlreadyAnsweredError
from sigma_arena.game.sessions.machine import check_answer_allowed, status_after_answer
from sigma_arena.game.sessions.types import SessionStatus, SubmitAnswerResult

from .access import load_session_for_user

logger = structlog.get_logger(__name__)


async def submit_answer(
    session: AsyncSession,
    *,
    user_id: UUID,
    session_id: UUID,
    question_id: str,
    lower: float,
    upper: float,
    now_utc: datetime,
) -> SubmitAnswerResult:
    game_session, _ = await load_session_for_user(
        session,
        session_id=session_id,
        user_id=user_id,
        for_update=True,
    )
    status = SessionStatus(game_session.status)
    answers = await SessionAnswersRepo.list_for_session(session, game_session.id)
    answered_ids = [answer.question_id for answer in answers]

    bounds = check_answer_allowed(
        status=status,
        session_question_ids=game_session.question_ids,
        answered_question_ids=answered_ids,
        question_id=question_id,
        lower=lower,
        upper=upper,
    )

    try:
        async with session.begin_nested():
            await SessionAnswersRepo.create(
                session,
                session_id=game_session.id,
                question_id=question_id,
                lower_bound=bounds.lower,
                upper_bound=bounds.upper,
                submitted_at=now_utc,
            )
    except IntegrityError as exc:
        raise AlreadyAnsweredError(question_id) from exc

    next_status = status_after_answer(status)
    game_session.status = next_status.value
    game_session.updated_at = now_utc
    await session.flush()

    logger.info(
        "session_answer_submitted",
        session_id=str(game_session.id),
        question_id=question_id,
        answered=len(answered_ids) + 1,
    )
    return SubmitAnswerResult(
        session_id=game_session.id,
        question_id=question_id,
        status=next_status,
        answered_count=len(answered_ids) + 1,
        total_questions=len(game_session.question_ids),
    )
