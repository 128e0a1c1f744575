from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.db.models.game_sessions import GameSession
from sigma_arena.db.repo.game_sessions_repo import GameSessionsRepo
from sigma_arena.db.repo.session_answers_repo import SessionAnswersRepo
from sigma_arena.game.questions.pool import load_questions_in_order, questions_for_date, to_question_view
from sigma_arena.game.sessions.errors import DailyAlreadyPlayedError
from sigma_arena.game.sessions.service.access import merged_source_user_ids
from sigma_arena.game.sessions.types import SessionStatus, StartSessionResult

logger = structlog.get_logger(__name__)


async def _build_replay_result(session: AsyncSession, game_session: GameSession) -> StartSessionResult:
    if game_session.status == SessionStatus.FINALIZED.value:
        raise DailyAlreadyPlayedError(game_session.play_date.isoformat())

    questions = await load_questions_in_order(session, game_session.question_ids)
    answers = await SessionAnswersRepo.list_for_session(session, game_session.id)
    return StartSessionResult(
        session_id=game_session.id,
        play_date=game_session.play_date,
        status=SessionStatus(game_session.status),
        questions=tuple(to_question_view(question) for question in questions),
        answered_question_ids=tuple(answer.question_id for answer in answers),
        idempotent_replay=True,
    )


async def _inherited_session(session: AsyncSession, *, user_id: UUID, play_date: date) -> GameSession | None:
    # a merged account's session for the date still counts as the survivor's daily play
    source_ids = await merged_source_user_ids(session, user_id)
    if not source_ids:
        return None
    candidates = await GameSessionsRepo.list_by_users_and_date(session, user_ids=source_ids, play_date=play_date)
    for candidate in candidates:
        if candidate.status == SessionStatus.FINALIZED.value:
            return candidate
    return candidates[0] if candidates else None


async def start_session(
    session: AsyncSession,
    *,
    user_id: UUID,
    play_date: date,
    now_utc: datetime,
) -> StartSessionResult:
    existing = await GameSessionsRepo.get_by_user_and_date(session, user_id=user_id, play_date=play_date)
    if existing is not None:
        return await _build_replay_result(session, existing)

    inherited = await _inherited_session(session, user_id=user_id, play_date=play_date)
    if inherited is not None:
        return await _build_replay_result(session, inherited)

    questions = await questions_for_date(session, play_date=play_date)
    created = await GameSessionsRepo.create_if_absent(
        session,
        user_id=user_id,
        play_date=play_date,
        question_ids=tuple(question.question_id for question in questions),
        now_utc=now_utc,
    )
    game_session = await GameSessionsRepo.get_by_user_and_date(session, user_id=user_id, play_date=play_date)
    if game_session is None:
        raise RuntimeError("game session vanished after insert")
    if not created:
        return await _build_replay_result(session, game_session)

    logger.info(
        "game_session_started",
        session_id=str(game_session.id),
        user_id=str(user_id),
        play_date=play_date.isoformat(),
        questions=len(questions),
    )
    return StartSessionResult(
        session_id=game_session.id,
        play_date=play_date,
        status=SessionStatus.CREATED,
        questions=questions,
        answered_question_ids=(),
        idempotent_replay=False,
    )
