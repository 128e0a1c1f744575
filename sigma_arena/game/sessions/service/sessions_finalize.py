from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.db.models.answer_records import AnswerRecord
from sigma_arena.db.repo.answer_records_repo import AnswerRecordsRepo
from sigma_arena.db.repo.game_sessions_repo import GameSessionsRepo
from sigma_arena.db.repo.question_stats_repo import QuestionStatsRepo
from sigma_arena.db.repo.session_answers_repo import SessionAnswersRepo
from sigma_arena.game.questions.pool import load_questions_in_order
from sigma_arena.game.sessions.machine import (
    community_snapshot,
    judge_session,
    session_total,
    with_community,
)
from sigma_arena.game.sessions.types import (
    FinalizeSessionResult,
    JudgedQuestion,
    Judgement,
    SessionStatus,
    SubmittedBounds,
)
from sigma_arena.game.stats.service import apply_session_result

from .access import load_session_for_user
from .payload import build_result_payload, judgements_from_payload

logger = structlog.get_logger(__name__)


async def _attach_community_snapshots(
    session: AsyncSession,
    judgements: tuple[Judgement, ...],
    *,
    now_utc: datetime,
) -> tuple[Judgement, ...]:
    """Folds answered scores into the community stats, then snapshots every question."""
    snapshots = {}
    for judgement in judgements:
        if judgement.answered:
            count, score_sum, score_max = await QuestionStatsRepo.record_score(
                session,
                question_id=judgement.question_id,
                score=judgement.score,
                now_utc=now_utc,
            )
            snapshots[judgement.question_id] = community_snapshot(count, score_sum, score_max)

    unanswered_ids = [j.question_id for j in judgements if j.question_id not in snapshots]
    existing = await QuestionStatsRepo.list_by_question_ids(session, unanswered_ids)
    for question_id in unanswered_ids:
        row = existing.get(question_id)
        if row is None:
            snapshots[question_id] = community_snapshot(0, 0.0, 0.0)
        else:
            snapshots[question_id] = community_snapshot(row.response_count, row.score_sum, row.score_max)

    return tuple(with_community(judgement, snapshots[judgement.question_id]) for judgement in judgements)


async def finalize_session(
    session: AsyncSession,
    *,
    user_id: UUID,
    session_id: UUID,
    now_utc: datetime,
) -> FinalizeSessionResult:
    game_session, owner_user_id = await load_session_for_user(
        session,
        session_id=session_id,
        user_id=user_id,
        for_update=True,
    )

    if game_session.status == SessionStatus.FINALIZED.value and game_session.result_payload is not None:
        payload = game_session.result_payload
        judgements = judgements_from_payload(payload)
        return FinalizeSessionResult(
            session_id=game_session.id,
            play_date=game_session.play_date,
            judgements=judgements,
            total_score=float(payload["total_score"]),
            questions_captured=int(payload["questions_captured"]),
            questions_total=len(judgements),
            questions_answered=int(payload["questions_answered"]),
            idempotent_replay=True,
        )

    questions = await load_questions_in_order(session, game_session.question_ids)
    answers = await SessionAnswersRepo.list_for_session(session, game_session.id)
    submitted = {
        answer.question_id: SubmittedBounds(lower=answer.lower_bound, upper=answer.upper_bound)
        for answer in answers
    }
    judged = judge_session(
        [
            JudgedQuestion(
                question_id=question.id,
                prompt=question.prompt,
                unit=question.unit,
                true_value=question.true_value,
                category=question.category,
                source_name=question.source_name,
                source_url=question.source_url,
                answer_context=question.answer_context,
            )
            for question in questions
        ],
        submitted,
    )
    judgements = await _attach_community_snapshots(session, judged, now_utc=now_utc)
    total_score = session_total(judgements)
    questions_captured = sum(1 for judgement in judgements if judgement.hit)

    await AnswerRecordsRepo.insert_many(
        session,
        records=[
            AnswerRecord(
                user_id=owner_user_id,
                session_id=game_session.id,
                question_id=judgement.question_id,
                play_date=game_session.play_date,
                lower_bound=judgement.lower,
                upper_bound=judgement.upper,
                true_value_at_response=judgement.true_value,
                is_hit=judgement.hit,
                was_answered=judgement.answered,
                score=judgement.score,
                category=judgement.category,
                answered_at=now_utc,
            )
            for judgement in judgements
        ],
    )
    await apply_session_result(
        session,
        user_id=owner_user_id,
        play_date=game_session.play_date,
        judgements=judgements,
        session_score=total_score,
        now_utc=now_utc,
    )
    await GameSessionsRepo.mark_finalized(
        session,
        game_session=game_session,
        result_payload=build_result_payload(
            judgements=judgements,
            total_score=total_score,
            questions_captured=questions_captured,
            questions_answered=len(submitted),
        ),
        now_utc=now_utc,
    )

    logger.info(
        "game_session_finalized",
        session_id=str(game_session.id),
        user_id=str(owner_user_id),
        total_score=total_score,
        questions_captured=questions_captured,
        questions_answered=len(submitted),
        questions_total=len(judgements),
    )
    return FinalizeSessionResult(
        session_id=game_session.id,
        play_date=game_session.play_date,
        judgements=judgements,
        total_score=total_score,
        questions_captured=questions_captured,
        questions_total=len(judgements),
        questions_answered=len(submitted),
        idempotent_replay=False,
    )
