from __future__ import annotations

from collections.abc import Sequence
from datetime import date

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.core.config import get_settings
from sigma_arena.core.errors import NoQuestionsForDateError
from sigma_arena.db.models.questions import Question
from sigma_arena.db.repo.daily_question_slots_repo import DailyQuestionSlotsRepo
from sigma_arena.db.repo.questions_repo import QuestionsRepo
from sigma_arena.game.questions.errors import QuestionNotFoundError
from sigma_arena.game.questions.types import QuestionView

logger = structlog.get_logger(__name__)


def to_question_view(question: Question) -> QuestionView:
    return QuestionView(
        question_id=question.id,
        prompt=question.prompt,
        unit=question.unit,
        source_name=question.source_name,
        source_url=question.source_url,
        category=question.category,
    )


async def questions_for_date(session: AsyncSession, *, play_date: date) -> tuple[QuestionView, ...]:
    questions = await DailyQuestionSlotsRepo.list_published_questions_for_date(
        session,
        slot_date=play_date,
    )
    if not questions:
        logger.warning("daily_questions_missing", play_date=play_date.isoformat())
        raise NoQuestionsForDateError(f"no published questions for {play_date.isoformat()}")

    expected = get_settings().daily_questions_per_day
    if len(questions) != expected:
        logger.warning(
            "daily_questions_count_mismatch",
            play_date=play_date.isoformat(),
            expected=expected,
            found=len(questions),
        )
    return tuple(to_question_view(question) for question in questions)


async def true_value_of(session: AsyncSession, question_id: str) -> float:
    question = await QuestionsRepo.get_by_id(session, question_id)
    if question is None:
        raise QuestionNotFoundError(question_id)
    return question.true_value


async def load_questions_in_order(
    session: AsyncSession,
    question_ids: Sequence[str],
) -> list[Question]:
    by_id = {question.id: question for question in await QuestionsRepo.list_by_ids(session, question_ids)}
    missing = [question_id for question_id in question_ids if question_id not in by_id]
    if missing:
        raise QuestionNotFoundError(",".join(missing))
    return [by_id[question_id] for question_id in question_ids]
