"""Pure session rules: state transitions, answer validation and judging."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import replace

from sigma_arena.game.scoring.rules import round_question_score, round_total_score, score_interval
from sigma_arena.game.scoring.types import ScoringParams
from sigma_arena.game.sessions.errors import (
    AlreadyAnsweredError,
    InvalidBoundsError,
    SessionFinalizedError,
    UnknownQuestionError,
)
from sigma_arena.game.sessions.types import (
    CommunitySnapshot,
    JudgedQuestion,
    Judgement,
    SessionStatus,
    SubmittedBounds,
)


def validate_bounds(lower: float, upper: float) -> SubmittedBounds:
    if not (math.isfinite(lower) and math.isfinite(upper)):
        raise InvalidBoundsError("bounds must be finite numbers")
    if lower > upper:
        raise InvalidBoundsError("lower bound must not exceed upper bound")
    return SubmittedBounds(lower=float(lower), upper=float(upper))


def ensure_open(status: SessionStatus) -> None:
    if status == SessionStatus.FINALIZED:
        raise SessionFinalizedError


def status_after_answer(status: SessionStatus) -> SessionStatus:
    ensure_open(status)
    return SessionStatus.ANSWERING


def check_answer_allowed(
    *,
    status: SessionStatus,
    session_question_ids: Sequence[str],
    answered_question_ids: Sequence[str],
    question_id: str,
    lower: float,
    upper: float,
) -> SubmittedBounds:
    """Raises before anything is written; the session is left untouched on failure."""
    ensure_open(status)
    if question_id not in session_question_ids:
        raise UnknownQuestionError(question_id)
    bounds = validate_bounds(lower, upper)
    if question_id in answered_question_ids:
        raise AlreadyAnsweredError(question_id)
    return bounds


def judge_question(
    question: JudgedQuestion,
    bounds: SubmittedBounds | None,
    *,
    params: ScoringParams | None = None,
) -> Judgement:
    if bounds is None:
        return Judgement(
            question_id=question.question_id,
            prompt=question.prompt,
            unit=question.unit,
            lower=None,
            upper=None,
            true_value=question.true_value,
            answered=False,
            hit=False,
            precision=0.0,
            score=0.0,
            category=question.category,
            source_name=question.source_name,
            source_url=question.source_url,
            answer_context=question.answer_context,
        )

    scored = score_interval(bounds.lower, bounds.upper, question.true_value, params=params)
    return Judgement(
        question_id=question.question_id,
        prompt=question.prompt,
        unit=question.unit,
        lower=bounds.lower,
        upper=bounds.upper,
        true_value=question.true_value,
        answered=True,
        hit=scored.hit,
        precision=round(scored.precision, 2),
        score=round_question_score(scored.score),
        category=question.category,
        source_name=question.source_name,
        source_url=question.source_url,
        answer_context=question.answer_context,
    )


def judge_session(
    questions: Sequence[JudgedQuestion],
    answers: Mapping[str, SubmittedBounds],
    *,
    params: ScoringParams | None = None,
) -> tuple[Judgement, ...]:
    """Judges every session question; unanswered ones become zero-score misses."""
    return tuple(
        judge_question(question, answers.get(question.question_id), params=params)
        for question in questions
    )


def with_community(judgement: Judgement, snapshot: CommunitySnapshot) -> Judgement:
    return replace(judgement, community=snapshot)


def community_snapshot(response_count: int, score_sum: float, score_max: float) -> CommunitySnapshot:
    average = score_sum / response_count if response_count > 0 else 0.0
    return CommunitySnapshot(
        average_score=round(average, 2),
        highest_score=round(score_max, 2),
        response_count=response_count,
    )


def session_total(judgements: Sequence[Judgement]) -> float:
    return round_total_score(sum(judgement.score for judgement in judgements))
