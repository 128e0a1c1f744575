from __future__ import annotations

import math

import pytest

from sigma_arena.game.scoring.types import ScoringParams
from sigma_arena.game.sessions.errors import (
    AlreadyAnsweredError,
    InvalidBoundsError,
    SessionFinalizedError,
    UnknownQuestionError,
)
from sigma_arena.game.sessions.machine import (
    check_answer_allowed,
    community_snapshot,
    judge_session,
    session_total,
    status_after_answer,
)
from sigma_arena.game.sessions.service.payload import build_result_payload, judgements_from_payload
from sigma_arena.game.sessions.types import SessionStatus, SubmittedBounds
from tests.game.session_fixtures import make_question

PARAMS = ScoringParams(base_score=50.0, precision_exponent=0.7, exact_guess_bonus=10000.0)
QUESTION_IDS = ("q1", "q2", "q3")


def _check(**overrides: object) -> SubmittedBounds:
    kwargs: dict[str, object] = {
        "status": SessionStatus.CREATED,
        "session_question_ids": QUESTION_IDS,
        "answered_question_ids": (),
        "question_id": "q1",
        "lower": 1.0,
        "upper": 2.0,
    }
    kwargs.update(overrides)
    return check_answer_allowed(**kwargs)  # type: ignore[arg-type]


def test_check_answer_allowed_returns_bounds() -> None:
    assert _check() == SubmittedBounds(lower=1.0, upper=2.0)


def test_unknown_question_is_rejected() -> None:
    with pytest.raises(UnknownQuestionError):
        _check(question_id="q9")


@pytest.mark.parametrize(
    ("lower", "upper"),
    [(5.0, 4.0), (math.nan, 1.0), (0.0, math.inf)],
)
def test_invalid_bounds_are_rejected(lower: float, upper: float) -> None:
    with pytest.raises(InvalidBoundsError):
        _check(lower=lower, upper=upper)


def test_duplicate_answer_is_rejected() -> None:
    with pytest.raises(AlreadyAnsweredError):
        _check(status=SessionStatus.ANSWERING, answered_question_ids=("q1",))


def test_finalized_session_rejects_answers_before_other_checks() -> None:
    with pytest.raises(SessionFinalizedError):
        _check(status=SessionStatus.FINALIZED, question_id="q9")


def test_answer_moves_session_to_answering() -> None:
    assert status_after_answer(SessionStatus.CREATED) == SessionStatus.ANSWERING
    assert status_after_answer(SessionStatus.ANSWERING) == SessionStatus.ANSWERING


def test_partial_session_judges_unanswered_questions_as_misses() -> None:
    questions = [make_question(question_id, true_value=100.0) for question_id in QUESTION_IDS]
    answers = {
        "q1": SubmittedBounds(lower=90.0, upper=110.0),
        "q2": SubmittedBounds(lower=1.0, upper=2.0),
    }

    judgements = judge_session(questions, answers, params=PARAMS)

    assert [judgement.question_id for judgement in judgements] == list(QUESTION_IDS)
    assert judgements[0].hit is True
    assert judgements[0].precision == pytest.approx(80.0)
    assert judgements[0].score > 0
    assert judgements[1].answered is True
    assert judgements[1].score == 0.0
    assert judgements[2].answered is False
    assert judgements[2].lower is None
    assert judgements[2].hit is False
    assert judgements[2].score == 0.0
    assert session_total(judgements) == round(judgements[0].score, 2)


def test_community_snapshot_rounds_average() -> None:
    snapshot = community_snapshot(3, 100.0, 70.456)

    assert snapshot.average_score == 33.33
    assert snapshot.highest_score == 70.46
    assert snapshot.response_count == 3
    assert community_snapshot(0, 0.0, 0.0).average_score == 0.0


def test_stored_payload_restores_judgements() -> None:
    questions = [make_question("q1"), make_question("q2", category=None)]
    judgements = judge_session(questions, {"q1": SubmittedBounds(lower=99.0, upper=101.0)}, params=PARAMS)

    payload = build_result_payload(
        judgements=judgements,
        total_score=session_total(judgements),
        questions_captured=1,
        questions_answered=1,
    )

    assert judgements_from_payload(payload) == judgements
    assert payload["questions_captured"] == 1
