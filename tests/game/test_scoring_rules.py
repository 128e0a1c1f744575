from __future__ import annotations

import pytest

from sigma_arena.game.scoring.rules import precision_for, score_interval, width_percent
from sigma_arena.game.scoring.types import ScoringParams

PARAMS = ScoringParams(base_score=50.0, precision_exponent=0.7, exact_guess_bonus=10000.0)


def test_miss_scores_zero_with_zero_precision() -> None:
    result = score_interval(10, 100, 1440, params=PARAMS)

    assert result.hit is False
    assert result.precision == 0.0
    assert result.score == 0.0


def test_tight_hit_on_everest_style_question() -> None:
    result = score_interval(1400, 1600, 1440, params=PARAMS)

    assert result.hit is True
    assert result.interval_width == 200
    assert result.precision == pytest.approx(86.11, abs=0.01)
    assert result.score > 0


def test_huge_interval_hits_with_zero_precision_but_positive_score() -> None:
    result = score_interval(100, 400000, 8849, params=PARAMS)

    assert result.hit is True
    assert result.precision == 0.0
    assert 0 < result.score < score_interval(8000, 9000, 8849, params=PARAMS).score


def test_zero_width_hit_scores_exact_guess_bonus() -> None:
    result = score_interval(1440, 1440, 1440, params=PARAMS)

    assert result.precision == 100.0
    assert result.score == pytest.approx(PARAMS.exact_guess_bonus)


def test_score_strictly_decreases_with_width() -> None:
    scores = [
        score_interval(1440 - half, 1440 + half, 1440, params=PARAMS).score
        for half in (0, 1, 10, 100, 1000, 10000)
    ]

    assert all(earlier > later for earlier, later in zip(scores, scores[1:]))
    assert all(score > 0 for score in scores)
    assert max(scores) == scores[0]


def test_score_uses_absolute_true_value_for_negative_answers() -> None:
    negative = score_interval(-110, -90, -100, params=PARAMS)
    positive = score_interval(90, 110, 100, params=PARAMS)

    assert negative.hit is True
    assert negative.precision == pytest.approx(80.0)
    assert negative.score == pytest.approx(positive.score)


@pytest.mark.parametrize(
    ("lower", "upper", "expected_precision"),
    [
        (0, 0, 100.0),
        (-1, 1, 0.0),
    ],
)
def test_zero_true_value_precision(lower: float, upper: float, expected_precision: float) -> None:
    result = score_interval(lower, upper, 0, params=PARAMS)

    assert result.hit is True
    assert result.precision == expected_precision


def test_width_percent_is_undefined_for_zero_true_value_with_width() -> None:
    assert width_percent(2, 0) is None
    assert width_percent(0, 0) == 0.0
    assert width_percent(50, 200) == pytest.approx(25.0)


def test_precision_never_goes_negative() -> None:
    assert precision_for(10_000, 10) == 0.0
