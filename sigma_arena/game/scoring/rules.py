"""Interval scoring.

A hit scores ``base * (relative_width + eps) ** -exponent`` where
``relative_width = width / max(1, |true_value|)``. ``eps`` is picked so that a
zero-width hit scores exactly ``exact_guess_bonus``, which keeps the curve
finite, strictly decreasing in width and positive. A miss always scores 0.
"""

from __future__ import annotations

from sigma_arena.core.config import get_settings
from sigma_arena.game.scoring.types import IntervalScore, ScoringParams


def default_scoring_params() -> ScoringParams:
    settings = get_settings()
    return ScoringParams(
        base_score=settings.scoring_base_score,
        precision_exponent=settings.scoring_precision_exponent,
        exact_guess_bonus=settings.scoring_exact_guess_bonus,
    )


def _width_offset(params: ScoringParams) -> float:
    return (params.base_score / params.exact_guess_bonus) ** (1.0 / params.precision_exponent)


def is_hit(lower: float, upper: float, true_value: float) -> bool:
    return lower <= true_value <= upper


def width_percent(interval_width: float, true_value: float) -> float | None:
    if true_value == 0:
        return 0.0 if interval_width == 0 else None
    return interval_width / abs(true_value) * 100


def precision_for(interval_width: float, true_value: float) -> float:
    if true_value == 0:
        return 100.0 if interval_width == 0 else 0.0
    return max(0.0, 100.0 - interval_width / abs(true_value) * 100)


def hit_score(interval_width: float, true_value: float, params: ScoringParams) -> float:
    relative_width = interval_width / max(1.0, abs(true_value))
    return params.base_score * (relative_width + _width_offset(params)) ** (-params.precision_exponent)


def score_interval(
    lower: float,
    upper: float,
    true_value: float,
    *,
    params: ScoringParams | None = None,
) -> IntervalScore:
    """Judges one interval. Callers must reject ``lower > upper`` beforehand."""
    resolved = params or default_scoring_params()
    interval_width = upper - lower
    hit = is_hit(lower, upper, true_value)
    if not hit:
        return IntervalScore(
            hit=False,
            interval_width=interval_width,
            width_percent=width_percent(interval_width, true_value),
            precision=0.0,
            score=0.0,
        )

    return IntervalScore(
        hit=True,
        interval_width=interval_width,
        width_percent=width_percent(interval_width, true_value),
        precision=precision_for(interval_width, true_value),
        score=hit_score(interval_width, true_value, resolved),
    )


def round_question_score(score: float) -> float:
    return round(score, get_settings().scoring_individual_decimals)


def round_total_score(score: float) -> float:
    return round(score, get_settings().scoring_total_decimals)
