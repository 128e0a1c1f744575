from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ScoringParams:
    base_score: float
    precision_exponent: float
    exact_guess_bonus: float


@dataclass(frozen=True, slots=True)
class IntervalScore:
    hit: bool
    interval_width: float
    width_percent: float | None
    precision: float
    score: float
