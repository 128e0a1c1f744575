"""Running user aggregates.

Streaks are date based: a play date with at least one hit extends a streak
that ended on the previous calendar date, otherwise it starts a new one at 1.
A play date with zero hits resets the streak to 0.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import date, timedelta

from sigma_arena.game.sessions.types import Judgement
from sigma_arena.game.stats.types import CategoryDelta, SessionOutcome, UserAggregates


def average_score(total_score: float, games_played: int) -> float:
    if games_played <= 0:
        return 0.0
    return total_score / games_played


def calibration_rate(questions_captured: int, questions_answered: int) -> float:
    if questions_answered <= 0:
        return 0.0
    return questions_captured / questions_answered


def advance_streak(
    current_streak: int,
    last_streak_date: date | None,
    *,
    play_date: date,
    hits: int,
) -> tuple[int, date | None]:
    if last_streak_date is not None and play_date < last_streak_date:
        return current_streak, last_streak_date
    if hits <= 0:
        if last_streak_date == play_date:
            return current_streak, last_streak_date
        return 0, last_streak_date
    if last_streak_date == play_date:
        return max(1, current_streak), play_date
    if (
        last_streak_date is not None
        and current_streak > 0
        and last_streak_date + timedelta(days=1) == play_date
    ):
        return current_streak + 1, play_date
    return 1, play_date


def recompute_streaks(daily_hits: Iterable[tuple[date, int]]) -> tuple[int, int, date | None]:
    """Replays per-day hit counts; returns (current, best, last_streak_date)."""
    per_day: dict[date, int] = defaultdict(int)
    for play_date, hits in daily_hits:
        per_day[play_date] += hits

    current = 0
    best = 0
    last_date: date | None = None
    for play_date in sorted(per_day):
        current, last_date = advance_streak(current, last_date, play_date=play_date, hits=per_day[play_date])
        best = max(best, current)
    return current, best, last_date


def effective_current_streak(current_streak: int, last_streak_date: date | None, *, today: date) -> int:
    if last_streak_date is None or last_streak_date < today - timedelta(days=1):
        return 0
    return current_streak


def outcome_from_judgements(play_date: date, judgements: Sequence[Judgement], session_score: float) -> SessionOutcome:
    return SessionOutcome(
        play_date=play_date,
        session_score=session_score,
        questions_judged=len(judgements),
        questions_captured=sum(1 for judgement in judgements if judgement.hit),
        best_question_score=max((judgement.score for judgement in judgements), default=0.0),
    )


def apply_session_outcome(aggregates: UserAggregates, outcome: SessionOutcome) -> UserAggregates:
    total_score = aggregates.total_score + outcome.session_score
    games_played = aggregates.games_played + 1
    questions_answered = aggregates.questions_answered + outcome.questions_judged
    questions_captured = aggregates.questions_captured + outcome.questions_captured
    current_streak, last_streak_date = advance_streak(
        aggregates.current_streak,
        aggregates.last_streak_date,
        play_date=outcome.play_date,
        hits=outcome.questions_captured,
    )
    return replace(
        aggregates,
        total_score=total_score,
        average_score=average_score(total_score, games_played),
        games_played=games_played,
        session_count=aggregates.session_count + 1,
        questions_answered=questions_answered,
        questions_captured=questions_captured,
        calibration_rate=calibration_rate(questions_captured, questions_answered),
        current_streak=current_streak,
        best_streak=max(aggregates.best_streak, current_streak),
        last_streak_date=last_streak_date,
        best_single_score=max(aggregates.best_single_score, outcome.best_question_score),
    )


def merge_aggregates(
    source: UserAggregates,
    target: UserAggregates,
    *,
    merged_daily_hits: Iterable[tuple[date, int]],
) -> UserAggregates:
    """Folds ``source`` into ``target``: counters sum, bests take the max,
    streaks are replayed from the combined per-day history."""
    total_score = source.total_score + target.total_score
    games_played = source.games_played + target.games_played
    questions_answered = source.questions_answered + target.questions_answered
    questions_captured = source.questions_captured + target.questions_captured
    current_streak, replayed_best, last_streak_date = recompute_streaks(merged_daily_hits)
    return UserAggregates(
        total_score=total_score,
        average_score=average_score(total_score, games_played),
        games_played=games_played,
        session_count=source.session_count + target.session_count,
        questions_answered=questions_answered,
        questions_captured=questions_captured,
        calibration_rate=calibration_rate(questions_captured, questions_answered),
        current_streak=current_streak,
        best_streak=max(source.best_streak, target.best_streak, replayed_best),
        last_streak_date=last_streak_date,
        best_single_score=max(source.best_single_score, target.best_single_score),
    )


def category_deltas(judgements: Sequence[Judgement]) -> list[CategoryDelta]:
    grouped: dict[str, list[Judgement]] = defaultdict(list)
    for judgement in judgements:
        if judgement.category:
            grouped[judgement.category].append(judgement)
    return [
        CategoryDelta(
            category=category,
            questions_answered=len(items),
            questions_captured=sum(1 for item in items if item.hit),
            total_score=sum(item.score for item in items),
        )
        for category, items in sorted(grouped.items())
    ]
