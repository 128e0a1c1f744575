from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class UserAggregates:
    total_score: float = 0.0
    average_score: float = 0.0
    games_played: int = 0
    session_count: int = 0
    questions_answered: int = 0
    questions_captured: int = 0
    calibration_rate: float = 0.0
    current_streak: int = 0
    best_streak: int = 0
    last_streak_date: date | None = None
    best_single_score: float = 0.0


@dataclass(frozen=True, slots=True)
class SessionOutcome:
    play_date: date
    session_score: float
    questions_judged: int
    questions_captured: int
    best_question_score: float


@dataclass(frozen=True, slots=True)
class CategoryDelta:
    category: str
    questions_answered: int
    questions_captured: int
    total_score: float


@dataclass(slots=True)
class RecentAnswer:
    question_id: str
    prompt: str
    play_date: date
    lower: float | None
    upper: float | None
    true_value: float
    hit: bool
    score: float
    answered_at: datetime


@dataclass(slots=True)
class CategoryStatView:
    category: str
    questions_answered: int
    questions_captured: int
    total_score: float
    calibration_rate: float


@dataclass(slots=True)
class DailyStats:
    play_date: date
    daily_rank: int | None
    top_score_today: float | None
    todays_average: float | None
    user_score_today: float | None
    calibration_today: float | None
    total_participants_today: int


@dataclass(slots=True)
class HistoryPoint:
    play_date: date
    day_label: str
    user_score: float
    average_score: float
    calibration: float


@dataclass(slots=True)
class OverallLeaderboardEntry:
    rank: int
    user_id: UUID
    username: str | None
    total_score: float
    games_played: int
    average_score: float


@dataclass(slots=True)
class BestGuessEntry:
    rank: int
    username: str | None
    score: float
    prompt: str
    lower: float | None
    upper: float | None
    true_value: float
    answered_at: datetime
