from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from sigma_arena.db.models.users import User
from sigma_arena.game.stats.rules import effective_current_streak


class UserProfileResponse(BaseModel):
    id: UUID
    email: str | None = None
    username: str | None = None
    is_anonymous: bool
    email_verified: bool
    timezone: str
    total_score: float
    average_score: float
    games_played: int = Field(ge=0)
    session_count: int = Field(ge=0)
    questions_answered: int = Field(ge=0)
    questions_captured: int = Field(ge=0)
    calibration_rate: float = Field(ge=0.0, le=1.0)
    current_streak: int = Field(ge=0)
    best_streak: int = Field(ge=0)
    best_single_score: float
    created_at: datetime
    last_played_at: datetime | None = None


class UserEnvelope(BaseModel):
    user: UserProfileResponse


class ProfileUpdateRequest(BaseModel):
    timezone: str = Field(min_length=1, max_length=64)


class RecentAnswerResponse(BaseModel):
    question_id: str
    prompt: str
    play_date: date
    lower: float | None = None
    upper: float | None = None
    true_value: float
    hit: bool
    score: float
    answered_at: datetime


class CategoryStatResponse(BaseModel):
    category: str
    questions_answered: int = Field(ge=0)
    questions_captured: int = Field(ge=0)
    total_score: float
    calibration_rate: float = Field(ge=0.0, le=1.0)


class UserStatsResponse(BaseModel):
    user: UserProfileResponse
    recent_answers: list[RecentAnswerResponse]
    category_stats: list[CategoryStatResponse]


class DailyStatsResponse(BaseModel):
    play_date: date
    daily_rank: int | None = None
    top_score_today: float | None = None
    todays_average: float | None = None
    user_score_today: float | None = None
    calibration_today: float | None = None
    total_participants_today: int = Field(ge=0)


class HistoryPointResponse(BaseModel):
    play_date: date
    day: str
    user_score: float
    average_score: float
    calibration: float


class PerformanceHistoryResponse(BaseModel):
    history: list[HistoryPointResponse]


def profile_response(user: User, *, today: date) -> UserProfileResponse:
    return UserProfileResponse(
        id=user.id,
        email=user.email,
        username=user.username,
        is_anonymous=user.is_anonymous,
        email_verified=user.email_verified,
        timezone=user.timezone,
        total_score=round(user.total_score, 2),
        average_score=round(user.average_score, 2),
        games_played=user.games_played,
        session_count=user.session_count,
        questions_answered=user.questions_answered,
        questions_captured=user.questions_captured,
        calibration_rate=user.calibration_rate,
        current_streak=effective_current_streak(user.current_streak, user.last_streak_date, today=today),
        best_streak=user.best_streak,
        best_single_score=user.best_single_score,
        created_at=user.created_at,
        last_played_at=user.last_played_at,
    )
