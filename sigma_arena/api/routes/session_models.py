from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from sigma_arena.game.sessions.types import FinalizeSessionResult, StartSessionResult


class QuestionResponse(BaseModel):
    question_id: str
    prompt: str
    unit: str | None = None
    source_name: str | None = None
    source_url: str | None = None
    category: str | None = None


class StartSessionResponse(BaseModel):
    session_id: UUID
    play_date: date
    status: str
    questions: list[QuestionResponse]
    answered_question_ids: list[str]
    idempotent_replay: bool


class SubmitAnswerRequest(BaseModel):
    session_id: UUID
    question_id: str = Field(min_length=1, max_length=64)
    lower: float = Field(allow_inf_nan=False)
    upper: float = Field(allow_inf_nan=False)


class SubmitAnswerResponse(BaseModel):
    session_id: UUID
    question_id: str
    status: str
    answered_count: int = Field(ge=0)
    total_questions: int = Field(ge=0)


class FinalizeSessionRequest(BaseModel):
    session_id: UUID


class CommunityResponse(BaseModel):
    average_score: float
    highest_score: float
    response_count: int = Field(ge=0)


class JudgementResponse(BaseModel):
    question_id: str
    prompt: str
    unit: str | None = None
    lower: float | None = None
    upper: float | None = None
    true_value: float
    answered: bool
    hit: bool
    precision: float = Field(ge=0.0, le=100.0)
    score: float = Field(ge=0.0)
    category: str | None = None
    source_name: str | None = None
    source_url: str | None = None
    answer_context: str | None = None
    community: CommunityResponse | None = None


class FinalizeSessionResponse(BaseModel):
    session_id: UUID
    play_date: date
    total_score: float
    questions_captured: int = Field(ge=0)
    questions_answered: int = Field(ge=0)
    questions_total: int = Field(ge=0)
    idempotent_replay: bool
    judgements: list[JudgementResponse]


class OverallLeaderboardEntryResponse(BaseModel):
    rank: int = Field(ge=1)
    user_id: UUID
    username: str | None = None
    total_score: float
    games_played: int = Field(ge=0)
    average_score: float


class BestGuessEntryResponse(BaseModel):
    rank: int = Field(ge=1)
    username: str | None = None
    score: float
    prompt: str
    lower: float | None = None
    upper: float | None = None
    true_value: float
    answered_at: datetime


class LeaderboardResponse(BaseModel):
    type: str
    leaderboard: list[OverallLeaderboardEntryResponse] | list[BestGuessEntryResponse]


def start_response(result: StartSessionResult) -> StartSessionResponse:
    return StartSessionResponse(
        session_id=result.session_id,
        play_date=result.play_date,
        status=result.status.value,
        questions=[
            QuestionResponse(
                question_id=question.question_id,
                prompt=question.prompt,
                unit=question.unit,
                source_name=question.source_name,
                source_url=question.source_url,
                category=question.category,
            )
            for question in result.questions
        ],
        answered_question_ids=list(result.answered_question_ids),
        idempotent_replay=result.idempotent_replay,
    )


def finalize_response(result: FinalizeSessionResult) -> FinalizeSessionResponse:
    return FinalizeSessionResponse(
        session_id=result.session_id,
        play_date=result.play_date,
        total_score=result.total_score,
        questions_captured=result.questions_captured,
        questions_answered=result.questions_answered,
        questions_total=result.questions_total,
        idempotent_replay=result.idempotent_replay,
        judgements=[
            JudgementResponse(
                question_id=judgement.question_id,
                prompt=judgement.prompt,
                unit=judgement.unit,
                lower=judgement.lower,
                upper=judgement.upper,
                true_value=judgement.true_value,
                answered=judgement.answered,
                hit=judgement.hit,
                precision=judgement.precision,
                score=judgement.score,
                category=judgement.category,
                source_name=judgement.source_name,
                source_url=judgement.source_url,
                answer_context=judgement.answer_context,
                community=(
                    CommunityResponse(
                        average_score=judgement.community.average_score,
                        highest_score=judgement.community.highest_score,
                        response_count=judgement.community.response_count,
                    )
                    if judgement.community is not None
                    else None
                ),
            )
            for judgement in result.judgements
        ],
    )
