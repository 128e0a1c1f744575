from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from uuid import UUID

from sigma_arena.game.questions.types import QuestionView


class SessionStatus(str, Enum):
    CREATED = "CREATED"
    ANSWERING = "ANSWERING"
    FINALIZED = "FINALIZED"


@dataclass(frozen=True, slots=True)
class JudgedQuestion:
    """Question data needed to judge an answer, true value included."""

    question_id: str
    prompt: str
    unit: str | None
    true_value: float
    category: str | None
    source_name: str | None
    source_url: str | None
    answer_context: str | None


@dataclass(frozen=True, slots=True)
class SubmittedBounds:
    lower: float
    upper: float


@dataclass(frozen=True, slots=True)
class CommunitySnapshot:
    average_score: float
    highest_score: float
    response_count: int


@dataclass(frozen=True, slots=True)
class Judgement:
    question_id: str
    prompt: str
    unit: str | None
    lower: float | None
    upper: float | None
    true_value: float
    answered: bool
    hit: bool
    precision: float
    score: float
    category: str | None
    source_name: str | None
    source_url: str | None
    answer_context: str | None
    community: CommunitySnapshot | None = None


@dataclass(slots=True)
class StartSessionResult:
    session_id: UUID
    play_date: date
    status: SessionStatus
    questions: tuple[QuestionView, ...]
    answered_question_ids: tuple[str, ...]
    idempotent_replay: bool


@dataclass(slots=True)
class SubmitAnswerResult:
    session_id: UUID
    question_id: str
    status: SessionStatus
    answered_count: int
    total_questions: int


@dataclass(slots=True)
class FinalizeSessionResult:
    session_id: UUID
    play_date: date
    judgements: tuple[Judgement, ...]
    total_score: float
    questions_captured: int
    questions_total: int
    questions_answered: int
    idempotent_replay: bool
