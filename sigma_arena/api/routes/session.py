from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Query, Request

from sigma_arena.core.errors import SigmaArenaError
from sigma_arena.core.time import game_local_date
from sigma_arena.db.session import SessionLocal
from sigma_arena.game.sessions.service import GameSessionService
from sigma_arena.game.stats import queries as stats_queries
from sigma_arena.identity.resolver import require_user

from .route_helpers import http_error, now_utc, resolve_request_identity
from .session_models import (
    BestGuessEntryResponse,
    FinalizeSessionRequest,
    FinalizeSessionResponse,
    LeaderboardResponse,
    OverallLeaderboardEntryResponse,
    StartSessionResponse,
    SubmitAnswerRequest,
    SubmitAnswerResponse,
    finalize_response,
    start_response,
)

router = APIRouter(prefix="/session", tags=["session"])


@router.post("/start", response_model=StartSessionResponse)
async def start(request: Request) -> StartSessionResponse:
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            user = require_user(await resolve_request_identity(session, request))
            result = await GameSessionService.start_session(
                session,
                user_id=user.id,
                play_date=game_local_date(now),
                now_utc=now,
            )
    except SigmaArenaError as exc:
        raise http_error(exc) from exc
    return start_response(result)


@router.post("/answer", response_model=SubmitAnswerResponse)
async def answer(payload: SubmitAnswerRequest, request: Request) -> SubmitAnswerResponse:
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            user = require_user(await resolve_request_identity(session, request))
            result = await GameSessionService.submit_answer(
                session,
                user_id=user.id,
                session_id=payload.session_id,
                question_id=payload.question_id,
                lower=payload.lower,
                upper=payload.upper,
                now_utc=now,
            )
    except SigmaArenaError as exc:
        raise http_error(exc) from exc
    return SubmitAnswerResponse(
        session_id=result.session_id,
        question_id=result.question_id,
        status=result.status.value,
        answered_count=result.answered_count,
        total_questions=result.total_questions,
    )


@router.post("/finalize", response_model=FinalizeSessionResponse)
async def finalize(payload: FinalizeSessionRequest, request: Request) -> FinalizeSessionResponse:
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            user = require_user(await resolve_request_identity(session, request))
            result = await GameSessionService.finalize_session(
                session,
                user_id=user.id,
                session_id=payload.session_id,
                now_utc=now,
            )
    except SigmaArenaError as exc:
        raise http_error(exc) from exc
    return finalize_response(result)


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def leaderboard(
    board_type: Literal["overall", "best-guesses"] = Query(default="overall", alias="type"),
) -> LeaderboardResponse:
    async with SessionLocal.begin() as session:
        if board_type == "best-guesses":
            entries = await stats_queries.get_best_guesses_leaderboard(session)
            return LeaderboardResponse(
                type=board_type,
                leaderboard=[
                    BestGuessEntryResponse(
                        rank=entry.rank,
                        username=entry.username,
                        score=entry.score,
                        prompt=entry.prompt,
                        lower=entry.lower,
                        upper=entry.upper,
                        true_value=entry.true_value,
                        answered_at=entry.answered_at,
                    )
                    for entry in entries
                ],
            )

        leaders = await stats_queries.get_overall_leaderboard(session)
        return LeaderboardResponse(
            type=board_type,
            leaderboard=[
                OverallLeaderboardEntryResponse(
                    rank=entry.rank,
                    user_id=entry.user_id,
                    username=entry.username,
                    total_score=entry.total_score,
                    games_played=entry.games_played,
                    average_score=entry.average_score,
                )
                for entry in leaders
            ],
        )
