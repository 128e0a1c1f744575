from __future__ import annotations

from fastapi import APIRouter, Query, Request

from sigma_arena.core.errors import SigmaArenaError
from sigma_arena.core.time import game_local_date
from sigma_arena.db.session import SessionLocal
from sigma_arena.game.stats import queries as stats_queries
from sigma_arena.identity import accounts
from sigma_arena.identity.resolver import require_user

from .route_helpers import http_error, now_utc, resolve_request_identity
from .user_models import (
    CategoryStatResponse,
    DailyStatsResponse,
    HistoryPointResponse,
    PerformanceHistoryResponse,
    ProfileUpdateRequest,
    RecentAnswerResponse,
    UserEnvelope,
    UserStatsResponse,
    profile_response,
)

router = APIRouter(prefix="/user", tags=["user"])


@router.get("/profile", response_model=UserEnvelope)
async def get_profile(request: Request) -> UserEnvelope:
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            user = require_user(await resolve_request_identity(session, request))
            return UserEnvelope(user=profile_response(user, today=game_local_date(now)))
    except SigmaArenaError as exc:
        raise http_error(exc) from exc


@router.patch("/profile", response_model=UserEnvelope)
async def update_profile(payload: ProfileUpdateRequest, request: Request) -> UserEnvelope:
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            user = require_user(await resolve_request_identity(session, request))
            user = await accounts.update_timezone(session, user=user, timezone=payload.timezone)
            return UserEnvelope(user=profile_response(user, today=game_local_date(now)))
    except SigmaArenaError as exc:
        raise http_error(exc) from exc


@router.get("/stats", response_model=UserStatsResponse)
async def get_stats(request: Request) -> UserStatsResponse:
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            user = require_user(await resolve_request_identity(session, request))
            recent = await stats_queries.list_recent_answers(session, user_id=user.id)
            categories = await stats_queries.list_category_stats(session, user_id=user.id)
            return UserStatsResponse(
                user=profile_response(user, today=game_local_date(now)),
                recent_answers=[
                    RecentAnswerResponse(
                        question_id=item.question_id,
                        prompt=item.prompt,
                        play_date=item.play_date,
                        lower=item.lower,
                        upper=item.upper,
                        true_value=item.true_value,
                        hit=item.hit,
                        score=item.score,
                        answered_at=item.answered_at,
                    )
                    for item in recent
                ],
                category_stats=[
                    CategoryStatResponse(
                        category=item.category,
                        questions_answered=item.questions_answered,
                        questions_captured=item.questions_captured,
                        total_score=item.total_score,
                        calibration_rate=item.calibration_rate,
                    )
                    for item in categories
                ],
            )
    except SigmaArenaError as exc:
        raise http_error(exc) from exc


@router.get("/daily-stats", response_model=DailyStatsResponse)
async def get_daily_stats(request: Request) -> DailyStatsResponse:
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            user = require_user(await resolve_request_identity(session, request))
            stats = await stats_queries.get_daily_stats(
                session,
                user_id=user.id,
                play_date=game_local_date(now),
            )
    except SigmaArenaError as exc:
        raise http_error(exc) from exc
    return DailyStatsResponse(
        play_date=stats.play_date,
        daily_rank=stats.daily_rank,
        top_score_today=stats.top_score_today,
        todays_average=stats.todays_average,
        user_score_today=stats.user_score_today,
        calibration_today=stats.calibration_today,
        total_participants_today=stats.total_participants_today,
    )


@router.get("/performance-history", response_model=PerformanceHistoryResponse)
async def get_performance_history(
    request: Request,
    days: int = Query(default=7, ge=1, le=stats_queries.HISTORY_MAX_DAYS),
) -> PerformanceHistoryResponse:
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            user = require_user(await resolve_request_identity(session, request))
            points = await stats_queries.get_performance_history(
                session,
                user_id=user.id,
                end_date=game_local_date(now),
                days=days,
            )
    except SigmaArenaError as exc:
        raise http_error(exc) from exc
    return PerformanceHistoryResponse(
        history=[
            HistoryPointResponse(
                play_date=point.play_date,
                day=point.day_label,
                user_score=point.user_score,
                average_score=point.average_score,
                calibration=point.calibration,
            )
            for point in points
        ]
    )
