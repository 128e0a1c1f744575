from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any

import structlog
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from sqlalchemy import text

from sigma_arena.core.config import get_settings
from sigma_arena.core.time import game_local_date
from sigma_arena.db.session import SessionLocal
from sigma_arena.game.questions.population import find_dates_missing_slots
from sigma_arena.workers.celery_app import celery_app

router = APIRouter(tags=["health"])
logger = structlog.get_logger(__name__)


def _ok_check(extra: dict[str, Any] | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"status": "ok"}
    if extra:
        payload.update(extra)
    return payload


def _failed_check(error: str) -> dict[str, str]:
    return {"status": "failed", "error": error}


async def _check_database() -> dict[str, Any]:
    try:
        async with SessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("health_database_failed", error_type=type(exc).__name__)
        return _failed_check("database_unavailable")
    return _ok_check()


async def _check_redis() -> dict[str, Any]:
    redis_client: Redis | None = None
    try:
        redis_client = Redis.from_url(get_settings().redis_url)
        pong = await redis_client.ping()
    except Exception as exc:
        logger.warning("health_redis_failed", error_type=type(exc).__name__)
        return _failed_check("redis_unavailable")
    finally:
        if redis_client is not None:
            await redis_client.aclose()
    if pong is not True:
        return _failed_check("redis_unexpected_ping")
    return _ok_check()


async def _check_daily_questions() -> dict[str, Any]:
    today = game_local_date(datetime.now(timezone.utc))
    try:
        async with SessionLocal() as session:
            missing = await find_dates_missing_slots(session, start_date=today, days=1)
    except Exception as exc:
        logger.warning("health_daily_questions_failed", error_type=type(exc).__name__)
        return _failed_check("database_unavailable")
    if missing:
        return _failed_check("no_questions_for_today")
    return _ok_check({"date": today.isoformat()})


def _check_celery_worker_sync() -> dict[str, Any]:
    try:
        replies = celery_app.control.inspect(timeout=1.0).ping() or {}
    except Exception as exc:
        logger.warning("health_celery_failed", error_type=type(exc).__name__)
        return _failed_check("celery_unavailable")
    if not replies:
        return _failed_check("no_celery_workers")
    return _ok_check({"workers": len(replies)})


def _checks_response(checks: dict[str, dict[str, Any]], *, ok_label: str, failed_label: str) -> JSONResponse:
    is_ok = all(check.get("status") == "ok" for check in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if is_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": ok_label if is_ok else failed_label, "checks": checks},
    )


@router.get("/health")
async def health() -> JSONResponse:
    database, redis, daily_questions, celery = await asyncio.gather(
        _check_database(),
        _check_redis(),
        _check_daily_questions(),
        asyncio.to_thread(_check_celery_worker_sync),
    )
    checks = {"database": database, "redis": redis, "daily_questions": daily_questions, "celery": celery}
    return _checks_response(checks, ok_label="ok", failed_label="degraded")


@router.get("/ready")
async def ready() -> JSONResponse:
    # a missing worker or an empty day does not stop the API from serving
    database, redis = await asyncio.gather(_check_database(), _check_redis())
    return _checks_response({"database": database, "redis": redis}, ok_label="ready", failed_label="not_ready")


@router.get("/live")
async def live() -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_200_OK, content={"status": "alive"})
