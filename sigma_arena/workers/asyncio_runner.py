from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable
from typing import TypeVar

import structlog

from sigma_arena.db.session import dispose_engine

T = TypeVar("T")

logger = structlog.get_logger(__name__)


async def _run_with_fresh_db_pool(awaitable: Awaitable[T], *, job_name: str) -> T:
    # each asyncio.run gets a new loop; pooled asyncpg connections must not cross it
    await dispose_engine()
    started = time.monotonic()
    try:
        result = await awaitable
    except Exception:
        logger.exception("worker_job_failed", job=job_name)
        raise
    finally:
        await dispose_engine()
    logger.info("worker_job_finished", job=job_name, duration_ms=int((time.monotonic() - started) * 1000))
    return result


def run_async_job(awaitable: Awaitable[T], *, job_name: str = "async_job") -> T:
    return asyncio.run(_run_with_fresh_db_pool(awaitable, job_name=job_name))
