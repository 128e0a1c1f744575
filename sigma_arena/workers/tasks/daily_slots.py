from __future__ import annotations

from sigma_arena.workers.asyncio_runner import run_async_job
from sigma_arena.workers.celery_app import celery_app
from sigma_arena.workers.tasks.daily_slots_async import run_daily_slots_check_async
from sigma_arena.workers.tasks.daily_slots_config import DAILY_SLOTS_LOOKAHEAD_DAYS
from sigma_arena.workers.tasks.daily_slots_schedule import configure_daily_slots_schedule

__all__ = ["run_daily_slots_check", "run_daily_slots_check_async"]


@celery_app.task(name="sigma_arena.workers.tasks.daily_slots.run_daily_slots_check")
def run_daily_slots_check(lookahead_days: int = DAILY_SLOTS_LOOKAHEAD_DAYS) -> dict[str, object]:
    return run_async_job(
        run_daily_slots_check_async(lookahead_days=lookahead_days),
        job_name="daily_slots_check",
    )


configure_daily_slots_schedule(celery_app)
