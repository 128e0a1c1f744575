from __future__ import annotations

from celery.schedules import crontab

from sigma_arena.workers.tasks.daily_slots_config import DAILY_SLOTS_CHECK_HOUR, DAILY_SLOTS_CHECK_MINUTE


def configure_daily_slots_schedule(celery_app) -> None:
    celery_app.conf.beat_schedule = celery_app.conf.beat_schedule or {}
    celery_app.conf.beat_schedule.update(
        {
            "daily-question-slots-check": {
                "task": "sigma_arena.workers.tasks.daily_slots.run_daily_slots_check",
                "schedule": crontab(
                    hour=DAILY_SLOTS_CHECK_HOUR,
                    minute=DAILY_SLOTS_CHECK_MINUTE,
                ),
                "options": {"queue": "q_low"},
            },
        }
    )
