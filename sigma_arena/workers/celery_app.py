from celery import Celery, signals

from sigma_arena.core.config import get_settings
from sigma_arena.core.logging import configure_logging

settings = get_settings()

celery_app = Celery(
    "sigma_arena",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["sigma_arena.workers.tasks.daily_slots"],
)

celery_app.conf.update(
    task_default_queue="q_normal",
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    result_expires=24 * 3600,
    timezone=settings.game_timezone,
    enable_utc=True,
)


@signals.setup_logging.connect
def _configure_worker_logging(**kwargs: object) -> None:
    configure_logging(settings.log_level, app_env=settings.app_env)

