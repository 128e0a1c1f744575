from __future__ import annotations

from datetime import datetime, timezone

import structlog

from sigma_arena.core.time import game_local_date
from sigma_arena.db.session import SessionLocal
from sigma_arena.game.questions.population import find_dates_missing_slots
from sigma_arena.workers.tasks.daily_slots_config import DAILY_SLOTS_LOOKAHEAD_DAYS

logger = structlog.get_logger("sigma_arena.workers.tasks.daily_slots")


async def run_daily_slots_check_async(
    *,
    lookahead_days: int = DAILY_SLOTS_LOOKAHEAD_DAYS,
) -> dict[str, object]:
    now_utc = datetime.now(timezone.utc)
    today = game_local_date(now_utc)

    async with SessionLocal.begin() as session:
        missing = await find_dates_missing_slots(
            session,
            start_date=today,
            days=lookahead_days + 1,
        )

    for missing_date in missing:
        logger.warning(
            "daily_question_slots_missing",
            slot_date=missing_date.isoformat(),
            today=missing_date == today,
        )

    result: dict[str, object] = {
        "generated_at": now_utc.isoformat(),
        "start_date": today.isoformat(),
        "days_checked": lookahead_days + 1,
        "missing_dates": [missing_date.isoformat() for missing_date in missing],
    }
    logger.info("daily_question_slots_checked", days_checked=lookahead_days + 1, missing_total=len(missing))
    return result
