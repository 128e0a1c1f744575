from __future__ import annotations

import random
from collections.abc import Sequence
from datetime import date, timedelta

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.core.config import get_settings
from sigma_arena.db.repo.daily_question_slots_repo import DailyQuestionSlotsRepo
from sigma_arena.db.repo.questions_repo import QuestionsRepo
from sigma_arena.game.questions.errors import NotEnoughQuestionsError
from sigma_arena.game.questions.types import PlannedSlot, PopulationReport

logger = structlog.get_logger(__name__)

INSERT_BATCH_SIZE = 50


def plan_daily_batches(
    question_ids: Sequence[str],
    *,
    start_date: date,
    per_day: int,
    rng: random.Random,
) -> list[PlannedSlot]:
    """Partitions shuffled ids into consecutive days of ``per_day`` slots each.

    Leftover ids that do not fill a whole day are not scheduled.
    """
    if per_day < 1:
        raise NotEnoughQuestionsError("per_day must be positive")
    unique_ids = list(dict.fromkeys(question_ids))
    if len(unique_ids) < per_day:
        raise NotEnoughQuestionsError(f"need at least {per_day} questions, found {len(unique_ids)}")

    shuffled = list(unique_ids)
    rng.shuffle(shuffled)

    total_days = len(shuffled) // per_day
    slots: list[PlannedSlot] = []
    for day in range(total_days):
        slot_date = start_date + timedelta(days=day)
        for order in range(per_day):
            slots.append(
                PlannedSlot(
                    slot_date=slot_date,
                    display_order=order,
                    question_id=shuffled[day * per_day + order],
                )
            )
    return slots


async def populate_daily_questions(
    session: AsyncSession,
    *,
    start_date: date,
    rng: random.Random,
    replace_existing: bool = False,
    dry_run: bool = False,
    per_day: int | None = None,
    distribution_tier: str | None = None,
) -> PopulationReport:
    settings = get_settings()
    resolved_per_day = per_day or settings.daily_questions_per_day
    resolved_tier = distribution_tier or settings.daily_distribution_tier

    question_ids = await QuestionsRepo.list_active_ids_by_tier(
        session,
        distribution_tier=resolved_tier,
    )
    slots = plan_daily_batches(
        question_ids,
        start_date=start_date,
        per_day=resolved_per_day,
        rng=rng,
    )
    days_planned = len(slots) // resolved_per_day

    slots_cleared = 0
    slots_inserted = 0
    if not dry_run:
        if replace_existing:
            slots_cleared = await DailyQuestionSlotsRepo.delete_all(session)
        for offset in range(0, len(slots), INSERT_BATCH_SIZE):
            batch = slots[offset : offset + INSERT_BATCH_SIZE]
            slots_inserted += await DailyQuestionSlotsRepo.insert_slots(
                session,
                rows=[
                    {
                        "slot_date": slot.slot_date,
                        "display_order": slot.display_order,
                        "question_id": slot.question_id,
                        "is_published": True,
                    }
                    for slot in batch
                ],
            )

    report = PopulationReport(
        questions_found=len(question_ids),
        days_planned=days_planned,
        slots_planned=len(slots),
        slots_inserted=slots_inserted,
        unused_questions=len(question_ids) - len(slots),
        slots_cleared=slots_cleared,
        first_date=slots[0].slot_date if slots else None,
        last_date=slots[-1].slot_date if slots else None,
        dry_run=dry_run,
    )
    logger.info(
        "daily_questions_populated",
        distribution_tier=resolved_tier,
        questions_found=report.questions_found,
        days_planned=report.days_planned,
        slots_inserted=report.slots_inserted,
        slots_cleared=report.slots_cleared,
        dry_run=dry_run,
    )
    return report


async def find_dates_missing_slots(
    session: AsyncSession,
    *,
    start_date: date,
    days: int,
) -> list[date]:
    wanted = [start_date + timedelta(days=offset) for offset in range(max(1, days))]
    present = await DailyQuestionSlotsRepo.list_published_dates(session, dates=wanted)
    return [day for day in wanted if day not in present]
