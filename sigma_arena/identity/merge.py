from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.core.errors import MergeInconsistencyError
from sigma_arena.db.repo.answer_records_repo import AnswerRecordsRepo
from sigma_arena.db.repo.user_category_stats_repo import UserCategoryStatsRepo
from sigma_arena.db.repo.users_repo import UsersRepo
from sigma_arena.game.stats.rules import merge_aggregates
from sigma_arena.game.stats.service import aggregates_of, write_aggregates
from sigma_arena.identity.merge_rules import MergeAction, plan_merge

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class MergeResult:
    source_user_id: UUID
    target_user_id: UUID
    merged: bool
    answers_moved: int
    categories_moved: int


async def merge_users(
    session: AsyncSession,
    *,
    source_user_id: UUID,
    target_user_id: UUID,
    now_utc: datetime,
) -> MergeResult:
    """Folds a device-only account into an authenticated one inside the caller's transaction."""
    locked = await UsersRepo.lock_many_ordered(session, (source_user_id, target_user_id))
    source = locked.get(source_user_id)
    target = locked.get(target_user_id)
    if source is None or target is None:
        logger.error(
            "user_merge_missing_user",
            source_user_id=str(source_user_id),
            target_user_id=str(target_user_id),
        )
        raise MergeInconsistencyError("merge participant not found")

    try:
        action = plan_merge(
            source_id=source.id,
            source_status=source.status,
            source_merged_into=source.merged_into_user_id,
            source_auth_id=source.auth_id,
            target_id=target.id,
            target_status=target.status,
            target_auth_id=target.auth_id,
        )
    except MergeInconsistencyError:
        logger.error(
            "user_merge_inconsistent",
            source_user_id=str(source_user_id),
            target_user_id=str(target_user_id),
            source_status=source.status,
            target_status=target.status,
        )
        raise

    if action == MergeAction.NOOP:
        logger.info(
            "user_merge_noop",
            source_user_id=str(source_user_id),
            target_user_id=str(target_user_id),
        )
        return MergeResult(
            source_user_id=source_user_id,
            target_user_id=target_user_id,
            merged=False,
            answers_moved=0,
            categories_moved=0,
        )

    source_aggregates = aggregates_of(source)
    target_aggregates = aggregates_of(target)

    answers_moved = await AnswerRecordsRepo.reassign_user(
        session,
        from_user_id=source.id,
        to_user_id=target.id,
    )
    source_categories = await UserCategoryStatsRepo.list_for_user(session, user_id=source.id)
    for row in source_categories:
        await UserCategoryStatsRepo.add_counts(
            session,
            user_id=target.id,
            category=row.category,
            questions_answered=row.questions_answered,
            questions_captured=row.questions_captured,
            total_score=row.total_score,
            last_answered_at=row.last_answered_at,
        )
    await UserCategoryStatsRepo.delete_for_user(session, user_id=source.id)

    merged_daily_hits = await AnswerRecordsRepo.list_daily_hit_counts(session, user_id=target.id)
    write_aggregates(
        target,
        merge_aggregates(source_aggregates, target_aggregates, merged_daily_hits=merged_daily_hits),
    )
    if source.last_played_at is not None and (
        target.last_played_at is None or source.last_played_at > target.last_played_at
    ):
        target.last_played_at = source.last_played_at

    device_id = source.device_id
    source.status = "MERGED"
    source.merged_into_user_id = target.id
    source.device_id = None
    await session.flush()

    if device_id is not None:
        target.device_id = device_id
    target.account_claimed_at = target.account_claimed_at or now_utc
    await session.flush()

    logger.info(
        "user_merge_completed",
        source_user_id=str(source_user_id),
        target_user_id=str(target_user_id),
        answers_moved=answers_moved,
        categories_moved=len(source_categories),
        games_played=target.games_played,
    )
    return MergeResult(
        source_user_id=source_user_id,
        target_user_id=target_user_id,
        merged=True,
        answers_moved=answers_moved,
        categories_moved=len(source_categories),
    )
