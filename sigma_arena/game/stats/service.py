from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.db.models.users import User
from sigma_arena.db.repo.user_category_stats_repo import UserCategoryStatsRepo
from sigma_arena.db.repo.users_repo import UsersRepo
from sigma_arena.game.sessions.types import Judgement
from sigma_arena.game.stats.rules import apply_session_outcome, category_deltas, outcome_from_judgements
from sigma_arena.game.stats.types import UserAggregates
from sigma_arena.identity.errors import UserNotFoundError

logger = structlog.get_logger(__name__)


def aggregates_of(user: User) -> UserAggregates:
    return UserAggregates(
        total_score=float(user.total_score),
        average_score=float(user.average_score),
        games_played=int(user.games_played),
        session_count=int(user.session_count),
        questions_answered=int(user.questions_answered),
        questions_captured=int(user.questions_captured),
        calibration_rate=float(user.calibration_rate),
        current_streak=int(user.current_streak),
        best_streak=int(user.best_streak),
        last_streak_date=user.last_streak_date,
        best_single_score=float(user.best_single_score),
    )


def write_aggregates(user: User, aggregates: UserAggregates) -> None:
    user.total_score = aggregates.total_score
    user.average_score = aggregates.average_score
    user.games_played = aggregates.games_played
    user.session_count = aggregates.session_count
    user.questions_answered = aggregates.questions_answered
    user.questions_captured = aggregates.questions_captured
    user.calibration_rate = aggregates.calibration_rate
    user.current_streak = aggregates.current_streak
    user.best_streak = aggregates.best_streak
    user.last_streak_date = aggregates.last_streak_date
    user.best_single_score = aggregates.best_single_score


async def apply_session_result(
    session: AsyncSession,
    *,
    user_id: UUID,
    play_date: date,
    judgements: Sequence[Judgement],
    session_score: float,
    now_utc: datetime,
) -> UserAggregates:
    user = await UsersRepo.get_by_id_for_update(session, user_id)
    if user is None:
        raise UserNotFoundError(str(user_id))

    outcome = outcome_from_judgements(play_date, judgements, session_score)
    updated = apply_session_outcome(aggregates_of(user), outcome)
    write_aggregates(user, updated)
    user.last_played_at = now_utc

    for delta in category_deltas(judgements):
        await UserCategoryStatsRepo.add_counts(
            session,
            user_id=user_id,
            category=delta.category,
            questions_answered=delta.questions_answered,
            questions_captured=delta.questions_captured,
            total_score=delta.total_score,
            last_answered_at=now_utc,
        )
    await session.flush()

    logger.info(
        "user_aggregates_updated",
        user_id=str(user_id),
        play_date=play_date.isoformat(),
        games_played=updated.games_played,
        current_streak=updated.current_streak,
        calibration_rate=round(updated.calibration_rate, 4),
    )
    return updated
