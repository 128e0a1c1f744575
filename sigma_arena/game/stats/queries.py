from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.db.repo.answer_records_repo import AnswerRecordsRepo
from sigma_arena.db.repo.user_category_stats_repo import UserCategoryStatsRepo
from sigma_arena.db.repo.users_repo import UsersRepo
from sigma_arena.game.stats.rules import calibration_rate
from sigma_arena.game.stats.types import (
    BestGuessEntry,
    CategoryStatView,
    DailyStats,
    HistoryPoint,
    OverallLeaderboardEntry,
    RecentAnswer,
)

DAY_LABELS = ("M", "T", "W", "Th", "F", "S", "Su")
LEADERBOARD_SIZE = 10
RECENT_ANSWERS_LIMIT = 10
HISTORY_MAX_DAYS = 30


async def list_recent_answers(
    session: AsyncSession,
    *,
    user_id: UUID,
    limit: int = RECENT_ANSWERS_LIMIT,
) -> list[RecentAnswer]:
    rows = await AnswerRecordsRepo.list_recent_for_user(session, user_id=user_id, limit=limit)
    return [
        RecentAnswer(
            question_id=record.question_id,
            prompt=prompt,
            play_date=record.play_date,
            lower=record.lower_bound,
            upper=record.upper_bound,
            true_value=record.true_value_at_response,
            hit=record.is_hit,
            score=record.score,
            answered_at=record.answered_at,
        )
        for record, prompt in rows
    ]


async def list_category_stats(session: AsyncSession, *, user_id: UUID) -> list[CategoryStatView]:
    rows = await UserCategoryStatsRepo.list_for_user(session, user_id=user_id)
    return [
        CategoryStatView(
            category=row.category,
            questions_answered=row.questions_answered,
            questions_captured=row.questions_captured,
            total_score=round(row.total_score, 2),
            calibration_rate=calibration_rate(row.questions_captured, row.questions_answered),
        )
        for row in rows
    ]


def _rank_day(totals: dict[UUID, tuple[float, int, int]]) -> list[tuple[UUID, float, int, int]]:
    ranked = [(user_id, score, hits, total) for user_id, (score, hits, total) in totals.items()]
    ranked.sort(key=lambda item: (-item[1], str(item[0])))
    return ranked


async def get_daily_stats(session: AsyncSession, *, user_id: UUID, play_date: date) -> DailyStats:
    rows = await AnswerRecordsRepo.list_daily_user_totals(session, start_date=play_date, end_date=play_date)
    totals = {row_user_id: (score, hits, total) for _, row_user_id, score, hits, total in rows}
    if not totals:
        return DailyStats(
            play_date=play_date,
            daily_rank=None,
            top_score_today=None,
            todays_average=None,
            user_score_today=None,
            calibration_today=None,
            total_participants_today=0,
        )

    ranked = _rank_day(totals)
    rank = next((index + 1 for index, item in enumerate(ranked) if item[0] == user_id), None)
    own = totals.get(user_id)
    return DailyStats(
        play_date=play_date,
        daily_rank=rank,
        top_score_today=round(ranked[0][1], 2),
        todays_average=round(sum(item[1] for item in ranked) / len(ranked), 2),
        user_score_today=round(own[0], 2) if own is not None else None,
        calibration_today=(round(own[1] / own[2] * 100, 2) if own is not None and own[2] > 0 else None),
        total_participants_today=len(ranked),
    )


async def get_performance_history(
    session: AsyncSession,
    *,
    user_id: UUID,
    end_date: date,
    days: int = 7,
) -> list[HistoryPoint]:
    resolved_days = max(1, min(HISTORY_MAX_DAYS, int(days)))
    start_date = end_date - timedelta(days=resolved_days - 1)
    rows = await AnswerRecordsRepo.list_daily_user_totals(session, start_date=start_date, end_date=end_date)

    by_day: dict[date, dict[UUID, tuple[float, int, int]]] = defaultdict(dict)
    for play_date, row_user_id, score, hits, total in rows:
        by_day[play_date][row_user_id] = (score, hits, total)

    points: list[HistoryPoint] = []
    for offset in range(resolved_days):
        day = start_date + timedelta(days=offset)
        day_totals = by_day.get(day, {})
        own = day_totals.get(user_id)
        average = sum(score for score, _, _ in day_totals.values()) / len(day_totals) if day_totals else 0.0
        points.append(
            HistoryPoint(
                play_date=day,
                day_label=DAY_LABELS[day.weekday()],
                user_score=round(own[0], 2) if own is not None else 0.0,
                average_score=round(average, 2),
                calibration=round(own[1] / own[2] * 100, 2) if own is not None and own[2] > 0 else 0.0,
            )
        )
    return points


async def get_overall_leaderboard(
    session: AsyncSession,
    *,
    limit: int = LEADERBOARD_SIZE,
) -> list[OverallLeaderboardEntry]:
    users = await UsersRepo.list_overall_leaders(session, limit=limit)
    return [
        OverallLeaderboardEntry(
            rank=index + 1,
            user_id=user.id,
            username=user.username,
            total_score=round(user.total_score, 2),
            games_played=user.games_played,
            average_score=round(user.average_score, 1),
        )
        for index, user in enumerate(users)
    ]


async def get_best_guesses_leaderboard(
    session: AsyncSession,
    *,
    limit: int = LEADERBOARD_SIZE,
) -> list[BestGuessEntry]:
    rows = await AnswerRecordsRepo.list_best_guesses(session, limit=limit)
    return [
        BestGuessEntry(
            rank=index + 1,
            username=username,
            score=record.score,
            prompt=prompt,
            lower=record.lower_bound,
            upper=record.upper_bound,
            true_value=record.true_value_at_response,
            answered_at=record.answered_at,
        )
        for index, (record, username, prompt) in enumerate(rows)
    ]
