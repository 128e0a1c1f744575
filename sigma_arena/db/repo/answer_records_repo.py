from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from uuid import UUID

from sqlalchemy import Integer, cast, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.db.models.answer_records import AnswerRecord
from sigma_arena.db.models.questions import Question
from sigma_arena.db.models.users import User


class AnswerRecordsRepo:
    @staticmethod
    async def insert_many(session: AsyncSession, *, records: Sequence[AnswerRecord]) -> None:
        if not records:
            return
        session.add_all(list(records))
        await session.flush()

    @staticmethod
    async def reassign_user(
        session: AsyncSession,
        *,
        from_user_id: UUID,
        to_user_id: UUID,
    ) -> int:
        stmt = (
            update(AnswerRecord)
            .where(AnswerRecord.user_id == from_user_id)
            .values(user_id=to_user_id)
        )
        result = await session.execute(stmt)
        return result.rowcount or 0

    @staticmethod
    async def list_daily_hit_counts(session: AsyncSession, *, user_id: UUID) -> list[tuple[date, int]]:
        stmt = (
            select(
                AnswerRecord.play_date,
                func.sum(cast(AnswerRecord.is_hit, Integer)),
            )
            .where(AnswerRecord.user_id == user_id)
            .group_by(AnswerRecord.play_date)
            .order_by(AnswerRecord.play_date.asc())
        )
        result = await session.execute(stmt)
        return [(play_date, int(hits or 0)) for play_date, hits in result.all()]

    @staticmethod
    async def list_recent_for_user(
        session: AsyncSession,
        *,
        user_id: UUID,
        limit: int,
    ) -> list[tuple[AnswerRecord, str]]:
        stmt = (
            select(AnswerRecord, Question.prompt)
            .join(Question, Question.id == AnswerRecord.question_id)
            .where(AnswerRecord.user_id == user_id)
            .order_by(AnswerRecord.answered_at.desc(), AnswerRecord.id.desc())
            .limit(max(1, min(100, int(limit))))
        )
        result = await session.execute(stmt)
        return [(record, prompt) for record, prompt in result.all()]

    @staticmethod
    async def list_daily_user_totals(
        session: AsyncSession,
        *,
        start_date: date,
        end_date: date,
    ) -> list[tuple[date, UUID, float, int, int]]:
        stmt = (
            select(
                AnswerRecord.play_date,
                AnswerRecord.user_id,
                func.sum(AnswerRecord.score),
                func.sum(cast(AnswerRecord.is_hit, Integer)),
                func.count(AnswerRecord.id),
            )
            .where(
                AnswerRecord.play_date >= start_date,
                AnswerRecord.play_date <= end_date,
            )
            .group_by(AnswerRecord.play_date, AnswerRecord.user_id)
        )
        result = await session.execute(stmt)
        rows: list[tuple[date, UUID, float, int, int]] = []
        for play_date, user_id, score_sum, hits, total in result.all():
            rows.append((play_date, user_id, float(score_sum or 0), int(hits or 0), int(total or 0)))
        return rows

    @staticmethod
    async def list_best_guesses(
        session: AsyncSession,
        *,
        limit: int,
    ) -> list[tuple[AnswerRecord, str | None, str]]:
        stmt = (
            select(AnswerRecord, User.username, Question.prompt)
            .join(User, User.id == AnswerRecord.user_id)
            .join(Question, Question.id == AnswerRecord.question_id)
            .where(AnswerRecord.was_answered.is_(True))
            .order_by(AnswerRecord.score.desc(), AnswerRecord.id.asc())
            .limit(max(1, min(100, int(limit))))
        )
        result = await session.execute(stmt)
        return [(record, username, prompt) for record, username, prompt in result.all()]
