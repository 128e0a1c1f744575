from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.db.models.game_sessions import GameSession


class GameSessionsRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, session_id: UUID) -> GameSession | None:
        return await session.get(GameSession, session_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, session_id: UUID) -> GameSession | None:
        stmt = select(GameSession).where(GameSession.id == session_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_user_and_date(
        session: AsyncSession,
        *,
        user_id: UUID,
        play_date: date,
    ) -> GameSession | None:
        stmt = select(GameSession).where(
            GameSession.user_id == user_id,
            GameSession.play_date == play_date,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_by_users_and_date(
        session: AsyncSession,
        *,
        user_ids: Sequence[UUID],
        play_date: date,
    ) -> list[GameSession]:
        if not user_ids:
            return []
        stmt = (
            select(GameSession)
            .where(
                GameSession.user_id.in_(tuple(user_ids)),
                GameSession.play_date == play_date,
            )
            .order_by(GameSession.created_at.asc(), GameSession.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def create_if_absent(
        session: AsyncSession,
        *,
        user_id: UUID,
        play_date: date,
        question_ids: tuple[str, ...],
        now_utc: datetime,
    ) -> bool:
        stmt = (
            insert(GameSession)
            .values(
                id=uuid4(),
                user_id=user_id,
                play_date=play_date,
                question_ids=list(question_ids),
                status="CREATED",
                created_at=now_utc,
                updated_at=now_utc,
            )
            .on_conflict_do_nothing(index_elements=[GameSession.user_id, GameSession.play_date])
            .returning(GameSession.id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def mark_finalized(
        session: AsyncSession,
        *,
        game_session: GameSession,
        result_payload: dict[str, Any],
        now_utc: datetime,
    ) -> GameSession:
        game_session.status = "FINALIZED"
        game_session.result_payload = result_payload
        game_session.finalized_at = now_utc
        game_session.updated_at = now_utc
        await session.flush()
        return game_session
