from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.db.models.users import DEFAULT_USERNAME, User


class UsersRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, user_id: UUID) -> User | None:
        return await session.get(User, user_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, user_id: UUID) -> User | None:
        stmt = select(User).where(User.id == user_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def lock_many_ordered(session: AsyncSession, user_ids: Sequence[UUID]) -> dict[UUID, User]:
        ids = sorted(set(user_ids))
        stmt = select(User).where(User.id.in_(ids)).order_by(User.id.asc()).with_for_update()
        result = await session.execute(stmt)
        return {user.id: user for user in result.scalars().all()}

    @staticmethod
    async def get_by_device_id(session: AsyncSession, device_id: str) -> User | None:
        stmt = select(User).where(User.device_id == device_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_auth_id(session: AsyncSession, auth_id: str) -> User | None:
        stmt = select(User).where(User.auth_id == auth_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_email(session: AsyncSession, email: str) -> User | None:
        stmt = select(User).where(func.lower(User.email) == email.lower())
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_username(session: AsyncSession, username: str) -> User | None:
        stmt = select(User).where(
            func.lower(User.username) == username.lower(),
            User.username != DEFAULT_USERNAME,
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    @staticmethod
    async def list_taken_usernames(session: AsyncSession, candidates: Sequence[str]) -> set[str]:
        lowered = tuple({candidate.lower() for candidate in candidates})
        if not lowered:
            return set()
        stmt = select(func.lower(User.username)).where(func.lower(User.username).in_(lowered))
        result = await session.execute(stmt)
        return set(result.scalars().all())

    @staticmethod
    async def list_ids_merged_into(session: AsyncSession, target_ids: Sequence[UUID]) -> list[UUID]:
        if not target_ids:
            return []
        stmt = select(User.id).where(User.merged_into_user_id.in_(tuple(target_ids)))
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def insert_device_user_if_absent(
        session: AsyncSession,
        *,
        device_id: str,
        now_utc: datetime,
    ) -> None:
        stmt = (
            insert(User)
            .values(
                id=uuid4(),
                device_id=device_id,
                is_anonymous=True,
                username=DEFAULT_USERNAME,
                status="ACTIVE",
                created_at=now_utc,
            )
            .on_conflict_do_nothing(index_elements=[User.device_id])
        )
        await session.execute(stmt)

    @staticmethod
    async def create_authenticated(
        session: AsyncSession,
        *,
        auth_id: str,
        email: str,
        username: str,
        email_verified: bool,
        now_utc: datetime,
    ) -> User:
        user = User(
            id=uuid4(),
            is_anonymous=False,
            auth_id=auth_id,
            email=email,
            username=username,
            email_verified=email_verified,
            status="ACTIVE",
            created_at=now_utc,
            username_claimed_at=now_utc,
            account_claimed_at=now_utc,
        )
        session.add(user)
        await session.flush()
        return user

    @staticmethod
    async def list_overall_leaders(session: AsyncSession, *, limit: int) -> list[User]:
        stmt = (
            select(User)
            .where(User.status == "ACTIVE", User.games_played > 0)
            .order_by(User.total_score.desc(), User.id.asc())
            .limit(max(1, min(100, int(limit))))
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
