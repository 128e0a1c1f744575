from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.db.models.game_sessions import GameSession
from sigma_arena.db.repo.game_sessions_repo import GameSessionsRepo
from sigma_arena.db.repo.users_repo import UsersRepo
from sigma_arena.game.sessions.errors import SessionNotFoundError

MAX_MERGE_HOPS = 8


async def resolve_surviving_user_id(session: AsyncSession, user_id: UUID) -> UUID:
    """Follows merge links until an active account is reached."""
    current = user_id
    for _ in range(MAX_MERGE_HOPS):
        user = await UsersRepo.get_by_id(session, current)
        if user is None or user.merged_into_user_id is None:
            return current
        current = user.merged_into_user_id
    return current


async def merged_source_user_ids(session: AsyncSession, user_id: UUID) -> list[UUID]:
    """Every account that was merged, directly or through a chain, into ``user_id``."""
    collected: list[UUID] = []
    seen = {user_id}
    frontier = [user_id]
    for _ in range(MAX_MERGE_HOPS):
        found = [
            source_id
            for source_id in await UsersRepo.list_ids_merged_into(session, frontier)
            if source_id not in seen
        ]
        if not found:
            break
        seen.update(found)
        collected.extend(found)
        frontier = found
    return collected


async def load_session_for_user(
    session: AsyncSession,
    *,
    session_id: UUID,
    user_id: UUID,
    for_update: bool = False,
) -> tuple[GameSession, UUID]:
    """Returns the session and the account its results belong to.

    Sessions of a merged account stay reachable for the account it was merged into.
    """
    if for_update:
        game_session = await GameSessionsRepo.get_by_id_for_update(session, session_id)
    else:
        game_session = await GameSessionsRepo.get_by_id(session, session_id)
    if game_session is None:
        raise SessionNotFoundError(str(session_id))

    if game_session.user_id == user_id:
        return game_session, user_id

    surviving_user_id = await resolve_surviving_user_id(session, game_session.user_id)
    if surviving_user_id != user_id:
        raise SessionNotFoundError(str(session_id))
    return game_session, surviving_user_id
