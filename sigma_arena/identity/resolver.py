from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.core.errors import AuthRequiredError
from sigma_arena.db.models.users import User
from sigma_arena.db.repo.users_repo import UsersRepo
from sigma_arena.identity import auth_provider
from sigma_arena.identity.auth_provider import AuthIdentity

logger = structlog.get_logger(__name__)

TokenValidator = Callable[[str], Awaitable[AuthIdentity | None]]

RESOLVED_VIA_TOKEN = "token"
RESOLVED_VIA_DEVICE = "device"


@dataclass(slots=True)
class ResolvedIdentity:
    user: User | None
    auth_identity: AuthIdentity | None
    token_rejected: bool
    resolved_via: str | None
    device_id: str | None
    access_token: str | None = None


def parse_bearer(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def normalize_device_id(device_id: str | None) -> str | None:
    if device_id is None:
        return None
    normalized = device_id.strip()
    return normalized or None


async def resolve_identity(
    session: AsyncSession,
    *,
    authorization: str | None,
    device_id: str | None,
    token_validator: TokenValidator | None = None,
) -> ResolvedIdentity:
    """Bearer token first, then the device header. Device users are never created here."""
    validator = token_validator or auth_provider.validate_token
    access_token = parse_bearer(authorization)
    resolved_device_id = normalize_device_id(device_id)
    token_rejected = False
    auth_identity: AuthIdentity | None = None

    if access_token is not None:
        auth_identity = await validator(access_token)
        if auth_identity is None:
            token_rejected = True
            logger.info("auth_token_rejected", has_device_id=resolved_device_id is not None)
        else:
            user = await UsersRepo.get_by_auth_id(session, auth_identity.auth_id)
            if user is not None:
                return ResolvedIdentity(
                    user=user,
                    auth_identity=auth_identity,
                    token_rejected=False,
                    resolved_via=RESOLVED_VIA_TOKEN,
                    device_id=resolved_device_id,
                    access_token=access_token,
                )
            logger.info("auth_token_without_user", auth_id=auth_identity.auth_id)

    if resolved_device_id is not None:
        user = await UsersRepo.get_by_device_id(session, resolved_device_id)
        if user is not None:
            return ResolvedIdentity(
                user=user,
                auth_identity=auth_identity,
                token_rejected=token_rejected,
                resolved_via=RESOLVED_VIA_DEVICE,
                device_id=resolved_device_id,
                access_token=access_token,
            )

    return ResolvedIdentity(
        user=None,
        auth_identity=auth_identity,
        token_rejected=token_rejected,
        resolved_via=None,
        device_id=resolved_device_id,
        access_token=access_token,
    )


def require_user(identity: ResolvedIdentity) -> User:
    if identity.user is None:
        raise AuthRequiredError("send a bearer token or X-Device-Id header")
    return identity.user
