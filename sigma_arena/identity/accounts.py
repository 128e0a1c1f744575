from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.core.errors import ValidationError
from sigma_arena.db.models.users import DEFAULT_USERNAME, User
from sigma_arena.db.repo.users_repo import UsersRepo
from sigma_arena.identity import auth_provider
from sigma_arena.identity.auth_provider import AuthTokens
from sigma_arena.identity.errors import (
    AccountAlreadyLinkedError,
    DeviceIdRequiredError,
    EmailTakenError,
    UsernameRequiredError,
    UsernameTakenError,
    UserNotFoundError,
)
from sigma_arena.identity.merge import MergeResult, merge_users
from sigma_arena.identity.usernames import (
    is_valid_username,
    pick_suggestions,
    suggestion_candidates,
    validate_username,
)

logger = structlog.get_logger(__name__)

_NON_USERNAME_CHARS_RE = re.compile(r"[^A-Za-z0-9_]")
_ACCOUNT_CONSTRAINTS = ("uq_users_username_ci", "uq_users_auth_id", "uq_users_email")


@dataclass(slots=True)
class UsernameCheck:
    username: str
    available: bool
    suggestions: tuple[str, ...]


@dataclass(slots=True)
class AccountResult:
    user: User
    tokens: AuthTokens | None
    merge: MergeResult | None = None


def _require_device_id(device_id: str | None) -> str:
    if not device_id:
        raise DeviceIdRequiredError("X-Device-Id header required")
    return device_id


async def _suggestions_for(session: AsyncSession, username: str) -> tuple[str, ...]:
    candidates = suggestion_candidates(username)
    taken = await UsersRepo.list_taken_usernames(session, candidates)
    return pick_suggestions(candidates, taken)


async def _ensure_username_available(
    session: AsyncSession,
    username: str,
    *,
    owner_id: UUID | None = None,
) -> None:
    existing = await UsersRepo.get_by_username(session, username)
    if existing is not None and existing.id != owner_id:
        raise UsernameTakenError(
            "username is already taken",
            suggestions=await _suggestions_for(session, username),
        )


async def _ensure_email_available(session: AsyncSession, email: str) -> None:
    if await UsersRepo.get_by_email(session, email) is not None:
        raise EmailTakenError("email already registered")


async def _flush_username(session: AsyncSession, user: User, username: str) -> None:
    try:
        async with session.begin_nested():
            user.username = username
            await session.flush()
    except IntegrityError as exc:
        raise UsernameTakenError(
            "username is already taken",
            suggestions=await _suggestions_for(session, username),
        ) from exc


def _violated_constraint(exc: IntegrityError) -> str | None:
    name = getattr(exc.orig, "constraint_name", None)
    if name:
        return name
    message = str(exc.orig)
    for constraint in _ACCOUNT_CONSTRAINTS:
        if constraint in message:
            return constraint
    return None


async def _insert_authenticated(
    session: AsyncSession,
    *,
    auth_id: str,
    email: str,
    username: str,
    email_verified: bool,
    now_utc: datetime,
) -> User:
    """Creates the account row; a concurrent insert of the same auth id yields the winner's row."""
    try:
        async with session.begin_nested():
            return await UsersRepo.create_authenticated(
                session,
                auth_id=auth_id,
                email=email,
                username=username,
                email_verified=email_verified,
                now_utc=now_utc,
            )
    except IntegrityError as exc:
        constraint = _violated_constraint(exc)
        logger.info("authenticated_user_insert_conflict", constraint=constraint)
        if constraint == "uq_users_auth_id":
            existing = await UsersRepo.get_by_auth_id(session, auth_id)
            if existing is not None:
                return existing
        if constraint == "uq_users_username_ci":
            raise UsernameTakenError(
                "username is already taken",
                suggestions=await _suggestions_for(session, username),
            ) from exc
        raise EmailTakenError("email already registered") from exc


async def get_or_create_device_user(
    session: AsyncSession,
    *,
    device_id: str,
    now_utc: datetime,
) -> User:
    """Idempotent per device id; concurrent calls converge on one row."""
    resolved = _require_device_id(device_id.strip() if device_id else None)
    existing = await UsersRepo.get_by_device_id(session, resolved)
    if existing is not None:
        return existing

    await UsersRepo.insert_device_user_if_absent(session, device_id=resolved, now_utc=now_utc)
    user = await UsersRepo.get_by_device_id(session, resolved)
    if user is None:
        raise UserNotFoundError(resolved)
    logger.info("device_user_provisioned", user_id=str(user.id))
    return user


async def check_username(session: AsyncSession, *, username: str) -> UsernameCheck:
    normalized = validate_username(username)
    if await UsersRepo.get_by_username(session, normalized) is None:
        return UsernameCheck(username=normalized, available=True, suggestions=())
    return UsernameCheck(
        username=normalized,
        available=False,
        suggestions=await _suggestions_for(session, normalized),
    )


async def claim_username(
    session: AsyncSession,
    *,
    device_id: str | None,
    username: str,
    now_utc: datetime,
) -> User:
    normalized = validate_username(username)
    user = await get_or_create_device_user(session, device_id=_require_device_id(device_id), now_utc=now_utc)
    await _ensure_username_available(session, normalized, owner_id=user.id)

    await _flush_username(session, user, normalized)
    user.is_anonymous = False
    user.username_claimed_at = now_utc
    await session.flush()
    logger.info("username_claimed", user_id=str(user.id))
    return user


async def signup(
    session: AsyncSession,
    *,
    email: str,
    password: str,
    username: str,
    device_id: str | None,
    now_utc: datetime,
) -> AccountResult:
    normalized = validate_username(username)
    device_user = await UsersRepo.get_by_device_id(session, device_id) if device_id else None
    convertible = device_user if device_user is not None and device_user.auth_id is None else None

    await _ensure_email_available(session, email)
    await _ensure_username_available(
        session,
        normalized,
        owner_id=convertible.id if convertible is not None else None,
    )

    auth_result = await auth_provider.sign_up(email=email, password=password)
    identity = auth_result.identity

    if convertible is not None:
        await _flush_username(session, convertible, normalized)
        convertible.auth_id = identity.auth_id
        convertible.email = email
        convertible.email_verified = identity.email_verified
        convertible.is_anonymous = False
        convertible.username_claimed_at = convertible.username_claimed_at or now_utc
        convertible.account_claimed_at = now_utc
        await session.flush()
        logger.info("device_user_converted", user_id=str(convertible.id))
        return AccountResult(user=convertible, tokens=auth_result.tokens)

    user = await _insert_authenticated(
        session,
        auth_id=identity.auth_id,
        email=email,
        username=normalized,
        email_verified=identity.email_verified,
        now_utc=now_utc,
    )
    if device_id and device_user is None:
        user.device_id = device_id
        await session.flush()
    logger.info("authenticated_user_created", user_id=str(user.id))
    return AccountResult(user=user, tokens=auth_result.tokens)


async def _fallback_username(session: AsyncSession, email: str) -> str:
    candidate = _NON_USERNAME_CHARS_RE.sub("_", email.split("@", 1)[0])[:20]
    if not is_valid_username(candidate):
        return DEFAULT_USERNAME
    if await UsersRepo.get_by_username(session, candidate) is None:
        return candidate
    suggestions = await _suggestions_for(session, candidate)
    return suggestions[0] if suggestions else DEFAULT_USERNAME


async def _link_device(session: AsyncSession, user: User, device_id: str) -> None:
    if user.device_id == device_id:
        return
    holder = await UsersRepo.get_by_device_id(session, device_id)
    if holder is not None and holder.id != user.id:
        holder.device_id = None
        await session.flush()
        logger.info("device_relinked", from_user_id=str(holder.id), to_user_id=str(user.id))
    user.device_id = device_id
    await session.flush()


async def login(
    session: AsyncSession,
    *,
    email: str,
    password: str,
    device_id: str | None,
    now_utc: datetime,
) -> AccountResult:
    auth_result = await auth_provider.sign_in_with_password(email=email, password=password)
    identity = auth_result.identity

    user = await UsersRepo.get_by_auth_id(session, identity.auth_id)
    if user is None:
        user = await _insert_authenticated(
            session,
            auth_id=identity.auth_id,
            email=identity.email or email,
            username=await _fallback_username(session, identity.email or email),
            email_verified=identity.email_verified,
            now_utc=now_utc,
        )
        logger.info("authenticated_user_backfilled", user_id=str(user.id))

    merge_result: MergeResult | None = None
    if device_id:
        device_user = await UsersRepo.get_by_device_id(session, device_id)
        if device_user is not None and device_user.auth_id is None and device_user.id != user.id:
            merge_result = await merge_users(
                session,
                source_user_id=device_user.id,
                target_user_id=user.id,
                now_utc=now_utc,
            )
        await _link_device(session, user, device_id)

    logger.info(
        "user_logged_in",
        user_id=str(user.id),
        merged=merge_result.merged if merge_result is not None else False,
    )
    return AccountResult(user=user, tokens=auth_result.tokens, merge=merge_result)


async def link_email(
    session: AsyncSession,
    *,
    device_id: str | None,
    email: str,
    password: str,
    now_utc: datetime,
) -> AccountResult:
    user = await UsersRepo.get_by_device_id(session, _require_device_id(device_id))
    if user is None:
        raise UserNotFoundError("no user for device")
    if user.is_anonymous:
        raise UsernameRequiredError("set a username first")
    if user.email is not None or user.auth_id is not None:
        raise AccountAlreadyLinkedError("account already has an email linked")
    await _ensure_email_available(session, email)

    auth_result = await auth_provider.sign_up(email=email, password=password)
    user.auth_id = auth_result.identity.auth_id
    user.email = email
    user.email_verified = auth_result.identity.email_verified
    user.account_claimed_at = now_utc
    await session.flush()
    logger.info("email_linked", user_id=str(user.id))
    return AccountResult(user=user, tokens=auth_result.tokens)


async def logout(access_token: str | None) -> bool:
    if access_token is None:
        return True
    return await auth_provider.sign_out(access_token)


async def update_timezone(session: AsyncSession, *, user: User, timezone: str) -> User:
    try:
        ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError(f"unknown timezone: {timezone}") from exc
    user.timezone = timezone
    await session.flush()
    return user
