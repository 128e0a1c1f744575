from __future__ import annotations

from fastapi import APIRouter, Request, status

from sigma_arena.core.errors import SigmaArenaError
from sigma_arena.core.time import game_local_date
from sigma_arena.db.session import SessionLocal
from sigma_arena.identity import accounts
from sigma_arena.identity.resolver import normalize_device_id, parse_bearer, require_user

from .auth_models import (
    AccountResponse,
    CredentialsRequest,
    LogoutResponse,
    SignupRequest,
    UsernameCheckResponse,
    UsernameRequest,
    auth_session_response,
)
from .route_helpers import DEVICE_ID_HEADER, http_error, now_utc, resolve_request_identity
from .user_models import UserEnvelope, profile_response

router = APIRouter(prefix="/auth", tags=["auth"])


def _device_id(request: Request) -> str | None:
    return normalize_device_id(request.headers.get(DEVICE_ID_HEADER))


@router.post("/device", response_model=UserEnvelope)
async def device(request: Request) -> UserEnvelope:
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            user = await accounts.get_or_create_device_user(
                session,
                device_id=_device_id(request) or "",
                now_utc=now,
            )
            return UserEnvelope(user=profile_response(user, today=game_local_date(now)))
    except SigmaArenaError as exc:
        raise http_error(exc) from exc


@router.post("/check-username", response_model=UsernameCheckResponse)
async def check_username(payload: UsernameRequest) -> UsernameCheckResponse:
    try:
        async with SessionLocal.begin() as session:
            result = await accounts.check_username(session, username=payload.username)
    except SigmaArenaError as exc:
        raise http_error(exc) from exc
    return UsernameCheckResponse(
        username=result.username,
        available=result.available,
        suggestions=list(result.suggestions),
    )


@router.post("/set-username", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
async def set_username(payload: UsernameRequest, request: Request) -> UserEnvelope:
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            user = await accounts.claim_username(
                session,
                device_id=_device_id(request),
                username=payload.username,
                now_utc=now,
            )
            return UserEnvelope(user=profile_response(user, today=game_local_date(now)))
    except SigmaArenaError as exc:
        raise http_error(exc) from exc


@router.post("/signup", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def signup(payload: SignupRequest, request: Request) -> AccountResponse:
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            result = await accounts.signup(
                session,
                email=payload.email,
                password=payload.password,
                username=payload.username,
                device_id=_device_id(request),
                now_utc=now,
            )
            return AccountResponse(
                user=profile_response(result.user, today=game_local_date(now)),
                session=auth_session_response(result.tokens),
            )
    except SigmaArenaError as exc:
        raise http_error(exc) from exc


@router.post("/login", response_model=AccountResponse)
async def login(payload: CredentialsRequest, request: Request) -> AccountResponse:
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            result = await accounts.login(
                session,
                email=payload.email,
                password=payload.password,
                device_id=_device_id(request),
                now_utc=now,
            )
            return AccountResponse(
                user=profile_response(result.user, today=game_local_date(now)),
                session=auth_session_response(result.tokens),
                merged=result.merge.merged if result.merge is not None else False,
            )
    except SigmaArenaError as exc:
        raise http_error(exc) from exc


@router.post("/link-email", response_model=AccountResponse)
async def link_email(payload: CredentialsRequest, request: Request) -> AccountResponse:
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            result = await accounts.link_email(
                session,
                device_id=_device_id(request),
                email=payload.email,
                password=payload.password,
                now_utc=now,
            )
            return AccountResponse(
                user=profile_response(result.user, today=game_local_date(now)),
                session=auth_session_response(result.tokens),
            )
    except SigmaArenaError as exc:
        raise http_error(exc) from exc


@router.post("/logout", response_model=LogoutResponse)
async def logout(request: Request) -> LogoutResponse:
    await accounts.logout(parse_bearer(request.headers.get("Authorization")))
    return LogoutResponse(success=True)


@router.get("/me", response_model=UserEnvelope)
async def me(request: Request) -> UserEnvelope:
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            identity = await resolve_request_identity(session, request)
            user = require_user(identity)
            return UserEnvelope(user=profile_response(user, today=game_local_date(now)))
    except SigmaArenaError as exc:
        raise http_error(exc) from exc
