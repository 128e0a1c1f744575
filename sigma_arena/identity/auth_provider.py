"""Client for the external GoTrue-compatible auth service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from sigma_arena.core.config import get_settings
from sigma_arena.identity.errors import (
    IdentityUnavailableError,
    InvalidCredentialsError,
    SignupRejectedError,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class AuthIdentity:
    auth_id: str
    email: str | None
    email_verified: bool


@dataclass(frozen=True, slots=True)
class AuthTokens:
    access_token: str
    refresh_token: str | None
    expires_in: int | None
    token_type: str


@dataclass(frozen=True, slots=True)
class AuthResult:
    identity: AuthIdentity
    tokens: AuthTokens | None


def _headers(access_token: str | None = None) -> dict[str, str]:
    settings = get_settings()
    headers = {"apikey": settings.auth_service_api_key}
    if access_token is not None:
        headers["Authorization"] = f"Bearer {access_token}"
    return headers


def _identity_from_user(payload: dict[str, Any]) -> AuthIdentity:
    return AuthIdentity(
        auth_id=str(payload["id"]),
        email=payload.get("email"),
        email_verified=payload.get("email_confirmed_at") is not None,
    )


def _result_from_payload(payload: dict[str, Any]) -> AuthResult:
    user_payload = payload.get("user") if isinstance(payload.get("user"), dict) else payload
    tokens = None
    if payload.get("access_token"):
        tokens = AuthTokens(
            access_token=str(payload["access_token"]),
            refresh_token=payload.get("refresh_token"),
            expires_in=payload.get("expires_in"),
            token_type=str(payload.get("token_type") or "bearer"),
        )
    return AuthResult(identity=_identity_from_user(user_payload), tokens=tokens)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        for key in ("msg", "error_description", "message", "error"):
            if body.get(key):
                return str(body[key])
    return f"status {response.status_code}"


async def _send(
    method: str,
    path: str,
    *,
    headers: dict[str, str],
    json: dict[str, Any] | None = None,
    params: dict[str, str] | None = None,
) -> httpx.Response:
    settings = get_settings()
    try:
        async with httpx.AsyncClient(
            base_url=settings.auth_service_url,
            timeout=settings.auth_timeout_seconds,
        ) as client:
            response = await client.request(method, path, headers=headers, json=json, params=params)
    except httpx.TimeoutException as exc:
        logger.warning("auth_provider_timeout", path=path)
        raise IdentityUnavailableError("auth service timed out") from exc
    except httpx.TransportError as exc:
        logger.warning("auth_provider_transport_error", path=path, error_type=type(exc).__name__)
        raise IdentityUnavailableError("auth service unreachable") from exc

    if response.status_code >= 500:
        logger.warning("auth_provider_server_error", path=path, status_code=response.status_code)
        raise IdentityUnavailableError(f"auth service returned {response.status_code}")
    return response


async def validate_token(access_token: str) -> AuthIdentity | None:
    """Returns the identity behind a bearer token, or None when the token is invalid."""
    response = await _send("GET", "/auth/v1/user", headers=_headers(access_token))
    if response.status_code >= 400:
        logger.info("auth_token_invalid", status_code=response.status_code)
        return None
    return _identity_from_user(response.json())


async def sign_up(*, email: str, password: str) -> AuthResult:
    response = await _send(
        "POST",
        "/auth/v1/signup",
        headers=_headers(),
        json={"email": email, "password": password},
    )
    if response.status_code >= 400:
        raise SignupRejectedError(_error_message(response))
    return _result_from_payload(response.json())


async def sign_in_with_password(*, email: str, password: str) -> AuthResult:
    response = await _send(
        "POST",
        "/auth/v1/token",
        headers=_headers(),
        json={"email": email, "password": password},
        params={"grant_type": "password"},
    )
    if response.status_code >= 400:
        logger.info("auth_sign_in_rejected", status_code=response.status_code)
        raise InvalidCredentialsError("invalid email or password")
    return _result_from_payload(response.json())


async def sign_out(access_token: str) -> bool:
    try:
        response = await _send("POST", "/auth/v1/logout", headers=_headers(access_token))
    except IdentityUnavailableError:
        logger.warning("auth_sign_out_unavailable")
        return False
    return response.status_code < 400
