from __future__ import annotations

from pydantic import BaseModel, Field

from sigma_arena.identity.auth_provider import AuthTokens

from .user_models import UserProfileResponse

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UsernameRequest(BaseModel):
    username: str = Field(min_length=1, max_length=64)


class UsernameCheckResponse(BaseModel):
    username: str
    available: bool
    suggestions: list[str] = Field(default_factory=list)


class SignupRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6, max_length=128)
    username: str = Field(min_length=1, max_length=64)


class CredentialsRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=1, max_length=128)


class AuthSessionResponse(BaseModel):
    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None
    token_type: str


class AccountResponse(BaseModel):
    user: UserProfileResponse
    session: AuthSessionResponse | None = None
    merged: bool = False


class LogoutResponse(BaseModel):
    success: bool


def auth_session_response(tokens: AuthTokens | None) -> AuthSessionResponse | None:
    if tokens is None:
        return None
    return AuthSessionResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_in=tokens.expires_in,
        token_type=tokens.token_type,
    )
