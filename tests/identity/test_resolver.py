from __future__ import annotations

from types import SimpleNamespace

import pytest

from sigma_arena.core.errors import AuthRequiredError
from sigma_arena.identity import resolver
from sigma_arena.identity.auth_provider import AuthIdentity
from sigma_arena.identity.errors import IdentityUnavailableError

AUTH_USER = SimpleNamespace(id="auth-user", auth_id="auth-1")
DEVICE_USER = SimpleNamespace(id="device-user", auth_id=None)


def _patch_repo(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_get_by_auth_id(session, auth_id):  # noqa: ANN001
        del session
        return AUTH_USER if auth_id == "auth-1" else None

    async def fake_get_by_device_id(session, device_id):  # noqa: ANN001
        del session
        return DEVICE_USER if device_id == "device-1" else None

    monkeypatch.setattr(resolver.UsersRepo, "get_by_auth_id", fake_get_by_auth_id)
    monkeypatch.setattr(resolver.UsersRepo, "get_by_device_id", fake_get_by_device_id)


async def _valid_token(token: str) -> AuthIdentity | None:
    if token == "good":
        return AuthIdentity(auth_id="auth-1", email="a@example.org", email_verified=True)
    if token == "orphan":
        return AuthIdentity(auth_id="auth-2", email=None, email_verified=False)
    return None


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("Bearer abc", "abc"),
        ("bearer  abc ", "abc"),
        ("Basic abc", None),
        ("Bearer ", None),
        (None, None),
    ],
)
def test_parse_bearer(header: str | None, expected: str | None) -> None:
    assert resolver.parse_bearer(header) == expected


@pytest.mark.asyncio
async def test_token_takes_priority_over_device(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_repo(monkeypatch)

    identity = await resolver.resolve_identity(
        object(),
        authorization="Bearer good",
        device_id="device-1",
        token_validator=_valid_token,
    )

    assert identity.user is AUTH_USER
    assert identity.resolved_via == resolver.RESOLVED_VIA_TOKEN
    assert identity.token_rejected is False


@pytest.mark.asyncio
async def test_rejected_token_falls_back_to_device_and_is_flagged(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_repo(monkeypatch)

    identity = await resolver.resolve_identity(
        object(),
        authorization="Bearer expired",
        device_id="device-1",
        token_validator=_valid_token,
    )

    assert identity.user is DEVICE_USER
    assert identity.resolved_via == resolver.RESOLVED_VIA_DEVICE
    assert identity.token_rejected is True


@pytest.mark.asyncio
async def test_valid_token_without_account_falls_back_to_device(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_repo(monkeypatch)

    identity = await resolver.resolve_identity(
        object(),
        authorization="Bearer orphan",
        device_id="device-1",
        token_validator=_valid_token,
    )

    assert identity.user is DEVICE_USER
    assert identity.auth_identity is not None
    assert identity.auth_identity.auth_id == "auth-2"


@pytest.mark.asyncio
async def test_unknown_device_resolves_to_no_user(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_repo(monkeypatch)

    identity = await resolver.resolve_identity(
        object(),
        authorization=None,
        device_id="  device-404 ",
        token_validator=_valid_token,
    )

    assert identity.user is None
    assert identity.device_id == "device-404"
    with pytest.raises(AuthRequiredError):
        resolver.require_user(identity)


@pytest.mark.asyncio
async def test_identity_service_outage_is_not_masked(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_repo(monkeypatch)

    async def unavailable(token: str) -> AuthIdentity | None:
        raise IdentityUnavailableError("timeout")

    with pytest.raises(IdentityUnavailableError):
        await resolver.resolve_identity(
            object(),
            authorization="Bearer good",
            device_id="device-1",
            token_validator=unavailable,
        )
