from __future__ import annotations

from datetime import date, datetime, timezone
from types import SimpleNamespace
from uuid import UUID, uuid4

from sigma_arena.identity.resolver import ResolvedIdentity


class _BeginContext:
    def __init__(self, factory: "FakeSessionLocal") -> None:
        self._factory = factory

    async def __aenter__(self) -> SimpleNamespace:
        self._factory.begin_calls += 1
        return self._factory.session

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            self._factory.rollbacks += 1
        return False


class FakeSessionLocal:
    """Stands in for the async sessionmaker used by the routes."""

    def __init__(self) -> None:
        self.session = SimpleNamespace()
        self.begin_calls = 0
        self.rollbacks = 0

    def begin(self) -> _BeginContext:
        return _BeginContext(self)


def make_user(
    *,
    user_id: UUID | None = None,
    username: str | None = "jane",
    is_anonymous: bool = True,
    current_streak: int = 0,
    last_streak_date: date | None = None,
) -> SimpleNamespace:
    return SimpleNamespace(
        id=user_id or uuid4(),
        email=None,
        username=username,
        is_anonymous=is_anonymous,
        email_verified=False,
        timezone="UTC",
        total_score=123.456,
        average_score=61.728,
        games_played=2,
        session_count=2,
        questions_answered=10,
        questions_captured=4,
        calibration_rate=0.4,
        current_streak=current_streak,
        best_streak=3,
        last_streak_date=last_streak_date,
        best_single_score=99.0,
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        last_played_at=None,
    )


def identity_for(user, *, token_rejected: bool = False) -> ResolvedIdentity:
    return ResolvedIdentity(
        user=user,
        auth_identity=None,
        token_rejected=token_rejected,
        resolved_via="device" if user is not None else None,
        device_id="device-1",
    )


def patch_identity(monkeypatch, user, *, token_rejected: bool = False) -> list[dict[str, object]]:
    calls: list[dict[str, object]] = []

    async def _fake_resolve_identity(session, *, authorization, device_id):
        calls.append({"authorization": authorization, "device_id": device_id})
        return identity_for(user, token_rejected=token_rejected)

    monkeypatch.setattr(
        "sigma_arena.api.routes.route_helpers.resolve_identity",
        _fake_resolve_identity,
    )
    return calls
