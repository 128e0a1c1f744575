from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

from fastapi.testclient import TestClient

from sigma_arena.api.routes import feedback as feedback_routes
from sigma_arena.feedback.errors import FeedbackTextInvalidError
from sigma_arena.main import app
from tests.api.route_fixtures import FakeSessionLocal, make_user, patch_identity

CREATED_AT = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _client(monkeypatch) -> TestClient:
    monkeypatch.setattr(feedback_routes, "SessionLocal", FakeSessionLocal())
    return TestClient(app)


def test_feedback_accepts_anonymous_caller(monkeypatch) -> None:
    patch_identity(monkeypatch, None)
    feedback_id = uuid4()
    captured: dict[str, object] = {}

    async def _fake_submit(session, *, user_id, text, user_agent, page_url, now_utc):
        captured.update(user_id=user_id, text=text, user_agent=user_agent, page_url=page_url)
        return SimpleNamespace(id=feedback_id, created_at=CREATED_AT)

    monkeypatch.setattr(feedback_routes, "submit_feedback", _fake_submit)
    client = _client(monkeypatch)

    response = client.post(
        "/feedback",
        json={"feedback_text": "Love it", "page_url": "/results"},
        headers={"User-Agent": "pytest-agent"},
    )

    assert response.status_code == 201
    assert response.json() == {"id": str(feedback_id), "created_at": "2026-10-19T12:00:00Z"}
    assert captured == {"user_id": None, "text": "Love it", "user_agent": "pytest-agent", "page_url": "/results"}


def test_feedback_links_known_user(monkeypatch) -> None:
    user = make_user()
    patch_identity(monkeypatch, user)
    captured: dict[str, object] = {}

    async def _fake_submit(session, *, user_id, **kwargs):
        captured["user_id"] = user_id
        return SimpleNamespace(id=uuid4(), created_at=CREATED_AT)

    monkeypatch.setattr(feedback_routes, "submit_feedback", _fake_submit)
    client = _client(monkeypatch)

    response = client.post("/feedback", json={"feedback_text": "Nice"}, headers={"X-Device-Id": "device-1"})

    assert response.status_code == 201
    assert captured == {"user_id": user.id}


def test_feedback_blank_text_returns_400(monkeypatch) -> None:
    patch_identity(monkeypatch, None)

    async def _fake_submit(session, **kwargs):
        raise FeedbackTextInvalidError

    monkeypatch.setattr(feedback_routes, "submit_feedback", _fake_submit)
    client = _client(monkeypatch)

    response = client.post("/feedback", json={"feedback_text": "   "})

    assert response.status_code == 400
    assert response.json() == {"detail": {"code": "E_FEEDBACK_TEXT_INVALID"}}
