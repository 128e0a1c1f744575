from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest

from sigma_arena.feedback import service as feedback_service
from sigma_arena.feedback.errors import FeedbackTextInvalidError

NOW = datetime(2026, 4, 5, 10, 0, tzinfo=timezone.utc)


def test_normalize_feedback_text_trims() -> None:
    assert feedback_service.normalize_feedback_text("  great game \n", max_length=50) == "great game"


@pytest.mark.parametrize("text", ["", "   \n\t"])
def test_normalize_feedback_text_rejects_blank(text: str) -> None:
    with pytest.raises(FeedbackTextInvalidError):
        feedback_service.normalize_feedback_text(text, max_length=50)


def test_normalize_feedback_text_applies_limit_after_trimming() -> None:
    assert feedback_service.normalize_feedback_text(" " + "x" * 10 + " ", max_length=10) == "x" * 10
    with pytest.raises(FeedbackTextInvalidError):
        feedback_service.normalize_feedback_text("x" * 11, max_length=10)


@pytest.mark.asyncio
async def test_submit_feedback_accepts_anonymous_sender(monkeypatch: pytest.MonkeyPatch) -> None:
    created: list[dict[str, object]] = []

    async def fake_create(session, **kwargs):  # noqa: ANN001
        del session
        created.append(kwargs)
        return SimpleNamespace(id=uuid4(), **kwargs)

    monkeypatch.setattr(feedback_service.FeedbackRepo, "create", fake_create)

    feedback = await feedback_service.submit_feedback(
        object(),
        user_id=None,
        text="  The units on question 3 are wrong ",
        user_agent="pytest",
        page_url="/play",
        now_utc=NOW,
    )

    assert feedback.feedback_text == "The units on question 3 are wrong"
    assert created[0]["user_id"] is None
    assert created[0]["page_url"] == "/play"
