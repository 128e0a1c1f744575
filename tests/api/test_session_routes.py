from __future__ import annotations

from datetime import date, datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

from fastapi.testclient import TestClient
from sqlalchemy.exc import DBAPIError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from sigma_arena.api.routes import session as session_routes
from sigma_arena.core.errors import NoQuestionsForDateError
from sigma_arena.game.questions.types import QuestionView
from sigma_arena.game.sessions.errors import (
    AlreadyAnsweredError,
    DailyAlreadyPlayedError,
    InvalidBoundsError,
    SessionNotFoundError,
)
from sigma_arena.game.sessions.service import GameSessionService
from sigma_arena.game.sessions.types import (
    CommunitySnapshot,
    FinalizeSessionResult,
    Judgement,
    SessionStatus,
    StartSessionResult,
    SubmitAnswerResult,
)
from sigma_arena.identity.errors import IdentityUnavailableError
from sigma_arena.main import app
from tests.api.route_fixtures import FakeSessionLocal, make_user, patch_identity

SESSION_ID = uuid4()
PLAY_DATE = date(2026, 10, 19)


def _client(monkeypatch) -> TestClient:
    monkeypatch.setattr(session_routes, "SessionLocal", FakeSessionLocal())
    return TestClient(app)


def _start_result(*, replay: bool = False) -> StartSessionResult:
    return StartSessionResult(
        session_id=SESSION_ID,
        play_date=PLAY_DATE,
        status=SessionStatus.CREATED,
        questions=(
            QuestionView(
                question_id="q-1",
                prompt="Height of Everest in metres?",
                unit="m",
                source_name="Survey",
                source_url=None,
                category="Geography",
            ),
        ),
        answered_question_ids=(),
        idempotent_replay=replay,
    )


def test_start_returns_questions_without_true_values(monkeypatch) -> None:
    user = make_user()
    patch_identity(monkeypatch, user)
    captured: dict[str, object] = {}

    async def _fake_start(session, *, user_id, play_date, now_utc):
        captured["user_id"] = user_id
        return _start_result()

    monkeypatch.setattr(GameSessionService, "start_session", _fake_start)
    client = _client(monkeypatch)

    response = client.post("/session/start", headers={"X-Device-Id": "device-1"})

    assert response.status_code == 200
    body = response.json()
    assert body["session_id"] == str(SESSION_ID)
    assert body["status"] == "CREATED"
    assert body["idempotent_replay"] is False
    assert [question["question_id"] for question in body["questions"]] == ["q-1"]
    assert "true_value" not in body["questions"][0]
    assert "answer_context" not in body["questions"][0]
    assert captured["user_id"] == user.id


def test_start_without_identity_returns_401(monkeypatch) -> None:
    patch_identity(monkeypatch, None)
    client = _client(monkeypatch)

    response = client.post("/session/start")

    assert response.status_code == 401
    assert response.json() == {"detail": {"code": "E_AUTH_REQUIRED"}}


def test_start_after_finalized_day_returns_409(monkeypatch) -> None:
    patch_identity(monkeypatch, make_user())

    async def _fake_start(session, **kwargs):
        raise DailyAlreadyPlayedError

    monkeypatch.setattr(GameSessionService, "start_session", _fake_start)
    client = _client(monkeypatch)

    response = client.post("/session/start", headers={"X-Device-Id": "device-1"})

    assert response.status_code == 409
    assert response.json() == {"detail": {"code": "E_DAILY_ALREADY_PLAYED"}}


def test_start_without_daily_questions_returns_503(monkeypatch) -> None:
    patch_identity(monkeypatch, make_user())

    async def _fake_start(session, **kwargs):
        raise NoQuestionsForDateError

    monkeypatch.setattr(GameSessionService, "start_session", _fake_start)
    client = _client(monkeypatch)

    response = client.post("/session/start", headers={"X-Device-Id": "device-1"})

    assert response.status_code == 503
    assert response.json() == {"detail": {"code": "E_NO_QUESTIONS_FOR_DATE"}}


def test_identity_outage_is_retryable(monkeypatch) -> None:
    async def _fake_resolve_identity(session, *, authorization, device_id):
        raise IdentityUnavailableError("auth service timed out")

    monkeypatch.setattr(
        "sigma_arena.api.routes.route_helpers.resolve_identity",
        _fake_resolve_identity,
    )
    client = _client(monkeypatch)

    response = client.post("/session/start", headers={"Authorization": "Bearer token-1"})

    assert response.status_code == 503
    assert response.headers["Retry-After"] == "1"
    assert response.json() == {"detail": {"code": "E_IDENTITY_UNAVAILABLE"}}


def test_start_maps_statement_timeout_to_retryable_failure(monkeypatch) -> None:
    patch_identity(monkeypatch, make_user())

    async def _fake_start(session, *, user_id, play_date, now_utc):
        raise DBAPIError("SELECT 1", {}, TimeoutError("canceling statement due to statement timeout"))

    monkeypatch.setattr(GameSessionService, "start_session", _fake_start)
    client = _client(monkeypatch)

    response = client.post("/session/start", headers={"X-Device-Id": "device-1"})

    assert response.status_code == 503
    assert response.headers["Retry-After"] == "1"
    assert response.json() == {"detail": {"code": "E_PERSISTENCE_UNAVAILABLE"}}


def test_start_maps_pool_exhaustion_to_retryable_failure(monkeypatch) -> None:
    patch_identity(monkeypatch, make_user())

    async def _fake_start(session, *, user_id, play_date, now_utc):
        raise PoolTimeoutError("QueuePool limit reached")

    monkeypatch.setattr(GameSessionService, "start_session", _fake_start)
    client = _client(monkeypatch)

    response = client.post("/session/start", headers={"X-Device-Id": "device-1"})

    assert response.status_code == 503
    assert response.json() == {"detail": {"code": "E_PERSISTENCE_UNAVAILABLE"}}


def test_start_reports_other_database_failures_as_internal(monkeypatch) -> None:
    patch_identity(monkeypatch, make_user())

    async def _fake_start(session, *, user_id, play_date, now_utc):
        raise DBAPIError("INSERT", {}, Exception('relation "game_sessions" does not exist'))

    monkeypatch.setattr(GameSessionService, "start_session", _fake_start)
    client = _client(monkeypatch)

    response = client.post("/session/start", headers={"X-Device-Id": "device-1"})

    assert response.status_code == 500
    assert "Retry-After" not in response.headers
    assert response.json() == {"detail": {"code": "E_INTERNAL"}}


def test_rejected_token_sets_header_and_continues_with_device(monkeypatch) -> None:
    calls = patch_identity(monkeypatch, make_user(), token_rejected=True)

    async def _fake_start(session, **kwargs):
        return _start_result(replay=True)

    monkeypatch.setattr(GameSessionService, "start_session", _fake_start)
    client = _client(monkeypatch)

    response = client.post(
        "/session/start",
        headers={"Authorization": "Bearer expired", "X-Device-Id": "device-1"},
    )

    assert response.status_code == 200
    assert response.headers["X-Auth-Token-Rejected"] == "1"
    assert response.json()["idempotent_replay"] is True
    assert calls == [{"authorization": "Bearer expired", "device_id": "device-1"}]


def test_answer_passes_bounds_through(monkeypatch) -> None:
    user = make_user()
    patch_identity(monkeypatch, user)
    captured: dict[str, object] = {}

    async def _fake_submit(session, *, user_id, session_id, question_id, lower, upper, now_utc):
        captured.update(session_id=session_id, question_id=question_id, lower=lower, upper=upper)
        return SubmitAnswerResult(
            session_id=session_id,
            question_id=question_id,
            status=SessionStatus.ANSWERING,
            answered_count=1,
            total_questions=5,
        )

    monkeypatch.setattr(GameSessionService, "submit_answer", _fake_submit)
    client = _client(monkeypatch)

    response = client.post(
        "/session/answer",
        json={"session_id": str(SESSION_ID), "question_id": "q-1", "lower": 1400, "upper": 1600},
        headers={"X-Device-Id": "device-1"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "session_id": str(SESSION_ID),
        "question_id": "q-1",
        "status": "ANSWERING",
        "answered_count": 1,
        "total_questions": 5,
    }
    assert captured == {"session_id": SESSION_ID, "question_id": "q-1", "lower": 1400.0, "upper": 1600.0}


def test_answer_error_mapping(monkeypatch) -> None:
    patch_identity(monkeypatch, make_user())
    errors = iter([InvalidBoundsError(), AlreadyAnsweredError(), SessionNotFoundError()])

    async def _fake_submit(session, **kwargs):
        raise next(errors)

    monkeypatch.setattr(GameSessionService, "submit_answer", _fake_submit)
    client = _client(monkeypatch)
    body = {"session_id": str(SESSION_ID), "question_id": "q-1", "lower": 10, "upper": 1}

    responses = [
        client.post("/session/answer", json=body, headers={"X-Device-Id": "device-1"}) for _ in range(3)
    ]

    assert [response.status_code for response in responses] == [400, 409, 404]
    assert [response.json()["detail"]["code"] for response in responses] == [
        "E_INVALID_BOUNDS",
        "E_ALREADY_ANSWERED",
        "E_SESSION_NOT_FOUND",
    ]


def test_answer_rejects_malformed_payload(monkeypatch) -> None:
    patch_identity(monkeypatch, make_user())
    client = _client(monkeypatch)

    response = client.post(
        "/session/answer",
        json={"session_id": "not-a-uuid", "question_id": "q-1", "lower": 1, "upper": 2},
        headers={"X-Device-Id": "device-1"},
    )

    assert response.status_code == 422


def test_finalize_reveals_true_values_and_community(monkeypatch) -> None:
    patch_identity(monkeypatch, make_user())

    async def _fake_finalize(session, *, user_id, session_id, now_utc):
        return FinalizeSessionResult(
            session_id=session_id,
            play_date=PLAY_DATE,
            judgements=(
                Judgement(
                    question_id="q-1",
                    prompt="Height of Everest in metres?",
                    unit="m",
                    lower=8000.0,
                    upper=9000.0,
                    true_value=8849.0,
                    answered=True,
                    hit=True,
                    precision=88.89,
                    score=52.3,
                    category="Geography",
                    source_name=None,
                    source_url=None,
                    answer_context="Measured in 2020.",
                    community=CommunitySnapshot(average_score=30.0, highest_score=70.0, response_count=4),
                ),
            ),
            total_score=52.3,
            questions_captured=1,
            questions_total=1,
            questions_answered=1,
            idempotent_replay=False,
        )

    monkeypatch.setattr(GameSessionService, "finalize_session", _fake_finalize)
    client = _client(monkeypatch)

    response = client.post(
        "/session/finalize",
        json={"session_id": str(SESSION_ID)},
        headers={"X-Device-Id": "device-1"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["total_score"] == 52.3
    assert body["questions_captured"] == 1
    judgement = body["judgements"][0]
    assert judgement["true_value"] == 8849.0
    assert judgement["hit"] is True
    assert judgement["community"] == {"average_score": 30.0, "highest_score": 70.0, "response_count": 4}


def test_leaderboard_overall_is_default(monkeypatch) -> None:
    leader_id = uuid4()

    async def _fake_overall(session):
        return [
            SimpleNamespace(
                rank=1,
                user_id=leader_id,
                username="jane",
                total_score=400.5,
                games_played=4,
                average_score=100.13,
            )
        ]

    monkeypatch.setattr(session_routes.stats_queries, "get_overall_leaderboard", _fake_overall)
    client = _client(monkeypatch)

    response = client.get("/session/leaderboard")

    assert response.status_code == 200
    body = response.json()
    assert body["type"] == "overall"
    assert body["leaderboard"][0]["user_id"] == str(leader_id)
    assert body["leaderboard"][0]["total_score"] == 400.5


def test_leaderboard_best_guesses(monkeypatch) -> None:
    async def _fake_best(session):
        return [
            SimpleNamespace(
                rank=1,
                username="jane",
                score=99.9,
                prompt="Height of Everest in metres?",
                lower=8840.0,
                upper=8850.0,
                true_value=8849.0,
                answered_at=datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc),
            )
        ]

    monkeypatch.setattr(session_routes.stats_queries, "get_best_guesses_leaderboard", _fake_best)
    client = _client(monkeypatch)

    response = client.get("/session/leaderboard", params={"type": "best-guesses"})

    assert response.status_code == 200
    assert response.json()["leaderboard"][0]["score"] == 99.9


def test_leaderboard_rejects_unknown_type(monkeypatch) -> None:
    client = _client(monkeypatch)

    response = client.get("/session/leaderboard", params={"type": "weekly"})

    assert response.status_code == 422


def test_responses_carry_request_id(monkeypatch) -> None:
    patch_identity(monkeypatch, None)
    client = _client(monkeypatch)

    echoed = client.post("/session/start", headers={"X-Request-Id": "req-42"})
    generated = client.post("/session/start")

    assert echoed.headers["X-Request-Id"] == "req-42"
    assert len(generated.headers["X-Request-Id"]) == 32
