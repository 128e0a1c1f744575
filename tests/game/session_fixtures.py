from __future__ import annotations

from sigma_arena.game.sessions.types import JudgedQuestion, Judgement


def make_question(
    question_id: str,
    *,
    true_value: float = 100.0,
    category: str | None = "General",
) -> JudgedQuestion:
    return JudgedQuestion(
        question_id=question_id,
        prompt=f"How many {question_id}?",
        unit="units",
        true_value=true_value,
        category=category,
        source_name="Almanac",
        source_url="https://example.org/almanac",
        answer_context=None,
    )


def make_judgement(
    question_id: str,
    *,
    hit: bool = False,
    score: float = 0.0,
    answered: bool = True,
    category: str | None = "General",
) -> Judgement:
    return Judgement(
        question_id=question_id,
        prompt=f"How many {question_id}?",
        unit="units",
        lower=90.0 if answered else None,
        upper=110.0 if answered else None,
        true_value=100.0,
        answered=answered,
        hit=hit and answered,
        precision=80.0 if hit and answered else 0.0,
        score=score if answered else 0.0,
        category=category,
        source_name=None,
        source_url=None,
        answer_context=None,
    )


class _Savepoint:
    async def __aenter__(self) -> "_Savepoint":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:  # noqa: ANN001
        return False


class FakeDbSession:
    def __init__(self) -> None:
        self.flush_calls = 0
        self.savepoints = 0

    def begin_nested(self) -> _Savepoint:
        self.savepoints += 1
        return _Savepoint()

    async def flush(self) -> None:
        self.flush_calls += 1
