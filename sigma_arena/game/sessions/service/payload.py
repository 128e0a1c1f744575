from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict
from typing import Any

from sigma_arena.game.sessions.types import CommunitySnapshot, Judgement


def build_result_payload(
    *,
    judgements: Sequence[Judgement],
    total_score: float,
    questions_captured: int,
    questions_answered: int,
) -> dict[str, Any]:
    return {
        "judgements": [asdict(judgement) for judgement in judgements],
        "total_score": total_score,
        "questions_captured": questions_captured,
        "questions_answered": questions_answered,
    }


def judgements_from_payload(payload: dict[str, Any]) -> tuple[Judgement, ...]:
    judgements: list[Judgement] = []
    for raw in payload.get("judgements", []):
        item = dict(raw)
        community = item.pop("community", None)
        judgements.append(
            Judgement(
                **item,
                community=CommunitySnapshot(**community) if community is not None else None,
            )
        )
    return tuple(judgements)
