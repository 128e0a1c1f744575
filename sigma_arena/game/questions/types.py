from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True, slots=True)
class QuestionView:
    """Client-facing question. Never carries the true value."""

    question_id: str
    prompt: str
    unit: str | None
    source_name: str | None
    source_url: str | None
    category: str | None


@dataclass(frozen=True, slots=True)
class PlannedSlot:
    slot_date: date
    display_order: int
    question_id: str


@dataclass(slots=True)
class PopulationReport:
    questions_found: int
    days_planned: int
    slots_planned: int
    slots_inserted: int
    unused_questions: int
    slots_cleared: int
    first_date: date | None
    last_date: date | None
    dry_run: bool
