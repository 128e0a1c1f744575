from __future__ import annotations

from datetime import date
from uuid import UUID

import pytest

from sigma_arena.game.stats import queries

ME = UUID("00000000-0000-0000-0000-000000000001")
OTHER = UUID("00000000-0000-0000-0000-000000000002")
THIRD = UUID("00000000-0000-0000-0000-000000000003")


def _patch_totals(monkeypatch: pytest.MonkeyPatch, rows: list[tuple[date, UUID, float, int, int]]) -> list[tuple[date, date]]:
    ranges: list[tuple[date, date]] = []

    async def fake_list_daily_user_totals(session, *, start_date, end_date):  # noqa: ANN001
        del session
        ranges.append((start_date, end_date))
        return [row for row in rows if start_date <= row[0] <= end_date]

    monkeypatch.setattr(queries.AnswerRecordsRepo, "list_daily_user_totals", fake_list_daily_user_totals)
    return ranges


@pytest.mark.asyncio
async def test_daily_stats_rank_and_calibration(monkeypatch: pytest.MonkeyPatch) -> None:
    today = date(2026, 4, 8)
    _patch_totals(
        monkeypatch,
        [
            (today, OTHER, 300.0, 4, 5),
            (today, ME, 150.0, 3, 5),
            (today, THIRD, 30.0, 1, 5),
        ],
    )

    stats = await queries.get_daily_stats(object(), user_id=ME, play_date=today)

    assert stats.daily_rank == 2
    assert stats.top_score_today == 300.0
    assert stats.todays_average == 160.0
    assert stats.user_score_today == 150.0
    assert stats.calibration_today == 60.0
    assert stats.total_participants_today == 3


@pytest.mark.asyncio
async def test_daily_stats_when_nobody_played(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_totals(monkeypatch, [])

    stats = await queries.get_daily_stats(object(), user_id=ME, play_date=date(2026, 4, 8))

    assert stats.daily_rank is None
    assert stats.total_participants_today == 0


@pytest.mark.asyncio
async def test_performance_history_fills_missing_days(monkeypatch: pytest.MonkeyPatch) -> None:
    end = date(2026, 4, 8)  # Wednesday
    ranges = _patch_totals(
        monkeypatch,
        [
            (date(2026, 4, 6), ME, 100.0, 2, 5),
            (date(2026, 4, 6), OTHER, 50.0, 1, 5),
            (date(2026, 4, 8), OTHER, 80.0, 2, 5),
        ],
    )

    points = await queries.get_performance_history(object(), user_id=ME, end_date=end, days=3)

    assert ranges == [(date(2026, 4, 6), end)]
    assert [point.day_label for point in points] == ["M", "T", "W"]
    assert points[0].user_score == 100.0
    assert points[0].average_score == 75.0
    assert points[0].calibration == 40.0
    assert points[1].average_score == 0.0
    assert points[2].user_score == 0.0
    assert points[2].average_score == 80.0


@pytest.mark.asyncio
async def test_performance_history_caps_window(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_totals(monkeypatch, [])

    points = await queries.get_performance_history(object(), user_id=ME, end_date=date(2026, 4, 8), days=90)

    assert len(points) == queries.HISTORY_MAX_DAYS
