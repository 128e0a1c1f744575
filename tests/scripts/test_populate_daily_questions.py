from __future__ import annotations

from datetime import date
from types import SimpleNamespace

import pytest

from scripts import populate_daily_questions as populate_script
from scripts.populate_daily_questions import _parse_args, _validate_replace_existing_safety
from sigma_arena.game.questions.types import PopulationReport
from tests.api.route_fixtures import FakeSessionLocal

PROD_DB_URL = "postgresql+asyncpg://sigma:secret@db:5432/sigma_arena"


def test_replace_guard_skips_without_replace_flag() -> None:
    _validate_replace_existing_safety(
        app_env="production",
        database_url=PROD_DB_URL,
        replace_existing=False,
        confirmation_value="",
        expected_db_name="",
    )


def test_replace_guard_skips_outside_production() -> None:
    _validate_replace_existing_safety(
        app_env="dev",
        database_url=PROD_DB_URL,
        replace_existing=True,
        confirmation_value="",
        expected_db_name="",
    )


@pytest.mark.parametrize("app_env", ["production", "prod", " PROD "])
def test_replace_guard_requires_confirmation_in_production(app_env: str) -> None:
    with pytest.raises(RuntimeError, match="explicit confirmation"):
        _validate_replace_existing_safety(
            app_env=app_env,
            database_url=PROD_DB_URL,
            replace_existing=True,
            confirmation_value="",
            expected_db_name="sigma_arena",
        )


def test_replace_guard_rejects_db_name_mismatch() -> None:
    with pytest.raises(RuntimeError, match="expected DB name mismatch"):
        _validate_replace_existing_safety(
            app_env="production",
            database_url=PROD_DB_URL,
            replace_existing=True,
            confirmation_value="PROD_REPLACE_SLOTS_OK",
            expected_db_name="wrong_db",
        )


def test_replace_guard_accepts_confirmed_matching_db() -> None:
    _validate_replace_existing_safety(
        app_env="production",
        database_url=PROD_DB_URL,
        replace_existing=True,
        confirmation_value="PROD_REPLACE_SLOTS_OK",
        expected_db_name="sigma_arena",
    )


def test_parse_args_reads_options() -> None:
    args = _parse_args(["--start-date", "2026-11-01", "--seed", "7", "--replace-existing", "--dry-run"])

    assert args.start_date == date(2026, 11, 1)
    assert args.seed == 7
    assert args.replace_existing is True
    assert args.dry_run is True


def test_parse_args_rejects_bad_date() -> None:
    with pytest.raises(SystemExit):
        _parse_args(["--start-date", "11/01/2026"])


@pytest.mark.asyncio
async def test_run_populates_from_given_start_date(monkeypatch, capsys) -> None:
    captured: dict[str, object] = {}

    async def _fake_populate(session, *, start_date, rng, replace_existing, dry_run):
        captured.update(start_date=start_date, replace_existing=replace_existing, dry_run=dry_run)
        return PopulationReport(
            questions_found=120,
            days_planned=24,
            slots_planned=120,
            slots_inserted=0,
            unused_questions=0,
            slots_cleared=0,
            first_date=start_date,
            last_date=date(2026, 11, 24),
            dry_run=dry_run,
        )

    monkeypatch.setattr(populate_script, "SessionLocal", FakeSessionLocal())
    monkeypatch.setattr(populate_script, "populate_daily_questions", _fake_populate)
    monkeypatch.setattr(populate_script, "configure_logging", lambda *args, **kwargs: None)
    monkeypatch.setattr(
        populate_script,
        "get_settings",
        lambda: SimpleNamespace(app_env="dev", database_url=PROD_DB_URL, log_level="INFO"),
    )

    exit_code = await populate_script._run(["--start-date", "2026-11-01", "--dry-run", "--seed", "3"])

    assert exit_code == 0
    assert captured == {"start_date": date(2026, 11, 1), "replace_existing": False, "dry_run": True}
    output = capsys.readouterr().out
    assert "days_planned=24" in output
    assert "dry_run=True" in output
