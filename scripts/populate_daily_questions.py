from __future__ import annotations

import argparse
import asyncio
import os
import random
from datetime import date, datetime, timezone

from sqlalchemy.engine import make_url

from sigma_arena.core.config import get_settings
from sigma_arena.core.logging import configure_logging
from sigma_arena.core.time import game_local_date
from sigma_arena.db.session import SessionLocal
from sigma_arena.game.questions.population import populate_daily_questions

PRODUCTION_ENVS = {"production", "prod"}
REPLACE_CONFIRMATION_ENV = "DAILY_SLOTS_REPLACE_CONFIRM"
REPLACE_CONFIRMATION_VALUE = "PROD_REPLACE_SLOTS_OK"
EXPECTED_DB_NAME_ENV = "DAILY_SLOTS_EXPECTED_DB_NAME"


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("invalid start date, use YYYY-MM-DD") from exc


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Partition active questions into published daily slots.",
    )
    parser.add_argument("--start-date", type=_parse_date, default=None)
    parser.add_argument(
        "--replace-existing",
        action="store_true",
        help="Delete every existing daily slot before inserting the new plan.",
    )
    parser.add_argument("--seed", type=int, default=None, help="Shuffle seed for a reproducible plan.")
    parser.add_argument("--dry-run", action="store_true")
    return parser.parse_args(argv)


def _validate_replace_existing_safety(
    *,
    app_env: str,
    database_url: str,
    replace_existing: bool,
    confirmation_value: str,
    expected_db_name: str,
) -> None:
    if not replace_existing or app_env.strip().lower() not in PRODUCTION_ENVS:
        return
    if confirmation_value != REPLACE_CONFIRMATION_VALUE:
        raise RuntimeError(
            f"--replace-existing in production requires explicit confirmation via {REPLACE_CONFIRMATION_ENV}"
        )
    db_name = (make_url(database_url).database or "").strip()
    if not expected_db_name or expected_db_name != db_name:
        raise RuntimeError(f"expected DB name mismatch: expected='{expected_db_name}' actual='{db_name}'")


async def _run(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level, app_env=settings.app_env)
    _validate_replace_existing_safety(
        app_env=settings.app_env,
        database_url=settings.database_url,
        replace_existing=args.replace_existing,
        confirmation_value=os.getenv(REPLACE_CONFIRMATION_ENV, ""),
        expected_db_name=os.getenv(EXPECTED_DB_NAME_ENV, ""),
    )

    start_date = args.start_date or game_local_date(datetime.now(timezone.utc))
    async with SessionLocal.begin() as session:
        report = await populate_daily_questions(
            session,
            start_date=start_date,
            rng=random.Random(args.seed),
            replace_existing=args.replace_existing,
            dry_run=args.dry_run,
        )

    print(  # noqa: T201
        "populate_daily_questions "
        f"questions_found={report.questions_found} "
        f"days_planned={report.days_planned} "
        f"slots_planned={report.slots_planned} "
        f"slots_inserted={report.slots_inserted} "
        f"slots_cleared={report.slots_cleared} "
        f"unused_questions={report.unused_questions} "
        f"first_date={report.first_date} "
        f"last_date={report.last_date} "
        f"dry_run={report.dry_run}"
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    return asyncio.run(_run(argv))


if __name__ == "__main__":
    raise SystemExit(main())
