from __future__ import annotations

import argparse
import asyncio
from datetime import date, datetime, timezone

from sigma_arena.core.errors import NoQuestionsForDateError
from sigma_arena.core.time import game_local_date
from sigma_arena.db.session import SessionLocal
from sigma_arena.game.questions.pool import questions_for_date


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print the published daily questions for a date.")
    parser.add_argument("--date", type=date.fromisoformat, default=None)
    return parser.parse_args(argv)


async def _run(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    play_date = args.date or game_local_date(datetime.now(timezone.utc))

    async with SessionLocal() as session:
        try:
            questions = await questions_for_date(session, play_date=play_date)
        except NoQuestionsForDateError:
            print(f"check_daily_questions date={play_date} questions=0")  # noqa: T201
            return 1

    print(f"check_daily_questions date={play_date} questions={len(questions)}")  # noqa: T201
    for position, question in enumerate(questions, start=1):
        unit = question.unit or "n/a"
        print(f"  {position}. [{question.question_id}] {question.prompt} ({unit})")  # noqa: T201
    return 0


def main(argv: list[str] | None = None) -> int:
    return asyncio.run(_run(argv))


if __name__ == "__main__":
    raise SystemExit(main())
