from __future__ import annotations

import pytest
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, OperationalError

from sigma_arena.core.integration_db_safety import assert_safe_integration_db
from sigma_arena.db import models  # noqa: F401
from sigma_arena.db.models.base import Base
from sigma_arena.db.session import engine


def _reset_statement() -> str:
    tables = ", ".join(table.name for table in reversed(Base.metadata.sorted_tables))
    return f"TRUNCATE TABLE {tables} RESTART IDENTITY CASCADE"


@pytest.fixture(scope="session", autouse=True)
def refuse_non_test_database() -> None:
    assert_safe_integration_db(str(engine.url))


@pytest.fixture(autouse=True)
async def empty_tables() -> None:
    # asyncpg connections are bound to the loop that opened them
    await engine.dispose()
    try:
        async with engine.begin() as conn:
            await conn.execute(text(_reset_statement()))
    except (OSError, OperationalError, DBAPIError) as exc:  # pragma: no cover - environment-dependent
        pytest.skip(f"local Postgres test database unavailable: {type(exc).__name__}")

    yield

    await engine.dispose()
