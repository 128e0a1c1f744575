from __future__ import annotations

import asyncio

import asyncpg
from sqlalchemy.engine import make_url

from sigma_arena.core.config import get_settings
from sigma_arena.core.integration_db_safety import IDENTIFIER_RE, assess_integration_db_safety


async def _ensure_database_exists(database_url: str) -> bool:
    """Creates the integration test database when missing. Returns True if it was created."""
    safety = assess_integration_db_safety(database_url)
    if not safety.is_safe:
        raise RuntimeError(f"Refusing to bootstrap '{safety.database_name}': {safety.reason}")
    if IDENTIFIER_RE.fullmatch(safety.database_name) is None:
        raise RuntimeError(f"Unsupported database name '{safety.database_name}'.")

    parsed = make_url(database_url)
    if parsed.username is None:
        raise RuntimeError("DATABASE_URL username is required.")

    conn = await asyncpg.connect(
        host=parsed.host or "localhost",
        port=int(parsed.port or 5432),
        user=parsed.username,
        password=parsed.password,
        database="postgres",
    )
    try:
        exists = await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", safety.database_name)
        if exists:
            return False
        await conn.execute(f'CREATE DATABASE "{safety.database_name}"')
        return True
    finally:
        await conn.close()


def main() -> int:
    database_url = get_settings().database_url
    created = asyncio.run(_ensure_database_exists(database_url))
    db_name = make_url(database_url).database
    print(f"ensure_test_db: {'created' if created else 'exists'} db={db_name}")  # noqa: T201
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
