from __future__ import annotations

import asyncio

from sqlalchemy.exc import DBAPIError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from sigma_arena.core.errors import RetryableError

# query_canceled (statement_timeout), lock_not_available, serialization_failure, deadlock_detected
TRANSIENT_SQLSTATES = frozenset({"57014", "55P03", "40001", "40P01"})


class PersistenceUnavailableError(RetryableError):
    code = "E_PERSISTENCE_UNAVAILABLE"


def is_transient_db_error(exc: BaseException) -> bool:
    if isinstance(exc, PoolTimeoutError):
        return True
    if not isinstance(exc, DBAPIError):
        return False
    if exc.connection_invalidated:
        return True

    orig = exc.orig
    if isinstance(orig, (TimeoutError, asyncio.TimeoutError)):
        return True
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return isinstance(sqlstate, str) and sqlstate in TRANSIENT_SQLSTATES
