from __future__ import annotations

from types import SimpleNamespace

import pytest
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from sigma_arena.core.errors import RetryableError
from sigma_arena.db.errors import PersistenceUnavailableError, is_transient_db_error


@pytest.mark.parametrize(
    "exc",
    [
        PoolTimeoutError("QueuePool limit reached"),
        DBAPIError("SELECT 1", {}, TimeoutError()),
        DBAPIError("SELECT 1", {}, SimpleNamespace(sqlstate="57014")),
        DBAPIError("UPDATE users", {}, SimpleNamespace(sqlstate="40P01")),
        DBAPIError("SELECT 1", {}, Exception("connection reset"), connection_invalidated=True),
    ],
)
def test_transient_database_errors(exc: Exception) -> None:
    assert is_transient_db_error(exc) is True


@pytest.mark.parametrize(
    "exc",
    [
        IntegrityError("INSERT", {}, SimpleNamespace(sqlstate="23505")),
        DBAPIError("SELECT 1", {}, Exception("syntax error")),
        ValueError("not a database error"),
    ],
)
def test_permanent_errors_are_not_transient(exc: Exception) -> None:
    assert is_transient_db_error(exc) is False


def test_persistence_unavailable_is_retryable() -> None:
    assert issubclass(PersistenceUnavailableError, RetryableError)
    assert PersistenceUnavailableError.code == "E_PERSISTENCE_UNAVAILABLE"
