from __future__ import annotations

from datetime import datetime, timezone

import structlog
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from sigma_arena.core.errors import (
    AuthRejectedError,
    AuthRequiredError,
    ConflictError,
    MergeInconsistencyError,
    NoQuestionsForDateError,
    NotFoundError,
    RetryableError,
    SigmaArenaError,
    ValidationError,
)
from sigma_arena.db.errors import PersistenceUnavailableError, is_transient_db_error
from sigma_arena.identity.resolver import ResolvedIdentity, resolve_identity

logger = structlog.get_logger(__name__)

TOKEN_REJECTED_HEADER = "X-Auth-Token-Rejected"
DEVICE_ID_HEADER = "X-Device-Id"

_STATUS_BY_ERROR: tuple[tuple[type[SigmaArenaError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (AuthRequiredError, status.HTTP_401_UNAUTHORIZED),
    (AuthRejectedError, status.HTTP_401_UNAUTHORIZED),
    (ConflictError, status.HTTP_409_CONFLICT),
    (NoQuestionsForDateError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (RetryableError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (MergeInconsistencyError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def status_for(exc: SigmaArenaError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def http_error(exc: SigmaArenaError) -> HTTPException:
    status_code = status_for(exc)
    detail: dict[str, object] = {"code": exc.code}
    if isinstance(exc, ConflictError) and exc.suggestions:
        detail["suggestions"] = list(exc.suggestions)
    if status_code >= 500:
        logger.error("request_failed", error_code=exc.code, error=str(exc))
    if isinstance(exc, RetryableError):
        return HTTPException(status_code=status_code, detail=detail, headers={"Retry-After": "1"})
    return HTTPException(status_code=status_code, detail=detail)


async def database_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Turns database failures that escaped a route into the structured error body."""
    if is_transient_db_error(exc):
        logger.warning("persistence_unavailable", error_type=type(exc).__name__, path=request.url.path)
        error: SigmaArenaError = PersistenceUnavailableError(str(exc))
    else:
        logger.error("persistence_failed", error_type=type(exc).__name__, path=request.url.path)
        error = SigmaArenaError(str(exc))
    http_exc = http_error(error)
    return JSONResponse(
        status_code=http_exc.status_code,
        content={"detail": http_exc.detail},
        headers=http_exc.headers,
    )


async def resolve_request_identity(session: AsyncSession, request: Request) -> ResolvedIdentity:
    identity = await resolve_identity(
        session,
        authorization=request.headers.get("Authorization"),
        device_id=request.headers.get(DEVICE_ID_HEADER),
    )
    request.state.token_rejected = identity.token_rejected
    return identity
