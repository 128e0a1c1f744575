import time

import structlog
import uvicorn
from fastapi import FastAPI, Request, Response
from sqlalchemy.exc import DBAPIError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from starlette.middleware.base import RequestResponseEndpoint

from sigma_arena.api.routes.auth import router as auth_router
from sigma_arena.api.routes.feedback import router as feedback_router
from sigma_arena.api.routes.health import router as health_router
from sigma_arena.api.routes.route_helpers import TOKEN_REJECTED_HEADER, database_error_response
from sigma_arena.api.routes.session import router as session_router
from sigma_arena.api.routes.user import router as user_router
from sigma_arena.core.config import get_settings
from sigma_arena.core.logging import (
    REQUEST_ID_HEADER,
    bind_request_context,
    clear_request_context,
    configure_logging,
)

logger = structlog.get_logger(__name__)

QUIET_PATHS = frozenset({"/health", "/ready", "/live"})


async def request_context(request: Request, call_next: RequestResponseEndpoint) -> Response:
    request_id = bind_request_context(
        request_id=request.headers.get(REQUEST_ID_HEADER),
        method=request.method,
        path=request.url.path,
    )
    started = time.monotonic()
    try:
        response = await call_next(request)
        if request.url.path not in QUIET_PATHS:
            logger.info(
                "http_request",
                status_code=response.status_code,
                duration_ms=int((time.monotonic() - started) * 1000),
            )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
    finally:
        clear_request_context()


async def flag_rejected_token(request: Request, call_next: RequestResponseEndpoint) -> Response:
    response = await call_next(request)
    if getattr(request.state, "token_rejected", False):
        response.headers[TOKEN_REJECTED_HEADER] = "1"
    return response


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level, app_env=settings.app_env)

    app = FastAPI(
        title="Sigma Arena API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.add_exception_handler(DBAPIError, database_error_response)
    app.add_exception_handler(PoolTimeoutError, database_error_response)
    app.middleware("http")(flag_rejected_token)
    # registered last so it wraps every other middleware
    app.middleware("http")(request_context)
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(session_router)
    app.include_router(user_router)
    app.include_router(feedback_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "sigma_arena.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_env == "dev",
    )


if __name__ == "__main__":
    run()
