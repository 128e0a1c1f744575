import logging
import sys
from uuid import uuid4

import structlog

REQUEST_ID_HEADER = "X-Request-Id"


def configure_logging(log_level: str = "INFO", *, app_env: str = "prod") -> None:
    """JSON lines on stdout; a readable console renderer in dev."""
    renderer = (
        structlog.dev.ConsoleRenderer()
        if app_env == "dev"
        else structlog.processors.JSONRenderer()
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )
    # uvicorn access lines duplicate the request log below
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def bind_request_context(*, request_id: str | None, method: str, path: str) -> str:
    resolved = (request_id or "").strip()[:64] or uuid4().hex
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=resolved, method=method, path=path)
    return resolved


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
