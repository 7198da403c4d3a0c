import logging
import sys
from uuid import uuid4

import structlog

REQUEST_ID_HEADER = "X-Request-ID"


def configure_logging(log_level: str = "INFO") -> None:
    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            timestamper,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def bind_request_context(*, request_id: str | None, method: str, path: str) -> str:
    """Binds per-request fields so every log line of the request carries them."""
    resolved_id = (request_id or "").strip()[:64] or uuid4().hex
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=resolved_id,
        http_method=method,
        http_path=path,
    )
    return resolved_id


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
