import time
import uuid
from urllib.parse import urlsplit

import structlog
import structlog.contextvars
from fastapi import Request

from backend.plugins.kintone.hostname import to_host_id

logger = structlog.get_logger(__name__)


def origin_host_id(origin: str | None) -> str | None:
    """Host id of the kintone page a plugin request was sent from, if known."""
    if not origin:
        return None
    return to_host_id(urlsplit(origin).hostname)


async def structured_logging_middleware(request: Request, call_next):
    """
    A single, unified middleware for context injection and request/response logging.
    """
    structlog.contextvars.clear_contextvars()
    start_time = time.time()

    correlation_id = request.headers.get("x-correlation-id") or str(uuid.uuid4())
    origin = request.headers.get("origin") or request.headers.get("referer")
    structlog.contextvars.bind_contextvars(
        correlation_id=correlation_id,
        remote_addr=request.client.host if request.client else None,
        request_path=request.url.path,
        request_method=request.method,
        user_agent=request.headers.get("user-agent"),
        origin=origin,
        origin_host_id=origin_host_id(origin),
    )

    try:
        response = await call_next(request)
        process_time = time.time() - start_time
        status_code = response.status_code

        log_event = logger.info if 200 <= status_code < 400 else logger.warning
        log_event(
            "Request completed",
            status_code=status_code,
            processing_time_ms=round(process_time * 1000, 2),
        )

        response.headers["X-Correlation-ID"] = correlation_id
        response.headers["X-Process-Time"] = f"{process_time:.4f}s"
        return response

    except Exception:
        process_time = time.time() - start_time
        logger.exception(
            "Request failed with unhandled exception",
            processing_time_ms=round(process_time * 1000, 2),
        )
        raise
    finally:
        structlog.contextvars.clear_contextvars()
