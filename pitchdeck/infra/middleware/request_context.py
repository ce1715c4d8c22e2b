"""
Request context middleware for structured logging.
"""

from __future__ import annotations

import time
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from pitchdeck.infra.config.logging_config import bind_context, clear_context, get_logger

# Logged at debug level.
QUIET_PREFIXES = ("/static/", "/health", "/metrics")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds request_id/path/method, times the request and echoes X-Request-ID.

    For SSE responses (``/api/v1/events``, chat replies) ``request.end`` is
    logged when headers are sent, not when the stream closes.
    """

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:  # type: ignore[override]
        request_id = request.headers.get("x-request-id") or uuid4().hex
        path = request.url.path
        bind_context(request_id=request_id, path=path, method=request.method)
        logger = get_logger("http")
        log = logger.debug if path.startswith(QUIET_PREFIXES) else logger.info

        started = time.perf_counter()
        log("request.start", client_ip=request.client.host if request.client else None)
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            log(
                "request.end",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )
            return response
        except Exception as exc:  # pragma: no cover
            logger.exception("request.error", error=str(exc))
            raise
        finally:
            clear_context()
