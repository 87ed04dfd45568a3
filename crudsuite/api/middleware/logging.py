"""
Request Logging Middleware
Tags every request with an ID and logs its outcome.
"""

import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log one line per request.

    The caller's X-Request-ID is reused when present, otherwise one is
    generated. Either way it is echoed back on the response and exposed to
    handlers as ``request.state.request_id``.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                f"{request.method} {request.url.path} failed",
                exc_info=True,
                extra={"request_id": request_id, "duration_ms": (time.perf_counter() - started) * 1000},
            )
            raise

        duration_ms = (time.perf_counter() - started) * 1000
        # 4xx stay at info
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.1f}ms)",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
