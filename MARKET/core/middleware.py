# MARKET/core/middleware.py
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("core.middleware")


class RequestLogMiddleware(BaseHTTPMiddleware):
    """One access-log line per request, tagged with a request id echoed in X-Request-ID."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        ip = request.client.host if request.client else None
        started = time.perf_counter()

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %s (%.1f ms) ip=%s rid=%s",
            request.method, request.url.path, response.status_code, elapsed_ms, ip, request_id,
        )
        response.headers["X-Request-ID"] = request_id
        return response
