# file: MARKET/core/errors.py
"""
Error taxonomy shared by every router.

Components raise these typed errors; the handlers registered in
``register_exception_handlers`` turn them into ``{"message": ...}`` JSON
bodies with the matching HTTP status.
"""

import logging
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("core.errors")


class MarketError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_body(self) -> dict:
        return {"message": self.message}


class ValidationError(MarketError):
    status_code = 400

    def __init__(self, message: str, errors: Optional[List[dict]] = None):
        super().__init__(message)
        self.errors = errors or []

    def to_body(self) -> dict:
        body = {"message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class AuthenticationError(MarketError):
    status_code = 401


class AuthorizationError(MarketError):
    status_code = 403


class NotFoundError(MarketError):
    status_code = 404


class UpstreamError(MarketError):
    """A third-party provider (geocoding, push) failed."""

    status_code = 502


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(MarketError)
    async def market_error_handler(request: Request, exc: MarketError):
        if isinstance(exc, UpstreamError):
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ())[1:]) or "body",
                "message": err.get("msg", "Invalid value"),
            }
            for err in exc.errors()
        ]
        return JSONResponse(status_code=400, content={"message": "Invalid request", "errors": errors})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse(
            status_code=429,
            content={
                "message": "Too many requests. Please slow down.",
                "limit": str(exc.detail),
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": "Internal server error"})
