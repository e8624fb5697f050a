"""
Unified error handling.

Every Herald error carries an HTTP status and an error type so the API layer
can render it without knowing which component raised it.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse

logger = structlog.stdlib.get_logger()


class HeraldError(Exception):
    """Base exception for all Herald errors."""

    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> dict[str, Any]:
        return {
            "error": {
                "message": self.message,
                "type": self.error_type,
                "code": self.status_code,
                **self.details,
            }
        }


class AuthenticationError(HeraldError):
    status_code = 401
    error_type = "authentication_error"


class NotFoundError(HeraldError):
    status_code = 404
    error_type = "not_found"


class ValidationFailedError(HeraldError):
    """A candidate template was rejected by the validation pipeline."""

    status_code = 400
    error_type = "invalid_request_error"

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message, details={"field": field})


class RestorationFailedError(HeraldError):
    status_code = 404
    error_type = "restoration_failed"


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(HeraldError)
    async def herald_error_handler(request: Request, exc: HeraldError) -> ORJSONResponse:
        await logger.awarning(
            "herald.error",
            error_type=exc.error_type,
            message=exc.message,
            status_code=exc.status_code,
            path=request.url.path,
        )
        return ORJSONResponse(
            status_code=exc.status_code,
            content=exc.to_response(),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> ORJSONResponse:
        await logger.aexception(
            "herald.unhandled_error",
            path=request.url.path,
            error=str(exc),
        )
        return ORJSONResponse(
            status_code=500,
            content={
                "error": {
                    "message": "An internal error occurred.",
                    "type": "internal_error",
                    "code": 500,
                }
            },
        )
