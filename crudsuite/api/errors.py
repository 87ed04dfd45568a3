"""
API error types and the handlers that turn them into the error envelope.

Every failure body has the same shape::

    {"error": {"message": str, "type": str, "details": dict | list}}
"""

import logging
from typing import Any, Union
from uuid import UUID

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base class for errors a service raises on purpose."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidRequestError(APIError):
    """Business rule rejected an otherwise well-formed request."""

    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(APIError):
    """Login or refresh credentials were wrong."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized", details: dict = None):
        super().__init__(message, details)


class ForbiddenError(APIError):
    """Role check or ownership check failed."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Forbidden", details: dict = None):
        super().__init__(message, details)


class ResourceNotFoundError(APIError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id: Union[int, str, UUID]):
        super().__init__(
            f"{resource} not found: {resource_id}",
            {"resource": resource, "id": str(resource_id)},
        )


class ConflictError(APIError):
    """Write collides with existing state (duplicate, closed, already decided)."""

    status_code = status.HTTP_409_CONFLICT


def error_body(message: str, error_type: str, details: Any = None) -> dict:
    return {"error": {"message": message, "type": error_type, "details": details if details is not None else {}}}


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "-")


def setup_error_handlers(app: FastAPI) -> None:
    """
    Register the envelope handlers on the app.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            f"[{_request_id(request)}] {exc.__class__.__name__} on {request.method} {request.url.path}: "
            f"{exc.message}"
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, exc.__class__.__name__, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info(f"[{_request_id(request)}] Validation failed on {request.url.path}")

        errors = [
            {
                "loc": list(error.get("loc", [])),
                "msg": str(error.get("msg", "")),
                "type": error.get("type", ""),
            }
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=error_body("Request validation failed", "ValidationError", errors),
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        # Lost a race against a unique constraint the service already checks for
        logger.warning(f"[{_request_id(request)}] Integrity error on {request.url.path}: {exc.orig}")
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=error_body("Resource conflicts with existing data", "ConflictError"),
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        logger.warning(f"[{_request_id(request)}] Value error on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(str(exc), "ValueError"),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"[{_request_id(request)}] Unexpected error: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("An unexpected error occurred", "InternalServerError"),
        )
