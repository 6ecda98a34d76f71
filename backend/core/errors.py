# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Application error taxonomy and the FastAPI handlers that render it.

Handlers and workflow code raise one of the ``AppError`` subclasses below;
``register_error_handlers`` turns them into JSON bodies of the form::

    {"error": "Not Found", "message": "Post not found", ...extra}

Anything else that escapes a handler (including ``SQLAlchemyError``) is
logged with its traceback and answered with a generic 500 – internal detail
never reaches the response body.
"""

from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.logger import logger


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Internal Server Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_body(self) -> dict[str, Any]:
        return {"error": self.error, "message": self.message}

    def headers(self) -> Optional[dict[str, str]]:
        return None


class ValidationError(AppError):
    """400 – carries a field -> message map when the failure is per-field."""

    status_code = status.HTTP_400_BAD_REQUEST
    error = "Validation Error"

    def __init__(self, message: str = "Invalid input", details: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.details = details or {}

    def to_body(self) -> dict[str, Any]:
        body = super().to_body()
        if self.details:
            body["details"] = self.details
        return body


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Unauthorized"

    def __init__(self, message: str = "Authentication required", reason: str = "no_session"):
        super().__init__(message)
        self.reason = reason

    def to_body(self) -> dict[str, Any]:
        return {**super().to_body(), "reason": self.reason}


class AuthorizationError(AppError):
    """403 – ``reason`` is machine readable: insufficient_role / not_owner."""

    status_code = status.HTTP_403_FORBIDDEN
    error = "Forbidden"

    def __init__(self, message: str = "Insufficient permissions", reason: str = "insufficient_role"):
        super().__init__(message)
        self.reason = reason

    def to_body(self) -> dict[str, Any]:
        return {**super().to_body(), "reason": self.reason}


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not Found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    error = "Conflict"


class RateLimitError(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error = "Rate Limit Exceeded"

    def __init__(self, message: str, retry_after: int):
        super().__init__(message)
        self.retry_after = retry_after

    def to_body(self) -> dict[str, Any]:
        return {**super().to_body(), "retryAfter": self.retry_after}

    def headers(self) -> Optional[dict[str, str]]:
        return {"Retry-After": str(self.retry_after)}


class InternalError(AppError):
    pass


def format_validation_errors(errors) -> dict[str, str]:
    """
    Flatten pydantic / FastAPI error dicts into ``{"field": "message"}``.
    The request-location prefix ("body", "query") is dropped.  The first
    message per field wins.
    """
    formatted: dict[str, str] = {}
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        key = ".".join(loc) or "body"
        formatted.setdefault(key, err.get("msg", "Invalid value"))
    return formatted


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=exc.headers())


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    err = ValidationError("Invalid input", format_validation_errors(exc.errors()))
    return JSONResponse(status_code=err.status_code, content=err.to_body())


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal Server Error", "message": "An unexpected error occurred"},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
