"""Error taxonomy and the JSON handlers that render it.

Every error leaves the server as ``{"message": "..."}``. Authentication
failures are deliberately generic so clients cannot tell which part of the
credential was wrong; unexpected failures are logged with full detail and
answered with a fixed message.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
INTERNAL_ERROR = "Internal server error"


class PortalError(HTTPException):
    """Base class for errors surfaced to API clients."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Bad request"

    def __init__(self, message: str | None = None, headers: dict[str, str] | None = None) -> None:
        super().__init__(
            status_code=type(self).status_code,
            detail=message or type(self).message,
            headers=headers,
        )


class ValidationError(PortalError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class AuthenticationError(PortalError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = INVALID_CREDENTIALS


class AccountDeactivated(AuthenticationError):
    message = "Account is deactivated"


class Unauthenticated(AuthenticationError):
    message = "Not authenticated"


class AuthorizationError(PortalError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Forbidden"


class DuplicateResourceError(PortalError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Resource already exists"


class DuplicateUsername(DuplicateResourceError):
    message = "Username already exists"


class DuplicateEmail(DuplicateResourceError):
    message = "Email already exists"


class InvalidOrExpiredToken(PortalError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid or expired reset token"


class RateLimitExceeded(PortalError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    message = "Too many requests, please try again later."

    def __init__(self, message: str | None = None, *, retry_after: int = 60) -> None:
        super().__init__(message, headers={"Retry-After": str(retry_after)})
        self.retry_after = retry_after


def first_validation_message(exc: RequestValidationError) -> str:
    """Return the message of the first failing field."""

    errors = exc.errors()
    if not errors:
        return ValidationError.message
    first = errors[0]
    if first.get("type") == "value_error":
        cause = (first.get("ctx") or {}).get("error")
        if cause is not None:
            return str(cause)
    if first.get("type") == "json_invalid":
        return "Malformed JSON body"
    return str(first.get("msg") or ValidationError.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": first_validation_message(exc)},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": INTERNAL_ERROR},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
