# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception handling for the API.
# "Errors should tell HOW to fix, not just WHAT failed."
#
# Every error response uses the same envelope as successful ones:
#   {"success": false, "message": "...", "code": "...", ...}
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class TodoAppException(Exception):
    """
    Base exception for the To-do API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "TODO_APP_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}
        self.headers = headers

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response envelope."""
        result: dict[str, Any] = {
            "success": False,
            "message": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Authentication Exceptions
# =============================================================================

class UnauthenticatedError(TodoAppException):
    """Raised when a request has no usable bearer token."""

    def __init__(self, message: str = "Not authorized, no token", reason: str = "no_token"):
        super().__init__(
            message=message,
            code="UNAUTHENTICATED",
            status_code=401,
            suggestion="Log in and send the token as 'Authorization: Bearer <token>'",
            headers={"WWW-Authenticate": "Bearer"},
        )
        self.reason = reason


class InvalidCredentialsError(TodoAppException):
    """Raised when login email/password don't match a user."""

    def __init__(self):
        super().__init__(
            message="Invalid credentials",
            code="INVALID_CREDENTIALS",
            status_code=401,
        )


# =============================================================================
# Request Exceptions
# =============================================================================

class ValidationFailedError(TodoAppException):
    """
    Raised when request input breaks one or more field rules.

    Carries every violation, not just the first.
    """

    def __init__(self, errors: list[dict[str, str]]):
        super().__init__(
            message="Validation failed",
            code="VALIDATION_FAILED",
            status_code=400,
        )
        self.errors = errors

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["errors"] = self.errors
        return result


class ConflictError(TodoAppException):
    """Raised when a unique value (e.g. email) is already taken."""

    def __init__(self, message: str = "User already exists", field: str = "email"):
        super().__init__(
            message=message,
            code="CONFLICT",
            status_code=400,
            suggestion="Log in instead, or register with a different email",
            details={"field": field},
        )


class NotFoundError(TodoAppException):
    """
    Raised when a record doesn't exist or isn't owned by the caller.

    Both cases produce the same response so record existence never leaks.
    """

    def __init__(self, resource: str = "Resource"):
        super().__init__(
            message=f"{resource} not found",
            code="NOT_FOUND",
            status_code=404,
        )


class ForbiddenError(TodoAppException):
    """Raised when privacy settings hide a record from the caller."""

    def __init__(self, message: str = "Profile is private"):
        super().__init__(
            message=message,
            code="FORBIDDEN",
            status_code=403,
        )


# =============================================================================
# Rate Limiting
# =============================================================================

class RateLimitedError(TodoAppException):
    """Raised when a client has used up its requests for the current window."""

    def __init__(self, message: str, retry_after: int):
        super().__init__(
            message=message,
            code="RATE_LIMITED",
            status_code=429,
            suggestion=f"Wait {retry_after} seconds before trying again",
            headers={"Retry-After": str(retry_after)},
        )
        self.retry_after = retry_after


# =============================================================================
# Exception Handlers
# =============================================================================

async def todo_app_exception_handler(
    request: Request,
    exc: TodoAppException
) -> JSONResponse:
    """Convert TodoAppException to the JSON error envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


def format_pydantic_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """
    Turn pydantic error dicts into {field, message} pairs.

    Custom validator messages come through without pydantic's
    "Value error, " prefix.
    """
    formatted = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        ctx_error = (error.get("ctx") or {}).get("error")
        if error.get("type") == "value_error" and ctx_error is not None:
            message = str(ctx_error)
        else:
            message = error.get("msg", "Invalid value")
        formatted.append({"field": ".".join(loc) or "body", "message": message})
    return formatted


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle FastAPI request validation errors (e.g. malformed JSON).

    Uses the same 400 shape as ValidationFailedError.
    """
    return JSONResponse(
        status_code=400,
        content=ValidationFailedError(format_pydantic_errors(exc.errors())).to_dict(),
    )
