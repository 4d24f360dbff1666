# SPDX-License-Identifier: MIT
"""Error taxonomy and exception handlers.

Every failure surfaced by the registry maps to exactly one error code.
"""

from dataclasses import dataclass

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..logging import get_logger

logger = get_logger(__name__)


class ErrorCode:
    """Standard API error codes."""

    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_REQUEST = "INVALID_REQUEST"
    INTERNAL_ERROR = "INTERNAL_ERROR"


ERROR_STATUS_CODES = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.INTERNAL_ERROR: 500,
}


@dataclass(eq=False)
class APIError(Exception):
    """Base registry exception with structured error response.

    Attributes:
        code: Error code from ErrorCode class
        message: Human-readable error message
    """

    code: str
    message: str

    def __str__(self) -> str:
        return self.message

    @property
    def status_code(self) -> int:
        """Get HTTP status code for this error."""
        return ERROR_STATUS_CODES.get(self.code, 500)

    def to_response(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
            }
        }


class NotFoundError(APIError):
    """Catalog row, artifact file or publish key does not exist."""

    def __init__(self, message: str = "Not found"):
        super().__init__(code=ErrorCode.NOT_FOUND, message=message)


class ConflictError(APIError):
    """Version or publish key already exists."""

    def __init__(self, message: str = "Already exists"):
        super().__init__(code=ErrorCode.CONFLICT, message=message)


class UnauthorizedError(APIError):
    """Missing or invalid token."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(code=ErrorCode.UNAUTHORIZED, message=message)


class InvalidRequestError(APIError):
    """Malformed query or request body fields."""

    def __init__(self, message: str = "Invalid request"):
        super().__init__(code=ErrorCode.INVALID_REQUEST, message=message)


class InternalError(APIError):
    """Storage engine, filesystem or body decoding failure."""

    def __init__(self, message: str = "An unexpected error occurred"):
        super().__init__(code=ErrorCode.INTERNAL_ERROR, message=message)


def version_not_found(package: str, version: object) -> NotFoundError:
    return NotFoundError(f"Version '{version}' of '{package}' not found")


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions."""
    if exc.status_code >= 500:
        logger.error("request failed", path=request.url.path, code=exc.code, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render query and path validation failures as INVALID_REQUEST."""
    fields = ", ".join(".".join(str(p) for p in error["loc"]) for error in exc.errors())
    error = InvalidRequestError(f"Invalid request parameters: {fields}")
    return JSONResponse(status_code=error.status_code, content=error.to_response())


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception("unhandled error", path=request.url.path)
    return JSONResponse(status_code=500, content=InternalError().to_response())


def add_error_handlers(app: FastAPI, catch_all: bool = True) -> None:
    """Register error handlers with the FastAPI application.

    With ``catch_all`` disabled (debug mode) unexpected exceptions propagate
    with their traceback instead of being rendered as INTERNAL_ERROR.
    """
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    if catch_all:
        app.add_exception_handler(Exception, generic_error_handler)
