# SPDX-License-Identifier: MIT
"""Middleware and error handling."""

from .errors import (
    APIError,
    ConflictError,
    ErrorCode,
    InternalError,
    InvalidRequestError,
    NotFoundError,
    UnauthorizedError,
    add_error_handlers,
)
from .logging import RequestLoggingMiddleware

__all__ = [
    "APIError",
    "ConflictError",
    "ErrorCode",
    "InternalError",
    "InvalidRequestError",
    "NotFoundError",
    "RequestLoggingMiddleware",
    "UnauthorizedError",
    "add_error_handlers",
]
