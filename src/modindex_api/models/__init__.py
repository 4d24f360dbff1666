# SPDX-License-Identifier: MIT
"""Pydantic models for API requests and responses."""

from .requests import DeleteKeyRequest, PublishKeyRequest
from .responses import ErrorResponse, MessageResponse, ModVersionModel

__all__ = [
    # Request models
    "DeleteKeyRequest",
    "PublishKeyRequest",
    # Response models
    "ErrorResponse",
    "MessageResponse",
    "ModVersionModel",
]
