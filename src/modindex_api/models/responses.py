# SPDX-License-Identifier: MIT
"""Pydantic models for API responses."""

from pydantic import BaseModel, Field

from ..resolution import ModVersion


class ModVersionModel(BaseModel):
    """A published version of a mod."""

    id: str
    version: str = Field(description="Semantic version, e.g. 1.2.0")

    @classmethod
    def from_entry(cls, entry: ModVersion) -> "ModVersionModel":
        return cls(id=entry.id, version=str(entry.version))


class MessageResponse(BaseModel):
    """Acknowledgement of a mutation."""

    message: str


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: dict = Field(description="Error object containing code and message")
