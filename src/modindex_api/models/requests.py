# SPDX-License-Identifier: MIT
"""Pydantic models for request bodies."""

from typing import Optional

from pydantic import BaseModel, Field


class PublishKeyRequest(BaseModel):
    """Body of ``POST /publish_key``."""

    user: str = Field(description="User owning the key")
    pw: str = Field(min_length=1, description="The publish key itself")


class DeleteKeyRequest(BaseModel):
    """Body of ``POST /delete_key``.

    ``pw`` removes a single key; ``user`` removes every key of that user.
    """

    pw: Optional[str] = None
    user: Optional[str] = None
