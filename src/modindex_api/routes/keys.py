# SPDX-License-Identifier: MIT
"""Publish key management endpoints. All require an admin token."""

from typing import TypeVar

from fastapi import APIRouter, Request
from pydantic import BaseModel, ValidationError

from ..auth import RegistryDep, TokenDep
from ..middleware.errors import InternalError, UnauthorizedError
from ..models import DeleteKeyRequest, ErrorResponse, MessageResponse, PublishKeyRequest

router = APIRouter()

_ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

ModelT = TypeVar("ModelT", bound=BaseModel)


async def _decode_body(request: Request, model: type[ModelT]) -> ModelT:
    """Decode a JSON body; undecodable bodies are internal errors."""
    body = await request.body()
    try:
        return model.model_validate_json(body)
    except ValidationError as exc:
        raise InternalError(f"Could not decode request body: {exc.error_count()} error(s)") from exc


@router.post("/publish_key", status_code=201, response_model=MessageResponse, responses=_ERRORS)
async def add_publish_key(
    request: Request,
    registry: RegistryDep,
    token: TokenDep,
) -> MessageResponse:
    """Register a publish key for a user.

    Body: ``{"user": "...", "pw": "..."}``
    """
    if not registry.authorize_admin(token):
        raise UnauthorizedError("Admin token required")
    key = await _decode_body(request, PublishKeyRequest)
    await registry.add_credential(key.user, key.pw, token)
    return MessageResponse(message=f"Publish key added for {key.user}")


@router.post("/delete_key", response_model=MessageResponse, responses=_ERRORS)
async def delete_publish_key(
    request: Request,
    registry: RegistryDep,
    token: TokenDep,
) -> MessageResponse:
    """Remove a publish key (``{"pw": "..."}``) or all keys of a user (``{"user": "..."}``)."""
    if not registry.authorize_admin(token):
        raise UnauthorizedError("Admin token required")
    key = await _decode_body(request, DeleteKeyRequest)
    await registry.remove_credential(token, token=key.pw, user=key.user)
    if key.pw is not None:
        return MessageResponse(message="Publish key removed")
    return MessageResponse(message=f"Publish keys removed for {key.user}")
