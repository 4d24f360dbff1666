# SPDX-License-Identifier: MIT
"""Mod listing, resolution, download, publish and delete endpoints."""

from typing import Union

from fastapi import APIRouter, Query, Request
from fastapi.responses import Response

from modindex_version import (
    InvalidRequirementError,
    InvalidVersionError,
    Version,
    parse_requirement,
    parse_version,
)

from ..auth import RegistryDep, TokenDep
from ..middleware.errors import InvalidRequestError, NotFoundError
from ..models import ErrorResponse, MessageResponse, ModVersionModel

router = APIRouter()

_ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


def _path_version(package_id: str, version: str) -> Version:
    """Parse the version path segment; an invalid one names no resource."""
    try:
        return parse_version(version)
    except InvalidVersionError as exc:
        raise NotFoundError(f"Version '{version}' of '{package_id}' not found") from exc


@router.get("/", response_model=list[str])
async def list_mods(registry: RegistryDep) -> list[str]:
    """List every mod id with at least one published version."""
    return await registry.list_ids()


@router.get(
    "/{package_id}",
    response_model=Union[ModVersionModel, list[ModVersionModel]],
    responses=_ERRORS,
)
async def resolve_mod(
    package_id: str,
    registry: RegistryDep,
    req: str = Query("*", description="Version requirement, e.g. ^1.2 or >=1.0, <2"),
    limit: int = Query(1, description="1 for the newest match, 0 for all, n for the newest n"),
) -> Union[ModVersionModel, list[ModVersionModel]]:
    """Resolve versions of a mod matching a requirement, newest first.

    With the default limit of 1 a single object is returned and a missing
    match is a 404. Any other limit returns a (possibly empty) list.
    """
    try:
        requirement = parse_requirement(req)
    except InvalidRequirementError as exc:
        raise InvalidRequestError(exc.message) from exc

    result = await registry.resolve(package_id, requirement, limit)

    if isinstance(result, list):
        return [ModVersionModel.from_entry(entry) for entry in result]
    if result is None:
        raise NotFoundError(f"No version of '{package_id}' matches '{req}'")
    return ModVersionModel.from_entry(result)


@router.get("/{package_id}/{version}", responses=_ERRORS)
async def download_mod(package_id: str, version: str, registry: RegistryDep) -> Response:
    """Return the raw bytes of a published version."""
    data = await registry.download(package_id, _path_version(package_id, version))
    return Response(content=data, media_type="application/octet-stream")


@router.post(
    "/{package_id}/{version}",
    status_code=201,
    response_model=ModVersionModel,
    responses=_ERRORS,
)
async def publish_mod(
    package_id: str,
    version: str,
    request: Request,
    registry: RegistryDep,
    token: TokenDep,
) -> ModVersionModel:
    """Publish a new version. The request body is stored verbatim.

    Requires a publish key. Publishing an existing version is a 409 and
    leaves the stored bytes untouched.
    """
    parsed = _path_version(package_id, version)
    data = await request.body()
    entry = await registry.publish(package_id, parsed, data, token)
    return ModVersionModel.from_entry(entry)


@router.delete("/{package_id}/{version}", response_model=MessageResponse, responses=_ERRORS)
async def delete_mod(
    package_id: str,
    version: str,
    registry: RegistryDep,
    token: TokenDep,
) -> MessageResponse:
    """Delete a published version and its artifact. Requires an admin token."""
    parsed = _path_version(package_id, version)
    await registry.delete(package_id, parsed, token)
    return MessageResponse(message=f"Deleted {package_id} version {parsed}")
