# SPDX-License-Identifier: MIT
"""Token extraction and registry dependencies for routes."""

from typing import Annotated, Optional

from fastapi import Depends, Header, Request

from .registry import Registry


def parse_authorization_header(auth_header: Optional[str]) -> Optional[str]:
    """Parse the Authorization header to extract the token.

    Supports:
    - Bearer <token>
    - Token <token>
    - <token> (raw token, as sent by existing mod managers)

    Returns:
        The extracted token or None if the header is missing or blank.
    """
    if not auth_header:
        return None

    auth_header = auth_header.strip()

    if auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip() or None

    if auth_header.lower().startswith("token "):
        return auth_header[6:].strip() or None

    return auth_header or None


def get_registry(request: Request) -> Registry:
    """FastAPI dependency returning the registry built at startup."""
    return request.app.state.registry


async def get_token(
    authorization: Annotated[Optional[str], Header()] = None,
) -> Optional[str]:
    """FastAPI dependency returning the presented token, if any."""
    return parse_authorization_header(authorization)


RegistryDep = Annotated[Registry, Depends(get_registry)]
TokenDep = Annotated[Optional[str], Depends(get_token)]
