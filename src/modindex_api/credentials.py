# SPDX-License-Identifier: MIT
"""Publish key storage.

Publish keys are opaque tokens owned by a user. Presence of a key is the only
check made before a publish; there is no expiry or scoping.
"""

import hashlib
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import delete, select

from .db import Database, PublishKey, insert_or_ignore


@dataclass(frozen=True)
class Credential:
    """A publish key and the user who owns it."""

    token: str
    user: str


def hash_token(token: str) -> str:
    """Hash a token for storage and lookup."""
    return hashlib.sha256(token.encode()).hexdigest()


class CredentialStore:
    """Maps publish keys to their owning users."""

    def __init__(self, database: Database):
        self.database = database

    async def insert(self, user: str, token: str) -> bool:
        """Store a publish key for ``user``.

        Returns:
            True if stored, False if the token is already registered
        """
        values = {"token_hash": hash_token(token), "user": user}

        async with self.database.session() as session:
            return await insert_or_ignore(session, PublishKey, values)

    async def resolve_by_token(self, token: str) -> Optional[Credential]:
        """Look up the owner of ``token``."""
        query = select(PublishKey.user).where(PublishKey.token_hash == hash_token(token))
        async with self.database.session() as session:
            result = await session.execute(query)
            user = result.scalar_one_or_none()
        if user is None:
            return None
        return Credential(token=token, user=user)

    async def delete_by_user(self, user: str) -> bool:
        """Remove every key owned by ``user``."""
        async with self.database.session() as session:
            result = await session.execute(delete(PublishKey).where(PublishKey.user == user))
            await session.commit()
            return result.rowcount > 0

    async def delete_by_token(self, token: str) -> bool:
        """Remove a single key."""
        statement = delete(PublishKey).where(PublishKey.token_hash == hash_token(token))
        async with self.database.session() as session:
            result = await session.execute(statement)
            await session.commit()
            return result.rowcount > 0
