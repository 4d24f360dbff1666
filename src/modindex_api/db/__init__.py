# SPDX-License-Identifier: MIT
"""Database module for the mod registry."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from sqlalchemy import insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from .models import Base, ModRecord, PublishKey

if TYPE_CHECKING:
    from ..config import DatabaseConfig

__all__ = [
    "Base",
    "Database",
    "insert_or_ignore",
    "ModRecord",
    "PublishKey",
    "normalize_database_url",
]


def normalize_database_url(url: str) -> str:
    """Convert a configured database URL to its async driver form.

    A value without a scheme is treated as a SQLite file path.
    """
    if "://" not in url:
        return f"sqlite+aiosqlite:///{url}"
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def _sqlite_file(url: str) -> Optional[Path]:
    prefix = "sqlite+aiosqlite:///"
    if not url.startswith(prefix):
        return None
    path = url[len(prefix) :]
    if not path or path == ":memory:":
        return None
    return Path(path)


class Database:
    """Owns the async engine and session factory for one process.

    Constructed once at startup and shared by the catalog and credential
    store.
    """

    def __init__(self, config: "DatabaseConfig"):
        self.url = normalize_database_url(config.url)

        if sqlite_file := _sqlite_file(self.url):
            sqlite_file.parent.mkdir(parents=True, exist_ok=True)

        if self.url.startswith("sqlite"):
            engine_kwargs: dict = {}
            if _sqlite_file(self.url) is None:
                # in-memory databases exist per connection
                engine_kwargs["poolclass"] = StaticPool
                engine_kwargs["connect_args"] = {"check_same_thread": False}
        else:
            engine_kwargs = {
                "pool_size": config.pool_size,
                "max_overflow": config.max_overflow,
            }

        self.engine: AsyncEngine = create_async_engine(self.url, echo=config.echo, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_all(self) -> None:
        """Create tables that do not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            yield session


async def insert_or_ignore(session: AsyncSession, model: type[Base], values: dict) -> bool:
    """Insert a row unless it collides with a unique constraint.

    Uses ``ON CONFLICT DO NOTHING`` where the dialect supports it, so the
    decision is made by the database even under concurrent inserts.

    Returns:
        True if a row was written
    """
    dialect = session.get_bind().dialect.name
    if dialect in ("sqlite", "postgresql"):
        module = sqlite if dialect == "sqlite" else postgresql
        statement = module.insert(model).values(**values).on_conflict_do_nothing()
        result = await session.execute(statement)
        await session.commit()
        return result.rowcount > 0

    try:
        await session.execute(insert(model).values(**values))
        await session.commit()
    except IntegrityError:
        await session.rollback()
        return False
    return True
