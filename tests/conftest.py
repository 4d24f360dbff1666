# SPDX-License-Identifier: MIT
"""Pytest fixtures for registry tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from modindex_api import APIConfig, create_app
from modindex_api.artifacts import ArtifactStore
from modindex_api.catalog import VersionCatalog
from modindex_api.credentials import CredentialStore
from modindex_api.db import Database
from modindex_api.registry import Registry

ADMIN_TOKEN = "admin_password"
PUBLISH_TOKEN = "password"


@pytest.fixture
def test_config(tmp_path: Path) -> APIConfig:
    """Create test configuration with a SQLite file and artifact root under tmp_path."""
    config = APIConfig()
    config.database.url = f"sqlite+aiosqlite:///{tmp_path / 'mods.db'}"
    config.database.echo = False
    config.storage.downloads_path = str(tmp_path / "downloads")
    config.storage.cache_shards = 4
    config.auth.admin_tokens = frozenset({ADMIN_TOKEN})
    return config


@pytest_asyncio.fixture
async def database(test_config: APIConfig) -> AsyncGenerator[Database, None]:
    """Create the test database with all tables."""
    db = Database(test_config.database)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def catalog(database: Database) -> VersionCatalog:
    return VersionCatalog(database)


@pytest.fixture
def credentials(database: Database) -> CredentialStore:
    return CredentialStore(database)


@pytest.fixture
def artifacts(test_config: APIConfig) -> ArtifactStore:
    return ArtifactStore(test_config.storage.downloads_path, shards=test_config.storage.cache_shards)


@pytest_asyncio.fixture
async def registry(
    test_config: APIConfig,
    catalog: VersionCatalog,
    credentials: CredentialStore,
    artifacts: ArtifactStore,
) -> Registry:
    """Registry with one publish key registered for ``user``."""
    registry = Registry(catalog, credentials, artifacts, test_config.auth.admin_tokens)
    await credentials.insert("user", PUBLISH_TOKEN)
    return registry


@pytest.fixture
def app(test_config: APIConfig, registry: Registry):
    """Create test FastAPI application around the test registry."""
    return create_app(test_config, registry=registry)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


class TruncatingFile:
    """Stand-in for an aiofiles handle whose disk fills up halfway through a write."""

    def __init__(self, path, mode="r", *args, **kwargs):
        self.path = Path(path)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    async def write(self, data: bytes) -> int:
        self.path.write_bytes(data[: len(data) // 2])
        raise OSError(28, "No space left on device")
