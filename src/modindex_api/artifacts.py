# SPDX-License-Identifier: MIT
"""Artifact storage on the local filesystem with an in-memory read cache.

Artifacts live at ``{root}/{id}/{major}/{minor}/{patch}`` as raw bytes. The
same derivation is used for reads, writes and removal.
"""

import asyncio
from pathlib import Path
from typing import Union

import aiofiles
import aiofiles.os

from modindex_version import Version

from .logging import get_logger
from .middleware.errors import InvalidRequestError, version_not_found

logger = get_logger(__name__)

CacheKey = tuple[str, tuple[int, int, int]]

_FORBIDDEN_ID_CHARACTERS = ("/", "\\", "\x00")


def validate_package_id(package_id: str) -> None:
    """Reject ids that are not a single, safe path component.

    Raises:
        InvalidRequestError: If the id is empty or could escape the storage root
    """
    if not package_id or package_id in (".", ".."):
        raise InvalidRequestError(f"Invalid package id: {package_id!r}")
    if any(c in package_id for c in _FORBIDDEN_ID_CHARACTERS):
        raise InvalidRequestError(f"Invalid package id: {package_id!r}")


class _CacheShard:
    """One independently locked partition of the artifact cache."""

    __slots__ = ("entries", "lock")

    def __init__(self) -> None:
        self.entries: dict[CacheKey, bytes] = {}
        self.lock = asyncio.Lock()


class ArtifactStore:
    """Content store keyed by (package id, version).

    The cache is split into shards by key hash. Warm reads take no lock;
    entries are only mutated while holding their shard's lock, so a cache miss
    blocks other misses in the same shard but never reads of warm keys.
    """

    def __init__(self, root: Union[str, Path], shards: int = 16):
        if shards < 1:
            raise ValueError("shards must be at least 1")
        self.root = Path(root)
        self._shards = [_CacheShard() for _ in range(shards)]

    def path_for(self, package_id: str, version: Version) -> Path:
        validate_package_id(package_id)
        return (
            self.root
            / package_id
            / str(version.major)
            / str(version.minor)
            / str(version.patch)
        )

    def _shard_for(self, key: CacheKey) -> _CacheShard:
        return self._shards[hash(key) % len(self._shards)]

    def cached(self, package_id: str, version: Version) -> bool:
        """Whether the artifact is currently held in the cache."""
        key = (package_id, version.catalog_key)
        return key in self._shard_for(key).entries

    async def get(self, package_id: str, version: Version) -> bytes:
        """Return the stored bytes, loading them from disk on a cache miss.

        Raises:
            NotFoundError: If no artifact is stored for the key
        """
        path = self.path_for(package_id, version)
        key = (package_id, version.catalog_key)
        shard = self._shard_for(key)

        data = shard.entries.get(key)
        if data is not None:
            return data

        async with shard.lock:
            # another task may have loaded it while we waited
            data = shard.entries.get(key)
            if data is not None:
                return data

            try:
                async with aiofiles.open(path, "rb") as f:
                    data = await f.read()
            except (FileNotFoundError, NotADirectoryError) as exc:
                raise version_not_found(package_id, version) from exc

            shard.entries[key] = data
            logger.debug("artifact cached", package=package_id, version=str(version))
            return data

    async def put(self, package_id: str, version: Version, data: bytes) -> None:
        """Cache ``data`` and write it to disk, replacing any existing file.

        Bytes go to a sibling temporary file that is moved onto the leaf once
        complete, so a failed write never leaves a partial artifact. On failure
        the cache entry, the temporary file and any directories left empty are
        removed again.
        """
        path = self.path_for(package_id, version)
        partial = path.with_name(f".{path.name}.partial")
        key = (package_id, version.catalog_key)
        shard = self._shard_for(key)
        data = bytes(data)

        async with shard.lock:
            shard.entries[key] = data

        try:
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
            async with aiofiles.open(partial, "wb") as f:
                await f.write(data)
            await aiofiles.os.replace(partial, path)
        except OSError:
            await self._evict(key)
            await self._discard(partial)
            raise

    async def remove(self, package_id: str, version: Version) -> None:
        """Delete the artifact file and prune directories it leaves empty.

        Raises:
            NotFoundError: If no artifact file exists for the key
        """
        path = self.path_for(package_id, version)
        try:
            await aiofiles.os.remove(path)
        except (FileNotFoundError, NotADirectoryError) as exc:
            raise version_not_found(package_id, version) from exc

        await self._evict((package_id, version.catalog_key))
        await self._prune_empty_directories(path)

    async def exists(self, package_id: str, version: Version) -> bool:
        return await aiofiles.os.path.isfile(self.path_for(package_id, version))

    async def _evict(self, key: CacheKey) -> None:
        shard = self._shard_for(key)
        async with shard.lock:
            shard.entries.pop(key, None)

    async def _discard(self, partial: Path) -> None:
        try:
            await aiofiles.os.remove(partial)
        except FileNotFoundError:
            pass
        await self._prune_empty_directories(partial)

    def _key_directories(self, path: Path) -> list[Path]:
        """Directories created for the artifact at ``path``, deepest first."""
        relative = path.relative_to(self.root)
        return [self.root / parent for parent in relative.parents if parent != Path(".")]

    async def _prune_empty_directories(self, path: Path) -> None:
        for directory in self._key_directories(path):
            try:
                await aiofiles.os.rmdir(directory)
            except OSError:
                # not empty, or already gone
                break
