# SPDX-License-Identifier: MIT
"""Tests for the artifact store."""

import asyncio
from pathlib import Path
from unittest.mock import patch

import aiofiles
import pytest

from modindex_api.artifacts import ArtifactStore, validate_package_id
from modindex_api.middleware.errors import InvalidRequestError, NotFoundError
from modindex_version import Version

from conftest import TruncatingFile

V100 = Version(1, 0, 0)
BINARY = bytes(range(256)) + b"\x00\xff\xfe\x80\r\n"


class TestPaths:
    """Tests for on-disk layout."""

    def test_path_layout(self, tmp_path: Path):
        store = ArtifactStore(tmp_path)
        assert store.path_for("bshook", Version(1, 2, 3)) == tmp_path / "bshook" / "1" / "2" / "3"

    def test_prerelease_shares_triple_path(self, tmp_path: Path):
        store = ArtifactStore(tmp_path)
        assert store.path_for("m", Version(1, 0, 0, "beta")) == store.path_for("m", V100)

    @pytest.mark.parametrize("bad", ["", ".", "..", "a/b", "a\\b", "nul\x00"])
    def test_unsafe_ids_rejected(self, bad):
        with pytest.raises(InvalidRequestError):
            validate_package_id(bad)

    def test_invalid_shard_count(self, tmp_path: Path):
        with pytest.raises(ValueError):
            ArtifactStore(tmp_path, shards=0)


@pytest.mark.asyncio
class TestArtifactStore:
    """Tests for get, put, remove and exists."""

    async def test_put_then_get_is_byte_exact(self, artifacts: ArtifactStore):
        await artifacts.put("hsv", V100, BINARY)
        assert await artifacts.get("hsv", V100) == BINARY
        assert artifacts.path_for("hsv", V100).read_bytes() == BINARY

    async def test_get_reads_disk_on_cold_cache(self, tmp_path: Path):
        writer = ArtifactStore(tmp_path)
        await writer.put("hsv", V100, BINARY)

        reader = ArtifactStore(tmp_path)
        assert not reader.cached("hsv", V100)
        assert await reader.get("hsv", V100) == BINARY
        assert reader.cached("hsv", V100)

    async def test_get_missing(self, artifacts: ArtifactStore):
        with pytest.raises(NotFoundError):
            await artifacts.get("bshook", Version(3, 0, 0))

    async def test_get_after_remove_is_missing(self, artifacts: ArtifactStore):
        await artifacts.put("m", V100, b"x")
        await artifacts.remove("m", V100)
        with pytest.raises(NotFoundError):
            await artifacts.get("m", V100)

    async def test_empty_artifact(self, artifacts: ArtifactStore):
        await artifacts.put("empty", V100, b"")
        assert await artifacts.get("empty", V100) == b""

    async def test_put_overwrites(self, artifacts: ArtifactStore):
        await artifacts.put("m", V100, b"one")
        await artifacts.put("m", V100, b"two")
        assert await artifacts.get("m", V100) == b"two"

    async def test_remove_prunes_empty_directories(self, artifacts: ArtifactStore):
        await artifacts.put("m", V100, b"x")
        await artifacts.remove("m", V100)

        assert not (artifacts.root / "m").exists()
        assert artifacts.root.exists()
        assert not artifacts.cached("m", V100)

    async def test_remove_keeps_shared_directories(self, artifacts: ArtifactStore):
        await artifacts.put("m", Version(1, 0, 0), b"a")
        await artifacts.put("m", Version(1, 0, 1), b"b")
        await artifacts.put("m", Version(1, 1, 0), b"c")

        await artifacts.remove("m", Version(1, 0, 0))
        assert (artifacts.root / "m" / "1" / "0" / "1").is_file()

        await artifacts.remove("m", Version(1, 0, 1))
        assert not (artifacts.root / "m" / "1" / "0").exists()
        assert (artifacts.root / "m" / "1" / "1" / "0").is_file()

    async def test_remove_missing_changes_nothing(self, artifacts: ArtifactStore):
        await artifacts.put("m", V100, b"x")
        with pytest.raises(NotFoundError):
            await artifacts.remove("m", Version(1, 0, 1))
        assert await artifacts.exists("m", V100)

    async def test_exists(self, artifacts: ArtifactStore):
        assert not await artifacts.exists("m", V100)
        await artifacts.put("m", V100, b"x")
        assert await artifacts.exists("m", V100)

    async def test_failed_write_evicts_cache(self, artifacts: ArtifactStore):
        with patch("modindex_api.artifacts.aiofiles.open", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                await artifacts.put("m", V100, b"x")
        assert not artifacts.cached("m", V100)

    async def test_partial_write_leaves_no_file(self, artifacts: ArtifactStore):
        with patch("modindex_api.artifacts.aiofiles.open", side_effect=TruncatingFile):
            with pytest.raises(OSError):
                await artifacts.put("m", V100, b"abcdef")

        assert not artifacts.path_for("m", V100).exists()
        assert not await artifacts.exists("m", V100)
        assert list(artifacts.root.rglob("*")) == []
        with pytest.raises(NotFoundError):
            await artifacts.get("m", V100)

    async def test_failed_overwrite_keeps_previous_bytes(self, artifacts: ArtifactStore):
        await artifacts.put("m", V100, b"first")
        with patch("modindex_api.artifacts.aiofiles.open", side_effect=TruncatingFile):
            with pytest.raises(OSError):
                await artifacts.put("m", V100, b"second")

        assert artifacts.path_for("m", V100).read_bytes() == b"first"
        assert [p.name for p in artifacts.path_for("m", V100).parent.iterdir()] == ["0"]

    async def test_concurrent_cold_reads_load_once(self, tmp_path: Path):
        await ArtifactStore(tmp_path).put("m", V100, BINARY)
        store = ArtifactStore(tmp_path, shards=1)

        real_open = aiofiles.open
        opened = []

        def counting_open(*args, **kwargs):
            opened.append(args[0])
            return real_open(*args, **kwargs)

        with patch("modindex_api.artifacts.aiofiles.open", side_effect=counting_open):
            results = await asyncio.gather(*(store.get("m", V100) for _ in range(10)))

        assert all(r == BINARY for r in results)
        assert len(opened) == 1

    async def test_warm_read_not_blocked_by_miss(self, tmp_path: Path):
        store = ArtifactStore(tmp_path, shards=1)
        await store.put("warm", V100, b"warm")

        shard = store._shards[0]
        async with shard.lock:
            # a miss would wait on this lock; a warm hit must not
            data = await asyncio.wait_for(store.get("warm", V100), timeout=1)
        assert data == b"warm"
