"""
Tests for the release archive cache.
"""

import asyncio
import hashlib
import os
import sys

import pytest

from api_console_sources.cache import SourcesCache, normalize_tag
from api_console_sources.exceptions import CacheWriteError

pytestmark = [pytest.mark.integration]


@pytest.fixture
def cache(tmp_path):
    return SourcesCache(cache_folder=str(tmp_path / "cache"))


class TestNormalizeTag:
    @pytest.mark.parametrize(
        "tag,expected",
        [
            ("v5.0.0", "5.0.0"),
            ("5.0.0", "5.0.0"),
            ("v5.0.0-preview", "5.0.0-preview"),
            ("vv1", "v1"),
            ("", ""),
        ],
    )
    def test_strips_one_leading_v(self, tag, expected):
        assert normalize_tag(tag) == expected


class TestLocateAppDir:
    def test_uses_appdata(self, monkeypatch, tmp_path):
        monkeypatch.setenv("APPDATA", str(tmp_path))

        folder = SourcesCache().cache_folder

        assert folder == os.path.join(str(tmp_path), "api-console", "cache", "sources")

    def test_linux_config_folder(self, monkeypatch, tmp_path):
        monkeypatch.delenv("APPDATA", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.setattr(sys, "platform", "linux")

        folder = SourcesCache().cache_folder

        assert folder == os.path.join(
            str(tmp_path), ".config", "api-console", "cache", "sources"
        )

    def test_darwin_preferences_folder(self, monkeypatch, tmp_path):
        monkeypatch.delenv("APPDATA", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.setattr(sys, "platform", "darwin")

        folder = SourcesCache().cache_folder

        assert folder == os.path.join(
            str(tmp_path), "Library", "Preferences", "api-console", "cache", "sources"
        )

    def test_other_platform_fallback(self, monkeypatch):
        monkeypatch.delenv("APPDATA", raising=False)
        monkeypatch.setattr(sys, "platform", "sunos5")

        folder = SourcesCache().cache_folder

        assert folder == os.path.join("/var/local", "api-console", "cache", "sources")

    def test_folder_is_fixed_at_construction(self, monkeypatch, tmp_path):
        monkeypatch.setenv("APPDATA", str(tmp_path / "first"))
        cache = SourcesCache()
        monkeypatch.setenv("APPDATA", str(tmp_path / "second"))

        assert str(tmp_path / "first") in cache.cache_folder


class TestEntries:
    def test_entry_path_ignores_leading_v(self, cache):
        assert cache.entry_path("v5.0.0") == cache.entry_path("5.0.0")
        assert os.path.basename(cache.entry_path("v5.0.0")) == "5.0.0.zip"
        assert os.path.dirname(cache.entry_path("v5.0.0")) == cache.cache_folder

    @pytest.mark.asyncio
    async def test_missing_entry(self, cache):
        assert await cache.cached_path("v5.0.0") is None

    @pytest.mark.asyncio
    async def test_write_then_lookup(self, cache):
        location = await cache.write(b"archive", "v5.0.0")

        assert await cache.cached_path("v5.0.0") == location
        assert await cache.cached_path("5.0.0") == location
        with open(location, "rb") as f:
            assert f.read() == b"archive"

    @pytest.mark.asyncio
    async def test_write_creates_hash_sidecar(self, cache):
        location = await cache.write(b"archive", "v5.0.0")

        with open(f"{location}.sha256", "r", encoding="utf-8") as f:
            assert f.read() == hashlib.sha256(b"archive").hexdigest()

    @pytest.mark.asyncio
    async def test_write_replaces_entry(self, cache):
        await cache.write(b"old", "v5.0.0")
        location = await cache.write(b"new", "v5.0.0")

        with open(location, "rb") as f:
            assert f.read() == b"new"
        assert await cache.cached_path("v5.0.0") == location
        assert [n for n in os.listdir(cache.cache_folder) if n.endswith(".part")] == []

    @pytest.mark.asyncio
    async def test_corrupted_entry_is_a_miss(self, cache):
        location = await cache.write(b"archive", "v5.0.0")
        with open(location, "wb") as f:
            f.write(b"tampered")

        assert await cache.cached_path("v5.0.0") is None

    @pytest.mark.asyncio
    async def test_entry_without_sidecar_is_a_hit(self, cache):
        os.makedirs(cache.cache_folder)
        location = cache.entry_path("v5.0.0")
        with open(location, "wb") as f:
            f.write(b"archive")

        assert await cache.cached_path("v5.0.0") == location

    @pytest.mark.asyncio
    async def test_lookup_runs_in_executor(self, cache, mocker):
        await cache.write(b"archive", "v5.0.0")
        spy = mocker.spy(asyncio.get_running_loop(), "run_in_executor")

        assert await cache.cached_path("v5.0.0") == cache.entry_path("v5.0.0")
        assert any(cache._check_entry in call.args for call in spy.call_args_list)

    @pytest.mark.asyncio
    async def test_write_failure_raises_cache_write_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        cache = SourcesCache(cache_folder=str(blocker / "cache"))

        with pytest.raises(CacheWriteError) as exc_info:
            await cache.write(b"archive", "v5.0.0")

        assert "v5.0.0" in exc_info.value.message
