import io
import logging
import zipfile
from unittest.mock import AsyncMock

import platformdirs
import pytest

_ASYNC_NETWORK_BLOCK_MSG = (
    "Async network access is blocked during tests. Mock aiohttp.ClientSession."
)


async def _async_block_network(*_args, **_kwargs):
    """
    Prevent async network calls during tests by raising a RuntimeError.

    Raises:
        RuntimeError: `_ASYNC_NETWORK_BLOCK_MSG` explaining that async network access is blocked and suggesting mocking `aiohttp.ClientSession`.
    """
    raise RuntimeError(_ASYNC_NETWORK_BLOCK_MSG)


def pytest_configure(config):
    """
    Register the markers used across the suite.

    Parameters:
        config: pytest.Config
            The pytest configuration object.
    """
    config.addinivalue_line(
        "markers", "asyncio: mark test as an asyncio test (auto-detected)"
    )
    config.addinivalue_line("markers", "unit: fast tests without file system fixtures")
    config.addinivalue_line(
        "markers", "integration: tests staging real files in temporary directories"
    )


@pytest.fixture(autouse=True)
def _isolate_test_environment(tmp_path_factory, monkeypatch):
    """
    Point every user data location at a temporary directory.

    Sets APPDATA (the release cache root), patches platformdirs.user_log_dir and
    removes environment variables that change package behavior.
    """
    base = tmp_path_factory.mktemp("api-console-sources")
    appdata_dir = base / "appdata"
    log_dir = base / "log"
    for path in (appdata_dir, log_dir):
        path.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("APPDATA", str(appdata_dir))
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("API_CONSOLE_SOURCES_LOG_LEVEL", raising=False)
    monkeypatch.setattr(
        platformdirs, "user_log_dir", lambda *_args, **_kwargs: str(log_dir)
    )


def pytest_runtest_setup():
    """
    Prevent real network requests during tests.

    Replaces aiohttp's top-level request and the ClientSession HTTP methods with
    an async blocker.
    """
    import aiohttp

    aiohttp.request = _async_block_network
    aiohttp.ClientSession.request = _async_block_network  # type: ignore[assignment]
    aiohttp.ClientSession.get = _async_block_network  # type: ignore[assignment]
    aiohttp.ClientSession.post = _async_block_network  # type: ignore[assignment]
    aiohttp.ClientSession.head = _async_block_network  # type: ignore[assignment]


# =============================================================================
# Archive Fixtures
# =============================================================================


@pytest.fixture
def make_zip_bytes():
    """
    Provide a factory building in-memory zip archives.

    The factory takes a mapping of member name to text content; names ending
    with "/" are stored as directory entries.

    Returns:
        factory (callable): `factory(members) -> bytes`.
    """

    def _build(members):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
            for name, content in members.items():
                if name.endswith("/"):
                    zf.writestr(name, "")
                else:
                    zf.writestr(name, content)
        return buffer.getvalue()

    return _build


@pytest.fixture
def github_zip_bytes(make_zip_bytes):
    """A release archive laid out like a GitHub zipball: one wrapping folder."""
    return make_zip_bytes(
        {
            "mulesoft-api-console-1a2b3c4/": "",
            "mulesoft-api-console-1a2b3c4/index.html": "<api-console></api-console>",
            "mulesoft-api-console-1a2b3c4/bower.json": '{"name": "api-console"}',
            "mulesoft-api-console-1a2b3c4/src/api-console.js": "export {};",
        }
    )


@pytest.fixture
def zip_file_factory(tmp_path):
    """
    Provide a factory writing zip bytes to a file in `tmp_path`.

    Returns:
        factory (callable): `factory(data, name="sources.zip") -> Path`.
    """

    def _write(data, name="sources.zip"):
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _write


# =============================================================================
# Resolver Fixtures
# =============================================================================


@pytest.fixture
def test_logger():
    """A propagating logger so caplog captures resolver output."""
    log = logging.getLogger("tests.api_console_sources")
    log.setLevel(logging.DEBUG)
    return log


@pytest.fixture
def mock_async_response(mocker):
    """
    Provide a factory that creates mock aiohttp responses usable with `async with`.

    Returns:
        factory (callable): `factory(status=200, json_data=None, headers=None, content_chunks=None)`.
    """

    def _create_response(status=200, json_data=None, headers=None, content_chunks=None):
        response = AsyncMock()
        response.status = status
        response.headers = headers or {}
        response.json = AsyncMock(return_value=json_data)
        response.__aenter__ = AsyncMock(return_value=response)
        response.__aexit__ = AsyncMock(return_value=False)

        async def _async_iter_chunks(_size):
            for chunk in content_chunks or []:
                yield chunk

        mock_content = mocker.MagicMock()
        mock_content.iter_chunked = mocker.Mock(side_effect=_async_iter_chunks)
        response.content = mock_content
        return response

    return _create_response


@pytest.fixture
def mock_session(mocker):
    """A stand-in aiohttp session whose `get` must be configured per test."""
    session = mocker.MagicMock()
    session.closed = False
    return session


@pytest.fixture
def sample_release_payload():
    """Fixture providing a GitHub release payload for the console."""
    return {
        "tag_name": "v5.0.0",
        "name": "5.0.0",
        "prerelease": False,
        "zipball_url": "https://api.github.com/repos/mulesoft/api-console/zipball/v5.0.0",
        "tarball_url": "https://api.github.com/repos/mulesoft/api-console/tarball/v5.0.0",
    }
