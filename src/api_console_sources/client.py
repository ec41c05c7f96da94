"""
Async GitHub Client for API Console Sources

This module provides the default collaborators of the sources resolver on top
of aiohttp: release metadata lookup for the console repository and a byte
transport used to download release archives.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import aiohttp
from aiohttp import ClientResponse, ClientSession, ClientTimeout
from packaging.version import InvalidVersion, Version

from api_console_sources.constants import (
    API_CONSOLE_REPOSITORY,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_REQUEST_TIMEOUT,
    GITHUB_API_BASE,
    GITHUB_LATEST_RELEASE_PATH,
    GITHUB_TAG_RELEASE_PATH,
    HTTP_STATUS_ERROR_THRESHOLD,
    HTTP_STATUS_FORBIDDEN,
    HTTP_STATUS_NOT_FOUND,
    MINIMUM_TAG_MAJOR,
)
from api_console_sources.exceptions import (
    APIError,
    HTTPError,
    NetworkError,
    RateLimitError,
    ResourceNotFoundError,
    ValidationError,
)
from api_console_sources.log_utils import logger

from .interfaces import ReleaseInfo, ReleaseInfoProvider, Transport


def get_user_agent() -> str:
    """
    Get the User-Agent string used for API requests.

    Returns:
        The string `api-console-sources/{version}`, where `{version}` is the installed package version or `unknown`.
    """
    import importlib.metadata

    try:
        app_version = importlib.metadata.version("api-console-sources")
    except importlib.metadata.PackageNotFoundError:
        app_version = "unknown"
    return f"api-console-sources/{app_version}"


class AsyncGitHubClient(ReleaseInfoProvider, Transport):
    """
    Asynchronous GitHub client using aiohttp.

    Provides async methods for:
    - Looking up the latest or a tagged console release
    - Downloading release archives into memory

    Example:
        async with AsyncGitHubClient() as client:
            info = await client.get_latest_info()
            archive = await client.get(info.archive_url)
    """

    def __init__(
        self,
        github_token: Optional[str] = None,
        repository: str = API_CONSOLE_REPOSITORY,
        minimum_tag_major: Optional[int] = MINIMUM_TAG_MAJOR,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        """
        Initialize the async GitHub client.

        Parameters:
            github_token (Optional[str]): GitHub personal access token for authentication.
            repository (str): `owner/name` of the repository holding console releases.
            minimum_tag_major (Optional[int]): Lowest supported major version for tagged releases; `None` disables the check.
            timeout (float): Request timeout in seconds.
        """
        self.github_token = github_token
        self.repository = repository
        self.minimum_tag_major = minimum_tag_major
        self.timeout = ClientTimeout(total=timeout)
        self._session: Optional[ClientSession] = None

    async def __aenter__(self) -> "AsyncGitHubClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _ensure_session(self) -> ClientSession:
        """
        Ensure a session exists, creating one if needed.

        Returns:
            ClientSession: The active aiohttp session.
        """
        if self._session is None or self._session.closed:
            self._session = ClientSession(timeout=self.timeout)
        return self._session

    def _get_api_headers(self) -> Dict[str, str]:
        """
        Build HTTP headers for GitHub API requests.

        Includes Accept, GitHub API version and User-Agent headers, plus an
        Authorization header when a token is configured.
        """
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": get_user_agent(),
        }
        if self.github_token:
            headers["Authorization"] = f"token {self.github_token}"
        return headers

    async def close(self) -> None:
        """Close the client session and release resources."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    def _release_url(self, path: str) -> str:
        return f"{GITHUB_API_BASE}/{self.repository}/{path}"

    async def get_latest_info(self) -> ReleaseInfo:
        """
        Fetch metadata of the latest console release.

        Raises:
            ResourceNotFoundError: If the repository has no published release.
            RateLimitError: If the GitHub API rate limit is exhausted.
            HTTPError: If the API responds with any other error status.
            APIError: If the response is not a valid release payload.
        """
        url = self._release_url(GITHUB_LATEST_RELEASE_PATH)
        return await self._fetch_release(url)

    async def get_tag_info(self, tag: str) -> ReleaseInfo:
        """
        Fetch metadata of the console release tagged `tag`.

        Raises:
            ValidationError: If the tag's major version is below `minimum_tag_major`.
            ResourceNotFoundError: If the tag does not exist.
            RateLimitError: If the GitHub API rate limit is exhausted.
            HTTPError: If the API responds with any other error status.
        """
        self._check_minimum_version(tag)
        url = self._release_url(GITHUB_TAG_RELEASE_PATH.format(tag=tag))
        return await self._fetch_release(url)

    def _check_minimum_version(self, tag: str) -> None:
        if self.minimum_tag_major is None:
            return
        try:
            version = Version(tag)
        except InvalidVersion:
            logger.debug("Tag %s is not a version number; skipping version check", tag)
            return
        if version.major < self.minimum_tag_major:
            raise ValidationError(
                f"Only versions >= {self.minimum_tag_major}.0.0 are supported",
                field="tag_name",
                value=tag,
            )

    async def _fetch_release(self, url: str) -> ReleaseInfo:
        session = await self._ensure_session()
        try:
            async with session.get(url, headers=self._get_api_headers()) as response:
                self._raise_for_api_status(url, response)
                data = await response.json()
        except aiohttp.ClientResponseError as e:
            raise HTTPError(
                f"HTTP error {e.status}: {e.message}", url=url, status_code=e.status
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("Network error fetching release info from %s: %s", url, e)
            raise NetworkError(f"Network error: {e}", url=url) from e

        if not isinstance(data, dict):
            raise APIError(
                "Unexpected release payload",
                endpoint=url,
                details=f"expected object, got {type(data).__name__}",
            )
        try:
            info = ReleaseInfo.from_github(data)
        except ValueError as e:
            raise APIError("Invalid release payload", endpoint=url, details=str(e)) from e
        logger.debug("Resolved release %s from %s", info.tag_name, url)
        return info

    def _raise_for_api_status(self, url: str, response: ClientResponse) -> None:
        if response.status == HTTP_STATUS_NOT_FOUND:
            raise ResourceNotFoundError(
                "Release not found", endpoint=url, status_code=response.status
            )
        if response.status == HTTP_STATUS_FORBIDDEN:
            if response.headers.get("X-RateLimit-Remaining") == "0":
                reset = response.headers.get("X-RateLimit-Reset")
                try:
                    reset_time = int(reset) if reset else None
                except ValueError:
                    reset_time = None
                raise RateLimitError(reset_time=reset_time, url=url)
            raise HTTPError(
                "GitHub API access forbidden", url=url, status_code=response.status
            )
        if response.status >= HTTP_STATUS_ERROR_THRESHOLD:
            raise HTTPError(
                f"HTTP error {response.status}", url=url, status_code=response.status
            )

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> bytes:
        """
        Download `url` and return the whole response body.

        Parameters:
            url (str): Location to download.
            headers (Optional[Dict[str, str]]): Extra request headers.

        Returns:
            bytes: The response body.

        Raises:
            HTTPError: If the server responds with an error status.
            NetworkError: On connection failures and timeouts.
        """
        session = await self._ensure_session()
        request_headers = dict(headers or {})
        if self.github_token:
            request_headers.setdefault("Authorization", f"token {self.github_token}")

        logger.debug("Downloading %s", url)
        try:
            async with session.get(url, headers=request_headers) as response:
                if response.status >= HTTP_STATUS_ERROR_THRESHOLD:
                    raise HTTPError(
                        f"HTTP error {response.status}",
                        url=url,
                        status_code=response.status,
                    )
                chunks = []
                async for chunk in response.content.iter_chunked(DEFAULT_CHUNK_SIZE):
                    chunks.append(chunk)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("Download failed for %s: %s", url, e)
            raise NetworkError(f"Download failed: {e}", url=url) from e

        body = b"".join(chunks)
        logger.debug("Downloaded %s (%d bytes)", url, len(body))
        return body


@asynccontextmanager
async def create_async_client(
    github_token: Optional[str] = None,
    minimum_tag_major: Optional[int] = MINIMUM_TAG_MAJOR,
) -> AsyncIterator[AsyncGitHubClient]:
    """
    Provide a configured AsyncGitHubClient and ensure it is closed after use.

    Parameters:
        github_token (Optional[str]): GitHub personal access token; requests are unauthenticated when `None`.
        minimum_tag_major (Optional[int]): Lowest supported major version for tagged releases.
    """
    client = AsyncGitHubClient(
        github_token=github_token, minimum_tag_major=minimum_tag_major
    )
    try:
        yield client
    finally:
        await client.close()
