"""
Core Interfaces for API Console Sources

This module defines the release data model and the two collaborators the
sources resolver depends on: a release metadata provider and a byte transport.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

Pathish = Union[str, Path]


@dataclass(frozen=True)
class ReleaseInfo:
    """Describes a downloadable release of the API console."""

    tag_name: str
    """The release tag/version identifier (e.g., 'v4.2.0')"""

    archive_url: str
    """URL of a zip archive with the release sources"""

    @classmethod
    def from_github(cls, payload: Mapping[str, Any]) -> "ReleaseInfo":
        """
        Build a ReleaseInfo from a GitHub release payload.

        Parameters:
            payload (Mapping[str, Any]): Decoded JSON of a GitHub release.

        Returns:
            ReleaseInfo: Release built from `tag_name` and `zipball_url`.

        Raises:
            ValueError: If either field is missing or not a non-empty string.
        """
        tag_name = payload.get("tag_name")
        archive_url = payload.get("zipball_url")
        if not isinstance(tag_name, str) or not tag_name.strip():
            raise ValueError("Release payload has no valid tag_name")
        if not isinstance(archive_url, str) or not archive_url.strip():
            raise ValueError(f"Release {tag_name} has no valid zipball_url")
        return cls(tag_name=tag_name.strip(), archive_url=archive_url.strip())


class ReleaseInfoProvider(ABC):
    """
    Looks up release metadata for the console repository.

    Implementations own their HTTP, authentication and rate limit handling;
    the resolver forwards whatever they raise.
    """

    @abstractmethod
    async def get_latest_info(self) -> ReleaseInfo:
        """
        Return metadata of the latest published release.

        Returns:
            ReleaseInfo: The latest release.
        """

    @abstractmethod
    async def get_tag_info(self, tag: str) -> ReleaseInfo:
        """
        Return metadata of the release with the given tag.

        Parameters:
            tag (str): Release tag name.

        Returns:
            ReleaseInfo: The tagged release.
        """


class Transport(ABC):
    """Fetches the full body of a URL."""

    @abstractmethod
    async def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> bytes:
        """
        Download `url` and return the response body.

        Parameters:
            url (str): Location to download.
            headers (Optional[Dict[str, str]]): Extra request headers.

        Returns:
            bytes: The complete response body.
        """
