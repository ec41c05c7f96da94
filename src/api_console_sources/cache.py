"""
Release Archive Cache for API Console Sources

Downloaded GitHub release archives are kept in the user's data folder under
`api-console/cache/sources/<tag>.zip` so a build for an already seen tag
does not hit the network. Only official releases are cached.
"""

import asyncio
import hashlib
import logging
import os
import sys
from typing import Optional

from api_console_sources.constants import (
    APPDATA_ENV_VAR,
    CACHE_DIR_PARTS,
    DARWIN_DATA_DIR_PARTS,
    FALLBACK_DATA_ROOT,
    HASH_ALGORITHM,
    LINUX_DATA_DIR_PARTS,
    ZIP_EXTENSION,
)
from api_console_sources.exceptions import CacheWriteError
from api_console_sources.log_utils import logger as package_logger

from .files import atomic_write_bytes, calculate_file_hash, get_hash_file_path


def normalize_tag(tag: str) -> str:
    """
    Turn a release tag into a cache entry name by removing one leading "v".

    Examples: "v5.0.0" -> "5.0.0", "5.0.0-preview" -> "5.0.0-preview".
    """
    if tag.startswith("v"):
        return tag[1:]
    return tag


class SourcesCache:
    """
    Maps release tags to cached archive files.

    The cache folder is derived once, when the cache is created. Entries are
    written atomically together with a SHA-256 sidecar; an entry whose sidecar
    does not match its contents is reported as missing.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        cache_folder: Optional[str] = None,
    ) -> None:
        """
        Parameters:
            logger (Optional[logging.Logger]): Logger for debug and warning output.
            cache_folder (Optional[str]): Override for the cache location; the
                platform data folder is used when omitted.
        """
        self.logger = logger or package_logger
        self.cache_folder = cache_folder or self.locate_app_dir()

    def locate_app_dir(self) -> str:
        """
        Build the path of the cache folder under the user's data folder.

        Uses `$APPDATA` when set, then `~/Library/Preferences` on macOS,
        `~/.config` on Linux and `/var/local` elsewhere.

        Returns:
            str: The cache folder path.
        """
        appdata = os.environ.get(APPDATA_ENV_VAR)
        if appdata:
            base = appdata
        elif sys.platform == "darwin":
            base = os.path.join(os.path.expanduser("~"), *DARWIN_DATA_DIR_PARTS)
        elif sys.platform.startswith("linux"):
            base = os.path.join(os.path.expanduser("~"), *LINUX_DATA_DIR_PARTS)
        else:
            base = FALLBACK_DATA_ROOT
        return os.path.join(base, *CACHE_DIR_PARTS)

    def entry_path(self, tag: str) -> str:
        """Return the archive location for `tag`, whether or not it exists."""
        return os.path.join(self.cache_folder, f"{normalize_tag(tag)}{ZIP_EXTENSION}")

    async def cached_path(self, tag: str) -> Optional[str]:
        """
        Look up the cached archive of a release.

        Parameters:
            tag (str): Release tag name, with or without the leading "v".

        Returns:
            Optional[str]: The archive path, or `None` when there is no usable entry.
        """
        location = self.entry_path(tag)
        loop = asyncio.get_running_loop()
        usable = await loop.run_in_executor(None, self._check_entry, location)
        if usable is None:
            return None

        if not usable:
            self.logger.warning(
                "Cached sources for %s failed integrity check; ignoring cache entry",
                tag,
            )
            return None
        return location

    def _check_entry(self, location: str) -> Optional[bool]:
        """
        Inspect a cache entry on disk.

        Returns:
            Optional[bool]: `None` when there is no entry, otherwise whether the
            entry matches its sidecar (an entry without a sidecar matches).
        """
        if not os.path.isfile(location):
            return None

        hash_path = get_hash_file_path(location)
        if not os.path.exists(hash_path):
            return True
        try:
            with open(hash_path, "r", encoding="utf-8") as f:
                expected = f.read().strip()
        except OSError as e:
            self.logger.debug("Could not read hash file %s: %s", hash_path, e)
            return False

        actual = calculate_file_hash(location)
        return actual is not None and actual == expected

    async def write(self, buffer: bytes, tag: str) -> str:
        """
        Store a release archive in the cache, replacing any previous entry.

        Parameters:
            buffer (bytes): Archive contents.
            tag (str): Release tag name.

        Returns:
            str: Location of the written entry.

        Raises:
            CacheWriteError: If the folder or the files cannot be written.
        """
        location = self.entry_path(tag)
        digest = hashlib.new(HASH_ALGORITHM, buffer).hexdigest()
        try:
            os.makedirs(self.cache_folder, exist_ok=True)
            await atomic_write_bytes(location, buffer)
            await atomic_write_bytes(get_hash_file_path(location), digest.encode())
        except OSError as e:
            raise CacheWriteError(
                f"Unable to cache sources for {tag}", path=location, details=str(e)
            ) from e

        self.logger.debug("Cached sources for %s in %s", tag, location)
        return location
