"""
Sources Resolver

Gets the API console sources from the location configured in `SourceOptions`
and stages them in a destination directory. Sources can come from the latest
GitHub release, a tagged release, a zip file URL, or a local directory or zip
file. Release archives are cached per tag.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from api_console_sources.constants import (
    GITHUB_HEADERS,
    MSG_OPTIONS_INVALID,
    URL_PREFIX,
)
from api_console_sources.exceptions import (
    CacheWriteError,
    OptionsValidationError,
    SourcesFileError,
)
from api_console_sources.log_utils import create_sources_logger

from .cache import SourcesCache
from .files import (
    ArchiveExtractor,
    copy_directory,
    copy_to_vendor_dir,
    materialized_archive,
)
from .interfaces import Pathish, ReleaseInfo, ReleaseInfoProvider, Transport
from .options import SourceOptions


class SourcesResolver:
    """
    Resolves the API console sources and copies them to a destination.

    Parameters:
        opts: `SourceOptions` or a raw options mapping validated on the spot.
        release_provider: Looks up latest and tagged release metadata.
        transport: Downloads archives; anything with an async `get(url, headers)`.
        cache: Release archive cache; a `SourcesCache` in the platform data
            folder is created when omitted.

    Raises:
        OptionsValidationError: If the options did not pass validation. Every
            error and warning is logged before raising.
    """

    def __init__(
        self,
        opts: Union[SourceOptions, Mapping[str, Any], None],
        release_provider: ReleaseInfoProvider,
        transport: Transport,
        cache: Optional[SourcesCache] = None,
    ) -> None:
        if not isinstance(opts, SourceOptions):
            opts = SourceOptions(opts)
        self.opts = opts
        self.logger = self._setup_logger(opts.logger)

        if not self.opts.is_valid:
            self._print_validation_errors()
            self._print_validation_warnings()
            raise OptionsValidationError(
                MSG_OPTIONS_INVALID,
                errors=self.opts.validation_errors,
                warnings=self.opts.validation_warnings,
            )
        self._print_validation_warnings()

        self.release_provider = release_provider
        self.transport = transport
        self.cache = cache or SourcesCache(logger=self.logger)
        self.extractor = ArchiveExtractor(logger=self.logger)
        self.is_github_release = False
        self.is_download = False

    def _setup_logger(self, logger: Optional[logging.Logger]) -> logging.Logger:
        if logger is not None:
            return logger
        return create_sources_logger(verbose=self.opts.verbose)

    def _print_validation_errors(self) -> None:
        for error in self.opts.validation_errors:
            self.logger.error(error)

    def _print_validation_warnings(self) -> None:
        for warning in self.opts.validation_warnings:
            self.logger.warning(warning)

    async def sources_to(self, destination: Pathish) -> None:
        """
        Stage the configured console sources in `destination`.

        With no `tag_name` and no `src` the latest release is downloaded; with
        `tag_name` that release is downloaded; a `src` starting with "http" is
        downloaded as a zip file; any other `src` is copied from the local
        file system.

        Parameters:
            destination (Pathish): Directory that receives the sources.

        Raises:
            ApiConsoleSourcesError: Release lookup, download, extraction or file
                system failures; nothing is retried.
        """
        tag_name = self.opts.tag_name
        src = self.opts.src
        self.is_github_release = bool(tag_name) or not src
        self.is_download = bool(src) and src.startswith(URL_PREFIX)

        if not tag_name and not src:
            await self._download_latest(destination)
        elif tag_name:
            await self._download_tagged(tag_name, destination)
        elif self.is_download:
            await self._download_any(src, destination)
        else:
            await self._copy_local(src, destination)

    async def _copy_local(self, source: Pathish, destination: Pathish) -> None:
        """
        Copy locally stored console sources.

        A regular file is treated as a zip archive and extracted; a directory
        is copied as is, without collapsing a top-level folder.
        """
        self.logger.debug("Copying local API Console files to the working dir.")
        source_path = Path(os.getcwd(), source).resolve()
        try:
            is_file = source_path.is_file()
            is_dir = source_path.is_dir()
        except OSError as e:
            raise SourcesFileError(
                "Unable to read local sources", path=str(source_path), details=str(e)
            ) from e

        if is_file:
            self.logger.debug("Opening local zip file of the console.")
            await self.extractor.extract_and_normalize(source_path, destination)
            return
        if not is_dir:
            raise SourcesFileError("Local sources not found", path=str(source_path))

        self.logger.debug("Copying files from %s", source_path)
        await copy_directory(source_path, destination)

    async def _download_latest(self, destination: Pathish) -> None:
        """
        Download the latest release and stage it in `destination`.

        Fails when the release lookup fails (rate limit, network), when the
        archive cannot be downloaded or when it cannot be unzipped.
        """
        self.logger.debug("Downloading latest release info...")
        info = await self.release_provider.get_latest_info()
        await self._download_from_release_info(info, destination)

    async def _download_tagged(self, tag: str, destination: Pathish) -> None:
        """
        Download the release tagged `tag` and stage it in `destination`.

        Fails when the tag does not exist or is not supported, plus every
        failure of `_download_latest`.
        """
        self.logger.debug("Getting %s release info...", tag)
        info = await self.release_provider.get_tag_info(tag)
        await self._download_from_release_info(info, destination)

    async def _download_from_release_info(
        self, release: ReleaseInfo, destination: Pathish
    ) -> None:
        tag_name = release.tag_name
        if self.opts.ignore_cache:
            self.logger.debug("Cache lookup disabled for %s", tag_name)
        else:
            location = await self.cache.cached_path(tag_name)
            if location:
                self.logger.debug("Reusing cached console sources...")
                await self.extractor.extract_and_normalize(location, destination)
                return

        self.logger.debug("Downloading release tagged as: %s", tag_name)
        await self._download_and_process(release.archive_url, destination, tag_name)

    async def _download_any(self, url: str, destination: Pathish) -> None:
        """Download a zip file from `url` and stage it in `destination`; never cached."""
        self.logger.debug("Downloading API Console sources from %s", url)
        await self._download_and_process(url, destination)

    async def _download_and_process(
        self, url: str, destination: Pathish, tag: Optional[str] = None
    ) -> None:
        buffer = await self.transport.get(url, dict(GITHUB_HEADERS))
        if tag:
            await self._write_cache(buffer, tag)
        async with materialized_archive(buffer, logger=self.logger) as zip_path:
            await self.extractor.extract_and_normalize(zip_path, destination)

    async def _write_cache(self, buffer: bytes, tag: str) -> None:
        try:
            await self.cache.write(buffer, tag)
        except CacheWriteError as e:
            self.logger.warning("Could not cache sources for %s: %s", tag, e)

    async def move_console_to_vendor(self, working_dir: Pathish) -> Path:
        """
        Copy staged sources into `<working_dir>/bower_components/api-console`.

        Dot-files, `bower_components` and `node_modules` are skipped.

        Returns:
            Path: The vendored package directory.
        """
        loop = asyncio.get_running_loop()
        target = await loop.run_in_executor(None, copy_to_vendor_dir, working_dir)
        self.logger.debug("Console sources copied to %s", target)
        return target
