"""
File Operations for API Console Sources

This module provides the archive extractor, the top-level folder collapse,
scoped temporary archives, atomic writes, hashing and directory copies.
"""

import asyncio
import hashlib
import logging
import os
import shutil
import tempfile
import zipfile
import zlib
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Callable, List, Optional, Tuple

import aiofiles  # type: ignore[import-untyped]

from api_console_sources.constants import (
    DEFAULT_CHUNK_SIZE,
    HASH_ALGORITHM,
    HASH_CHUNK_SIZE,
    MSG_UNZIP_FAILED,
    VENDOR_DIR_NAME,
    VENDOR_EXCLUDED_DIRS,
    VENDOR_PACKAGE_NAME,
    ZIP_EXTENSION,
)
from api_console_sources.exceptions import ExtractionError, SourcesFileError
from api_console_sources.log_utils import logger as package_logger

from .interfaces import Pathish


def _is_within_base(real_base_dir: str, candidate: str) -> bool:
    """
    Determine whether the candidate path resides within the given base directory.

    Returns:
        True if the candidate path is inside `real_base_dir`, False otherwise.
    """
    try:
        return os.path.commonpath([real_base_dir, candidate]) == real_base_dir
    except ValueError:
        return False


def is_safe_archive_member(member_name: str) -> bool:
    """
    Determine whether an archive member name is safe to extract.

    Returns:
        `True` if the member name contains no absolute paths, parent-directory references, or null bytes, `False` otherwise.
    """
    if not member_name or member_name.startswith(("/", "\\")):
        return False
    if "\x00" in member_name:
        return False
    normalized = os.path.normpath(member_name)
    if os.path.isabs(normalized):
        return False
    if normalized == "..":
        return False
    if normalized.startswith(f"..{os.sep}"):
        return False
    if os.altsep and normalized.startswith(f"..{os.altsep}"):
        return False
    return True


def safe_extract_path(extract_dir: str, file_path: str) -> str:
    """
    Resolve a safe absolute extraction path and prevent directory traversal.

    Parameters:
        extract_dir (str): Base directory intended for extraction.
        file_path (str): Member path from the archive to be extracted.

    Returns:
        str: Absolute, normalized path inside extract_dir suitable for extraction.

    Raises:
        ValueError: If the resolved path is outside extract_dir.
    """
    real_extract_dir = os.path.realpath(extract_dir)
    normalized_path = os.path.realpath(os.path.join(real_extract_dir, file_path))

    if not _is_within_base(real_extract_dir, normalized_path):
        raise ValueError(
            f"Unsafe extraction path '{file_path}' is outside base '{extract_dir}'"
        )

    return normalized_path


def calculate_file_hash(file_path: Pathish) -> Optional[str]:
    """
    Compute the SHA-256 hex digest of a file.

    Returns:
        Optional[str]: The digest, or `None` if the file cannot be read.
    """
    try:
        file_hash = hashlib.new(HASH_ALGORITHM)
        with open(file_path, "rb") as f:
            for byte_block in iter(lambda: f.read(HASH_CHUNK_SIZE), b""):
                file_hash.update(byte_block)
        return file_hash.hexdigest()
    except OSError:
        return None


def get_hash_file_path(file_path: Pathish) -> str:
    """Return the sidecar path holding the digest of `file_path`."""
    return f"{os.fspath(file_path)}.{HASH_ALGORITHM}"


async def atomic_write_bytes(file_path: Pathish, data: bytes) -> None:
    """
    Write bytes to `file_path` through a temporary sibling and an atomic replace.

    Raises:
        OSError: If the temporary file cannot be created, written or moved into place.
    """
    target = os.fspath(file_path)
    temp_fd, temp_path = tempfile.mkstemp(
        dir=os.path.dirname(target) or ".", prefix="tmp-", suffix=".part"
    )
    os.close(temp_fd)
    try:
        async with aiofiles.open(temp_path, "wb") as f:
            await f.write(data)
        os.replace(temp_path, target)
    finally:
        if os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError:
                pass


@asynccontextmanager
async def materialized_archive(
    buffer: bytes, logger: Optional[logging.Logger] = None
) -> AsyncIterator[Path]:
    """
    Store downloaded archive bytes in a temporary file for the duration of the block.

    The temporary file is removed on every exit path, including extraction failures.

    Parameters:
        buffer (bytes): Archive contents.
        logger (Optional[logging.Logger]): Logger for debug output.

    Yields:
        Path: Location of the temporary zip file.

    Raises:
        SourcesFileError: If the temporary file cannot be created or written.
    """
    log = logger or package_logger
    try:
        temp_fd, temp_name = tempfile.mkstemp(prefix="api-console-", suffix=ZIP_EXTENSION)
        os.close(temp_fd)
    except OSError as e:
        raise SourcesFileError(
            "Unable to create a temporary file", details=str(e)
        ) from e

    temp_path = Path(temp_name)
    try:
        log.debug("Writing API console sources to %s", temp_path)
        try:
            async with aiofiles.open(temp_path, "wb") as f:
                await f.write(buffer)
        except OSError as e:
            raise SourcesFileError(
                "Unable to write to a temporary file",
                path=str(temp_path),
                details=str(e),
            ) from e
        log.debug("API console sources saved in temporary location.")
        yield temp_path
    finally:
        try:
            temp_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            log.debug("Could not remove temporary file %s: %s", temp_path, e)


def _copy_tree_contents(source: Pathish, destination: Pathish) -> None:
    shutil.copytree(source, destination, dirs_exist_ok=True)


async def copy_directory(source: Pathish, destination: Pathish) -> None:
    """
    Recursively copy the contents of `source` into `destination`, overwriting files.

    Raises:
        SourcesFileError: If anything cannot be read or written.
    """
    loop = asyncio.get_running_loop()
    try:
        await loop.run_in_executor(None, _copy_tree_contents, source, destination)
    except (OSError, shutil.Error) as e:
        raise SourcesFileError(
            f"Unable to copy sources from {source}",
            path=os.fspath(destination),
            details=str(e),
        ) from e


def _extraction_write_error(path: str, error: OSError) -> SourcesFileError:
    return SourcesFileError(
        "Unable to write extracted sources", path=path, details=str(error)
    )


def _single_root_folder(destination: Pathish) -> Optional[str]:
    """Return the path of the only entry in `destination` when it is a directory."""
    entries = os.listdir(destination)
    if len(entries) != 1:
        return None
    root_path = os.path.join(destination, entries[0])
    if not os.path.isdir(root_path):
        return None
    return root_path


class ArchiveExtractor:
    """
    Extracts console sources from zip archives.

    Extraction writes every member into the destination, preserving the
    archive's directory structure. When the archive wraps all files in a
    single top-level directory (as GitHub release zips do) its contents are
    copied up into the destination.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or package_logger

    async def extract(self, zip_path: Pathish, destination: Pathish) -> List[Path]:
        """
        Extract all members of the zip archive at `zip_path` into `destination`.

        Parameters:
            zip_path (Pathish): Path of a readable, seekable zip file.
            destination (Pathish): Target directory; created when missing.

        Returns:
            List[Path]: Files written to disk.

        Raises:
            ExtractionError: If the archive is malformed, truncated or cannot be read.
            SourcesFileError: If the destination directory or an extracted file
                cannot be written.
        """
        destination = os.fspath(destination)
        try:
            os.makedirs(destination, exist_ok=True)
        except OSError as e:
            raise SourcesFileError(
                "Unable to create the destination directory",
                path=destination,
                details=str(e),
            ) from e

        loop = asyncio.get_running_loop()
        try:
            extracted = await loop.run_in_executor(
                None, self._extract_members, os.fspath(zip_path), destination
            )
        except (
            zipfile.BadZipFile,
            zipfile.LargeZipFile,
            zlib.error,
            EOFError,
            NotImplementedError,
            RuntimeError,
            OSError,
        ) as e:
            # Unsupported compression raises NotImplementedError, encryption RuntimeError
            self.logger.error("Error extracting archive %s: %s", zip_path, e)
            raise ExtractionError(
                MSG_UNZIP_FAILED, archive_path=os.fspath(zip_path), details=str(e)
            ) from e

        self.logger.debug("Zip file has been extracted (%d files).", len(extracted))
        return extracted

    def _extract_members(self, zip_path: str, destination: str) -> List[Path]:
        extracted: List[Path] = []
        with zipfile.ZipFile(zip_path, "r") as zip_ref:
            for file_info in zip_ref.infolist():
                file_name = file_info.filename
                if not is_safe_archive_member(file_name):
                    self.logger.warning(
                        "Skipping unsafe archive member %s (possible traversal)",
                        file_name,
                    )
                    continue
                try:
                    extract_path = safe_extract_path(destination, file_name)
                except ValueError as e:
                    self.logger.warning("Skipping unsafe extraction path: %s", e)
                    continue

                if file_info.is_dir():
                    try:
                        os.makedirs(extract_path, exist_ok=True)
                    except OSError as e:
                        raise _extraction_write_error(extract_path, e) from e
                    continue

                self._write_member(zip_ref, file_info, extract_path)
                extracted.append(Path(extract_path))
        return extracted

    def _write_member(
        self, zip_ref: zipfile.ZipFile, file_info: zipfile.ZipInfo, extract_path: str
    ) -> None:
        """
        Decompress one archive member to `extract_path`.

        Read-side failures propagate as raised by zipfile; write-side `OSError`
        becomes `SourcesFileError`.
        """
        try:
            os.makedirs(os.path.dirname(extract_path), exist_ok=True)
            target = open(extract_path, "wb")
        except OSError as e:
            raise _extraction_write_error(extract_path, e) from e

        with target, zip_ref.open(file_info) as source:
            for chunk in iter(lambda: source.read(DEFAULT_CHUNK_SIZE), b""):
                try:
                    target.write(chunk)
                except OSError as e:
                    raise _extraction_write_error(extract_path, e) from e

    async def strip_single_root_folder(self, destination: Pathish) -> bool:
        """
        Copy the contents of a lone top-level directory up into `destination`.

        Nothing happens when `destination` holds more than one entry, no entry,
        or a single regular file. The wrapping directory itself is left in place.

        Returns:
            bool: `True` if contents were copied up, `False` otherwise.

        Raises:
            SourcesFileError: If the directory cannot be listed or copied.
        """
        loop = asyncio.get_running_loop()
        try:
            root_path = await loop.run_in_executor(
                None, _single_root_folder, destination
            )
        except OSError as e:
            raise SourcesFileError(
                "Unable to read the destination directory",
                path=os.fspath(destination),
                details=str(e),
            ) from e

        if root_path is None:
            return False

        self.logger.debug(
            "Moving sources out of top level folder %s", os.path.basename(root_path)
        )
        await copy_directory(root_path, destination)
        return True

    async def extract_and_normalize(
        self, zip_path: Pathish, destination: Pathish
    ) -> None:
        """Extract `zip_path` into `destination`, then collapse a single root folder."""
        await self.extract(zip_path, destination)
        await self.strip_single_root_folder(destination)


def make_vendor_filter(
    excluded_dirs: Tuple[str, ...] = VENDOR_EXCLUDED_DIRS,
) -> Callable[[str, List[str]], List[str]]:
    """
    Build a `shutil.copytree` ignore callable for vendoring console sources.

    The callable skips dot-files and entries named like one of `excluded_dirs`.
    Ignored directories are never descended into, so their contents are skipped too.
    """

    def _ignore(_directory: str, names: List[str]) -> List[str]:
        return [
            name for name in names if name.startswith(".") or name in excluded_dirs
        ]

    return _ignore


def copy_to_vendor_dir(
    working_dir: Pathish,
    vendor_dir: str = VENDOR_DIR_NAME,
    package_name: str = VENDOR_PACKAGE_NAME,
) -> Path:
    """
    Copy staged console sources into `<working_dir>/<vendor_dir>/<package_name>`.

    Dot-files, `bower_components` and `node_modules` are not copied.

    Returns:
        Path: The vendored package directory.

    Raises:
        SourcesFileError: If the copy fails.
    """
    working = Path(working_dir)
    target = working / vendor_dir / package_name
    try:
        (working / vendor_dir).mkdir(parents=True, exist_ok=True)
        shutil.copytree(
            working,
            target,
            ignore=make_vendor_filter(),
            dirs_exist_ok=True,
        )
    except (OSError, shutil.Error) as e:
        raise SourcesFileError(
            "Unable to copy the console into the vendor directory",
            path=str(target),
            details=str(e),
        ) from e
    return target
