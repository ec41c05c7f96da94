"""
API Console Sources - stages API Console sources for a build

Sources are taken from the latest GitHub release, a tagged release, a zip file
URL, or a local directory or zip file. Release archives are cached per tag.

Core Components:
- options: Option validation
- resolver: Source retrieval strategies
- cache: Release archive cache
- files: Archive extraction and file operations
- client: aiohttp based release lookup and download
- interfaces: Release data model and collaborator interfaces
"""

from .cache import SourcesCache, normalize_tag
from .client import AsyncGitHubClient, create_async_client
from .config import load_options_file
from .exceptions import (
    APIError,
    ApiConsoleSourcesError,
    ArchiveError,
    CacheWriteError,
    ConfigFileError,
    ConfigurationError,
    DownloadError,
    ExtractionError,
    FileSystemError,
    HTTPError,
    NetworkError,
    OptionsValidationError,
    RateLimitError,
    ResourceNotFoundError,
    SourcesFileError,
    ValidationError,
)
from .files import ArchiveExtractor, copy_to_vendor_dir, materialized_archive
from .interfaces import ReleaseInfo, ReleaseInfoProvider, Transport
from .options import SourceOptions
from .resolver import SourcesResolver

__all__ = [
    # Interfaces
    "ReleaseInfo",
    "ReleaseInfoProvider",
    "Transport",
    # Resolution
    "SourceOptions",
    "SourcesResolver",
    "load_options_file",
    # Core components
    "SourcesCache",
    "normalize_tag",
    "ArchiveExtractor",
    "materialized_archive",
    "copy_to_vendor_dir",
    # GitHub client
    "AsyncGitHubClient",
    "create_async_client",
    # Errors
    "ApiConsoleSourcesError",
    "ConfigurationError",
    "OptionsValidationError",
    "ConfigFileError",
    "DownloadError",
    "NetworkError",
    "HTTPError",
    "RateLimitError",
    "APIError",
    "ResourceNotFoundError",
    "ValidationError",
    "FileSystemError",
    "SourcesFileError",
    "CacheWriteError",
    "ArchiveError",
    "ExtractionError",
]
