"""
Custom exceptions for API Console Sources.

This module defines domain-specific exceptions that provide better error
categorization and more informative error messages for users and developers.
"""

from typing import List, Optional, Sequence


class ApiConsoleSourcesError(Exception):
    """
    Base exception for all API Console Sources errors.

    All custom exceptions in this package inherit from this class
    to allow for easy catching of all application-specific errors.
    """

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: The primary error message.
            details: Optional additional context about the error.
        """
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(ApiConsoleSourcesError):
    """
    Exception raised when configuration is invalid.

    This includes:
    - Unknown option keys
    - Conflicting options
    - Options file parsing errors
    """

    pass


class OptionsValidationError(ConfigurationError):
    """
    Exception raised when a resolver is built from options that failed validation.

    Attributes:
        errors: Every validation error that was collected.
        warnings: Every validation warning that was collected.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[Sequence[str]] = None,
        warnings: Optional[Sequence[str]] = None,
    ) -> None:
        self.errors: List[str] = list(errors or [])
        self.warnings: List[str] = list(warnings or [])
        super().__init__(message, "; ".join(self.errors) or None)


class ConfigFileError(ConfigurationError):
    """Exception raised when an options file cannot be read or parsed."""

    pass


# =============================================================================
# Download Errors
# =============================================================================


class DownloadError(ApiConsoleSourcesError):
    """
    Base exception for download-related errors.

    Attributes:
        url: The URL that was being downloaded when the error occurred.
        status_code: The HTTP status code, when one was received.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[str] = None,
    ) -> None:
        """
        Initialize the download exception.

        Args:
            message: The primary error message.
            url: The URL that was being downloaded.
            status_code: The HTTP status code.
            details: Optional additional context.
        """
        super().__init__(message, details)
        self.url = url
        self.status_code = status_code


class NetworkError(DownloadError):
    """
    Exception raised for network-related download failures.

    This includes:
    - Connection timeouts
    - DNS resolution failures
    - Connection refused errors
    - SSL/TLS errors
    """

    pass


class HTTPError(DownloadError):
    """Exception raised when the server answers with an error status."""

    pass


class RateLimitError(HTTPError):
    """
    Exception raised when GitHub API rate limit is exceeded.

    Attributes:
        reset_time: When the rate limit will reset (Unix timestamp).
    """

    def __init__(
        self,
        message: str = "GitHub API rate limit exceeded",
        reset_time: Optional[int] = None,
        url: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            url=url,
            status_code=403,
            details=f"Resets at: {reset_time}" if reset_time else None,
        )
        self.reset_time = reset_time


# =============================================================================
# API Errors
# =============================================================================


class APIError(ApiConsoleSourcesError):
    """
    Exception raised for release metadata API errors.

    Attributes:
        endpoint: The API endpoint that was accessed.
        status_code: The HTTP status code returned.
    """

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


class ResourceNotFoundError(APIError):
    """Exception raised when a release (or tag) does not exist."""

    pass


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(ApiConsoleSourcesError):
    """
    Exception raised when a value fails validation outside of option parsing.

    Attributes:
        field: The name of the field that failed validation.
        value: The value that failed validation.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field
        self.value = value


# =============================================================================
# File System Errors
# =============================================================================


class FileSystemError(ApiConsoleSourcesError):
    """
    Exception raised for file system-related errors.

    Attributes:
        path: The file path that caused the error.
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.path = path


class SourcesFileError(FileSystemError):
    """Exception raised when sources cannot be read, written or copied."""

    pass


class CacheWriteError(FileSystemError):
    """Exception raised when a release archive cannot be stored in the cache."""

    pass


# =============================================================================
# Archive Errors
# =============================================================================


class ArchiveError(ApiConsoleSourcesError):
    """
    Exception raised for archive-related errors.

    Attributes:
        archive_path: Path to the problematic archive.
    """

    def __init__(
        self,
        message: str,
        archive_path: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.archive_path = archive_path


class ExtractionError(ArchiveError):
    """Exception raised when a sources archive is malformed or cannot be unzipped."""

    pass
