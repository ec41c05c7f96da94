"""
Tests for the exception hierarchy.
"""

import pytest

from api_console_sources.exceptions import (
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

pytestmark = [pytest.mark.unit]


class TestBaseError:
    def test_message_only(self):
        error = ApiConsoleSourcesError("Something failed")

        assert str(error) == "Something failed"
        assert error.message == "Something failed"
        assert error.details is None

    def test_message_with_details(self):
        error = ApiConsoleSourcesError("Something failed", details="disk full")

        assert str(error) == "Something failed - disk full"


class TestHierarchy:
    @pytest.mark.parametrize(
        "error_class,parent",
        [
            (ConfigurationError, ApiConsoleSourcesError),
            (OptionsValidationError, ConfigurationError),
            (ConfigFileError, ConfigurationError),
            (DownloadError, ApiConsoleSourcesError),
            (NetworkError, DownloadError),
            (HTTPError, DownloadError),
            (RateLimitError, HTTPError),
            (APIError, ApiConsoleSourcesError),
            (ResourceNotFoundError, APIError),
            (ValidationError, ApiConsoleSourcesError),
            (FileSystemError, ApiConsoleSourcesError),
            (SourcesFileError, FileSystemError),
            (CacheWriteError, FileSystemError),
            (ArchiveError, ApiConsoleSourcesError),
            (ExtractionError, ArchiveError),
        ],
    )
    def test_parents(self, error_class, parent):
        assert issubclass(error_class, parent)


class TestSpecificErrors:
    def test_options_validation_error(self):
        error = OptionsValidationError(
            "Options did not pass validation.",
            errors=["Unknown option: foo", "Unknown option: bar"],
            warnings=["careful"],
        )

        assert error.errors == ["Unknown option: foo", "Unknown option: bar"]
        assert error.warnings == ["careful"]
        assert str(error) == (
            "Options did not pass validation. - "
            "Unknown option: foo; Unknown option: bar"
        )

    def test_options_validation_error_without_errors(self):
        error = OptionsValidationError("Options did not pass validation.")

        assert error.errors == []
        assert str(error) == "Options did not pass validation."

    def test_rate_limit_error(self):
        error = RateLimitError(reset_time=1700000000, url="https://api.github.com")

        assert error.status_code == 403
        assert error.reset_time == 1700000000
        assert str(error) == "GitHub API rate limit exceeded - Resets at: 1700000000"

    def test_download_error_attributes(self):
        error = HTTPError("HTTP error 500", url="https://example.com", status_code=500)

        assert error.url == "https://example.com"
        assert error.status_code == 500

    def test_file_system_error_path(self):
        error = SourcesFileError("Local sources not found", path="/tmp/missing")

        assert error.path == "/tmp/missing"
        assert str(error) == "Local sources not found"

    def test_extraction_error_archive_path(self):
        error = ExtractionError(
            "Unable to unzip the API console sources",
            archive_path="/tmp/a.zip",
            details="File is not a zip file",
        )

        assert error.archive_path == "/tmp/a.zip"
        assert "File is not a zip file" in str(error)

    def test_api_error_endpoint(self):
        error = ResourceNotFoundError(
            "Release not found", endpoint="/releases/tags/v9", status_code=404
        )

        assert error.endpoint == "/releases/tags/v9"
        assert error.status_code == 404

    def test_catch_all(self):
        with pytest.raises(ApiConsoleSourcesError):
            raise CacheWriteError("Unable to cache sources for v5.0.0")
