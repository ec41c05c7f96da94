"""
Constants and configuration values for API Console Sources.

This module contains all hardcoded values, URLs, timeouts, and other constants
used throughout the package.
"""

# GitHub API URLs
GITHUB_API_BASE = "https://api.github.com/repos"
API_CONSOLE_REPOSITORY = "mulesoft/api-console"
GITHUB_LATEST_RELEASE_PATH = "releases/latest"
GITHUB_TAG_RELEASE_PATH = "releases/tags/{tag}"

# Sent with every archive download
GITHUB_HEADERS = {"user-agent": "mulesoft-labs/api-console-sources-resolver"}

# Oldest console major version this tool can stage
MINIMUM_TAG_MAJOR = 4

# Network settings (in seconds)
DEFAULT_REQUEST_TIMEOUT = 30
DEFAULT_CHUNK_SIZE = 8192
HTTP_STATUS_ERROR_THRESHOLD = 400
HTTP_STATUS_NOT_FOUND = 404
HTTP_STATUS_FORBIDDEN = 403

# Option keys accepted by SourceOptions
VALID_OPTIONS = ("src", "tag_name", "ignore_cache", "logger", "verbose")
URL_PREFIX = "http"

# Cache layout: <data root>/api-console/cache/sources/<tag>.zip
APPDATA_ENV_VAR = "APPDATA"
CACHE_DIR_PARTS = ("api-console", "cache", "sources")
DARWIN_DATA_DIR_PARTS = ("Library", "Preferences")
LINUX_DATA_DIR_PARTS = (".config",)
FALLBACK_DATA_ROOT = "/var/local"
ZIP_EXTENSION = ".zip"
HASH_ALGORITHM = "sha256"
HASH_CHUNK_SIZE = 4096

# Vendoring
VENDOR_DIR_NAME = "bower_components"
VENDOR_PACKAGE_NAME = "api-console"
VENDOR_EXCLUDED_DIRS = ("bower_components", "node_modules")

# Error messages
MSG_UNZIP_FAILED = "Unable to unzip the API console sources"
MSG_OPTIONS_INVALID = "Options did not pass validation."
MSG_MUTUALLY_EXCLUSIVE = (
    'The "src" and "tag_name" options are mutually exclusive. '
    "Choose only one option."
)

# Logging configuration
LOGGER_NAME = "api_console_sources"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
INFO_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s: %(message)s"
LOG_FILE_NAME = "api-console-sources.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_FILE_BACKUP_COUNT = 5

# Environment variable names
LOG_LEVEL_ENV_VAR = "API_CONSOLE_SOURCES_LOG_LEVEL"
GITHUB_TOKEN_ENV_VAR = "GITHUB_TOKEN"

# Application name used for platform directories
APP_NAME = "api-console-sources"

# CLI exit codes
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2
