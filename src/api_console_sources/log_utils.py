import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

from api_console_sources.constants import (
    DEBUG_LOG_FORMAT,
    INFO_LOG_FORMAT,
    LOG_DATE_FORMAT,
    LOG_FILE_BACKUP_COUNT,
    LOG_FILE_MAX_BYTES,
    LOG_FILE_NAME,
    LOG_LEVEL_ENV_VAR,
    LOGGER_NAME,
)

logger = logging.getLogger(LOGGER_NAME)

# Kept so file logging can be reconfigured without stacking handlers
_file_handler: Optional[RotatingFileHandler] = None


def _build_console_handler(level: int) -> RichHandler:
    """
    Create the RichHandler used for console output at the given level.

    Parameters:
        level (int): Logging level applied to the handler.

    Returns:
        RichHandler: A handler with a message-only formatter.
    """
    console_handler = RichHandler(
        rich_tracebacks=True,
        show_time=True,
        show_level=True,
        show_path=False,
        markup=False,
        log_time_format=LOG_DATE_FORMAT,
    )
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    console_handler.setLevel(level)
    return console_handler


def set_log_level(level_name: str) -> None:
    """
    Set the log level for the package logger and reconfigure all attached handlers.

    If `level_name` is not a valid logging level name (e.g., "DEBUG", "INFO"), the function logs a warning and leaves the current configuration unchanged.

    For INFO and above, file handlers use INFO_LOG_FORMAT; below INFO they use
    DEBUG_LOG_FORMAT. RichHandler always keeps a message-only formatter.

    Parameters:
        level_name (str): Case-insensitive name of the desired logging level (e.g., "debug", "INFO").
    """
    level = getattr(logging, level_name.upper(), None)
    if not isinstance(level, int):
        logger.warning("Invalid log level name: %s. Using current level.", level_name)
        return

    logger.setLevel(level)

    for handler in logger.handlers:
        handler.setLevel(level)
        if isinstance(handler, RichHandler):
            formatter = logging.Formatter("%(message)s")
        elif level >= logging.INFO:
            formatter = logging.Formatter(INFO_LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        else:
            formatter = logging.Formatter(DEBUG_LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        handler.setFormatter(formatter)

    logger.log(level, "Log level set to %s", logging.getLevelName(level))


def add_file_logging(log_dir_path: Path, level_name: str = "INFO") -> Path:
    """
    Enable rotating file logging for the package logger.

    Creates the directory if necessary and attaches a RotatingFileHandler writing to
    the package log file inside the provided directory. Invalid level names fall back
    to INFO. Existing file logging configured by this module is removed and closed
    before reconfiguring.

    Returns:
        Path: The log file location.
    """
    global _file_handler
    if _file_handler and _file_handler in logger.handlers:
        logger.removeHandler(_file_handler)
        _file_handler.close()

    log_dir_path.mkdir(parents=True, exist_ok=True)
    log_file = log_dir_path / LOG_FILE_NAME

    resolved = getattr(logging, level_name.upper(), None)
    if not isinstance(resolved, int):
        logger.warning("Invalid file log level name: %s. Defaulting to INFO.", level_name)
        resolved = logging.INFO
    if resolved >= logging.INFO:
        file_formatter = logging.Formatter(INFO_LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    else:
        file_formatter = logging.Formatter(DEBUG_LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    _file_handler = RotatingFileHandler(
        log_file,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    _file_handler.setFormatter(file_formatter)
    _file_handler.setLevel(resolved)

    logger.addHandler(_file_handler)
    logger.info(
        "File logging enabled at %s with level %s",
        log_file,
        logging.getLevelName(resolved),
    )
    return log_file


def create_sources_logger(verbose: bool = False, name: str = "sources") -> logging.Logger:
    """
    Build a dedicated console logger for a resolver that was given no logger.

    The logger is a non-propagating child of the package logger with its own
    console handler: DEBUG when `verbose` is set, WARNING otherwise.

    Parameters:
        verbose (bool): Whether debug output should be printed.
        name (str): Suffix of the child logger name.

    Returns:
        logging.Logger: The configured logger.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    sources_logger = logger.getChild(name)
    sources_logger.propagate = False
    for handler in sources_logger.handlers[:]:
        sources_logger.removeHandler(handler)
        handler.close()
    sources_logger.addHandler(_build_console_handler(level))
    sources_logger.setLevel(level)
    return sources_logger


def _initialize_logger() -> None:
    """
    Initialize the package logger with a console RichHandler and an initial log level.

    Removes any existing handlers, disables propagation to the root logger and
    attaches a RichHandler. The initial level is read from the environment variable
    named by LOG_LEVEL_ENV_VAR (defaults to "INFO"). File logging is not enabled by
    default; call add_file_logging() to enable rotating file output.
    """
    logger.propagate = False

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    default_log_level = os.environ.get(LOG_LEVEL_ENV_VAR, "INFO").upper()
    resolved = getattr(logging, default_log_level, None)
    if not isinstance(resolved, int):
        logger.warning(
            "Invalid %s=%s; defaulting to INFO.", LOG_LEVEL_ENV_VAR, default_log_level
        )
        resolved = logging.INFO

    logger.addHandler(_build_console_handler(resolved))
    logger.setLevel(resolved)


_initialize_logger()
