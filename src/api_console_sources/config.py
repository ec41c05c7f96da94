"""
Options file support.

An options file is a YAML mapping using the same keys as `SourceOptions`:

    tag_name: v5.0.0
    ignore_cache: false
    verbose: true

The mapping is returned unvalidated; `SourceOptions` reports unknown keys and
conflicts.
"""

import os
from typing import Any, Dict

import yaml

from api_console_sources.exceptions import ConfigFileError
from api_console_sources.log_utils import logger

from .interfaces import Pathish


def load_options_file(path: Pathish) -> Dict[str, Any]:
    """
    Read source options from a YAML file.

    Parameters:
        path (Pathish): Location of the options file.

    Returns:
        Dict[str, Any]: Options mapping; empty when the file is empty.

    Raises:
        ConfigFileError: If the file cannot be read, is not valid YAML, or does
            not contain a mapping.
    """
    file_path = os.fspath(path)
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigFileError(
            f"Unable to read options file {file_path}", details=str(e)
        ) from e
    except yaml.YAMLError as e:
        raise ConfigFileError(
            f"Options file {file_path} is not valid YAML", details=str(e)
        ) from e

    if data is None:
        logger.debug("Options file %s is empty", file_path)
        return {}
    if not isinstance(data, dict):
        raise ConfigFileError(
            f"Options file {file_path} must contain a mapping",
            details=f"got {type(data).__name__}",
        )
    return {str(key): value for key, value in data.items()}
