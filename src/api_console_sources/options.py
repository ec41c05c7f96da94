"""
Options for the sources resolver.

`SourceOptions` validates user input eagerly. Validation never raises; the
collected `validation_errors` and `validation_warnings` are the only signal.
"""

import logging
import os
from typing import Any, Dict, List, Mapping, Optional

from api_console_sources.constants import MSG_MUTUALLY_EXCLUSIVE, VALID_OPTIONS


class SourceOptions:
    """
    Configuration of a SourcesResolver.

    Attributes:
        tag_name: Release tag to stage. When neither this nor `src` is set the
            latest release is used.
        src: Local directory, local zip file or URL of a zip file.
        ignore_cache: Skip lookups in the release archive cache.
        logger: Logger to report through instead of the default console logger.
        verbose: Print debug messages on the default console logger.
    """

    def __init__(self, opts: Optional[Mapping[str, Any]] = None) -> None:
        opts = dict(opts or {})
        self.tag_name: Optional[str] = None
        self.src: Optional[str] = None
        self.ignore_cache: Optional[bool] = None
        self.logger: Optional[logging.Logger] = opts.get("logger")
        self.verbose: bool = opts.get("verbose") is True

        self.validate_options(opts)
        if not self.is_valid:
            return

        opts = self._set_defaults(opts)
        self.tag_name = opts.get("tag_name") or None
        src = opts.get("src") or None
        self.src = os.fspath(src) if src is not None else None
        self.ignore_cache = opts["ignore_cache"]
        self.verbose = opts["verbose"]

    @property
    def valid_options(self) -> List[str]:
        """List of recognized option keys."""
        return list(VALID_OPTIONS)

    @property
    def is_valid(self) -> bool:
        """True when validation produced no errors."""
        return len(self.validation_errors) == 0

    def validate_options(self, user_opts: Optional[Mapping[str, Any]] = None) -> None:
        """
        Validate user options, resetting `validation_errors` and `validation_warnings`.

        Parameters:
            user_opts (Optional[Mapping[str, Any]]): Raw user configuration.
        """
        user_opts = user_opts or {}
        self.validation_errors: List[str] = []
        self.validation_warnings: List[str] = []

        self._validate_options_list(user_opts)
        self._validate_source_options(user_opts)
        self._validate_option_types(user_opts)

    def _set_defaults(self, opts: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(opts.get("ignore_cache"), bool):
            opts["ignore_cache"] = False
        if not isinstance(opts.get("verbose"), bool):
            opts["verbose"] = False
        return opts

    def _validate_options_list(self, user_opts: Mapping[str, Any]) -> None:
        known = self.valid_options
        unknown = [str(key) for key in user_opts if key not in known]
        if unknown:
            message = "Unknown option"
            if len(unknown) > 1:
                message += "s"
            message += ": " + ", ".join(unknown)
            self.validation_errors.append(message)

    def _validate_source_options(self, user_opts: Mapping[str, Any]) -> None:
        if user_opts.get("src") and user_opts.get("tag_name"):
            self.validation_errors.append(MSG_MUTUALLY_EXCLUSIVE)
        if user_opts.get("src") and user_opts.get("ignore_cache") is True:
            self.validation_warnings.append(
                'The "ignore_cache" option has no effect with "src": '
                "only GitHub releases are cached."
            )

    def _validate_option_types(self, user_opts: Mapping[str, Any]) -> None:
        tag_name = user_opts.get("tag_name")
        if tag_name and not isinstance(tag_name, str):
            self.validation_errors.append(
                f'The "tag_name" option must be a string, got {type(tag_name).__name__}.'
            )
        src = user_opts.get("src")
        if src and not isinstance(src, (str, os.PathLike)):
            self.validation_errors.append(
                f'The "src" option must be a path or URL string, got {type(src).__name__}.'
            )
        ignore_cache = user_opts.get("ignore_cache")
        if ignore_cache is not None and not isinstance(ignore_cache, bool):
            self.validation_warnings.append(
                f'The "ignore_cache" option should be a boolean, got {ignore_cache!r}. '
                "Using false."
            )

    def __repr__(self) -> str:
        return (
            f"SourceOptions(tag_name={self.tag_name!r}, src={self.src!r}, "
            f"ignore_cache={self.ignore_cache!r}, verbose={self.verbose!r})"
        )
