# src/api_console_sources/cli.py

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import platformdirs

from api_console_sources import log_utils
from api_console_sources.client import AsyncGitHubClient
from api_console_sources.config import load_options_file
from api_console_sources.constants import (
    APP_NAME,
    EXIT_CONFIG_ERROR,
    EXIT_FAILURE,
    EXIT_OK,
    GITHUB_TOKEN_ENV_VAR,
)
from api_console_sources.exceptions import ApiConsoleSourcesError, ConfigurationError
from api_console_sources.resolver import SourcesResolver


def build_parser() -> argparse.ArgumentParser:
    """
    Create the argument parser for the `api-console-sources` command.

    Returns:
        argparse.ArgumentParser: Parser accepting a destination plus source options.
    """
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Download or copy the API Console sources into a directory.",
    )
    parser.add_argument("destination", help="Directory that receives the sources.")
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--tag",
        dest="tag_name",
        help="Release tag to download (e.g. v5.0.0). Defaults to the latest release.",
    )
    source.add_argument(
        "--src",
        help="Local directory, local zip file or zip file URL to take sources from.",
    )
    parser.add_argument(
        "--ignore-cache",
        action="store_true",
        default=None,
        help="Download the release even when it is cached.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=None,
        help="Print debug messages.",
    )
    parser.add_argument(
        "--config",
        help="YAML file with options (tag_name, src, ignore_cache, verbose).",
    )
    parser.add_argument(
        "--vendor",
        action="store_true",
        help="Also copy the sources into DESTINATION/bower_components/api-console.",
    )
    parser.add_argument(
        "--log-file",
        action="store_true",
        help="Write a log file to the user log directory.",
    )
    return parser


def _build_options(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Merge options from the optional YAML file with command-line flags.

    Command-line flags take precedence over file values. The package logger is
    always injected so resolver output goes through the CLI's handlers.
    """
    options: Dict[str, Any] = {}
    if args.config:
        options.update(load_options_file(args.config))

    for key in ("tag_name", "src", "ignore_cache", "verbose"):
        value = getattr(args, key)
        if value is not None:
            options[key] = value

    options["logger"] = log_utils.logger
    return options


async def _stage_sources(
    resolver: SourcesResolver,
    client: AsyncGitHubClient,
    destination: str,
    vendor: bool,
) -> None:
    async with client:
        await resolver.sources_to(destination)
    if vendor:
        await resolver.move_console_to_vendor(destination)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point of the `api-console-sources` command.

    Returns:
        int: 0 on success, 2 for configuration errors, 1 for any other failure.
    """
    args = build_parser().parse_args(argv)

    if args.verbose:
        log_utils.set_log_level("DEBUG")
    if args.log_file:
        log_utils.add_file_logging(
            Path(platformdirs.user_log_dir(APP_NAME)),
            "DEBUG" if args.verbose else "INFO",
        )

    try:
        options = _build_options(args)
        client = AsyncGitHubClient(github_token=os.environ.get(GITHUB_TOKEN_ENV_VAR))
        resolver = SourcesResolver(options, client, client)
    except ConfigurationError as e:
        log_utils.logger.error("Invalid configuration: %s", e)
        return EXIT_CONFIG_ERROR

    try:
        asyncio.run(_stage_sources(resolver, client, args.destination, args.vendor))
    except ApiConsoleSourcesError as e:
        log_utils.logger.error("Failed to stage API Console sources: %s", e)
        return EXIT_FAILURE

    log_utils.logger.info("API Console sources are ready in %s", args.destination)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
