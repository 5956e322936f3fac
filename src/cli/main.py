"""relayscope CLI entry points.
This module exposes commands for ingesting daily relay snapshots.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
import sys
from typing import Any, Sequence

from core.config import RelayscopeConfig
from core.constants import SUPPORTED_LOG_LEVELS
from core.errors import RelayscopeError
from core.logging_config import configure_logging
from core.types import BatchIngestReport
from relayscope import RelayscopeClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="relayscope", description="Ingest daily relay snapshot files"
    )
    parser.add_argument("--data-root", help="Override RELAYSCOPE_DATA_ROOT for this command")
    parser.add_argument("--config", help="YAML settings file overriding environment values")
    parser.add_argument(
        "--log-level",
        choices=SUPPORTED_LOG_LEVELS,
        help="Override RELAYSCOPE_LOG_LEVEL for this command",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_ingest_command(subparsers)
    _add_ingest_dir_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the relayscope CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        client = _build_client(args.data_root, args.config, args.log_level)
        if args.command == "ingest":
            return _run_ingest_command(client, args)
        if args.command == "ingest-dir":
            return _run_ingest_dir_command(client, args)
    except RelayscopeError as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(
    data_root: str | None,
    settings_path: str | None,
    log_level: str | None,
) -> RelayscopeClient:
    """Build SDK client with optional overrides and configure logging.

    Args:
        data_root: Optional data root override path.
        settings_path: Optional YAML settings file.
        log_level: Optional log level override.

    Returns:
        Configured SDK client.
    """
    if settings_path:
        config = RelayscopeConfig.from_file(settings_path)
    else:
        config = RelayscopeConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    if log_level:
        config = replace(config, log_level=log_level)
    configure_logging(config.log_level)
    return RelayscopeClient(config)


def _run_ingest_command(client: RelayscopeClient, args: argparse.Namespace) -> int:
    """Handle ingest command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    file_paths = [Path(path).expanduser().resolve() for path in args.files]
    report = client.ingest_many(file_paths, fail_fast=args.fail_fast)
    return _print_report(report)


def _run_ingest_dir_command(client: RelayscopeClient, args: argparse.Namespace) -> int:
    """Handle ingest-dir command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    report = client.ingest_directory(args.directory, args.pattern, fail_fast=args.fail_fast)
    return _print_report(report)


def _print_report(report: BatchIngestReport) -> int:
    for outcome in report.outcomes:
        print(outcome.summary())
    for failure in report.failures:
        print(
            f"Failed to ingest {failure.source_path} at stage {failure.stage}: "
            f"{failure.message}",
            file=sys.stderr,
        )
    return 0 if report.succeeded else 1


def _add_fail_fast_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Stop at the first file that fails instead of continuing",
    )


def _add_ingest_command(subparsers: Any) -> None:
    """Register ingest subcommand."""
    parser = subparsers.add_parser("ingest", help="Ingest one or more snapshot files")
    parser.add_argument("files", nargs="+", help="Snapshot files named <prefix>-YYYY-MM-DD.csv")
    _add_fail_fast_argument(parser)


def _add_ingest_dir_command(subparsers: Any) -> None:
    """Register ingest-dir subcommand."""
    parser = subparsers.add_parser(
        "ingest-dir", help="Ingest every snapshot file in a directory in name order"
    )
    parser.add_argument("directory", help="Directory holding snapshot files")
    parser.add_argument("--pattern", help="File glob, defaults to RELAYSCOPE_FILE_PATTERN")
    _add_fail_fast_argument(parser)
