"""Local history CLI entry points.
This module exposes commands to capture and inspect local history.
It maps argparse commands onto history service calls.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from core.config import HistoryConfig
from core.constants import DEFAULT_ENTRY_SOURCE
from core.errors import HistoryError
from core.logging_config import enable_console_logging
from core.resource_uri import Resource
from core.types import FileWorkingCopy
from history.history_service import WorkingCopyHistoryService


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="localhistory", description="Local file history CLI")
    parser.add_argument("--data-root", help="Override LOCAL_HISTORY_DATA_ROOT for this command")
    parser.add_argument("--verbose", action="store_true", help="Log structured events to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_add_command(subparsers)
    _add_entries_command(subparsers)
    _add_resources_command(subparsers)
    _add_remove_command(subparsers)
    _add_purge_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the local history CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        enable_console_logging(logging.INFO)
    try:
        service = _build_service(args.data_root)
        return asyncio.run(_dispatch(service, args))
    except HistoryError as error:
        print(f"error={error}")
        return 1


async def _dispatch(service: WorkingCopyHistoryService, args: argparse.Namespace) -> int:
    """Route parsed arguments to a command handler."""
    if args.command == "add":
        return await _run_add_command(service, args)
    if args.command == "entries":
        return await _run_entries_command(service, args)
    if args.command == "resources":
        return await _run_resources_command(service)
    if args.command == "remove":
        return await _run_remove_command(service, args)
    if args.command == "purge":
        return await _run_purge_command(service)
    raise HistoryError(f"Unsupported command: {args.command}")


def _build_service(data_root: str | None) -> WorkingCopyHistoryService:
    """Build history service with optional data-root override.

    Args:
        data_root: Optional override path.

    Returns:
        Configured history service.
    """
    config = HistoryConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    return WorkingCopyHistoryService(config)


async def _run_add_command(service: WorkingCopyHistoryService, args: argparse.Namespace) -> int:
    """Handle add command."""
    working_copy = FileWorkingCopy(Resource.file(args.path))
    entry = await service.add_entry(working_copy, source=args.source)
    if entry is None:
        print("skipped")
        return 0
    print(f"{entry.entry_id}\t{entry.location}")
    return 0


async def _run_entries_command(
    service: WorkingCopyHistoryService, args: argparse.Namespace
) -> int:
    """Handle entries command."""
    entries = await service.get_entries(Resource.file(args.path))
    for entry in entries:
        print(
            f"{entry.entry_id}\t"
            f"{entry.created_at.isoformat()}\t"
            f"{entry.source}\t"
            f"{entry.location}"
        )
    return 0


async def _run_resources_command(service: WorkingCopyHistoryService) -> int:
    """Handle resources command."""
    for resource in await service.get_all():
        print(resource)
    return 0


async def _run_remove_command(service: WorkingCopyHistoryService, args: argparse.Namespace) -> int:
    """Handle remove command."""
    entries = await service.get_entries(Resource.file(args.path))
    target = next((entry for entry in entries if entry.entry_id == args.entry_id), None)
    if target is None or not await service.remove_entry(target):
        print(f"error=Entry '{args.entry_id}' not found for {args.path}.")
        return 1
    print(f"removed={args.entry_id}")
    return 0


async def _run_purge_command(service: WorkingCopyHistoryService) -> int:
    """Handle purge command."""
    removed_count = await service.remove_all()
    print(f"removed_resources={removed_count}")
    return 0


def _add_add_command(subparsers: Any) -> None:
    """Register add subcommand."""
    parser = subparsers.add_parser("add", help="Capture the current content of a file")
    parser.add_argument("path", help="Local file path")
    parser.add_argument(
        "--source",
        default=DEFAULT_ENTRY_SOURCE,
        help="Label describing why the snapshot is taken",
    )


def _add_entries_command(subparsers: Any) -> None:
    """Register entries subcommand."""
    parser = subparsers.add_parser("entries", help="List captured snapshots of a file")
    parser.add_argument("path", help="Local file path")


def _add_resources_command(subparsers: Any) -> None:
    """Register resources subcommand."""
    subparsers.add_parser("resources", help="List files that have history")


def _add_remove_command(subparsers: Any) -> None:
    """Register remove subcommand."""
    parser = subparsers.add_parser("remove", help="Remove one snapshot of a file")
    parser.add_argument("path", help="Local file path")
    parser.add_argument("entry_id", help="Entry id as printed by the entries command")


def _add_purge_command(subparsers: Any) -> None:
    """Register purge subcommand."""
    subparsers.add_parser("purge", help="Remove all history")
