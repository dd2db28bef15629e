"""
Command-line entry point for repotidy
"""

import argparse
import asyncio
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from src import __version__
from src.backup import BackupError, BackupStore, RestoreError
from src.config import get_settings
from src.operations import OperationExecutor, OperationPlan, OperationPlanner
from src.repository import RepositoryDetector
from src.utils import get_logger, setup_logging


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="repotidy",
        description="Reorganize repository trees with reversible file operations",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="List repositories under a directory")
    scan.add_argument("path", type=Path)

    enforce = subparsers.add_parser(
        "enforce", help="Create standard folders and move root scripts into scripts/"
    )
    enforce.add_argument("path", type=Path)
    enforce.add_argument("--dry-run", action="store_true", help="Show the plan only")

    backups = subparsers.add_parser("backups", help="List backups, newest first")
    backups.add_argument("path", type=Path)

    restore = subparsers.add_parser("restore", help="Restore files from a backup")
    restore.add_argument("path", type=Path)
    restore.add_argument("manifest_id")

    return parser


def print_plan(plan: OperationPlan, console: Console) -> None:
    if not plan.operations:
        console.print("No operations planned.")
        return

    for op in plan.operations:
        line = f"  {op.type.value:<6} {op.source_path}"
        if op.target_path:
            line += f" -> {op.target_path}"
        console.print(line, soft_wrap=True)
        console.print(f"         {op.reason}", soft_wrap=True)

    for warning in plan.warnings:
        console.print(f"  [yellow]warning:[/yellow] {warning}", soft_wrap=True)

    console.print(f"\nOperations: {len(plan.operations)}")
    console.print(f"Backup required: {'Yes' if plan.backup_required else 'No'}")
    console.print(f"Estimated duration: {plan.estimated_duration_ms}ms")


async def run_scan(args: argparse.Namespace, console: Console) -> int:
    scan = await RepositoryDetector().discover(args.path)

    if not scan.repositories:
        console.print("No repositories found.")
        return 0

    table = Table(title="Repositories")
    table.add_column("Path", overflow="fold")
    table.add_column("Root")
    for repo in scan.repositories:
        table.add_row(str(repo.path), "yes" if repo.is_root else "")
    console.print(table)
    console.print(f"Found {len(scan.repositories)} repositories")
    return 0


async def run_enforce(args: argparse.Namespace, console: Console) -> int:
    settings = get_settings()
    planner = OperationPlanner(RepositoryDetector(settings), settings)
    plan = await planner.plan_folder_enforcement(args.path)
    print_plan(plan, console)

    if not plan.operations:
        return 0

    executor = OperationExecutor(BackupStore(settings.backup_dir_for(args.path)))
    result = await executor.execute(plan, dry_run=args.dry_run)

    console.print(
        f"\nCompleted: {result.operations_completed}  Failed: {result.operations_failed}"
    )
    for error in result.errors:
        console.print(f"  [red]error:[/red] {error}", soft_wrap=True)

    if result.backup_manifest_id and not args.dry_run:
        console.print(f"Backup created: {result.backup_manifest_id}", soft_wrap=True)
        console.print(
            f"Restore with: repotidy restore {args.path} {result.backup_manifest_id}",
            soft_wrap=True,
        )

    return 0 if result.success else 1


async def run_backups(args: argparse.Namespace, console: Console) -> int:
    store = BackupStore(get_settings().backup_dir_for(args.path))
    manifests = await store.list_backups()

    if not manifests:
        console.print("No backups found.")
        return 0

    for manifest in manifests:
        console.print(manifest.id, soft_wrap=True)
        console.print(f"  Date: {manifest.timestamp:%Y-%m-%d %H:%M:%S}")
        console.print(f"  Files: {len(manifest.entries)}")
        console.print(f"  Reversible: {'Yes' if manifest.reversible else 'No'}")
    return 0


async def run_restore(args: argparse.Namespace, console: Console) -> int:
    store = BackupStore(get_settings().backup_dir_for(args.path))

    try:
        result = await store.restore(args.manifest_id)
    except RestoreError as e:
        console.print(
            f"Restored {len(e.result.restored)} file(s), "
            f"{len(e.result.errors)} failed:"
        )
        for error in e.result.errors:
            console.print(f"  [red]error:[/red] {error}", soft_wrap=True)
        return 1
    except BackupError as e:
        console.print(f"[red]Restore failed:[/red] {e}", soft_wrap=True)
        return 1

    console.print(f"Restored {len(result.restored)} file(s) from {result.manifest_id}")
    return 0


COMMANDS = {
    "scan": run_scan,
    "enforce": run_enforce,
    "backups": run_backups,
    "restore": run_restore,
}


async def main(argv: list[str] | None = None, console: Console | None = None) -> int:
    """Parse arguments and run the selected command."""
    args = build_parser().parse_args(argv)
    console = console or Console()

    setup_logging()
    logger = get_logger("main")
    logger.debug("Running command", command=args.command, version=__version__)

    return await COMMANDS[args.command](args, console)


def run() -> None:
    """Console script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nInterrupted")
        sys.exit(130)


if __name__ == "__main__":
    run()
