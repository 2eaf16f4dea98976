"""Clean command implementation.

Moves junk, duplicate or large files into quarantine, offers an undo,
and then deletes them for good.
"""

import time
from enum import Enum
from typing import Annotated

import typer
from rich.markup import escape

from cleanctl.cli.types import get_engine, require_results
from cleanctl.core.engine import CleanupEngine
from cleanctl.models.file_record import FileRecord, format_bytes
from cleanctl.utils.formatting import (
    console,
    create_file_table,
    format_file_row,
    print_info,
    print_success,
    print_warning,
)

PLAN_PREVIEW_ROWS = 20


class CleanTarget(str, Enum):
    """Result set to clean."""

    JUNK = "junk"
    DUPLICATES = "duplicates"
    LARGE = "large"


def select_targets(engine: CleanupEngine, target: CleanTarget) -> list[FileRecord]:
    """Pick the files a clean of the given target removes.

    For duplicates the first member of each group (the copy listed first)
    is kept and the others are selected.
    """
    if target == CleanTarget.JUNK:
        return list(engine.junk_files)
    if target == CleanTarget.LARGE:
        return list(engine.large_files)

    selected: list[FileRecord] = []
    kept: set[int] = set()
    for record in engine.duplicates:
        if record.duplicate_group in kept:
            selected.append(record)
        else:
            kept.add(record.duplicate_group)
    return selected


def clean(
    target: Annotated[
        CleanTarget,
        typer.Argument(help="What to clean: junk, duplicates or large.", case_sensitive=False),
    ],
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be deleted."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation and undo prompts."),
    ] = False,
) -> None:
    """Delete files from the last scan's results.

    Files are first moved to quarantine. Unless --yes is given, an undo is
    offered before they are deleted permanently.
    """
    engine = get_engine()
    require_results(engine)

    selection = select_targets(engine, target)
    if not selection:
        print_success(f"Nothing to clean: no {target.value} files in the last scan.")
        return

    total = sum(r.size for r in selection)
    _print_plan(selection, target, dry_run)
    console.print(f"\n[dim]{len(selection):,} files, {format_bytes(total)} total[/]")

    if dry_run:
        print_info("Dry run: no files were deleted.")
        return

    if not yes:
        confirmed = typer.confirm(
            f"\nMove {len(selection)} file(s) ({format_bytes(total)}) to quarantine?",
            default=False,
        )
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    result = engine.delete_files(selection)
    if result.moved:
        what = escape(result.single_file_name or f"{result.moved} file(s)")
        print_success(f"Deleted {what}, freeing {format_bytes(result.freed_bytes)}.")
    if result.failed:
        print_warning(f"{result.failed} file(s) could not be deleted.")

    if result.can_undo and not yes:
        _offer_undo(engine)
    else:
        engine.confirm_delete()

    if result.failed:
        raise typer.Exit(code=1)


def _offer_undo(engine: CleanupEngine) -> None:
    """Ask for an undo; answers after the undo window commit the delete."""
    timeout = engine.config.undo_timeout_seconds
    started = time.monotonic()
    undo = typer.confirm(f"Undo? ({timeout}s)", default=False)
    if undo and time.monotonic() - started <= timeout:
        restored = engine.undo_delete()
        print_info(f"Restored {len(restored)} file(s).")
        return
    if undo:
        print_warning("Undo window expired.")
    engine.confirm_delete()


def _print_plan(selection: list[FileRecord], target: CleanTarget, dry_run: bool) -> None:
    title = f"Files to Delete: {target.value}"
    if dry_run:
        title += " (Dry Run)"
    show_group = target == CleanTarget.DUPLICATES
    table = create_file_table(title, show_group=show_group)
    for record in selection[:PLAN_PREVIEW_ROWS]:
        table.add_row(*format_file_row(record, show_group=show_group))
    console.print(table)
    if len(selection) > PLAN_PREVIEW_ROWS:
        console.print(f"[dim]... and {len(selection) - PLAN_PREVIEW_ROWS} more[/]")
