"""Scan command implementation.

Scans a directory tree and stores the results for the listing and
clean commands.
"""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from cleanctl.cli.types import OutputFormat, get_config, get_engine
from cleanctl.core.engine import CleanupEngine
from cleanctl.models.scan_state import Cancelled, Error, ScanState, describe
from cleanctl.utils.formatting import console, format_size, print_error, print_warning


def scan(
    ctx: typer.Context,
    root: Annotated[
        Path | None,
        typer.Argument(
            help="Directory to scan (defaults to scan_root from the config).",
            exists=True,
            file_okay=False,
            dir_okay=True,
        ),
    ] = None,
    threshold_mb: Annotated[
        int | None,
        typer.Option(
            "--threshold-mb",
            "-t",
            min=1,
            help="Minimum size in MiB for large files.",
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """Scan a directory tree for duplicates, junk and large files.

    Examples:
        cleanctl scan                      # Scan the configured root
        cleanctl scan ~/Downloads          # Scan another directory
        cleanctl scan --threshold-mb 200   # Only files >= 200 MiB are large
        cleanctl scan --format json        # Print the summary as JSON
    """
    quiet = bool(ctx.obj and ctx.obj.get("quiet"))
    config = get_config(root)
    engine = get_engine(config)
    threshold = threshold_mb * 1024 * 1024 if threshold_mb else None

    final: ScanState | None = None
    try:
        stream = engine.start_scan(threshold)
        if quiet or output_format == OutputFormat.JSON:
            for final in stream:
                pass
        else:
            with console.status(f"Scanning {engine.root}...") as status:
                for final in stream:
                    status.update(describe(final))
    except KeyboardInterrupt:
        engine.cancel_scan()
        engine.wait()
        print_warning("Scan cancelled.")
        raise typer.Exit(code=130) from None
    finally:
        engine.wait()

    if isinstance(final, Error):
        print_error(final.message)
        raise typer.Exit(code=1)
    if final is None or isinstance(final, Cancelled):
        print_warning("Scan cancelled.")
        raise typer.Exit(code=1)

    stats = engine.stats
    groups = len({d.duplicate_group for d in engine.duplicates})

    if output_format == OutputFormat.JSON:
        payload = {
            "root": engine.root,
            "total_files": stats.total_files,
            "total_size": stats.total_size,
            "duplicate_groups": groups,
            "duplicate_files": len(engine.duplicates),
            "duplicate_size": stats.duplicate_size,
            "junk_files": len(engine.junk_files),
            "junk_size": stats.junk_size,
            "large_files": len(engine.large_files),
            "large_size": stats.large_size,
            "scan_duration_ms": stats.scan_duration_ms,
        }
        console.print_json(json.dumps(payload))
        return

    if not quiet:
        console.print(_summary_table(engine, groups))


def _summary_table(engine: CleanupEngine, groups: int) -> Table:
    """Build the scan summary table."""
    stats = engine.stats
    table = Table(
        title=f"Scan Summary: {engine.root}",
        caption=f"Scanned in {stats.scan_duration_ms / 1000:.1f}s",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Result")
    table.add_column("Files", justify="right")
    table.add_column("Size", justify="right")

    table.add_row("All files", f"{stats.total_files:,}", format_size(stats.total_size))
    table.add_row(
        f"[duplicate]Duplicates[/] [muted]({groups} groups)[/]",
        f"{len(engine.duplicates):,}",
        format_size(stats.duplicate_size),
    )
    table.add_row("[junk]Junk[/]", f"{len(engine.junk_files):,}", format_size(stats.junk_size))
    table.add_row(
        "[large]Large files[/]", f"{len(engine.large_files):,}", format_size(stats.large_size)
    )
    return table
