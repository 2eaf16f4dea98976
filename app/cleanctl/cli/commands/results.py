"""Result listing commands.

Lists duplicates, junk files, large files and the directory tree from
the last stored scan, and searches them.
"""

import json
from collections.abc import Sequence
from enum import Enum
from typing import Annotated

import typer
from rich.markup import escape

from cleanctl.cli.types import OutputFormat, get_engine, require_results
from cleanctl.models.file_record import FileRecord, format_bytes
from cleanctl.scanning.search import SortOrder, filter_records, sort_records
from cleanctl.utils.formatting import (
    console,
    create_file_table,
    create_tree,
    format_file_row,
    print_success,
)

LimitOption = Annotated[
    int | None,
    typer.Option(
        "--limit",
        "-n",
        min=1,
        help="Limit number of files to display.",
    ),
]
FormatOption = Annotated[
    OutputFormat,
    typer.Option(
        "--format",
        "-f",
        help="Output format: table or json.",
        case_sensitive=False,
    ),
]


def reclaimable_bytes(duplicates: Sequence[FileRecord]) -> int:
    """Bytes freed by keeping one copy of every duplicate group."""
    seen: set[int] = set()
    total = 0
    for record in duplicates:
        if record.duplicate_group in seen:
            total += record.size
        else:
            seen.add(record.duplicate_group)
    return total


def _print_records(
    records: Sequence[FileRecord],
    title: str,
    limit: int | None,
    output_format: OutputFormat,
    show_group: bool = False,
) -> None:
    display = records[:limit] if limit else records

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps([r.to_dict() for r in display]))
        return

    table = create_file_table(title, show_group=show_group)
    for record in display:
        table.add_row(*format_file_row(record, show_group=show_group))
    console.print(table)

    total = sum(r.size for r in records)
    console.print(f"\n[dim]{len(records):,} files, {format_bytes(total)} total[/]")
    if limit and len(display) < len(records):
        console.print(f"[dim](showing {len(display)} of {len(records)}, limited to {limit})[/]")


def duplicates(limit: LimitOption = None, output_format: FormatOption = OutputFormat.TABLE) -> None:
    """List duplicate files grouped by identical content."""
    engine = get_engine()
    require_results(engine)
    records = engine.duplicates
    if not records:
        if output_format == OutputFormat.JSON:
            console.print_json("[]")
        else:
            print_success("No duplicate files found.")
        return
    _print_records(records, "Duplicate Files", limit, output_format, show_group=True)
    if output_format == OutputFormat.TABLE:
        groups = len({r.duplicate_group for r in records})
        console.print(
            f"[dim]{groups} groups, {format_bytes(reclaimable_bytes(records))} reclaimable[/]"
        )


def junk(limit: LimitOption = None, output_format: FormatOption = OutputFormat.TABLE) -> None:
    """List temporary files, caches and stale downloads."""
    engine = get_engine()
    require_results(engine)
    if not engine.junk_files:
        if output_format == OutputFormat.JSON:
            console.print_json("[]")
        else:
            print_success("No junk files found.")
        return
    _print_records(engine.junk_files, "Junk Files", limit, output_format)


def large(limit: LimitOption = None, output_format: FormatOption = OutputFormat.TABLE) -> None:
    """List the largest files above the configured threshold."""
    engine = get_engine()
    require_results(engine)
    if not engine.large_files:
        if output_format == OutputFormat.JSON:
            console.print_json("[]")
        else:
            print_success("No large files found.")
        return
    _print_records(engine.large_files, "Large Files", limit, output_format)


def tree(
    depth: Annotated[
        int,
        typer.Option("--depth", "-d", min=1, max=20, help="Directory levels to show."),
    ] = 2,
    show_files: Annotated[
        bool,
        typer.Option("--files", help="Also list files inside shown directories."),
    ] = False,
) -> None:
    """Show the scanned directory tree with sizes, largest first."""
    engine = get_engine()
    require_results(engine)
    if engine.tree is None:
        print_success("The last scan has no directory tree.")
        return
    console.print(create_tree(engine.tree, max_depth=depth, show_files=show_files))


class SearchScope(str, Enum):
    """Result list a search runs over."""

    ALL = "all"
    DUPLICATES = "duplicates"
    JUNK = "junk"
    LARGE = "large"


def search(
    query: Annotated[
        str,
        typer.Argument(help="Name terms and operators such as >50mb, ext:pdf or after:DATE."),
    ],
    scope: Annotated[
        SearchScope,
        typer.Option("--in", help="Result list to search.", case_sensitive=False),
    ] = SearchScope.ALL,
    sort: Annotated[
        SortOrder,
        typer.Option("--sort", "-s", help="Sort order of the matches.", case_sensitive=False),
    ] = SortOrder.SIZE_DESC,
    limit: LimitOption = None,
    output_format: FormatOption = OutputFormat.TABLE,
) -> None:
    """Search the scanned files by name, size, extension and date."""
    engine = get_engine()
    require_results(engine)
    pool = {
        SearchScope.ALL: engine.files,
        SearchScope.DUPLICATES: engine.duplicates,
        SearchScope.JUNK: engine.junk_files,
        SearchScope.LARGE: engine.large_files,
    }[scope]
    found = sort_records(filter_records(pool, query), sort)
    if not found:
        if output_format == OutputFormat.JSON:
            console.print_json("[]")
        else:
            print_success(f"No files match {escape(query)!r}.")
        return
    show_group = scope is SearchScope.DUPLICATES
    _print_records(found, "Search Results", limit, output_format, show_group=show_group)
