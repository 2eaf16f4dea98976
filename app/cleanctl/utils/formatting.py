"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

import sys
from collections.abc import Iterable
from datetime import datetime

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from cleanctl.core.theme import get_theme
from cleanctl.models.file_record import DirectoryNode, FileRecord, format_bytes

__all__ = [
    "console",
    "create_file_table",
    "create_tree",
    "err_console",
    "format_bytes",
    "format_file_row",
    "format_size",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]

_MEDIUM_SIZE = 10 * 1024 * 1024
_LARGE_SIZE = 500 * 1024 * 1024


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def format_size(size: int) -> str:
    """Format a byte count with a color bucket markup."""
    if size >= _LARGE_SIZE:
        style = "size.large"
    elif size >= _MEDIUM_SIZE:
        style = "size.medium"
    else:
        style = "size.small"
    return f"[{style}]{format_bytes(size)}[/]"


def create_file_table(title: str, show_group: bool = False) -> Table:
    """Create a pre-configured table for displaying files.

    Args:
        title: Table title.
        show_group: Add a duplicate group column.

    Returns:
        Rich Table configured for file display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    if show_group:
        table.add_column("Group", justify="right", style="duplicate", width=6)
    table.add_column("Name", no_wrap=True, style="file.name")
    table.add_column("Size", justify="right")
    table.add_column("Category", style="muted")
    table.add_column("Modified", style="muted")
    table.add_column("Path", style="file.path", overflow="ellipsis")
    return table


def format_file_row(record: FileRecord, show_group: bool = False) -> tuple[str, ...]:
    """Format a file record as a table row matching create_file_table()."""
    modified = datetime.fromtimestamp(record.last_modified / 1000).strftime("%Y-%m-%d")
    row = (
        escape(record.name),
        format_size(record.size),
        record.category.value,
        modified,
        escape(record.path),
    )
    if show_group:
        return (str(record.duplicate_group), *row)
    return row


def create_tree(node: DirectoryNode, max_depth: int = 2, show_files: bool = False) -> Tree:
    """Build a Rich tree of a directory subtree, largest entries first.

    Args:
        node: Root of the subtree to render.
        max_depth: Number of directory levels shown below the root.
        show_files: Also list files directly inside each shown directory.
    """
    tree = Tree(_node_label(node), guide_style="border")
    _add_children(tree, node, max_depth, show_files)
    return tree


def _node_label(node: DirectoryNode) -> str:
    return (
        f"[bold_header]{escape(node.name)}[/] "
        f"{format_size(node.total_size)} [muted]({node.total_file_count:,} files)[/]"
    )


def _add_children(branch: Tree, node: DirectoryNode, depth: int, show_files: bool) -> None:
    if depth <= 0:
        return
    for child in sorted(node.children, key=lambda c: (-c.total_size, c.name)):
        _add_children(branch.add(_node_label(child)), child, depth - 1, show_files)
    if show_files:
        for record in _largest(node.files):
            branch.add(f"[text]{escape(record.name)}[/] {format_size(record.size)}")


def _largest(records: Iterable[FileRecord]) -> list[FileRecord]:
    return sorted(records, key=lambda r: (-r.size, r.name))


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
