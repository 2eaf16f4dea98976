"""Main CLI application entry point.

Defines the Typer application, global options and logging setup.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from cleanctl import __version__
from cleanctl.cli.commands import clean, config, results, scan
from cleanctl.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="cleanctl",
    help="Find duplicates, junk and large files, and clean them up safely.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"cleanctl version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route log records to stderr through Rich.

    Args:
        verbose: Log at DEBUG level.
        quiet: Only log errors.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=verbose, rich_tracebacks=True)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """cleanctl - Scan a directory tree and clean it up safely.

    Finds duplicate files by content, junk such as caches and stale
    downloads, and oversized files. Deletions go through a quarantine
    and can be undone.
    """
    configure_logging(verbose=verbose, quiet=quiet)
    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# Register commands
app.command(name="scan")(scan.scan)
app.command(name="duplicates")(results.duplicates)
app.command(name="junk")(results.junk)
app.command(name="large")(results.large)
app.command(name="tree")(results.tree)
app.command(name="search")(results.search)
app.command(name="clean")(clean.clean)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
