"""Config command implementation.

Shows the effective configuration and writes a default config file.
"""

from typing import Annotated

import tomli_w
import typer
from rich.syntax import Syntax

from cleanctl.cli.types import get_config
from cleanctl.core.config import CleanerConfig, config_to_dict, save_config
from cleanctl.core.errors import ConfigError
from cleanctl.core.paths import get_config_path
from cleanctl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or create the configuration file.",
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Print the effective configuration as TOML."""
    path = get_config_path()
    config = get_config()
    if path.exists():
        print_info(f"Config file: {path}")
    else:
        print_info(f"No config file at {path}, showing defaults.")
    console.print(Syntax(tomli_w.dumps(config_to_dict(config)), "toml"))


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with default settings."""
    path = get_config_path()
    if path.exists() and not force:
        print_error(f"Config already exists: {path} (use --force to overwrite)")
        raise typer.Exit(code=1)
    try:
        save_config(CleanerConfig(), path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Wrote default config to {path}")
