"""Shared types and helpers for CLI commands.

This module provides the common enums and the engine/config loading used
across multiple CLI command modules.
"""

from enum import Enum
from pathlib import Path

import typer

from cleanctl.core.config import CleanerConfig, load_config_or_default
from cleanctl.core.engine import CleanupEngine
from cleanctl.core.errors import ConfigError
from cleanctl.utils.formatting import print_error


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def get_config(root: Path | None = None) -> CleanerConfig:
    """Load the configuration, exiting with an error if it is invalid.

    Args:
        root: Optional scan root overriding the configured one.
    """
    try:
        config = load_config_or_default()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    if root is not None:
        config = config.model_copy(update={"scan_root": root.expanduser().resolve()})
    return config


def get_engine(config: CleanerConfig | None = None) -> CleanupEngine:
    """Create an engine for the configured scan root."""
    return CleanupEngine(config or get_config())


def require_results(engine: CleanupEngine) -> None:
    """Load the last scan snapshot or exit with an error."""
    if not engine.load_cached():
        print_error("No scan results found. Run 'cleanctl scan' first.")
        raise typer.Exit(code=1)
