"""CLI commands for cleanctl.

This package contains all subcommand implementations.
"""

from cleanctl.cli.commands import clean, config, results, scan

__all__ = ["clean", "config", "results", "scan"]
