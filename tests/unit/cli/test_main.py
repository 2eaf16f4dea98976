"""Unit tests for the main CLI application."""

import logging

from cleanctl import __version__
from cleanctl.cli.main import app, configure_logging
from typer.testing import CliRunner

runner = CliRunner()


class TestMainApp:
    """Tests for global options and help."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"cleanctl version {__version__}" in result.stdout

    def test_no_args_shows_help(self) -> None:
        result = runner.invoke(app, [])
        assert "scan" in result.output
        assert "clean" in result.output

    def test_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("scan", "duplicates", "junk", "large", "tree", "search", "clean", "config"):
            assert command in result.stdout


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_levels(self) -> None:
        configure_logging(verbose=True)
        assert logging.getLogger().level == logging.DEBUG
        configure_logging(quiet=True)
        assert logging.getLogger().level == logging.ERROR
        configure_logging()
        assert logging.getLogger().level == logging.WARNING
