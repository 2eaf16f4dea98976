"""Unit tests for XDG path management.

Tests for the paths module that provides XDG-compliant directory paths.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from cleanctl.core.paths import (
    APP_NAME,
    ensure_config_dir,
    ensure_quarantine_dir,
    ensure_state_dir,
    get_config_dir,
    get_config_path,
    get_quarantine_dir,
    get_snapshot_path,
    get_state_dir,
    get_theme_path,
)


class TestGetConfigDir:
    """Tests for get_config_dir function."""

    def test_default_config_dir(self) -> None:
        """get_config_dir returns default path when XDG_CONFIG_HOME not set."""
        with patch.dict(os.environ, {}, clear=True):
            result = get_config_dir()

        assert result == Path.home() / ".config" / APP_NAME

    def test_respects_xdg_config_home(self, tmp_path: Path) -> None:
        """get_config_dir respects XDG_CONFIG_HOME environment variable."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            result = get_config_dir()

        assert result == tmp_path / APP_NAME


class TestGetStateDir:
    """Tests for get_state_dir function."""

    def test_default_state_dir(self) -> None:
        """get_state_dir returns default path when XDG_STATE_HOME not set."""
        with patch.dict(os.environ, {}, clear=True):
            result = get_state_dir()

        assert result == Path.home() / ".local" / "state" / APP_NAME

    def test_respects_xdg_state_home(self, tmp_path: Path) -> None:
        with patch.dict(os.environ, {"XDG_STATE_HOME": str(tmp_path)}):
            result = get_state_dir()

        assert result == tmp_path / APP_NAME


class TestFilePaths:
    """Tests for file path helpers."""

    def test_config_and_theme_paths(self, isolated_xdg: Path) -> None:
        config_dir = isolated_xdg / "config" / APP_NAME
        assert get_config_path() == config_dir / "config.toml"
        assert get_theme_path() == config_dir / "theme.toml"

    def test_state_paths_default(self, isolated_xdg: Path) -> None:
        state = isolated_xdg / "state" / APP_NAME
        assert get_snapshot_path() == state / "scan-snapshot.json"
        assert get_quarantine_dir() == state / "quarantine"

    def test_state_paths_override(self, tmp_path: Path) -> None:
        assert get_snapshot_path(tmp_path) == tmp_path / "scan-snapshot.json"
        assert get_quarantine_dir(tmp_path) == tmp_path / "quarantine"


class TestEnsureDirs:
    """Tests for directory creation helpers."""

    def test_creates_directories(self, isolated_xdg: Path, tmp_path: Path) -> None:
        assert ensure_config_dir().is_dir()
        assert ensure_state_dir().is_dir()
        assert ensure_quarantine_dir(tmp_path / "s").is_dir()

    def test_permission_error(self, tmp_path: Path) -> None:
        with (
            patch.object(Path, "mkdir", side_effect=PermissionError("denied")),
            pytest.raises(RuntimeError, match="Permission denied"),
        ):
            ensure_state_dir(tmp_path / "x")
