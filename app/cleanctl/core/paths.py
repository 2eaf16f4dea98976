"""Where cleanctl keeps its files.

Configuration lives under ``$XDG_CONFIG_HOME/cleanctl`` (default
``~/.config/cleanctl``). The scan snapshot and the quarantine area are
state and live under ``$XDG_STATE_HOME/cleanctl`` (default
``~/.local/state/cleanctl``).
"""

import os
from pathlib import Path

APP_NAME = "cleanctl"

SNAPSHOT_FILENAME = "scan-snapshot.json"
QUARANTINE_DIRNAME = "quarantine"

_XDG_DEFAULTS = {
    "XDG_CONFIG_HOME": ".config",
    "XDG_STATE_HOME": ".local/state",
}


def _app_dir(env_var: str) -> Path:
    base = os.environ.get(env_var)
    root = Path(base) if base else Path.home() / _XDG_DEFAULTS[env_var]
    return root / APP_NAME


def get_config_dir() -> Path:
    """Return the configuration directory (not created)."""
    return _app_dir("XDG_CONFIG_HOME")


def get_state_dir() -> Path:
    """Return the state directory holding the snapshot and quarantine."""
    return _app_dir("XDG_STATE_HOME")


def get_config_path() -> Path:
    return get_config_dir() / "config.toml"


def get_theme_path() -> Path:
    return get_config_dir() / "theme.toml"


def get_snapshot_path(state_dir: Path | None = None) -> Path:
    """Return the snapshot file, optionally inside ``state_dir``."""
    return (state_dir or get_state_dir()) / SNAPSHOT_FILENAME


def get_quarantine_dir(state_dir: Path | None = None) -> Path:
    """Return the directory where deleted files wait for confirm or undo.

    Args:
        state_dir: Use this instead of the XDG state directory.
    """
    return (state_dir or get_state_dir()) / QUARANTINE_DIRNAME


def _make(path: Path, label: str) -> Path:
    """Create ``path`` with parents.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {label} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {label} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def ensure_config_dir() -> Path:
    return _make(get_config_dir(), "config")


def ensure_state_dir(state_dir: Path | None = None) -> Path:
    return _make(state_dir or get_state_dir(), "state")


def ensure_quarantine_dir(state_dir: Path | None = None) -> Path:
    return _make(get_quarantine_dir(state_dir), "quarantine")
