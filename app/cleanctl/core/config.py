"""Cleaner configuration and settings.

This module provides the configuration model and I/O functions for the
scan and cleanup engine.

Configuration is stored in ~/.config/cleanctl/config.toml
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cleanctl.core.errors import ConfigError, ConfigNotFoundError, ConfigParseError
from cleanctl.core.paths import get_config_path
from cleanctl.scanning.tree import DEFAULT_EXCLUDE_DIRS

logger = logging.getLogger(__name__)

_DOWNLOAD_DIR_CANDIDATES = ("Download", "Downloads")


class CleanerConfig(BaseModel):
    """Configuration for scans and cleanup.

    Attributes:
        scan_root: Directory tree to scan.
        downloads_path: Downloads directory for stale-download detection.
            If None, ``<scan_root>/Download`` or ``<scan_root>/Downloads``.
        large_file_threshold_mb: Minimum size of a "large" file.
        stale_download_days: Age after which downloads are junk.
        max_large_files: Cap on the large-file list.
        undo_timeout_seconds: How long the CLI offers undo after a clean.
        exclude_dirs: Paths relative to scan_root that are never scanned.
        protected_paths: Glob patterns that are never deleted.
        hash_workers: Threads used for content hashing.
        progress_interval: Files between progress updates while indexing.
    """

    model_config = ConfigDict(extra="forbid")

    scan_root: Path = Field(default_factory=Path.home, description="Directory tree to scan")
    downloads_path: Annotated[
        Path | None,
        Field(description="Downloads directory (None = detect under scan_root)"),
    ] = None
    large_file_threshold_mb: Annotated[
        int,
        Field(ge=1, le=1_000_000, description="Large file threshold in MiB"),
    ] = 50
    stale_download_days: Annotated[
        int,
        Field(ge=1, le=3650, description="Age in days after which downloads are junk"),
    ] = 90
    max_large_files: Annotated[
        int,
        Field(ge=1, le=100_000, description="Maximum number of large files listed"),
    ] = 200
    undo_timeout_seconds: Annotated[
        int,
        Field(ge=1, le=600, description="Undo window offered after a clean"),
    ] = 8
    exclude_dirs: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS),
        description="Relative paths that are never scanned",
    )
    protected_paths: list[str] = Field(
        default_factory=list, description="Glob patterns that are never deleted"
    )
    hash_workers: Annotated[
        int,
        Field(ge=1, le=64, description="Threads used for hashing"),
    ] = 4
    progress_interval: Annotated[
        int,
        Field(ge=1, description="Files between progress updates"),
    ] = 100

    @property
    def large_file_threshold_bytes(self) -> int:
        return self.large_file_threshold_mb * 1024 * 1024

    @property
    def effective_downloads_path(self) -> Path | None:
        """Get the downloads directory to use.

        Returns the configured path if set, otherwise the first existing
        ``Download``/``Downloads`` directory under scan_root.
        """
        if self.downloads_path is not None:
            return self.downloads_path.expanduser()
        root = self.scan_root.expanduser()
        for name in _DOWNLOAD_DIR_CANDIDATES:
            candidate = root / name
            if candidate.is_dir():
                return candidate
        return None


def load_config(path: Path | None = None) -> CleanerConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated CleanerConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return CleanerConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def load_config_or_default(path: Path | None = None) -> CleanerConfig:
    """Load configuration, falling back to defaults if the file is missing.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        logger.debug("No config file, using defaults")
        return CleanerConfig()


def save_config(config: CleanerConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The CleanerConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def config_to_dict(config: CleanerConfig) -> dict[str, object]:
    """Convert CleanerConfig to a dictionary for TOML serialization.

    TOML has no null, so unset optional values are left out.
    """
    return config.model_dump(mode="json", exclude_none=True)
