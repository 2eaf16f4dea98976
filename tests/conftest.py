"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import os
import time
from collections.abc import Callable
from pathlib import Path

import pytest
from cleanctl.core.config import CleanerConfig
from cleanctl.models.file_record import Category, FileRecord

DAY_SECONDS = 24 * 60 * 60

FileFactory = Callable[..., Path]


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG config and state directories into the test's tmp_path."""
    xdg = tmp_path / "xdg"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(xdg / "state"))
    return xdg


@pytest.fixture
def scan_root(tmp_path: Path) -> Path:
    """Empty directory used as scan root."""
    root = tmp_path / "root"
    root.mkdir()
    return root


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    """Directory for snapshot and quarantine, outside the scan root."""
    path = tmp_path / "state"
    path.mkdir()
    return path


@pytest.fixture
def make_file() -> FileFactory:
    """Factory creating a file with content and an optional age in days."""

    def _make(path: Path, content: bytes | str = b"x", age_days: float = 0) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode()
        path.write_bytes(content)
        if age_days:
            stamp = time.time() - age_days * DAY_SECONDS
            os.utime(path, (stamp, stamp))
        return path

    return _make


@pytest.fixture
def engine_config(scan_root: Path) -> CleanerConfig:
    """Engine config for scan_root with a small large-file threshold."""
    return CleanerConfig(
        scan_root=scan_root,
        large_file_threshold_mb=1,
        hash_workers=2,
        progress_interval=1,
    )


@pytest.fixture
def make_record() -> Callable[..., FileRecord]:
    """Factory creating a FileRecord without touching the filesystem."""

    def _make(
        path: str,
        size: int = 100,
        category: Category = Category.OTHER,
        last_modified: int | None = None,
        duplicate_group: int = -1,
    ) -> FileRecord:
        if last_modified is None:
            last_modified = int(time.time() * 1000)
        return FileRecord(
            path=path,
            name=path.rsplit("/", 1)[-1],
            size=size,
            last_modified=last_modified,
            category=category,
            duplicate_group=duplicate_group,
        )

    return _make
