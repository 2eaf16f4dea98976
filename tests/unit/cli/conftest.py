"""Fixtures for CLI command tests."""

from pathlib import Path

import pytest
from cleanctl.cli.main import app
from typer.testing import CliRunner

SAME = b"same content"


@pytest.fixture
def populated(scan_root: Path, make_file) -> Path:
    """Scan root with one duplicate pair, one junk file and a 2 MiB file."""
    make_file(scan_root / "a.txt", SAME)
    make_file(scan_root / "docs" / "b.txt", SAME)
    make_file(scan_root / "c.log", b"log line")
    make_file(scan_root / "big.bin", b"\0" * (2 * 1024 * 1024))
    return scan_root


@pytest.fixture
def scanned(populated: Path) -> Path:
    """Populated root after a successful `cleanctl scan`."""
    result = CliRunner().invoke(app, ["-q", "scan", str(populated), "--threshold-mb", "1"])
    assert result.exit_code == 0, result.output
    return populated
