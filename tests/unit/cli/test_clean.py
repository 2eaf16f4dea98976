"""Unit tests for clean command."""

from pathlib import Path

from cleanctl.cli.commands.clean import CleanTarget, select_targets
from cleanctl.cli.main import app
from cleanctl.core.paths import get_quarantine_dir
from typer.testing import CliRunner

runner = CliRunner()


def quarantined() -> list[Path]:
    directory = get_quarantine_dir()
    return list(directory.iterdir()) if directory.exists() else []


class TestSelectTargets:
    """Tests for select_targets helper."""

    def test_duplicates_keep_first_of_each_group(self, make_record) -> None:
        class FakeEngine:
            duplicates = (
                make_record("/a", duplicate_group=0),
                make_record("/b", duplicate_group=0),
                make_record("/c", duplicate_group=1),
                make_record("/d", duplicate_group=1),
                make_record("/e", duplicate_group=1),
            )

        selected = select_targets(FakeEngine(), CleanTarget.DUPLICATES)  # type: ignore[arg-type]

        assert [r.path for r in selected] == ["/b", "/d", "/e"]


class TestCleanCommand:
    """Tests for cleanctl clean."""

    def test_requires_scan(self) -> None:
        result = runner.invoke(app, ["clean", "junk", "--yes"])
        assert result.exit_code == 1

    def test_dry_run(self, scanned: Path) -> None:
        result = runner.invoke(app, ["clean", "junk", "--dry-run"])

        assert result.exit_code == 0, result.output
        assert "Dry run: no files were deleted." in result.stdout
        assert (scanned / "c.log").exists()

    def test_yes_deletes_permanently(self, scanned: Path) -> None:
        result = runner.invoke(app, ["clean", "junk", "--yes"])

        assert result.exit_code == 0, result.output
        assert "Deleted c.log" in result.stdout
        assert not (scanned / "c.log").exists()
        assert quarantined() == []

    def test_declined_confirmation(self, scanned: Path) -> None:
        result = runner.invoke(app, ["clean", "junk"], input="n\n")

        assert result.exit_code == 0
        assert "Aborted." in result.stdout
        assert (scanned / "c.log").exists()

    def test_undo_restores(self, scanned: Path) -> None:
        result = runner.invoke(app, ["clean", "junk"], input="y\ny\n")

        assert result.exit_code == 0, result.output
        assert "Restored 1 file(s)." in result.stdout
        assert (scanned / "c.log").read_bytes() == b"log line"
        assert quarantined() == []

    def test_undo_declined_commits(self, scanned: Path) -> None:
        result = runner.invoke(app, ["clean", "junk"], input="y\nn\n")

        assert result.exit_code == 0, result.output
        assert not (scanned / "c.log").exists()
        assert quarantined() == []

    def test_duplicates_keeps_one_copy(self, scanned: Path) -> None:
        result = runner.invoke(app, ["clean", "duplicates", "--yes"])

        assert result.exit_code == 0, result.output
        remaining = [p for p in (scanned / "a.txt", scanned / "docs" / "b.txt") if p.exists()]
        assert len(remaining) == 1

        listing = runner.invoke(app, ["duplicates"])
        assert "No duplicate files found." in listing.stdout

    def test_nothing_to_clean(self, scan_root: Path, make_file) -> None:
        make_file(scan_root / "only.txt", b"unique")
        runner.invoke(app, ["scan", str(scan_root)])

        result = runner.invoke(app, ["clean", "large", "--yes"])

        assert result.exit_code == 0
        assert "Nothing to clean" in result.stdout

    def test_vanished_file_exits_1(self, scanned: Path) -> None:
        (scanned / "c.log").unlink()

        result = runner.invoke(app, ["clean", "junk", "--yes"])

        assert result.exit_code == 1
        assert "could not be deleted" in result.output

    def test_invalid_target(self) -> None:
        result = runner.invoke(app, ["clean", "everything"])
        assert result.exit_code != 0
