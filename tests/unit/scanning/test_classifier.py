"""Unit tests for file classification."""

from pathlib import Path

import pytest
from cleanctl.models.file_record import Category
from cleanctl.scanning.classifier import (
    ARCHIVE_APK_EXTENSIONS,
    CATEGORY_EXTENSIONS,
    DOCUMENT_EXTENSIONS,
    MEDIA_EXTENSIONS,
    classify,
    extension_of,
    is_under_downloads,
    record_for,
)


class TestClassify:
    """Tests for classify function."""

    @pytest.mark.parametrize(
        ("extension", "expected"),
        [
            ("jpg", Category.IMAGE),
            ("mkv", Category.VIDEO),
            ("flac", Category.AUDIO),
            ("pdf", Category.DOCUMENT),
            ("apk", Category.APK),
            ("7z", Category.ARCHIVE),
        ],
    )
    def test_known_extensions(self, extension: str, expected: Category) -> None:
        """Known extensions map to their category."""
        assert classify(f"/data/file.{extension}", extension) == expected

    def test_case_insensitive_and_leading_dot(self) -> None:
        """Matching ignores case and a leading dot."""
        assert classify("/data/IMG.JPG", "JPG") == Category.IMAGE
        assert classify("/data/IMG.JPG", ".Jpg") == Category.IMAGE

    def test_unknown_extension_under_download_dir(self) -> None:
        """Unknown files inside a downloads folder are downloads."""
        assert classify("/sdcard/Download/setup.bin", "bin") == Category.DOWNLOAD
        assert classify("/home/u/downloads/sub/thing", "") == Category.DOWNLOAD

    def test_known_extension_under_download_dir_keeps_category(self) -> None:
        """Extension match wins over location."""
        assert classify("/sdcard/Download/report.pdf", "pdf") == Category.DOCUMENT

    def test_unknown_extension_elsewhere_is_other(self) -> None:
        """Unknown files outside downloads fall back to OTHER."""
        assert classify("/data/blob.xyz", "xyz") == Category.OTHER
        assert classify("/data/Makefile", "") == Category.OTHER

    def test_file_named_download_is_not_a_directory_match(self) -> None:
        """Only parent directories count as downloads folders."""
        assert classify("/data/download", "") == Category.OTHER


class TestExtensionTables:
    """Tests for the shared extension tables."""

    def test_categories_do_not_overlap(self) -> None:
        """No extension belongs to two categories."""
        seen: set[str] = set()
        for extensions in CATEGORY_EXTENSIONS.values():
            assert not seen & extensions
            seen |= extensions

    def test_derived_sets(self) -> None:
        """Derived sets are unions of the category tables."""
        assert "mp4" in MEDIA_EXTENSIONS
        assert "mp3" in MEDIA_EXTENSIONS
        assert "docx" in DOCUMENT_EXTENSIONS
        assert {"apk", "zip"} <= ARCHIVE_APK_EXTENSIONS
        assert not MEDIA_EXTENSIONS & DOCUMENT_EXTENSIONS


class TestExtensionOf:
    """Tests for extension_of function."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("photo.JPEG", "jpeg"),
            ("backup.tar.gz", "gz"),
            (".bashrc", ""),
            ("README", ""),
            ("trailing.", ""),
        ],
    )
    def test_extension_of(self, name: str, expected: str) -> None:
        assert extension_of(name) == expected


class TestIsUnderDownloads:
    """Tests for is_under_downloads function."""

    def test_matches_any_parent_segment(self) -> None:
        assert is_under_downloads("/storage/DOWNLOAD/a/b.txt")
        assert not is_under_downloads("/storage/downloaded/b.txt")


class TestRecordFor:
    """Tests for record_for function."""

    def test_builds_record_from_disk(self, tmp_path: Path) -> None:
        """record_for stats the file and classifies it."""
        target = tmp_path / "song.mp3"
        target.write_bytes(b"abc")

        record = record_for(target)

        assert record.path == str(target)
        assert record.name == "song.mp3"
        assert record.size == 3
        assert record.category == Category.AUDIO
        assert record.duplicate_group == -1
        assert record.last_modified == int(target.stat().st_mtime * 1000)

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            record_for(tmp_path / "missing.txt")
