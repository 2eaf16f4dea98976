"""Unit tests for duplicate detection."""

import hashlib
import threading
from pathlib import Path

import pytest
from cleanctl.core.errors import ScanCancelled
from cleanctl.scanning.classifier import record_for
from cleanctl.scanning.duplicates import (
    PARTIAL_HASH_BYTES,
    find_duplicates,
    full_hash,
    partial_hash,
    prune_orphan_groups,
)


def _records(*paths: Path):
    return [record_for(p) for p in paths]


class TestHashing:
    """Tests for partial_hash and full_hash."""

    def test_small_file_partial_equals_full(self, tmp_path: Path, make_file) -> None:
        """Files under 8 KiB are hashed whole."""
        path = make_file(tmp_path / "small.bin", b"a" * 100)
        assert partial_hash(str(path)) == full_hash(str(path))
        assert full_hash(str(path)) == hashlib.md5(b"a" * 100).hexdigest()

    def test_partial_hash_ignores_middle(self, tmp_path: Path, make_file) -> None:
        head = b"h" * PARTIAL_HASH_BYTES
        tail = b"t" * PARTIAL_HASH_BYTES
        a = make_file(tmp_path / "a.bin", head + b"1" * 100 + tail)
        b = make_file(tmp_path / "b.bin", head + b"2" * 100 + tail)

        assert partial_hash(str(a)) == partial_hash(str(b))
        assert full_hash(str(a)) != full_hash(str(b))

    def test_unreadable_file_returns_none(self, tmp_path: Path) -> None:
        assert partial_hash(str(tmp_path / "missing")) is None
        assert full_hash(str(tmp_path / "missing")) is None


class TestFindDuplicates:
    """Tests for find_duplicates function."""

    def test_sizes_10_20_20_identical(self, tmp_path: Path, make_file) -> None:
        """Only the two identical 20-byte files form a group."""
        a = make_file(tmp_path / "a.txt", b"x" * 10)
        b = make_file(tmp_path / "b.txt", b"y" * 20)
        c = make_file(tmp_path / "c.txt", b"y" * 20)

        result = find_duplicates(_records(a, b, c))

        assert sorted(r.name for r in result) == ["b.txt", "c.txt"]
        assert {r.duplicate_group for r in result} == {0}

    def test_same_size_different_content(self, tmp_path: Path, make_file) -> None:
        a = make_file(tmp_path / "a.txt", b"aaaa")
        b = make_file(tmp_path / "b.txt", b"bbbb")

        assert find_duplicates(_records(a, b)) == []

    def test_same_head_and_tail_different_middle(self, tmp_path: Path, make_file) -> None:
        """Partial-hash collisions are resolved by the full hash."""
        head = b"h" * PARTIAL_HASH_BYTES
        tail = b"t" * PARTIAL_HASH_BYTES
        a = make_file(tmp_path / "a.bin", head + b"1" * 10 + tail)
        b = make_file(tmp_path / "b.bin", head + b"2" * 10 + tail)
        c = make_file(tmp_path / "c.bin", head + b"1" * 10 + tail)

        result = find_duplicates(_records(a, b, c))

        assert sorted(r.name for r in result) == ["a.bin", "c.bin"]

    def test_empty_files_never_grouped(self, tmp_path: Path, make_file) -> None:
        a = make_file(tmp_path / "a.txt", b"")
        b = make_file(tmp_path / "b.txt", b"")

        assert find_duplicates(_records(a, b)) == []

    def test_groups_share_digest_and_differ_between(self, tmp_path: Path, make_file) -> None:
        paths = [
            make_file(tmp_path / "a1", b"alpha"),
            make_file(tmp_path / "a2", b"alpha"),
            make_file(tmp_path / "a3", b"alpha"),
            make_file(tmp_path / "b1", b"bravo"),
            make_file(tmp_path / "b2", b"bravo"),
            make_file(tmp_path / "c1", b"charlie-long"),
            make_file(tmp_path / "c2", b"charlie-long"),
        ]

        result = find_duplicates(_records(*paths), workers=3)

        digests: dict[int, set[str]] = {}
        for record in result:
            digests.setdefault(record.duplicate_group, set()).add(full_hash(record.path))
        assert len(digests) == 3
        assert all(len(d) == 1 for d in digests.values())
        all_digests = [next(iter(d)) for d in digests.values()]
        assert len(set(all_digests)) == 3
        assert sorted(digests) == [0, 1, 2]

    def test_sorted_by_group_then_size_desc(self, tmp_path: Path, make_file) -> None:
        paths = [
            make_file(tmp_path / "s1", b"s" * 5),
            make_file(tmp_path / "s2", b"s" * 5),
            make_file(tmp_path / "l1", b"l" * 50),
            make_file(tmp_path / "l2", b"l" * 50),
        ]

        result = find_duplicates(_records(*paths))

        keys = [(r.duplicate_group, -r.size) for r in result]
        assert keys == sorted(keys)

    def test_vanished_file_is_excluded(self, tmp_path: Path, make_file) -> None:
        a = make_file(tmp_path / "a.txt", b"same")
        b = make_file(tmp_path / "b.txt", b"same")
        c = make_file(tmp_path / "c.txt", b"same")
        records = _records(a, b, c)
        c.unlink()

        result = find_duplicates(records)

        assert sorted(r.name for r in result) == ["a.txt", "b.txt"]

    def test_progress_reports_candidates(self, tmp_path: Path, make_file) -> None:
        a = make_file(tmp_path / "a", b"1")
        b = make_file(tmp_path / "b", b"2")
        c = make_file(tmp_path / "c", b"333")
        calls: list[tuple[int, int]] = []

        find_duplicates(_records(a, b, c), progress_callback=lambda d, t: calls.append((d, t)))

        assert calls == [(0, 2), (1, 2), (2, 2)]

    def test_cancelled(self, tmp_path: Path, make_file) -> None:
        a = make_file(tmp_path / "a", b"1")
        b = make_file(tmp_path / "b", b"1")
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(ScanCancelled):
            find_duplicates(_records(a, b), cancel_event=cancel)

    def test_no_candidates(self) -> None:
        assert find_duplicates([]) == []


class TestPruneOrphanGroups:
    """Tests for prune_orphan_groups function."""

    def test_drops_single_member_groups(self, make_record) -> None:
        records = [
            make_record("/a", duplicate_group=0),
            make_record("/b", duplicate_group=0),
            make_record("/c", duplicate_group=1),
            make_record("/d"),
        ]

        result = prune_orphan_groups(records)

        assert [r.path for r in result] == ["/a", "/b"]
