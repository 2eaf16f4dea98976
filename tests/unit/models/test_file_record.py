"""Unit tests for FileRecord, DirectoryNode and Category."""

import pytest
from cleanctl.models.file_record import (
    NO_GROUP,
    Category,
    DirectoryNode,
    FileRecord,
    format_bytes,
)


def _record(path: str, size: int = 10, group: int = NO_GROUP) -> FileRecord:
    return FileRecord(
        path=path,
        name=path.rsplit("/", 1)[-1],
        size=size,
        last_modified=1_700_000_000_000,
        category=Category.DOCUMENT,
        duplicate_group=group,
    )


class TestCategory:
    """Tests for Category enum."""

    def test_parse_value_and_name(self) -> None:
        assert Category.parse("image") == Category.IMAGE
        assert Category.parse("IMAGE") == Category.IMAGE

    def test_parse_unknown_falls_back_to_other(self) -> None:
        assert Category.parse("hologram") == Category.OTHER


class TestFormatBytes:
    """Tests for format_bytes function."""

    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (0, "0 B"),
            (512, "512 B"),
            (10 * 1024, "10.0 KB"),
            (int(1.5 * 1024**2), "1.5 MB"),
            (2 * 1024**3, "2.0 GB"),
        ],
    )
    def test_format_bytes(self, size: int, expected: str) -> None:
        assert format_bytes(size) == expected


class TestFileRecord:
    """Tests for FileRecord dataclass."""

    def test_equality_by_path_only(self) -> None:
        a = _record("/x/a.txt", size=1)
        b = _record("/x/a.txt", size=2, group=3)
        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_rejects_empty_path(self) -> None:
        with pytest.raises(ValueError, match="path cannot be empty"):
            _record("")

    def test_rejects_negative_size(self) -> None:
        with pytest.raises(ValueError, match="negative"):
            _record("/x/a", size=-1)

    def test_derived_properties(self) -> None:
        record = _record("/x/Report.PDF", size=2048, group=0)
        assert record.extension == "pdf"
        assert record.is_duplicate
        assert record.size_human == "2.0 KB"
        assert not _record("/x/.profile").extension

    def test_with_group(self) -> None:
        record = _record("/x/a")
        tagged = record.with_group(4)
        assert tagged.duplicate_group == 4
        assert record.duplicate_group == NO_GROUP

    def test_dict_round_trip(self) -> None:
        record = _record("/x/a.txt", size=42, group=7)
        data = record.to_dict()
        assert data["lastModified"] == 1_700_000_000_000
        assert data["duplicateGroup"] == 7

        restored = FileRecord.from_dict(data)
        assert restored.size == 42
        assert restored.duplicate_group == 7
        assert restored.category == Category.DOCUMENT

    def test_from_dict_missing_field(self) -> None:
        with pytest.raises(KeyError):
            FileRecord.from_dict({"path": "/x"})


class TestDirectoryNode:
    """Tests for DirectoryNode dataclass."""

    def _tree(self) -> DirectoryNode:
        leaf = DirectoryNode.build("/r/a/b", "b", 2, [_record("/r/a/b/f2", 5)], [])
        mid = DirectoryNode.build("/r/a", "a", 1, [_record("/r/a/f1", 3)], [leaf])
        return DirectoryNode.build("/r", "r", 0, [_record("/r/f0", 1)], [mid])

    def test_build_aggregates(self) -> None:
        tree = self._tree()
        assert tree.total_size == 9
        assert tree.total_file_count == 3

    def test_walk_and_find(self) -> None:
        tree = self._tree()
        assert [n.path for n in tree.walk()] == ["/r", "/r/a", "/r/a/b"]
        node = tree.find("/r/a/b")
        assert node is not None
        assert node.total_size == 5
        assert tree.find("/nope") is None

    def test_without_paths_recomputes(self) -> None:
        pruned = self._tree().without_paths({"/r/a/b/f2"})
        assert pruned.total_size == 4
        assert pruned.total_file_count == 2
        node = pruned.find("/r/a")
        assert node is not None
        assert node.total_size == 3

    def test_with_file_attaches_to_parent(self) -> None:
        tree = self._tree().with_file(_record("/r/a/b/new", 10))
        assert tree.total_size == 19
        node = tree.find("/r/a/b")
        assert node is not None
        assert {f.name for f in node.files} == {"f2", "new"}

    def test_with_file_outside_tree_is_ignored(self) -> None:
        tree = self._tree()
        assert tree.with_file(_record("/other/x", 10)) is tree

    def test_with_groups_tags_whole_subtree(self) -> None:
        tree = self._tree().with_groups({"/r/f0": 2, "/r/a/b/f2": 2})

        groups = {f.path: f.duplicate_group for n in tree.walk() for f in n.files}
        assert groups == {"/r/f0": 2, "/r/a/f1": NO_GROUP, "/r/a/b/f2": 2}
        assert tree.total_size == 9

    def test_with_groups_clears_stale_tags(self) -> None:
        tree = DirectoryNode.build("/r", "r", 0, [_record("/r/x", group=4)], [])
        assert tree.with_groups({}).files[0].duplicate_group == NO_GROUP

    def test_dict_round_trip(self) -> None:
        tree = self._tree()
        restored = DirectoryNode.from_dict(tree.to_dict())
        assert restored == tree

    def test_from_dict_limits_depth(self) -> None:
        restored = DirectoryNode.from_dict(self._tree().to_dict(), max_depth=1)
        assert [n.path for n in restored.walk()] == ["/r", "/r/a"]
