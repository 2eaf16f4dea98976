"""File and directory models produced by a scan.

This module defines the immutable records that describe scanned files
and the directory tree that aggregates them.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

NO_GROUP = -1


class Category(str, Enum):
    """Category of a scanned file.

    Attributes:
        IMAGE: Photos and graphics.
        VIDEO: Video files.
        AUDIO: Music and recordings.
        DOCUMENT: Office documents, text, and markup.
        APK: Android installer packages.
        ARCHIVE: Compressed archives and disk images.
        DOWNLOAD: Unrecognized files sitting in a downloads folder.
        OTHER: Everything else.
    """

    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"
    APK = "apk"
    ARCHIVE = "archive"
    DOWNLOAD = "download"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str) -> Category:
        """Parse a stored category name, falling back to OTHER.

        Accepts both the value ("image") and the member name ("IMAGE").
        """
        try:
            return cls(value.lower())
        except ValueError:
            return cls.OTHER


def format_bytes(size: int) -> str:
    """Format a byte count as a short human-readable string.

    Uses binary units: ``512 B``, ``10.0 KB``, ``1.5 MB``, ``2.0 GB``.
    """
    if size >= 1024**3:
        return f"{size / 1024**3:.1f} GB"
    if size >= 1024**2:
        return f"{size / 1024**2:.1f} MB"
    if size >= 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size} B"


@dataclass(frozen=True, slots=True, eq=False)
class FileRecord:
    """Metadata snapshot of one scanned file.

    Records are compared and hashed by path only, so a record with an
    updated duplicate group is still "the same file".

    Attributes:
        path: Absolute file path (unique key).
        name: File name shown to the user.
        size: Size in bytes.
        last_modified: Modification time in epoch milliseconds.
        category: Classification of the file.
        duplicate_group: Duplicate group id, or -1 when not a duplicate.
    """

    path: str
    name: str
    size: int
    last_modified: int
    category: Category
    duplicate_group: int = NO_GROUP

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.path:
            msg = "File path cannot be empty"
            raise ValueError(msg)
        if self.size < 0:
            msg = f"File size cannot be negative, got {self.size}"
            raise ValueError(msg)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileRecord):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    @property
    def extension(self) -> str:
        """Lower-case extension without the dot, empty if none."""
        stem, dot, ext = self.name.rpartition(".")
        if not dot or not stem:
            return ""
        return ext.lower()

    @property
    def is_duplicate(self) -> bool:
        """Check if the record belongs to a duplicate group."""
        return self.duplicate_group >= 0

    @property
    def size_human(self) -> str:
        """Return human-readable size string."""
        return format_bytes(self.size)

    def with_group(self, group: int) -> FileRecord:
        """Return a copy tagged with another duplicate group."""
        return replace(self, duplicate_group=group)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "path": self.path,
            "name": self.name,
            "size": self.size,
            "lastModified": self.last_modified,
            "category": self.category.value,
            "duplicateGroup": self.duplicate_group,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileRecord:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If field values are invalid.
        """
        return cls(
            path=data["path"],
            name=data["name"],
            size=int(data["size"]),
            last_modified=int(data["lastModified"]),
            category=Category.parse(str(data.get("category", ""))),
            duplicate_group=int(data.get("duplicateGroup", NO_GROUP)),
        )


@dataclass(frozen=True, slots=True)
class DirectoryNode:
    """Aggregated view of one directory and its subtree.

    Nodes are built once per scan and never mutated; operations that
    change the tree return new nodes.

    Attributes:
        path: Absolute directory path.
        name: Display name.
        depth: Distance from the scan root (root is 0).
        files: Files directly inside this directory.
        children: Child directory nodes.
        total_size: Size of all files in the subtree.
        total_file_count: Number of files in the subtree.
    """

    path: str
    name: str
    depth: int
    files: tuple[FileRecord, ...] = field(default_factory=tuple)
    children: tuple[DirectoryNode, ...] = field(default_factory=tuple)
    total_size: int = 0
    total_file_count: int = 0

    @classmethod
    def build(
        cls,
        path: str,
        name: str,
        depth: int,
        files: Iterable[FileRecord],
        children: Iterable[DirectoryNode],
    ) -> DirectoryNode:
        """Create a node with aggregates computed from its contents."""
        files = tuple(files)
        children = tuple(children)
        return cls(
            path=path,
            name=name,
            depth=depth,
            files=files,
            children=children,
            total_size=sum(f.size for f in files) + sum(c.total_size for c in children),
            total_file_count=len(files) + sum(c.total_file_count for c in children),
        )

    def walk(self) -> Iterator[DirectoryNode]:
        """Yield this node and all descendants, pre-order."""
        stack: list[DirectoryNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find(self, path: str) -> DirectoryNode | None:
        """Find the node for a directory path within this subtree."""
        for node in self.walk():
            if node.path == path:
                return node
        return None

    def without_paths(self, paths: set[str]) -> DirectoryNode:
        """Return a copy of the subtree with the given file paths removed."""
        children = [child.without_paths(paths) for child in self.children]
        return DirectoryNode.build(
            path=self.path,
            name=self.name,
            depth=self.depth,
            files=(f for f in self.files if f.path not in paths),
            children=children,
        )

    def with_groups(self, groups: dict[str, int]) -> DirectoryNode:
        """Return a copy whose file records carry the given duplicate groups.

        Files missing from ``groups`` are reset to NO_GROUP. Aggregates are
        unchanged.
        """
        files: list[FileRecord] = []
        for record in self.files:
            group = groups.get(record.path, NO_GROUP)
            files.append(record if record.duplicate_group == group else record.with_group(group))
        children = tuple(child.with_groups(groups) for child in self.children)
        return replace(self, files=tuple(files), children=children)

    def with_file(self, record: FileRecord) -> DirectoryNode:
        """Return a copy with record attached to its parent directory.

        If the parent directory is not part of the tree the tree is
        returned unchanged.
        """
        parent = os.path.dirname(record.path)
        if parent == self.path:
            kept = tuple(f for f in self.files if f.path != record.path)
            return DirectoryNode.build(
                self.path, self.name, self.depth, (*kept, record), self.children
            )
        if not parent.startswith(self.path.rstrip(os.sep) + os.sep):
            return self
        children = [child.with_file(record) for child in self.children]
        return DirectoryNode.build(self.path, self.name, self.depth, self.files, children)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the subtree to a dictionary for JSON storage."""
        return {
            "path": self.path,
            "name": self.name,
            "totalSize": self.total_size,
            "totalFileCount": self.total_file_count,
            "depth": self.depth,
            "files": [f.to_dict() for f in self.files],
            "children": [c.to_dict() for c in self.children],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], max_depth: int = 100) -> DirectoryNode:
        """Deserialize a subtree.

        Recursion stops at ``max_depth`` levels below this node; deeper
        children are dropped.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If field values are invalid.
        """
        children: tuple[DirectoryNode, ...] = ()
        if max_depth > 0:
            children = tuple(
                cls.from_dict(child, max_depth - 1) for child in data["children"]
            )
        return cls(
            path=data["path"],
            name=data["name"],
            depth=int(data["depth"]),
            files=tuple(FileRecord.from_dict(f) for f in data["files"]),
            children=children,
            total_size=int(data["totalSize"]),
            total_file_count=int(data["totalFileCount"]),
        )
