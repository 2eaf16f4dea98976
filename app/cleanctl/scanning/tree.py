"""Directory tree builder.

Walks a directory subtree once and produces both the flat list of
FileRecords and the aggregated DirectoryNode tree.
"""

import logging
import os
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from cleanctl.core.errors import ScanCancelled, ScanError
from cleanctl.models.file_record import DirectoryNode, FileRecord
from cleanctl.scanning.classifier import classify, extension_of

logger = logging.getLogger(__name__)

# Relative paths (from the scan root) that are never descended into.
DEFAULT_EXCLUDE_DIRS: tuple[str, ...] = (
    "Android/data",
    "Android/obb",
    ".thumbnails",
    ".cache",
    "lost+found",
    "proc",
    "sys",
    "dev",
)

DEFAULT_PROGRESS_INTERVAL = 100

ProgressCallback = Callable[[int], None]


@dataclass(slots=True)
class _DirInfo:
    path: str
    name: str
    depth: int
    files: list[FileRecord] = field(default_factory=list)
    child_paths: list[str] = field(default_factory=list)


def is_excluded(relative: str, name: str, exclude_rules: Sequence[str]) -> bool:
    """Check whether a directory must be skipped.

    Hidden directories (name starting with a dot) are always skipped.
    Otherwise the directory is skipped when its path relative to the
    scan root starts with one of the exclusion rules.
    """
    if name.startswith("."):
        return True
    relative = relative.replace(os.sep, "/")
    for rule in exclude_rules:
        rule = rule.strip("/")
        if relative == rule or relative.startswith(rule + "/"):
            return True
    return False


def build_tree(
    root: str | Path,
    exclude_rules: Sequence[str] = DEFAULT_EXCLUDE_DIRS,
    progress_callback: ProgressCallback | None = None,
    cancel_event: threading.Event | None = None,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
    root_name: str | None = None,
) -> tuple[list[FileRecord], DirectoryNode]:
    """Walk a directory subtree and build the file list and tree.

    The walk is depth-first over an explicit stack and does not follow
    symbolic links. Directories that cannot be listed are logged and
    skipped; only an unreadable root aborts the walk.

    Args:
        root: Directory to scan.
        exclude_rules: Relative paths that are not descended into.
        progress_callback: Called with the running file count every
            ``progress_interval`` files.
        cancel_event: When set, the walk stops with ScanCancelled.
        progress_interval: Number of files between progress callbacks.
        root_name: Display name for the root node (defaults to its name).

    Returns:
        Tuple of (flat file list, root DirectoryNode).

    Raises:
        ScanError: If the root is not a readable directory.
        ScanCancelled: If cancel_event was set during the walk.
    """
    root_path = os.path.abspath(root)
    if not os.path.isdir(root_path):
        msg = f"Scan root is not a directory: {root_path}"
        raise ScanError(msg)
    try:
        os.scandir(root_path).close()
    except OSError as e:
        msg = f"Cannot read scan root {root_path}: {e}"
        raise ScanError(msg) from e

    dirs: dict[str, _DirInfo] = {
        root_path: _DirInfo(root_path, root_name or os.path.basename(root_path) or root_path, 0)
    }
    results: list[FileRecord] = []
    stack: list[tuple[str, int]] = [(root_path, 0)]
    scanned = 0

    while stack:
        if cancel_event is not None and cancel_event.is_set():
            raise ScanCancelled
        dir_path, depth = stack.pop()
        info = dirs[dir_path]

        try:
            with os.scandir(dir_path) as it:
                entries = list(it)
        except OSError as e:
            logger.warning("Skipping unreadable directory %s: %s", dir_path, e)
            continue

        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    relative = os.path.relpath(entry.path, root_path)
                    if is_excluded(relative, entry.name, exclude_rules):
                        continue
                    dirs[entry.path] = _DirInfo(entry.path, entry.name, depth + 1)
                    info.child_paths.append(entry.path)
                    stack.append((entry.path, depth + 1))
                elif entry.is_file(follow_symlinks=False):
                    stat = entry.stat(follow_symlinks=False)
                    record = FileRecord(
                        path=entry.path,
                        name=entry.name,
                        size=stat.st_size,
                        last_modified=int(stat.st_mtime * 1000),
                        category=classify(entry.path, extension_of(entry.name)),
                    )
                    results.append(record)
                    info.files.append(record)
                    scanned += 1
                    if progress_callback is not None and scanned % progress_interval == 0:
                        progress_callback(scanned)
            except OSError as e:
                logger.debug("Skipping unreadable entry %s: %s", entry.path, e)

    return results, _assemble(dirs, root_path)


def _assemble(dirs: dict[str, _DirInfo], root_path: str) -> DirectoryNode:
    """Build DirectoryNodes bottom-up, deepest directories first."""
    nodes: dict[str, DirectoryNode] = {}
    for info in sorted(dirs.values(), key=lambda d: d.depth, reverse=True):
        nodes[info.path] = DirectoryNode.build(
            path=info.path,
            name=info.name,
            depth=info.depth,
            files=info.files,
            children=(nodes[p] for p in info.child_paths if p in nodes),
        )
    return nodes[root_path]
