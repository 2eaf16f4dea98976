"""Persistence of the last completed scan.

The snapshot lets the engine show results immediately at startup
without rescanning the whole tree.
"""

import json
import logging
import os
from collections.abc import Sequence
from pathlib import Path
from tempfile import NamedTemporaryFile

from cleanctl.core.paths import get_snapshot_path
from cleanctl.models.file_record import DirectoryNode, FileRecord

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1
MAX_TREE_DEPTH = 100


class SnapshotCache:
    """Reads and writes the scan snapshot JSON file.

    Storage location: ~/.local/state/cleanctl/scan-snapshot.json

    Attributes:
        path: Location of the snapshot file.
    """

    def __init__(self, state_dir: Path | None = None) -> None:
        """Initialize SnapshotCache.

        Args:
            state_dir: Optional override for the state directory.
        """
        self._path = get_snapshot_path(state_dir)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def save(self, files: Sequence[FileRecord], tree: DirectoryNode | None) -> None:
        """Write the snapshot atomically.

        Args:
            files: Active file list, including duplicate groups.
            tree: Directory tree of the scan, if any.

        Raises:
            OSError: If the file cannot be written.
        """
        data = {
            "version": SNAPSHOT_VERSION,
            "files": [f.to_dict() for f in files],
            "tree": tree.to_dict() if tree is not None else None,
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path: Path | None = None
        try:
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self._path.parent,
                delete=False,
                suffix=".tmp",
            ) as f:
                tmp_path = Path(f.name)
                json.dump(data, f, separators=(",", ":"))
            os.replace(tmp_path, self._path)
        except OSError:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise
        logger.debug("Saved snapshot with %d files to %s", len(files), self._path)

    def load(self) -> tuple[list[FileRecord], DirectoryNode | None] | None:
        """Load the snapshot.

        A snapshot that cannot be decoded is deleted and treated as a miss.

        Returns:
            Tuple of (files, tree), or None if there is no usable snapshot.
        """
        if not self._path.exists():
            return None

        try:
            with self._path.open(encoding="utf-8") as f:
                data = json.load(f)
            if data.get("version") != SNAPSHOT_VERSION:
                msg = f"unsupported snapshot version {data.get('version')!r}"
                raise ValueError(msg)
            files = [FileRecord.from_dict(item) for item in data["files"]]
            tree_data = data.get("tree")
            tree = (
                DirectoryNode.from_dict(tree_data, MAX_TREE_DEPTH)
                if tree_data is not None
                else None
            )
        except (
            OSError, json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError
        ) as e:
            logger.warning("Discarding unreadable snapshot %s: %s", self._path, e)
            self.clear()
            return None

        return files, tree

    def clear(self) -> None:
        """Delete the snapshot file if present."""
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Cannot delete snapshot %s: %s", self._path, e)
