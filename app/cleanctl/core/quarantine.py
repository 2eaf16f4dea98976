"""Quarantine area backing reversible deletes.

Deleting a file moves it into the quarantine directory. The move can be
undone until the transaction is committed, at which point the
quarantined copies are removed for good.
"""

import itertools
import logging
import os
import shutil
import time
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from cleanctl.core.paths import ensure_quarantine_dir, get_quarantine_dir

logger = logging.getLogger(__name__)


class QuarantineStore:
    """Holds at most one pending delete transaction.

    The transaction maps each original path to the location of its
    quarantined copy. The store itself is not thread-safe; the engine
    serializes access through its lock.
    """

    def __init__(self, state_dir: Path | None = None) -> None:
        """Initialize QuarantineStore.

        Args:
            state_dir: Optional override for the state directory.
        """
        self._state_dir = state_dir
        self._dir = get_quarantine_dir(state_dir)
        self._pending: dict[str, str] = {}
        self._counter = itertools.count()

    @property
    def directory(self) -> Path:
        return self._dir

    @property
    def pending(self) -> Mapping[str, str]:
        """Read-only view of original path to quarantine path."""
        return MappingProxyType(self._pending)

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    def move_in(self, path: str) -> bool:
        """Move a file into quarantine and record it in the transaction.

        Args:
            path: Absolute path of the file to quarantine.

        Returns:
            True if the file was moved, False if the move failed.
        """
        try:
            ensure_quarantine_dir(self._state_dir)
        except RuntimeError as e:
            logger.warning("Cannot quarantine %s: %s", path, e)
            return False

        name = os.path.basename(path)
        target = self._dir / f"{time.time_ns()}_{next(self._counter)}_{name}"
        try:
            if not os.path.isfile(path):
                logger.warning("Cannot quarantine %s: no such file", path)
                return False
            shutil.move(path, target)
        except OSError as e:
            logger.warning("Cannot quarantine %s: %s", path, e)
            return False

        self._pending[path] = str(target)
        logger.debug("Quarantined %s as %s", path, target.name)
        return True

    def restore(self) -> list[str]:
        """Move every quarantined file back to its original path.

        Files whose original path is occupied, or that cannot be moved,
        stay in quarantine and are removed on the next purge. The
        transaction is cleared either way.

        Returns:
            Original paths that were restored.
        """
        restored: list[str] = []
        for original, quarantined in self._pending.items():
            if os.path.exists(original):
                logger.warning("Not restoring %s: path is occupied", original)
                continue
            try:
                os.makedirs(os.path.dirname(original), exist_ok=True)
                shutil.move(quarantined, original)
            except OSError as e:
                logger.warning("Cannot restore %s: %s", original, e)
                continue
            restored.append(original)
        self._pending.clear()
        return restored

    def commit(self) -> int:
        """Permanently delete the quarantined files of the transaction.

        Returns:
            Number of files removed.
        """
        removed = 0
        for original, quarantined in self._pending.items():
            try:
                os.remove(quarantined)
                removed += 1
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning("Cannot remove quarantined copy of %s: %s", original, e)
        self._pending.clear()
        return removed

    def purge_leftovers(self) -> int:
        """Remove quarantine entries not owned by the current transaction.

        Leftovers come from sessions that ended without a commit.

        Returns:
            Number of entries removed.
        """
        if not self._dir.is_dir():
            return 0
        owned = set(self._pending.values())
        removed = 0
        for entry in self._dir.iterdir():
            if str(entry) in owned:
                continue
            try:
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
                removed += 1
            except OSError as e:
                logger.warning("Cannot purge quarantine entry %s: %s", entry, e)
        if removed:
            logger.info("Purged %d leftover quarantine entries", removed)
        return removed
