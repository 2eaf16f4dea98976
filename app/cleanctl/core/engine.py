"""Scan orchestration and result management.

The CleanupEngine runs scans on a worker thread, publishes scan states to
subscribers, and keeps the current result sets consistent across
deletes, undos and single-file operations.

State machine::

    Idle -> Scanning(indexing) -> Scanning(duplicates)
         -> Scanning(analyzing) -> Scanning(junk) -> Done

Cancelled and Error are reachable from every Scanning state. A new scan
can start from any state; it cancels and joins the running one first.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from datetime import timedelta
from pathlib import Path

from cleanctl.core.config import CleanerConfig
from cleanctl.core.errors import ScanCancelled
from cleanctl.core.fileops import FileOperations
from cleanctl.core.protected import ProtectedPaths
from cleanctl.core.quarantine import QuarantineStore
from cleanctl.core.snapshot import SnapshotCache
from cleanctl.models.file_record import NO_GROUP, Category, DirectoryNode, FileRecord
from cleanctl.models.results import DeleteResult, OperationResult, StorageStats
from cleanctl.models.scan_state import (
    Cancelled,
    Done,
    Error,
    Idle,
    ScanPhase,
    Scanning,
    ScanState,
    StateKind,
)
from cleanctl.scanning.classifier import record_for
from cleanctl.scanning.duplicates import find_duplicates, prune_orphan_groups
from cleanctl.scanning.junk import find_junk, find_large_files
from cleanctl.scanning.tree import build_tree

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EngineResults:
    """Consistent set of results published together.

    Attributes:
        files: Active file list; duplicate groups are set on the records.
        duplicates: Duplicate group members, by group then size.
        junk: Junk files, largest first.
        large: Large files, largest first.
        tree: Directory tree of the last scan.
        stats: Aggregate statistics over the lists above.
    """

    files: tuple[FileRecord, ...] = ()
    duplicates: tuple[FileRecord, ...] = ()
    junk: tuple[FileRecord, ...] = ()
    large: tuple[FileRecord, ...] = ()
    tree: DirectoryNode | None = None
    stats: StorageStats = field(default_factory=StorageStats)


class ScanStream:
    """Iterator over published scan states.

    A stream returned by start_scan() ends after the first terminal state.
    A stream returned by subscribe() runs until close() is called.
    """

    def __init__(self, engine: CleanupEngine, until_terminal: bool) -> None:
        self._engine = engine
        self._queue: queue.Queue[ScanState] = queue.Queue()
        self._until_terminal = until_terminal
        self._closed = False

    def __iter__(self) -> ScanStream:
        return self

    def __next__(self) -> ScanState:
        if self._closed:
            raise StopIteration
        state = self._queue.get()
        if self._until_terminal and state.is_terminal:
            self.close()
        return state

    def get(self, timeout: float | None = None) -> ScanState | None:
        """Return the next state, or None if none arrives within timeout.

        Like iteration, a stream from start_scan() unsubscribes after
        returning a terminal state.
        """
        try:
            state = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if self._until_terminal and state.is_terminal:
            self.close()
        return state

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._engine._unsubscribe(self._queue)

    def _put(self, state: ScanState) -> None:
        self._queue.put_nowait(state)


class CleanupEngine:
    """Scan-and-cleanup engine over one scan root.

    All mutations of the result sets happen under one re-entrant lock and
    publish a new EngineResults value, so readers always see a
    consistent snapshot.
    """

    def __init__(
        self,
        config: CleanerConfig | None = None,
        state_dir: Path | None = None,
    ) -> None:
        """Initialize the engine and purge quarantine leftovers.

        Args:
            config: Engine configuration. Defaults to CleanerConfig().
            state_dir: Optional override for the state directory holding
                the snapshot and quarantine.
        """
        self._config = config or CleanerConfig()
        self._bind_root(str(self._config.scan_root.expanduser().resolve()))
        self._large_threshold = self._config.large_file_threshold_bytes

        self._snapshot = SnapshotCache(state_dir)
        self._quarantine = QuarantineStore(state_dir)
        protected = list(self._config.protected_paths)
        if state_dir is not None:
            protected.append(str(state_dir))
        self._protected = ProtectedPaths(protected)

        self._lock = threading.RLock()
        self._results = EngineResults()
        self._state: ScanState = Idle()
        self._subscribers: list[ScanStream] = []
        self._cancel_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._generation = 0
        self._scan_started = False
        self._scan_duration_ms = 0

        self._quarantine.purge_leftovers()

    def _bind_root(self, root: str) -> None:
        self._root = root
        scoped = self._config.model_copy(update={"scan_root": Path(root)})
        downloads = scoped.effective_downloads_path
        self._downloads = str(downloads.resolve()) if downloads is not None else None
        self._fileops = FileOperations(root)

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def root(self) -> str:
        return self._root

    @property
    def config(self) -> CleanerConfig:
        return self._config

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def results(self) -> EngineResults:
        return self._results

    @property
    def files(self) -> tuple[FileRecord, ...]:
        return self._results.files

    @property
    def files_by_category(self) -> dict[Category, list[FileRecord]]:
        grouped: dict[Category, list[FileRecord]] = defaultdict(list)
        for record in self._results.files:
            grouped[record.category].append(record)
        return dict(grouped)

    @property
    def duplicates(self) -> tuple[FileRecord, ...]:
        return self._results.duplicates

    @property
    def large_files(self) -> tuple[FileRecord, ...]:
        return self._results.large

    @property
    def junk_files(self) -> tuple[FileRecord, ...]:
        return self._results.junk

    @property
    def tree(self) -> DirectoryNode | None:
        return self._results.tree

    @property
    def stats(self) -> StorageStats:
        return self._results.stats

    @property
    def has_pending_delete(self) -> bool:
        with self._lock:
            return self._quarantine.has_pending

    def is_protected(self, path: str) -> bool:
        return path in self._protected

    def subscribe(self) -> ScanStream:
        """Return a stream of all future state changes."""
        stream = ScanStream(self, until_terminal=False)
        with self._lock:
            self._subscribers.append(stream)
        return stream

    def _unsubscribe(self, q: queue.Queue[ScanState]) -> None:
        with self._lock:
            self._subscribers = [s for s in self._subscribers if s._queue is not q]

    def _set_state(self, state: ScanState, generation: int | None = None) -> None:
        with self._lock:
            if generation is not None and generation != self._generation:
                return
            self._state = state
            for stream in list(self._subscribers):
                stream._put(state)

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def start_scan(self, large_file_threshold_bytes: int | None = None) -> ScanStream:
        """Start a full scan on a worker thread.

        Any running scan is cancelled and joined first.

        Args:
            large_file_threshold_bytes: Override for the large-file threshold.

        Returns:
            Stream of the states of this scan, ending after a terminal state.
        """
        self._stop_worker()
        stream = ScanStream(self, until_terminal=True)
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._scan_started = True
            self._cancel_event = threading.Event()
            if large_file_threshold_bytes is not None:
                self._large_threshold = large_file_threshold_bytes
            files = self._results.files
            self._results = replace(
                self._results,
                duplicates=(),
                junk=(),
                large=(),
                stats=StorageStats.compute(files, (), (), ()),
            )
            self._subscribers.append(stream)
            self._set_state(Scanning(0, ScanPhase.INDEXING), generation)
            thread = threading.Thread(
                target=self._run_scan,
                args=(generation, self._cancel_event),
                name="cleanctl-scan",
                daemon=True,
            )
            self._thread = thread
        thread.start()
        return stream

    def cancel_scan(self) -> None:
        """Request cancellation of the running scan, if any."""
        with self._lock:
            if self._state.kind is StateKind.SCANNING:
                logger.debug("Cancelling scan %d", self._generation)
                self._cancel_event.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the current scan thread ends.

        Returns:
            True if no scan is running anymore.
        """
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def _stop_worker(self) -> None:
        with self._lock:
            thread = self._thread
            if thread is not None and thread.is_alive():
                self._cancel_event.set()
        if thread is not None:
            thread.join()

    def _run_scan(self, generation: int, cancel_event: threading.Event) -> None:
        started = time.monotonic()
        config = self._config

        def check() -> None:
            if cancel_event.is_set():
                raise ScanCancelled

        def progress(count: int) -> None:
            self._set_state(Scanning(count, ScanPhase.INDEXING), generation)

        try:
            files, tree = build_tree(
                self._root,
                exclude_rules=config.exclude_dirs,
                progress_callback=progress,
                cancel_event=cancel_event,
                progress_interval=config.progress_interval,
            )
            check()
            self._set_state(Scanning(len(files), ScanPhase.DUPLICATES), generation)
            duplicates = find_duplicates(
                files, cancel_event=cancel_event, workers=config.hash_workers
            )
            check()
            duplicates = self._kept_duplicates(duplicates)
            files = _sync_groups(files, duplicates)
            self._set_state(Scanning(len(files), ScanPhase.ANALYZING), generation)
            large = self._find_large(files)
            check()
            self._set_state(Scanning(len(files), ScanPhase.JUNK), generation)
            junk = self._find_junk(files)
            check()
        except ScanCancelled:
            logger.info("Scan of %s cancelled", self._root)
            self._set_state(Cancelled(), generation)
            return
        except Exception as e:
            logger.exception("Scan of %s failed", self._root)
            self._set_state(Error(str(e) or type(e).__name__), generation)
            return

        with self._lock:
            if generation != self._generation or cancel_event.is_set():
                self._set_state(Cancelled(), generation)
                return
            self._scan_duration_ms = int((time.monotonic() - started) * 1000)
            self._results = self._rebuild(files, duplicates, tree, junk=junk, large=large)
            self._save_snapshot()
            logger.info(
                "Scanned %d files in %d ms", len(files), self._scan_duration_ms
            )
            self._set_state(Done(), generation)

    def load_cached(self) -> bool:
        """Restore results from the last snapshot.

        Duplicate groups come from the snapshot; junk and large lists are
        recomputed. Skipped once a scan has been started. A snapshot of
        another directory moves the engine to that directory's root.

        Returns:
            True if a snapshot was loaded.
        """
        with self._lock:
            if self._scan_started:
                return False
            loaded = self._snapshot.load()
            if loaded is None:
                return False
            files, tree = loaded
            if tree is not None and tree.path != self._root:
                logger.debug("Snapshot root %s replaces %s", tree.path, self._root)
                self._bind_root(tree.path)
            self._results = self._rebuild(files, [f for f in files if f.is_duplicate], tree)
            self._set_state(Done())
            logger.debug("Loaded %d files from snapshot", len(files))
            return True

    def close(self) -> None:
        """Stop any scan, commit the pending delete and save the snapshot."""
        self._stop_worker()
        with self._lock:
            self._quarantine.commit()
            if self._results.files or self._results.tree is not None:
                self._save_snapshot()

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    def delete_files(self, records: Iterable[FileRecord]) -> DeleteResult:
        """Move files into quarantine.

        A pending delete is committed first. Protected files are skipped
        and not counted. Per-file failures are counted, never raised.

        Returns:
            DeleteResult summary; empty while a scan is running.
        """
        records = list(records)
        with self._lock:
            if self._state.kind is StateKind.SCANNING:
                logger.warning("Refusing to delete while a scan is running")
                return DeleteResult()

            if self._quarantine.has_pending:
                self._quarantine.commit()

            moved: list[FileRecord] = []
            failed = 0
            for record in records:
                if record.path in self._protected:
                    logger.info("Skipping protected file %s", record.path)
                    continue
                if self._quarantine.move_in(record.path):
                    moved.append(record)
                else:
                    failed += 1

            if moved:
                self._remove_paths({r.path for r in moved})
                self._save_snapshot()

            return DeleteResult(
                moved=len(moved),
                failed=failed,
                freed_bytes=sum(r.size for r in moved),
                can_undo=bool(moved),
                single_file_name=records[0].name if len(records) == 1 else None,
            )

    def undo_delete(self) -> list[FileRecord]:
        """Restore the files of the pending delete.

        Files whose original path is occupied stay quarantined. Restored
        files are re-read from disk and all derived lists are recomputed.

        Returns:
            Records of the restored files; empty while a scan is running.
        """
        with self._lock:
            if self._state.kind is StateKind.SCANNING:
                logger.warning("Refusing to undo while a scan is running")
                return []
            if not self._quarantine.has_pending:
                return []
            restored: list[FileRecord] = []
            for path in self._quarantine.restore():
                try:
                    restored.append(record_for(path))
                except OSError as e:
                    logger.warning("Restored file %s is unreadable: %s", path, e)
            if not restored:
                return []

            paths = {r.path for r in restored}
            files = [f for f in self._results.files if f.path not in paths] + restored
            tree = self._results.tree
            if tree is not None:
                for record in restored:
                    tree = tree.with_file(record)
            duplicates = find_duplicates(files, workers=self._config.hash_workers)
            self._results = self._rebuild(files, duplicates, tree)
            self._save_snapshot()
            return restored

    def confirm_delete(self) -> int:
        """Permanently remove the files of the pending delete.

        Returns:
            Number of files removed.
        """
        with self._lock:
            return self._quarantine.commit()

    # ------------------------------------------------------------------
    # Single-file operations
    # ------------------------------------------------------------------

    def move_file(self, path: str, target_dir: str) -> OperationResult:
        with self._lock:
            result = self._fileops.move_file(path, target_dir)
            if result.success and result.path:
                self._replace_path(path, result.path)
            return result

    def copy_file(self, path: str, target_dir: str) -> OperationResult:
        with self._lock:
            result = self._fileops.copy_file(path, target_dir)
            if result.success and result.path:
                self._add_copy(path, result.path)
            return result

    def rename_file(self, path: str, new_name: str) -> OperationResult:
        with self._lock:
            result = self._fileops.rename_file(path, new_name)
            if result.success and result.path:
                self._replace_path(path, result.path)
            return result

    def batch_rename(self, pairs: Iterable[tuple[str, str]]) -> tuple[int, int]:
        """Rename several files.

        Args:
            pairs: (path, new_name) pairs.

        Returns:
            Tuple of (succeeded, failed) counts.
        """
        succeeded = failed = 0
        with self._lock:
            for path, new_name in pairs:
                if self.rename_file(path, new_name).success:
                    succeeded += 1
                else:
                    failed += 1
        return succeeded, failed

    def compress_file(self, path: str) -> OperationResult:
        with self._lock:
            result = self._fileops.compress_file(path)
            if result.success and result.path:
                self._add_new(result.path)
            return result

    def extract_archive(self, path: str) -> OperationResult:
        """Extract a zip archive and start a rescan on success."""
        with self._lock:
            result = self._fileops.extract_archive(path)
        if result.success:
            self.start_scan().close()
        return result

    # ------------------------------------------------------------------
    # Incremental refresh
    # ------------------------------------------------------------------

    def _kept_duplicates(self, duplicates: Iterable[FileRecord]) -> list[FileRecord]:
        """Drop protected files and orphan groups, sorted by group then size."""
        kept = prune_orphan_groups(d for d in duplicates if d.path not in self._protected)
        kept.sort(key=lambda r: (r.duplicate_group, -r.size))
        return kept

    def _find_large(self, files: Sequence[FileRecord]) -> list[FileRecord]:
        return find_large_files(files, self._large_threshold, self._config.max_large_files)

    def _find_junk(self, files: Sequence[FileRecord]) -> list[FileRecord]:
        junk = find_junk(
            files,
            cutoff_age=timedelta(days=self._config.stale_download_days),
            downloads_path=self._downloads,
            root=self._root,
        )
        return [f for f in junk if f.path not in self._protected]

    def _rebuild(
        self,
        files: Sequence[FileRecord],
        duplicates: Iterable[FileRecord],
        tree: DirectoryNode | None,
        junk: Sequence[FileRecord] | None = None,
        large: Sequence[FileRecord] | None = None,
    ) -> EngineResults:
        """Derive a consistent EngineResults from files and duplicates.

        Protected files are dropped from the duplicate and junk lists,
        orphan groups are pruned, and duplicate groups on the file list
        are synced with the surviving duplicate list. Junk and large
        lists are recomputed unless given. The tree's records are tagged
        with the same groups as the file list.
        """
        kept = self._kept_duplicates(duplicates)
        synced = _sync_groups(files, kept)
        if tree is not None:
            tree = tree.with_groups({d.path: d.duplicate_group for d in kept})
        if large is None:
            large = self._find_large(synced)
        if junk is None:
            junk = self._find_junk(synced)
        return EngineResults(
            files=synced,
            duplicates=tuple(kept),
            junk=tuple(junk),
            large=tuple(large),
            tree=tree,
            stats=StorageStats.compute(synced, kept, large, junk, self._scan_duration_ms),
        )

    def _remove_paths(self, paths: set[str]) -> None:
        results = self._results
        tree = results.tree.without_paths(paths) if results.tree is not None else None
        self._results = self._rebuild(
            [f for f in results.files if f.path not in paths],
            [d for d in results.duplicates if d.path not in paths],
            tree,
        )

    def _lookup(self, path: str) -> FileRecord | None:
        for record in self._results.files:
            if record.path == path:
                return record
        return None

    def _stat(self, path: str) -> FileRecord | None:
        try:
            return record_for(path)
        except OSError as e:
            logger.warning("Cannot read %s: %s", path, e)
            return None

    def _apply(self, removed: str | None, added: Sequence[FileRecord]) -> None:
        results = self._results
        drop = {r.path for r in added}
        if removed is not None:
            drop.add(removed)
        files = [f for f in results.files if f.path not in drop] + list(added)
        duplicates = [d for d in results.duplicates if d.path not in drop]
        duplicates += [r for r in added if r.is_duplicate]
        tree = results.tree
        if tree is not None:
            tree = tree.without_paths(drop)
            for record in added:
                tree = tree.with_file(record)
        self._results = self._rebuild(files, duplicates, tree)
        self._save_snapshot()

    def _replace_path(self, old_path: str, new_path: str) -> None:
        """Replace a moved or renamed file, keeping its duplicate group."""
        old = self._lookup(old_path)
        new = self._stat(new_path)
        if new is not None and old is not None and old.is_duplicate:
            new = new.with_group(old.duplicate_group)
        self._apply(old_path, [new] if new is not None else [])

    def _add_copy(self, source_path: str, copy_path: str) -> None:
        """Add a copied file; the copy and its source share a group."""
        copy = self._stat(copy_path)
        if copy is None:
            return
        source = self._lookup(source_path)
        if source is None or copy.size == 0:
            self._apply(None, [copy])
            return
        if source.is_duplicate:
            group = source.duplicate_group
        else:
            group = max((d.duplicate_group for d in self._results.duplicates), default=-1) + 1
        self._apply(None, [source.with_group(group), copy.with_group(group)])

    def _add_new(self, path: str) -> None:
        record = self._stat(path)
        if record is not None:
            self._apply(None, [record])

    def _save_snapshot(self) -> None:
        try:
            self._snapshot.save(self._results.files, self._results.tree)
        except OSError as e:
            logger.warning("Cannot save snapshot: %s", e)


def _sync_groups(
    files: Iterable[FileRecord], duplicates: Iterable[FileRecord]
) -> tuple[FileRecord, ...]:
    """Set each file's duplicate group to match the duplicate list."""
    groups = {d.path: d.duplicate_group for d in duplicates}
    synced: list[FileRecord] = []
    for record in files:
        group = groups.get(record.path, NO_GROUP)
        synced.append(record if record.duplicate_group == group else record.with_group(group))
    return tuple(synced)
