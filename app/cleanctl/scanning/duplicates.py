"""Three-stage duplicate detection.

Stage 1 groups by exact size (free), stage 2 hashes the first and last
4 KiB of each size-collision candidate, and stage 3 hashes full content
only for files that still collide. Files are declared duplicates only on
a full-content digest match.
"""

import hashlib
import logging
import os
import threading
from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor

from cleanctl.core.errors import ScanCancelled
from cleanctl.models.file_record import FileRecord

logger = logging.getLogger(__name__)

PARTIAL_HASH_BYTES = 4096
CHUNK_SIZE = 65536
DEFAULT_WORKERS = 4

DuplicateProgress = Callable[[int, int], None]


def partial_hash(path: str) -> str | None:
    """Hash the first and last 4 KiB of a file.

    Files smaller than 8 KiB are hashed whole, once.

    Returns:
        Hex digest, or None if the file cannot be read.
    """
    try:
        length = os.path.getsize(path)
        if length < PARTIAL_HASH_BYTES * 2:
            return full_hash(path)
        digest = hashlib.md5(usedforsecurity=False)
        with open(path, "rb") as f:
            digest.update(f.read(PARTIAL_HASH_BYTES))
            f.seek(length - PARTIAL_HASH_BYTES)
            digest.update(f.read(PARTIAL_HASH_BYTES))
        return digest.hexdigest()
    except OSError as e:
        logger.debug("Cannot hash %s: %s", path, e)
        return None


def full_hash(path: str) -> str | None:
    """Hash the entire content of a file.

    Returns:
        Hex digest, or None if the file cannot be read.
    """
    digest = hashlib.md5(usedforsecurity=False)
    try:
        with open(path, "rb") as f:
            while chunk := f.read(CHUNK_SIZE):
                digest.update(chunk)
    except OSError as e:
        logger.debug("Cannot hash %s: %s", path, e)
        return None
    return digest.hexdigest()


def _check_cancel(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise ScanCancelled


def _hash_all(
    pool: ThreadPoolExecutor,
    records: Sequence[FileRecord],
    hasher: Callable[[str], str | None],
    cancel_event: threading.Event | None,
    on_each: Callable[[], None] | None = None,
) -> dict[str, list[FileRecord]]:
    """Hash records on the pool and group them by digest.

    Results are consumed in input order, so grouping is deterministic.
    Unreadable files are dropped.
    """
    groups: dict[str, list[FileRecord]] = defaultdict(list)
    futures = [pool.submit(hasher, record.path) for record in records]
    try:
        for record, future in zip(records, futures, strict=True):
            _check_cancel(cancel_event)
            if on_each is not None:
                on_each()
            key = future.result()
            if key is not None:
                groups[key].append(record)
    finally:
        for future in futures:
            future.cancel()
    return groups


def find_duplicates(
    files: Iterable[FileRecord],
    progress_callback: DuplicateProgress | None = None,
    cancel_event: threading.Event | None = None,
    workers: int = DEFAULT_WORKERS,
) -> list[FileRecord]:
    """Find groups of files with identical content.

    Args:
        files: Records to examine.
        progress_callback: Called with (done, total) once per size-collision
            candidate entering the partial-hash stage.
        cancel_event: When set, stops with ScanCancelled between files.
        workers: Number of hashing threads.

    Returns:
        All confirmed duplicates tagged with a group id starting at 0,
        sorted by group ascending then size descending.

    Raises:
        ScanCancelled: If cancel_event was set during hashing.
    """
    # Stage 1: size
    by_size: dict[int, list[FileRecord]] = defaultdict(list)
    for record in files:
        if record.size > 0:
            by_size[record.size].append(record)
    candidates = [r for group in by_size.values() if len(group) > 1 for r in group]
    total = len(candidates)
    if not candidates:
        return []

    done = 0

    def report() -> None:
        nonlocal done
        if progress_callback is not None:
            progress_callback(done, total)
        done += 1

    result: list[FileRecord] = []
    group_id = 0
    with ThreadPoolExecutor(max_workers=max(1, workers), thread_name_prefix="dedup") as pool:
        # Stage 2: head + tail digest. Size is part of the key because
        # different sizes can share a partial digest.
        by_partial: dict[tuple[int, str], list[FileRecord]] = defaultdict(list)
        for digest, group in _hash_all(
            pool, candidates, partial_hash, cancel_event, on_each=report
        ).items():
            for record in group:
                by_partial[(record.size, digest)].append(record)

        # Stage 3: full content
        for partial_group in by_partial.values():
            if len(partial_group) < 2:
                continue
            _check_cancel(cancel_event)
            by_full = _hash_all(pool, partial_group, full_hash, cancel_event)
            for full_group in by_full.values():
                if len(full_group) > 1:
                    result.extend(r.with_group(group_id) for r in full_group)
                    group_id += 1

    if progress_callback is not None:
        progress_callback(total, total)
    result.sort(key=lambda r: (r.duplicate_group, -r.size))
    logger.debug("Found %d duplicates in %d groups", len(result), group_id)
    return result


def prune_orphan_groups(records: Iterable[FileRecord]) -> list[FileRecord]:
    """Drop records whose duplicate group has fewer than two members left."""
    records = [r for r in records if r.is_duplicate]
    counts: dict[int, int] = defaultdict(int)
    for record in records:
        counts[record.duplicate_group] += 1
    return [r for r in records if counts[r.duplicate_group] >= 2]
