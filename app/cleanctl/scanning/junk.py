"""Junk and large-file heuristics.

Both functions are pure: for a fixed ``now`` they return the same list
in the same order on every call.
"""

import os
import time
from collections.abc import Iterable
from datetime import timedelta

from cleanctl.models.file_record import FileRecord
from cleanctl.scanning.classifier import (
    ARCHIVE_APK_EXTENSIONS,
    DOCUMENT_EXTENSIONS,
    MEDIA_EXTENSIONS,
)

JUNK_EXTENSIONS: frozenset[str] = frozenset(
    {"tmp", "temp", "log", "bak", "old", "dmp", "crdownload", "part", "partial"}
)

JUNK_DIR_NAMES: frozenset[str] = frozenset(
    {".cache", "cache", "temp", "tmp", "thumbnail", ".thumbnails", "lost+found"}
)

DEFAULT_STALE_AGE = timedelta(days=90)
DEFAULT_LARGE_FILE_BYTES = 50 * 1024 * 1024
DEFAULT_MAX_LARGE_FILES = 200

# Stale downloads of these kinds are still worth keeping.
_KEEP_EXTENSIONS = MEDIA_EXTENSIONS | DOCUMENT_EXTENSIONS | ARCHIVE_APK_EXTENSIONS


def _by_size_desc(record: FileRecord) -> tuple[int, str]:
    return (-record.size, record.path)


def _in_junk_dir(path: str, root: str | None) -> bool:
    if root and _is_inside(path, root):
        path = path[len(root.rstrip(os.sep)) :]
    parts = path.lower().replace(os.sep, "/").split("/")[:-1]
    return any(part in JUNK_DIR_NAMES for part in parts)


def _is_inside(path: str, directory: str) -> bool:
    directory = directory.rstrip(os.sep)
    return path.startswith(directory + os.sep)


def is_junk(
    record: FileRecord,
    cutoff_ms: int,
    downloads_path: str | None = None,
    root: str | None = None,
) -> bool:
    """Check a single record against the junk rules.

    Args:
        record: File to check.
        cutoff_ms: Downloads modified before this epoch-ms instant are stale.
        downloads_path: Downloads directory, or None to skip the stale rule.
        root: Scan root; only directories below it count as cache-like.
    """
    ext = record.extension
    if ext in JUNK_EXTENSIONS:
        return True
    if _in_junk_dir(record.path, root):
        return True
    if downloads_path and _is_inside(record.path, downloads_path):
        return record.last_modified < cutoff_ms and ext not in _KEEP_EXTENSIONS
    return False


def find_junk(
    files: Iterable[FileRecord],
    cutoff_age: timedelta = DEFAULT_STALE_AGE,
    downloads_path: str | None = None,
    now: float | None = None,
    root: str | None = None,
) -> list[FileRecord]:
    """Find files that are safe-to-remove candidates.

    A file is junk when its extension marks a temporary or partial file,
    when it sits in a cache-like directory, or when it is an old download
    that is not media, a document, an archive or an installer.

    Args:
        files: Records to examine.
        cutoff_age: Age after which a download is stale.
        downloads_path: Downloads directory for the stale-download rule.
        now: Current time in epoch seconds (defaults to time.time()).
        root: Scan root. When given, cache-like directory names are only
            matched below it.

    Returns:
        Junk records sorted by size descending, then path.
    """
    if now is None:
        now = time.time()
    cutoff_ms = int((now - cutoff_age.total_seconds()) * 1000)
    junk = [f for f in files if is_junk(f, cutoff_ms, downloads_path, root)]
    junk.sort(key=_by_size_desc)
    return junk


def find_large_files(
    files: Iterable[FileRecord],
    min_size_bytes: int = DEFAULT_LARGE_FILE_BYTES,
    max_results: int = DEFAULT_MAX_LARGE_FILES,
) -> list[FileRecord]:
    """Return the largest files at or above a size threshold.

    Args:
        files: Records to examine.
        min_size_bytes: Inclusive size threshold.
        max_results: Maximum number of records returned.

    Returns:
        Records sorted by size descending, then path, truncated.
    """
    large = [f for f in files if f.size >= min_size_bytes]
    large.sort(key=_by_size_desc)
    return large[:max_results]
