"""Result models for engine operations.

Batch operations never raise for per-file failures; they report
what happened through these values.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from cleanctl.models.file_record import FileRecord


@dataclass(frozen=True, slots=True)
class DeleteResult:
    """Summary of a quarantine delete.

    Attributes:
        moved: Number of files moved into quarantine.
        failed: Number of files that could not be moved.
        freed_bytes: Total size of the moved files.
        can_undo: Whether the moved files can still be restored.
        single_file_name: Name of the file when exactly one was requested.
    """

    moved: int = 0
    failed: int = 0
    freed_bytes: int = 0
    can_undo: bool = False
    single_file_name: str | None = None


@dataclass(frozen=True, slots=True)
class OperationResult:
    """Outcome of a single-file operation (move, rename, compress...).

    Attributes:
        success: Whether the operation completed.
        message: Human-readable outcome.
        path: Path of the file or directory produced, if any.
    """

    success: bool
    message: str
    path: str | None = None


@dataclass(frozen=True, slots=True)
class StorageStats:
    """Aggregate statistics over the current result sets.

    Attributes:
        total_files: Number of files in the active file list.
        total_size: Combined size of all files.
        junk_size: Combined size of junk files.
        duplicate_size: Combined size of all duplicate group members.
        large_size: Combined size of large files.
        scan_duration_ms: Duration of the scan that produced the lists.
    """

    total_files: int = 0
    total_size: int = 0
    junk_size: int = 0
    duplicate_size: int = 0
    large_size: int = 0
    scan_duration_ms: int = 0

    @classmethod
    def compute(
        cls,
        files: Sequence[FileRecord],
        duplicates: Sequence[FileRecord],
        large: Sequence[FileRecord],
        junk: Sequence[FileRecord],
        scan_duration_ms: int = 0,
    ) -> StorageStats:
        """Compute statistics from the result lists."""
        return cls(
            total_files=len(files),
            total_size=sum(f.size for f in files),
            junk_size=sum(f.size for f in junk),
            duplicate_size=sum(f.size for f in duplicates),
            large_size=sum(f.size for f in large),
            scan_duration_ms=scan_duration_ms,
        )
