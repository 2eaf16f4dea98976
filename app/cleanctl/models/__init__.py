"""Data models for cleanctl.

This module exports the records produced by a scan, the scan state
values published by the engine, and operation results.
"""

from cleanctl.models.file_record import (
    NO_GROUP,
    Category,
    DirectoryNode,
    FileRecord,
    format_bytes,
)
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

__all__ = [
    "NO_GROUP",
    "Cancelled",
    "Category",
    "DeleteResult",
    "DirectoryNode",
    "Done",
    "Error",
    "FileRecord",
    "Idle",
    "OperationResult",
    "ScanPhase",
    "ScanState",
    "Scanning",
    "StateKind",
    "StorageStats",
    "format_bytes",
]
