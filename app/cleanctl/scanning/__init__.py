"""Scanning primitives: classification, tree walking, duplicates and junk."""

from cleanctl.scanning.classifier import classify, extension_of, record_for
from cleanctl.scanning.duplicates import find_duplicates, prune_orphan_groups
from cleanctl.scanning.junk import find_junk, find_large_files
from cleanctl.scanning.tree import DEFAULT_EXCLUDE_DIRS, build_tree

__all__ = [
    "DEFAULT_EXCLUDE_DIRS",
    "build_tree",
    "classify",
    "extension_of",
    "find_duplicates",
    "find_junk",
    "find_large_files",
    "prune_orphan_groups",
    "record_for",
]
