"""Protected paths that cleanup operations must never touch.

Patterns are glob-style. Patterns starting with ~ are expanded to the
user's home directory before matching; other patterns are matched as-is.
A pattern also protects everything below the directory it names.
"""

import fnmatch
import os
from collections.abc import Iterable
from pathlib import Path

from cleanctl.core.paths import get_config_dir, get_state_dir


def default_protected_patterns() -> list[str]:
    """Return the built-in patterns: cleanctl's own config and state."""
    return [str(get_config_dir()), str(get_state_dir())]


def _expand(pattern: str, home: str) -> str:
    if pattern == "~" or pattern.startswith("~/"):
        pattern = home + pattern[1:]
    return pattern.rstrip("/") or "/"


def is_protected_path(path: str, patterns: Iterable[str]) -> bool:
    """Check if a path is protected and must not be deleted.

    Args:
        path: Absolute filesystem path to check.
        patterns: Glob patterns, optionally using ~ for the home directory.

    Returns:
        True if the path or one of its parent directories matches a pattern.
    """
    home = str(Path.home())
    for raw in patterns:
        pattern = _expand(raw, home)
        if fnmatch.fnmatch(path, pattern):
            return True
        # Directory patterns protect their whole subtree
        if fnmatch.fnmatch(path, pattern + os.sep + "*"):
            return True
    return False


class ProtectedPaths:
    """Pre-expanded pattern set bound to a configuration."""

    def __init__(self, patterns: Iterable[str] = (), include_defaults: bool = True) -> None:
        merged = list(patterns)
        if include_defaults:
            merged.extend(default_protected_patterns())
        self._patterns = tuple(merged)

    @property
    def patterns(self) -> tuple[str, ...]:
        return self._patterns

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and is_protected_path(path, self._patterns)
