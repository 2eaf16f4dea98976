"""Unit tests for protected path matching."""

import os
from pathlib import Path

from cleanctl.core.protected import ProtectedPaths, default_protected_patterns, is_protected_path


class TestIsProtectedPath:
    """Tests for is_protected_path function."""

    def test_exact_and_glob(self) -> None:
        assert is_protected_path("/data/keep.txt", ["/data/keep.txt"])
        assert is_protected_path("/data/photo.jpg", ["/data/*.jpg"])
        assert not is_protected_path("/data/photo.png", ["/data/*.jpg"])

    def test_directory_pattern_protects_subtree(self) -> None:
        assert is_protected_path("/data/vault/a/b.txt", ["/data/vault"])
        assert is_protected_path("/data/vault/a/b.txt", ["/data/vault/"])
        assert not is_protected_path("/data/vaulted/b.txt", ["/data/vault"])

    def test_home_expansion(self) -> None:
        home = str(Path.home())
        assert is_protected_path(os.path.join(home, ".ssh", "id_rsa"), ["~/.ssh"])

    def test_no_patterns(self) -> None:
        assert not is_protected_path("/anything", [])


class TestProtectedPaths:
    """Tests for ProtectedPaths class."""

    def test_defaults_cover_own_state(self, isolated_xdg: Path) -> None:
        protected = ProtectedPaths()
        state_file = isolated_xdg / "state" / "cleanctl" / "scan-snapshot.json"
        assert str(state_file) in protected
        assert len(protected.patterns) == len(default_protected_patterns())

    def test_without_defaults(self) -> None:
        protected = ProtectedPaths(["/data/*.iso"], include_defaults=False)
        assert protected.patterns == ("/data/*.iso",)
        assert "/data/x.iso" in protected
        assert "/data/x.img" not in protected
        assert 42 not in protected
