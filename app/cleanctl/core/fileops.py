"""Single-file operations: move, copy, rename, compress and extract.

Every operation returns an OperationResult. Expected failures (missing
source, occupied target, invalid name, unsafe archive) are reported in
the result instead of raised.
"""

import logging
import os
import shutil
import zipfile
from pathlib import Path

from cleanctl.models.results import OperationResult

logger = logging.getLogger(__name__)

INVALID_NAME_CHARS = frozenset('/\0:*?"<>|\\')
MAX_ARCHIVE_ENTRIES = 10_000
MAX_EXTRACTED_BYTES = 2 * 1024 * 1024 * 1024
_COPY_CHUNK = 65536


def validate_file_name(name: str) -> str | None:
    """Check a new file name.

    Returns:
        Error message, or None if the name is acceptable.
    """
    if not name or not name.strip():
        return "Name cannot be blank"
    if name != name.strip():
        return "Name cannot start or end with whitespace"
    if name in (".", ".."):
        return f"Invalid name: {name}"
    bad = sorted(INVALID_NAME_CHARS.intersection(name))
    if bad:
        shown = " ".join(repr(c)[1:-1] for c in bad)
        return f"Name contains invalid characters: {shown}"
    return None


class _ArchiveTooLarge(Exception):
    pass


class FileOperations:
    """File operations confined to a scan root.

    Attributes:
        root: Move and copy sources and targets must lie inside this tree.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = os.path.realpath(root)

    @property
    def root(self) -> str:
        return self._root

    def is_inside_root(self, path: str | Path) -> bool:
        """Check if a path resolves to a location within the root."""
        real = os.path.realpath(path)
        return real == self._root or real.startswith(self._root.rstrip(os.sep) + os.sep)

    def _check_transfer(self, path: str, target_dir: str) -> OperationResult | str:
        if not self.is_inside_root(path) or not self.is_inside_root(target_dir):
            return OperationResult(False, "Source and destination must be inside the scan root")
        if not os.path.isfile(path):
            return OperationResult(False, f"File not found: {path}")
        if not os.path.isdir(target_dir):
            return OperationResult(False, f"Destination is not a directory: {target_dir}")
        target = os.path.join(target_dir, os.path.basename(path))
        if os.path.exists(target):
            return OperationResult(False, f"A file named {os.path.basename(path)} already exists")
        return target

    def move_file(self, path: str, target_dir: str) -> OperationResult:
        """Move a file into another directory."""
        checked = self._check_transfer(path, target_dir)
        if isinstance(checked, OperationResult):
            return checked
        try:
            shutil.move(path, checked)
        except OSError as e:
            logger.warning("Move of %s failed: %s", path, e)
            return OperationResult(False, f"Move failed: {e}")
        return OperationResult(True, f"Moved to {target_dir}", checked)

    def copy_file(self, path: str, target_dir: str) -> OperationResult:
        """Copy a file, with its metadata, into another directory."""
        checked = self._check_transfer(path, target_dir)
        if isinstance(checked, OperationResult):
            return checked
        try:
            shutil.copy2(path, checked)
        except OSError as e:
            logger.warning("Copy of %s failed: %s", path, e)
            return OperationResult(False, f"Copy failed: {e}")
        return OperationResult(True, f"Copied to {target_dir}", checked)

    def rename_file(self, path: str, new_name: str) -> OperationResult:
        """Rename a file within its directory."""
        error = validate_file_name(new_name)
        if error:
            return OperationResult(False, error)
        if not self.is_inside_root(path):
            return OperationResult(False, "File must be inside the scan root")
        if not os.path.isfile(path):
            return OperationResult(False, f"File not found: {path}")
        target = os.path.join(os.path.dirname(path), new_name)
        if os.path.exists(target):
            return OperationResult(False, f"A file named {new_name} already exists")
        try:
            os.rename(path, target)
        except OSError as e:
            logger.warning("Rename of %s failed: %s", path, e)
            return OperationResult(False, f"Rename failed: {e}")
        return OperationResult(True, f"Renamed to {new_name}", target)

    def compress_file(self, path: str) -> OperationResult:
        """Write ``<stem>.zip`` next to the file with one deflated entry."""
        if not os.path.isfile(path):
            return OperationResult(False, f"File not found: {path}")
        source = Path(path)
        target = source.with_name(f"{source.stem}.zip")
        if target.exists():
            return OperationResult(False, f"{target.name} already exists")
        try:
            with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                zf.write(source, arcname=source.name)
        except OSError as e:
            logger.warning("Compression of %s failed: %s", path, e)
            target.unlink(missing_ok=True)
            return OperationResult(False, f"Compression failed: {e}")
        return OperationResult(True, f"Compressed to {target.name}", str(target))

    def extract_archive(self, path: str) -> OperationResult:
        """Extract a zip archive into ``<stem>/`` next to it.

        Entries containing ``..`` or resolving outside the output
        directory are skipped. Extraction is aborted, and the output
        directory removed, above MAX_ARCHIVE_ENTRIES entries or
        MAX_EXTRACTED_BYTES of extracted data.
        """
        source = Path(path)
        if source.suffix.lower() != ".zip":
            return OperationResult(False, "Only .zip archives can be extracted")
        if not source.is_file():
            return OperationResult(False, f"File not found: {path}")
        out_dir = source.with_name(source.stem)
        if out_dir.exists():
            return OperationResult(False, f"{out_dir.name} already exists")

        try:
            with zipfile.ZipFile(source) as zf:
                entries = zf.infolist()
                if len(entries) > MAX_ARCHIVE_ENTRIES:
                    return OperationResult(
                        False, f"Archive has more than {MAX_ARCHIVE_ENTRIES:,} entries"
                    )
                out_dir.mkdir()
                extracted = self._extract_entries(zf, entries, out_dir)
        except _ArchiveTooLarge:
            shutil.rmtree(out_dir, ignore_errors=True)
            return OperationResult(False, "Archive expands beyond the 2 GB limit")
        except (OSError, zipfile.BadZipFile, RuntimeError, NotImplementedError) as e:
            # RuntimeError: encrypted entry, NotImplementedError: unsupported method
            logger.warning("Extraction of %s failed: %s", path, e)
            shutil.rmtree(out_dir, ignore_errors=True)
            return OperationResult(False, f"Extraction failed: {e}")
        return OperationResult(True, f"Extracted {extracted} files", str(out_dir))

    def _extract_entries(
        self, zf: zipfile.ZipFile, entries: list[zipfile.ZipInfo], out_dir: Path
    ) -> int:
        base = os.path.realpath(out_dir)
        total = 0
        count = 0
        for info in entries:
            if ".." in info.filename.replace("\\", "/").split("/"):
                logger.warning("Skipping unsafe archive entry %s", info.filename)
                continue
            target = os.path.realpath(os.path.join(base, info.filename))
            if not target.startswith(base + os.sep):
                logger.warning("Skipping unsafe archive entry %s", info.filename)
                continue
            if info.is_dir():
                os.makedirs(target, exist_ok=True)
                continue
            os.makedirs(os.path.dirname(target), exist_ok=True)
            with zf.open(info) as src, open(target, "wb") as dst:
                while chunk := src.read(_COPY_CHUNK):
                    total += len(chunk)
                    if total > MAX_EXTRACTED_BYTES:
                        raise _ArchiveTooLarge
                    dst.write(chunk)
            count += 1
        return count
