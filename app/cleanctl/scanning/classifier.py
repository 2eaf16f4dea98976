"""File classification by extension and location.

Holds the single extension table used by both the classifier and the
junk detector.
"""

from pathlib import Path, PurePath

from cleanctl.models.file_record import Category, FileRecord


CATEGORY_EXTENSIONS: dict[Category, frozenset[str]] = {
    Category.IMAGE: frozenset(
        {
            "jpg", "jpeg", "png", "gif", "bmp", "webp", "heic", "heif", "tiff",
            "svg", "raw", "cr2", "nef", "ico", "avif",
        }
    ),
    Category.VIDEO: frozenset(
        {"mp4", "mkv", "avi", "mov", "wmv", "flv", "webm", "m4v", "3gp", "ts", "mpeg", "mpg"}
    ),
    Category.AUDIO: frozenset(
        {"mp3", "aac", "flac", "wav", "ogg", "m4a", "wma", "opus", "aiff", "mid", "amr"}
    ),
    Category.DOCUMENT: frozenset(
        {
            "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "txt", "csv", "odt",
            "ods", "odp", "epub", "mobi", "rtf", "md", "html", "htm", "xml", "json",
        }
    ),
    Category.APK: frozenset({"apk", "xapk", "apks"}),
    Category.ARCHIVE: frozenset(
        {"zip", "rar", "7z", "tar", "gz", "bz2", "xz", "cab", "iso", "tgz", "zst"}
    ),
}  # fmt: skip

MEDIA_EXTENSIONS: frozenset[str] = (
    CATEGORY_EXTENSIONS[Category.IMAGE]
    | CATEGORY_EXTENSIONS[Category.VIDEO]
    | CATEGORY_EXTENSIONS[Category.AUDIO]
)
DOCUMENT_EXTENSIONS: frozenset[str] = CATEGORY_EXTENSIONS[Category.DOCUMENT]
ARCHIVE_APK_EXTENSIONS: frozenset[str] = (
    CATEGORY_EXTENSIONS[Category.ARCHIVE] | CATEGORY_EXTENSIONS[Category.APK]
)

_DOWNLOAD_DIR_NAMES = frozenset({"download", "downloads"})

_EXTENSION_INDEX: dict[str, Category] = {
    ext: category for category, exts in CATEGORY_EXTENSIONS.items() for ext in exts
}


def extension_of(name: str) -> str:
    """Return the lower-case extension of a file name without the dot.

    Names without a dot (or dotfiles such as ``.bashrc``) have no extension.
    """
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem:
        return ""
    return ext.lower()


def is_under_downloads(path: str) -> bool:
    """Check whether any parent directory of path is a downloads folder."""
    return any(part.lower() in _DOWNLOAD_DIR_NAMES for part in PurePath(path).parent.parts)


def classify(path: str, extension: str) -> Category:
    """Map a file to its category.

    Matching is case-insensitive and a leading dot on the extension is
    ignored. Files with an unknown extension that live under a downloads
    directory are categorized as downloads; everything else falls back to
    ``Category.OTHER``.

    Args:
        path: Absolute path of the file.
        extension: File extension, with or without leading dot.

    Returns:
        The category of the file. Never raises.
    """
    category = _EXTENSION_INDEX.get(extension.lower().lstrip("."))
    if category is not None:
        return category
    if is_under_downloads(path):
        return Category.DOWNLOAD
    return Category.OTHER


def record_for(path: str | Path) -> FileRecord:
    """Stat a single file and build its FileRecord.

    Args:
        path: Path of an existing regular file.

    Returns:
        FileRecord for the file with no duplicate group.

    Raises:
        OSError: If the file cannot be stat'ed.
    """
    target = Path(path).absolute()
    stat = target.stat()
    name = target.name
    return FileRecord(
        path=str(target),
        name=name,
        size=stat.st_size,
        last_modified=int(stat.st_mtime * 1000),
        category=classify(str(target), extension_of(name)),
    )
