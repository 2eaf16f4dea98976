"""Search queries over scanned files.

A query mixes plain name terms with operators::

    >50mb          size at least 50 MiB (kb, mb and gb units)
    <10kb          size at most 10 KiB
    ext:pdf,jpg    extension is one of the listed ones
    after:2025-01-01   modified on or after that day (local time)
    before:2025-06-01  modified before the end of that day
    report final   name contains every term (case-insensitive)

Operators are removed from the query text; whatever remains is split
into name terms.
"""

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from cleanctl.models.file_record import FileRecord

logger = logging.getLogger(__name__)

_SIZE_RE = re.compile(r"([<>])(\d+(?:\.\d+)?)(kb|mb|gb)", re.IGNORECASE)
_EXT_RE = re.compile(r"ext:([a-z0-9,]+)", re.IGNORECASE)
_DATE_RE = re.compile(r"(after|before):(\d{4}-\d{2}-\d{2})", re.IGNORECASE)

_UNITS = {"kb": 1024, "mb": 1024**2, "gb": 1024**3}


@dataclass(frozen=True, slots=True)
class SearchQuery:
    """Parsed search query. None means "no constraint".

    Attributes:
        name_terms: Lower-case substrings the file name must all contain.
        min_size: Minimum size in bytes.
        max_size: Maximum size in bytes.
        extensions: Allowed lower-case extensions.
        after_ms: Earliest modification time, epoch milliseconds.
        before_ms: Latest modification time, epoch milliseconds.
    """

    name_terms: tuple[str, ...] = ()
    min_size: int | None = None
    max_size: int | None = None
    extensions: frozenset[str] | None = None
    after_ms: int | None = None
    before_ms: int | None = None

    @property
    def is_empty(self) -> bool:
        return self == SearchQuery()


class SortOrder(str, Enum):
    """Sort orders for search results."""

    NAME = "name"
    NAME_DESC = "name-desc"
    SIZE = "size"
    SIZE_DESC = "size-desc"
    DATE = "date"
    DATE_DESC = "date-desc"


def _day_start_ms(text: str) -> int | None:
    try:
        day = datetime.strptime(text, "%Y-%m-%d")
    except ValueError:
        logger.debug("Ignoring invalid date %s", text)
        return None
    return int(day.timestamp() * 1000)


def parse_query(query: str) -> SearchQuery:
    """Parse a query string.

    Malformed operators (such as an impossible date) constrain nothing
    but are still removed from the name terms.
    """
    if not query.strip():
        return SearchQuery()

    min_size = max_size = None
    for m in _SIZE_RE.finditer(query):
        size = int(float(m.group(2)) * _UNITS[m.group(3).lower()])
        if m.group(1) == ">":
            min_size = size
        else:
            max_size = size
    remaining = _SIZE_RE.sub(" ", query)

    extensions = None
    ext = _EXT_RE.search(remaining)
    if ext:
        extensions = frozenset(e.lower() for e in ext.group(1).split(",") if e)
        remaining = remaining[: ext.start()] + " " + remaining[ext.end() :]

    after_ms = before_ms = None
    for m in _DATE_RE.finditer(remaining):
        start = _day_start_ms(m.group(2))
        if start is None:
            continue
        if m.group(1).lower() == "after":
            after_ms = start
        else:
            before_ms = start + int(timedelta(days=1).total_seconds() * 1000)
    remaining = _DATE_RE.sub(" ", remaining)

    return SearchQuery(
        name_terms=tuple(term.lower() for term in remaining.split()),
        min_size=min_size,
        max_size=max_size,
        extensions=extensions,
        after_ms=after_ms,
        before_ms=before_ms,
    )


def matches(record: FileRecord, query: SearchQuery) -> bool:
    """Check a record against every constraint of a parsed query."""
    if query.name_terms:
        name = record.name.lower()
        if not all(term in name for term in query.name_terms):
            return False
    if query.min_size is not None and record.size < query.min_size:
        return False
    if query.max_size is not None and record.size > query.max_size:
        return False
    if query.extensions is not None and record.extension not in query.extensions:
        return False
    if query.after_ms is not None and record.last_modified < query.after_ms:
        return False
    if query.before_ms is not None and record.last_modified > query.before_ms:
        return False
    return True


def filter_records(records: Iterable[FileRecord], query: str) -> list[FileRecord]:
    """Return the records matching a query string, in their original order."""
    parsed = parse_query(query)
    if parsed.is_empty:
        return list(records)
    return [r for r in records if matches(r, parsed)]


def sort_records(records: Sequence[FileRecord], order: SortOrder) -> list[FileRecord]:
    """Return records sorted by name, size or modification time."""
    if order in (SortOrder.NAME, SortOrder.NAME_DESC):
        return sorted(records, key=lambda r: r.name.lower(), reverse=order is SortOrder.NAME_DESC)
    if order in (SortOrder.SIZE, SortOrder.SIZE_DESC):
        return sorted(records, key=lambda r: r.size, reverse=order is SortOrder.SIZE_DESC)
    return sorted(records, key=lambda r: r.last_modified, reverse=order is SortOrder.DATE_DESC)
