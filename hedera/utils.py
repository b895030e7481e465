"""Utility functions for Hedera.

This module contains small helpers used throughout the Hedera codebase:
URL joining, path classification, file copying, date parsing and the lenient
accessors used to read loosely typed front-matter values.

Key functions:
    url_join: Join a base URL and a path with exactly one separator.
    collapse_slashes: Collapse repeated "/" produced by empty permalink tokens.
    is_hidden_name: Check if a file or directory name starts with "." or "_".
    ensure_parent: Create the parent directory of a file path.
    copy_file: Byte-copy a file, creating parent directories.
    extract_date_from_name: Parse a YYYY-MM-DD- filename prefix.
    parse_date_value: Interpret a front-matter date value.
    as_str: Lenient string accessor (non-strings become "").
    require: Typed context accessor raising ContextTypeError on mismatch.
"""

from __future__ import annotations

import re
import shutil
from collections.abc import Mapping
from datetime import date, datetime
from pathlib import Path
from typing import Any

from .errors import ContextTypeError

_SLASHES_RE = re.compile(r"/{2,}")
_DATE_PREFIX_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})-")
_ZONE_NAME_RE = re.compile(r"\s+[A-Za-z]{2,5}$")
_FRACTION_RE = re.compile(r"\.(\d+)")

_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S.%f %z",
    "%Y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)


def url_join(left: str, right: str) -> str:
    """Join two URL parts with exactly one "/" between them.

    Args:
        left: Base URL or path (may be empty).
        right: Path segment to append.

    Returns:
        Joined URL.

    Examples:
        >>> url_join("http://example.com/", "/a.html")
        'http://example.com/a.html'

        >>> url_join("", "a.html")
        '/a.html'
    """
    if left.endswith("/") and right.startswith("/"):
        return left + right[1:]
    if not left.endswith("/") and not right.startswith("/"):
        return left + "/" + right
    return left + right


def collapse_slashes(path: str) -> str:
    """Collapse runs of "/" into a single separator."""
    return _SLASHES_RE.sub("/", path)


def is_hidden_name(name: str) -> bool:
    """Check if a file or directory name is excluded from the page walk.

    Args:
        name: Base name of a file or directory.

    Returns:
        True if the name starts with "." or "_".
    """
    return name.startswith((".", "_"))


def has_hidden_part(path: Path, root: Path) -> bool:
    """Check if any component of path below root is hidden.

    Args:
        path: Path to check.
        root: Root directory the path lives under.

    Returns:
        True if a component starts with "." or "_", or path is outside root.
    """
    try:
        rel = path.relative_to(root)
    except ValueError:
        return True
    return any(is_hidden_name(part) for part in rel.parts)


def is_within(path: Path, root: Path) -> bool:
    """Return True if path equals root or lives below it."""
    try:
        path.relative_to(root)
    except ValueError:
        return False
    return True


def ensure_parent(path: Path) -> None:
    """Create the parent directory of path if it is missing."""
    path.parent.mkdir(parents=True, exist_ok=True)


def copy_file(src: Path, dst: Path) -> None:
    """Copy src to dst byte-for-byte, creating parent directories.

    Args:
        src: Source file.
        dst: Destination file.
    """
    ensure_parent(dst)
    shutil.copyfile(src, dst)


def replace_suffix(path: Path, suffix: str) -> Path:
    """Replace the final suffix of path, or append one if it has none.

    Args:
        path: Destination path.
        suffix: New suffix including the leading dot.

    Returns:
        Path with the new suffix.
    """
    if path.suffix:
        return path.with_suffix(suffix)
    return path.with_name(path.name + suffix)


def local_datetime(value: datetime) -> datetime:
    """Return value as a timezone-aware datetime.

    Naive datetimes are interpreted as local time.
    """
    if value.tzinfo is None:
        return value.astimezone()
    return value


def extract_date_from_name(name: str) -> datetime | None:
    """Extract a date from a filename with a YYYY-MM-DD- prefix.

    Args:
        name: Filename or filename stem.

    Returns:
        datetime at midnight if a valid date prefix is found, None otherwise.

    Examples:
        >>> extract_date_from_name("2024-01-15-hello-world.md")
        datetime.datetime(2024, 1, 15, 0, 0)

        >>> extract_date_from_name("hello-world.md") is None
        True
    """
    match = _DATE_PREFIX_RE.match(name)
    if not match:
        return None
    try:
        return datetime(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def parse_date_value(value: Any) -> datetime | None:
    """Interpret a front-matter date value.

    Accepts datetime and date objects (as produced by YAML) and strings in
    the form ``YYYY-MM-DD HH:MM:SS.fffffffff +HHMM ZZZ`` with any trailing
    part omitted, or ISO-8601.

    Args:
        value: Raw front-matter value.

    Returns:
        Timezone-aware datetime, or None if the value is not a date.
    """
    if isinstance(value, datetime):
        return local_datetime(value)
    if isinstance(value, date):
        return local_datetime(datetime(value.year, value.month, value.day))
    if not isinstance(value, str) or not value.strip():
        return None
    text = _ZONE_NAME_RE.sub("", value.strip())
    # strptime only accepts microseconds
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6], text, count=1)
    for fmt in _DATE_FORMATS:
        try:
            return local_datetime(datetime.strptime(text, fmt))
        except ValueError:
            continue
    try:
        return local_datetime(datetime.fromisoformat(text))
    except ValueError:
        return None


def as_str(value: Any) -> str:
    """Read a loosely typed value as a string; non-strings become ""."""
    if isinstance(value, str):
        return value
    return ""


def as_bool(value: Any, default: bool) -> bool:
    """Read a loosely typed boolean flag, falling back to default."""
    if isinstance(value, bool):
        return value
    return default


def require(context: Mapping[str, Any], key: str, kind: type) -> Any:
    """Read a context value that must have a specific type.

    Args:
        context: Content item or site context.
        key: Key to read.
        kind: Required type.

    Returns:
        The value.

    Raises:
        ContextTypeError: If the key is missing or has another type.
    """
    value = context.get(key)
    if not isinstance(value, kind):
        raise ContextTypeError(
            f"context key {key!r} must be {kind.__name__}, got {type(value).__name__}"
        )
    return value


def paginate_path(number: int) -> str:
    """Return the site path of pagination page ``number``; page 1 is the index."""
    if number <= 1:
        return "/"
    return f"/page{number}/"
