"""Template filters for Hedera.

These filters are registered on the Jinja2 environment and cover the
formatting needs of typical blog layouts and feeds: date formatting,
XML escaping, truncation and list limiting.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any
from urllib.parse import quote_plus
from markupsafe import escape

from .utils import parse_date_value

_SPECIFIER_RE = re.compile(r"%(.)", re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")

_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def _hour12(d: datetime) -> int:
    return d.hour % 12 or 12


def _utc_offset(d: datetime) -> str:
    offset = d.utcoffset()
    if offset is None:
        return ""
    minutes = int(offset.total_seconds() // 60)
    sign = "+" if minutes >= 0 else "-"
    minutes = abs(minutes)
    return f"{sign}{minutes // 60:02d}{minutes % 60:02d}"


_SPECIFIERS: dict[str, Callable[[datetime], str]] = {
    "a": lambda d: _WEEKDAYS[d.weekday()][:3],
    "A": lambda d: _WEEKDAYS[d.weekday()],
    "b": lambda d: _MONTHS[d.month - 1][:3],
    "h": lambda d: _MONTHS[d.month - 1][:3],
    "B": lambda d: _MONTHS[d.month - 1],
    "C": lambda d: f"{d.year // 100:02d}",
    "d": lambda d: f"{d.day:02d}",
    "e": lambda d: f"{d.day:2d}",
    "F": lambda d: f"{d.year:04d}-{d.month:02d}-{d.day:02d}",
    "H": lambda d: f"{d.hour:02d}",
    "I": lambda d: f"{_hour12(d):02d}",
    "j": lambda d: f"{d.timetuple().tm_yday:03d}",
    "k": lambda d: f"{d.hour:2d}",
    "l": lambda d: f"{_hour12(d):2d}",
    "m": lambda d: f"{d.month:02d}",
    "M": lambda d: f"{d.minute:02d}",
    "n": lambda d: "\n",
    "p": lambda d: "AM" if d.hour < 12 else "PM",
    "P": lambda d: "am" if d.hour < 12 else "pm",
    "r": lambda d: f"{_hour12(d):02d}:{d.minute:02d}:{d.second:02d} {'AM' if d.hour < 12 else 'PM'}",
    "R": lambda d: f"{d.hour:02d}:{d.minute:02d}",
    "S": lambda d: f"{d.second:02d}",
    "t": lambda d: "\t",
    "T": lambda d: f"{d.hour:02d}:{d.minute:02d}:{d.second:02d}",
    "y": lambda d: f"{d.year % 100:02d}",
    "Y": lambda d: f"{d.year:04d}",
    "z": _utc_offset,
    "Z": lambda d: d.tzname() or "",
    "%": lambda d: "%",
}


def format_date(value: datetime, fmt: str) -> str:
    """Format a datetime with strftime-style specifiers.

    Unrecognized specifiers are left in the output unchanged.

    Args:
        value: Datetime to format.
        fmt: Format string such as ``"%Y-%m-%d"``.

    Returns:
        Formatted string.

    Examples:
        >>> format_date(datetime(2024, 1, 5), "%Y/%m/%d %Q")
        '2024/01/05 %Q'
    """

    def repl(match: re.Match) -> str:
        handler = _SPECIFIERS.get(match.group(1))
        if handler is None:
            return match.group(0)
        return handler(value)

    return _SPECIFIER_RE.sub(repl, fmt)


def _coerce_date(value: Any) -> datetime:
    parsed = parse_date_value(value)
    if parsed is None:
        raise TypeError(f"Date must be a datetime or date string, not {type(value).__name__} ({value!r})")
    return parsed


def date_filter(value: Any, fmt: str = "%Y-%m-%d") -> str:
    """Jinja filter: ``{{ post.date | date("%Y-%m-%d") }}``."""
    return format_date(_coerce_date(value), fmt)


def date_to_string(value: Any) -> str:
    """Jinja filter: format a date as ``YYYY/MM/DD hh:mm:ss``."""
    return format_date(_coerce_date(value), "%Y/%m/%d %I:%M:%S")


def xml_escape(value: Any) -> str:
    """Jinja filter: escape a value for XML text and attributes."""
    return str(escape(value))


def url_escape(value: Any) -> str:
    """Jinja filter: query-escape a value for use in URLs."""
    return quote_plus(str(value))


def strip_html(value: Any) -> str:
    """Jinja filter: remove HTML tags."""
    return _TAG_RE.sub("", str(value))


def truncate_chars(value: Any, count: int) -> str:
    """Jinja filter: keep the first ``count`` characters."""
    return str(value)[: max(int(count), 0)]


def limit(value: Any, count: int) -> Any:
    """Jinja filter: keep the first ``count`` items of a sequence.

    Strings are returned unchanged.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, Sequence):
        return list(value[: max(int(count), 0)])
    raise TypeError(f"Cannot limit value of type {type(value).__name__}")


FILTERS: dict[str, Callable[..., Any]] = {
    "date": date_filter,
    "date_to_string": date_to_string,
    "xml_escape": xml_escape,
    "uri_escape": url_escape,
    "strip_html": strip_html,
    "truncate": truncate_chars,
    "limit": limit,
}
