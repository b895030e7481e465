"""Destination paths and public URLs for Hedera content.

Pages mirror their position in the source tree. Posts are placed according
to the permalink pattern, expanded from the ``YYYY-MM-DD-title`` filename
convention, unless their front-matter names an explicit ``permalink``.

Every method here is a pure function of the configuration, the source path
and the parsed front-matter, except date_for which falls back to the file's
modification time.

Key class:
- PermalinkResolver: Computes destinations, URLs and dates.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from .config import SiteConfig
from .utils import (
    as_str,
    collapse_slashes,
    extract_date_from_name,
    is_within,
    local_datetime,
    parse_date_value,
    url_join,
)

# Length of the "YYYY-MM-DD-" filename prefix
DATE_PREFIX_LENGTH = 11


class PermalinkResolver:
    """Computes where content is written and how it is addressed.

    Attributes:
        config: Site configuration.
    """

    def __init__(self, config: SiteConfig):
        """Initialize the resolver.

        Args:
            config: Site configuration.
        """
        self.config = config

    def is_post(self, src: Path) -> bool:
        """Check if a source file lives in the posts directory."""
        return is_within(src, self.config.posts)

    def _relative_page_path(self, src: Path) -> str:
        rel = src.relative_to(self.config.source).as_posix()
        if self.config.is_markdown(src):
            rel = rel[: -len(src.suffix)] + ".html"
        return rel

    def page_destination(self, src: Path) -> Path:
        """Return the output path for a page.

        Args:
            src: Absolute source path under the source root.

        Returns:
            Destination path mirroring the source layout.
        """
        return self.config.destination / self._relative_page_path(src)

    def page_url(self, src: Path) -> str:
        """Return the public URL for a page."""
        return url_join(self.config.baseurl, self._relative_page_path(src))

    def _expand_pattern(self, src: Path, context: Mapping[str, Any]) -> str | None:
        """Expand the permalink pattern for a date-prefixed post filename.

        Returns:
            Expanded path, or None if the filename has no date prefix.
        """
        name = src.name[: -len(src.suffix)] if src.suffix else src.name
        if len(name) <= DATE_PREFIX_LENGTH:
            return None
        date = extract_date_from_name(name)
        if date is None:
            return None
        replacements = (
            (":categories", as_str(context.get("category"))),
            (":year", f"{date.year}"),
            (":i_month", f"{date.month}"),
            (":month", f"{date.month:02d}"),
            (":i_day", f"{date.day}"),
            (":day", f"{date.day:02d}"),
            (":title", name[DATE_PREFIX_LENGTH:]),
        )
        path = self.config.permalink
        for token, value in replacements:
            path = path.replace(token, value)
        return collapse_slashes(path)

    def post_destination(self, src: Path, context: Mapping[str, Any]) -> Path:
        """Return the output path for a post.

        A pattern ending in "/" produces ``.../index``; the Render Pipeline
        applies the output extension.

        Args:
            src: Absolute source path of the post.
            context: Parsed front-matter of the post.

        Returns:
            Destination path.
        """
        permalink = as_str(context.get("permalink"))
        if not permalink:
            permalink = self._expand_pattern(src, context) or ""
            if not permalink:
                return self.config.destination / f"{src.stem}.html"
        if permalink.endswith("/"):
            permalink += "index"
        return self.config.destination / collapse_slashes(permalink).lstrip("/")

    def post_url(self, src: Path, context: Mapping[str, Any]) -> str:
        """Return the public URL for a post.

        Args:
            src: Absolute source path of the post.
            context: Parsed front-matter of the post.

        Returns:
            URL joined onto the configured base URL.
        """
        permalink = as_str(context.get("permalink"))
        if permalink:
            return url_join(self.config.baseurl, permalink)
        expanded = self._expand_pattern(src, context)
        if expanded is not None:
            return url_join(self.config.baseurl, expanded)
        return url_join(self.config.baseurl, src.stem + ".html")

    def date_for(self, src: Path, context: Mapping[str, Any]) -> datetime:
        """Resolve the date of a content item.

        Order: front-matter ``date``, ``YYYY-MM-DD-`` filename prefix, file
        modification time, current time.

        Args:
            src: Source path.
            context: Parsed front-matter.

        Returns:
            Timezone-aware datetime.
        """
        explicit = parse_date_value(context.get("date"))
        if explicit is not None:
            return explicit
        from_name = extract_date_from_name(src.name)
        if from_name is not None and len(src.name) > DATE_PREFIX_LENGTH:
            return local_datetime(from_name)
        try:
            return datetime.fromtimestamp(src.stat().st_mtime).astimezone()
        except OSError:
            return datetime.now().astimezone()

    def url_for(self, src: Path, context: Mapping[str, Any]) -> str:
        """Return the URL of a content file using the post or page rule."""
        if self.is_post(src):
            return self.post_url(src, context)
        return self.page_url(src)

    def destination_for(self, src: Path, context: Mapping[str, Any]) -> Path:
        """Return the destination of a content file using the post or page rule."""
        if self.is_post(src):
            return self.post_destination(src, context)
        return self.page_destination(src)

    def paginate_destination(self, number: int) -> Path:
        """Return the output path of pagination page ``number`` (2 and up)."""
        return self.config.destination / f"page{number}" / "index.html"
