"""Ordering, grouping and pagination of content items.

Content items are plain dicts (the template context of a page or post).
Orderings and category lists are always derived from the posts list so that
recomputing them reproduces the site model exactly.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from .utils import as_str, paginate_path, require

Item = dict[str, Any]


def sort_by_date(items: Iterable[Item]) -> list[Item]:
    """Sort items newest first; ties keep their encounter order.

    Raises:
        ContextTypeError: If an item has no datetime ``date``.
    """
    return sorted(items, key=lambda item: require(item, "date", datetime), reverse=True)


def categorize(posts: Iterable[Item]) -> dict[str, list[Item]]:
    """Group posts by their front-matter ``category``.

    Posts without the key are left out; each list is sorted newest first.
    """
    categories: dict[str, list[Item]] = {}
    for post in posts:
        if "category" not in post:
            continue
        categories.setdefault(as_str(post["category"]), []).append(post)
    return {name: sort_by_date(members) for name, members in categories.items()}


def limit_posts(posts: list[Item], limit: int) -> list[Item]:
    """Truncate posts to limit when limit is positive."""
    if limit > 0 and len(posts) > limit:
        return posts[:limit]
    return posts


class Paginator:
    """Splits the posts list into fixed-size listing pages.

    Page 1 is the site index; pages 2..total_pages live at ``/pageN/``.
    The page count is ``ceil(total_posts / per_page)``, at least 1.

    Attributes:
        posts: Posts to paginate, already sorted.
        per_page: Posts per page.
    """

    def __init__(self, posts: list[Item], per_page: int):
        if per_page <= 0:
            raise ValueError("per_page must be positive")
        self.posts = posts
        self.per_page = per_page

    @property
    def total_posts(self) -> int:
        return len(self.posts)

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total_posts / self.per_page))

    def page(self, number: int) -> dict[str, Any]:
        """Return the paginator context for page ``number`` (1-based)."""
        if number < 1 or number > self.total_pages:
            raise ValueError(f"page {number} out of range 1..{self.total_pages}")
        start = self.per_page * (number - 1)
        end = min(self.per_page * number, self.total_posts)
        has_previous = number > 1
        has_next = number < self.total_pages
        return {
            "page": number,
            "per_page": self.per_page,
            "total_pages": self.total_pages,
            "total_posts": self.total_posts,
            "posts": self.posts[start:end],
            "previous_page": has_previous,
            "previous_page_path": paginate_path(number - 1) if has_previous else "",
            "next_page": has_next,
            "next_page_path": paginate_path(number + 1) if has_next else "",
        }
