"""Site building functionality for Hedera.

This module contains the core logic for building a static site from source files.
It walks the source tree and the posts directory, assembles the site model,
loads data files, and drives the render pipeline for every page, post and
pagination page before writing the sitemap.

Key items:
- BuildContext: Everything one build needs, created fresh per build.
- build_site: Main function to build the entire site.
- load_data: Loads site data from YAML files in the data directory.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from .collections import Item, Paginator, categorize, limit_posts, sort_by_date
from .config import SiteConfig
from .errors import BuildError
from .extractors import read_front_matter
from .feeds import SitemapGenerator
from .permalinks import PermalinkResolver
from .pipeline import RenderPipeline
from .templates import TemplateEngine
from .utils import is_hidden_name

logger = logging.getLogger(__name__)

DATA_EXTENSIONS = (".yaml", ".yml")


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        pages: All pages in the site, newest first.
        posts: Every discovered post, newest first (not truncated).
        output_dir: Directory where the site was built.
        site: The site model exposed to templates.
    """

    pages: list[Item]
    posts: list[Item]
    output_dir: Path
    site: dict[str, Any]


@dataclass
class BuildContext:
    """State shared by every render of one build.

    Attributes:
        config: Site configuration.
        resolver: Permalink resolver.
        engine: Template engine.
        pipeline: Render pipeline.
        site: Site model, exposed to templates as ``site``.
        paginator: Pagination state, exposed to templates as ``paginator``.
    """

    config: SiteConfig
    resolver: PermalinkResolver
    engine: TemplateEngine
    pipeline: RenderPipeline
    site: dict[str, Any] = field(default_factory=dict)
    paginator: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(cls, config: SiteConfig) -> BuildContext:
        """Wire up the components for a build of config."""
        resolver = PermalinkResolver(config)
        engine = TemplateEngine(config.includes)
        pipeline = RenderPipeline(config, engine, resolver)
        return cls(config=config, resolver=resolver, engine=engine, pipeline=pipeline)

    def globals(self) -> dict[str, Any]:
        """Return the global template context."""
        return {"site": self.site, "paginator": self.paginator}

    def render(self, src: Path, dst: Path) -> Path | None:
        """Render one file, attaching its path to I/O errors."""
        logger.info("%s => %s", src, self.pipeline.output_path(src, dst))
        try:
            return self.pipeline.convert(src, dst, self.globals())
        except OSError as exc:
            raise BuildError(src, f"I/O error: {exc}", exc) from exc


def _raise_walk_error(exc: OSError) -> None:
    raise BuildError(Path(exc.filename or "."), f"I/O error: {exc}", exc) from exc


def _mtime(path: Path) -> datetime:
    try:
        return datetime.fromtimestamp(path.stat().st_mtime).astimezone()
    except OSError as exc:
        raise BuildError(path, f"I/O error: {exc}", exc) from exc


def collect_pages(config: SiteConfig, resolver: PermalinkResolver) -> list[Item]:
    """Walk the source tree and record every page.

    Directories and files whose name starts with "." or "_", the destination
    tree, the posts directory and paths ending in an excluded suffix are
    skipped.

    Args:
        config: Site configuration.
        resolver: Permalink resolver.

    Returns:
        Page items with ``path``, ``url`` and ``date`` (modification time).

    Raises:
        BuildError: If a directory or file cannot be read.
    """
    pages: list[Item] = []
    skipped_dirs = {config.destination, config.posts}
    for dirpath, dirnames, filenames in os.walk(config.source, onerror=_raise_walk_error):
        current = Path(dirpath)
        dirnames[:] = sorted(
            name
            for name in dirnames
            if not is_hidden_name(name) and (current / name) not in skipped_dirs
        )
        for filename in sorted(filenames):
            if is_hidden_name(filename):
                continue
            path = current / filename
            if any(path.as_posix().endswith(suffix) for suffix in config.exclude):
                continue
            pages.append(
                {
                    "path": str(path),
                    "url": resolver.page_url(path),
                    "date": _mtime(path),
                }
            )
    return pages


def collect_posts(config: SiteConfig, resolver: PermalinkResolver) -> list[Item]:
    """Walk the posts directory and parse every convertible post.

    Args:
        config: Site configuration.
        resolver: Permalink resolver.

    Returns:
        Post items: front-matter plus ``path``, ``url``, ``date`` and the
        raw body as ``content``.

    Raises:
        FrontMatterError: If a post's front-matter is malformed.
        BuildError: If a file or directory cannot be read.
    """
    posts: list[Item] = []
    if not config.posts.is_dir():
        return posts
    for dirpath, dirnames, filenames in os.walk(config.posts, onerror=_raise_walk_error):
        dirnames.sort()
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if not config.is_convertible(path):
                continue
            try:
                body, front = read_front_matter(path, config.is_markdown(path))
            except OSError as exc:
                raise BuildError(path, f"I/O error: {exc}", exc) from exc
            post = dict(front)
            post["path"] = str(path)
            post["url"] = resolver.post_url(path, front)
            post["date"] = resolver.date_for(path, front)
            post["content"] = body
            posts.append(post)
    return posts


def load_data(data_dir: Path) -> dict[str, Any]:
    """Load site data from YAML files in the data directory.

    A file that cannot be read or parsed is logged and skipped.

    Args:
        data_dir: Directory holding ``.yaml``/``.yml`` files.

    Returns:
        Mapping of file name without extension to parsed content.
    """
    data: dict[str, Any] = {}
    if not data_dir.is_dir():
        return data
    for path in sorted(data_dir.iterdir()):
        if not path.is_file() or path.suffix not in DATA_EXTENSIONS:
            continue
        try:
            with open(path, encoding="utf-8") as f:
                data[path.stem] = yaml.safe_load(f)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
            logger.warning("Skipping data file %s: %s", path, exc)
    return data


def find_index(config: SiteConfig, pages: list[Item]) -> Item | None:
    """Return the page rendered as pagination page 1, if any.

    The index is ``index.html`` or ``index.<markdown ext>`` at the source root.
    """
    names = {"index.html"} | {f"index.{ext}" for ext in config.markdown_ext}
    for page in pages:
        path = Path(page["path"])
        if path.parent == config.source and path.name in names:
            return page
    return None


def build_site(config: SiteConfig, ctx: BuildContext | None = None) -> BuildResult:
    """Build the entire static site.

    Args:
        config: Site configuration.
        ctx: Optional fresh BuildContext to populate; the dev server keeps it
            to re-render single files against the same site model.

    Returns:
        BuildResult with the pages, posts, output directory and site model.

    Raises:
        BuildError: If any file fails to parse, render or be read or written.
    """
    ctx = ctx or BuildContext.create(config)
    resolver = ctx.resolver

    pages = sort_by_date(collect_pages(config, resolver))
    all_posts = sort_by_date(collect_posts(config, resolver))
    categories = categorize(all_posts)
    posts = limit_posts(all_posts, config.limit_posts)

    ctx.site.update(config.extra)
    ctx.site.update(
        {
            "title": config.title,
            "name": config.name,
            "url": config.baseurl,
            "baseurl": config.baseurl,
            "time": datetime.now().astimezone(),
            "pages": pages,
            "posts": posts,
            "categories": categories,
            "data": load_data(config.data),
        }
    )

    try:
        config.destination.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise BuildError(config.destination, f"I/O error: {exc}", exc) from exc

    for post in all_posts:
        src = Path(post["path"])
        ctx.render(src, resolver.post_destination(src, post))

    paginator = Paginator(posts, config.paginate) if config.paginate > 0 else None
    if paginator is not None:
        ctx.paginator.update(paginator.page(1))

    for page in pages:
        src = Path(page["path"])
        ctx.render(src, resolver.page_destination(src))

    index = find_index(config, pages)
    if paginator is not None and index is not None:
        src = Path(index["path"])
        for number in range(2, paginator.total_pages + 1):
            ctx.paginator.clear()
            ctx.paginator.update(paginator.page(number))
            ctx.render(src, resolver.paginate_destination(number))
        ctx.paginator.clear()
        ctx.paginator.update(paginator.page(1))

    generator = SitemapGenerator(ctx.engine)
    try:
        sitemap = generator.write(ctx.globals(), config.destination)
    except OSError as exc:
        raise BuildError(
            config.destination / generator.filename, f"I/O error: {exc}", exc
        ) from exc
    logger.info("%s", sitemap)
    return BuildResult(pages=pages, posts=all_posts, output_dir=config.destination, site=ctx.site)
