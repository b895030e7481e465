"""Per-file render pipeline for Hedera.

Each source file is either copied, handed to an external converter, or
rendered through the layout loop:

1. Parse front-matter and merge it over the global context.
2. Inject ``page``/``post`` with the item's date, URL and title.
3. Execute the body as a Jinja2 template (unless ``convertable: false``).
4. Convert Markdown to HTML.
5. If a ``layout`` is set, load ``<layouts>/<layout>.html`` and repeat with
   the rendered output available as ``content``.

The loop is bounded by MAX_LAYOUT_DEPTH so a layout cycle becomes an error.

Key class:
- RenderPipeline: Converts one source file to its destination.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Any

from jinja2 import TemplateError

from .config import ConversionRule, SiteConfig
from .errors import ConversionError, LayoutError
from .extractors import MARKDOWN_DEFAULTS, read_front_matter
from .permalinks import PermalinkResolver
from .renderers import MarkdownRenderer
from .templates import TemplateEngine
from .utils import as_bool, as_str, copy_file, ensure_parent, replace_suffix

logger = logging.getLogger(__name__)

MAX_LAYOUT_DEPTH = 16

# Never copied to the output tree
IGNORED_EXTENSIONS = frozenset({".yml", ".yaml", ".pyc", ".exe"})

TERMINAL_LAYOUTS = ("", "nil")


class RenderPipeline:
    """Converts source files into output files.

    Attributes:
        config: Site configuration.
        engine: Template engine.
        resolver: Permalink resolver used for item dates and URLs.
        markdown: Markdown renderer.
    """

    def __init__(
        self,
        config: SiteConfig,
        engine: TemplateEngine,
        resolver: PermalinkResolver,
        markdown: MarkdownRenderer | None = None,
    ):
        self.config = config
        self.engine = engine
        self.resolver = resolver
        self.markdown = markdown or MarkdownRenderer()

    def output_path(self, src: Path, dst: Path) -> Path:
        """Apply the output extension for src to a resolved destination.

        Markdown becomes ``.html``; a destination without a suffix takes the
        source's suffix.
        """
        if self.config.is_markdown(src):
            return replace_suffix(dst, ".html")
        if not dst.suffix:
            return dst.with_name(dst.name + src.suffix)
        return dst

    def convert(self, src: Path, dst: Path, globals_: dict[str, Any]) -> Path | None:
        """Convert one source file.

        Args:
            src: Source file.
            dst: Resolved destination (before the output extension is applied).
            globals_: Global template context (``site``, ``paginator``).

        Returns:
            The path written, or None if the file was skipped.

        Raises:
            BuildError: Subclasses for front-matter, template, layout and
                converter failures.
            OSError: On read, write or copy failures.
        """
        if not self.config.is_convertible(src):
            if src.suffix in IGNORED_EXTENSIONS:
                logger.debug("skipping %s", src)
                return None
            copy_file(src, dst)
            return dst

        rule = self.config.conversion_for(src)
        if rule is not None:
            return self._run_converter(src, dst, rule)

        dst = self.output_path(src, dst)
        content = self.render(src, globals_)
        ensure_parent(dst)
        dst.write_text(content, encoding="utf-8")
        return dst

    def render(self, src: Path, globals_: dict[str, Any]) -> str:
        """Run the layout loop for src and return the final content.

        Args:
            src: Content file.
            globals_: Global template context.

        Returns:
            Fully rendered output.

        Raises:
            LayoutError: If a layout is missing or the chain is too deep.
            TemplateRenderError: If a template fails.
            FrontMatterError: If front-matter is malformed.
        """
        context: dict[str, Any] = {"content": ""}
        item: dict[str, Any] = {}
        current = src
        for _ in range(MAX_LAYOUT_DEPTH + 1):
            context.update(globals_)
            body, front = read_front_matter(current, self.config.is_markdown(current))
            context.update(front)

            if current == src:
                item = {
                    "date": self.resolver.date_for(src, context),
                    "url": self.resolver.url_for(src, front),
                    "title": as_str(context.get("title")),
                }
            context["post"] = item
            context["page"] = item

            if as_bool(context.get("convertable"), True) and body:
                body = self.engine.render_string(body, context, current)

            if self.config.is_markdown(current):
                rendered = self.markdown.render(body)
            else:
                rendered = body
            context["content"] = rendered

            layout = as_str(context.get("layout"))
            if layout in TERMINAL_LAYOUTS:
                return rendered
            layout_path = self.config.layouts / f"{layout}.html"
            if not layout_path.is_file():
                if layout == MARKDOWN_DEFAULTS["layout"]:
                    return rendered
                raise LayoutError(current, f"Layout '{layout}' not found at {layout_path}")

            item = {**item, "content": rendered}
            context["layout"] = ""
            current = layout_path

        raise LayoutError(
            src, f"Layout chain is deeper than {MAX_LAYOUT_DEPTH} levels; check for a cycle"
        )

    def _run_converter(self, src: Path, dst: Path, rule: ConversionRule) -> Path | None:
        """Run an external converter for src.

        A malformed command template is logged and the file skipped.

        Raises:
            ConversionError: If the command cannot be started or exits nonzero.
        """
        dst = replace_suffix(dst, "." + rule.ext)
        try:
            command = self.engine.render_command(rule.command, src, dst)
        except TemplateError as exc:
            logger.warning("Error: conversion command for %s: %s", src, exc)
            return None
        ensure_parent(dst)
        logger.info("converting: %s", command)
        try:
            result = subprocess.run(command, shell=True, check=False)
        except OSError as exc:
            raise ConversionError(src, f"Cannot run converter: {exc}", exc) from exc
        if result.returncode != 0:
            raise ConversionError(
                src, f"Converter exited with status {result.returncode}: {command}"
            )
        return dst
