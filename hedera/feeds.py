"""Sitemap generation for Hedera.

The sitemap is rendered from a fixed template against the full site context,
so it lists exactly what ``site.posts`` exposes to every other template.

Classes:
    SitemapGenerator: Renders and writes sitemap.xml.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .templates import TemplateEngine

SITEMAP_LIMIT = 25

SITEMAP_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" xsi:schemaLocation="http://www.sitemaps.org/schemas/sitemap/0.9 http://www.sitemaps.org/schemas/sitemap/0.9/sitemap.xsd" xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
{% for post in site.posts | limit(limit) %}
<url>
<loc>{{ post.url | xml_escape }}</loc>
<lastmod>{{ post.date | date("%Y-%m-%dT%H:%M:%S%z") }}</lastmod>
</url>
{% endfor %}
</urlset>
"""


class SitemapGenerator:
    """Generates sitemap.xml for search engine indexing.

    Lists the most recent posts with their URL and last modification date.
    """

    filename = "sitemap.xml"

    def __init__(self, engine: TemplateEngine):
        self.engine = engine

    def generate(self, globals_: dict[str, Any], output_dir: Path) -> str:
        """Render the sitemap content.

        Args:
            globals_: Global template context containing ``site``.
            output_dir: Output directory, used for error context.

        Returns:
            Sitemap XML.
        """
        context = dict(globals_, limit=SITEMAP_LIMIT)
        return self.engine.render_string(SITEMAP_TEMPLATE, context, output_dir / self.filename)

    def write(self, globals_: dict[str, Any], output_dir: Path) -> Path:
        """Generate and write the sitemap to the output directory.

        Returns:
            Path of the written file.
        """
        output_path = output_dir / self.filename
        output_path.write_text(self.generate(globals_, output_dir), encoding="utf-8")
        return output_path
