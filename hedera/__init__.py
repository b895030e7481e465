"""Hedera static site generator.

Hedera reads a content tree of pages, dated posts, data files, layouts and
includes and renders a deployable output tree. Content is written in Markdown
or HTML with Jinja2 template expressions, wrapped by chained layouts.

The main entry point is the CLI module, which provides commands for scaffolding
new sites, creating posts, building, and serving a site with incremental rebuilds.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
