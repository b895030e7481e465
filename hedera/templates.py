"""Template rendering engine for Hedera.

This module uses Jinja2 to execute template expressions in content files,
layouts, converter commands and the sitemap. Partial templates are resolved
through ``{% include "name.html" %}`` against the includes directory and
render with the including template's context.

Key class:
- TemplateEngine: Renders template strings against a context.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    TemplateSyntaxError,
)

from .errors import TemplateRenderError
from .filters import FILTERS


class TemplateEngine:
    """Template rendering engine using Jinja2.

    Attributes:
        includes_dir: Directory searched by ``{% include %}``.
        env: Jinja2 environment for content and layouts.
    """

    def __init__(self, includes_dir: Path):
        """Initialize the template engine.

        Args:
            includes_dir: Directory containing partial templates.
        """
        self.includes_dir = includes_dir
        self.env = Environment(
            loader=FileSystemLoader(str(includes_dir)),
            autoescape=False,
            keep_trailing_newline=True,
        )
        self.env.filters.update(FILTERS)
        # Converter commands must not silently lose {{ from }} / {{ to }}
        self._strict_env = Environment(undefined=StrictUndefined, autoescape=False)

    def render_string(self, template: str, context: dict[str, Any], source_path: Path) -> str:
        """Render a template string.

        Args:
            template: Template source.
            context: Variables available to the template.
            source_path: File the template came from, attached to errors.

        Returns:
            Rendered string.

        Raises:
            TemplateRenderError: On syntax or runtime errors.
        """
        try:
            return self.env.from_string(template).render(context)
        except TemplateSyntaxError as exc:
            raise TemplateRenderError(
                source_path,
                f"Template syntax error on line {exc.lineno}: {exc.message}",
                exc,
            ) from exc
        except TemplateError as exc:
            raise TemplateRenderError(source_path, _format_error_message(exc), exc) from exc
        except (TypeError, ValueError, AttributeError) as exc:
            raise TemplateRenderError(source_path, _format_error_message(exc), exc) from exc

    def render_command(self, command: str, src: Path, dst: Path) -> str:
        """Render an external converter command template.

        Args:
            command: Command template referencing ``from`` and ``to``.
            src: Source file path.
            dst: Destination file path.

        Returns:
            Shell command string.

        Raises:
            TemplateError: If the command template is invalid.
        """
        return self._strict_env.from_string(command).render({"from": str(src), "to": str(dst)})


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    error_type = type(exc).__name__
    error_msg = str(exc)

    if error_type == "UndefinedError":
        return f"Undefined variable: {error_msg}"
    if error_type == "TemplateNotFound":
        return f"Include not found: {error_msg}"
    if error_type == "TypeError":
        return f"Type error: {error_msg}"
    if error_type == "AttributeError":
        return f"Attribute error: {error_msg}"

    return f"{error_type}: {error_msg}"
