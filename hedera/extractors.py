"""Front-matter extraction for Hedera.

A content file may start with a YAML block delimited by two ``---`` lines.
The block becomes the item's context; everything after the closing marker is
the body. Extraction is a pure function of the file text.

Key functions:
- parse_front_matter: Split text into (body, context).
- read_front_matter: Read a file and split it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .errors import FrontMatterError

DELIMITER = "---"

# Context for Markdown files without a front-matter block
MARKDOWN_DEFAULTS = {"title": "", "date": "", "layout": "plain"}


def _closing_index(lines: list[str]) -> int | None:
    for index, line in enumerate(lines[1:], start=1):
        if line.rstrip("\r") == DELIMITER:
            return index
    return None


def parse_front_matter(
    text: str, path: Path, is_markdown: bool = False
) -> tuple[str, dict[str, Any]]:
    """Split raw file text into body and front-matter context.

    Args:
        text: Raw file content.
        path: Source path, attached to errors.
        is_markdown: Whether the file is Markdown; such files get default
            title, date and layout when they carry no front-matter.

    Returns:
        Tuple of (body, context).

    Raises:
        FrontMatterError: If the block is not valid YAML or not a mapping.
    """
    lines = text.split("\n")
    closing = None
    if len(lines) > 2 and lines[0].rstrip("\r") == DELIMITER:
        closing = _closing_index(lines)
    if closing is None:
        return text, dict(MARKDOWN_DEFAULTS) if is_markdown else {}

    block = "\n".join(lines[1:closing])
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        raise FrontMatterError(path, f"Invalid front-matter: {exc}", exc) from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontMatterError(path, "Front-matter must be a mapping")
    context = {str(key): value for key, value in data.items()}
    return "\n".join(lines[closing + 1 :]), context


def read_front_matter(path: Path, is_markdown: bool = False) -> tuple[str, dict[str, Any]]:
    """Read a file and split it into body and front-matter context.

    Args:
        path: File to read.
        is_markdown: Whether the file is Markdown.

    Returns:
        Tuple of (body, context).

    Raises:
        FrontMatterError: If the front-matter cannot be parsed or the file
            is not valid UTF-8.
        OSError: If the file cannot be read.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise FrontMatterError(path, f"File is not valid UTF-8: {exc}", exc) from exc
    return parse_front_matter(text, path, is_markdown)
