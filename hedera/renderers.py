"""Markdown rendering for Hedera.

Markdown is converted with mistune using a fixed extension set: tables,
fenced code, autolinks and strikethrough. Headings require a space after
the ``#`` marks. Neither ``_`` nor ``*`` starts or ends emphasis inside a
word, so ``snake_case`` and ``foo*bar*baz`` stay literal. Raw HTML passes
through so layouts and includes can mix with Markdown content.

Key classes:
- MarkdownRenderer: Renders Markdown text to HTML.
"""

from __future__ import annotations

import mistune
from mistune.plugins import import_plugin

MARKDOWN_PLUGINS = ["table", "strikethrough", "url"]


def _is_word_char(char: str) -> bool:
    return char.isalnum() or char == "_"


class _InlineParser(mistune.InlineParser):
    """Inline parser that never opens or closes ``*`` emphasis inside a word."""

    def parse_emphasis(self, m, state):
        text = m.string
        start, end = m.start(), m.end()
        marker = m.group(0)
        if (
            marker.startswith("*")
            and 0 < start
            and end < len(text)
            and _is_word_char(text[start - 1])
            and _is_word_char(text[end])
        ):
            state.append_token({"type": "text", "raw": marker})
            return end
        return super().parse_emphasis(m, state)


class _HighlightRenderer(mistune.HTMLRenderer):
    """HTML renderer with Pygments syntax highlighting for fenced code."""

    def __init__(self):
        super().__init__(escape=False)

    def block_code(self, code: str, info: str | None = None) -> str:
        """Render a code block with Pygments syntax highlighting.

        Args:
            code: The code content.
            info: Language identifier (e.g., 'python', 'go').

        Returns:
            HTML string with highlighted code.
        """
        lang = info.split()[0] if info and info.strip() else ""
        if lang:
            try:
                from pygments import highlight
                from pygments.formatters import HtmlFormatter
                from pygments.lexers import get_lexer_by_name
                from pygments.util import ClassNotFound

                lexer = get_lexer_by_name(lang, stripall=True)
                formatter = HtmlFormatter(nowrap=False, cssclass="highlight")
                return highlight(code, lexer, formatter)
            except ClassNotFound:
                pass
        escaped = code.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
        lang_class = f' class="language-{lang}"' if lang else ""
        return f"<pre><code{lang_class}>{escaped}</code></pre>\n"


class MarkdownRenderer:
    """Renders Markdown content to HTML with the fixed extension set."""

    def __init__(self):
        self._markdown = mistune.Markdown(
            renderer=_HighlightRenderer(),
            inline=_InlineParser(),
            plugins=[import_plugin(name) for name in MARKDOWN_PLUGINS],
        )

    def render(self, text: str) -> str:
        """Render Markdown text to HTML.

        Args:
            text: Markdown source.

        Returns:
            Rendered HTML.
        """
        return self._markdown(text)
