"""Render parsed documents into HTML fragments with optional code highlighting."""

from __future__ import annotations

import typing as typ
from html import escape

from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from mdlive.models import (
    Bold,
    Code,
    CodeBlock,
    Document,
    Heading,
    HorizontalRule,
    Italic,
    Link,
    OrderedList,
    Paragraph,
    Text,
    UnorderedList,
)

if typ.TYPE_CHECKING:
    from mdlive.models import Block, InlineSequence

HIGHLIGHT_CSS_CLASS = "codehilite"
_URL_ESCAPES = str.maketrans({'"': "&quot;", "<": "&lt;", ">": "&gt;"})


def escape_text(text: str) -> str:
    """Escape ``& < > " '`` for use in element content or attributes."""
    return escape(text, quote=True)


def escape_url(url: str) -> str:
    """Escape only the characters that could break out of an ``href`` value."""
    return url.translate(_URL_ESCAPES)


class HtmlRenderer:
    """Render :class:`~mdlive.models.Document` trees into HTML.

    Output depends only on the document and the renderer settings; rendering
    the same document twice yields identical text.
    """

    def __init__(
        self, *, highlight_code: bool = False, pygments_style: str = "monokai"
    ) -> None:
        """Initialize a renderer.

        Parameters
        ----------
        highlight_code : bool, optional
            Run fenced code with a known language through Pygments. Defaults to
            ``False``, which emits escaped plain text.
        pygments_style : str, optional
            Name of the Pygments style used for :attr:`stylesheet`. Defaults to
            ``"monokai"``.
        """
        self.highlight_code = highlight_code
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(style=pygments_style, nowrap=True)

    @property
    def stylesheet(self) -> str:
        """Return the CSS for highlighted blocks, or ``""`` when disabled."""
        if not self.highlight_code:
            return ""
        return self._formatter.get_style_defs(f".{HIGHLIGHT_CSS_CLASS}")

    def render(self, document: Document) -> str:
        """Render every block of ``document`` separated by newlines."""
        return "\n".join(self.render_block(block) for block in document)

    def render_block(self, block: Block) -> str:
        """Render a single block element."""
        match block:
            case Heading(level=level, content=content):
                return f"<h{level}>{self.render_inline(content)}</h{level}>"
            case Paragraph(content=content):
                return f"<p>{self.render_inline(content)}</p>"
            case UnorderedList(items=items):
                return self._render_list("ul", items)
            case OrderedList(items=items):
                return self._render_list("ol", items)
            case CodeBlock():
                return self.code_block(block)
            case HorizontalRule():
                return "<hr>"
        msg = f"Unsupported block type: {type(block).__name__}"
        raise TypeError(msg)

    def render_inline(self, spans: InlineSequence) -> str:
        """Render a span sequence, escaping all literal text once."""
        parts: list[str] = []
        for span in spans:
            match span:
                case Text(text=text):
                    parts.append(escape_text(text))
                case Bold(children=children):
                    parts.append(f"<strong>{self.render_inline(children)}</strong>")
                case Italic(children=children):
                    parts.append(f"<em>{self.render_inline(children)}</em>")
                case Code(text=text):
                    parts.append(f"<code>{escape_text(text)}</code>")
                case Link(text=text, url=url):
                    parts.append(f'<a href="{escape_url(url)}">{escape_text(text)}</a>')
        return "".join(parts)

    def code_block(self, block: CodeBlock) -> str:
        """Render fenced code as ``<pre><code>``.

        Parameters
        ----------
        block : CodeBlock
            Code block whose raw lines are joined with newlines.

        Returns
        -------
        str
            ``<pre><code>`` markup. A ``language-<tag>`` class is attached when
            the fence named a language; with highlighting enabled and a known
            lexer the content carries Pygments token spans instead of plain
            escaped text.
        """
        code = "\n".join(block.raw_lines)
        class_attr = ""
        if block.language:
            class_attr = f' class="language-{escape_text(block.language)}"'
        highlighted = self._highlight(code, block.language)
        if highlighted is not None:
            return (
                f'<pre class="{HIGHLIGHT_CSS_CLASS}"><code{class_attr}>'
                f"{highlighted}</code></pre>"
            )
        return f"<pre><code{class_attr}>{escape_text(code)}</code></pre>"

    def _highlight(self, code: str, language: str | None) -> str | None:
        if not (self.highlight_code and language):
            return None
        try:
            lexer = get_lexer_by_name(language)
        except ClassNotFound:
            return None
        # Pygments always terminates its output with a newline
        return highlight(code, lexer, self._formatter).removesuffix("\n")

    def _render_list(self, tag: str, items: tuple[InlineSequence, ...]) -> str:
        rendered = "\n".join(f"<li>{self.render_inline(item)}</li>" for item in items)
        return f"<{tag}>\n{rendered}\n</{tag}>"


__all__ = ["HIGHLIGHT_CSS_CLASS", "HtmlRenderer", "escape_text", "escape_url"]
