"""Convert restricted Markdown to HTML and keep a browser preview in sync.

This package exposes the CLI entry points used by the ``mdlive`` console
script together with the conversion helpers it is built from.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.
- ``parse_document``: Segment Markdown text into a document tree.
- ``render_markdown``: Convert Markdown text straight to an HTML fragment.

Examples
--------
>>> from mdlive import render_markdown
>>> render_markdown("# Title")
'<h1>Title</h1>'
>>> from mdlive import main
>>> callable(main)
True
"""

from __future__ import annotations

from .cli import app, main
from .generator import HtmlRenderer
from .markdown_parser import parse_document


def render_markdown(markdown_text: str) -> str:
    """Render ``markdown_text`` to an HTML fragment with default settings."""
    return HtmlRenderer().render(parse_document(markdown_text))


__all__ = ["app", "main", "parse_document", "render_markdown"]
