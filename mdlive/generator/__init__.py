"""Rendering and page generation for parsed Markdown documents."""

from .models import ConversionError, PageContext
from .page_generator import DocumentConverter, PageGenerator, read_source, write_output
from .renderer import HtmlRenderer, escape_text, escape_url

__all__ = [
    "ConversionError",
    "DocumentConverter",
    "HtmlRenderer",
    "PageContext",
    "PageGenerator",
    "escape_text",
    "escape_url",
    "read_source",
    "write_output",
]
