"""High-level orchestration for Markdown page generation.

This module ties the parsers and :class:`~mdlive.generator.HtmlRenderer` to
the Jinja page shell. :class:`PageGenerator` renders document bodies and wraps
them either as a standalone file (inline CSS) or as a live page (linked CSS and
reload script). :class:`DocumentConverter` runs the one-shot
read → render → write pipeline used without ``--watch``.

Example
-------
>>> from pathlib import Path
>>> from mdlive.config import load_config
>>> from mdlive.generator import DocumentConverter
>>> config = load_config(Path("notes.md"), Path("notes.html"))  # doctest: +SKIP
>>> DocumentConverter(config).run()  # doctest: +SKIP
PosixPath('notes.html')
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from loguru import logger

from mdlive._constants import RELOAD_PATH, STYLESHEET_PATH
from mdlive.generator.models import ConversionError, PageContext
from mdlive.generator.renderer import HtmlRenderer
from mdlive.markdown_parser import parse_document

if typ.TYPE_CHECKING:
    from mdlive.config import ConverterConfig, RenderConfig

PAGE_TEMPLATE = "page.html"


def read_source(path: Path) -> str:
    """Return the UTF-8 text of the Markdown source at ``path``.

    Raises
    ------
    ConversionError
        If the file does not exist or cannot be read or decoded.
    """
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        msg = f"Input file '{path}' not found."
        raise ConversionError(msg, path) from exc
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Unable to read input file '{path}': {exc}"
        raise ConversionError(msg, path) from exc


def write_output(path: Path, html: str) -> Path:
    """Write ``html`` to ``path``, creating parent directories as needed.

    Raises
    ------
    ConversionError
        If the output path cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(html, encoding="utf-8")
    except OSError as exc:
        msg = f"Unable to write output file '{path}': {exc.strerror or exc}"
        raise ConversionError(msg, path) from exc
    return path


class PageGenerator:
    """Render Markdown into HTML bodies and full pages."""

    def __init__(
        self,
        render_config: RenderConfig,
        *,
        templates_dir: Path | None = None,
    ) -> None:
        """Initialize the generator with presentation settings.

        Parameters
        ----------
        render_config : RenderConfig
            Title, stylesheet and highlighting settings.
        templates_dir : Path, optional
            Directory containing ``page.html``; defaults to the package
            templates.
        """
        self.config = render_config
        default_templates = Path(__file__).resolve().parents[1] / "templates"
        self.templates_dir = templates_dir or default_templates
        self.renderer = HtmlRenderer(
            highlight_code=render_config.highlight_code,
            pygments_style=render_config.pygments_style,
        )
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.get_template(PAGE_TEMPLATE)

    @property
    def stylesheet(self) -> str:
        """Return the page CSS followed by any highlighting rules."""
        highlight_css = self.renderer.stylesheet
        if not highlight_css:
            return self.config.css
        return f"{self.config.css}\n{highlight_css}"

    def render_body(self, markdown_text: str) -> str:
        """Parse and render ``markdown_text`` into an HTML fragment."""
        return self.renderer.render(parse_document(markdown_text))

    def standalone_page(self, body_html: str) -> str:
        """Wrap ``body_html`` in the page shell with the stylesheet inlined."""
        context = PageContext(
            title=self.config.title, body_html=body_html, css=self.stylesheet
        )
        return self.template.render(page=context)

    def live_page(self, body_html: str, version: int) -> str:
        """Wrap ``body_html`` for the live server.

        The stylesheet is linked rather than inlined and the reload script is
        armed with ``version`` so the browser reloads once a newer render is
        published.
        """
        context = PageContext(
            title=self.config.title,
            body_html=body_html,
            css_href=STYLESHEET_PATH,
            version=version,
            reload_url=RELOAD_PATH,
        )
        return self.template.render(page=context)


class DocumentConverter:
    """Convert a Markdown file into a standalone HTML file."""

    def __init__(
        self, config: ConverterConfig, *, generator: PageGenerator | None = None
    ) -> None:
        self.config = config
        self.generator = generator or PageGenerator(config.render)

    def render(self) -> str:
        """Read the input file and return its rendered HTML body."""
        return self.generator.render_body(read_source(self.config.input_path))

    def write(self, body_html: str) -> Path:
        """Write ``body_html`` as a standalone page to the output path."""
        page = self.generator.standalone_page(body_html)
        return write_output(self.config.output_path, page)

    def run(self) -> Path:
        """Read, render and write once.

        Returns
        -------
        Path
            The written output file.

        Raises
        ------
        ConversionError
            If the input is missing or unreadable, or the output cannot be
            written.
        """
        written = self.write(self.render())
        logger.info("Converted {} -> {}", self.config.input_path, written)
        return written


__all__ = [
    "DocumentConverter",
    "PageGenerator",
    "read_source",
    "write_output",
]
