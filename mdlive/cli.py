"""Cyclopts CLI entrypoint for converting Markdown and serving live previews.

The ``mdlive`` console script converts a Markdown file into a standalone HTML
page. With ``--watch`` it keeps running: the source is polled for changes, the
output file is rewritten after each change, and an embedded HTTP server pushes
reloads to every open browser tab.

Examples
--------
Convert once:

>>> from mdlive.cli import app
>>> app(["convert", "notes.md", "notes.html"])  # doctest: +SKIP

Serve a live preview on a custom port and open it in the browser:

>>> app(["convert", "notes.md", "notes.html", "--watch", "--port", "9000", "--open"])  # doctest: +SKIP
"""

from __future__ import annotations

import sys
import typing as typ
import webbrowser
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter
from loguru import logger

from .config import ConfigError, load_config
from .generator import ConversionError, DocumentConverter
from .live import LiveReloadService, ServiceError

LOG_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"
)

app = App(name="mdlive", config=cyclopts.config.Env("MDLIVE_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def configure_logging(*, verbose: bool = False) -> None:
    """Route loguru output to stderr at ``INFO`` (or ``DEBUG`` when verbose)."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO", format=LOG_FORMAT)


def _serve(service: LiveReloadService, *, open_browser: bool) -> None:
    """Run ``service`` until interrupted."""
    service.start()
    print(f"serving on {service.url}")
    if open_browser:
        webbrowser.open(service.url)
    try:
        service.serve_forever()
    except KeyboardInterrupt:
        logger.info("Stopping live reload")
    finally:
        service.close()


@app.command(help="Convert a Markdown file to HTML, optionally with live reload.")
def convert(  # noqa: PLR0913 - one flag per configuration knob
    input_path: typ.Annotated[
        Path, Parameter(name="input", help="Markdown source file")
    ],
    output_path: typ.Annotated[
        Path, Parameter(name="output", help="HTML file to write")
    ],
    *,
    watch: typ.Annotated[
        bool,
        Parameter(
            name=["--watch", "-w"], help="Serve a live preview and rebuild on change"
        ),
    ] = False,
    config: typ.Annotated[
        Path | None, Parameter(help="Path to an mdlive.yaml settings file")
    ] = None,
    css: typ.Annotated[
        Path | None, Parameter(help="Stylesheet to use instead of the default")
    ] = None,
    title: typ.Annotated[
        str | None, Parameter(help="Page title (defaults to the input file name)")
    ] = None,
    host: typ.Annotated[
        str | None, Parameter(help="Interface for the live-reload server")
    ] = None,
    port: typ.Annotated[
        int | None, Parameter(help="Port for the live-reload server")
    ] = None,
    highlight: typ.Annotated[
        bool | None, Parameter(help="Highlight fenced code with Pygments")
    ] = None,
    open_browser: typ.Annotated[
        bool, Parameter(name=["--open", "-o"], help="Open the preview in a browser")
    ] = False,
    verbose: typ.Annotated[
        bool, Parameter(name=["--verbose", "-v"], help="Log debug output")
    ] = False,
) -> None:
    """Convert ``input_path`` into ``output_path``.

    Parameters
    ----------
    input_path : Path
        Markdown file to read.
    output_path : Path
        HTML file to write; parent directories are created.
    watch : bool, optional
        Keep running, rebuild on change and serve live reloads.
    config : Path or None, optional
        Settings file; ``mdlive.yaml`` in the working directory is used when
        present and no path is given.
    css, title, host, port, highlight : optional
        Overrides for the corresponding settings.
    open_browser : bool, optional
        Open the live preview in the default browser (watch mode only).
    verbose : bool, optional
        Enable debug logging.

    Returns
    -------
    None
        Writes the output file and prints its path; in watch mode blocks until
        interrupted.

    Raises
    ------
    ConfigError
        If the settings are invalid.
    ConversionError
        If the input cannot be read or the output cannot be written.
    ServiceError
        If the live-reload server cannot start.
    """
    configure_logging(verbose=verbose)
    converter_config = load_config(
        input_path,
        output_path,
        config_path=config,
        watch=watch,
        css_path=css,
        title=title,
        host=host,
        port=port,
        highlight_code=highlight,
        open_browser=True if open_browser else None,
    )
    if not converter_config.watch:
        written = DocumentConverter(converter_config).run()
        print(f"wrote {_format_path(written)}")
        return

    service = LiveReloadService(converter_config)
    _serve(service, open_browser=converter_config.server.open_browser)


def main() -> None:
    """Invoke the Cyclopts application that powers the ``mdlive`` command.

    Configuration, conversion and startup errors are logged and turned into
    exit status ``1``.
    """
    try:
        app()
    except (ConfigError, ConversionError, ServiceError) as exc:
        logger.error("{}", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
