"""Shared types used by the page generation pipeline."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path  # noqa: TC003 - used for runtime type metadata


class ConversionError(RuntimeError):
    """Raised when the Markdown source cannot be read or the output written.

    Attributes
    ----------
    path : Path
        File that could not be accessed.
    """

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(message)
        self.path = path


@dc.dataclass(slots=True)
class PageContext:
    """Values passed to the page shell template.

    Attributes
    ----------
    title : str
        Text of the ``<title>`` element.
    body_html : str
        Rendered document body, inserted without escaping.
    css : str
        Inline stylesheet; ignored when ``css_href`` is set.
    css_href : str or None
        URL of a linked stylesheet, used by the live server.
    version : int or None
        Render version the page was built from. When set, the page carries the
        reload script armed with this version.
    reload_url : str
        Push-channel URL polled by the reload script.
    """

    title: str
    body_html: str
    css: str = ""
    css_href: str | None = None
    version: int | None = None
    reload_url: str = "/reload"


__all__ = ["ConversionError", "PageContext"]
