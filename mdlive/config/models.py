"""Typed dataclasses describing mdlive configuration structures."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path  # noqa: TC003 - used for runtime type metadata

from mdlive._constants import (
    DEFAULT_HOST,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_PORT,
    DEFAULT_PYGMENTS_STYLE,
    DEFAULT_RELOAD_TIMEOUT,
)


class ConfigError(ValueError):
    """Raised when the configuration file or overrides are invalid."""


@dc.dataclass(slots=True)
class ServerConfig:
    """Settings for the live-reload HTTP server and file watcher."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    reload_timeout: float = DEFAULT_RELOAD_TIMEOUT
    open_browser: bool = False

    @property
    def url(self) -> str:
        """Return the base URL browsers should open."""
        return f"http://{self.host}:{self.port}/"


@dc.dataclass(slots=True)
class RenderConfig:
    """Presentation settings applied to every rendered page.

    Attributes
    ----------
    title : str
        Page ``<title>``.
    css : str
        Stylesheet content, either the packaged default or an override.
    highlight_code : bool
        Highlight fenced code with Pygments.
    pygments_style : str
        Pygments style used when highlighting.
    """

    title: str
    css: str
    highlight_code: bool = False
    pygments_style: str = DEFAULT_PYGMENTS_STYLE


@dc.dataclass(slots=True)
class ConverterConfig:
    """A fully resolved conversion request."""

    input_path: Path
    output_path: Path
    render: RenderConfig
    server: ServerConfig = dc.field(default_factory=ServerConfig)
    watch: bool = False


__all__ = ["ConfigError", "ConverterConfig", "RenderConfig", "ServerConfig"]
