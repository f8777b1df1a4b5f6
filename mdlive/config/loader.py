"""Load optional YAML settings and merge them with CLI overrides."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from mdlive._constants import DEFAULT_CONFIG_FILENAME, DEFAULT_PYGMENTS_STYLE

from .helpers import (
    _coerce_bool,
    _coerce_port,
    _coerce_positive_float,
    _mapping,
    _optional_str,
    _read_stylesheet,
)
from .models import ConfigError, ConverterConfig, RenderConfig, ServerConfig

SETTINGS_KEYS = frozenset({"title", "css", "highlight", "pygments_style", "server"})
SERVER_KEYS = frozenset(
    {"host", "port", "poll_interval", "reload_timeout", "open_browser"}
)


def load_settings(path: Path) -> dict[str, typ.Any]:
    """Read a YAML settings file into a plain mapping.

    Parameters
    ----------
    path : Path
        Location of the YAML file (for example ``mdlive.yaml``).

    Returns
    -------
    dict[str, Any]
        Top-level settings. An empty document yields an empty mapping.

    Raises
    ------
    ConfigError
        If the file is missing or unreadable, is not valid YAML, is not a
        mapping, or contains keys mdlive does not understand.
    """
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        with path.open("r", encoding="utf-8") as handle:
            loaded = loader.load(handle) or {}
    except FileNotFoundError as exc:
        msg = f"Configuration file '{path}' not found."
        raise ConfigError(msg) from exc
    except OSError as exc:
        msg = f"Unable to read configuration file '{path}': {exc.strerror or exc}"
        raise ConfigError(msg) from exc
    except YAMLError as exc:
        msg = f"Configuration file '{path}' is not valid YAML: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise ConfigError(msg)
    unknown = sorted(set(loaded) - SETTINGS_KEYS)
    if unknown:
        msg = f"Unknown configuration keys: {', '.join(map(str, unknown))}"
        raise ConfigError(msg)
    return dict(loaded)


def _resolve_settings_path(config_path: Path | None) -> Path | None:
    """Return the explicit config path or the default file when it exists."""
    if config_path is not None:
        return config_path
    default = Path(DEFAULT_CONFIG_FILENAME)
    return default if default.is_file() else None


def _build_server_config(
    payload: typ.Mapping[str, typ.Any],
    *,
    host: str | None,
    port: int | None,
    open_browser: bool | None,
) -> ServerConfig:
    """Merge the ``server`` mapping with CLI overrides into a ServerConfig."""
    unknown = sorted(set(payload) - SERVER_KEYS)
    if unknown:
        msg = f"Unknown server configuration keys: {', '.join(map(str, unknown))}"
        raise ConfigError(msg)
    base = ServerConfig()
    resolved_host = host or _optional_str(payload.get("host")) or base.host
    raw_port = port if port is not None else payload.get("port", base.port)
    browser = open_browser
    if browser is None:
        browser = _coerce_bool(
            payload.get("open_browser", base.open_browser), "open_browser"
        )
    return ServerConfig(
        host=resolved_host,
        port=_coerce_port(raw_port),
        poll_interval=_coerce_positive_float(
            payload.get("poll_interval", base.poll_interval), "poll_interval"
        ),
        reload_timeout=_coerce_positive_float(
            payload.get("reload_timeout", base.reload_timeout), "reload_timeout"
        ),
        open_browser=browser,
    )


def load_config(  # noqa: PLR0913 - mirrors the CLI surface
    input_path: Path,
    output_path: Path,
    *,
    config_path: Path | None = None,
    watch: bool = False,
    css_path: Path | None = None,
    title: str | None = None,
    host: str | None = None,
    port: int | None = None,
    highlight_code: bool | None = None,
    open_browser: bool | None = None,
) -> ConverterConfig:
    """Resolve a :class:`ConverterConfig` from defaults, YAML and overrides.

    Values passed as keyword arguments win over the YAML file, which wins over
    built-in defaults. Relative ``css`` paths in the YAML file are resolved
    against the file's directory.

    Parameters
    ----------
    input_path : Path
        Markdown source to convert.
    output_path : Path
        HTML file to write.
    config_path : Path or None, optional
        Explicit settings file. When ``None``, ``mdlive.yaml`` in the working
        directory is used if present.
    watch : bool, optional
        Enable the live-reload service.
    css_path, title, host, port, highlight_code, open_browser : optional
        CLI overrides; ``None`` defers to the settings file.

    Returns
    -------
    ConverterConfig
        Fully populated configuration.

    Raises
    ------
    ConfigError
        If the settings file or any override is invalid, or the stylesheet
        cannot be read.
    """
    settings_path = _resolve_settings_path(config_path)
    settings = load_settings(settings_path) if settings_path else {}
    base_dir = settings_path.parent if settings_path else Path.cwd()

    stylesheet = css_path
    configured_css = _optional_str(settings.get("css"))
    if stylesheet is None and configured_css:
        stylesheet = base_dir / configured_css

    highlight = highlight_code
    if highlight is None:
        highlight = _coerce_bool(settings.get("highlight", False), "highlight")

    render = RenderConfig(
        title=title or _optional_str(settings.get("title")) or input_path.name,
        css=_read_stylesheet(stylesheet),
        highlight_code=highlight,
        pygments_style=_optional_str(settings.get("pygments_style"))
        or DEFAULT_PYGMENTS_STYLE,
    )
    server = _build_server_config(
        _mapping(settings.get("server"), "server"),
        host=host,
        port=port,
        open_browser=open_browser,
    )
    return ConverterConfig(
        input_path=input_path,
        output_path=output_path,
        render=render,
        server=server,
        watch=watch,
    )


__all__ = ["load_config", "load_settings"]
