"""Resolve mdlive settings from defaults, an optional YAML file, and CLI flags.

The subpackage reads ``mdlive.yaml`` (or an explicit ``--config`` path), merges
it with command-line overrides, loads the stylesheet, and produces typed
dataclasses (:class:`ConverterConfig`, :class:`RenderConfig`,
:class:`ServerConfig`) consumed by the converter and the live-reload service.

Examples
--------
>>> from pathlib import Path
>>> from mdlive.config import load_config
>>> config = load_config(Path("notes.md"), Path("notes.html"))  # doctest: +SKIP
>>> config.render.title  # doctest: +SKIP
'notes.md'
"""

from .loader import load_config, load_settings
from .models import ConfigError, ConverterConfig, RenderConfig, ServerConfig

__all__ = [
    "ConfigError",
    "ConverterConfig",
    "RenderConfig",
    "ServerConfig",
    "load_config",
    "load_settings",
]
