"""Utility helpers shared by the mdlive configuration loader."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from .models import ConfigError

DEFAULT_STYLESHEET = Path(__file__).resolve().parents[1] / "static" / "style.css"
MAX_PORT = 65535


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _coerce_bool(value: object, key: str) -> bool:
    """Accept YAML booleans only; reject strings such as ``"yes"``."""
    if isinstance(value, bool):
        return value
    msg = f"'{key}' must be true or false, got {value!r}."
    raise ConfigError(msg)


def _coerce_positive_float(value: object, key: str) -> float:
    """Return ``value`` as a float greater than zero."""
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        msg = f"'{key}' must be a number, got {value!r}."
        raise ConfigError(msg)
    try:
        number = float(value)
    except ValueError as exc:
        msg = f"'{key}' must be a number, got {value!r}."
        raise ConfigError(msg) from exc
    if number <= 0:
        msg = f"'{key}' must be greater than zero, got {number}."
        raise ConfigError(msg)
    return number


def _coerce_port(value: object) -> int:
    """Return ``value`` as a TCP port in ``1..65535``."""
    if isinstance(value, bool) or not isinstance(value, int | str):
        msg = f"'port' must be an integer, got {value!r}."
        raise ConfigError(msg)
    try:
        port = int(value)
    except ValueError as exc:
        msg = f"'port' must be an integer, got {value!r}."
        raise ConfigError(msg) from exc
    if not 1 <= port <= MAX_PORT:
        msg = f"'port' must be between 1 and {MAX_PORT}, got {port}."
        raise ConfigError(msg)
    return port


def _read_stylesheet(path: Path | None) -> str:
    """Return the CSS override at ``path`` or the packaged default stylesheet."""
    target = path or DEFAULT_STYLESHEET
    try:
        return target.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Unable to read stylesheet '{target}': {exc.strerror or exc}"
        raise ConfigError(msg) from exc


def _mapping(value: object, key: str) -> typ.Mapping[str, typ.Any]:
    """Return ``value`` when it is a mapping; ``None`` becomes an empty dict."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"'{key}' must be a mapping, got {type(value).__name__}."
        raise ConfigError(msg)
    return value
