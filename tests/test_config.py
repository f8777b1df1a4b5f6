"""Tests for YAML settings loading and CLI override precedence."""

from __future__ import annotations

import typing as typ

import pytest

from mdlive._constants import DEFAULT_PORT, DEFAULT_PYGMENTS_STYLE
from mdlive.config import ConfigError, load_config, load_settings
from mdlive.config.helpers import DEFAULT_STYLESHEET

if typ.TYPE_CHECKING:
    from pathlib import Path


def _write(path: Path, text: str) -> Path:
    path.write_text(text.strip() + "\n", encoding="utf-8")
    return path


@pytest.fixture
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in an empty directory so no stray ``mdlive.yaml`` is picked up."""
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return workdir


def test_defaults_without_settings_file(isolated_cwd: Path) -> None:
    config = load_config(isolated_cwd / "notes.md", isolated_cwd / "notes.html")

    assert config.render.title == "notes.md"
    assert config.render.css == DEFAULT_STYLESHEET.read_text(encoding="utf-8")
    assert config.render.highlight_code is False
    assert config.render.pygments_style == DEFAULT_PYGMENTS_STYLE
    assert config.server.port == DEFAULT_PORT
    assert config.server.url == f"http://127.0.0.1:{DEFAULT_PORT}/"
    assert config.watch is False


def test_settings_file_values_are_applied(tmp_path: Path, isolated_cwd: Path) -> None:
    _write(tmp_path / "theme.css", "h1 { color: teal; }")
    settings = _write(
        tmp_path / "custom.yaml",
        """
title: My Notes
css: theme.css
highlight: true
pygments_style: friendly
server:
  host: 0.0.0.0
  port: 9000
  poll_interval: 0.5
  reload_timeout: 10
  open_browser: true
""",
    )

    config = load_config(
        isolated_cwd / "a.md", isolated_cwd / "a.html", config_path=settings
    )

    assert config.render.title == "My Notes"
    assert config.render.css == "h1 { color: teal; }\n"
    assert config.render.highlight_code is True
    assert config.render.pygments_style == "friendly"
    assert config.server.host == "0.0.0.0"
    assert config.server.port == 9000
    assert config.server.poll_interval == 0.5
    assert config.server.reload_timeout == 10.0
    assert config.server.open_browser is True


def test_cli_overrides_win(tmp_path: Path, isolated_cwd: Path) -> None:
    _write(isolated_cwd / "mdlive.yaml", "title: From file\nserver:\n  port: 9000")
    css = _write(tmp_path / "cli.css", "p {}")

    config = load_config(
        isolated_cwd / "a.md",
        isolated_cwd / "a.html",
        watch=True,
        css_path=css,
        title="From CLI",
        host="localhost",
        port=8123,
        highlight_code=True,
    )

    assert config.render.title == "From CLI"
    assert config.render.css == "p {}\n"
    assert config.render.highlight_code is True
    assert config.server.host == "localhost"
    assert config.server.port == 8123
    assert config.watch is True


def test_default_settings_file_is_discovered(isolated_cwd: Path) -> None:
    _write(isolated_cwd / "mdlive.yaml", "title: Discovered")
    config = load_config(isolated_cwd / "a.md", isolated_cwd / "a.html")
    assert config.render.title == "Discovered"


def test_empty_settings_file_is_allowed(tmp_path: Path) -> None:
    settings = tmp_path / "empty.yaml"
    settings.write_text("", encoding="utf-8")
    assert load_settings(settings) == {}


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("- a\n- b", "must be a mapping"),
        ("colour: red", "Unknown configuration keys: colour"),
        ("server:\n  bind: x", "Unknown server configuration keys: bind"),
        ("server: 8080", "'server' must be a mapping"),
        ("highlight: 'yes'", "'highlight' must be true or false"),
        ("server:\n  port: 70000", "'port' must be between 1 and 65535"),
        ("server:\n  port: http", "'port' must be an integer"),
        ("server:\n  poll_interval: 0", "'poll_interval' must be greater than zero"),
        ("server:\n  reload_timeout: [1]", "'reload_timeout' must be a number"),
        ("title: [unclosed", "not valid YAML"),
    ],
)
def test_invalid_settings_raise_config_error(
    tmp_path: Path, isolated_cwd: Path, content: str, message: str
) -> None:
    settings = _write(tmp_path / "bad.yaml", content)
    with pytest.raises(ConfigError, match=message):
        load_config(
            isolated_cwd / "a.md", isolated_cwd / "a.html", config_path=settings
        )


def test_missing_settings_file(tmp_path: Path, isolated_cwd: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_config(
            isolated_cwd / "a.md",
            isolated_cwd / "a.html",
            config_path=tmp_path / "nope.yaml",
        )


def test_missing_stylesheet(tmp_path: Path, isolated_cwd: Path) -> None:
    with pytest.raises(ConfigError, match="Unable to read stylesheet"):
        load_config(
            isolated_cwd / "a.md",
            isolated_cwd / "a.html",
            css_path=tmp_path / "missing.css",
        )


def test_invalid_port_override(isolated_cwd: Path) -> None:
    with pytest.raises(ConfigError, match="'port' must be between"):
        load_config(isolated_cwd / "a.md", isolated_cwd / "a.html", port=0)
