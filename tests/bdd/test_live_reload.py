"""Behaviour tests for the live preview.

``live_reload.feature`` starts a :class:`~mdlive.live.LiveReloadService` on an
ephemeral port, edits the watched file and checks that browsers waiting on the
``/reload`` channel are told to reload and then see the new content.
"""

from __future__ import annotations

import os
import threading
import time
import typing as typ
from pathlib import Path

import pytest
import requests
from bs4 import BeautifulSoup
from pytest_bdd import given, parsers, scenarios, then, when

from mdlive.config import ConverterConfig, RenderConfig, ServerConfig
from mdlive.live import LiveReloadService

if typ.TYPE_CHECKING:
    import collections.abc as cabc

FEATURE_FILE = Path(__file__).resolve().parents[2] / "features" / "live_reload.feature"
scenarios(FEATURE_FILE)

TIMEOUT = 10


@pytest.fixture
def scenario_state() -> cabc.Iterator[dict[str, typ.Any]]:
    """Share scenario state and close any service the scenario started."""
    state: dict[str, typ.Any] = {}
    yield state
    service = state.get("service")
    if service is not None:
        service.close()
    listener = state.get("listener")
    if listener is not None:
        listener.join(TIMEOUT)


def _service(scenario_state: dict[str, typ.Any]) -> LiveReloadService:
    service = scenario_state["service"]
    assert isinstance(service, LiveReloadService)
    return service


def _heading(html: str) -> str | None:
    heading = BeautifulSoup(html, "html.parser").find("h1")
    return None if heading is None else heading.get_text()


@given(parsers.parse('a live preview of a Markdown file containing "{text}"'))
def given_live_preview(
    text: str, tmp_path: Path, scenario_state: dict[str, typ.Any]
) -> None:
    source = tmp_path / "doc.md"
    source.write_text(text + "\n", encoding="utf-8")
    config = ConverterConfig(
        input_path=source,
        output_path=tmp_path / "doc.html",
        render=RenderConfig(title="doc.md", css=""),
        server=ServerConfig(host="127.0.0.1", port=0, poll_interval=0.02),
        watch=True,
    )
    service = LiveReloadService(config)
    scenario_state["service"] = service
    scenario_state["source"] = source
    scenario_state["output"] = config.output_path
    service.start()


@given(parsers.parse("a browser waiting for a reload of version {version:d}"))
def given_waiting_browser(version: int, scenario_state: dict[str, typ.Any]) -> None:
    url = f"{_service(scenario_state).url}reload?version={version}"
    responses: list[requests.Response] = []
    listener = threading.Thread(
        target=lambda: responses.append(requests.get(url, timeout=TIMEOUT))
    )
    listener.start()
    scenario_state["listener"] = listener
    scenario_state["responses"] = responses


@when(parsers.parse('the file is changed to "{text}"'))
def when_file_changed(text: str, scenario_state: dict[str, typ.Any]) -> None:
    source = scenario_state["source"]
    staged = source.with_suffix(".tmp")
    staged.write_text(text + "\n", encoding="utf-8")
    stat = source.stat()
    os.utime(staged, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))
    staged.replace(source)


@when(parsers.parse("the render version reaches {version:d}"))
def when_version_reaches(version: int, scenario_state: dict[str, typ.Any]) -> None:
    cache = _service(scenario_state).cache
    deadline = time.monotonic() + TIMEOUT
    while cache.snapshot().version < version and time.monotonic() < deadline:
        time.sleep(0.02)
    assert cache.snapshot().version == version


@then(parsers.parse("the browser is told to reload version {version:d}"))
def then_browser_reloads(version: int, scenario_state: dict[str, typ.Any]) -> None:
    scenario_state["listener"].join(TIMEOUT)
    responses = scenario_state["responses"]
    assert responses, "the reload channel never answered"
    assert f"data: {version}" in responses[0].text


@then(
    parsers.parse(
        "a browser asking about version {seen:d} is told to reload version {version:d}"
    )
)
def then_stale_browser_reloads(
    seen: int, version: int, scenario_state: dict[str, typ.Any]
) -> None:
    url = f"{_service(scenario_state).url}reload?version={seen}"
    response = requests.get(url, timeout=TIMEOUT)
    assert f"data: {version}" in response.text


@then(parsers.parse('the served page shows a level 1 heading "{text}"'))
def then_served_heading(text: str, scenario_state: dict[str, typ.Any]) -> None:
    response = requests.get(_service(scenario_state).url, timeout=TIMEOUT)
    assert _heading(response.text) == text


@then(parsers.parse('the output file shows a level 1 heading "{text}"'))
def then_output_heading(text: str, scenario_state: dict[str, typ.Any]) -> None:
    output = scenario_state["output"]
    assert _heading(output.read_text(encoding="utf-8")) == text
