"""Embedded HTTP server that serves the latest render and pushes reloads.

Routes
------
``GET /``
    The cached body wrapped in the page shell, with a linked stylesheet and a
    reload script armed with the served version.
``GET /style.css``
    The current stylesheet.
``GET /reload?version=N``
    Server-Sent Events channel. The response blocks until the render cache
    moves past version ``N``, sends ``data: <version>`` and closes. A version
    ``N`` ahead of the cache comes from a page served before a restart and is
    answered with the current version straight away. After
    ``reload_timeout`` seconds without a change it sends a comment and closes;
    the browser's ``EventSource`` reconnects with the same URL.
``GET /version``
    JSON ``{"version": ..., "generated_at": ...}``.

Every connection is handled on its own thread, so a stalled or vanished
browser only affects its own request.
"""

from __future__ import annotations

import datetime as dt  # noqa: TC003 - used for runtime type metadata
import threading
import typing as typ
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, urlsplit

import msgspec
from loguru import logger

from mdlive._constants import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_RELOAD_TIMEOUT,
    INDEX_PATHS,
    RELOAD_PATH,
    SSE_RETRY_MS,
    STYLESHEET_PATH,
    VERSION_PATH,
)

if typ.TYPE_CHECKING:
    from mdlive.generator import PageGenerator
    from mdlive.live.cache import RenderCache

HTML_CONTENT_TYPE = "text/html; charset=utf-8"
CSS_CONTENT_TYPE = "text/css; charset=utf-8"
JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"
EVENT_STREAM_CONTENT_TYPE = "text/event-stream"


class VersionPayload(msgspec.Struct, frozen=True):
    """Body of the ``/version`` endpoint."""

    version: int
    generated_at: dt.datetime


class ReloadRequestHandler(BaseHTTPRequestHandler):
    """Dispatch requests for the page, the stylesheet and the push channel."""

    server: _ReloadHTTPServer
    server_version = "mdlive"

    def do_GET(self) -> None:  # noqa: N802 - http.server API
        """Route a GET request; client disconnects end only this request."""
        parsed = urlsplit(self.path)
        try:
            if parsed.path in INDEX_PATHS:
                self._send_page()
            elif parsed.path == STYLESHEET_PATH:
                self._send_stylesheet()
            elif parsed.path == RELOAD_PATH:
                self._stream_reload(parse_qs(parsed.query))
            elif parsed.path == VERSION_PATH:
                self._send_version()
            else:
                self._send(HTTPStatus.NOT_FOUND, b"Not found\n", TEXT_CONTENT_TYPE)
        except ConnectionError as exc:
            logger.debug("Client {} went away: {}", self.address_string(), exc)

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        """Send request logs to loguru instead of stderr."""
        logger.debug("{} - {}", self.address_string(), format % args)

    @property
    def reload_server(self) -> ReloadServer:
        return self.server.reload_server

    def _send(self, status: HTTPStatus, body: bytes, content_type: str) -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Cache-Control", "no-store")
        self.end_headers()
        self.wfile.write(body)

    def _send_page(self) -> None:
        html, version = self.reload_server.cache.read()
        page = self.reload_server.generator.live_page(html, version)
        self._send(HTTPStatus.OK, page.encode("utf-8"), HTML_CONTENT_TYPE)

    def _send_stylesheet(self) -> None:
        css = self.reload_server.generator.stylesheet
        self._send(HTTPStatus.OK, css.encode("utf-8"), CSS_CONTENT_TYPE)

    def _send_version(self) -> None:
        entry = self.reload_server.cache.snapshot()
        payload = VersionPayload(
            version=entry.version, generated_at=entry.generated_at
        )
        self._send(HTTPStatus.OK, msgspec.json.encode(payload), JSON_CONTENT_TYPE)

    def _seen_version(self, query: dict[str, list[str]]) -> int:
        """Return the client's version, defaulting to the current one."""
        values = query.get("version")
        if values:
            try:
                return int(values[0])
            except ValueError:
                logger.debug("Ignoring invalid reload version {!r}", values[0])
        return self.reload_server.cache.snapshot().version

    def _stream_reload(self, query: dict[str, list[str]]) -> None:
        seen = self._seen_version(query)
        self.send_response(HTTPStatus.OK)
        self.send_header("Content-Type", EVENT_STREAM_CONTENT_TYPE)
        self.send_header("Cache-Control", "no-cache")
        self.send_header("Connection", "close")
        self.end_headers()
        self.wfile.write(f"retry: {SSE_RETRY_MS}\n\n".encode())
        self.wfile.flush()

        cache = self.reload_server.cache
        current = cache.snapshot()
        if seen > current.version:
            # page from an earlier run of the server
            entry = current
        else:
            entry = cache.wait_for_version(seen, self.reload_server.reload_timeout)
        if entry is None:
            message = ": no change\n\n"
        else:
            logger.debug(
                "Signalling reload to {} (v{})", self.address_string(), entry.version
            )
            message = f"data: {entry.version}\n\n"
        self.wfile.write(message.encode())
        self.wfile.flush()


class _ReloadHTTPServer(ThreadingHTTPServer):
    """Threaded HTTP server that does not wait for push-channel threads."""

    block_on_close = False

    def __init__(self, address: tuple[str, int], reload_server: ReloadServer) -> None:
        self.reload_server = reload_server
        super().__init__(address, ReloadRequestHandler)

    def handle_error(self, request: object, client_address: tuple[str, int]) -> None:
        logger.opt(exception=True).warning("Error while serving {}", client_address)


class ReloadServer:
    """Serve the render cache over HTTP and notify browsers of new versions."""

    def __init__(
        self,
        cache: RenderCache,
        generator: PageGenerator,
        *,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        reload_timeout: float = DEFAULT_RELOAD_TIMEOUT,
    ) -> None:
        """Bind the server socket; requests are served after :meth:`start`.

        Parameters
        ----------
        cache : RenderCache
            Source of the served HTML and version.
        generator : PageGenerator
            Wraps cached bodies into pages and provides the stylesheet.
        host : str, optional
            Interface to bind.
        port : int, optional
            TCP port; ``0`` picks a free port (see :attr:`address`).
        reload_timeout : float, optional
            Longest time a push-channel request is held open.

        Raises
        ------
        OSError
            If the address cannot be bound.
        """
        self.cache = cache
        self.generator = generator
        self.reload_timeout = reload_timeout
        self._httpd = _ReloadHTTPServer((host, port), self)
        self._thread: threading.Thread | None = None

    @property
    def address(self) -> tuple[str, int]:
        """Return the bound ``(host, port)``."""
        host, port = self._httpd.server_address[:2]
        return str(host), int(port)

    @property
    def url(self) -> str:
        """Return the base URL of the running server."""
        host, port = self.address
        return f"http://{host}:{port}/"

    def start(self) -> None:
        """Serve requests on a daemon thread; calling twice is a no-op."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._httpd.serve_forever, name="mdlive-server", daemon=True
        )
        self._thread.start()
        logger.info("Reload server listening on {}", self.url)

    def close(self) -> None:
        """Stop serving and release every waiting push channel.

        The render cache is closed so blocked ``/reload`` requests return
        immediately.
        """
        self.cache.close()
        thread, self._thread = self._thread, None
        if thread is not None:
            self._httpd.shutdown()
            thread.join()
        self._httpd.server_close()


__all__ = ["ReloadRequestHandler", "ReloadServer", "VersionPayload"]
