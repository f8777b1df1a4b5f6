"""Own and coordinate the live-reload components for one Markdown file.

:class:`LiveReloadService` is constructed explicitly from a
:class:`~mdlive.config.ConverterConfig` and holds everything watch mode needs:
the render cache, the page generator, the file watcher and the HTTP server.
Nothing is stored at module level, so several services (for example in tests)
can run side by side on different ports.

Example
-------
>>> from pathlib import Path
>>> from mdlive.config import load_config
>>> from mdlive.live import LiveReloadService
>>> config = load_config(Path("notes.md"), Path("notes.html"), watch=True)  # doctest: +SKIP
>>> with LiveReloadService(config) as service:  # doctest: +SKIP
...     print(service.url)
http://127.0.0.1:8080/
"""

from __future__ import annotations

import threading
import typing as typ

from loguru import logger

from mdlive.generator import (
    ConversionError,
    DocumentConverter,
    PageGenerator,
    read_source,
)
from mdlive.live.cache import RenderCache
from mdlive.live.server import ReloadServer
from mdlive.live.watcher import FileWatcher

if typ.TYPE_CHECKING:
    from types import TracebackType

    from mdlive.config import ConverterConfig
    from mdlive.live.cache import CacheEntry


class ServiceError(RuntimeError):
    """Raised when the live-reload service cannot start."""


class LiveReloadService:
    """Render on change, publish to the cache and serve it to browsers."""

    def __init__(
        self,
        config: ConverterConfig,
        *,
        generator: PageGenerator | None = None,
        cache: RenderCache | None = None,
    ) -> None:
        self.config = config
        self.generator = generator or PageGenerator(config.render)
        self.converter = DocumentConverter(config, generator=self.generator)
        self.cache = cache or RenderCache()
        self.watcher = FileWatcher(
            config.input_path,
            self.publish,
            poll_interval=config.server.poll_interval,
        )
        self.server: ReloadServer | None = None
        self._render_lock = threading.Lock()
        self._closed = threading.Event()

    @property
    def url(self) -> str:
        """Return the server URL, or the configured one before :meth:`start`."""
        if self.server is not None:
            return self.server.url
        return self.config.server.url

    def publish(self, markdown_text: str) -> CacheEntry:
        """Render ``markdown_text``, publish it and refresh the output file.

        Renders are serialised so versions follow the order in which changes
        were observed. The output file is written before the cache moves, so a
        browser told to reload never sees a newer page than the file. A failed
        write is logged and the new content is still published.
        """
        with self._render_lock:
            body = self.generator.render_body(markdown_text)
            try:
                self.converter.write(body)
            except ConversionError as exc:
                logger.warning("Keeping stale output file: {}", exc)
            entry = self.cache.publish(body)
        logger.info("Rendered {} (version {})", self.config.input_path, entry.version)
        return entry

    def start(self) -> CacheEntry:
        """Render once, then start the server and the watcher.

        Returns
        -------
        CacheEntry
            The initial cache entry (version ``1`` for a fresh cache).

        Raises
        ------
        ConversionError
            If the input cannot be read or the output cannot be written.
        ServiceError
            If the HTTP server cannot bind its address.
        """
        text = self.watcher.prime()
        if text is None:
            text = read_source(self.config.input_path)
        with self._render_lock:
            body = self.generator.render_body(text)
            self.converter.write(body)
            entry = self.cache.publish(body)

        server_config = self.config.server
        try:
            self.server = ReloadServer(
                self.cache,
                self.generator,
                host=server_config.host,
                port=server_config.port,
                reload_timeout=server_config.reload_timeout,
            )
        except OSError as exc:
            msg = (
                f"Unable to listen on {server_config.host}:{server_config.port}: "
                f"{exc.strerror or exc}"
            )
            raise ServiceError(msg) from exc
        self.server.start()
        self.watcher.start()
        return entry

    def serve_forever(self) -> None:
        """Start if needed and block until :meth:`close` is called."""
        if self.server is None:
            self.start()
        while not self._closed.wait(0.5):
            pass

    def close(self) -> None:
        """Stop the watcher and the server and wake every push channel."""
        self._closed.set()
        self.watcher.stop()
        if self.server is not None:
            self.server.close()
            self.server = None
        else:
            self.cache.close()

    def __enter__(self) -> LiveReloadService:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


__all__ = ["LiveReloadService", "ServiceError"]
