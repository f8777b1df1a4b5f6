"""Versioned, thread-safe holder for the most recent render.

:class:`RenderCache` is the only state shared between the file watcher and the
HTTP server threads. Entries are immutable and replaced wholesale under a
condition variable, so readers either see the previous entry or the new one
and never a mix. Rendering itself always happens outside the lock.

Example
-------
>>> from mdlive.live.cache import RenderCache
>>> cache = RenderCache()
>>> cache.publish("<p>hi</p>").version
1
>>> cache.read()
('<p>hi</p>', 1)
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import threading


@dc.dataclass(frozen=True, slots=True)
class CacheEntry:
    """A published render.

    Attributes
    ----------
    html : str
        Rendered document body.
    version : int
        Generation number; ``0`` means nothing has been published yet.
    generated_at : datetime
        UTC timestamp of the publish.
    """

    html: str
    version: int
    generated_at: dt.datetime


class RenderCache:
    """Hold the latest rendered HTML and a monotonically increasing version."""

    def __init__(self) -> None:
        self._condition = threading.Condition()
        self._entry = CacheEntry(
            html="", version=0, generated_at=dt.datetime.now(dt.UTC)
        )
        self._closed = False

    @property
    def closed(self) -> bool:
        """Return ``True`` once :meth:`close` has been called."""
        with self._condition:
            return self._closed

    def publish(self, html: str) -> CacheEntry:
        """Replace the current entry with ``html`` and bump the version.

        Waiters blocked in :meth:`wait_for_version` are woken.
        """
        with self._condition:
            entry = CacheEntry(
                html=html,
                version=self._entry.version + 1,
                generated_at=dt.datetime.now(dt.UTC),
            )
            self._entry = entry
            self._condition.notify_all()
        return entry

    def snapshot(self) -> CacheEntry:
        """Return the current entry."""
        with self._condition:
            return self._entry

    def read(self) -> tuple[str, int]:
        """Return ``(html, version)`` of the current entry."""
        entry = self.snapshot()
        return entry.html, entry.version

    def wait_for_version(
        self, seen: int, timeout: float | None = None
    ) -> CacheEntry | None:
        """Block until the version advances past ``seen``.

        Parameters
        ----------
        seen : int
            Version the caller already has.
        timeout : float or None, optional
            Maximum number of seconds to wait; ``None`` waits indefinitely.

        Returns
        -------
        CacheEntry or None
            The newer entry, or ``None`` if the timeout elapsed or the cache is
            closed.
        """
        with self._condition:
            self._condition.wait_for(
                lambda: self._closed or self._entry.version > seen, timeout
            )
            if self._closed or self._entry.version <= seen:
                return None
            return self._entry

    def close(self) -> None:
        """Mark the cache closed and release every waiter."""
        with self._condition:
            self._closed = True
            self._condition.notify_all()


__all__ = ["CacheEntry", "RenderCache"]
