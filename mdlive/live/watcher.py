"""Poll a Markdown source file and report content changes.

Editors save files in many ways (truncate-and-write, rename-over, several
writes in quick succession), so the watcher polls instead of relying on
filesystem events. Every tick compares the modification time, the size and a
BLAKE2 digest of the content with the previous snapshot; a change in any of
them hands the new text to the callback. Read errors are logged and retried on
the next tick.
"""

from __future__ import annotations

import dataclasses as dc
import hashlib
import threading
import typing as typ

from loguru import logger

from mdlive._constants import DEFAULT_POLL_INTERVAL

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path


@dc.dataclass(frozen=True, slots=True)
class FileSnapshot:
    """Identity of one observed version of the watched file."""

    mtime_ns: int
    size: int
    digest: str


def _digest(data: bytes) -> str:
    return hashlib.blake2b(data, digest_size=16).hexdigest()


class FileWatcher:
    """Invoke ``on_change`` with the new text whenever ``path`` changes."""

    def __init__(
        self,
        path: Path,
        on_change: cabc.Callable[[str], object],
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        """Create a watcher; polling starts with :meth:`start`.

        Parameters
        ----------
        path : Path
            File to observe.
        on_change : Callable[[str], object]
            Called with the decoded file content after each detected change.
        poll_interval : float, optional
            Seconds between ticks of the background thread.
        """
        self.path = path
        self.on_change = on_change
        self.poll_interval = poll_interval
        self._snapshot: FileSnapshot | None = None
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def snapshot(self) -> FileSnapshot | None:
        """Return the last successfully observed snapshot."""
        return self._snapshot

    @property
    def running(self) -> bool:
        """Return ``True`` while the polling thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def _observe(self) -> tuple[FileSnapshot, str] | None:
        """Read the file once; return ``None`` when it is unavailable right now."""
        try:
            stat = self.path.stat()
            data = self.path.read_bytes()
            text = data.decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping poll of {}: {}", self.path, exc)
            return None
        return FileSnapshot(stat.st_mtime_ns, len(data), _digest(data)), text

    def prime(self) -> str | None:
        """Record the current file state without invoking the callback.

        Returns
        -------
        str or None
            The content the snapshot was taken from, so the caller can render
            exactly what was observed; ``None`` when the file is unreadable.
        """
        observed = self._observe()
        if observed is None:
            return None
        self._snapshot, text = observed
        return text

    def poll(self) -> bool:
        """Run a single tick.

        Returns
        -------
        bool
            ``True`` when a change was detected and the callback ran.
        """
        observed = self._observe()
        if observed is None:
            return False
        snapshot, text = observed
        if snapshot == self._snapshot:
            return False
        logger.debug("Change detected in {} ({} bytes)", self.path, snapshot.size)
        self._snapshot = snapshot
        try:
            self.on_change(text)
        except Exception:  # noqa: BLE001 - polling outlives handler errors
            logger.exception("Change handler failed for {}", self.path)
        return True

    def start(self) -> None:
        """Start polling on a daemon thread; calling twice is a no-op."""
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="mdlive-watcher", daemon=True
        )
        self._thread.start()
        logger.debug("Watching {} every {}s", self.path, self.poll_interval)

    def stop(self, timeout: float | None = None) -> None:
        """Stop the polling thread and wait for it to finish."""
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _run(self) -> None:
        while not self._stop.wait(self.poll_interval):
            self.poll()


__all__ = ["FileSnapshot", "FileWatcher"]
