"""Tests for the versioned render cache shared by the watcher and the server."""

from __future__ import annotations

import threading

from mdlive.live.cache import RenderCache


def test_initial_entry_is_version_zero() -> None:
    cache = RenderCache()
    assert cache.read() == ("", 0)
    assert not cache.closed


def test_publish_increments_version_by_one() -> None:
    cache = RenderCache()
    versions = [cache.publish(f"<p>{n}</p>").version for n in range(3)]
    assert versions == [1, 2, 3]
    assert cache.read() == ("<p>2</p>", 3)


def test_wait_returns_immediately_when_already_newer() -> None:
    cache = RenderCache()
    cache.publish("a")
    entry = cache.wait_for_version(0, timeout=0.01)
    assert entry is not None
    assert entry.version == 1


def test_wait_times_out_without_change() -> None:
    cache = RenderCache()
    cache.publish("a")
    assert cache.wait_for_version(1, timeout=0.05) is None


def test_waiter_is_woken_by_publish() -> None:
    cache = RenderCache()
    cache.publish("first")
    results: list[int | None] = []
    started = threading.Event()

    def wait() -> None:
        started.set()
        entry = cache.wait_for_version(1, timeout=5)
        results.append(None if entry is None else entry.version)

    thread = threading.Thread(target=wait)
    thread.start()
    started.wait(1)
    cache.publish("second")
    thread.join(5)

    assert results == [2]


def test_close_releases_waiters() -> None:
    cache = RenderCache()
    results: list[object] = []

    thread = threading.Thread(
        target=lambda: results.append(cache.wait_for_version(0, timeout=5))
    )
    thread.start()
    cache.close()
    thread.join(5)

    assert not thread.is_alive()
    assert results == [None]
    assert cache.closed


def test_concurrent_publishers_never_skip_or_repeat_versions() -> None:
    cache = RenderCache()
    seen: list[int] = []
    lock = threading.Lock()

    def publish_many() -> None:
        for _ in range(50):
            entry = cache.publish("x")
            with lock:
                seen.append(entry.version)

    threads = [threading.Thread(target=publish_many) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(seen) == list(range(1, 201))
    assert cache.snapshot().version == 200
