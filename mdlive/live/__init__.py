"""Watch-mode components: render cache, file watcher, reload server, service."""

from .cache import CacheEntry, RenderCache
from .server import ReloadServer, VersionPayload
from .service import LiveReloadService, ServiceError
from .watcher import FileSnapshot, FileWatcher

__all__ = [
    "CacheEntry",
    "FileSnapshot",
    "FileWatcher",
    "LiveReloadService",
    "ReloadServer",
    "RenderCache",
    "ServiceError",
    "VersionPayload",
]
