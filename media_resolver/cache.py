# media_resolver/cache.py
import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Protocol, runtime_checkable

import diskcache
import platformdirs

log = logging.getLogger(__name__)

@runtime_checkable
class ResultCache(Protocol):
    """Keyed store for computed results. No expiry is applied by the resolver."""

    def get(self, key: str) -> Optional[Any]: ...

    def put(self, key: str, value: Any) -> None: ...


class MemoryResultCache:
    """Process-lifetime cache shared between threads."""

    def __init__(self):
        self._entries: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = value

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class DiskResultCache:
    """Persistent cache on top of diskcache. Entries never expire."""

    def __init__(self, directory: Optional[Path] = None):
        cache_dir = Path(directory) if directory else Path(platformdirs.user_cache_dir("media_resolver"))
        cache_dir.mkdir(parents=True, exist_ok=True)
        self.directory = cache_dir
        self._cache = diskcache.Cache(str(cache_dir))
        log.info(f"Persistent cache initialized at: {cache_dir}")

    def get(self, key: str) -> Optional[Any]:
        return self._cache.get(key, default=None)

    def put(self, key: str, value: Any) -> None:
        self._cache.set(key, value)

    def close(self) -> None:
        self._cache.close()


class KeyedLock:
    """
    One lock per cache key, so concurrent first lookups of the same key
    perform the underlying work once. Locks are dropped when no thread holds
    or waits for them.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._waiters: Dict[str, int] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._waiters[key] -= 1
                if self._waiters[key] == 0:
                    del self._waiters[key]
                    del self._locks[key]


def create_result_cache(cfg_helper) -> ResultCache:
    """Builds the cache backend selected by the 'cache_backend' setting."""
    backend = str(cfg_helper('cache_backend', 'memory')).lower()
    if backend == 'disk':
        return DiskResultCache(cfg_helper.get_path('cache_directory'))
    log.debug("Using in-memory result cache.")
    return MemoryResultCache()
