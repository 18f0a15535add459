"""
Process-wide cache for the resolution snapshot.

The snapshot lives under one fixed key ("configuration") inside a namespace
and expires after 30 minutes. Concurrent rebuilds after expiry are allowed:
building is idempotent, so the last writer simply wins.
"""

import threading
import time
from typing import Callable, Optional

from cachetools import TTLCache

from .audit_logger import AuditLogger
from .config import CacheConfig
from .snapshot import ResolutionSnapshot


COMPONENT = "cache"


class SnapshotCache:
    """
    Namespaced TTL cache holding ResolutionSnapshot objects.

    One instance is meant to be shared by all resolvers of a process.
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        logger: Optional[AuditLogger] = None,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the snapshot cache.

        Args:
            config: Namespace, key, TTL and size settings
            logger: Optional audit logger for hit/miss events
            timer: Clock used for expiry (injectable for tests)
        """
        self._config = config or CacheConfig()
        self._logger = logger
        self._storage: TTLCache = TTLCache(
            maxsize=self._config.maxsize,
            ttl=self._config.ttl_seconds,
            timer=timer,
        )
        # TTLCache is not thread-safe on its own
        self._lock = threading.Lock()

    @property
    def config(self) -> CacheConfig:
        return self._config

    def cache_key(self, key: Optional[str] = None) -> str:
        return f"{self._config.namespace}:{key or self._config.key}"

    def load(self, key: Optional[str] = None) -> Optional[ResolutionSnapshot]:
        """Return the cached snapshot, or None when absent or expired."""
        cache_key = self.cache_key(key)
        with self._lock:
            snapshot = self._storage.get(cache_key)
        self._debug("Cache hit" if snapshot is not None else "Cache miss", cache_key)
        return snapshot

    def save(self, snapshot: ResolutionSnapshot, key: Optional[str] = None) -> None:
        """Store a snapshot, replacing whatever is there."""
        cache_key = self.cache_key(key)
        with self._lock:
            self._storage[cache_key] = snapshot
        self._debug("Cache saved", cache_key)

    def remove(self, key: Optional[str] = None) -> None:
        """Drop the cached snapshot so the next access rebuilds it."""
        cache_key = self.cache_key(key)
        with self._lock:
            self._storage.pop(cache_key, None)
        self._debug("Cache removed", cache_key)

    def get_or_build(
        self,
        builder: Callable[[], ResolutionSnapshot],
        key: Optional[str] = None,
    ) -> ResolutionSnapshot:
        """
        Return the cached snapshot or build and store a new one.

        The builder runs outside the lock; errors it raises propagate and
        nothing is cached.
        """
        snapshot = self.load(key)
        if snapshot is None:
            snapshot = builder()
            self.save(snapshot, key)
        return snapshot

    def _debug(self, message: str, cache_key: str) -> None:
        if self._logger:
            self._logger.debug(COMPONENT, message, {"key": cache_key})
