"""In-memory cache adapter with TTL expiry and insertion-order eviction."""

import logging
import threading
import time
from typing import Any

from multiagent_consensus.cache.base import (
    DEFAULT_TTL_SEC,
    CacheAdapter,
    CacheEntry,
    PeriodicSweeper,
    expiry_for,
)

logger = logging.getLogger(__name__)

_SWEEP_INTERVAL_SEC = 60.0


class MemoryCacheAdapter(CacheAdapter):
    """Dict-backed cache.

    When ``max_size`` is exceeded the oldest *inserted* entry is evicted.
    Overwriting an existing key keeps its original position, so this is FIFO
    eviction rather than LRU. The expiry sweep runs on its own thread, hence
    the lock around every read-check-evict-insert sequence.
    """

    def __init__(
        self,
        max_size: int = 1000,
        default_ttl: int = DEFAULT_TTL_SEC,
        sweep_interval: float = _SWEEP_INTERVAL_SEC,
    ) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._max_size = max_size
        self._default_ttl = default_ttl
        self._sweeper = PeriodicSweeper(self.purge_expired, sweep_interval, "memory-cache-sweep")
        self._sweeper.start()

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    async def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(time.time()):
                del self._entries[key]
                return None
            return entry.value

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        entry = CacheEntry(value=value, expiry=expiry_for(ttl_seconds, self._default_ttl))
        with self._lock:
            self._entries[key] = entry
            if self._max_size > 0 and len(self._entries) > self._max_size:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                logger.debug("Evicted oldest cache entry %s", oldest)

    async def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    async def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        now = time.time()
        with self._lock:
            expired = [k for k, e in self._entries.items() if e.is_expired(now)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("Purged %d expired cache entries", len(expired))
        return len(expired)

    def close(self) -> None:
        self._sweeper.stop()
