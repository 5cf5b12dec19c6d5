"""Abstract base for all cache adapters."""

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_TTL_SEC = 3600


@dataclass
class CacheEntry:
    value: Any
    expiry: float | None           # epoch seconds, None = never expires
    created: float = field(default_factory=lambda: time.time())

    def is_expired(self, now: float) -> bool:
        return self.expiry is not None and self.expiry < now


def expiry_for(ttl_seconds: int | float | None, default_ttl: int | float) -> float | None:
    """Absolute expiry for a TTL; a TTL of zero or less never expires."""
    effective = default_ttl if ttl_seconds is None else ttl_seconds
    if effective <= 0:
        return None
    return time.time() + effective


class CacheAdapter(ABC):
    """Uniform async key/value capability shared by every cache backend."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the stored value, or None when absent or expired."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Store a value. ``ttl_seconds=None`` uses the adapter default."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def clear(self) -> None:
        ...

    def close(self) -> None:
        """Release background resources. Safe to call more than once."""


class PeriodicSweeper:
    """Daemon thread that calls ``task`` every ``interval`` seconds until stopped."""

    def __init__(self, task: Callable[[], None], interval: float, name: str) -> None:
        self._task = task
        self._interval = interval
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def start(self) -> None:
        if self._interval > 0:
            self._thread.start()

    def stop(self) -> None:
        self._stopped.set()

    def _run(self) -> None:
        while not self._stopped.wait(self._interval):
            try:
                self._task()
            except Exception:
                logger.exception("Cache sweep %s failed", self._thread.name)
