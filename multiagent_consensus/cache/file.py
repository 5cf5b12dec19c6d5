"""File-backed cache adapter: one JSON file per entry, atomic writes."""

import asyncio
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any

from multiagent_consensus.cache.base import (
    DEFAULT_TTL_SEC,
    CacheAdapter,
    PeriodicSweeper,
    expiry_for,
)
from multiagent_consensus.cache.keys import hash_key

logger = logging.getLogger(__name__)

_SWEEP_INTERVAL_SEC = 3600.0
_DEFAULT_MAX_AGE_SEC = 86400


class FileCacheAdapter(CacheAdapter):
    """Stores entries as ``<md5(key)>.json`` under ``cache_dir``.

    Every filesystem error is logged and treated as a cache miss (or a
    no-op for writes); nothing propagates to the caller.
    """

    def __init__(
        self,
        cache_dir: Path | str = ".cache",
        default_ttl: int = DEFAULT_TTL_SEC,
        max_age: int = _DEFAULT_MAX_AGE_SEC,
        create_dir: bool = True,
        sweep_interval: float = _SWEEP_INTERVAL_SEC,
    ) -> None:
        self._dir = Path(cache_dir)
        self._default_ttl = default_ttl
        self._max_age = max_age
        self._ensure_dir(create_dir)
        self._sweeper = PeriodicSweeper(self.cleanup_expired, sweep_interval, "file-cache-sweep")
        self._sweeper.start()

    @property
    def cache_dir(self) -> Path:
        return self._dir

    def _ensure_dir(self, create: bool) -> None:
        try:
            if create:
                self._dir.mkdir(parents=True, exist_ok=True)
            elif not self._dir.is_dir():
                logger.error("Cache directory does not exist: %s", self._dir)
        except OSError as exc:
            logger.error("Error ensuring cache directory %s exists: %s", self._dir, exc)

    def _path_for(self, key: str) -> Path:
        return self._dir / f"{hash_key(key)}.json"

    # ------------------------------------------------------------------
    # Blocking helpers (run in a worker thread)
    # ------------------------------------------------------------------

    def _read(self, key: str) -> Any | None:
        path = self._path_for(key)
        try:
            if not path.exists():
                return None
            entry = json.loads(path.read_text(encoding="utf-8"))
            expiry = entry.get("expiry")
            if expiry is not None and expiry < time.time():
                path.unlink(missing_ok=True)
                return None
            return entry.get("value")
        except (OSError, ValueError, AttributeError, TypeError) as exc:
            logger.warning("Error reading file cache entry %s: %s", path.name, exc)
            return None

    def _write(self, key: str, value: Any, ttl_seconds: int | None) -> None:
        path = self._path_for(key)
        entry = {
            "value": value,
            "expiry": expiry_for(ttl_seconds, self._default_ttl),
            "created": time.time(),
        }
        tmp_name: str | None = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self._dir, prefix=path.stem, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(entry, f)
            os.replace(tmp_name, path)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Error storing file cache entry %s: %s", path.name, exc)
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

    def _remove(self, key: str) -> None:
        try:
            self._path_for(key).unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Error deleting file cache entry: %s", exc)

    def _remove_all(self) -> None:
        try:
            if not self._dir.is_dir():
                return
            for path in self._dir.iterdir():
                if path.suffix in (".json", ".tmp"):
                    path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Error clearing file cache %s: %s", self._dir, exc)

    def cleanup_expired(self) -> int:
        """Delete expired files older than ``max_age`` and unreadable files.

        Returns the number of files removed.
        """
        removed = 0
        try:
            if not self._dir.is_dir():
                return 0
            paths = list(self._dir.glob("*.json"))
        except OSError as exc:
            logger.warning("Error during file cache cleanup: %s", exc)
            return 0

        now = time.time()
        for path in paths:
            try:
                age = now - path.stat().st_mtime
                entry = json.loads(path.read_text(encoding="utf-8"))
                expiry = entry["expiry"]
                if expiry is not None and expiry < now and age > self._max_age:
                    path.unlink(missing_ok=True)
                    removed += 1
            except FileNotFoundError:
                continue
            except (OSError, ValueError, KeyError, TypeError) as exc:
                logger.warning("Corrupt cache file %s, deleting it: %s", path.name, exc)
                try:
                    path.unlink(missing_ok=True)
                    removed += 1
                except OSError as unlink_exc:
                    logger.error("Failed to delete corrupt cache file %s: %s", path.name, unlink_exc)
        return removed

    # ------------------------------------------------------------------
    # CacheAdapter API
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        await asyncio.to_thread(self._write, key, value, ttl_seconds)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._remove, key)

    async def clear(self) -> None:
        await asyncio.to_thread(self._remove_all)

    def close(self) -> None:
        self._sweeper.stop()
