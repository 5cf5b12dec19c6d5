"""Remote key/value cache adapter speaking the Redis REST protocol.

Commands are POSTed as JSON arrays (``["SET", key, value, "EX", 60]``) with a
bearer token, which is what Upstash-style Redis REST endpoints accept.
"""

import json
import logging
import os
from typing import Any

import httpx

from multiagent_consensus.cache.base import DEFAULT_TTL_SEC, CacheAdapter

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "consensus:"
_SCAN_BATCH = 100


class RedisCommandError(Exception):
    """The REST endpoint answered with an ``error`` payload."""


class RedisCacheAdapter(CacheAdapter):
    """Namespaced remote cache. Network failures degrade to miss / no-op."""

    def __init__(
        self,
        url: str | None = None,
        token: str | None = None,
        prefix: str | None = None,
        default_ttl: int = DEFAULT_TTL_SEC,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url or os.environ.get("REDIS_URL", "")
        self._token = token or os.environ.get("REDIS_TOKEN", "")
        if prefix is None:
            prefix = os.environ.get("REDIS_PREFIX", DEFAULT_PREFIX)
        self._prefix = prefix
        self._default_ttl = default_ttl
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def prefix(self) -> str:
        return self._prefix

    def _prefixed(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def _get_client(self) -> httpx.AsyncClient:
        # Connect lazily so that building the adapter never touches the network.
        if self._client is None:
            if not self._url:
                raise RedisCommandError("No Redis URL configured (set REDIS_URL)")
            headers = {"Authorization": f"Bearer {self._token}"} if self._token else {}
            self._client = httpx.AsyncClient(
                base_url=self._url,
                headers=headers,
                timeout=self._timeout,
                transport=self._transport,
            )
            logger.debug("Redis cache client created for %s", self._url)
        return self._client

    async def _command(self, *args: Any) -> Any:
        response = await self._get_client().post("/", json=[str(a) for a in args])
        response.raise_for_status()
        payload = response.json()
        if "error" in payload:
            raise RedisCommandError(payload["error"])
        return payload.get("result")

    async def get(self, key: str) -> Any | None:
        try:
            raw = await self._command("GET", self._prefixed(key))
            return None if raw is None else json.loads(raw)
        except (httpx.HTTPError, RedisCommandError, ValueError) as exc:
            logger.warning("Error retrieving from Redis cache: %s", exc)
            return None

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        effective_ttl = self._default_ttl if ttl_seconds is None else ttl_seconds
        try:
            serialized = json.dumps(value)
            if effective_ttl > 0:
                await self._command("SET", self._prefixed(key), serialized, "EX", int(effective_ttl))
            else:
                await self._command("SET", self._prefixed(key), serialized)
        except (httpx.HTTPError, RedisCommandError, TypeError, ValueError) as exc:
            logger.warning("Error storing in Redis cache: %s", exc)

    async def delete(self, key: str) -> None:
        try:
            await self._command("DEL", self._prefixed(key))
        except (httpx.HTTPError, RedisCommandError, ValueError) as exc:
            logger.warning("Error deleting from Redis cache: %s", exc)

    async def clear(self) -> None:
        """Delete every key under the namespace prefix (SCAN is not atomic)."""
        try:
            cursor = "0"
            keys: list[str] = []
            while True:
                cursor, batch = await self._command(
                    "SCAN", cursor, "MATCH", f"{self._prefix}*", "COUNT", _SCAN_BATCH
                )
                keys.extend(batch)
                if str(cursor) == "0":
                    break
            if keys:
                await self._command("DEL", *keys)
            logger.debug("Cleared %d keys with prefix %s", len(keys), self._prefix)
        except (httpx.HTTPError, RedisCommandError, ValueError, TypeError) as exc:
            logger.warning("Error clearing Redis cache: %s", exc)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
