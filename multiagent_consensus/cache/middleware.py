"""Response caching around any AIProvider.

``CachingProvider`` keeps the provider interface, so the debate code never
knows whether a response came from the vendor or the cache.
"""

import logging
import time
from dataclasses import asdict
from typing import Any

from config.config_loader import CacheConfig
from multiagent_consensus.cache.base import CacheAdapter
from multiagent_consensus.cache.factory import get_cache_adapter
from multiagent_consensus.cache.keys import derive_key
from multiagent_consensus.models import CacheStats, ProviderResponse, RequestOptions, TokenUsage
from multiagent_consensus.providers.base import AIProvider

logger = logging.getLogger(__name__)


class CacheTelemetry:
    """Hit/miss counters shared by every provider one middleware wraps."""

    def __init__(self) -> None:
        self.hits = 0
        self.misses = 0
        self.time_saved_ms = 0.0

    def record_hit(self, saved_ms: float) -> None:
        self.hits += 1
        self.time_saved_ms += saved_ms

    def record_miss(self) -> None:
        self.misses += 1

    def reset(self) -> None:
        self.hits = 0
        self.misses = 0
        self.time_saved_ms = 0.0

    def snapshot(self) -> CacheStats:
        return CacheStats(hits=self.hits, misses=self.misses, time_saved_ms=self.time_saved_ms)


def _request_key(provider: str, model: str, prompt: str, options: RequestOptions | None) -> str:
    return derive_key(
        {
            "provider": provider,
            "model": model,
            "prompt": prompt,
            "options": asdict(options) if options else None,
        }
    )


def _decode(value: Any) -> tuple[ProviderResponse, float] | None:
    """Rebuild a cached entry; None for anything that does not look like one."""
    if not isinstance(value, dict) or not isinstance(value.get("response"), dict):
        return None
    raw = value["response"]
    response = ProviderResponse(
        text=str(raw.get("text", "")),
        token_usage=TokenUsage(**(raw.get("token_usage") or {})),
    )
    return response, float(value.get("latency_ms", 0.0))


class CachingProvider(AIProvider):
    """AIProvider that answers from ``adapter`` before calling ``provider``."""

    def __init__(
        self,
        provider: AIProvider,
        adapter: CacheAdapter,
        config: CacheConfig,
        telemetry: CacheTelemetry | None = None,
    ) -> None:
        self._provider = provider
        self._adapter = adapter
        self._config = config
        self.telemetry = telemetry or CacheTelemetry()

    @property
    def wrapped(self) -> AIProvider:
        return self._provider

    def name(self) -> str:
        return self._provider.name()

    def supported_models(self) -> list[str]:
        return self._provider.supported_models()

    async def _lookup(self, key: str) -> tuple[ProviderResponse, float] | None:
        try:
            return _decode(await self._adapter.get(key))
        except Exception as exc:
            logger.warning("Cache read failed, treating as miss: %s", exc)
            return None

    async def _store(self, key: str, response: ProviderResponse, latency_ms: float) -> None:
        try:
            await self._adapter.set(
                key,
                {"response": asdict(response), "latency_ms": latency_ms},
                self._config.ttl_seconds,
            )
        except Exception as exc:
            logger.warning("Cache write failed: %s", exc)

    async def generate_response(
        self,
        model: str,
        prompt: str,
        options: RequestOptions | None = None,
    ) -> ProviderResponse:
        key = _request_key(self._provider.name(), model, prompt, options)

        if not self._config.bust_cache and not self._config.bypass:
            cached = await self._lookup(key)
            if cached is not None:
                response, latency_ms = cached
                self.telemetry.record_hit(latency_ms)
                logger.debug("Cache hit: %s %s", self._provider.name(), model)
                return response

        self.telemetry.record_miss()
        start = time.monotonic()
        response = await self._provider.generate_response(model, prompt, options)
        latency_ms = (time.monotonic() - start) * 1000

        if not self._config.bypass:
            await self._store(key, response, latency_ms)
        return response


class CachingMiddleware:
    """Owns one cache adapter and telemetry; wraps providers on demand."""

    def __init__(self, config: CacheConfig, adapter: CacheAdapter | None = None) -> None:
        self._config = config
        self.telemetry = CacheTelemetry()
        self.adapter = get_cache_adapter(config, adapter) if config.enabled else adapter

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    def wrap(self, provider: AIProvider) -> AIProvider:
        if not self._config.enabled or self.adapter is None:
            return provider
        return CachingProvider(provider, self.adapter, self._config, self.telemetry)

    def stats(self) -> CacheStats:
        return self.telemetry.snapshot()

    async def clear(self) -> None:
        if self.adapter is not None:
            await self.adapter.clear()
            logger.info("Cache cleared")

    async def close(self) -> None:
        """Stop sweepers and release network clients."""
        if self.adapter is None:
            return
        self.adapter.close()
        aclose = getattr(self.adapter, "aclose", None)
        if aclose is not None:
            await aclose()
