"""ConsensusEngine: providers + response cache + debate, from one config."""

import logging
from collections.abc import Callable

from config.config_loader import ConsensusConfig
from multiagent_consensus.analysis import ResponseAnalyzer
from multiagent_consensus.cache.base import CacheAdapter
from multiagent_consensus.cache.middleware import CachingMiddleware
from multiagent_consensus.debate import DebateOrchestrator
from multiagent_consensus.models import ConsensusResult, Round
from multiagent_consensus.providers.base import AIProvider

logger = logging.getLogger(__name__)


class ConsensusEngine:
    """Entry point for running a debate with optional response caching.

    Example:
        engine = ConsensusEngine(config, providers)
        try:
            result = await engine.run("What is 4+4?")
        finally:
            await engine.close()
    """

    def __init__(
        self,
        config: ConsensusConfig,
        providers: list[AIProvider],
        cache_adapter: CacheAdapter | None = None,
        analyzer: ResponseAnalyzer | None = None,
    ) -> None:
        # Validates config and resolves providers before any cache resources exist
        DebateOrchestrator(config, providers, analyzer=analyzer)
        self._config = config
        self._middleware = CachingMiddleware(config.cache, cache_adapter)
        self._providers = [self._middleware.wrap(p) for p in providers]
        self._orchestrator = DebateOrchestrator(config, self._providers, analyzer=analyzer)
        if self._middleware.enabled:
            logger.info("Response caching enabled (%s)", config.cache.adapter)

    @property
    def cache(self) -> CachingMiddleware:
        return self._middleware

    @property
    def providers(self) -> list[AIProvider]:
        return list(self._providers)

    async def run(
        self,
        query: str,
        on_round_complete: Callable[[Round], None] | None = None,
    ) -> ConsensusResult:
        result = await self._orchestrator.run_debate(query, on_round_complete)
        if self._middleware.enabled:
            result.metadata.cache_stats = self._middleware.stats()
            logger.info(
                "Cache: %d hits, %d misses, %.0fms saved",
                result.metadata.cache_stats.hits,
                result.metadata.cache_stats.misses,
                result.metadata.cache_stats.time_saved_ms,
            )
        return result

    async def clear_cache(self) -> None:
        await self._middleware.clear()

    async def close(self) -> None:
        await self._middleware.close()
