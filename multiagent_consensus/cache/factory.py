"""Cache adapter selection from configuration."""

import logging

from config.config_loader import CacheConfig
from multiagent_consensus.cache.base import CacheAdapter
from multiagent_consensus.cache.file import FileCacheAdapter
from multiagent_consensus.cache.memory import MemoryCacheAdapter
from multiagent_consensus.cache.redis import RedisCacheAdapter
from multiagent_consensus.errors import ConfigurationError

logger = logging.getLogger(__name__)

ADAPTER_TYPES = ("memory", "file", "redis")


def create_cache_adapter(config: CacheConfig) -> CacheAdapter:
    """Build the adapter named by ``config.adapter``.

    Raises:
        ConfigurationError: If the adapter tag is not a built-in type.
    """
    if config.adapter == "memory":
        adapter: CacheAdapter = MemoryCacheAdapter(
            max_size=config.max_size,
            default_ttl=config.ttl_seconds,
        )
    elif config.adapter == "file":
        adapter = FileCacheAdapter(
            cache_dir=config.file.cache_dir,
            default_ttl=config.ttl_seconds,
            max_age=config.file.max_age_sec,
            create_dir=config.file.create_dir,
        )
    elif config.adapter == "redis":
        adapter = RedisCacheAdapter(
            url=config.redis.url,
            token=config.redis.token,
            prefix=config.redis.prefix,
            default_ttl=config.ttl_seconds,
        )
    else:
        raise ConfigurationError.unsupported_value("cache.adapter", config.adapter, list(ADAPTER_TYPES))

    logger.info("Cache adapter: %s (ttl %ds)", config.adapter, config.ttl_seconds)
    return adapter


def get_cache_adapter(config: CacheConfig, adapter: CacheAdapter | None = None) -> CacheAdapter:
    """Return ``adapter`` when one is supplied, otherwise build it from config."""
    if adapter is not None:
        return adapter
    return create_cache_adapter(config)
