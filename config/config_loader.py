"""Load settings.yaml into typed dataclasses. Validates values at startup."""

import logging
import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from multiagent_consensus import prompts as default_prompts
from multiagent_consensus.errors import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"

CONSENSUS_METHODS = ("majority", "supermajority", "unanimous")
CACHE_ADAPTERS = ("memory", "file", "redis")

# Custom predicate over a round's responses; replaces the named voting rule.
ConsensusChecker = Callable[[Sequence[Any]], bool]


@dataclass
class ProviderConfig:
    name: str
    api_key_env: str
    timeout_sec: int
    max_tokens: int
    models: list[str] = field(default_factory=list)
    base_url: str | None = None


@dataclass
class PromptsConfig:
    initial: str = default_prompts.INITIAL
    factual: str = default_prompts.FACTUAL
    abstract: str = default_prompts.ABSTRACT
    debate_round: str = default_prompts.DEBATE_ROUND
    final_round: str = default_prompts.FINAL_ROUND


@dataclass
class ModelOptions:
    temperature: float | None = None
    max_tokens: int | None = None
    system_prompt: str | None = None


@dataclass
class DebateConfig:
    min_rounds: int = 1
    use_specialized_prompts: bool = True
    reveal_model_identities: bool = True
    consensus_checker: ConsensusChecker | None = None
    require_consensus: bool = False


@dataclass
class FileCacheOptions:
    cache_dir: Path = Path(".cache")
    max_age_sec: int = 86400
    create_dir: bool = True


@dataclass
class RedisCacheOptions:
    url: str | None = None
    token: str | None = None
    prefix: str | None = None


@dataclass
class CacheConfig:
    enabled: bool = False
    adapter: str = "memory"
    ttl_seconds: int = 3600
    bypass: bool = False
    bust_cache: bool = False
    max_size: int = 1000
    file: FileCacheOptions = field(default_factory=FileCacheOptions)
    redis: RedisCacheOptions = field(default_factory=RedisCacheOptions)


@dataclass
class ConsensusConfig:
    models: list[str]
    consensus_method: str = "majority"
    max_rounds: int = 3
    debate: DebateConfig = field(default_factory=DebateConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    model_config: dict[str, ModelOptions] = field(default_factory=dict)
    include_history: bool = False
    prompts: PromptsConfig = field(default_factory=PromptsConfig)


@dataclass
class AppConfig:
    consensus: ConsensusConfig
    providers: dict[str, ProviderConfig]
    output_dir: Path = Path("./output")
    available_providers: set[str] = field(default_factory=set)


def validate_consensus_config(config: ConsensusConfig) -> None:
    """Check static configuration values.

    Raises:
        ConfigurationError: On the first invalid value found.
        ValidationError: If the model count or round bounds cannot make a debate.
    """
    if not config.models:
        raise ConfigurationError.missing_parameter("models")
    if len(config.models) < 2:
        raise ValidationError.invalid_input("models", "at least 2 models are required for a debate")
    if config.consensus_method not in CONSENSUS_METHODS:
        raise ConfigurationError.unsupported_value(
            "consensus_method", config.consensus_method, list(CONSENSUS_METHODS)
        )
    if not isinstance(config.max_rounds, int) or config.max_rounds < 1:
        raise ConfigurationError.invalid_parameter("max_rounds", config.max_rounds, "positive integer")
    if config.debate.min_rounds < 1:
        raise ValidationError.invalid_input("debate.min_rounds", "must be at least 1")
    if config.max_rounds < config.debate.min_rounds:
        raise ValidationError.invalid_input(
            "max_rounds",
            f"must be at least min_rounds ({config.debate.min_rounds}), got {config.max_rounds}",
        )
    if config.cache.adapter not in CACHE_ADAPTERS:
        raise ConfigurationError.unsupported_value("cache.adapter", config.cache.adapter, list(CACHE_ADAPTERS))
    for model, opts in config.model_config.items():
        if opts.temperature is not None and not 0 <= opts.temperature <= 2:
            raise ConfigurationError.invalid_parameter(
                f"model_config.{model}.temperature", opts.temperature, "number in [0, 2]"
            )
        if opts.max_tokens is not None and (not isinstance(opts.max_tokens, int) or opts.max_tokens < 1):
            raise ConfigurationError.invalid_parameter(
                f"model_config.{model}.max_tokens", opts.max_tokens, "positive integer"
            )


def _env_flag(name: str) -> bool | None:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return None
    return raw in ("1", "true", "yes", "on")


def _load_cache_config(raw: dict[str, Any]) -> CacheConfig:
    file_raw = raw.get("file") or {}
    redis_raw = raw.get("redis") or {}
    cache = CacheConfig(
        enabled=bool(raw.get("enabled", False)),
        adapter=str(raw.get("adapter", "memory")),
        ttl_seconds=int(raw.get("ttl_seconds", 3600)),
        bypass=bool(raw.get("bypass", False)),
        bust_cache=bool(raw.get("bust_cache", False)),
        max_size=int(raw.get("max_size", 1000)),
        file=FileCacheOptions(
            cache_dir=Path(file_raw.get("cache_dir", ".cache")),
            max_age_sec=int(file_raw.get("max_age_sec", 86400)),
            create_dir=bool(file_raw.get("create_dir", True)),
        ),
        redis=RedisCacheOptions(
            url=redis_raw.get("url"),
            token=redis_raw.get("token"),
            prefix=redis_raw.get("prefix"),
        ),
    )

    # Environment overrides the settings file
    enabled = _env_flag("ENABLE_CACHE")
    if enabled is not None:
        cache.enabled = enabled
    adapter = os.environ.get("CACHE_ADAPTER", "").strip()
    if adapter:
        cache.adapter = adapter
    ttl = os.environ.get("CACHE_TTL_SECONDS", "").strip()
    if ttl:
        try:
            cache.ttl_seconds = int(ttl)
        except ValueError as exc:
            raise ConfigurationError.invalid_parameter("CACHE_TTL_SECONDS", ttl, "integer") from exc
    return cache


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing and ConfigurationError
    for invalid values. Logs, but does not raise, for missing API keys;
    callers check available_providers.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    defaults_raw = raw.get("defaults", {})
    debate_raw = raw.get("debate", {})
    prompts_raw = raw.get("prompts") or {}

    model_config = {
        name: ModelOptions(
            temperature=opts.get("temperature"),
            max_tokens=opts.get("max_tokens"),
            system_prompt=opts.get("system_prompt"),
        )
        for name, opts in (raw.get("model_config") or {}).items()
    }

    consensus = ConsensusConfig(
        models=list(defaults_raw.get("models", [])),
        consensus_method=str(defaults_raw.get("consensus_method", "majority")),
        max_rounds=int(defaults_raw.get("max_rounds", 3)),
        debate=DebateConfig(
            min_rounds=int(debate_raw.get("min_rounds", 1)),
            use_specialized_prompts=bool(debate_raw.get("use_specialized_prompts", True)),
            reveal_model_identities=bool(debate_raw.get("reveal_model_identities", True)),
            require_consensus=bool(debate_raw.get("require_consensus", False)),
        ),
        cache=_load_cache_config(raw.get("cache") or {}),
        model_config=model_config,
        include_history=bool(defaults_raw.get("include_history", False)),
        prompts=PromptsConfig(**{k: str(v) for k, v in prompts_raw.items()}),
    )
    validate_consensus_config(consensus)

    providers: dict[str, ProviderConfig] = {}
    available_providers: set[str] = set()

    for provider_name, provider_raw in (raw.get("providers") or {}).items():
        providers[provider_name] = ProviderConfig(
            name=provider_name,
            api_key_env=provider_raw["api_key_env"],
            timeout_sec=int(provider_raw["timeout_sec"]),
            max_tokens=int(provider_raw["max_tokens"]),
            models=list(provider_raw.get("models", [])),
            base_url=provider_raw.get("base_url"),
        )

        api_key = os.environ.get(provider_raw["api_key_env"], "").strip()
        if api_key:
            available_providers.add(provider_name)
            logger.info("Provider available: %s", provider_name)
        else:
            logger.info(
                "Provider skipped (no API key): %s; set %s in .env",
                provider_name,
                provider_raw["api_key_env"],
            )

    return AppConfig(
        consensus=consensus,
        providers=providers,
        output_dir=Path(defaults_raw.get("output_dir", "./output")),
        available_providers=available_providers,
    )
