"""Explicit provider registry, selected by configuration."""

import logging

from config.config_loader import AppConfig
from multiagent_consensus.providers.anthropic import AnthropicProvider
from multiagent_consensus.providers.base import AIProvider
from multiagent_consensus.providers.gemini import GeminiProvider
from multiagent_consensus.providers.openai_provider import OpenAIProvider
from multiagent_consensus.providers.xai import XAIProvider

logger = logging.getLogger(__name__)

PROVIDER_CLASSES: dict[str, type[AIProvider]] = {
    "anthropic": AnthropicProvider,
    "openai": OpenAIProvider,
    "gemini": GeminiProvider,
    "xai": XAIProvider,
}


def build_providers(config: AppConfig) -> dict[str, AIProvider]:
    """Build all available providers. Returns dict keyed by name."""
    providers: dict[str, AIProvider] = {}
    for name in sorted(config.available_providers):
        if name not in PROVIDER_CLASSES:
            logger.warning("Provider '%s' unknown, skipping", name)
            continue
        try:
            providers[name] = PROVIDER_CLASSES[name](config.providers[name])
        except Exception as exc:
            logger.warning("Failed to instantiate provider '%s': %s", name, exc)
    return providers


def find_provider(providers: list[AIProvider], model: str) -> AIProvider | None:
    """First provider whose supported_models() lists ``model``."""
    return next((p for p in providers if model in p.supported_models()), None)
