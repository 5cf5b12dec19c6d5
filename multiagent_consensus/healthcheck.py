"""Provider health checks: ping each API before starting a debate."""

import asyncio
import logging

from multiagent_consensus.models import RequestOptions
from multiagent_consensus.providers.base import AIProvider
from multiagent_consensus.providers.registry import find_provider

logger = logging.getLogger(__name__)

_PING_PROMPT = "Reply with the word OK only."
_PING_OPTIONS = RequestOptions(temperature=0.0, max_tokens=16)
_TIMEOUT_SEC = 15.0


async def _check_one(provider: AIProvider, model: str) -> tuple[str, bool, str]:
    """Ping a single model. Returns (model, ok, error_message)."""
    try:
        await asyncio.wait_for(
            provider.generate_response(model, _PING_PROMPT, _PING_OPTIONS),
            timeout=_TIMEOUT_SEC,
        )
        return model, True, ""
    except Exception as exc:
        logger.warning("Health check failed for %s (%s): %s", model, provider.name(), exc)
        return model, False, str(exc)


async def run_health_checks(
    providers: list[AIProvider],
    models: list[str],
) -> dict[str, tuple[bool, str]]:
    """Ping every debate model through the provider that serves it, in parallel.

    Returns:
        Dict mapping model -> (ok, error_message). Models no provider
        supports are reported as failed without a call.
    """
    checks = []
    results: dict[str, tuple[bool, str]] = {}
    for model in models:
        provider = find_provider(providers, model)
        if provider is None:
            results[model] = (False, "no provider supports this model")
            continue
        checks.append(_check_one(provider, model))

    for model, ok, err in await asyncio.gather(*checks):
        results[model] = (ok, err)
    return results
