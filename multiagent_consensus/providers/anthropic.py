"""Anthropic Claude provider using anthropic SDK with native async."""

import asyncio
import logging
import os
import time

import anthropic as anthropic_sdk

from config.config_loader import ProviderConfig
from multiagent_consensus.models import ProviderResponse, RequestOptions, TokenUsage
from multiagent_consensus.providers.base import AIProvider, ProviderError

logger = logging.getLogger(__name__)


class AnthropicProvider(AIProvider):
    """Anthropic Claude provider via anthropic SDK."""

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ProviderError.api_key_missing(config.name, config.api_key_env)
        self._client = anthropic_sdk.AsyncAnthropic(api_key=api_key)

    def name(self) -> str:
        return self._config.name

    def supported_models(self) -> list[str]:
        return list(self._config.models)

    async def generate_response(
        self,
        model: str,
        prompt: str,
        options: RequestOptions | None = None,
    ) -> ProviderResponse:
        options = options or RequestOptions()
        kwargs = {
            "model": model,
            "max_tokens": options.max_tokens or self._config.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if options.temperature is not None:
            kwargs["temperature"] = options.temperature
        if options.system_message:
            kwargs["system"] = options.system_message

        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.messages.create(**kwargs),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError.timeout(self._config.name, model, self._config.timeout_sec) from exc
        except anthropic_sdk.RateLimitError as exc:
            raise ProviderError.rate_limited(self._config.name, model) from exc
        except anthropic_sdk.APIStatusError as exc:
            raise ProviderError.api_error(self._config.name, str(exc), model, exc.status_code) from exc
        except Exception as exc:
            raise ProviderError.api_error(self._config.name, str(exc), model) from exc

        latency = time.monotonic() - start

        text_blocks = [b.text for b in response.content if b.type == "text"]
        if not text_blocks:
            raise ProviderError(self._config.name, "No text blocks in response", model=model)

        usage = TokenUsage()
        if response.usage:
            usage = TokenUsage(
                prompt=response.usage.input_tokens,
                completion=response.usage.output_tokens,
                total=response.usage.input_tokens + response.usage.output_tokens,
            )

        logger.info("Anthropic %s: %.2fs, %d tokens", model, latency, usage.total)

        return ProviderResponse(text="\n".join(text_blocks), token_usage=usage)
