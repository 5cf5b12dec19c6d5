"""OpenAI provider using openai SDK with native async."""

import asyncio
import logging
import os
import time

import openai
from openai import AsyncOpenAI

from config.config_loader import ProviderConfig
from multiagent_consensus.models import ProviderResponse, RequestOptions, TokenUsage
from multiagent_consensus.providers.base import AIProvider, ProviderError

logger = logging.getLogger(__name__)


def build_chat_messages(prompt: str, options: RequestOptions) -> list[dict[str, str]]:
    """Chat-completions message list with an optional leading system message."""
    messages = []
    if options.system_message:
        messages.append({"role": "system", "content": options.system_message})
    messages.append({"role": "user", "content": prompt})
    return messages


class OpenAIProvider(AIProvider):
    """OpenAI provider via openai SDK."""

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ProviderError.api_key_missing(config.name, config.api_key_env)
        self._client = self._make_client(api_key)

    def _make_client(self, api_key: str) -> AsyncOpenAI:
        return AsyncOpenAI(api_key=api_key)

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
            "messages": build_chat_messages(prompt, options),
            "max_tokens": options.max_tokens or self._config.max_tokens,
        }
        if options.temperature is not None:
            kwargs["temperature"] = options.temperature

        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(**kwargs),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError.timeout(self._config.name, model, self._config.timeout_sec) from exc
        except openai.RateLimitError as exc:
            raise ProviderError.rate_limited(self._config.name, model) from exc
        except openai.APIStatusError as exc:
            raise ProviderError.api_error(self._config.name, str(exc), model, exc.status_code) from exc
        except Exception as exc:
            raise ProviderError.api_error(self._config.name, str(exc), model) from exc

        latency = time.monotonic() - start

        choice = response.choices[0] if response.choices else None
        if not choice or not choice.message.content:
            raise ProviderError(self._config.name, "Empty response content", model=model)

        usage = TokenUsage()
        if response.usage:
            usage = TokenUsage(
                prompt=response.usage.prompt_tokens,
                completion=response.usage.completion_tokens,
                total=response.usage.total_tokens,
            )

        logger.info("%s %s: %.2fs, %d tokens", self._config.name, model, latency, usage.total)

        return ProviderResponse(text=choice.message.content, token_usage=usage)
