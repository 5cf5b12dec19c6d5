"""Gemini provider using google-genai SDK with native async."""

import asyncio
import logging
import os
import time

from google import genai
from google.genai import types as genai_types

from config.config_loader import ProviderConfig
from multiagent_consensus.models import ProviderResponse, RequestOptions, TokenUsage
from multiagent_consensus.providers.base import AIProvider, ProviderError

logger = logging.getLogger(__name__)


class GeminiProvider(AIProvider):
    """Google Gemini provider via google-genai SDK."""

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ProviderError.api_key_missing(config.name, config.api_key_env)
        self._client = genai.Client(api_key=api_key)

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
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=model,
                    contents=prompt,
                    config=genai_types.GenerateContentConfig(
                        max_output_tokens=options.max_tokens or self._config.max_tokens,
                        temperature=options.temperature,
                        system_instruction=options.system_message,
                    ),
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError.timeout(self._config.name, model, self._config.timeout_sec) from exc
        except Exception as exc:
            raise ProviderError.api_error(
                self._config.name, str(exc), model, getattr(exc, "code", None)
            ) from exc

        latency = time.monotonic() - start

        if not response.text:
            raise ProviderError(self._config.name, "Empty response text", model=model)

        usage = TokenUsage()
        meta = response.usage_metadata
        if meta:
            usage = TokenUsage(
                prompt=meta.prompt_token_count or 0,
                completion=meta.candidates_token_count or 0,
                total=meta.total_token_count or 0,
            )

        logger.info("Gemini %s: %.2fs, %d tokens", model, latency, usage.total)

        return ProviderResponse(text=response.text, token_usage=usage)
