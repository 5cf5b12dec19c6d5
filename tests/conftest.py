"""Shared pytest fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from config.config_loader import AppConfig, CacheConfig, ConsensusConfig, DebateConfig, ProviderConfig
from multiagent_consensus.models import ModelResponse, ProviderResponse, RequestOptions, Round, TokenUsage
from multiagent_consensus.providers.base import AIProvider


def ok(text: str, tokens: int = 10) -> ProviderResponse:
    return ProviderResponse(text=text, token_usage=TokenUsage(prompt=tokens // 2, completion=tokens - tokens // 2, total=tokens))


class MockProvider(AIProvider):
    """Test double AIProvider."""

    def __init__(
        self,
        provider_name: str = "mock",
        models: list[str] | None = None,
        response_text: str = "Mock response",
    ) -> None:
        self._name = provider_name
        self._models = models if models is not None else ["mock-model"]
        # Shadow the class method with an AsyncMock at the instance level.
        # ABC check passes because generate_response is defined in the class body below.
        self.generate_response = AsyncMock(return_value=ok(response_text))  # type: ignore[assignment]

    def name(self) -> str:
        return self._name

    def supported_models(self) -> list[str]:
        return list(self._models)

    async def generate_response(  # type: ignore[override]
        self, model: str, prompt: str, options: RequestOptions | None = None
    ) -> ProviderResponse:
        """Default implementation; replaced by AsyncMock in __init__."""
        return ok("Mock response")


def per_model(answers: dict[str, list[str]]):
    """side_effect that answers each model from its own queue, in call order."""
    queues = {model: list(texts) for model, texts in answers.items()}

    async def _respond(model: str, prompt: str, options: RequestOptions | None = None) -> ProviderResponse:
        return ok(queues[model].pop(0))

    return _respond


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()


@pytest.fixture
def two_mock_providers() -> list[MockProvider]:
    return [
        MockProvider("provider_a", ["model-a"], "Response from A"),
        MockProvider("provider_b", ["model-b"], "Response from B"),
    ]


@pytest.fixture
def consensus_config() -> ConsensusConfig:
    return ConsensusConfig(models=["model-a", "model-b"], max_rounds=3)


@pytest.fixture
def sample_provider_config() -> ProviderConfig:
    return ProviderConfig(
        name="test_provider",
        api_key_env="TEST_API_KEY",
        timeout_sec=30,
        max_tokens=1024,
        models=["test-model-1"],
    )


@pytest.fixture
def sample_app_config(tmp_path: Path, consensus_config: ConsensusConfig) -> AppConfig:
    return AppConfig(
        consensus=consensus_config,
        providers={
            "anthropic": ProviderConfig(
                name="anthropic",
                api_key_env="ANTHROPIC_API_KEY",
                timeout_sec=60,
                max_tokens=4096,
                models=["claude-sonnet-4-20250514"],
            )
        },
        output_dir=tmp_path / "output",
        available_providers={"anthropic"},
    )


@pytest.fixture
def enabled_cache_config() -> CacheConfig:
    return CacheConfig(enabled=True, adapter="memory", ttl_seconds=60)


@pytest.fixture
def sample_round() -> Round:
    return Round(
        number=1,
        responses=[
            ModelResponse(model="model-a", text="Use YAML.", confidence=0.9, token_usage=TokenUsage(5, 5, 10)),
            ModelResponse(model="model-b", text="Use JSON.", confidence=0.9, token_usage=TokenUsage(6, 6, 12)),
        ],
    )


@pytest.fixture
def strict_debate() -> DebateConfig:
    return DebateConfig(require_consensus=True)
