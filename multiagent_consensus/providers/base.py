"""Abstract base for all AI model providers."""

from abc import ABC, abstractmethod

from multiagent_consensus.errors import ConsensusError
from multiagent_consensus.models import ProviderResponse, RequestOptions


class ProviderError(ConsensusError):
    """Raised when a provider call fails."""

    def __init__(
        self,
        provider_name: str,
        message: str,
        model: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.provider_name = provider_name
        self.model = model
        self.status_code = status_code
        super().__init__(f"[{provider_name}] {message}")

    @classmethod
    def api_key_missing(cls, provider_name: str, env_var: str) -> "ProviderError":
        return cls(provider_name, f"Missing API key: {env_var}")

    @classmethod
    def rate_limited(cls, provider_name: str, model: str | None = None) -> "ProviderError":
        return cls(provider_name, "Rate limit exceeded", model=model, status_code=429)

    @classmethod
    def timeout(cls, provider_name: str, model: str | None, timeout_sec: float) -> "ProviderError":
        return cls(provider_name, f"Request timed out after {timeout_sec}s", model=model, status_code=408)

    @classmethod
    def api_error(
        cls,
        provider_name: str,
        message: str,
        model: str | None = None,
        status_code: int | None = None,
    ) -> "ProviderError":
        return cls(provider_name, f"API call failed: {message}", model=model, status_code=status_code)


class AIProvider(ABC):
    """Abstract base for all AI model providers."""

    @abstractmethod
    def name(self) -> str:
        """Return the short provider name (e.g. 'openai', 'anthropic')."""
        ...

    @abstractmethod
    def supported_models(self) -> list[str]:
        """Return the model identifiers this provider can serve."""
        ...

    @abstractmethod
    async def generate_response(
        self,
        model: str,
        prompt: str,
        options: RequestOptions | None = None,
    ) -> ProviderResponse:
        """Generate a response for the given prompt.

        Args:
            model: Model identifier, one of supported_models().
            prompt: The full prompt text to send.
            options: Optional temperature / max_tokens / system message.

        Returns:
            ProviderResponse with text and token usage.

        Raises:
            ProviderError: On API failure, timeout, or invalid response.
        """
        ...
