"""Error taxonomy for the consensus pipeline."""

from typing import Any


class ConsensusError(Exception):
    """Base class for all consensus errors."""


class ConfigurationError(ConsensusError):
    """Raised for missing or invalid static configuration."""

    @classmethod
    def missing_parameter(cls, param: str) -> "ConfigurationError":
        return cls(f"Missing required configuration parameter: {param}")

    @classmethod
    def invalid_parameter(cls, param: str, value: Any, expected: str) -> "ConfigurationError":
        return cls(
            f"Invalid configuration parameter: {param}. "
            f"Expected {expected}, but got {type(value).__name__} ({value!r})"
        )

    @classmethod
    def unsupported_value(cls, param: str, value: Any, supported: list[Any]) -> "ConfigurationError":
        return cls(
            f"Unsupported value for {param}: {value!r}. "
            f"Supported values are: {', '.join(str(s) for s in supported)}"
        )


class ValidationError(ConsensusError):
    """Raised for bad input values."""

    @classmethod
    def invalid_input(cls, param: str, reason: str) -> "ValidationError":
        return cls(f"Invalid input for {param}: {reason}")

    @classmethod
    def empty_input(cls, param: str) -> "ValidationError":
        return cls(f"Empty input for {param}. This field is required.")


class ConsensusProcessError(ConsensusError):
    """Raised for logical failures of the consensus process."""

    @classmethod
    def no_consensus_reached(cls, method: str, rounds: int) -> "ConsensusProcessError":
        return cls(f'No consensus reached using method "{method}" after {rounds} rounds.')


class DebateAbortedError(ConsensusProcessError):
    """A model call failed mid-debate; the whole debate is abandoned.

    The underlying exception is chained as ``__cause__``. When it is a
    ProviderError its provider name and status code are exposed here too.
    """

    def __init__(self, model: str, round_number: int, message: str) -> None:
        self.model = model
        self.round_number = round_number
        super().__init__(
            f"Error generating response from model {model} in round {round_number}: {message}"
        )

    @property
    def provider(self) -> str | None:
        return getattr(self.__cause__, "provider_name", None)

    @property
    def status_code(self) -> int | None:
        return getattr(self.__cause__, "status_code", None)
