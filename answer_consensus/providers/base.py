"""Abstract base and error types for all AI model providers."""

from abc import ABC, abstractmethod

from config.config_loader import SamplingParams


class ProviderError(Exception):
    """Raised when a provider call fails. Any ProviderError aborts the run."""

    def __init__(self, provider_name: str, message: str) -> None:
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}")


class AuthError(ProviderError):
    """Missing or rejected API credential."""


class TransportError(ProviderError):
    """Network-level failure or timeout before a response arrived."""


class ServiceError(ProviderError):
    """The remote service answered with a non-success status."""

    def __init__(self, provider_name: str, status_code: int | None, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(provider_name, f"API failed: {status_code} {body}".rstrip())


class AIProvider(ABC):
    """Abstract base for all AI model providers."""

    @abstractmethod
    def name(self) -> str:
        """Return the short provider name (e.g. 'openai', 'claude')."""
        ...

    @abstractmethod
    def model_string(self) -> str:
        """Return the actual model identifier string."""
        ...

    @abstractmethod
    async def invoke(self, prompt: str, sampling: SamplingParams) -> str:
        """Send the prompt and return the raw response text.

        Args:
            prompt: The full prompt text to send.
            sampling: Temperature and output-length cap for this attempt.

        Returns:
            The model's text output. May be empty.

        Raises:
            AuthError: Credential missing or rejected.
            TransportError: Network failure or timeout.
            ServiceError: Non-success status from the remote service.
        """
        ...
