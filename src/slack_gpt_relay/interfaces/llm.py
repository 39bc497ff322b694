"""Abstract interface for LLM integrations."""

from typing import Protocol

from ..models.conversation import CompletionRequest


class LLMProvider(Protocol):
    """Abstract interface for LLM integrations.

    This protocol defines the contract that all LLM provider adapters
    (OpenAI, Anthropic, etc.) must implement.
    """

    async def complete(self, request: CompletionRequest) -> str:
        """
        Run a single chat completion.

        Args:
            request: System prompt, prior turns and the new user text

        Returns:
            Text of the first choice

        Raises:
            UpstreamModelError: If the provider returns an error or empty output
            UpstreamNetworkError: If the provider cannot be reached
        """
        ...

    async def verify_model(self) -> None:
        """
        Check that the configured model exists and the API key may use it.

        Raises:
            UpstreamModelError: If the provider rejects the key or model
            UpstreamNetworkError: If the provider cannot be reached
        """
        ...

    @property
    def model_name(self) -> str:
        """
        Return the model identifier being used.

        Examples:
            - "gpt-4o"
            - "claude-3-5-sonnet-20241022"
        """
        ...
