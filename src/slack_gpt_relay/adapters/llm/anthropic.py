"""Anthropic Claude LLM adapter.

This module implements the LLMProvider protocol for Anthropic's Claude models.
The Messages API takes the system instruction separately from the turns, so
the request is split accordingly; the returned text blocks are joined.
"""

from __future__ import annotations

import anthropic
import structlog

from ...config.schema import AnthropicConfig
from ...errors import UpstreamModelError, UpstreamNetworkError
from ...models.conversation import CompletionRequest

log = structlog.get_logger()

# Maximum response length in characters
MAX_RESPONSE_LENGTH = 50000


class AnthropicAdapter:
    """Anthropic LLM adapter implementing the LLMProvider protocol.

    Example:
        config = AnthropicConfig(api_key="sk-ant-...")
        adapter = AnthropicAdapter(config)

        reply = await adapter.complete(request)
    """

    def __init__(
        self,
        config: AnthropicConfig,
        client: anthropic.AsyncAnthropic | None = None,
    ) -> None:
        """Initialize the Anthropic adapter.

        Args:
            config: Anthropic-specific configuration.
            client: Pre-built SDK client. Created from the config if None.
        """
        self._config = config
        self._client = client or anthropic.AsyncAnthropic(api_key=config.api_key, max_retries=0)

    @property
    def model_name(self) -> str:
        """Return the model identifier being used."""
        return self._config.model

    async def complete(self, request: CompletionRequest) -> str:
        """Run one Messages API call and return the concatenated text.

        Args:
            request: System prompt, prior turns and the new user text.

        Returns:
            Text of the response.

        Raises:
            UpstreamNetworkError: Connection failure or timeout.
            UpstreamModelError: API error status or empty response.
        """
        messages = request.to_messages(include_system=False)

        # The Messages API requires the first turn to come from the user
        while messages and messages[0]["role"] != "user":
            messages.pop(0)

        log.debug(
            "llm_request_start",
            provider="anthropic",
            model=self._config.model,
            messages=len(messages),
        )

        try:
            response = await self._client.messages.create(
                model=self._config.model,
                max_tokens=self._config.max_tokens,
                temperature=self._config.temperature,
                system=request.system_prompt,
                messages=messages,  # type: ignore[arg-type]
            )
        except anthropic.APIConnectionError as e:
            log.error("anthropic_unreachable", error=str(e))
            raise UpstreamNetworkError(f"Anthropic request failed: {e}") from e
        except anthropic.APIStatusError as e:
            log.error("anthropic_api_error", status_code=e.status_code, error=str(e))
            raise UpstreamModelError(
                f"Anthropic API error: {e}", status_code=e.status_code
            ) from e
        except anthropic.APIError as e:
            log.error("anthropic_api_error", error=str(e))
            raise UpstreamModelError(f"Anthropic API error: {e}") from e

        response_text = ""
        for block in response.content:
            if hasattr(block, "text"):
                response_text += block.text

        if not response_text:
            raise UpstreamModelError("Anthropic returned an empty response")

        if len(response_text) > MAX_RESPONSE_LENGTH:
            raise UpstreamModelError(f"Response exceeds maximum length: {len(response_text)}")

        log.debug("llm_request_complete", provider="anthropic", length=len(response_text))
        return response_text

    async def verify_model(self) -> None:
        """Look up the configured model with the API key.

        Raises:
            UpstreamNetworkError: Connection failure or timeout.
            UpstreamModelError: The key or the model was rejected.
        """
        try:
            await self._client.models.retrieve(self._config.model)
        except anthropic.APIConnectionError as e:
            raise UpstreamNetworkError(f"Anthropic request failed: {e}") from e
        except anthropic.APIStatusError as e:
            raise UpstreamModelError(
                f"Anthropic rejected model {self._config.model}: {e}",
                status_code=e.status_code,
            ) from e
