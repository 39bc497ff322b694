"""OpenAI chat completions adapter.

This module implements the LLMProvider protocol on top of the OpenAI
Python SDK. One request, no retries: the client is created with
``max_retries=0`` so a failed call surfaces immediately.
"""

from __future__ import annotations

import openai
import structlog

from ...config.schema import OpenAIConfig
from ...errors import UpstreamModelError, UpstreamNetworkError
from ...models.conversation import CompletionRequest

log = structlog.get_logger()


class OpenAIAdapter:
    """OpenAI LLM adapter implementing the LLMProvider protocol.

    Example:
        config = OpenAIConfig(api_key="sk-...")
        adapter = OpenAIAdapter(config)

        reply = await adapter.complete(request)
    """

    def __init__(self, config: OpenAIConfig, client: openai.AsyncOpenAI | None = None) -> None:
        """Initialize the OpenAI adapter.

        Args:
            config: OpenAI-specific configuration.
            client: Pre-built SDK client. Created from the config if None.
        """
        self._config = config
        self._client = client or openai.AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            max_retries=0,
        )

    @property
    def model_name(self) -> str:
        """Return the model identifier being used."""
        return self._config.model

    async def complete(self, request: CompletionRequest) -> str:
        """Run one chat completion and return the first choice's text.

        Args:
            request: System prompt, prior turns and the new user text.

        Returns:
            Content of the first choice.

        Raises:
            UpstreamNetworkError: Connection failure or timeout.
            UpstreamModelError: API error status or empty response.
        """
        messages = request.to_messages()

        log.debug(
            "llm_request_start",
            provider="openai",
            model=self._config.model,
            messages=len(messages),
        )

        try:
            completion = await self._client.chat.completions.create(
                model=self._config.model,
                messages=messages,  # type: ignore[arg-type]
                temperature=self._config.temperature,
            )
        except openai.APIConnectionError as e:
            log.error("openai_unreachable", error=str(e))
            raise UpstreamNetworkError(f"OpenAI request failed: {e}") from e
        except openai.APIStatusError as e:
            log.error("openai_api_error", status_code=e.status_code, error=str(e))
            raise UpstreamModelError(f"OpenAI API error: {e}", status_code=e.status_code) from e
        except openai.APIError as e:
            log.error("openai_api_error", error=str(e))
            raise UpstreamModelError(f"OpenAI API error: {e}") from e

        if not completion.choices:
            raise UpstreamModelError("OpenAI returned no choices")

        content = completion.choices[0].message.content
        if not content:
            raise UpstreamModelError("OpenAI returned an empty message")

        log.debug("llm_request_complete", provider="openai", length=len(content))
        return content

    async def verify_model(self) -> None:
        """Look up the configured model with the API key.

        Raises:
            UpstreamNetworkError: Connection failure or timeout.
            UpstreamModelError: The key or the model was rejected.
        """
        try:
            await self._client.models.retrieve(self._config.model)
        except openai.APIConnectionError as e:
            raise UpstreamNetworkError(f"OpenAI request failed: {e}") from e
        except openai.APIStatusError as e:
            raise UpstreamModelError(
                f"OpenAI rejected model {self._config.model}: {e}", status_code=e.status_code
            ) from e
