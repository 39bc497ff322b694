"""Completion invocation with a fixed system instruction."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from ..models.conversation import CompletionRequest, Conversation

if TYPE_CHECKING:
    from ..interfaces.llm import LLMProvider

log = structlog.get_logger()


class CompletionInvoker:
    """Wraps one completion call per user turn.

    Errors from the provider (UpstreamModelError, UpstreamNetworkError) are
    propagated unchanged; there is no retry.
    """

    def __init__(self, llm: LLMProvider, system_prompt: str) -> None:
        self._llm = llm
        self._system_prompt = system_prompt

    @property
    def system_prompt(self) -> str:
        """The configured system instruction."""
        return self._system_prompt

    def build_request(self, conversation: Conversation, new_text: str) -> CompletionRequest:
        """Assemble the request for ``[system, *conversation, user:new_text]``."""
        return CompletionRequest(
            system_prompt=self._system_prompt,
            prior_turns=tuple(conversation),
            new_user_text=new_text,
        )

    async def complete(self, conversation: Conversation, new_text: str) -> str:
        """Return the model's reply to ``new_text`` given the prior turns."""
        request = self.build_request(conversation, new_text)
        log.info(
            "llm_request_start",
            model=self._llm.model_name,
            history_turns=len(request.prior_turns),
        )
        reply = await self._llm.complete(request)
        log.info("llm_request_complete", model=self._llm.model_name, length=len(reply))
        return reply
