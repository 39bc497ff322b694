"""Event routing: authentication, acknowledgment and handler dispatch.

The router splits the handling of one inbound request in two:

1. ``receive`` runs inside the HTTP exchange. It verifies the signature,
   answers the url_verification handshake, and otherwise returns an
   immediate empty 200 together with the event to process.
2. ``dispatch`` runs after the acknowledgment has been sent. It classifies
   the event and drives history → completion → reply for it.

Nothing is kept between requests; redelivered events are processed again.
Once an event has been acknowledged, every failure other than a failed
post ends in the fallback apology being posted where the reply would have
gone.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from ..config.schema import AssistantConfig, RelayConfig
from ..errors import UpstreamCompletionFailure
from ..models.event import EventEnvelope, EventKind, SlackEvent
from ..utils.logging import bind_context, clear_context
from .completion import CompletionInvoker
from .dispatcher import ReplyDispatcher
from .history import HistoryResolver, strip_mentions
from .verifier import SignatureVerifier

if TYPE_CHECKING:
    from ..interfaces.chat import ChatProvider
    from ..interfaces.llm import LLMProvider

log = structlog.get_logger()


class EventRoute(StrEnum):
    """Handler chain selected for an event."""

    MENTION = "mention"
    DIRECT_MESSAGE = "direct_message"
    ASSISTANT_THREAD_STARTED = "assistant_thread_started"


@dataclass(frozen=True)
class RouteResult:
    """What to answer on the HTTP exchange, and what to run afterwards."""

    status_code: int
    body: dict[str, Any] | None = None
    event: SlackEvent | None = None


@dataclass(frozen=True)
class ReplyTarget:
    """Where the answer to an event is posted."""

    channel: str
    thread_anchor: str | None


UNAUTHORIZED = RouteResult(status_code=401, body={"error": "unauthorized"})
BAD_REQUEST = RouteResult(status_code=400, body={"error": "invalid payload"})
ACKNOWLEDGED = RouteResult(status_code=200)


def classify(event: SlackEvent | None) -> EventRoute | None:
    """Pick the handler chain for an event, or None to ignore it."""
    if event is None:
        return None
    if event.type == EventKind.ASSISTANT_THREAD_STARTED:
        return EventRoute.ASSISTANT_THREAD_STARTED
    if event.type == EventKind.APP_MENTION:
        return EventRoute.MENTION
    if event.is_direct_message:
        return EventRoute.DIRECT_MESSAGE
    return None


def reply_target(route: EventRoute, event: SlackEvent) -> ReplyTarget | None:
    """Resolve the channel and thread anchor a route answers into.

    Mentions are answered under the mention itself, direct messages inside
    their thread (or under the message when top-level), and assistant panel
    starts inside the assistant thread. None when the event lacks the ids.
    """
    if route == EventRoute.ASSISTANT_THREAD_STARTED:
        thread = event.assistant_thread
        if thread is None:
            return None
        return ReplyTarget(thread.channel_id, thread.thread_ts)

    if not event.channel or not event.ts:
        return None
    if route == EventRoute.MENTION:
        return ReplyTarget(event.channel, event.ts)
    return ReplyTarget(event.channel, event.thread_ts or event.ts)


class EventRouter:
    """Orchestrates one inbound event from verification to reply.

    Example:
        router = create_router(config)
        result = router.receive(request.headers, await request.body())
        if result.event is not None:
            background_tasks.add_task(router.dispatch, result.event)
    """

    def __init__(
        self,
        verifier: SignatureVerifier,
        history: HistoryResolver,
        completion: CompletionInvoker,
        dispatcher: ReplyDispatcher,
        assistant: AssistantConfig | None = None,
    ) -> None:
        """Initialize the EventRouter.

        Args:
            verifier: Signature verifier bound to the signing secret
            history: Thread history resolver
            completion: Completion invoker bound to the system prompt
            dispatcher: Reply dispatcher
            assistant: Canned replies (fallback apology, greeting)
        """
        self._verifier = verifier
        self._history = history
        self._completion = completion
        self._dispatcher = dispatcher
        self._assistant = assistant or AssistantConfig()

    def receive(
        self,
        headers: Mapping[str, str],
        raw_body: bytes,
        now: float | None = None,
    ) -> RouteResult:
        """Authenticate and acknowledge a request.

        Args:
            headers: Request headers
            raw_body: Body bytes exactly as received
            now: Current unix time (for tests)

        Returns:
            The HTTP answer. ``event`` is set when post-ack work is needed.
        """
        if not self._verifier.verify(headers, raw_body, now=now):
            log.warning("request_verification_failed")
            return UNAUTHORIZED

        try:
            envelope = EventEnvelope.model_validate_json(raw_body)
        except ValidationError as e:
            log.warning("request_payload_invalid", errors=e.error_count())
            return BAD_REQUEST

        if envelope.type == EventKind.URL_VERIFICATION:
            if envelope.challenge is None:
                log.warning("url_verification_without_challenge")
                return BAD_REQUEST
            log.info("url_verification_received")
            return RouteResult(status_code=200, body={"challenge": envelope.challenge})

        if envelope.type != EventKind.EVENT_CALLBACK:
            log.info("envelope_ignored", envelope_type=envelope.type)
            return ACKNOWLEDGED

        log.info(
            "event_received",
            event_id=envelope.event_id,
            event_type=envelope.event.type if envelope.event else None,
            retry_num=headers.get("x-slack-retry-num"),
        )
        return RouteResult(status_code=200, event=envelope.event)

    async def dispatch(self, event: SlackEvent) -> None:
        """Run the handler chain for an acknowledged event.

        Never raises: by the time this runs the HTTP response is gone. An
        unexpected failure is answered with the fallback apology.
        """
        route = classify(event)
        if route is None:
            log.debug("event_ignored", event_type=event.type)
            return

        target = reply_target(route, event)
        if target is None:
            log.warning("event_missing_fields", route=route.value)
            return

        bind_context(event_type=event.type, channel=target.channel, ts=event.ts)
        try:
            if route == EventRoute.MENTION:
                await self.handle_mention(event, target)
            elif route == EventRoute.DIRECT_MESSAGE:
                await self.handle_direct_message(event, target)
            else:
                await self.handle_assistant_thread_started(event, target)
        except Exception as e:
            log.exception("event_processing_error", route=route.value, error=str(e))
            await self._apologize(target)
        finally:
            clear_context()

    async def handle_mention(self, event: SlackEvent, target: ReplyTarget) -> None:
        """Answer an app mention, replying under the mention itself."""
        log.info("handling_mention")
        await self._respond(
            target,
            prompt=strip_mentions(event.text),
            history_anchor=event.thread_ts,
            exclude_ts=event.ts,
        )

    async def handle_direct_message(self, event: SlackEvent, target: ReplyTarget) -> None:
        """Answer a direct message, staying in its thread when there is one."""
        log.info("handling_direct_message", subtype=event.subtype)
        await self._respond(
            target,
            prompt=(event.text or "").strip(),
            history_anchor=event.thread_ts,
            exclude_ts=event.ts,
        )

    async def handle_assistant_thread_started(
        self, event: SlackEvent, target: ReplyTarget
    ) -> None:
        """Open an assistant panel conversation.

        Uses the embedded user message as the first prompt when present,
        otherwise posts the configured greeting.
        """
        user_message = event.embedded_user_message()
        if user_message is None:
            log.info("assistant_thread_greeting")
            await self._dispatcher.post(
                target.channel, self._assistant.greeting, target.thread_anchor
            )
            return

        log.info("assistant_thread_started_with_message")
        await self._respond(target, prompt=user_message, history_anchor=None, exclude_ts=None)

    async def _respond(
        self,
        target: ReplyTarget,
        prompt: str,
        history_anchor: str | None,
        exclude_ts: str | None,
    ) -> None:
        """History, then completion, then reply; strictly in sequence."""
        if not prompt:
            log.info("empty_prompt_ignored", channel=target.channel)
            return

        conversation = await self._history.resolve(target.channel, history_anchor, exclude_ts)

        try:
            reply = await self._completion.complete(conversation, prompt)
        except UpstreamCompletionFailure as e:
            log.error("completion_failed", error_type=type(e).__name__, error=str(e))
            reply = self._assistant.fallback_reply
        except Exception as e:
            log.exception("completion_unexpected_error", error=str(e))
            reply = self._assistant.fallback_reply

        await self._dispatcher.post(target.channel, reply, target.thread_anchor)

    async def _apologize(self, target: ReplyTarget) -> None:
        """Post the fallback apology after a failure the chain did not handle."""
        try:
            await self._dispatcher.post(
                target.channel, self._assistant.fallback_reply, target.thread_anchor
            )
        except Exception as e:
            log.exception("fallback_post_failed", error=str(e))


def create_router(
    config: RelayConfig,
    chat: ChatProvider | None = None,
    llm: LLMProvider | None = None,
) -> EventRouter:
    """Factory function to create an EventRouter with all dependencies.

    Args:
        config: Application configuration
        chat: Chat provider override (built from config when None)
        llm: LLM provider override (built from config when None)

    Returns:
        Configured EventRouter instance

    Raises:
        ValueError: If the configured LLM provider is unsupported or missing
    """
    if chat is None:
        from ..adapters.chat.slack import SlackAdapter

        chat = SlackAdapter(config.slack)

    if llm is None:
        llm = create_llm_adapter(config)

    return EventRouter(
        verifier=SignatureVerifier(config.slack.signing_secret, config.slack.replay_window),
        history=HistoryResolver(chat, config.history),
        completion=CompletionInvoker(llm, config.assistant.system_prompt),
        dispatcher=ReplyDispatcher(chat),
        assistant=config.assistant,
    )


def create_llm_adapter(config: RelayConfig) -> LLMProvider:
    """Create an LLM adapter based on configuration.

    Args:
        config: Application configuration

    Returns:
        LLM provider instance

    Raises:
        ValueError: If provider is not supported
    """
    provider = config.llm.provider

    if provider == "openai":
        if not config.llm.openai:
            raise ValueError("OpenAI configuration required when provider is 'openai'")
        # Import here to avoid loading unnecessary dependencies
        from ..adapters.llm.openai import OpenAIAdapter

        return OpenAIAdapter(config.llm.openai)

    if provider == "anthropic":
        if not config.llm.anthropic:
            raise ValueError("Anthropic configuration required when provider is 'anthropic'")
        from ..adapters.llm.anthropic import AnthropicAdapter

        return AnthropicAdapter(config.llm.anthropic)

    raise ValueError(f"Unsupported LLM provider: {provider}")
