"""Thread history resolution.

Turns the raw replies of a Slack thread into the prior turns of a model
conversation: bot-authored messages become assistant turns, everything else
becomes user turns, mention markup is removed, empty turns are dropped and
the message that triggered the current request is left out (the caller
appends it as the new user turn).
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

import structlog

from ..errors import UpstreamFetchFailure
from ..models.conversation import Conversation, ConversationTurn, Role

if TYPE_CHECKING:
    from ..config.schema import HistoryConfig
    from ..interfaces.chat import ChatProvider

log = structlog.get_logger()

# <@U123ABC> and <@U123ABC|name>
MENTION_PATTERN = re.compile(r"<@[A-Z0-9]+(?:\|[^>]*)?>")


def strip_mentions(text: str | None) -> str:
    """Remove user mention markup and surrounding whitespace."""
    if not text:
        return ""
    return MENTION_PATTERN.sub("", text).strip()


def normalize_message(message: dict[str, Any]) -> ConversationTurn | None:
    """Map one platform message to a conversation turn.

    Returns:
        The turn, or None when nothing is left after stripping mentions.
    """
    content = strip_mentions(message.get("text"))
    if not content:
        return None
    role = Role.ASSISTANT if message.get("bot_id") else Role.USER
    return ConversationTurn(role=role, content=content)


def normalize_thread(
    messages: Iterable[dict[str, Any]],
    exclude_ts: str | None = None,
) -> Conversation:
    """Normalize thread messages, keeping their order and skipping ``exclude_ts``."""
    turns: list[ConversationTurn] = []
    for message in messages:
        if exclude_ts is not None and message.get("ts") == exclude_ts:
            continue
        turn = normalize_message(message)
        if turn is not None:
            turns.append(turn)
    return tuple(turns)


class HistoryResolver:
    """Rebuilds the prior turns of a thread.

    A fetch failure never fails the request, whatever its cause: the
    resolver logs it and returns an empty conversation so the reply can
    still be produced from the new message alone.

    Example:
        resolver = HistoryResolver(chat, config.history)
        prior = await resolver.resolve("C123", event.thread_ts, exclude_ts=event.ts)
    """

    def __init__(self, chat: ChatProvider, config: HistoryConfig | None = None) -> None:
        """Initialize the resolver.

        Args:
            chat: Chat provider used to read threads
            config: Pagination settings; defaults apply when None
        """
        self._chat = chat
        self._paginate = config.paginate if config else True
        self._page_limit = config.page_limit if config else 200
        self._max_pages = config.max_pages if config else 10

    async def resolve(
        self,
        channel: str,
        thread_anchor: str | None,
        exclude_ts: str | None = None,
    ) -> Conversation:
        """Return the normalized prior turns of a thread.

        Args:
            channel: Channel containing the thread
            thread_anchor: Thread root ts; None means no thread
            exclude_ts: ts of the triggering message, left out of the result

        Returns:
            Conversation turns, oldest first. Empty when there is no thread
            or the fetch failed.
        """
        if not thread_anchor:
            return ()

        try:
            messages = await self._chat.fetch_thread(
                channel,
                thread_anchor,
                paginate=self._paginate,
                page_limit=self._page_limit,
                max_pages=self._max_pages,
            )
            conversation = normalize_thread(messages, exclude_ts=exclude_ts)
        except UpstreamFetchFailure as e:
            log.warning(
                "thread_history_fetch_failed",
                channel=channel,
                thread_ts=thread_anchor,
                error=str(e),
            )
            return ()
        except Exception as e:
            log.exception(
                "thread_history_fetch_failed",
                channel=channel,
                thread_ts=thread_anchor,
                error=str(e),
            )
            return ()

        log.debug(
            "thread_history_resolved",
            channel=channel,
            thread_ts=thread_anchor,
            fetched=len(messages),
            turns=len(conversation),
        )
        return conversation
