"""Best-effort reply delivery."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from ..errors import UpstreamPostFailure

if TYPE_CHECKING:
    from ..interfaces.chat import ChatProvider

log = structlog.get_logger()


class ReplyDispatcher:
    """Posts replies as one-way notifications.

    ``post`` returns nothing and never raises for delivery problems: the
    HTTP acknowledgment has already gone out, so a failure is only logged.
    """

    def __init__(self, chat: ChatProvider) -> None:
        self._chat = chat

    async def post(self, channel: str, text: str, thread_anchor: str | None = None) -> None:
        """Post ``text`` to ``channel``, threaded under ``thread_anchor`` if known."""
        try:
            message_ts = await self._chat.post_message(channel, text, thread_ts=thread_anchor)
        except UpstreamPostFailure as e:
            log.error(
                "reply_post_failed",
                channel=channel,
                thread_ts=thread_anchor,
                error=str(e),
            )
            return

        log.info("reply_posted", channel=channel, thread_ts=thread_anchor, message_ts=message_ts)
