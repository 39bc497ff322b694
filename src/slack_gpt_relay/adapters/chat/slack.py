"""Slack chat adapter using the slack_sdk async Web API client.

This module implements the ChatProvider protocol for Slack. It only talks
to the Web API; inbound events arrive over HTTP through the server module.

Features:
- Thread history via conversations.replies with cursor pagination
- Threaded and top-level replies via chat.postMessage
- Platform failures wrapped in the relay error hierarchy
"""

from __future__ import annotations

from typing import Any

import aiohttp
import structlog
from slack_sdk.errors import SlackApiError, SlackClientError
from slack_sdk.web.async_client import AsyncWebClient

from ...config.schema import SlackConfig
from ...errors import UpstreamFetchFailure, UpstreamPostFailure

log = structlog.get_logger()

# Failures below the API layer: connection resets, DNS, timeouts
TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (
    SlackClientError,
    aiohttp.ClientError,
    TimeoutError,
)


class SlackAdapter:
    """Slack chat adapter implementing the ChatProvider protocol.

    Example:
        config = SlackConfig(bot_token="xoxb-...", signing_secret="...")
        adapter = SlackAdapter(config)

        messages = await adapter.fetch_thread("C123", "1700000000.000100")
        await adapter.post_message("C123", "Hello!", thread_ts="1700000000.000100")
    """

    def __init__(self, config: SlackConfig, client: AsyncWebClient | None = None) -> None:
        """Initialize the Slack adapter.

        Args:
            config: Slack-specific configuration.
            client: Pre-built Web API client. Created from the bot token if None.
        """
        self._config = config
        self._client = client or AsyncWebClient(token=config.bot_token)

    @property
    def client(self) -> AsyncWebClient:
        """Underlying Web API client."""
        return self._client

    async def fetch_thread(
        self,
        channel_id: str,
        thread_ts: str,
        *,
        paginate: bool = True,
        page_limit: int = 200,
        max_pages: int = 10,
    ) -> list[dict[str, Any]]:
        """Fetch all replies of a thread, oldest first.

        Follows ``response_metadata.next_cursor`` until it is empty or
        ``max_pages`` pages have been read. With ``paginate=False`` a single
        call is made.

        Args:
            channel_id: Channel containing the thread.
            thread_ts: Timestamp of the thread root.
            paginate: Follow continuation cursors.
            page_limit: Messages requested per page.
            max_pages: Upper bound on pages fetched.

        Returns:
            Raw message dictionaries in the order Slack returned them.

        Raises:
            UpstreamFetchFailure: If any page fails or returns ok=false.
        """
        messages: list[dict[str, Any]] = []
        cursor: str | None = None
        pages = 0

        while True:
            kwargs: dict[str, Any] = {"channel": channel_id, "ts": thread_ts, "limit": page_limit}
            if cursor:
                kwargs["cursor"] = cursor

            try:
                result = await self._client.conversations_replies(**kwargs)
            except SlackApiError as e:
                error = e.response.get("error") if e.response is not None else None
                log.warning(
                    "conversations_replies_failed",
                    channel_id=channel_id,
                    thread_ts=thread_ts,
                    error=error or str(e),
                )
                raise UpstreamFetchFailure(f"Slack API error: {error or e}") from e
            except TRANSPORT_ERRORS as e:
                log.warning(
                    "conversations_replies_unreachable",
                    channel_id=channel_id,
                    thread_ts=thread_ts,
                    error=str(e),
                )
                raise UpstreamFetchFailure(f"Slack request failed: {e}") from e

            if not result.get("ok", False):
                raise UpstreamFetchFailure(f"Slack API error: {result.get('error', 'unknown')}")

            messages.extend(result.get("messages") or [])
            pages += 1

            metadata = result.get("response_metadata") or {}
            cursor = metadata.get("next_cursor") or None

            if not paginate or not cursor:
                break
            if pages >= max_pages:
                log.warning(
                    "thread_history_truncated",
                    channel_id=channel_id,
                    thread_ts=thread_ts,
                    pages=pages,
                )
                break

        log.debug(
            "thread_fetched",
            channel_id=channel_id,
            thread_ts=thread_ts,
            messages=len(messages),
            pages=pages,
        )
        return messages

    async def post_message(
        self,
        channel_id: str,
        text: str,
        thread_ts: str | None = None,
    ) -> str:
        """Post a message, inside a thread when ``thread_ts`` is given.

        Args:
            channel_id: Target channel identifier.
            text: Message text.
            thread_ts: Thread root to reply under.

        Returns:
            Timestamp (ts) of the posted message.

        Raises:
            UpstreamPostFailure: If delivery fails.
        """
        kwargs: dict[str, Any] = {
            "channel": channel_id,
            "text": text,
        }

        if thread_ts:
            kwargs["thread_ts"] = thread_ts

        try:
            result = await self._client.chat_postMessage(**kwargs)
        except SlackApiError as e:
            error = e.response.get("error") if e.response is not None else None
            raise UpstreamPostFailure(f"Slack API error: {error or e}") from e
        except TRANSPORT_ERRORS as e:
            raise UpstreamPostFailure(f"Slack request failed: {e}") from e

        if not result.get("ok", False):
            raise UpstreamPostFailure(f"Slack API error: {result.get('error', 'unknown')}")

        message_ts: str = result.get("ts", "")
        log.debug(
            "message_sent",
            channel_id=channel_id,
            message_ts=message_ts,
            thread_ts=thread_ts,
        )
        return message_ts

    async def auth_test(self) -> dict[str, Any]:
        """Validate the bot token.

        Returns:
            The auth.test response payload.

        Raises:
            SlackApiError: If the token is rejected.
        """
        result = await self._client.auth_test()
        return dict(result.data) if hasattr(result, "data") else dict(result)
