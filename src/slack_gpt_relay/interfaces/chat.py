"""Abstract interface for chat platform integrations."""

from typing import Any, Protocol


class ChatProvider(Protocol):
    """Abstract interface for chat platform integrations.

    This protocol defines the two outbound calls the relay makes against
    the chat platform: reading a thread and posting into one.
    """

    async def fetch_thread(
        self,
        channel_id: str,
        thread_ts: str,
        *,
        paginate: bool = True,
        page_limit: int = 200,
        max_pages: int = 10,
    ) -> list[dict[str, Any]]:
        """
        Fetch the raw messages of a thread, oldest first.

        Args:
            channel_id: Channel containing the thread
            thread_ts: Timestamp of the thread root
            paginate: Follow continuation cursors when True
            page_limit: Messages requested per page
            max_pages: Upper bound on pages fetched

        Returns:
            Platform message dictionaries in chronological order

        Raises:
            UpstreamFetchFailure: If the platform call fails
        """
        ...

    async def post_message(
        self,
        channel_id: str,
        text: str,
        thread_ts: str | None = None,
    ) -> str:
        """
        Post a message to a channel, optionally inside a thread.

        Args:
            channel_id: Target channel identifier
            text: Message text
            thread_ts: Thread root to reply under (omitted when None)

        Returns:
            Timestamp of the posted message

        Raises:
            UpstreamPostFailure: If delivery fails
        """
        ...

    async def auth_test(self) -> dict[str, Any]:
        """
        Validate the bot credentials with the platform.

        Returns:
            Identity payload (team, bot user) for the token

        Raises:
            Exception: Whatever the platform client raises for a bad token
        """
        ...
