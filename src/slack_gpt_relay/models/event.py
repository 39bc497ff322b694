"""Data models for inbound Slack Events API payloads."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict


class EventKind(StrEnum):
    """Payload types the relay distinguishes."""

    URL_VERIFICATION = "url_verification"
    EVENT_CALLBACK = "event_callback"
    APP_MENTION = "app_mention"
    MESSAGE = "message"
    ASSISTANT_THREAD_STARTED = "assistant_thread_started"


class AssistantThread(BaseModel):
    """The assistant panel thread attached to assistant_thread_started."""

    model_config = ConfigDict(extra="allow")

    channel_id: str
    thread_ts: str
    user_id: str | None = None
    context: dict[str, Any] | None = None
    user_message: str | dict[str, Any] | None = None


class SlackEvent(BaseModel):
    """The inner ``event`` object of an event callback."""

    model_config = ConfigDict(extra="allow")

    type: str
    channel: str | None = None
    ts: str | None = None
    thread_ts: str | None = None  # Thread root timestamp for replies in a thread
    text: str | None = None
    user: str | None = None
    bot_id: str | None = None  # Present when the platform authored the message
    channel_type: str | None = None  # "im" for direct messages
    subtype: str | None = None
    assistant_thread: AssistantThread | None = None
    user_message: str | dict[str, Any] | None = None

    @property
    def is_direct_message(self) -> bool:
        """True for a user-authored message in a direct message channel.

        Subtypes are not filtered: a file_share DM carries the caption in
        ``text``, while edits and deletions carry none and are dropped later
        as empty prompts.
        """
        return self.type == EventKind.MESSAGE and self.channel_type == "im" and not self.bot_id

    def embedded_user_message(self) -> str | None:
        """Return the user message carried by an assistant panel start, if any."""
        for candidate in (
            self.user_message,
            self.assistant_thread.user_message if self.assistant_thread else None,
        ):
            if isinstance(candidate, dict):
                candidate = candidate.get("text")
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip()
        return None


class EventEnvelope(BaseModel):
    """Top-level body of a request to the events endpoint."""

    model_config = ConfigDict(extra="allow")

    type: str
    challenge: str | None = None
    token: str | None = None
    team_id: str | None = None
    event_id: str | None = None
    event_time: int | None = None
    event: SlackEvent | None = None
