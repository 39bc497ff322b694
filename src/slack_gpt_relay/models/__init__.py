"""Data models and transfer objects."""

from .conversation import CompletionRequest, Conversation, ConversationTurn, Role
from .event import AssistantThread, EventEnvelope, EventKind, SlackEvent

__all__ = [
    # Event models
    "EventKind",
    "EventEnvelope",
    "SlackEvent",
    "AssistantThread",
    # Conversation models
    "Role",
    "ConversationTurn",
    "Conversation",
    "CompletionRequest",
]
