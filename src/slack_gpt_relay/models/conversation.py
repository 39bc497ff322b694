"""Data models for conversation state sent to the language model."""

from dataclasses import dataclass
from enum import StrEnum


class Role(StrEnum):
    """Author of a conversation turn."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ConversationTurn:
    """One normalized message of a thread."""

    role: Role
    content: str

    def as_message(self) -> dict[str, str]:
        """Render as a chat completion message."""
        return {"role": self.role.value, "content": self.content}


# Ordered oldest first; the triggering message is never included
Conversation = tuple[ConversationTurn, ...]


@dataclass(frozen=True)
class CompletionRequest:
    """Everything needed for one completion call."""

    system_prompt: str
    prior_turns: Conversation
    new_user_text: str

    def to_messages(self, include_system: bool = True) -> list[dict[str, str]]:
        """Build the ordered message list ``[system, *prior_turns, user]``."""
        messages: list[dict[str, str]] = []
        if include_system:
            messages.append({"role": Role.SYSTEM.value, "content": self.system_prompt})
        messages.extend(turn.as_message() for turn in self.prior_turns)
        messages.append({"role": Role.USER.value, "content": self.new_user_text})
        return messages
