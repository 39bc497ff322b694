"""Concrete implementations of provider interfaces."""

from .chat.slack import SlackAdapter
from .llm.anthropic import AnthropicAdapter
from .llm.openai import OpenAIAdapter

__all__ = [
    "AnthropicAdapter",
    "OpenAIAdapter",
    "SlackAdapter",
]
