"""Protocol definitions for pluggable adapters."""

from .chat import ChatProvider
from .llm import LLMProvider

__all__ = ["ChatProvider", "LLMProvider"]
