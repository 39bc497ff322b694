"""Slack GPT relay: answers Slack mentions and direct messages with a language model."""

from slack_gpt_relay._version import __version__

__all__ = ["__version__"]
