"""Core relay components.

This module exports the pipeline building blocks:
- SignatureVerifier: Authenticates inbound Slack requests
- HistoryResolver: Rebuilds prior conversation turns from a thread
- CompletionInvoker: Calls the language model with the system instruction
- ReplyDispatcher: Posts replies back to Slack
- EventRouter: Acknowledges, classifies and dispatches events
"""

from slack_gpt_relay.core.completion import CompletionInvoker
from slack_gpt_relay.core.dispatcher import ReplyDispatcher
from slack_gpt_relay.core.history import HistoryResolver, normalize_thread, strip_mentions
from slack_gpt_relay.core.router import (
    EventRoute,
    EventRouter,
    ReplyTarget,
    RouteResult,
    classify,
    create_llm_adapter,
    create_router,
    reply_target,
)
from slack_gpt_relay.core.verifier import SignatureVerifier, compute_signature, verify_request

__all__ = [
    "CompletionInvoker",
    "EventRoute",
    "EventRouter",
    "HistoryResolver",
    "ReplyDispatcher",
    "ReplyTarget",
    "RouteResult",
    "SignatureVerifier",
    "classify",
    "compute_signature",
    "create_llm_adapter",
    "create_router",
    "normalize_thread",
    "reply_target",
    "strip_mentions",
    "verify_request",
]
