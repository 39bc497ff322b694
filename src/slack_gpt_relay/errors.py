"""Exception hierarchy for the relay.

Each failure class maps to one recovery rule in the event pipeline:

- AuthFailure: request rejected with 401, nothing else happens
- UpstreamFetchFailure: thread history replaced by an empty conversation
- UpstreamCompletionFailure: the fallback apology is posted instead
- UpstreamPostFailure: logged, the event ends there
"""

from __future__ import annotations


class RelayError(Exception):
    """Base exception for all relay errors."""


class AuthFailure(RelayError):
    """Request signature or timestamp did not verify."""


class UpstreamFetchFailure(RelayError):
    """Fetching thread history from the chat platform failed."""


class UpstreamCompletionFailure(RelayError):
    """The language-model completion call failed."""


class UpstreamModelError(UpstreamCompletionFailure):
    """The model provider answered with an error or an unusable response.

    Attributes:
        status_code: HTTP status returned by the provider, if known.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamNetworkError(UpstreamCompletionFailure):
    """The model provider could not be reached or timed out."""


class UpstreamPostFailure(RelayError):
    """Posting a reply to the chat platform failed."""
