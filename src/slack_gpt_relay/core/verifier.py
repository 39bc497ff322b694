"""Slack request signature verification.

Every inbound request must carry an ``x-slack-signature`` header computed as
``"v0=" + hex(HMAC-SHA256(secret, "v0:" + timestamp + ":" + body))`` and an
``x-slack-request-timestamp`` header no further than the replay window from
the local clock. Both conditions are required: a captured, validly signed
request must still be refused once it is older than the window.
"""

from __future__ import annotations

import hashlib
import hmac
import time
from collections.abc import Mapping

import structlog

log = structlog.get_logger()

SIGNATURE_HEADER = "x-slack-signature"
TIMESTAMP_HEADER = "x-slack-request-timestamp"
SIGNATURE_VERSION = "v0"
DEFAULT_MAX_AGE = 300


def _header(headers: Mapping[str, str], name: str) -> str | None:
    """Case-insensitive header lookup."""
    value = headers.get(name)
    if value is not None:
        return value
    for key, candidate in headers.items():
        if key.lower() == name:
            return candidate
    return None


def compute_signature(secret: str, timestamp: str, body: bytes) -> str:
    """Return the ``v0=`` signature Slack would send for this body."""
    basestring = f"{SIGNATURE_VERSION}:{timestamp}:".encode() + body
    digest = hmac.new(secret.encode(), basestring, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_VERSION}={digest}"


def verify_request(
    headers: Mapping[str, str],
    raw_body: bytes,
    secret: str,
    now: float | None = None,
    max_age: int = DEFAULT_MAX_AGE,
) -> bool:
    """Check that a request was signed by Slack and is fresh.

    Args:
        headers: Request headers (any case)
        raw_body: Body bytes exactly as received
        secret: Slack signing secret
        now: Current unix time; defaults to ``time.time()``
        max_age: Allowed distance in seconds between ``now`` and the
            request timestamp, in either direction

    Returns:
        True only if the timestamp is within the window and the signature
        matches.
    """
    if not secret:
        log.error("signing_secret_missing")
        return False

    timestamp = _header(headers, TIMESTAMP_HEADER)
    if not timestamp:
        log.warning("request_timestamp_missing")
        return False

    try:
        request_time = int(timestamp)
    except ValueError:
        log.warning("request_timestamp_invalid", timestamp=timestamp[:32])
        return False

    current = time.time() if now is None else now
    if abs(current - request_time) > max_age:
        log.warning(
            "request_timestamp_stale",
            timestamp=request_time,
            skew=int(current - request_time),
        )
        return False

    signature = _header(headers, SIGNATURE_HEADER)
    if not signature:
        log.warning("request_signature_missing")
        return False

    expected = compute_signature(secret, timestamp, raw_body)
    if not hmac.compare_digest(expected.encode(), signature.encode()):
        log.warning("request_signature_mismatch")
        return False

    return True


class SignatureVerifier:
    """Verifier bound to one signing secret and replay window.

    Example:
        verifier = SignatureVerifier(config.slack.signing_secret)
        if not verifier.verify(request.headers, await request.body()):
            ...
    """

    def __init__(self, signing_secret: str, max_age: int = DEFAULT_MAX_AGE) -> None:
        self._secret = signing_secret
        self._max_age = max_age

    @property
    def max_age(self) -> int:
        """Replay window in seconds."""
        return self._max_age

    def sign(self, timestamp: str, body: bytes) -> str:
        """Compute the signature header value for a body."""
        return compute_signature(self._secret, timestamp, body)

    def verify(
        self,
        headers: Mapping[str, str],
        raw_body: bytes,
        now: float | None = None,
    ) -> bool:
        """Verify a request against the bound secret and window."""
        return verify_request(headers, raw_body, self._secret, now=now, max_age=self._max_age)
