"""Tests for Slack request signature verification."""

from __future__ import annotations

import hashlib
import hmac

import pytest

from slack_gpt_relay.core.verifier import (
    SignatureVerifier,
    compute_signature,
    verify_request,
)

SECRET = "test-signing-secret"
NOW = 1_700_000_000
BODY = b'{"type":"event_callback","event":{"type":"app_mention","text":"hi"}}'


def headers_for(timestamp: int | str, body: bytes = BODY, secret: str = SECRET) -> dict[str, str]:
    """Headers carrying a correct signature for ``body`` at ``timestamp``."""
    return {
        "x-slack-request-timestamp": str(timestamp),
        "x-slack-signature": compute_signature(secret, str(timestamp), body),
    }


class TestComputeSignature:
    """Test signature computation."""

    def test_matches_slack_algorithm(self) -> None:
        """Test the v0 base string and HMAC-SHA256 digest."""
        expected = (
            "v0="
            + hmac.new(
                SECRET.encode(),
                f"v0:{NOW}:".encode() + BODY,
                hashlib.sha256,
            ).hexdigest()
        )
        assert compute_signature(SECRET, str(NOW), BODY) == expected

    def test_signature_depends_on_body(self) -> None:
        """Test that a different body gives a different signature."""
        assert compute_signature(SECRET, str(NOW), BODY) != compute_signature(
            SECRET, str(NOW), BODY + b" "
        )


class TestVerifyRequest:
    """Test verify_request acceptance and rejection."""

    def test_valid_request(self) -> None:
        """Test a correctly signed, fresh request is accepted."""
        assert verify_request(headers_for(NOW), BODY, SECRET, now=NOW) is True

    @pytest.mark.parametrize("skew", [0, 1, 299, 300, -1, -299, -300])
    def test_within_replay_window(self, skew: int) -> None:
        """Test timestamps up to 300 seconds away in either direction pass."""
        timestamp = NOW - skew
        assert verify_request(headers_for(timestamp), BODY, SECRET, now=NOW) is True

    @pytest.mark.parametrize("skew", [301, 600, -301, -600])
    def test_outside_replay_window(self, skew: int) -> None:
        """Test validly signed requests more than 300 seconds away are rejected."""
        timestamp = NOW - skew
        assert verify_request(headers_for(timestamp), BODY, SECRET, now=NOW) is False

    def test_boundary_exactly_300_seconds_old(self) -> None:
        """Test the window boundary is inclusive at 300 seconds."""
        assert verify_request(headers_for(NOW - 300), BODY, SECRET, now=NOW) is True
        assert verify_request(headers_for(NOW - 301), BODY, SECRET, now=NOW) is False

    def test_custom_max_age(self) -> None:
        """Test a narrower replay window."""
        headers = headers_for(NOW - 60)
        assert verify_request(headers, BODY, SECRET, now=NOW, max_age=60) is True
        assert verify_request(headers, BODY, SECRET, now=NOW, max_age=59) is False

    def test_signature_mismatch(self) -> None:
        """Test a signature made with another secret is rejected."""
        headers = headers_for(NOW, secret="some-other-secret")
        assert verify_request(headers, BODY, SECRET, now=NOW) is False

    def test_tampered_body(self) -> None:
        """Test a body altered after signing is rejected."""
        headers = headers_for(NOW)
        assert verify_request(headers, BODY.replace(b"hi", b"ho"), SECRET, now=NOW) is False

    def test_signature_checked_even_when_fresh(self) -> None:
        """Test a fresh timestamp alone is not sufficient."""
        headers = {"x-slack-request-timestamp": str(NOW), "x-slack-signature": "v0=deadbeef"}
        assert verify_request(headers, BODY, SECRET, now=NOW) is False

    def test_missing_timestamp(self) -> None:
        """Test a request without a timestamp header is rejected."""
        headers = headers_for(NOW)
        del headers["x-slack-request-timestamp"]
        assert verify_request(headers, BODY, SECRET, now=NOW) is False

    @pytest.mark.parametrize("timestamp", ["", "abc", "17000000O0", "1.5e9"])
    def test_non_numeric_timestamp(self, timestamp: str) -> None:
        """Test malformed timestamps are rejected."""
        headers = {
            "x-slack-request-timestamp": timestamp,
            "x-slack-signature": compute_signature(SECRET, timestamp, BODY),
        }
        assert verify_request(headers, BODY, SECRET, now=NOW) is False

    def test_missing_signature(self) -> None:
        """Test a request without a signature header is rejected."""
        headers = headers_for(NOW)
        del headers["x-slack-signature"]
        assert verify_request(headers, BODY, SECRET, now=NOW) is False

    def test_empty_secret(self) -> None:
        """Test nothing verifies against an empty secret."""
        headers = headers_for(NOW, secret="")
        assert verify_request(headers, BODY, "", now=NOW) is False

    def test_headers_are_case_insensitive(self) -> None:
        """Test mixed-case header names are found."""
        lower = headers_for(NOW)
        headers = {
            "X-Slack-Request-Timestamp": lower["x-slack-request-timestamp"],
            "X-Slack-Signature": lower["x-slack-signature"],
        }
        assert verify_request(headers, BODY, SECRET, now=NOW) is True

    def test_defaults_to_current_time(self) -> None:
        """Test the local clock is used when now is not given."""
        assert verify_request(headers_for(NOW), BODY, SECRET) is False


class TestSignatureVerifier:
    """Test the bound SignatureVerifier."""

    def test_verify_uses_bound_secret(self) -> None:
        """Test verification with the bound secret."""
        verifier = SignatureVerifier(SECRET)
        headers = {
            "x-slack-request-timestamp": str(NOW),
            "x-slack-signature": verifier.sign(str(NOW), BODY),
        }
        assert verifier.verify(headers, BODY, now=NOW) is True

    def test_verify_uses_bound_window(self) -> None:
        """Test the configured window is applied."""
        verifier = SignatureVerifier(SECRET, max_age=10)
        assert verifier.max_age == 10
        assert verifier.verify(headers_for(NOW - 11), BODY, now=NOW) is False
