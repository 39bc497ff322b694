"""Tests for inbound event models."""

import pytest
from pydantic import ValidationError

from slack_gpt_relay.models.event import EventEnvelope, EventKind, SlackEvent


class TestEventEnvelope:
    """Test envelope parsing."""

    def test_url_verification(self) -> None:
        """Test the handshake payload."""
        envelope = EventEnvelope.model_validate_json(
            '{"type": "url_verification", "token": "t", "challenge": "abc"}'
        )
        assert envelope.type == EventKind.URL_VERIFICATION
        assert envelope.challenge == "abc"
        assert envelope.event is None

    def test_event_callback(self) -> None:
        """Test a callback with an inner event and unknown extra fields."""
        envelope = EventEnvelope.model_validate(
            {
                "type": "event_callback",
                "team_id": "T1",
                "event_id": "Ev1",
                "event_time": 1700000000,
                "authorizations": [{"user_id": "UBOT"}],
                "event": {
                    "type": "app_mention",
                    "channel": "C1",
                    "ts": "1.000",
                    "text": "<@UBOT> hi",
                    "blocks": [],
                },
            }
        )
        assert envelope.event_id == "Ev1"
        assert envelope.event is not None
        assert envelope.event.type == EventKind.APP_MENTION
        assert envelope.event.text == "<@UBOT> hi"

    def test_type_required(self) -> None:
        """Test an envelope without a type is invalid."""
        with pytest.raises(ValidationError):
            EventEnvelope.model_validate({"challenge": "abc"})


class TestSlackEvent:
    """Test SlackEvent helpers."""

    @pytest.mark.parametrize(
        ("fields", "expected"),
        [
            ({"channel_type": "im", "user": "U1"}, True),
            ({"channel_type": "im", "bot_id": "B1"}, False),
            ({"channel_type": "im", "subtype": "message_deleted"}, True),
            ({"channel_type": "im", "subtype": "file_share"}, True),
            ({"channel_type": "channel", "user": "U1"}, False),
        ],
    )
    def test_is_direct_message(self, fields: dict[str, str], expected: bool) -> None:
        """Test DM detection."""
        assert SlackEvent(type="message", **fields).is_direct_message is expected

    def test_mention_is_not_direct_message(self) -> None:
        """Test non-message events are never DMs."""
        assert SlackEvent(type="app_mention", channel_type="im").is_direct_message is False

    def test_embedded_user_message_from_dict(self) -> None:
        """Test a user_message object contributes its text."""
        event = SlackEvent(type="assistant_thread_started", user_message={"text": "  hi  "})
        assert event.embedded_user_message() == "hi"

    def test_embedded_user_message_from_thread(self) -> None:
        """Test the assistant_thread copy is used as a fallback."""
        event = SlackEvent.model_validate(
            {
                "type": "assistant_thread_started",
                "assistant_thread": {
                    "channel_id": "D1",
                    "thread_ts": "1.000",
                    "user_message": "hello",
                },
            }
        )
        assert event.embedded_user_message() == "hello"

    def test_blank_user_message(self) -> None:
        """Test whitespace-only messages count as absent."""
        event = SlackEvent(type="assistant_thread_started", user_message="   ")
        assert event.embedded_user_message() is None
