"""Tests for webhook payload validation."""
import pytest

from webex_bot.errors import MalformedEventError
from webex_bot.validation import parse_webhook_event, validate_identifier, validate_room_type


def _payload(**data):
    base = {"id": "msg-1", "personId": "person-1", "roomId": "room-1", "roomType": "group"}
    base.update(data)
    return {"id": "hook-1", "resource": "messages", "event": "created", "data": base}


class TestValidateIdentifier:
    def test_strips_whitespace(self):
        assert validate_identifier("  abc  ", "data.id") == "abc"

    def test_missing_raises(self):
        with pytest.raises(MalformedEventError, match="data.id"):
            validate_identifier(None, "data.id")

    def test_blank_raises(self):
        with pytest.raises(MalformedEventError, match="whitespace"):
            validate_identifier("   ", "data.id")

    def test_non_string_raises(self):
        with pytest.raises(MalformedEventError):
            validate_identifier(123, "data.id")


class TestValidateRoomType:
    def test_known_values(self):
        assert validate_room_type("direct") == "direct"
        assert validate_room_type("group") == "group"

    def test_missing_defaults_to_direct(self):
        assert validate_room_type(None) == "direct"

    def test_unknown_raises(self):
        with pytest.raises(MalformedEventError, match="Invalid roomType"):
            validate_room_type("channel")


class TestParseWebhookEvent:
    def test_full_envelope(self):
        event = parse_webhook_event(_payload())
        assert event.message_id == "msg-1"
        assert event.person_id == "person-1"
        assert event.room_id == "room-1"
        assert event.room_type == "group"
        assert event.webhook_id == "hook-1"
        assert event.resource == "messages"
        assert event.event == "created"

    def test_minimal_envelope(self):
        event = parse_webhook_event(
            {"data": {"id": "m", "personId": "p", "roomId": "r", "roomType": "direct"}}
        )
        assert event.resource is None
        assert event.webhook_id is None

    def test_not_a_dict(self):
        with pytest.raises(MalformedEventError, match="JSON object"):
            parse_webhook_event(["data"])

    def test_missing_data(self):
        with pytest.raises(MalformedEventError, match="no data block"):
            parse_webhook_event({"id": "hook-1"})

    def test_missing_room(self):
        with pytest.raises(MalformedEventError, match="data.roomId"):
            parse_webhook_event(_payload(roomId=None))
