"""Input validation for inbound Webex webhook payloads."""
from typing import Any, Dict, Optional

from .constants import ALLOWED_ROOM_TYPES, ROOM_TYPE_DIRECT
from .errors import MalformedEventError
from .models import InboundEvent


def validate_identifier(value: Any, field_name: str) -> str:
    """Validate a Webex resource identifier.

    Args:
        value: Raw value taken from the payload
        field_name: Name of the field (for error messages)

    Returns:
        The identifier with surrounding whitespace removed

    Raises:
        MalformedEventError: If the value is missing, not a string or blank
    """
    if not value or not isinstance(value, str):
        raise MalformedEventError(f"{field_name} must be a non-empty string")

    value = value.strip()

    if not value:
        raise MalformedEventError(f"{field_name} cannot be empty or whitespace")

    return value


def validate_room_type(room_type: Optional[str]) -> str:
    """Validate the room type, defaulting to a direct room when absent.

    Raises:
        MalformedEventError: If the room type is not a known value
    """
    if room_type is None:
        return ROOM_TYPE_DIRECT

    if room_type not in ALLOWED_ROOM_TYPES:
        raise MalformedEventError(
            f"Invalid roomType: {room_type}. Allowed: {', '.join(ALLOWED_ROOM_TYPES)}"
        )

    return room_type


def parse_webhook_event(payload: Dict[str, Any]) -> InboundEvent:
    """Turn a raw webhook envelope into an InboundEvent.

    Args:
        payload: Webhook JSON body, ``{id, resource, event, data: {...}}``

    Returns:
        The normalized event

    Raises:
        MalformedEventError: If the envelope or its ``data`` block is missing
            required identifiers
    """
    if not isinstance(payload, dict):
        raise MalformedEventError("Webhook payload must be a JSON object")

    data = payload.get("data")
    if not isinstance(data, dict):
        raise MalformedEventError("Webhook payload has no data block")

    return InboundEvent(
        message_id=validate_identifier(data.get("id"), "data.id"),
        person_id=validate_identifier(data.get("personId"), "data.personId"),
        room_id=validate_identifier(data.get("roomId"), "data.roomId"),
        room_type=validate_room_type(data.get("roomType")),
        webhook_id=payload.get("id"),
        resource=payload.get("resource"),
        event=payload.get("event"),
    )
