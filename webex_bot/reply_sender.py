"""Transmits replies back into a Webex room."""
import logging
from typing import Any, Dict

from .errors import SendError
from .models import MessageSendResult
from .ports import MessagingClient
from .registry import Reply

logger = logging.getLogger(__name__)


def build_message_payload(room_id: str, content: Reply) -> Dict[str, Any]:
    """Build the ``POST /messages`` body for a reply.

    Plain strings go to ``text``. Structured replies must carry ``markdown``
    and may carry card ``attachments``; ``text`` is never set alongside them.

    Raises:
        ValueError: If a structured reply has no markdown
        TypeError: If the content is neither a string nor a mapping
    """
    payload: Dict[str, Any] = {"roomId": room_id}

    if isinstance(content, str):
        payload["text"] = content
        return payload

    if not isinstance(content, dict):
        raise TypeError(f"Unsupported reply content: {type(content).__name__}")

    markdown = content.get("markdown")
    if not markdown:
        raise ValueError("Structured reply requires a markdown field")
    payload["markdown"] = markdown
    if content.get("attachments"):
        payload["attachments"] = content["attachments"]
    return payload


class ReplySender:
    """Exactly one outbound write per send() call."""

    def __init__(self, client: MessagingClient):
        self.client = client

    async def send(self, room_id: str, content: Reply) -> MessageSendResult:
        payload = build_message_payload(room_id, content)
        try:
            data = await self.client.create_message(payload)
        except Exception as e:
            logger.error(f"Failed to send message to room {room_id}: {e}")
            raise SendError(f"Message send failed: {e}") from e
        return MessageSendResult.from_api(data or {})
