"""Fetches canonical message and sender details from the Webex API."""
import logging

from .errors import DetailFetchError
from .models import ResolvedMessage, SenderProfile
from .ports import MessagingClient

logger = logging.getLogger(__name__)


class MessageResolver:
    """Single-read lookups of message text and sender profile.

    No retries happen here; a failed or empty read raises DetailFetchError and
    the caller decides the fallback.
    """

    def __init__(self, client: MessagingClient):
        self.client = client

    async def resolve(self, message_id: str) -> ResolvedMessage:
        try:
            data = await self.client.get_message(message_id)
        except Exception as e:
            logger.error(f"Failed to fetch message details for {message_id}: {e}")
            raise DetailFetchError(f"Could not get message details: {e}") from e

        if not data:
            logger.warning(f"Empty message details for {message_id}")
            raise DetailFetchError("Could not get message details")

        return ResolvedMessage(
            text=data.get("text") or "",
            sender_email=data.get("personEmail") or "",
        )

    async def resolve_sender(self, person_id: str) -> SenderProfile:
        try:
            data = await self.client.get_person(person_id)
        except Exception as e:
            logger.error(f"Failed to fetch person details for {person_id}: {e}")
            raise DetailFetchError(f"Could not get person details: {e}") from e

        if not data:
            logger.warning(f"Empty person details for {person_id}")
            raise DetailFetchError("Could not get person details")

        return SenderProfile.from_api(data)
