"""Bot identity and the self-message filter."""
import logging
from typing import Optional

from .errors import DetailFetchError
from .models import ResolvedMessage
from .ports import MessagingClient

logger = logging.getLogger(__name__)


def is_own_message(message: ResolvedMessage, bot_email: Optional[str]) -> bool:
    """True iff the message was sent by the bot itself (exact, case-sensitive)."""
    if not bot_email:
        return False
    return message.sender_email == bot_email


class BotIdentity:
    """The bot's own email, fetched from ``GET /people/me`` and cached.

    The value changes rarely, so it is loaded on first use and only re-read
    when refresh() is called explicitly.
    """

    def __init__(self, client: MessagingClient, email: Optional[str] = None):
        self.client = client
        self._email = email
        self._display_name: Optional[str] = None

    @property
    def email(self) -> Optional[str]:
        return self._email

    @property
    def display_name(self) -> Optional[str]:
        return self._display_name

    async def refresh(self) -> str:
        """Re-read the bot's identity from the API.

        Raises:
            DetailFetchError: If the lookup fails or returns no email
        """
        try:
            data = await self.client.get_me()
        except Exception as e:
            logger.error(f"Failed to fetch bot identity: {e}")
            raise DetailFetchError(f"Could not get bot identity: {e}") from e

        emails = (data or {}).get("emails") or []
        if not emails:
            raise DetailFetchError("Bot identity has no email")

        self._email = emails[0]
        self._display_name = data.get("displayName")
        logger.info(f"Bot identity loaded: {self._email}")
        return self._email

    async def get_email(self) -> str:
        if self._email is None:
            return await self.refresh()
        return self._email
