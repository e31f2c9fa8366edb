"""Outbound port the dispatch core depends on instead of a concrete SDK."""
from typing import Any, Dict, Protocol, runtime_checkable


@runtime_checkable
class MessagingClient(Protocol):
    """Interface for the Webex messaging API.

    Implementations raise their own transport exceptions; the resolver and
    reply sender translate them into DetailFetchError / SendError.
    """

    async def get_message(self, message_id: str) -> Dict[str, Any]: ...

    async def get_person(self, person_id: str) -> Dict[str, Any]: ...

    async def get_me(self) -> Dict[str, Any]: ...

    async def create_message(self, payload: Dict[str, Any]) -> Dict[str, Any]: ...
