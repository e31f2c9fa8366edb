"""Value types passed through the dispatch pipeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .constants import UNKNOWN_SENDER_NAME


@dataclass(frozen=True)
class InboundEvent:
    """Normalized webhook notification for one new message."""

    message_id: str
    person_id: str
    room_id: str
    room_type: str
    webhook_id: Optional[str] = None
    resource: Optional[str] = None
    event: Optional[str] = None


@dataclass(frozen=True)
class ResolvedMessage:
    """Canonical text and sender email of a message."""

    text: str
    sender_email: str


@dataclass(frozen=True)
class SenderProfile:
    """Webex person details for the message sender."""

    id: str
    display_name: str = UNKNOWN_SENDER_NAME
    emails: tuple[str, ...] = ()
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None
    org_id: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def primary_email(self) -> Optional[str]:
        return self.emails[0] if self.emails else None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "SenderProfile":
        """Build a profile from a ``GET /people/{id}`` response body."""
        return cls(
            id=data.get("id", ""),
            display_name=data.get("displayName") or UNKNOWN_SENDER_NAME,
            emails=tuple(data.get("emails") or ()),
            first_name=data.get("firstName"),
            last_name=data.get("lastName"),
            avatar_url=data.get("avatar"),
            org_id=data.get("orgId"),
            created_at=data.get("created"),
        )

    @classmethod
    def placeholder(cls, person_id: str, email: str = "") -> "SenderProfile":
        """Profile used when the sender lookup fails."""
        return cls(id=person_id, emails=(email,) if email else ())


@dataclass(frozen=True)
class Person:
    display_name: str
    email: str


@dataclass(frozen=True)
class Trigger:
    """The (sender, text) pair a command handler runs against."""

    person: Person
    text: str = ""


@dataclass(frozen=True)
class MessageSendResult:
    """Result of ``POST /messages``."""

    id: str
    room_id: str
    text: Optional[str] = None
    markdown: Optional[str] = None
    created: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "MessageSendResult":
        return cls(
            id=data.get("id", ""),
            room_id=data.get("roomId", ""),
            text=data.get("text"),
            markdown=data.get("markdown"),
            created=data.get("created"),
            raw=data,
        )
