"""Tests for message/sender resolution, the self filter and reply sending."""
from unittest.mock import AsyncMock, MagicMock

import pytest

from webex_bot.errors import DetailFetchError, SendError
from webex_bot.identity import BotIdentity, is_own_message
from webex_bot.models import ResolvedMessage
from webex_bot.reply_sender import ReplySender, build_message_payload
from webex_bot.resolver import MessageResolver


def _client(**methods):
    client = MagicMock()
    for name, value in methods.items():
        setattr(client, name, value)
    return client


# ---------------------------------------------------------------------------
# MessageResolver
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_resolve_message():
    client = _client(get_message=AsyncMock(return_value={"text": "안녕", "personEmail": "a@b.com"}))
    message = await MessageResolver(client).resolve("msg-1")

    assert message == ResolvedMessage(text="안녕", sender_email="a@b.com")
    client.get_message.assert_awaited_once_with("msg-1")


@pytest.mark.asyncio
async def test_resolve_message_missing_text_is_empty_string():
    client = _client(get_message=AsyncMock(return_value={"id": "msg-1", "personEmail": "a@b.com"}))
    message = await MessageResolver(client).resolve("msg-1")
    assert message.text == ""


@pytest.mark.asyncio
async def test_resolve_message_api_error():
    client = _client(get_message=AsyncMock(side_effect=RuntimeError("boom")))
    with pytest.raises(DetailFetchError, match="message details"):
        await MessageResolver(client).resolve("msg-1")


@pytest.mark.asyncio
async def test_resolve_message_empty_body():
    client = _client(get_message=AsyncMock(return_value={}))
    with pytest.raises(DetailFetchError):
        await MessageResolver(client).resolve("msg-1")


@pytest.mark.asyncio
async def test_resolve_sender_maps_fields():
    client = _client(
        get_person=AsyncMock(
            return_value={
                "id": "p1",
                "emails": ["hong@example.com", "alt@example.com"],
                "displayName": "홍길동",
                "firstName": "길동",
                "lastName": "홍",
                "avatar": "https://avatar",
                "orgId": "org",
                "created": "2024-01-01T00:00:00.000Z",
            }
        )
    )
    profile = await MessageResolver(client).resolve_sender("p1")

    assert profile.display_name == "홍길동"
    assert profile.primary_email == "hong@example.com"
    assert profile.emails == ("hong@example.com", "alt@example.com")
    assert profile.avatar_url == "https://avatar"
    assert profile.created_at == "2024-01-01T00:00:00.000Z"


@pytest.mark.asyncio
async def test_resolve_sender_missing_display_name_uses_placeholder():
    client = _client(get_person=AsyncMock(return_value={"id": "p1", "emails": []}))
    profile = await MessageResolver(client).resolve_sender("p1")

    assert profile.display_name == "알 수 없는 사용자"
    assert profile.primary_email is None


@pytest.mark.asyncio
async def test_resolve_sender_api_error():
    client = _client(get_person=AsyncMock(side_effect=RuntimeError("boom")))
    with pytest.raises(DetailFetchError, match="person details"):
        await MessageResolver(client).resolve_sender("p1")


# ---------------------------------------------------------------------------
# Self filter / identity
# ---------------------------------------------------------------------------


class TestIsOwnMessage:
    def test_exact_match(self):
        assert is_own_message(ResolvedMessage("hi", "bot@webex.bot"), "bot@webex.bot")

    def test_other_sender(self):
        assert not is_own_message(ResolvedMessage("hi", "user@x.com"), "bot@webex.bot")

    def test_case_differs(self):
        assert not is_own_message(ResolvedMessage("hi", "Bot@Webex.bot"), "bot@webex.bot")

    def test_unknown_identity(self):
        assert not is_own_message(ResolvedMessage("hi", ""), None)


@pytest.mark.asyncio
async def test_identity_refresh_and_cache():
    client = _client(get_me=AsyncMock(return_value={"emails": ["bot@webex.bot"], "displayName": "Bot"}))
    identity = BotIdentity(client)

    assert await identity.get_email() == "bot@webex.bot"
    assert await identity.get_email() == "bot@webex.bot"
    assert identity.display_name == "Bot"
    client.get_me.assert_awaited_once()

    client.get_me.return_value = {"emails": ["new@webex.bot"]}
    assert await identity.refresh() == "new@webex.bot"
    assert identity.email == "new@webex.bot"


@pytest.mark.asyncio
async def test_identity_without_email_raises():
    client = _client(get_me=AsyncMock(return_value={"emails": []}))
    with pytest.raises(DetailFetchError, match="no email"):
        await BotIdentity(client).refresh()


@pytest.mark.asyncio
async def test_identity_api_error_raises():
    client = _client(get_me=AsyncMock(side_effect=RuntimeError("boom")))
    with pytest.raises(DetailFetchError):
        await BotIdentity(client).get_email()


# ---------------------------------------------------------------------------
# ReplySender
# ---------------------------------------------------------------------------


class TestBuildMessagePayload:
    def test_text(self):
        assert build_message_payload("r1", "hello") == {"roomId": "r1", "text": "hello"}

    def test_markdown(self):
        assert build_message_payload("r1", {"markdown": "**hi**", "text": "ignored"}) == {
            "roomId": "r1",
            "markdown": "**hi**",
        }

    def test_markdown_with_card(self):
        card = [{"contentType": "application/vnd.microsoft.card.adaptive", "content": {}}]
        payload = build_message_payload("r1", {"markdown": "card", "attachments": card})
        assert payload["attachments"] == card
        assert "text" not in payload

    def test_structured_without_markdown(self):
        with pytest.raises(ValueError, match="markdown"):
            build_message_payload("r1", {"attachments": []})

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            build_message_payload("r1", 42)


@pytest.mark.asyncio
async def test_send_makes_one_call_and_maps_result():
    client = _client(
        create_message=AsyncMock(return_value={"id": "m1", "roomId": "r1", "text": "hello", "created": "now"})
    )
    result = await ReplySender(client).send("r1", "hello")

    client.create_message.assert_awaited_once_with({"roomId": "r1", "text": "hello"})
    assert result.id == "m1"
    assert result.room_id == "r1"
    assert result.text == "hello"


@pytest.mark.asyncio
async def test_send_transport_failure_raises_send_error():
    client = _client(create_message=AsyncMock(side_effect=RuntimeError("down")))
    with pytest.raises(SendError, match="down"):
        await ReplySender(client).send("r1", "hello")


def test_identity_display_name_is_read_only():
    identity = BotIdentity(MagicMock(), email="bot@webex.bot")
    with pytest.raises(AttributeError):
        identity.display_name = "Other"
