"""Webex webhook handler: turns one webhook event into at most one reply.

Architecture overview:
  Webex Cloud  ──webhook POST──►  FastAPI (main.py)
                                      │
                                      ▼
                          WebexBotHandler.process_webhook()
                                      │
                                      ▼
                         resource != messages  ──►  ignored
                                      │
                                      ▼
                         parse_webhook_event()   (MalformedEventError)
                                      │
                                      ▼
                         MessageResolver.resolve()   (DetailFetchError)
                                      │
                                      ▼
                         is_own_message()  ──yes──►  ignored
                                      │
                                      ▼
                         CommandRegistry.match()  ──none──►  unknown_command
                                      │
                                      ▼
                         handler(bot, trigger)  ──raises──►  failure notice
                                      │
                                      ▼
                         ReplySender.send()  (POST /messages)

Key design decisions:
  - process_webhook() never raises. Every failure becomes a status dict so the
    webhook transport always acknowledges the delivery.
  - No retries and no deduplication. Webex re-delivering a message means the
    command runs again.
  - The bot identity is fetched once and cached on BotIdentity. Events are not
    dispatched while the identity is unknown, since the bot could otherwise
    answer its own replies forever.
  - Users never see raw error text, only the generic failure notice.
"""
import inspect
import logging
import time
from typing import Any, Dict, Optional

from webex_bot.constants import (
    HANDLER_FAILURE_NOTICE,
    STATUS_ERROR,
    STATUS_IGNORED,
    STATUS_SUCCESS,
    STATUS_UNKNOWN_COMMAND,
    WEBHOOK_RESOURCE_MESSAGES,
)
from webex_bot.errors import DetailFetchError, HandlerError, MalformedEventError, SendError
from webex_bot.identity import BotIdentity, is_own_message
from webex_bot.models import InboundEvent, MessageSendResult, Person, SenderProfile, Trigger
from webex_bot.ports import MessagingClient
from webex_bot.registry import CommandDefinition, CommandRegistry, Reply
from webex_bot.reply_sender import ReplySender, build_message_payload
from webex_bot.resolver import MessageResolver
from webex_bot.validation import parse_webhook_event

from app.metrics import API_ERRORS, COMMAND_LATENCY, COMMAND_TOTAL, WEBHOOK_TOTAL

logger = logging.getLogger(__name__)


class BotHandle:
    """The ``say`` capability bound to a single room."""

    def __init__(self, room_id: str, sender: ReplySender):
        self.room_id = room_id
        self._sender = sender
        self.replies_sent = 0

    @property
    def replied(self) -> bool:
        return self.replies_sent > 0

    async def say(self, content: Reply) -> MessageSendResult:
        result = await self._sender.send(self.room_id, content)
        self.replies_sent += 1
        return result


class WebexBotHandler:
    """Dispatcher for Webex message webhooks."""

    def __init__(
        self,
        client: MessagingClient,
        registry: CommandRegistry,
        identity: Optional[BotIdentity] = None,
    ):
        """Wire the dispatcher to its collaborators.

        Args:
            client: Messaging API implementation (WebexApiClient in production).
            registry: Commands to match against; read-only after startup.
            identity: Bot identity cache. Built from ``client`` when omitted.
        """
        self.client = client
        self.registry = registry
        self.identity = identity or BotIdentity(client)
        self.resolver = MessageResolver(client)
        self.sender = ReplySender(client)

    async def initialize(self) -> None:
        """Load the bot identity ahead of the first webhook.

        Failure is logged only; the identity is retried lazily per event.
        """
        try:
            await self.identity.refresh()
        except DetailFetchError as e:
            logger.error(f"Bot identity unavailable at startup: {e}")

    # ------------------------------------------------------------------
    # Webhook entry point (called by main.py's FastAPI route)
    # ------------------------------------------------------------------

    async def process_webhook(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Handle one webhook envelope from Webex.

        Args:
            payload: Raw JSON body of the webhook POST.

        Returns:
            ``{"status": "success"|"ignored"|"error"|"unknown_command",
            "message"?: str, "command"?: str}``
        """
        try:
            result = await self._dispatch(payload)
        except Exception as e:
            # Anything unexpected still has to be acknowledged normally.
            logger.exception(f"Webhook processing error: {e}")
            result = {"status": STATUS_ERROR, "message": str(e)}

        WEBHOOK_TOTAL.labels(status=result["status"]).inc()
        return result

    async def _dispatch(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        # Other resources (rooms, memberships) carry differently shaped data blocks.
        resource = payload.get("resource") if isinstance(payload, dict) else None
        if resource and resource != WEBHOOK_RESOURCE_MESSAGES:
            logger.debug(f"Ignoring {resource}/{payload.get('event')} webhook")
            return {"status": STATUS_IGNORED, "message": "Unsupported resource"}

        try:
            event = parse_webhook_event(payload)
        except MalformedEventError as e:
            logger.warning(f"Invalid webhook data: {e}")
            return {"status": STATUS_ERROR, "message": "Invalid webhook data"}

        logger.info(f"Webhook received: {event.webhook_id} (message {event.message_id})")

        try:
            message = await self.resolver.resolve(event.message_id)
        except DetailFetchError as e:
            API_ERRORS.labels(operation="message").inc()
            return {"status": STATUS_ERROR, "message": str(e)}

        try:
            bot_email = await self.identity.get_email()
        except DetailFetchError as e:
            API_ERRORS.labels(operation="identity").inc()
            return {"status": STATUS_ERROR, "message": str(e)}

        # Loop prevention: never answer our own replies.
        if is_own_message(message, bot_email):
            logger.debug("Ignoring message sent by the bot itself")
            return {"status": STATUS_IGNORED, "message": "Bot message ignored"}

        sender = await self._resolve_sender(event, message.sender_email)
        trigger = Trigger(
            person=Person(
                display_name=sender.display_name,
                email=sender.primary_email or message.sender_email,
            ),
            text=message.text,
        )
        logger.info(f"Message received: \"{trigger.text[:50]}\" from {trigger.person.display_name}")

        command = self.registry.match(trigger.text)
        if command is None:
            logger.info(
                f"No command matched: \"{trigger.text[:50]}\" - user: {trigger.person.display_name}"
            )
            return {"status": STATUS_UNKNOWN_COMMAND}

        bot = BotHandle(event.room_id, self.sender)
        return await self._execute(command, bot, trigger)

    # ------------------------------------------------------------------
    # Dispatch stages
    # ------------------------------------------------------------------

    async def _resolve_sender(self, event: InboundEvent, fallback_email: str) -> SenderProfile:
        """Sender profile, or a placeholder when the lookup fails."""
        try:
            return await self.resolver.resolve_sender(event.person_id)
        except DetailFetchError as e:
            API_ERRORS.labels(operation="person").inc()
            logger.warning(f"Using placeholder profile for {event.person_id}: {e}")
            return SenderProfile.placeholder(event.person_id, fallback_email)

    async def _run_handler(
        self, command: CommandDefinition, bot: BotHandle, trigger: Trigger
    ) -> Optional[Reply]:
        try:
            result = command.execute(bot, trigger)
            if inspect.isawaitable(result):
                result = await result
            if result:
                # Unsendable content counts as a handler failure.
                build_message_payload(bot.room_id, result)
            return result
        except Exception as e:
            raise HandlerError(command.describe(), e) from e

    async def _execute(
        self, command: CommandDefinition, bot: BotHandle, trigger: Trigger
    ) -> Dict[str, Any]:
        """Run the matched handler and deliver at most one reply."""
        name = command.describe()
        COMMAND_TOTAL.labels(command=name).inc()
        logger.info(f"Executing command: {name} - user: {trigger.person.display_name}")
        start_time = time.monotonic()

        try:
            reply = await self._run_handler(command, bot, trigger)
            if reply and bot.replied:
                logger.warning(f"Command [{name}] already replied; dropping returned content")
            elif reply:
                await bot.say(reply)
            return {"status": STATUS_SUCCESS, "command": name}

        except HandlerError as e:
            logger.error(
                f"Command execution error [{e.command}]: {e.original}",
                exc_info=e.original,
            )
            if not bot.replied:
                await self._send_failure_notice(bot)
            return {"status": STATUS_ERROR, "message": str(e.original), "command": name}

        except SendError as e:
            API_ERRORS.labels(operation="send").inc()
            logger.error(f"Reply for command [{name}] could not be delivered: {e}")
            return {"status": STATUS_ERROR, "message": str(e), "command": name}

        finally:
            COMMAND_LATENCY.labels(command=name).observe(time.monotonic() - start_time)

    async def _send_failure_notice(self, bot: BotHandle) -> None:
        try:
            await bot.say(HANDLER_FAILURE_NOTICE)
        except SendError as e:
            API_ERRORS.labels(operation="send").inc()
            logger.warning(f"Failure notice could not be delivered to {bot.room_id}: {e}")
