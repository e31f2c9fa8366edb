"""Error taxonomy for the webhook dispatch pipeline."""


class WebexBotError(Exception):
    """Base class for dispatch pipeline errors."""
    pass


class MalformedEventError(WebexBotError):
    """Webhook payload is missing required identifiers."""
    pass


class DetailFetchError(WebexBotError):
    """Message or sender details could not be obtained from the Webex API."""
    pass


class SendError(WebexBotError):
    """A reply could not be transmitted to the room."""
    pass


class HandlerError(WebexBotError):
    """A command handler raised while executing.

    Attributes:
        command: Printable description of the matched command's pattern.
        original: The exception raised by the handler.
    """

    def __init__(self, command: str, original: BaseException):
        super().__init__(f"Command {command!r} failed: {original}")
        self.command = command
        self.original = original
