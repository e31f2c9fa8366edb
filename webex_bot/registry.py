"""Command definitions and first-match lookup by priority."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from .constants import PRIORITY_DEFAULT

# A reply is either plain text or a structured (markdown/card) payload.
Reply = Union[str, dict[str, Any]]
# handler(bot, trigger) -> optional reply, sync or async.
CommandHandler = Callable[[Any, Any], Union[Optional[Reply], Awaitable[Optional[Reply]]]]


@dataclass(frozen=True)
class SubstringPattern:
    """Matches when the text contains ``value`` anywhere."""

    value: str

    def matches(self, text: str) -> bool:
        return self.value in text

    def describe(self) -> str:
        return self.value


@dataclass(frozen=True)
class RegexPattern:
    """Matches when ``expression`` is found anywhere in the text."""

    expression: re.Pattern

    def matches(self, text: str) -> bool:
        return self.expression.search(text) is not None

    def describe(self) -> str:
        return f"/{self.expression.pattern}/"


Pattern = Union[SubstringPattern, RegexPattern]


def to_pattern(value: Union[str, re.Pattern, Pattern]) -> Pattern:
    """Wrap a plain string or compiled expression in its pattern variant."""
    if isinstance(value, (SubstringPattern, RegexPattern)):
        return value
    if isinstance(value, re.Pattern):
        return RegexPattern(value)
    if isinstance(value, str):
        return SubstringPattern(value)
    raise TypeError(f"Unsupported command pattern: {value!r}")


@dataclass(frozen=True)
class CommandDefinition:
    pattern: Pattern
    execute: CommandHandler
    help_text: str = ""
    priority: int = PRIORITY_DEFAULT

    def matches(self, text: str) -> bool:
        return self.pattern.matches(text)

    def describe(self) -> str:
        return self.pattern.describe()


class CommandRegistry:
    """Holds command definitions; lookups use a priority-sorted view.

    The registry is filled once at startup and only read afterwards, so
    concurrent webhook tasks share it without locking.
    """

    def __init__(self):
        self._commands: list[CommandDefinition] = []

    def register(self, definition: CommandDefinition) -> CommandDefinition:
        self._commands.append(definition)
        return definition

    def add(
        self,
        pattern: Union[str, re.Pattern, Pattern],
        execute: CommandHandler,
        help_text: str = "",
        priority: int = PRIORITY_DEFAULT,
    ) -> CommandDefinition:
        """Build and register a definition from a raw pattern."""
        return self.register(
            CommandDefinition(
                pattern=to_pattern(pattern),
                execute=execute,
                help_text=help_text,
                priority=priority,
            )
        )

    def all(self) -> list[CommandDefinition]:
        """All definitions in registration order."""
        return list(self._commands)

    def sorted(self) -> list[CommandDefinition]:
        # sorted() is stable, so equal priorities keep registration order.
        return sorted(self._commands, key=lambda command: command.priority)

    def match(self, text: str) -> Optional[CommandDefinition]:
        """Return the highest-precedence definition whose pattern matches.

        Returns None only when no catch-all command is registered and
        nothing else matches.
        """
        text = text or ""
        for command in self.sorted():
            if command.matches(text):
                return command
        return None

    def help_lines(self) -> list[str]:
        return [command.help_text for command in self.sorted() if command.help_text]

    def __len__(self) -> int:
        return len(self._commands)
