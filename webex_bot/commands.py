"""Built-in chat commands.

Each handler is a named coroutine taking ``(bot, trigger)`` and returning the
reply to post (or None when it has nothing to say). Handlers that need the
registry, such as help, are bound methods of BuiltinCommands.
"""
import re
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from .constants import (
    DEFAULT_TIMEZONE,
    HELP_HEADER,
    PRIORITY_CATCH_ALL,
    PRIORITY_DEFAULT,
    PRIORITY_HELP,
)
from .models import Trigger
from .registry import CommandRegistry

CATCH_ALL_PATTERN = re.compile(".*")


def format_korean_datetime(moment: datetime) -> str:
    """Render a datetime the way ko-KR locale strings read, e.g. ``2025. 1. 5. 오후 3:04:05``."""
    meridiem = "오전" if moment.hour < 12 else "오후"
    hour = moment.hour % 12 or 12
    return (
        f"{moment.year}. {moment.month}. {moment.day}. "
        f"{meridiem} {hour}:{moment.minute:02d}:{moment.second:02d}"
    )


class BuiltinCommands:
    """The default command set: greeting, help, time and the catch-all."""

    def __init__(self, registry: CommandRegistry, timezone: str = DEFAULT_TIMEZONE):
        self.registry = registry
        self.timezone = ZoneInfo(timezone)

    def register_all(self) -> CommandRegistry:
        self.registry.add("안녕", self.greet, "**안녕** - 인사하기", PRIORITY_DEFAULT)
        self.registry.add(
            "도움말", self.show_help, "**도움말** - 사용 가능한 명령어 확인", PRIORITY_HELP
        )
        self.registry.add("시간", self.show_time, "**시간** - 현재 시간 확인", PRIORITY_DEFAULT)
        # Empty help text keeps the catch-all out of the help listing.
        self.registry.add(CATCH_ALL_PATTERN, self.not_understood, "", PRIORITY_CATCH_ALL)
        return self.registry

    async def greet(self, bot, trigger: Trigger) -> str:
        return f"안녕하세요! {trigger.person.display_name}님. 무엇을 도와드릴까요?"

    async def show_help(self, bot, trigger: Trigger) -> str:
        help_texts = "\n".join(self.registry.help_lines())
        return f"{HELP_HEADER}\n{help_texts}"

    async def show_time(self, bot, trigger: Trigger) -> str:
        now = datetime.now(self.timezone)
        return f"현재 시간은 {format_korean_datetime(now)} 입니다."

    async def not_understood(self, bot, trigger: Trigger) -> Optional[str]:
        return (
            f"\"{trigger.text}\" 명령어를 이해하지 못했습니다. "
            "'도움말'을 입력하여 사용 가능한 명령어를 확인하세요."
        )


def build_default_registry(timezone: str = DEFAULT_TIMEZONE) -> CommandRegistry:
    """Create a registry holding the built-in commands."""
    return BuiltinCommands(CommandRegistry(), timezone=timezone).register_all()
