"""Turns Telegram updates into events and carries out bot commands."""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from .events import Event, EventType
from .speedtest_client import SpeedTestClient, SpeedTestError, SpeedTestResult
from .telegram_client import TelegramClient, Update

logger = logging.getLogger(__name__)

TEST_CMD = "/test"
HELP_CMD = "/help"
START_CMD = "/start"

MSG_HELP = (
    "\n/test <app_id> <app_hash> [proxy_addr] - measure the connection speed.\n"
    "/help - show this help message.\n"
)
MSG_HELLO = (
    "Hello! I can help you test your connection speed to Telegram. "
    "Use /test to begin."
)
MSG_UNKNOWN_COMMAND = "Unknown command. Use /help to see available commands."
MSG_INVALID_TEST_CMD = "Invalid command format. Use: /test <app_id> <app_hash> [proxy_addr]"
MSG_SPEED_TEST_START = "Starting speed test... This may take a moment."
MSG_SPEED_TEST_FAILED = "Sorry, the speed test failed."
MSG_INVALID_APP_ID = "Invalid App ID. It must be a number."

_INT_RE = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class Meta:
    """Where a message event came from."""

    chat_id: int
    username: str = ""


class UnknownEventError(Exception):
    """Raised for events the processor cannot handle."""


def event_from_update(update: Update) -> Event:
    """Convert a Bot API update into an event."""
    message = update.message
    if message is None:
        return Event(type=EventType.UNKNOWN, text="")
    return Event(
        type=EventType.MESSAGE,
        text=message.text,
        meta=Meta(chat_id=message.chat.id, username=message.sender.username),
    )


def _parse_int(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid syntax: {text!r}")
    value = int(text)
    if not -(2**63) <= value < 2**63:
        raise ValueError(f"value out of range: {text!r}")
    return value


def _format_result(result: SpeedTestResult) -> str:
    return (
        "Speed Test Results:\n\n"
        f"Upload: {result.upload_speed_mbps:.2f} Мбит/с\n"
        f"Download: {result.download_speed_mbps:.2f} Мбит/с"
    )


def _run_in_thread(task: Callable[[], None]) -> None:
    def runner() -> None:
        try:
            task()
        except Exception:
            logger.exception("background command failed")

    threading.Thread(target=runner, daemon=True).start()


class TelegramProcessor:
    """Fetches updates from Telegram and answers the bot's commands."""

    def __init__(
        self,
        tg: TelegramClient,
        speedtest_client: SpeedTestClient,
        spawn: Callable[[Callable[[], None]], None] | None = None,
    ) -> None:
        self._tg = tg
        self._speedtest = speedtest_client
        self._spawn = spawn or _run_in_thread
        self.offset = 0

    def fetch(self, limit: int) -> list[Event]:
        """Return events for new updates and move the offset past them."""
        updates = self._tg.updates(self.offset, limit)
        if not updates:
            return []
        events = [event_from_update(update) for update in updates]
        self.offset = updates[-1].id + 1
        return events

    def process(self, event: Event) -> None:
        """Handle one event, raising on unsupported events."""
        if event.type != EventType.MESSAGE:
            raise UnknownEventError("can`t process event")
        meta = event.meta
        if not isinstance(meta, Meta):
            raise UnknownEventError("can't process message: can`t get Meta")
        self._do_cmd(event.text, meta.chat_id)

    def _do_cmd(self, text: str, chat_id: int) -> None:
        text = text.strip()
        logger.info("got new command %r from chat %d", text, chat_id)
        parts = text.split()
        command = parts[0] if parts else ""

        if command == TEST_CMD:
            self._spawn(lambda: self.test_speed(chat_id, parts))
        elif command == HELP_CMD:
            self._tg.send_message(chat_id, MSG_HELP)
        elif command == START_CMD:
            self._tg.send_message(chat_id, MSG_HELLO)
        else:
            self._tg.send_message(chat_id, MSG_UNKNOWN_COMMAND)

    def test_speed(self, chat_id: int, args: Sequence[str]) -> None:
        """Run the /test command with its words ``args`` and report to ``chat_id``."""
        if len(args) == 1:
            app_id, app_hash, proxy = 0, "", ""
        elif len(args) >= 3:
            try:
                app_id = _parse_int(args[1])
            except ValueError:
                self._tg.send_message(chat_id, MSG_INVALID_APP_ID)
                return
            app_hash = args[2]
            proxy = args[3] if len(args) > 3 else ""
        else:
            self._tg.send_message(chat_id, MSG_INVALID_TEST_CMD)
            return

        self._tg.send_message(chat_id, MSG_SPEED_TEST_START)

        try:
            result = self._speedtest.speed_test(chat_id, app_id, app_hash, proxy)
        except SpeedTestError as exc:
            logger.warning("speed test failed: %s", exc)
            self._tg.send_message(chat_id, MSG_SPEED_TEST_FAILED)
            return

        self._tg.send_message(chat_id, _format_result(result))