"""Minimal client for the Telegram Bot HTTP API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import requests

logger = logging.getLogger(__name__)

GET_UPDATES_METHOD = "getUpdates"
SEND_MESSAGE_METHOD = "sendMessage"


class TelegramError(Exception):
    """Raised when a Bot API call fails."""


def _object(data: Any, what: str) -> dict:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be a JSON object")
    return data


@dataclass(frozen=True)
class Chat:
    """Chat an incoming message belongs to."""

    id: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> Chat:
        return cls(id=int(_object(data, "chat").get("id", 0)))


@dataclass(frozen=True)
class Sender:
    """Author of an incoming message."""

    username: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> Sender:
        return cls(username=str(_object(data, "from").get("username", "")))


@dataclass(frozen=True)
class IncomingMessage:
    """Text message received by the bot."""

    text: str = ""
    sender: Sender = Sender()
    chat: Chat = Chat()

    @classmethod
    def from_dict(cls, data: Any) -> IncomingMessage:
        data = _object(data, "message")
        return cls(
            text=str(data.get("text", "")),
            sender=Sender.from_dict(data.get("from") or {}),
            chat=Chat.from_dict(data.get("chat") or {}),
        )


@dataclass(frozen=True)
class Update:
    """One entry of a getUpdates response."""

    id: int = 0
    message: IncomingMessage | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Update:
        """Build an update from a decoded JSON object."""
        data = _object(data, "update")
        raw_message = data.get("message")
        return cls(
            id=int(data.get("update_id", 0)),
            message=None if raw_message is None else IncomingMessage.from_dict(raw_message),
        )


class TelegramClient:
    """Talks to the Bot API on ``host`` with the given bot token."""

    def __init__(
        self,
        host: str,
        token: str,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ) -> None:
        self.host = host
        self._base_path = "bot" + token
        self._session = session or requests.Session()
        self._timeout = timeout

    def updates(self, offset: int, limit: int) -> list[Update]:
        """Return pending updates starting from ``offset``."""
        data = self._request(GET_UPDATES_METHOD, {"offset": str(offset), "limit": str(limit)})
        try:
            payload = _object(json.loads(data), "response")
            raw = payload.get("result") or []
            if not isinstance(raw, list):
                raise ValueError("result must be a JSON array")
            return [Update.from_dict(item) for item in raw]
        except (ValueError, TypeError) as exc:
            raise TelegramError(f"can`t Unmarshall: {exc}") from exc

    def send_message(self, chat_id: int, text: str) -> None:
        """Send ``text`` to ``chat_id``."""
        data = self._request(SEND_MESSAGE_METHOD, {"chat_id": str(chat_id), "text": text})
        try:
            payload = _object(json.loads(data), "response")
        except (ValueError, TypeError) as exc:
            raise TelegramError(f"can't parse Telegram response: {exc}") from exc
        if payload.get("ok") is not True:
            raise TelegramError(f"Telegram API error: {payload.get('description', '')}")

    def _request(self, method: str, query: dict[str, str]) -> bytes:
        url = f"https://{self.host}/{self._base_path}/{method}"
        logger.debug("Making request to %s with %s", url, query)
        try:
            response = self._session.get(
                url, params=sorted(query.items()), timeout=self._timeout
            )
            with response:
                body = response.content
        except requests.RequestException as exc:
            logger.warning("Telegram request error: %s", exc)
            raise TelegramError(f"can't do request {method}: {exc}") from exc
        logger.debug("Response status code: %d, body: %r", response.status_code, body)
        return body