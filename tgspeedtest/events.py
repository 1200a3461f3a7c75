"""Events passed from the update fetcher to the command processor."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Protocol


class EventType(enum.IntEnum):
    UNKNOWN = 0
    MESSAGE = 1


@dataclass
class Event:
    type: EventType
    text: str = ""
    meta: Any = None


class Fetcher(Protocol):
    def fetch(self, limit: int) -> list[Event]: ...


class Processor(Protocol):
    def process(self, event: Event) -> None: ...