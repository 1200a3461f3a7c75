"""Configuration of the bot process, read from the environment."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"[+-]?[0-9]+")


class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


@dataclass(frozen=True)
class BotConfig:
    tg_token: str
    tg_host: str
    speedtest_host: str
    batch_size: int


def load_bot_config(environ: Mapping[str, str] | None = None) -> BotConfig:
    """Read the bot settings; with no mapping, load ``.env`` and use ``os.environ``."""
    if environ is None:
        if not load_dotenv():
            logger.info("No .env file found, reading from environment variables")
        environ = os.environ

    token = environ.get("TELEGRAM_TOKEN", "")
    if not token:
        raise ConfigError("TELEGRAM_BOT_TOKEN is not set")

    batch_text = environ.get("BATCH_SIZE", "") or "100"
    if not _INT_RE.fullmatch(batch_text) or not -(2**63) <= int(batch_text) < 2**63:
        raise ConfigError(f"invalid BATCH_SIZE: {batch_text!r}")

    return BotConfig(
        tg_token=token,
        tg_host=environ.get("TELEGRAM_HOST", "") or "api.telegram.org",
        speedtest_host=environ.get("SPEEDTEST_HOST", "") or "localhost:8081",
        batch_size=int(batch_text),
    )