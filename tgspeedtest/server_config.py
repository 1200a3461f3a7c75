"""Configuration of the speed test service, read from the environment."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_PORT = ":8081"


class ServerConfigError(Exception):
    """Raised when a required setting is missing."""


@dataclass(frozen=True)
class ServerConfig:
    app_id: str
    app_hash: str
    bot_token: str
    port: str = DEFAULT_PORT


def normalize_port(port: str) -> str:
    """Return ``port`` as a listen address of the form ``:<port>``."""
    if not port:
        return DEFAULT_PORT
    return port if port.startswith(":") else ":" + port


def load_server_config(environ: Mapping[str, str] | None = None) -> ServerConfig:
    """Read the service settings; with no mapping, load ``.env`` and use ``os.environ``."""
    if environ is None:
        if not load_dotenv():
            logger.info(".env file not found")
        environ = os.environ

    names = ("APP_ID", "APP_HASH", "BOT_TOKEN")
    for name in names:
        if not environ.get(name, ""):
            raise ServerConfigError(f"{name} is not set")
    app_id, app_hash, bot_token = (environ[name] for name in names)
    return ServerConfig(app_id, app_hash, bot_token, normalize_port(environ.get("PORT", "")))