"""Telegram speed-test bot, its API clients and the HTTP front end of the speed-test service."""

__version__ = "0.1.0"