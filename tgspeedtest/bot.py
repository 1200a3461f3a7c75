"""Polling loop of the bot process."""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence

from .bot_config import ConfigError, load_bot_config
from .events import Fetcher, Processor
from .processor import TelegramProcessor
from .speedtest_client import SpeedTestClient
from .telegram_client import TelegramClient

logger = logging.getLogger(__name__)


def poll_once(fetcher: Fetcher, processor: Processor, batch_size: int) -> int:
    """Fetch one batch, process every event and return how many there were."""
    events = fetcher.fetch(batch_size)
    for event in events:
        try:
            processor.process(event)
        except Exception as exc:
            logger.error("error processing event: %s", exc)
    return len(events)


def run_loop(
    fetcher: Fetcher,
    processor: Processor,
    batch_size: int,
    idle_delay: float = 1.0,
    stop: threading.Event | None = None,
) -> None:
    """Poll until ``stop`` is set, pausing when idle or after a fetch error."""
    stop = stop or threading.Event()
    while not stop.is_set():
        try:
            count = poll_once(fetcher, processor, batch_size)
        except Exception as exc:
            logger.error("error fetching events: %s", exc)
            count = 0
        if count == 0:
            stop.wait(idle_delay)


def main(argv: Sequence[str] | None = None) -> int:
    """Start the bot and poll Telegram until interrupted."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    try:
        config = load_bot_config()
    except ConfigError as exc:
        logger.critical("%s", exc)
        return 1

    processor = TelegramProcessor(
        TelegramClient(config.tg_host, config.tg_token),
        SpeedTestClient(config.speedtest_host),
    )
    logger.info("service started")
    try:
        run_loop(processor, processor, config.batch_size)
    except KeyboardInterrupt:
        pass
    return 0