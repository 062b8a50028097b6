"""Command-line entry point for Timelight."""
from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys

from .bridge import HueClient
from .config import LOG_LEVELS, Config, load_config
from .const import DEFAULT_CONFIG_FILE
from .coordinator import Timelight
from .exceptions import TimelightError

_LOGGER = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="timelight",
        description="Drive Hue lights through a time-of-day brightness and color temperature schedule",
    )
    parser.add_argument(
        "config",
        nargs="?",
        default=DEFAULT_CONFIG_FILE,
        help=f"Path to the TOML configuration file (default: {DEFAULT_CONFIG_FILE})",
    )
    parser.add_argument(
        "--log-level",
        choices=sorted(LOG_LEVELS),
        help="Override the log level from the configuration file",
    )
    return parser.parse_args(argv)


def setup_logging(level: int) -> None:
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    # aiohttp and aiohue log every event and dropped connection at debug level.
    for name in ("aiohttp", "aiohue"):
        logging.getLogger(name).setLevel(max(level, logging.INFO))


async def async_main(config: Config) -> None:
    client = HueClient(config.bridge.addr, config.bridge.username)
    timelight = Timelight(client, config.timelight)

    task = asyncio.current_task()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGTERM, task.cancel)
    except (NotImplementedError, RuntimeError):
        _LOGGER.debug("SIGTERM handling not supported on this platform")

    try:
        await timelight.async_run()
    finally:
        await client.async_close()


def main(argv: list[str] | None = None) -> int:
    args = parse_arguments(argv)

    try:
        config = load_config(args.config)
    except TimelightError as e:
        setup_logging(logging.INFO)
        _LOGGER.error(f"{e}")
        return 1

    level = LOG_LEVELS[args.log_level] if args.log_level else config.logger.log_level
    setup_logging(level)

    try:
        asyncio.run(async_main(config))
    except TimelightError as e:
        _LOGGER.error(f"Timelight errored: {e}")
        return 1
    except (KeyboardInterrupt, asyncio.CancelledError):
        _LOGGER.info("Interrupted, exiting")
    return 0


if __name__ == "__main__":
    sys.exit(main())
