"""Entry point for livecheck."""

import argparse
import asyncio
import os
import sys
from collections.abc import Mapping, MutableMapping
from typing import Any

import structlog

from livecheck.config.loader import ConfigLoader, ConfigNotFoundError
from livecheck.config.models import Config
from livecheck.identity import InvalidIdentifierError
from livecheck.registry import StreamRegistry

EventDict = MutableMapping[str, Any]
ProcessorReturn = Mapping[str, Any] | str | bytes | bytearray | tuple[Any, ...]

LOG_LEVELS = {
    "debug": 10,
    "info": 20,
    "warn": 30,
    "warning": 30,
    "error": 40,
    "critical": 50,
}


def make_level_filter(min_level: str) -> structlog.types.Processor:
    """Filter log messages below min_level.

    Args:
        min_level: Minimum log level to pass through (debug, info, warn, error).

    Returns:
        Processor function for structlog pipeline.
    """
    min_level_num = LOG_LEVELS.get(min_level.lower(), 20)

    def level_filter(
        logger: structlog.types.WrappedLogger,
        method_name: str,
        event_dict: EventDict,
    ) -> ProcessorReturn:
        level_num = LOG_LEVELS.get(method_name, 20)
        if level_num < min_level_num:
            raise structlog.DropEvent
        return event_dict

    return level_filter


def make_renderer(fmt: str) -> structlog.types.Processor:
    """Pick the final renderer for a log format.

    Args:
        fmt: Output format (console, json, text).

    Returns:
        Renderer processor.
    """
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    if fmt == "text":
        return structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "event"])
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def setup_logging(level: str = "info", fmt: str = "console") -> None:
    """Configure structlog for the application.

    Args:
        level: Minimum log level to output.
        fmt: Output format (console, json, text).
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            make_level_filter(level),
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            make_renderer(fmt),
        ],
        wrapper_class=structlog.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Arguments to parse (default: sys.argv[1:]).

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(description="Check which Twitch channels are live")
    parser.add_argument(
        "channels",
        nargs="*",
        metavar="CHANNEL",
        help="Channel names or URLs to check in addition to configured ones",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to livecheck.yaml (default: auto-discover from standard paths)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warn", "error"],
        default=os.environ.get("LC_LOG_LEVEL"),
        help="Log level (default: from config, or LC_LOG_LEVEL env var)",
    )
    return parser.parse_args(argv)


def load_config(config_path: str | None) -> Config:
    """Load config from file, falling back to environment-only settings.

    Args:
        config_path: Explicit config file path, if any.

    Returns:
        Loaded Config.

    Raises:
        ConfigNotFoundError: If an explicit path was given but does not exist.
    """
    loader = ConfigLoader(explicit_path=config_path)
    try:
        return loader.load()
    except ConfigNotFoundError:
        if config_path:
            raise
        return Config()


async def check_channels(registry: StreamRegistry, channels: list[str]) -> dict[str, bool]:
    """Register channels and resolve their live state with one batched fetch.

    Args:
        registry: Registry to track the channels in.
        channels: Channel names or URLs.

    Returns:
        Channel id -> live flag, in input order.
    """
    logger = structlog.get_logger()
    streams = []

    for ref in channels:
        is_url = registry.host_marker in ref or "/" in ref
        seed = {"url": ref} if is_url else {"channel": ref}
        try:
            stream = registry.create(seed)
        except InvalidIdentifierError as e:
            logger.warning("skipping invalid channel", channel=ref, error=str(e))
            continue

        if not stream.channel:
            logger.warning("skipping url without channel", channel=ref)
            continue
        streams.append(stream)

    results: dict[str, bool] = {}
    for stream in streams:
        live = await stream.is_live()
        results[stream.channel] = live
        if live:
            logger.info(
                "live",
                channel=stream.channel,
                title=stream.get("stream_title"),
                game=stream.get("stream_game"),
                viewers=stream.get("stream_viewers"),
            )
        else:
            logger.info("offline", channel=stream.channel)

    return results


async def run(config_path: str | None, channels: list[str], log_level: str | None) -> int:
    """Load config, configure logging and check all channels.

    Returns:
        Process exit code.
    """
    config = load_config(config_path)
    setup_logging(log_level or config.logging.level, config.logging.format)

    all_channels = list(dict.fromkeys([*config.channels, *channels]))
    logger = structlog.get_logger()

    if not all_channels:
        logger.warning("no channels configured")
        return 0

    registry = StreamRegistry.from_config(config)
    results = await check_channels(registry, all_channels)

    logger.info(
        "check complete",
        channels=len(results),
        live=sum(results.values()),
        snapshot_current=not registry.stale,
    )
    return 0


def main() -> None:
    """Main entry point for livecheck."""
    args = parse_args()
    setup_logging(args.log_level or "info")
    logger = structlog.get_logger()

    try:
        exit_code = asyncio.run(run(args.config, args.channels, args.log_level))
    except KeyboardInterrupt:
        logger.info("interrupted by user")
        exit_code = 130
    except Exception as e:
        logger.error("livecheck failed", error=str(e), exc_info=True)
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
