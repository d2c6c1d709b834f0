"""
IBC keep-alive CLI entry point.

Regularly sends client updates to keep a channel alive, and exposes its
health as Prometheus metrics on 0.0.0.0:20202/metrics.

Usage::

    python -m ibc_keepalive keepalive demo
    python -m ibc_keepalive keepalive demo 07-tendermint-0 --interval 3600
    python -m ibc_keepalive --config ./keepalive.yaml keepalive demo

Without a client ID both clients of the path are updated. With a client ID
only that client is updated, using headers from the path's destination chain.

Metrics (prefixed GoZ_relayer_):
    script_health        1.0 if updates are running successfully, else 0.0
    last_update          unix timestamp in seconds of the last successful update
    channel_open         1.0 if the channel is open on both ends, else 0.0
    unrelayed_sequences  number of unrelayed sequences, -1 if the check failed

With two directions, script_health and last_update carry a _src / _dst suffix.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from ibc_keepalive.api import MetricsServerConfig
from ibc_keepalive.config import DEFAULT_CONFIG_PATH, DEFAULT_UPDATE_INTERVAL
from ibc_keepalive.ledger import RelayerCommand, RestLedgerClient
from ibc_keepalive.metrics import KeepAliveMetrics, create_registry
from ibc_keepalive.node import Supervisor
from ibc_keepalive.paths import ConfigError, Direction, KeepAliveConfig

logger = logging.getLogger(__name__)


class ColoredFormatter(logging.Formatter):
    """Logging formatter with ANSI colors for better readability."""

    # ANSI color codes
    GREY = "\x1b[38;5;244m"
    BLUE = "\x1b[38;5;39m"
    GREEN = "\x1b[38;5;40m"
    YELLOW = "\x1b[38;5;220m"
    RED = "\x1b[38;5;196m"
    BOLD_RED = "\x1b[38;5;196;1m"
    CYAN = "\x1b[38;5;51m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)

        timestamp = self.formatTime(record, self.datefmt)
        colored_time = f"{self.CYAN}{timestamp}{self.RESET}"
        levelname = f"{color}{record.levelname:8}{self.RESET}"
        name = f"{self.BLUE}{record.name}{self.RESET}"

        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        return f"{colored_time} {levelname} {name}: {message}"


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """Configure logging with optional colors."""
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler()
    handler.setLevel(level)

    if no_color:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = ColoredFormatter(datefmt="%Y-%m-%d %H:%M:%S")

    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)

    # httpx logs every request at INFO. One line per probe query drowns the updates.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def positive_int(value: str) -> int:
    """argparse type for a strictly positive integer."""
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {parsed}")
    return parsed


def build_supervisor(
    config: KeepAliveConfig,
    path_name: str,
    client_id: str | None,
    interval: float,
    server_config: MetricsServerConfig | None = None,
) -> Supervisor:
    """
    Resolve the path and wire every probe for it.

    Raises:
        ConfigError: If the path, or one of its chains, is not configured.
    """
    path = config.get_path(path_name)

    # Fail on unknown chains now, not on the first probe cycle.
    config.get_chain(path.src.chain_id)
    config.get_chain(path.dst.chain_id)

    directions: list[Direction]
    if client_id is None:
        directions = list(path.directions())
    else:
        directions = [path.single_direction(client_id)]

    metrics = KeepAliveMetrics.create(create_registry(), [d.label for d in directions])
    client = RestLedgerClient(config=config, submitter=RelayerCommand(config.relayer))

    logger.info(
        "Keeping path %s alive: %s, update interval %ss",
        path_name,
        ", ".join(str(d) for d in directions),
        interval,
    )

    return Supervisor.create(
        client=client,
        path=path,
        directions=directions,
        metrics=metrics,
        update_interval=interval,
        server_config=server_config,
    )


def create_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="ibc-keepalive",
        description="IBC channel keep-alive monitor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to keep-alive YAML config (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored logging output",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    keepalive = commands.add_parser(
        "keepalive",
        help="Keep channel alive",
        description=(
            "Regularly sends client updates to keep a channel alive. "
            "Client ID is the same as the one used for 'rly tx raw update-client'."
        ),
    )
    keepalive.add_argument("path", help="Name of the configured path")
    keepalive.add_argument(
        "client_id",
        nargs="?",
        default=None,
        help="Client to update (default: both clients of the path)",
    )
    keepalive.add_argument(
        "-i",
        "--interval",
        type=positive_int,
        default=DEFAULT_UPDATE_INTERVAL,
        help=f"Interval in seconds to run update-client at (default: {DEFAULT_UPDATE_INTERVAL})",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.no_color)

    try:
        config = KeepAliveConfig.from_yaml_file(args.config)
        supervisor = build_supervisor(
            config,
            args.path,
            args.client_id,
            args.interval,
            server_config=MetricsServerConfig(),
        )
    except ConfigError as e:
        parser.exit(1, f"{parser.prog}: error: {e}\n")

    try:
        asyncio.run(supervisor.run())
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except OSError as e:
        logger.error("Failed to start metrics server: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
