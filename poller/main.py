#!/usr/bin/env python3
"""Oracle Feed Poller.

Polls Chainlink price-feed contracts on an EVM chain and delivers every
round to a queue (logged to the console), a local SQLite store, or a webhook.

Run via ``python -m poller.main`` or the ``oracle-feed-poller`` script.
Environment variables provide defaults; CLI args take precedence.
"""

import argparse
import asyncio
import logging
import os
import sys

from .src.ChainlinkClient import ChainlinkClient
from .src.ChainPresets import Chain, available_networks
from .src.errors import LoggingSetupError, PollerError, StoreError
from .src.Feed import Feed
from .src.FeedController import FeedController, configure
from .src.logging_setup import configure_logging
from .src.sinks import (
    QueueSink,
    Sink,
    Subscription,
    WebhookSink,
    get_available_sinks,
    get_sink,
)
from .src.stores import SqliteStore

logger = logging.getLogger(__name__)

# Sinks that need a Python callable cannot be built from the command line.
PROGRAMMATIC_SINKS = {"callback"}


def cli_sinks() -> list[str]:
    """Registered sink names selectable on the command line."""
    return [name for name in get_available_sinks() if name not in PROGRAMMATIC_SINKS]


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    networks = available_networks()
    sinks = cli_sinks()

    parser = argparse.ArgumentParser(
        prog="oracle-feed-poller",
        description="Oracle Feed Poller: periodic Chainlink round polling",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Preset networks:
  {', '.join(networks)}

Sinks:
  {', '.join(sinks)}

Examples:
  # Poll every preset Ethereum feed and log each round
  python -m poller.main --network ethereum

  # Selected preset feeds, persisted to SQLite
  python -m poller.main --network ethereum --tickers eth,btc \\
      --sink store --db-path ./rounds.db

  # Explicit feeds on BNB Smart Chain, forwarded to a webhook
  python -m poller.main --network bsc \\
      --feeds ETH=0x9ef1B8c0E4F7dc8bF5719Ea496883DC6401d5b2e \\
      --sink webhook --webhook-url https://example.com/rounds

Environment variables (CLI args take precedence):
  NETWORK, RPC_URL, FEEDS, TICKERS, FETCH_INTERVAL, FETCH_TIMEOUT,
  MAX_CONCURRENCY, SINK, DB_PATH, WEBHOOK_URL, DURATION, LOG_FILE
""",
    )

    parser.add_argument(
        "--network",
        type=str,
        help=f"Preset network name or chain id ({', '.join(networks)})",
        default=os.environ.get("NETWORK") or "ethereum",
    )

    parser.add_argument(
        "--rpc-url",
        dest="rpc_url",
        type=str,
        help="RPC endpoint (default: RPC_URL env var, then the network preset)",
        default=None,
    )

    parser.add_argument(
        "--feeds",
        type=str,
        help="Comma-separated feeds as IDENTIFIER=ADDRESS (overrides presets)",
        default=os.environ.get("FEEDS"),
    )

    parser.add_argument(
        "--tickers",
        type=str,
        help="Comma-separated preset tickers to poll (e.g., eth,btc)",
        default=os.environ.get("TICKERS"),
    )

    parser.add_argument(
        "--interval",
        type=float,
        help="Seconds between full fetch cycles, 0 for back-to-back (default: 10)",
        default=float(os.environ.get("FETCH_INTERVAL") or "10"),
    )

    parser.add_argument(
        "--fetch-timeout",
        dest="fetch_timeout",
        type=float,
        help="Timeout for individual contract reads in seconds (default: 10.0)",
        default=float(os.environ.get("FETCH_TIMEOUT") or "10.0"),
    )

    parser.add_argument(
        "--max-concurrency",
        dest="max_concurrency",
        type=int,
        help="Maximum contract reads in flight per cycle (default: 4)",
        default=int(os.environ.get("MAX_CONCURRENCY") or "4"),
    )

    parser.add_argument(
        "--sink",
        type=str,
        choices=sinks,
        help="Where rounds are delivered (default: queue)",
        default=os.environ.get("SINK") or "queue",
    )

    parser.add_argument(
        "--db-path",
        dest="db_path",
        type=str,
        help="SQLite file for the store sink (default: ./poller.db)",
        default=os.environ.get("DB_PATH") or "./poller.db",
    )

    parser.add_argument(
        "--webhook-url",
        dest="webhook_url",
        type=str,
        help="Endpoint for the webhook sink",
        default=os.environ.get("WEBHOOK_URL"),
    )

    parser.add_argument(
        "--duration",
        type=float,
        help="Stop after this many seconds (default: run until interrupted)",
        default=float(os.environ["DURATION"]) if os.environ.get("DURATION") else None,
    )

    parser.add_argument(
        "--log-file",
        dest="log_file",
        type=str,
        help="Also append log records to this file",
        default=os.environ.get("LOG_FILE"),
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    return parser


def resolve_feeds(args: argparse.Namespace, chain: Chain) -> tuple[Feed, ...]:
    """Determine the feed registry from CLI arguments.

    Explicit ``--feeds`` win over ``--tickers``; with neither, every preset
    feed of the chain is used.

    :param args: Parsed arguments.
    :param chain: Selected chain preset.
    :returns: Feeds in registry order.
    :raises ValueError: If a feed or ticker is invalid.
    """
    if args.feeds:
        return Feed.parse_list(args.feeds)
    if args.tickers:
        tickers = [t.strip() for t in args.tickers.split(",") if t.strip()]
        return chain.feeds(tickers)
    return chain.feeds()


def build_sink(args: argparse.Namespace) -> Sink:
    """Create the sink selected on the command line.

    :param args: Parsed arguments.
    :returns: Sink instance.
    :raises ValueError: If the sink's settings are missing or invalid.
    """
    if args.sink == "store":
        return get_sink("store", store=SqliteStore(args.db_path))
    if args.sink == "webhook":
        if not args.webhook_url:
            raise ValueError("--webhook-url is required with --sink webhook")
        return get_sink("webhook", url=args.webhook_url)
    return get_sink(args.sink)


async def _log_rounds(subscription: Subscription) -> None:
    """Log every round received on a queue subscription."""
    async for round in subscription:
        logger.info(
            f"{round.identifier}: {round.answer:.8f} "
            f"(round {round.round_id}, updated_at {round.updated_at})"
        )


async def run_poller(controller: FeedController, duration: float | None = None) -> None:
    """Run a controller until the duration elapses or the task is cancelled.

    :param controller: Idle controller to start.
    :param duration: Seconds to run (None to run until cancelled).
    """
    consumer: asyncio.Task[None] | None = None
    if isinstance(controller.sink, QueueSink):
        consumer = asyncio.create_task(_log_rounds(controller.sink.subscribe()))

    controller.start()
    try:
        if duration is not None:
            await asyncio.sleep(duration)
        else:
            await asyncio.Event().wait()
    finally:
        try:
            if controller.is_running:
                await controller.stop()
            report_status(controller)
        finally:
            await controller.sink.close()
            await WebhookSink.close_shared_client()
            if consumer is not None:
                await consumer


def report_status(controller: FeedController) -> None:
    """Log the latest stored round and fetch counters of every feed."""
    if controller.sink.supports_read:
        for identifier in controller.configuration.identifiers:
            try:
                round = controller.read(identifier)
            except PollerError as e:
                logger.info(f"{identifier}: no stored round ({e})")
                continue
            logger.info(f"{identifier}: last stored {round.answer:.8f} (round {round.round_id})")

    for identifier, status in controller.tracker.get_all_status().items():
        logger.info(
            f"{identifier}: {status.total_successes} ok, "
            f"{status.total_failures} failed"
        )


def main() -> None:
    """Main entry point for the Oracle Feed Poller CLI."""
    parser = build_parser()
    args = parser.parse_args()

    # Configure logging
    try:
        log = configure_logging(
            "DEBUG" if args.verbose else "INFO", log_file=args.log_file
        )
    except LoggingSetupError as e:
        parser.error(str(e))

    # Validate arguments
    if args.interval < 0:
        parser.error("--interval must not be negative")

    if args.fetch_timeout <= 0:
        parser.error("--fetch-timeout must be positive")

    if args.max_concurrency < 1:
        parser.error("--max-concurrency must be at least 1")

    if args.duration is not None and args.duration <= 0:
        parser.error("--duration must be positive")

    try:
        chain = Chain.from_name(args.network, rpc_url=args.rpc_url)
        feeds = resolve_feeds(args, chain)
        sink = build_sink(args)
    except (ValueError, StoreError) as e:
        parser.error(str(e))

    if not feeds:
        parser.error("At least one feed must be specified")

    # Log configuration
    logger.info("=" * 60)
    logger.info("Oracle Feed Poller")
    logger.info("=" * 60)
    logger.info(f"Network:           {chain.name} (chain id {chain.chain_id})")
    logger.info(f"RPC URL:           {chain.rpc_url}")
    logger.info(f"Feeds:             {', '.join(f.identifier for f in feeds)}")
    logger.info(f"Interval:          {args.interval}s")
    logger.info(f"Fetch Timeout:     {args.fetch_timeout}s")
    logger.info(f"Max Concurrency:   {args.max_concurrency}")
    logger.info(f"Sink:              {args.sink}")
    if args.duration is not None:
        logger.info(f"Duration:          {args.duration}s")
    logger.info("=" * 60)

    try:
        client = ChainlinkClient.from_rpc_url(
            chain.rpc_url, request_timeout=args.fetch_timeout
        )
        controller = configure(
            feeds,
            args.interval,
            client,
            sink,
            fetch_timeout=args.fetch_timeout,
            max_concurrency=args.max_concurrency,
            log=log.getChild("poller"),
        )
        asyncio.run(run_poller(controller, duration=args.duration))
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
