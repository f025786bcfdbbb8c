"""FetchLoop: Periodic acquisition of round data for every configured feed.

Architecture:
    - One cycle visits every feed exactly once
    - Fetches start in registry order, at most max_concurrency in flight
    - Each fetch is bounded by fetch_timeout
    - Successful rounds are delivered to the sink in registry order
    - A failed fetch or delivery is logged and the cycle continues
    - Between cycles the loop waits fetch_interval, racing the cancel event
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from .errors import DeliveryError, FetchError
from .FeedTracker import FeedTracker

if TYPE_CHECKING:
    from .Configuration import Configuration
    from .Feed import Feed
    from .Round import Round
    from .sinks import Sink

logger = logging.getLogger(__name__)


class FetchLoop:
    """Drives the fetch cycles for one configuration.

    :ivar configuration: Feeds, interval and client.
    :ivar sink: Delivery target for rounds.
    :ivar cancel_event: Set to request the loop to exit.
    :ivar tracker: Per-feed outcome counters.
    :ivar cycles: Number of completed cycles.
    """

    def __init__(
        self,
        configuration: Configuration,
        sink: Sink,
        cancel_event: asyncio.Event,
        tracker: FeedTracker | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        """Initialize the fetch loop.

        :param configuration: Feeds, interval and client.
        :param sink: Delivery target for rounds.
        :param cancel_event: Event observed at each race point.
        :param tracker: Outcome counters (default: a new tracker).
        :param log: Logger to report through (default: module logger).
        """
        self.configuration = configuration
        self.sink = sink
        self.cancel_event = cancel_event
        self.tracker = tracker or FeedTracker(configuration.identifiers)
        self.log = log or logger
        self.cycles = 0
        self._semaphore = asyncio.Semaphore(configuration.max_concurrency)

    async def run(self) -> None:
        """Run cycles until the cancel event is observed.

        Returns normally once cancellation is seen; returning is the
        acknowledgement the controller waits for.
        """
        self.log.info(
            f"Starting fetch loop for {len(self.configuration.feeds)} feeds "
            f"(interval={self.configuration.fetch_interval}s, "
            f"timeout={self.configuration.fetch_timeout}s, "
            f"concurrency={self.configuration.max_concurrency})"
        )

        while not self.cancel_event.is_set():
            await self.run_cycle()
            self.cycles += 1
            if await self._wait_interval():
                break

        self.log.info(f"Fetch loop stopped after {self.cycles} cycles")

    async def _wait_interval(self) -> bool:
        """Wait one interval or until cancelled.

        :returns: True if cancellation was observed.
        """
        interval = self.configuration.fetch_interval
        if interval == 0:
            # Yield once so other tasks run between back-to-back cycles.
            await asyncio.sleep(0)
            return self.cancel_event.is_set()
        try:
            await asyncio.wait_for(self.cancel_event.wait(), timeout=interval)
        except asyncio.TimeoutError:
            return False
        return True

    async def run_cycle(self) -> int:
        """Fetch every feed once and deliver the successful rounds.

        :returns: Number of rounds delivered.
        """
        feeds = self.configuration.feeds
        rounds = await asyncio.gather(*(self._fetch_one(feed) for feed in feeds))

        delivered = 0
        for feed, round in zip(feeds, rounds, strict=True):
            if round is None:
                continue
            try:
                await self.sink.deliver(round)
            except DeliveryError as e:
                self.log.error(f"Failed delivering {feed.identifier}: {e}")
                continue
            except Exception as e:
                self.log.exception(
                    f"Sink raised unexpectedly delivering {feed.identifier}: {e}"
                )
                continue
            delivered += 1

        self.log.debug(
            f"Cycle {self.cycles + 1}: delivered {delivered}/{len(feeds)} rounds"
        )
        return delivered

    async def _fetch_one(self, feed: Feed) -> Round | None:
        """Fetch a single feed with timeout.

        :param feed: Feed to read.
        :returns: Round or None on failure.
        """
        client = self.configuration.client
        timeout = self.configuration.fetch_timeout

        async with self._semaphore:
            try:
                round = await asyncio.wait_for(
                    client.fetch(feed.identifier, feed.address),
                    timeout=timeout,
                )
            except asyncio.TimeoutError:
                error = f"timed out after {timeout}s"
            except FetchError as e:
                error = str(e)
            except Exception as e:
                error = f"unexpected {type(e).__name__}: {e}"
            else:
                self.tracker.record_success(feed.identifier)
                return round

        failures = self.tracker.record_failure(feed.identifier, error)
        self.log.error(
            f"Failed updating price for {feed.identifier} "
            f"({failures} consecutive): {error}"
        )
        return None
