"""FeedTracker: Per-feed success and failure counters.

The fetch loop records the outcome of every fetch here. The tracker never
influences scheduling; a failing feed is still polled every cycle. It exists
so callers can see which feeds are unhealthy without parsing logs.

.. code-block:: python

    >>> tracker = FeedTracker(["ETH", "BTC"])
    >>> tracker.record_failure("BTC", "execution reverted")
    1
    >>> tracker.failing_feeds()
    ['BTC']
    >>> tracker.record_success("BTC")
    >>> tracker.get_status("BTC").consecutive_failures
    0
"""

from __future__ import annotations

import time
from dataclasses import dataclass


@dataclass
class FeedStatus:
    """Tracks the fetch outcomes of a single feed.

    :ivar consecutive_failures: Number of failures since the last success.
    :ivar total_failures: Total failures since tracking began.
    :ivar total_successes: Total successes since tracking began.
    :ivar last_error: Message of the most recent failure.
    :ivar last_success_at: Unix timestamp of the most recent success.
    """

    consecutive_failures: int = 0
    total_failures: int = 0
    total_successes: int = 0
    last_error: str | None = None
    last_success_at: float | None = None


class FeedTracker:
    """Records fetch outcomes per feed identifier.

    :ivar identifiers: Tracked identifiers in registry order.
    """

    def __init__(self, identifiers: list[str]) -> None:
        """Initialize the tracker.

        :param identifiers: Feed identifiers to track.
        """
        self.identifiers = list(identifiers)
        self._status: dict[str, FeedStatus] = {i: FeedStatus() for i in identifiers}

    def _get_or_create(self, identifier: str) -> FeedStatus:
        if identifier not in self._status:
            self.identifiers.append(identifier)
            self._status[identifier] = FeedStatus()
        return self._status[identifier]

    def record_failure(self, identifier: str, error: str) -> int:
        """Record a failed fetch.

        :param identifier: Feed that failed.
        :param error: Failure description.
        :returns: Number of consecutive failures for the feed.
        """
        status = self._get_or_create(identifier)
        status.consecutive_failures += 1
        status.total_failures += 1
        status.last_error = error
        return status.consecutive_failures

    def record_success(self, identifier: str) -> None:
        """Record a successful fetch, resetting the consecutive counter.

        :param identifier: Feed that succeeded.
        """
        status = self._get_or_create(identifier)
        status.consecutive_failures = 0
        status.total_successes += 1
        status.last_success_at = time.time()

    def get_status(self, identifier: str) -> FeedStatus | None:
        """Get the status of one feed, or None if untracked."""
        return self._status.get(identifier)

    def get_all_status(self) -> dict[str, FeedStatus]:
        """Get a copy of every tracked status keyed by identifier."""
        return dict(self._status)

    def failing_feeds(self) -> list[str]:
        """Get feeds whose most recent fetch failed, in registry order."""
        return [i for i in self.identifiers if self._status[i].consecutive_failures > 0]
