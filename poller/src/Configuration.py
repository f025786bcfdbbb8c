"""Configuration: The immutable feed registry and fetch settings for one loop."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .Feed import Feed

if TYPE_CHECKING:
    from .ChainlinkClient import ContractClient


@dataclass(frozen=True)
class Configuration:
    """Settings owned by one fetch loop for its whole lifetime.

    :ivar feeds: Feeds in registry order.
    :ivar fetch_interval: Seconds to wait between full cycles (0 runs them
        back to back).
    :ivar client: Contract client performing the reads.
    :ivar fetch_timeout: Per-call timeout in seconds (None for no timeout).
    :ivar max_concurrency: Maximum fetches in flight within one cycle.
    """

    feeds: tuple[Feed, ...]
    fetch_interval: float
    client: ContractClient
    fetch_timeout: float | None = 10.0
    max_concurrency: int = 4

    def __post_init__(self) -> None:
        """Validate the settings.

        :raises ValueError: If any setting is out of range.
        """
        # Freeze whatever sequence was passed in.
        object.__setattr__(self, "feeds", tuple(self.feeds))

        if not self.feeds:
            raise ValueError("At least one feed must be configured")
        for feed in self.feeds:
            if not isinstance(feed, Feed):
                raise ValueError(f"Expected Feed, got {feed!r}")

        identifiers = [feed.identifier for feed in self.feeds]
        duplicates = sorted({i for i in identifiers if identifiers.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicate feed identifiers: {duplicates}")

        if self.fetch_interval < 0:
            raise ValueError("fetch_interval must not be negative")
        if self.fetch_timeout is not None and self.fetch_timeout <= 0:
            raise ValueError("fetch_timeout must be positive or None")
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

    @property
    def identifiers(self) -> list[str]:
        """Feed identifiers in registry order."""
        return [feed.identifier for feed in self.feeds]
