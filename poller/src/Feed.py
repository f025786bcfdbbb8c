"""Feed: A tracked (identifier, contract address) pair.

A feed names one price series and the on-chain aggregator contract that
publishes it. Feeds are immutable and are parsed from ``IDENTIFIER=ADDRESS``
strings on the command line.

.. code-block:: python

    >>> feed = Feed.from_string("ETH=0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419")
    >>> feed.identifier
    'ETH'
    >>> str(feed)
    'ETH=0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419'
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Feed:
    """A single price series tracked by the poller.

    :ivar identifier: Ticker or label of the series (e.g., "ETH").
    :ivar address: Aggregator contract address on the EVM chain.
    """

    identifier: str
    address: str

    def __post_init__(self) -> None:
        """Validate that both fields are present."""
        if not self.identifier:
            raise ValueError("Feed identifier must not be empty")
        if not self.address:
            raise ValueError(f"Feed '{self.identifier}' has no contract address")

    def __str__(self) -> str:
        """Return the ``IDENTIFIER=ADDRESS`` form."""
        return f"{self.identifier}={self.address}"

    @classmethod
    def from_string(cls, feed_str: str) -> Feed:
        """Parse a feed string in format "IDENTIFIER=ADDRESS".

        :param feed_str: Feed string like "ETH=0x9ef1...".
        :returns: New Feed instance.
        :raises ValueError: If the string format is invalid.
        """
        identifier, sep, address = feed_str.partition("=")
        if not sep:
            raise ValueError(
                f"Invalid feed format '{feed_str}'. "
                "Expected 'IDENTIFIER=ADDRESS' (e.g., 'ETH=0x5f4e...')"
            )
        return cls(identifier.strip(), address.strip())

    @classmethod
    def parse_list(cls, feeds_str: str) -> tuple[Feed, ...]:
        """Parse a comma-separated list of feed strings, keeping order.

        :param feeds_str: String like "ETH=0x...,BTC=0x...".
        :returns: Tuple of feeds in the order given.
        """
        return tuple(
            cls.from_string(item) for item in feeds_str.split(",") if item.strip()
        )
