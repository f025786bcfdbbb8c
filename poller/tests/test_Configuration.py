"""Unit tests for Configuration."""

import pytest

from poller.src.Configuration import Configuration
from poller.src.Feed import Feed


class TestConfiguration:
    """Test configuration validation."""

    def test_valid(self, feeds, fake_client) -> None:
        """Valid settings should be stored, feeds as a tuple."""
        config = Configuration(list(feeds), 5, fake_client)
        assert config.feeds == feeds
        assert config.identifiers == ["ETH", "BTC", "LINK"]
        assert config.fetch_timeout == 10.0
        assert config.max_concurrency == 4

    def test_no_feeds(self, fake_client) -> None:
        """An empty registry should be rejected."""
        with pytest.raises(ValueError, match="At least one feed"):
            Configuration((), 5, fake_client)

    def test_duplicate_identifiers(self, fake_client) -> None:
        """Identifiers must be unique."""
        feeds = (Feed("ETH", "0x1"), Feed("ETH", "0x2"))
        with pytest.raises(ValueError, match=r"Duplicate feed identifiers: \['ETH'\]"):
            Configuration(feeds, 5, fake_client)

    def test_non_feed(self, fake_client) -> None:
        """Entries must be Feed instances."""
        with pytest.raises(ValueError, match="Expected Feed"):
            Configuration((("ETH", "0x1"),), 5, fake_client)  # type: ignore[arg-type]

    @pytest.mark.parametrize("interval", [-1, -0.5])
    def test_invalid_interval(self, feeds, fake_client, interval) -> None:
        """The interval must not be negative."""
        with pytest.raises(ValueError, match="fetch_interval must not be negative"):
            Configuration(feeds, interval, fake_client)

    def test_zero_interval(self, feeds, fake_client) -> None:
        """A zero interval should be accepted."""
        assert Configuration(feeds, 0, fake_client).fetch_interval == 0

    def test_invalid_timeout(self, feeds, fake_client) -> None:
        """The timeout must be positive when given."""
        with pytest.raises(ValueError, match="fetch_timeout must be positive"):
            Configuration(feeds, 5, fake_client, fetch_timeout=0)
        assert Configuration(feeds, 5, fake_client, fetch_timeout=None).fetch_timeout is None

    def test_invalid_concurrency(self, feeds, fake_client) -> None:
        """At least one fetch must be allowed in flight."""
        with pytest.raises(ValueError, match="max_concurrency must be at least 1"):
            Configuration(feeds, 5, fake_client, max_concurrency=0)
