"""Unit tests for Feed."""

import pytest

from poller.src.Feed import Feed


class TestFeedInit:
    """Test Feed construction."""

    def test_fields(self) -> None:
        """Fields should be stored as given."""
        feed = Feed("ETH", "0xabc")
        assert feed.identifier == "ETH"
        assert feed.address == "0xabc"

    def test_empty_identifier(self) -> None:
        """An empty identifier should raise ValueError."""
        with pytest.raises(ValueError, match="identifier must not be empty"):
            Feed("", "0xabc")

    def test_empty_address(self) -> None:
        """An empty address should raise ValueError."""
        with pytest.raises(ValueError, match="has no contract address"):
            Feed("ETH", "")

    def test_immutable(self) -> None:
        """Feeds should be frozen."""
        feed = Feed("ETH", "0xabc")
        with pytest.raises(AttributeError):
            feed.identifier = "BTC"  # type: ignore[misc]

    def test_str(self) -> None:
        """str() should give the IDENTIFIER=ADDRESS form."""
        assert str(Feed("ETH", "0xabc")) == "ETH=0xabc"


class TestFeedParsing:
    """Test parsing feeds from strings."""

    def test_from_string(self) -> None:
        """A well-formed string should parse."""
        feed = Feed.from_string("ETH=0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419")
        assert feed == Feed("ETH", "0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419")

    def test_from_string_strips_whitespace(self) -> None:
        """Whitespace around the parts should be ignored."""
        assert Feed.from_string(" BTC = 0xdef ") == Feed("BTC", "0xdef")

    def test_from_string_missing_separator(self) -> None:
        """A string without '=' should raise ValueError."""
        with pytest.raises(ValueError, match="Invalid feed format"):
            Feed.from_string("ETH")

    def test_from_string_missing_address(self) -> None:
        """A string with nothing after '=' should raise ValueError."""
        with pytest.raises(ValueError, match="has no contract address"):
            Feed.from_string("ETH=")

    def test_parse_list_keeps_order(self) -> None:
        """Feeds should come back in the order given."""
        feeds = Feed.parse_list("LINK=0x3,ETH=0x1,BTC=0x2")
        assert [f.identifier for f in feeds] == ["LINK", "ETH", "BTC"]

    def test_parse_list_skips_empty_items(self) -> None:
        """Trailing or doubled commas should be ignored."""
        feeds = Feed.parse_list("ETH=0x1,,BTC=0x2,")
        assert len(feeds) == 2
