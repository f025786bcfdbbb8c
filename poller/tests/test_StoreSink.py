"""Unit tests for StoreSink."""

import asyncio
import time

import pytest

from poller.src.errors import (
    DeliveryError,
    DeserializeError,
    NotFoundError,
    ReadError,
    StoreError,
)
from poller.src.sinks import StoreSink
from poller.src.stores import MemoryStore


class FailingStore(MemoryStore):
    """Memory store whose writes and reads can be made to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_writes = False
        self.fail_reads = False

    def put(self, key: str, value: bytes) -> None:
        if self.fail_writes:
            raise StoreError("disk full")
        super().put(key, value)

    def get(self, key: str) -> bytes | None:
        if self.fail_reads:
            raise StoreError("disk gone")
        return super().get(key)


class SlowStore(MemoryStore):
    """Memory store whose writes block the calling thread."""

    def put(self, key: str, value: bytes) -> None:
        time.sleep(0.3)
        super().put(key, value)


class TestStoreSinkRead:
    """Test reads through the store sink."""

    def test_supports_read(self) -> None:
        """The store sink should advertise read support."""
        assert StoreSink().supports_read

    def test_not_found(self) -> None:
        """Reading an identifier never stored should raise NotFoundError."""
        with pytest.raises(NotFoundError, match="No round stored for 'ETH'"):
            StoreSink().read("ETH")

    @pytest.mark.asyncio
    async def test_exact_value(self, make_round) -> None:
        """A delivered round should be read back unchanged."""
        sink = StoreSink()
        r = make_round("ETH", round_id=10, answer=2500.5)
        await sink.deliver(r)
        assert sink.read("ETH") == r

    @pytest.mark.asyncio
    async def test_last_write_wins(self, make_round) -> None:
        """Reads should return the most recently delivered round."""
        sink = StoreSink()
        await sink.deliver(make_round("ETH", round_id=10))
        await sink.deliver(make_round("ETH", round_id=11, answer=2600.0))

        latest = sink.read("ETH")
        assert latest.round_id == 11
        assert latest.answer == 2600.0

    def test_corrupt_data(self) -> None:
        """Corrupt stored bytes should raise DeserializeError."""
        store = MemoryStore()
        store.put("ETH", b"\x9f\x01")
        with pytest.raises(DeserializeError):
            StoreSink(store).read("ETH")

    def test_store_read_failure(self) -> None:
        """A failing store should surface as ReadError."""
        store = FailingStore()
        store.fail_reads = True
        with pytest.raises(ReadError, match="disk gone"):
            StoreSink(store).read("ETH")


class TestStoreSinkDelivery:
    """Test deliveries to the store sink."""

    @pytest.mark.asyncio
    async def test_failed_write_keeps_previous(self, make_round) -> None:
        """A failed write should raise and leave the prior round readable."""
        store = FailingStore()
        sink = StoreSink(store)
        await sink.deliver(make_round("ETH", round_id=10))

        store.fail_writes = True
        with pytest.raises(DeliveryError, match="Cannot store ETH"):
            await sink.deliver(make_round("ETH", round_id=11))

        assert sink.read("ETH").round_id == 10

    @pytest.mark.asyncio
    async def test_sqlite_backed(self, make_round, tmp_path) -> None:
        """from_path should persist rounds to SQLite."""
        path = tmp_path / "rounds.db"
        sink = StoreSink.from_path(path)
        await sink.deliver(make_round("BTC", round_id=3))
        await sink.close()

        reopened = StoreSink.from_path(path)
        assert reopened.read("BTC").round_id == 3
        await reopened.close()

    @pytest.mark.asyncio
    async def test_slow_store_does_not_block_loop(self, make_round) -> None:
        """A blocking write should not stall other tasks on the event loop."""
        sink = StoreSink(SlowStore())
        loop = asyncio.get_running_loop()
        max_lag = 0.0
        done = asyncio.Event()

        async def ticker() -> None:
            nonlocal max_lag
            while not done.is_set():
                before = loop.time()
                await asyncio.sleep(0.01)
                max_lag = max(max_lag, loop.time() - before - 0.01)

        task = asyncio.create_task(ticker())
        await asyncio.sleep(0)
        await sink.deliver(make_round("ETH", round_id=10))
        done.set()
        await task

        assert max_lag < 0.1
        assert sink.read("ETH").round_id == 10
