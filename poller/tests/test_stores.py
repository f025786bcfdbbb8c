"""Unit tests for the key-value stores."""

import threading

import pytest

from poller.src.errors import StoreError
from poller.src.stores import MemoryStore, SqliteStore


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    """Each store implementation, opened fresh."""
    if request.param == "memory":
        s = MemoryStore()
    else:
        s = SqliteStore(tmp_path / "rounds.db")
    yield s
    s.close()


class TestStores:
    """Behavior shared by every store."""

    def test_missing_key(self, store) -> None:
        """Absent keys should return None."""
        assert store.get("ETH") is None

    def test_put_get(self, store) -> None:
        """Stored bytes should be returned unchanged."""
        store.put("ETH", b"\x01\x02")
        assert store.get("ETH") == b"\x01\x02"

    def test_last_write_wins(self, store) -> None:
        """A second put should replace the first."""
        store.put("ETH", b"old")
        store.put("ETH", b"new")
        assert store.get("ETH") == b"new"

    def test_keys_sorted(self, store) -> None:
        """keys() should list every key in order."""
        store.put("LINK", b"3")
        store.put("BTC", b"2")
        store.put("ETH", b"1")
        assert store.keys() == ["BTC", "ETH", "LINK"]


class TestSqliteStore:
    """SQLite-specific behavior."""

    def test_persists_across_connections(self, tmp_path) -> None:
        """Values should survive reopening the file."""
        path = tmp_path / "rounds.db"
        first = SqliteStore(path)
        first.put("ETH", b"payload")
        first.close()

        second = SqliteStore(path)
        assert second.get("ETH") == b"payload"
        second.close()

    def test_unopenable_path(self, tmp_path) -> None:
        """A path in a missing directory should raise StoreError."""
        with pytest.raises(StoreError, match="Cannot open store"):
            SqliteStore(tmp_path / "missing" / "rounds.db")

    def test_write_after_close(self, tmp_path) -> None:
        """Writes on a closed connection should raise StoreError."""
        s = SqliteStore(tmp_path / "rounds.db")
        s.close()
        with pytest.raises(StoreError, match="Failed to write"):
            s.put("ETH", b"x")

    def test_write_from_worker_thread(self, tmp_path) -> None:
        """Writes made from another thread should be visible to the opener."""
        s = SqliteStore(tmp_path / "rounds.db")
        worker = threading.Thread(target=s.put, args=("ETH", b"payload"))
        worker.start()
        worker.join()
        assert s.get("ETH") == b"payload"
        s.close()
