"""Store sink: persists the latest round per identifier.

Each delivery upserts ``identifier -> CBOR(round)``. Writes run in a worker
thread so a slow store never blocks the event loop. A failed write leaves the
previous value in place, so readers may see one stale round after a failure.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ..errors import DeliveryError, NotFoundError, ReadError, StoreError
from ..Round import Round
from ..stores import KeyValueStore, MemoryStore, SqliteStore
from .base import Sink, register_sink

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


@register_sink
class StoreSink(Sink):
    """Writes rounds to a key-value store and serves reads from it.

    :ivar store: Backing key-value store.
    """

    name = "store"

    def __init__(self, store: KeyValueStore | None = None) -> None:
        """Initialize the store sink.

        :param store: Backing store (default: a new in-memory store).
        """
        self.store: KeyValueStore = store if store is not None else MemoryStore()

    @classmethod
    def from_path(cls, path: str | Path) -> StoreSink:
        """Create a store sink backed by an SQLite file.

        :param path: Database file path.
        :returns: New StoreSink.
        :raises StoreError: If the database cannot be opened.
        """
        return cls(SqliteStore(path))

    async def deliver(self, round: Round) -> None:
        """Upsert the round under its identifier.

        :param round: Round to persist.
        :raises DeliveryError: On serialization or store failure.
        """
        try:
            payload = round.serialize()
        except (ValueError, TypeError) as e:
            raise DeliveryError(f"Cannot serialize {round.identifier}: {e}") from e

        try:
            await asyncio.to_thread(self.store.put, round.identifier, payload)
        except StoreError as e:
            raise DeliveryError(f"Cannot store {round.identifier}: {e}") from e

        logger.debug(f"Stored {round.identifier} round {round.round_id}")

    @property
    def supports_read(self) -> bool:
        return True

    def read(self, identifier: str) -> Round:
        """Read the latest stored round for an identifier.

        :param identifier: Feed identifier.
        :returns: Latest stored round.
        :raises NotFoundError: If nothing was stored for the identifier.
        :raises DeserializeError: If the stored bytes are corrupt.
        :raises ReadError: If the store itself fails.
        """
        try:
            payload = self.store.get(identifier)
        except StoreError as e:
            raise ReadError(f"Cannot read {identifier}: {e}") from e

        if payload is None:
            raise NotFoundError(identifier)

        try:
            return Round.deserialize(payload)
        except ReadError:
            logger.error(f"Stored data for {identifier} could not be decoded")
            raise

    async def close(self) -> None:
        """Close the backing store."""
        self.store.close()
