"""Queue sink: fan-out of rounds to in-process subscribers.

Every subscriber gets its own queue, so a slow or abandoned subscriber never
blocks the fetch loop or the other subscribers. A full subscriber queue drops
the round for that subscriber only.

.. code-block:: python

    sink = QueueSink()
    subscription = sink.subscribe()
    controller = configure(feeds, 10, client, sink)
    controller.start()
    async for round in subscription:
        print(round.identifier, round.answer)
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ..errors import DeliveryError, SubscriptionClosedError
from .base import Sink, register_sink

if TYPE_CHECKING:
    from ..Round import Round

logger = logging.getLogger(__name__)

# Marks the end of a subscription's stream.
_END = object()


class Subscription:
    """A single subscriber's view of a :class:`QueueSink`.

    :ivar maxsize: Maximum buffered rounds (0 for unbounded).
    :ivar dropped: Rounds dropped because the buffer was full.
    """

    def __init__(self, sink: QueueSink, maxsize: int = 0) -> None:
        self._sink = sink
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._ended = False
        self.maxsize = maxsize
        self.dropped = 0

    @property
    def closed(self) -> bool:
        """Check if no further rounds will arrive."""
        return self._ended

    def qsize(self) -> int:
        """Number of buffered rounds."""
        return self._queue.qsize() - (1 if self._ended else 0)

    def _offer(self, round: Round) -> bool:
        if self._ended:
            return False
        if self.maxsize and self._queue.qsize() >= self.maxsize:
            self.dropped += 1
            return False
        self._queue.put_nowait(round)
        return True

    def _end(self) -> None:
        if not self._ended:
            self._ended = True
            self._queue.put_nowait(_END)

    async def get(self) -> Round:
        """Wait for the next round.

        :returns: Next delivered round.
        :raises SubscriptionClosedError: Once the stream has ended and
            every buffered round was consumed.
        """
        item = await self._queue.get()
        if item is _END:
            # Leave the marker in place so later calls fail fast too.
            self._queue.put_nowait(_END)
            raise SubscriptionClosedError("Subscription is closed")
        return item  # type: ignore[return-value]

    def close(self) -> None:
        """Unsubscribe; buffered rounds remain readable."""
        self._sink._unsubscribe(self)
        self._end()

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> Round:
        try:
            return await self.get()
        except SubscriptionClosedError:
            raise StopAsyncIteration from None


@register_sink
class QueueSink(Sink):
    """Delivers rounds to every current subscriber.

    The sink closes when :meth:`close` is called, or when every subscriber
    that ever subscribed has unsubscribed. Delivering to a closed sink raises
    :class:`DeliveryError`.

    :ivar maxsize: Default per-subscriber buffer size (0 for unbounded).
    """

    name = "queue"

    def __init__(self, maxsize: int = 0) -> None:
        """Initialize the queue sink.

        :param maxsize: Default per-subscriber buffer size (0 for unbounded).
        """
        if maxsize < 0:
            raise ValueError("maxsize must not be negative")
        self.maxsize = maxsize
        self._subscribers: list[Subscription] = []
        self._had_subscribers = False
        self._closed = False

    @property
    def closed(self) -> bool:
        """Check if the sink accepts no more rounds."""
        return self._closed

    @property
    def subscriber_count(self) -> int:
        """Number of active subscribers."""
        return len(self._subscribers)

    def subscribe(self, maxsize: int | None = None) -> Subscription:
        """Register a new subscriber.

        :param maxsize: Buffer size for this subscriber (default: sink default).
        :returns: New subscription.
        :raises DeliveryError: If the sink is closed.
        """
        if self._closed:
            raise DeliveryError("Cannot subscribe to a closed queue sink")
        subscription = Subscription(self, self.maxsize if maxsize is None else maxsize)
        self._subscribers.append(subscription)
        self._had_subscribers = True
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        if subscription in self._subscribers:
            self._subscribers.remove(subscription)
        if self._had_subscribers and not self._subscribers and not self._closed:
            logger.info("All subscribers gone, closing queue sink")
            self._closed = True

    async def deliver(self, round: Round) -> None:
        """Push a round to every subscriber.

        :param round: Round to deliver.
        :raises DeliveryError: If the sink is closed.
        """
        if self._closed:
            raise DeliveryError(f"Queue sink is closed, dropping {round.identifier}")

        for subscription in list(self._subscribers):
            if not subscription._offer(round):
                logger.warning(
                    f"Subscriber buffer full, dropped {round.identifier} "
                    f"round {round.round_id}"
                )

    async def close(self) -> None:
        """Close the sink and end every subscription."""
        self._closed = True
        for subscription in self._subscribers:
            subscription._end()
        self._subscribers.clear()
