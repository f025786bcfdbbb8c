"""FeedController: Start/stop lifecycle for one fetch loop.

The controller owns exactly one :class:`FetchLoop` bound to one
configuration and one sink. Stopping is cooperative: ``stop()`` sets a
cancel event, then waits until the loop acknowledges by exiting.

State machine::

    Idle --start()--> Running --stop()--> Stopping --ack--> Stopped

A controller cannot be restarted; build a new one instead.

.. code-block:: python

    sink = StoreSink()
    controller = configure(feeds, 10, ChainlinkClient.from_rpc_url(url), sink)
    controller.start()
    ...
    await controller.stop()
    controller.read("ETH")
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING, Iterable

from .Configuration import Configuration
from .errors import LifecycleError, ShutdownError
from .Feed import Feed
from .FeedTracker import FeedTracker
from .FetchLoop import FetchLoop

if TYPE_CHECKING:
    from .ChainlinkClient import ContractClient
    from .Round import Round
    from .sinks import Sink

logger = logging.getLogger(__name__)


class ControllerState(str, Enum):
    """Lifecycle states of a :class:`FeedController`."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


class FeedController:
    """Owns the start/stop protocol of one fetch loop.

    :ivar configuration: Feeds, interval and client.
    :ivar sink: Delivery target for rounds.
    :ivar tracker: Per-feed outcome counters, updated by the loop.
    :ivar log: Logger used by the controller and its loop.
    """

    def __init__(
        self,
        configuration: Configuration,
        sink: Sink,
        log: logging.Logger | None = None,
    ) -> None:
        """Initialize the controller in the Idle state.

        :param configuration: Feeds, interval and client.
        :param sink: Delivery target for rounds.
        :param log: Logger for the controller and loop (default: module logger).
        """
        self.configuration = configuration
        self.sink = sink
        self.log = log or logger
        self.tracker = FeedTracker(configuration.identifiers)

        self._state = ControllerState.IDLE
        self._cancel_event = asyncio.Event()
        self._ack_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._loop: FetchLoop | None = None

    @property
    def state(self) -> ControllerState:
        """Current lifecycle state."""
        return self._state

    @property
    def is_running(self) -> bool:
        """Check if the loop has been started and not yet asked to stop."""
        return self._state is ControllerState.RUNNING

    @property
    def cycles(self) -> int:
        """Number of cycles completed by the loop."""
        return self._loop.cycles if self._loop else 0

    def start(self) -> None:
        """Spawn the fetch loop as a background task and return immediately.

        Must be called from within a running event loop.

        :raises LifecycleError: If the controller was already started.
        :raises RuntimeError: If no event loop is running.
        """
        if self._state is not ControllerState.IDLE:
            raise LifecycleError(
                f"Cannot start a controller in state '{self._state.value}'"
            )

        self._loop = FetchLoop(
            self.configuration,
            self.sink,
            self._cancel_event,
            tracker=self.tracker,
            log=self.log,
        )
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="feed-fetch-loop"
        )
        self._task.add_done_callback(self._on_task_done)
        self._state = ControllerState.RUNNING
        self.log.info(
            f"Controller started: feeds={self.configuration.identifiers}, "
            f"sink={self.sink.name}"
        )

    async def _run(self) -> None:
        assert self._loop is not None
        await self._loop.run()
        self._ack_event.set()

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        # The loop exiting completes a requested stop, even if the stop()
        # caller stopped waiting.
        if self._state is ControllerState.STOPPING:
            self._state = ControllerState.STOPPED
        if task.cancelled() or task.exception() is None:
            return
        self.log.error(f"Fetch loop terminated abnormally: {task.exception()}")

    async def stop(self, timeout: float | None = None) -> None:
        """Signal the loop to exit and wait for its acknowledgement.

        :param timeout: Max seconds to wait before cancelling the loop task
            (default: wait until the loop acknowledges).
        :raises LifecycleError: If the controller is not running.
        :raises ShutdownError: If the loop exited without acknowledging.
        """
        if self._state is not ControllerState.RUNNING:
            raise LifecycleError(
                f"Cannot stop a controller in state '{self._state.value}'"
            )
        assert self._task is not None

        self._state = ControllerState.STOPPING
        self._cancel_event.set()
        self.log.info("Stop requested, waiting for fetch loop to acknowledge")

        done, _ = await asyncio.wait({self._task}, timeout=timeout)
        if not done:
            self._task.cancel()
            await asyncio.wait({self._task})
            self._state = ControllerState.STOPPED
            raise ShutdownError(f"Fetch loop did not acknowledge within {timeout}s")

        self._state = ControllerState.STOPPED

        if self._task.cancelled():
            raise ShutdownError("Fetch loop was cancelled before acknowledging")
        exc = self._task.exception()
        if exc is not None:
            raise ShutdownError(f"Fetch loop terminated abnormally: {exc}") from exc
        if not self._ack_event.is_set():
            raise ShutdownError("Fetch loop exited without acknowledging")

        self.log.info(f"Controller stopped after {self.cycles} cycles")

    def read(self, identifier: str) -> Round:
        """Read the latest round stored for an identifier.

        :param identifier: Feed identifier.
        :returns: Latest stored round.
        :raises NotFoundError: If nothing was stored for the identifier.
        :raises DeserializeError: If the stored data is corrupt.
        :raises ReadError: If the sink does not support reads.
        """
        return self.sink.read(identifier)

    async def close(self) -> None:
        """Stop the loop if it is running, then close the sink.

        If a stop was requested but nobody is waiting for it, waits for the
        loop to exit before the sink is closed.
        """
        try:
            if self._state is ControllerState.RUNNING:
                await self.stop()
            elif self._state is ControllerState.STOPPING and self._task is not None:
                await asyncio.wait({self._task})
        finally:
            await self.sink.close()

    async def __aenter__(self) -> FeedController:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


def configure(
    feeds: Iterable[Feed | tuple[str, str]],
    interval_seconds: float,
    client: ContractClient,
    sink: Sink,
    *,
    fetch_timeout: float | None = 10.0,
    max_concurrency: int = 4,
    log: logging.Logger | None = None,
) -> FeedController:
    """Build a controller for a feed registry.

    :param feeds: Feeds, or (identifier, address) tuples, in registry order.
    :param interval_seconds: Seconds between full cycles.
    :param client: Contract client performing the reads.
    :param sink: Delivery target for rounds.
    :param fetch_timeout: Per-call timeout in seconds (default: 10.0).
    :param max_concurrency: Max fetches in flight per cycle (default: 4).
    :param log: Logger for the controller and loop.
    :returns: Idle controller.
    :raises ValueError: If the configuration is invalid.
    """
    registry = tuple(
        feed if isinstance(feed, Feed) else Feed(*feed) for feed in feeds
    )
    configuration = Configuration(
        feeds=registry,
        fetch_interval=interval_seconds,
        client=client,
        fetch_timeout=fetch_timeout,
        max_concurrency=max_concurrency,
    )
    return FeedController(configuration, sink, log=log)
