"""Callback sink: forwards each round to a host-registered callable.

The callable receives ``round.to_dict()`` and may be a plain function or a
coroutine function. A failing callback is logged and never interrupts the
fetch loop.
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any, Callable

from .base import Sink, register_sink

if TYPE_CHECKING:
    from ..Round import Round

logger = logging.getLogger(__name__)

RoundCallback = Callable[[dict[str, Any]], Any]


@register_sink
class CallbackSink(Sink):
    """Invokes a callback with the serialized round.

    :ivar callback: Callable receiving the round as a dict.
    :ivar failures: Number of callback invocations that raised.
    """

    name = "callback"

    def __init__(self, callback: RoundCallback) -> None:
        """Initialize the callback sink.

        :param callback: Sync or async callable taking a round dict.
        """
        if not callable(callback):
            raise ValueError("callback must be callable")
        self.callback = callback
        self.failures = 0

    async def deliver(self, round: Round) -> None:
        """Invoke the callback; exceptions are logged and swallowed.

        :param round: Round to forward.
        """
        try:
            result = self.callback(round.to_dict())
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            self.failures += 1
            logger.error(f"Callback failed for {round.identifier}: {e}")
