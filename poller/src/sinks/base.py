"""Base sink interface and sink registry.

A sink decides what happens to a fetched round. The fetch loop only knows
:meth:`Sink.deliver`; new delivery targets are added by subclassing and
registering, without touching the loop.

.. code-block:: python

    @register_sink
    class PrintSink(Sink):
        name = "print"

        async def deliver(self, round: Round) -> None:
            print(round)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

from ..errors import ReadError

if TYPE_CHECKING:
    from ..Round import Round


class Sink(ABC):
    """Abstract base class for round delivery targets.

    Subclasses must implement:
        - name: Class variable identifying the sink (e.g., "queue", "store")
        - deliver(): Async method accepting one round

    The fetch loop is the only caller of :meth:`deliver` and never calls it
    concurrently.

    :cvar name: Unique identifier for this sink.
    """

    name: ClassVar[str] = ""

    @abstractmethod
    async def deliver(self, round: Round) -> None:
        """Deliver one round.

        :param round: Round produced by a successful fetch.
        :raises DeliveryError: If the round could not be delivered.
        """
        pass

    @property
    def supports_read(self) -> bool:
        """Check if rounds delivered to this sink can be read back.

        :returns: True if :meth:`read` is implemented.
        """
        return False

    def read(self, identifier: str) -> Round:
        """Read the latest delivered round for an identifier.

        :param identifier: Feed identifier.
        :returns: Latest stored round.
        :raises ReadError: Always, unless overridden.
        """
        raise ReadError(f"Sink '{self.name}' does not support reads")

    async def close(self) -> None:
        """Release resources held by the sink."""
        pass


# Registry of available sinks (populated by subclass imports)
SINK_REGISTRY: dict[str, type[Sink]] = {}


def register_sink(cls: type[Sink]) -> type[Sink]:
    """Decorator to register a sink class in the global registry.

    :param cls: Sink class to register.
    :returns: The registered class (unchanged).
    :raises ValueError: If sink has no name defined.
    """
    if not cls.name:
        raise ValueError(f"Sink {cls.__name__} must define a 'name' class variable")
    SINK_REGISTRY[cls.name] = cls
    return cls


def get_sink(name: str, **kwargs: Any) -> Sink:
    """Get a sink instance by name.

    :param name: Sink name (e.g., "queue", "store").
    :param kwargs: Constructor arguments for the sink.
    :returns: Sink instance.
    :raises ValueError: If sink name is unknown.
    """
    if name not in SINK_REGISTRY:
        available = ", ".join(sorted(SINK_REGISTRY.keys()))
        raise ValueError(f"Unknown sink '{name}'. Available: {available}")
    return SINK_REGISTRY[name](**kwargs)


def get_available_sinks() -> list[str]:
    """Get list of available sink names.

    :returns: Sorted list of registered sink names.
    """
    return sorted(SINK_REGISTRY.keys())
