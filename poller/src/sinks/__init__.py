"""
Delivery targets for fetched rounds.

Usage:
    from poller.src.sinks import get_sink, get_available_sinks

    # Get list of available sinks
    available = get_available_sinks()
    # ['callback', 'queue', 'store', 'webhook']

    # Create a sink instance
    sink = get_sink("queue")
    subscription = sink.subscribe()

    # Persist rounds to SQLite
    sink = StoreSink.from_path("./poller.db")
"""

# Import base classes and utilities
from .base import (
    SINK_REGISTRY,
    Sink,
    get_available_sinks,
    get_sink,
    register_sink,
)

# Import all sink implementations to trigger registration
from .callback import CallbackSink
from .queue import QueueSink, Subscription
from .store import StoreSink
from .webhook import WebhookSink

__all__ = [
    # Base classes
    "Sink",
    # Registry functions
    "register_sink",
    "get_sink",
    "get_available_sinks",
    "SINK_REGISTRY",
    # Sink implementations
    "CallbackSink",
    "QueueSink",
    "StoreSink",
    "Subscription",
    "WebhookSink",
]
