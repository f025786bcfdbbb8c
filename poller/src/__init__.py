"""
Oracle Feed Poller - Chainlink Round Polling Module

This module polls on-chain price-oracle contracts and delivers each round:
- Feed: Tracked (identifier, contract address) pair
- Round: Normalized latest round data
- ChainlinkClient: AsyncWeb3 reader for AggregatorV3Interface contracts
- FetchLoop: Periodic fetch cycles with per-feed failure isolation
- FeedController: Start/stop lifecycle with acknowledged shutdown
- sinks: Delivery targets (queue, store, callback, webhook)
"""

from .ChainlinkClient import ChainlinkClient, ContractClient
from .ChainPresets import Chain, available_networks
from .Configuration import Configuration
from .errors import (
    DeliveryError,
    DeserializeError,
    FetchError,
    LifecycleError,
    LoggingSetupError,
    NotFoundError,
    PollerError,
    ReadError,
    ShutdownError,
    StoreError,
    SubscriptionClosedError,
)
from .Feed import Feed
from .FeedController import ControllerState, FeedController, configure
from .FeedTracker import FeedStatus, FeedTracker
from .FetchLoop import FetchLoop
from .logging_setup import configure_logging
from .Round import Round
from .sinks import CallbackSink, QueueSink, Sink, StoreSink, WebhookSink
from .stores import KeyValueStore, MemoryStore, SqliteStore

__all__ = [
    "CallbackSink",
    "Chain",
    "ChainlinkClient",
    "Configuration",
    "ContractClient",
    "ControllerState",
    "DeliveryError",
    "DeserializeError",
    "Feed",
    "FeedController",
    "FeedStatus",
    "FeedTracker",
    "FetchError",
    "FetchLoop",
    "KeyValueStore",
    "LifecycleError",
    "LoggingSetupError",
    "MemoryStore",
    "NotFoundError",
    "PollerError",
    "QueueSink",
    "ReadError",
    "Round",
    "ShutdownError",
    "Sink",
    "SqliteStore",
    "StoreError",
    "StoreSink",
    "SubscriptionClosedError",
    "WebhookSink",
    "available_networks",
    "configure",
    "configure_logging",
]
