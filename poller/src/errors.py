"""Exception hierarchy for the feed poller.

Steady-state errors (:class:`FetchError`, :class:`DeliveryError`) are absorbed
by the fetch loop and only logged. Lifecycle, read and setup errors propagate
to the caller.
"""


class PollerError(Exception):
    """Base exception for all poller errors."""

    pass


class FetchError(PollerError):
    """Raised when reading a feed's contract fails.

    :ivar identifier: Identifier of the feed that failed.
    """

    def __init__(self, identifier: str, message: str):
        """Initialize the fetch error.

        :param identifier: Feed identifier.
        :param message: Description of the failure.
        """
        self.identifier = identifier
        super().__init__(f"[{identifier}] {message}")


class DeliveryError(PollerError):
    """Raised when a sink cannot accept a round."""

    pass


class ShutdownError(PollerError):
    """Raised by stop() when the fetch loop exits without acknowledging."""

    pass


class LifecycleError(PollerError):
    """Raised on an invalid start/stop transition."""

    pass


class StoreError(PollerError):
    """Raised when the key-value store fails."""

    pass


class ReadError(PollerError):
    """Raised when a stored round cannot be returned."""

    pass


class NotFoundError(ReadError):
    """Raised when no round was ever stored for an identifier.

    :ivar identifier: Identifier that was looked up.
    """

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"No round stored for '{identifier}'")


class DeserializeError(ReadError):
    """Raised when stored bytes cannot be decoded into a round."""

    pass


class LoggingSetupError(PollerError):
    """Raised when logging cannot be configured."""

    pass


class SubscriptionClosedError(PollerError):
    """Raised when reading from a subscription whose queue sink is closed."""

    pass
