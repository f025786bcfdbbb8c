"""Webhook sink: POSTs each round as JSON to an HTTP endpoint.

A shared httpx.AsyncClient is reused across webhook sinks to avoid
connection overhead. Uint256 fields are sent as JSON integers.

Payload::

    {"identifier": "ETH", "round_id": 10, "answered_in_round": 10,
     "started_at": 1700000000, "updated_at": 1700000000, "answer": 2500.5}
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, ClassVar

import httpx

from ..errors import DeliveryError
from .base import Sink, register_sink

if TYPE_CHECKING:
    from ..Round import Round

logger = logging.getLogger(__name__)


@register_sink
class WebhookSink(Sink):
    """Pushes rounds to a webhook URL.

    Closing a sink leaves its HTTP client open: an injected client belongs to
    the caller, and the shared client is released with close_shared_client().

    :cvar DEFAULT_TIMEOUT: Default HTTP request timeout in seconds.
    :ivar url: Endpoint receiving the POST requests.
    :ivar headers: Extra request headers (e.g., authorization).
    :ivar timeout: Request timeout in seconds.
    """

    name = "webhook"

    # Class-level shared HTTP client
    _shared_client: ClassVar[httpx.AsyncClient | None] = None

    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the webhook sink.

        :param url: Endpoint URL (http or https).
        :param headers: Optional request headers.
        :param timeout: Request timeout in seconds (default: 10).
        :param client: Optional client to use instead of the shared one.
        :raises ValueError: If the URL is not http(s).
        """
        if not url.startswith(("http://", "https://")):
            raise ValueError(f"Webhook URL must be http(s), got '{url}'")
        self.url = url
        self.headers = headers or {}
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self._client = client

    @classmethod
    def get_shared_client(cls) -> httpx.AsyncClient:
        """Get or create the shared HTTP client.

        :returns: Shared httpx.AsyncClient instance.
        """
        if cls._shared_client is None or cls._shared_client.is_closed:
            cls._shared_client = httpx.AsyncClient(
                timeout=httpx.Timeout(30.0, connect=10.0),
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
                follow_redirects=True,
            )
        return cls._shared_client

    @classmethod
    async def close_shared_client(cls) -> None:
        """Close the shared HTTP client."""
        if cls._shared_client is not None and not cls._shared_client.is_closed:
            await cls._shared_client.aclose()
            cls._shared_client = None

    async def deliver(self, round: Round) -> None:
        """POST the round to the webhook.

        :param round: Round to push.
        :raises DeliveryError: On non-2xx response or transport error.
        """
        client = self._client or self.get_shared_client()
        try:
            response = await client.post(
                self.url,
                json=round.to_dict(),
                headers=self.headers,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise DeliveryError(f"Webhook timeout for {round.identifier}: {e}") from e
        except httpx.RequestError as e:
            raise DeliveryError(f"Webhook request failed for {round.identifier}: {e}") from e

        if not response.is_success:
            logger.debug(
                "Webhook POST %s failed with status %s: %s",
                self.url,
                response.status_code,
                response.text[:200],
            )
            raise DeliveryError(
                f"Webhook returned HTTP {response.status_code} for {round.identifier}"
            )
