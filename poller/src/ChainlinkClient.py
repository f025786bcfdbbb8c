"""ChainlinkClient: Reads latest round data from Chainlink aggregators.

The client implements the :class:`ContractClient` interface the fetch loop
depends on. One call to :meth:`ChainlinkClient.fetch` performs one
``latestRoundData()`` read and returns a normalized :class:`Round`.

Decimals are read once per aggregator and cached. The cache entry expires
after ``decimals_ttl`` seconds so a reconfigured aggregator is picked up.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Protocol

from .ContractUtility import ContractUtility
from .errors import FetchError
from .Round import Round

if TYPE_CHECKING:
    from web3 import AsyncWeb3
    from web3.contract import AsyncContract

logger = logging.getLogger(__name__)

AGGREGATOR_CONTRACT = "IAggregatorV3Interface"


class ContractClient(Protocol):
    """Abstract interface for reading one feed's latest round."""

    async def fetch(self, identifier: str, address: str) -> Round: ...


class ChainlinkClient:
    """Contract client for Chainlink ``AggregatorV3Interface`` feeds.

    :ivar w3: AsyncWeb3 instance used for calls.
    :ivar decimals_ttl: Seconds before cached decimals are re-read
        (None to cache forever).
    """

    DEFAULT_DECIMALS_TTL = 3600.0

    def __init__(
        self,
        w3: AsyncWeb3,
        decimals_ttl: float | None = DEFAULT_DECIMALS_TTL,
    ) -> None:
        """Initialize the client.

        :param w3: Connected AsyncWeb3 instance.
        :param decimals_ttl: Seconds before cached decimals expire (default: 3600).
        """
        self.w3 = w3
        self.decimals_ttl = decimals_ttl
        self.abi = ContractUtility.get_abi(AGGREGATOR_CONTRACT)
        self._contracts: dict[str, AsyncContract] = {}
        # address -> (decimals, monotonic time read)
        self._decimals: dict[str, tuple[int, float]] = {}

    @classmethod
    def from_rpc_url(
        cls,
        rpc_url: str,
        request_timeout: float = 10.0,
        decimals_ttl: float | None = DEFAULT_DECIMALS_TTL,
    ) -> ChainlinkClient:
        """Create a client connected to an HTTP RPC endpoint.

        :param rpc_url: RPC endpoint URL.
        :param request_timeout: Timeout for individual RPC requests.
        :param decimals_ttl: Seconds before cached decimals expire.
        :returns: New ChainlinkClient.
        """
        utility = ContractUtility(rpc_url, request_timeout=request_timeout)
        return cls(utility.w3, decimals_ttl=decimals_ttl)

    def _get_contract(self, address: str) -> AsyncContract:
        key = address.lower()
        if key not in self._contracts:
            self._contracts[key] = self.w3.eth.contract(
                address=self.w3.to_checksum_address(address),
                abi=self.abi,
            )
        return self._contracts[key]

    async def get_decimals(self, address: str) -> int:
        """Get the decimals of an aggregator, reading the chain when stale.

        :param address: Aggregator contract address.
        :returns: Number of decimals in the raw answer.
        """
        key = address.lower()
        cached = self._decimals.get(key)
        now = time.monotonic()
        if cached is not None:
            decimals, read_at = cached
            if self.decimals_ttl is None or now - read_at < self.decimals_ttl:
                return decimals

        contract = self._get_contract(address)
        decimals = int(await contract.functions.decimals().call())
        if cached is not None and cached[0] != decimals:
            logger.warning(
                f"Decimals for {address} changed from {cached[0]} to {decimals}"
            )
        self._decimals[key] = (decimals, now)
        return decimals

    def invalidate(self, address: str | None = None) -> None:
        """Drop cached decimals for one address, or for all addresses."""
        if address is None:
            self._decimals.clear()
        else:
            self._decimals.pop(address.lower(), None)

    async def fetch(self, identifier: str, address: str) -> Round:
        """Read the latest round of a feed.

        :param identifier: Feed identifier to stamp on the round.
        :param address: Aggregator contract address.
        :returns: Normalized round.
        :raises FetchError: On invalid address, RPC, revert or decode errors.
        """
        try:
            decimals = await self.get_decimals(address)
            contract = self._get_contract(address)
            (
                round_id,
                answer,
                started_at,
                updated_at,
                answered_in_round,
            ) = await contract.functions.latestRoundData().call()
        except Exception as e:
            raise FetchError(identifier, f"Reading {address} failed: {e}") from e

        try:
            return Round(
                identifier=identifier,
                round_id=int(round_id),
                answered_in_round=int(answered_in_round),
                started_at=int(started_at),
                updated_at=int(updated_at),
                answer=int(answer) / (10**decimals),
            )
        except ValueError as e:
            raise FetchError(identifier, f"Invalid round data from {address}: {e}") from e
