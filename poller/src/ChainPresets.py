"""ChainPresets: Default RPC endpoints and known Chainlink feed addresses.

.. code-block:: python

    >>> chain = Chain.from_id(1)
    >>> chain.name
    'ethereum'
    >>> [f.identifier for f in chain.feeds(["BTC"])]
    ['BTC']
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .Feed import Feed

# Chainlink USD price feeds per chain, in preset order.
ETHEREUM_CONTRACTS: dict[str, str] = {
    "ETH": "0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419",
    "BTC": "0xF4030086522a5bEEa4988F8cA5B36dbC97BeE88c",
    "LINK": "0x2c1d072e956AFFC0D435Cb7AC38EF18d24d9127c",
    "USDC": "0x8fFfFfd4AfB6115b954Bd326cbe7B4BA576818f6",
}

BSC_CONTRACTS: dict[str, str] = {
    "ETH": "0x9ef1B8c0E4F7dc8bF5719Ea496883DC6401d5b2e",
    "1INCH": "0x9a177Bb9f5b6083E962f9e62bD21d4b5660Aeb03",
}

ARBITRUM_CONTRACTS: dict[str, str] = {
    "LINK": "0x86E53CF1B870786351Da77A57575e79CB55812CB",
    "DAI": "0xc5C8E77B397E531B8EC06BFb0048328B30E9eCfB",
}

# chain id -> (name, default RPC URL, contracts)
CHAIN_PRESETS: dict[int, tuple[str, str, dict[str, str]]] = {
    1: ("ethereum", "https://1rpc.io/eth", ETHEREUM_CONTRACTS),
    56: ("bsc", "https://bsc-dataseed1.binance.org/", BSC_CONTRACTS),
    42161: ("arbitrum", "https://1rpc.io/arb", ARBITRUM_CONTRACTS),
}

CHAIN_ALIASES: dict[str, str] = {
    "mainnet": "ethereum",
    "eth": "ethereum",
    "bnb": "bsc",
    "binance": "bsc",
    "arbitrum-one": "arbitrum",
    "arb": "arbitrum",
}


@dataclass(frozen=True)
class Chain:
    """A supported EVM network.

    :ivar chain_id: EIP-155 chain id.
    :ivar name: Canonical network name.
    :ivar default_rpc_url: Fallback public RPC endpoint.
    :ivar contracts: Ticker to aggregator address.
    :ivar rpc_override: Custom RPC URL, if given.
    """

    chain_id: int
    name: str
    default_rpc_url: str
    contracts: dict[str, str] = field(default_factory=dict)
    rpc_override: str | None = None

    @property
    def rpc_url(self) -> str:
        """RPC URL to use: override, then ``RPC_URL`` env var, then default."""
        return self.rpc_override or os.environ.get("RPC_URL") or self.default_rpc_url

    def feeds(self, tickers: list[str] | None = None) -> tuple[Feed, ...]:
        """Build feeds for the given tickers (default: every preset ticker).

        :param tickers: Tickers to select, in the order wanted.
        :returns: Tuple of feeds.
        :raises ValueError: If a ticker has no known contract on this chain.
        """
        if tickers is None:
            return tuple(Feed(t, a) for t, a in self.contracts.items())

        feeds = []
        for ticker in tickers:
            key = ticker.strip().upper()
            if key not in self.contracts:
                available = ", ".join(self.contracts)
                raise ValueError(
                    f"No {key} feed known on {self.name}. Available: {available}"
                )
            feeds.append(Feed(key, self.contracts[key]))
        return tuple(feeds)

    @classmethod
    def from_id(cls, chain_id: int, rpc_url: str | None = None) -> Chain:
        """Create a chain preset from its chain id.

        :param chain_id: EIP-155 chain id (1, 56 or 42161).
        :param rpc_url: Optional custom RPC URL.
        :raises ValueError: If the chain id is not supported.
        """
        if chain_id not in CHAIN_PRESETS:
            supported = ", ".join(str(c) for c in sorted(CHAIN_PRESETS))
            raise ValueError(f"Unsupported chain id {chain_id}. Supported: {supported}")
        name, default_rpc, contracts = CHAIN_PRESETS[chain_id]
        return cls(chain_id, name, default_rpc, dict(contracts), rpc_url)

    @classmethod
    def from_name(cls, name: str, rpc_url: str | None = None) -> Chain:
        """Create a chain preset from its name, an alias, or a numeric id.

        :param name: Network name (e.g., "ethereum", "bsc", "arbitrum", "1").
        :param rpc_url: Optional custom RPC URL.
        :raises ValueError: If the network is unknown.
        """
        key = name.strip().lower()
        if key.isdigit():
            return cls.from_id(int(key), rpc_url)
        key = CHAIN_ALIASES.get(key, key)
        for chain_id, (preset_name, _, _) in CHAIN_PRESETS.items():
            if preset_name == key:
                return cls.from_id(chain_id, rpc_url)
        supported = ", ".join(sorted(p[0] for p in CHAIN_PRESETS.values()))
        raise ValueError(f"Unknown network '{name}'. Supported: {supported}")


def available_networks() -> list[str]:
    """Get the canonical names of all preset networks."""
    return sorted(p[0] for p in CHAIN_PRESETS.values())
