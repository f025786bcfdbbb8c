"""ContractUtility: AsyncWeb3 initialization and contract ABI loading."""

import json
from pathlib import Path

from web3 import AsyncHTTPProvider, AsyncWeb3


class ContractUtility:
    """Utility for AsyncWeb3 connection and contract ABI loading.

    :ivar rpc_url: Network RPC URL.
    :ivar w3: Configured AsyncWeb3 instance.
    """

    ABI_DIR = Path(__file__).parent / "abi"

    def __init__(self, rpc_url: str, request_timeout: float = 10.0) -> None:
        """Initialize the contract utility.

        :param rpc_url: HTTP(S) RPC endpoint of the chain.
        :param request_timeout: Timeout for individual RPC requests in seconds.
        :raises ValueError: If the RPC URL is not http(s).
        """
        if not rpc_url.startswith(("http://", "https://")):
            raise ValueError(f"RPC URL must be http(s), got '{rpc_url}'")
        self.rpc_url = rpc_url
        self.w3 = AsyncWeb3(
            AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": request_timeout})
        )

    @classmethod
    def get_abi(cls, contract_name: str) -> list:
        """Fetch the ABI of a contract from the abi folder.

        Accepts both a bare ABI list and a compiler artifact with an
        ``abi`` key.

        :param contract_name: Name of the contract (e.g., "IAggregatorV3Interface").
        :returns: ABI as a list of entries.
        :raises FileNotFoundError: If no ABI file exists for the contract.
        """
        abi_path = (cls.ABI_DIR / f"{contract_name}.json").resolve()

        with open(abi_path, "r") as file:
            contract_data = json.load(file)

        if isinstance(contract_data, dict):
            return contract_data["abi"]
        return contract_data
