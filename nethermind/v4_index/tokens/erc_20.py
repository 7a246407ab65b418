import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass
from typing import Any, Protocol

from eth_abi.exceptions import DecodingError as ABIDecodingError
from eth_utils import to_checksum_address
from web3 import Web3
from web3.exceptions import Web3Exception

from nethermind.v4_index.exceptions import TokenMetadataError

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("v4_index").getChild("tokens")

ERC20_METADATA_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "name",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "symbol",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "decimals",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
    },
]


@dataclass(frozen=True, slots=True)
class TokenMetadata:
    """Metadata of an ERC20 token, as used for pricing"""

    name: str
    """
        UTF-8 Name of the token from Token Contract
    """

    symbol: str
    """
        Token Symbol from Contract
    """

    decimals: int
    """
        Number of decimals from Token Contract
    """

    def to_dict(self) -> dict[str, Any]:
        """Returns dictionary containing token metadata"""
        return {"name": self.name, "symbol": self.symbol, "decimals": self.decimals}


NATIVE_TOKEN = TokenMetadata(name="Ethereum", symbol="ETH", decimals=18)

UNKNOWN_TOKEN = TokenMetadata(name="Unknown Token", symbol="UNKNOWN", decimals=18)


class ContractReader(Protocol):
    """Read-call primitive against a token contract.  Each call fails independently"""

    def call(self, address: str, function_name: str) -> Any:
        """
        Calls a view function with no arguments on the token at address.

        Raises TokenMetadataError if the call fails, times out, or the result cannot be decoded.
        """


class Web3ContractReader:
    """
    ContractReader backed by a :class:`~web3.Web3` connection.  Every call is bounded by a timeout so a single
    unresponsive node request cannot stall event processing.
    """

    def __init__(self, w3: Web3, timeout: float = 10.0, max_workers: int = 4):  # pylint: disable=invalid-name
        self.w3 = w3
        self.timeout = timeout
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="erc20-read")

    def call(self, address: str, function_name: str) -> Any:
        contract = self.w3.eth.contract(address=to_checksum_address(address), abi=ERC20_METADATA_ABI)
        future = self._executor.submit(getattr(contract.functions, function_name)().call)
        try:
            return future.result(timeout=self.timeout)
        except FuturesTimeoutError as exc:
            future.cancel()
            raise TokenMetadataError(f"{function_name}() on {address} timed out after {self.timeout}s") from exc
        except (Web3Exception, ABIDecodingError, ValueError, OSError) as exc:
            raise TokenMetadataError(f"{function_name}() on {address} failed: {exc}") from exc

    def close(self):
        """Shuts down the worker threads used for read calls"""
        self._executor.shutdown(wait=False, cancel_futures=True)


def fetch_token_metadata(reader: ContractReader, address: str) -> TokenMetadata:
    """
    Queries name, symbol and decimals from an ERC20 contract.  Either all three values are valid, or a
    TokenMetadataError is raised.  Partially populated metadata is never returned.

    :param reader: ContractReader used to perform the read calls
    :param address: token address
    :return: TokenMetadata
    """
    name = reader.call(address, "name")
    symbol = reader.call(address, "symbol")
    decimals = reader.call(address, "decimals")

    if not isinstance(name, str) or not isinstance(symbol, str):
        raise TokenMetadataError(f"Token {address} returned non-string name or symbol: {name!r}, {symbol!r}")
    if isinstance(decimals, bool) or not isinstance(decimals, int) or not 0 <= decimals <= 255:
        raise TokenMetadataError(f"Token {address} returned invalid decimals: {decimals!r}")

    logger.debug(f"Fetched metadata for {address}: {name} ({symbol}) with {decimals} decimals")
    return TokenMetadata(name=name, symbol=symbol, decimals=decimals)
