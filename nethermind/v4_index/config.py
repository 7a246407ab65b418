import os
from dataclasses import dataclass

from dotenv import load_dotenv
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address


@dataclass(frozen=True, slots=True)
class NetworkConfig:
    """PoolManager deployment on a single network"""

    name: str
    chain_id: int
    pool_manager: ChecksumAddress
    start_block: int
    end_block: int | None = None
    """ Last block to index.  None follows the chain head """


NETWORKS: dict[str, NetworkConfig] = {
    "mainnet": NetworkConfig(
        name="mainnet",
        chain_id=1,
        pool_manager=to_checksum_address("0x000000000004444c5dc75cb358380d2e3de08a90"),
        start_block=21688329,
    ),
}


@dataclass(frozen=True, slots=True)
class IndexerSettings:
    """Connections & tuning for the indexer"""

    json_rpc: str | None
    db_url: str
    network: NetworkConfig
    token_read_timeout: float = 10.0

    @classmethod
    def from_env(cls) -> "IndexerSettings":
        """
        Loads settings from the environment, reading a .env file if present.

            * JSON_RPC -- RPC url used for token metadata reads
            * DB_URL -- SQLAlchemy DB URL.  Defaults to an in-memory sqlite DB
            * V4_NETWORK -- key of the network in NETWORKS.  Defaults to mainnet
            * TOKEN_READ_TIMEOUT -- timeout in seconds for each token metadata call.  Defaults to 10

        """
        load_dotenv()

        network_name = os.environ.get("V4_NETWORK", "mainnet")
        if network_name not in NETWORKS:
            raise ValueError(f"Unsupported network: {network_name}.  Supported networks: {list(NETWORKS)}")

        return cls(
            json_rpc=os.environ.get("JSON_RPC"),
            db_url=os.environ.get("DB_URL", "sqlite:///:memory:"),
            network=NETWORKS[network_name],
            token_read_timeout=float(os.environ.get("TOKEN_READ_TIMEOUT", "10")),
        )
