import logging
import random
from typing import Any

import pytest
from eth_utils import to_checksum_address
from sqlalchemy.pool import StaticPool

from nethermind.v4_index.database import EntityStore, create_db_engine, migrate_up
from nethermind.v4_index.exceptions import TokenMetadataError
from nethermind.v4_index.reconciler import PoolManagerReconciler
from nethermind.v4_index.tokens import TokenResolver

from .utils import USDC, WETH


class FakeContractReader:
    """ContractReader serving token metadata from a dictionary, and recording every call"""

    def __init__(self, tokens: dict[str, dict[str, Any]]):
        self.tokens = {to_checksum_address(address): values for address, values in tokens.items()}
        self.calls: list[tuple[str, str]] = []

    def call(self, address: str, function_name: str) -> Any:
        self.calls.append((to_checksum_address(address), function_name))
        try:
            value = self.tokens[to_checksum_address(address)][function_name]
        except KeyError as exc:
            raise TokenMetadataError(f"{function_name}() reverted on {address}") from exc

        if isinstance(value, Exception):
            raise value
        return value


@pytest.fixture(name="random_address")
def fixture_random_address():
    def _generate_random_address():
        return to_checksum_address(random.randbytes(20).hex())

    return _generate_random_address


@pytest.fixture(name="db_engine")
def fixture_db_engine():
    engine = create_db_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    migrate_up(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="store")
def fixture_store(db_engine):
    entity_store = EntityStore.from_engine(db_engine)
    yield entity_store
    entity_store.close()


@pytest.fixture(name="token_reader")
def fixture_token_reader():
    return FakeContractReader(
        {
            USDC: {"name": "USD Coin", "symbol": "USDC", "decimals": 6},
            WETH: {"name": "Wrapped Ether", "symbol": "WETH", "decimals": 18},
        }
    )


@pytest.fixture(name="resolver")
def fixture_resolver(store, token_reader):
    return TokenResolver(store, token_reader)


@pytest.fixture(name="reconciler")
def fixture_reconciler(store, resolver):
    return PoolManagerReconciler(store, resolver)


@pytest.fixture(name="debug_logger")
def fixture_debug_logger():
    logger = logging.getLogger("nethermind").getChild("v4_index")
    logger.setLevel(logging.DEBUG)
    return logger
