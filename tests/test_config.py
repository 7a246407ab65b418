import logging
from unittest.mock import MagicMock

import pytest
from eth_utils import to_checksum_address
from rich.logging import RichHandler

from nethermind.v4_index import LogProcessor
from nethermind.v4_index.config import NETWORKS, IndexerSettings
from nethermind.v4_index.logs import configure_logger
from nethermind.v4_index.main import build_log_processor

from .utils import CHAIN_ID, USDC, WETH, initialize_log


@pytest.fixture(name="clean_env")
def fixture_clean_env(monkeypatch):
    for name in ("JSON_RPC", "DB_URL", "V4_NETWORK", "TOKEN_READ_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_settings_defaults(clean_env):
    settings = IndexerSettings.from_env()

    assert settings.json_rpc is None
    assert settings.db_url == "sqlite:///:memory:"
    assert settings.network == NETWORKS["mainnet"]
    assert settings.network.chain_id == 1
    assert settings.network.pool_manager == to_checksum_address("0x000000000004444c5dc75cb358380d2e3de08a90")
    assert settings.token_read_timeout == 10.0


def test_settings_from_env(clean_env):
    clean_env.setenv("JSON_RPC", "http://localhost:8545")
    clean_env.setenv("DB_URL", "sqlite:///v4.db")
    clean_env.setenv("TOKEN_READ_TIMEOUT", "2.5")

    settings = IndexerSettings.from_env()

    assert settings.json_rpc == "http://localhost:8545"
    assert settings.db_url == "sqlite:///v4.db"
    assert settings.token_read_timeout == 2.5


def test_unknown_network(clean_env):
    clean_env.setenv("V4_NETWORK", "goerli")

    with pytest.raises(ValueError, match="Unsupported network"):
        IndexerSettings.from_env()


def test_build_log_processor_requires_rpc(clean_env):
    with pytest.raises(ValueError, match="JSON_RPC"):
        build_log_processor(IndexerSettings.from_env())


def test_build_log_processor_bounds_rpc_requests(clean_env):
    clean_env.setenv("JSON_RPC", "http://localhost:8545")
    clean_env.setenv("TOKEN_READ_TIMEOUT", "2.5")

    processor = build_log_processor(IndexerSettings.from_env())
    reader = processor.reconciler.resolver.reader

    assert reader.timeout == 2.5
    assert dict(reader.w3.provider.get_request_kwargs())["timeout"] == 2.5
    reader.close()


def test_build_log_processor(clean_env):
    w3 = MagicMock()
    functions = w3.eth.contract.return_value.functions
    functions.name.return_value.call.return_value = "Token"
    functions.symbol.return_value.call.return_value = "TKN"
    functions.decimals.return_value.call.return_value = 18

    processor = build_log_processor(IndexerSettings.from_env(), w3=w3)

    assert isinstance(processor, LogProcessor)
    assert processor.chain_id == CHAIN_ID
    assert processor.process_logs([initialize_log()]) == 1

    store = processor.reconciler.store
    assert store.get_token(USDC, CHAIN_ID).symbol == "TKN"
    assert store.get_token(WETH, CHAIN_ID).decimals == 18


def test_configure_logger():
    test_logger = logging.getLogger("nethermind").getChild("v4_index").getChild("test")

    console = configure_logger(test_logger, logging.DEBUG)

    assert console is not None
    assert test_logger.level == logging.DEBUG
    assert len(test_logger.handlers) == 1
    assert isinstance(test_logger.handlers[0], RichHandler)
