import logging

from web3 import Web3

from nethermind.v4_index.config import IndexerSettings
from nethermind.v4_index.database import EntityStore, create_db_engine, migrate_up
from nethermind.v4_index.decoding import PoolManagerLogDecoder
from nethermind.v4_index.processor import LogProcessor
from nethermind.v4_index.reconciler import PoolManagerReconciler
from nethermind.v4_index.tokens import TokenResolver, Web3ContractReader

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("v4_index")


def build_log_processor(settings: IndexerSettings, w3: Web3 | None = None) -> LogProcessor:  # pylint: disable=invalid-name
    """
    Wires the store, token resolver, reconciler & decoder for the configured network, creating the PoolManager
    tables if they do not exist.

    :param settings: IndexerSettings, typically loaded with IndexerSettings.from_env()
    :param w3: Web3 connection for token metadata reads.  If None, connects to settings.json_rpc
    :return: LogProcessor for the configured chain
    """
    if w3 is None:
        if settings.json_rpc is None:
            raise ValueError("JSON_RPC must be set to read token metadata")
        # Requests time out at the token read timeout, so timed out reads release their worker thread
        w3 = Web3(Web3.HTTPProvider(settings.json_rpc, request_kwargs={"timeout": settings.token_read_timeout}))

    db_engine = create_db_engine(settings.db_url)
    migrate_up(db_engine)

    store = EntityStore.from_engine(db_engine)
    resolver = TokenResolver(store, Web3ContractReader(w3, timeout=settings.token_read_timeout))

    logger.info(
        f"Indexing PoolManager {settings.network.pool_manager} on {settings.network.name} "
        f"(chain {settings.network.chain_id}) from block {settings.network.start_block}"
    )
    return LogProcessor(
        decoder=PoolManagerLogDecoder(),
        reconciler=PoolManagerReconciler(store, resolver),
        chain_id=settings.network.chain_id,
    )
