import logging
from dataclasses import dataclass

from eth_utils import to_checksum_address

from nethermind.v4_index.database.store import EntityStore
from nethermind.v4_index.exceptions import TokenMetadataError
from nethermind.v4_index.math.shared import is_native_currency

from .erc_20 import (
    NATIVE_TOKEN,
    UNKNOWN_TOKEN,
    ContractReader,
    TokenMetadata,
    fetch_token_metadata,
)

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("v4_index").getChild("tokens").getChild("resolver")


@dataclass
class ResolverStats:
    """Counters for token metadata resolution"""

    cache_hits: int = 0
    chain_reads: int = 0
    metadata_fallbacks: int = 0


class TokenResolver:
    """
    Resolves ERC20 metadata for the currencies of a pool.  Metadata is read from chain the first time a
    (token, chain) pair is seen, and stored.  Stored metadata is never refreshed or overwritten.

    If any of the name, symbol or decimals calls fail, the token is stored with the UNKNOWN_TOKEN metadata.  A
    token is either completely resolved, or completely defaulted.
    """

    store: EntityStore
    reader: ContractReader
    stats: ResolverStats

    def __init__(self, store: EntityStore, reader: ContractReader):
        self.store = store
        self.reader = reader
        self.stats = ResolverStats()

    def resolve(self, address: str, chain_id: int, block_number: int = 0) -> TokenMetadata:
        """
        Returns the metadata for a token, fetching and storing it if the token has not been seen before.

        The native currency (zero address) always resolves to ETH with 18 decimals, without touching the store or
        the chain.

        :param address: token address
        :param chain_id: chain the token is deployed on
        :param block_number: block of the event referencing the token.  Stored as the token's creation block
        :return: TokenMetadata
        """
        if is_native_currency(address):
            return NATIVE_TOKEN

        address = to_checksum_address(address)

        with self.store.key_lock("token", address, chain_id):
            if (stored := self._stored_metadata(address, chain_id)) is not None:
                self.stats.cache_hits += 1
                return stored

            metadata = self._fetch(address, chain_id)
            inserted = self.store.insert_token_if_absent(
                address=address,
                chain_id=chain_id,
                name=metadata.name,
                symbol=metadata.symbol,
                decimals=metadata.decimals,
                creation_block=block_number,
            )
            if inserted:
                logger.info(f"Indexed token {metadata.symbol} ({address}) on chain {chain_id}")
                return metadata

            # Another writer stored the token between the lookup and the insert
            logger.debug(f"Token {address} on chain {chain_id} was stored concurrently.  Using stored metadata")
            stored = self._stored_metadata(address, chain_id)
            return stored if stored is not None else metadata

    def lookup(self, address: str, chain_id: int) -> TokenMetadata | None:
        """
        Returns the metadata for a token without reading from chain.  Returns None if the token has not been
        resolved yet.  The native currency is never stored, and always returns NATIVE_TOKEN.
        """
        if is_native_currency(address):
            return NATIVE_TOKEN
        return self._stored_metadata(to_checksum_address(address), chain_id)

    def _stored_metadata(self, address: str, chain_id: int) -> TokenMetadata | None:
        token = self.store.get_token(address, chain_id)
        if token is None:
            return None
        return TokenMetadata(name=token.name, symbol=token.symbol, decimals=token.decimals)

    def _fetch(self, address: str, chain_id: int) -> TokenMetadata:
        self.stats.chain_reads += 1
        try:
            return fetch_token_metadata(self.reader, address)
        except TokenMetadataError as exc:
            self.stats.metadata_fallbacks += 1
            logger.warning(f"Failed to get metadata for token {address} on chain {chain_id}: {exc}")
            return UNKNOWN_TOKEN
