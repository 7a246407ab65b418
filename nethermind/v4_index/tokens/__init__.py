from .erc_20 import (
    NATIVE_TOKEN,
    UNKNOWN_TOKEN,
    ContractReader,
    TokenMetadata,
    Web3ContractReader,
)
from .resolver import ResolverStats, TokenResolver
