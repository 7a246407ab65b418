class DatabaseError(Exception):
    """

    Raised when issues occur with database operations

    """


class DecodingError(Exception):
    """

    Raised when a raw PoolManager log cannot be decoded into a typed event

    """


class EventValidationError(ValueError):
    """
    Raised when a typed event is constructed with fields outside of their on-chain widths.
    The following conditions will result in this error being raised:

        * Ticks and tick spacings that do not fit into an int24
        * Fees that do not fit into a uint24
        * sqrtPriceX96 values outside of uint160, or liquidity outside of uint128
        * Pool ids & salts that are not 32 bytes, or addresses that are not 20 bytes

    """


class OrderingError(Exception):
    """
    Raised when logs are delivered out of (block number, log index) order.  State derivation reads then writes
    pool & position rows, so events must be applied in strict arrival order.
    """


class TokenMetadataError(Exception):
    """
    Raised when an ERC20 metadata read call fails, times out, or returns a value that cannot be used.
    Is always caught by the TokenResolver, which substitutes default metadata.
    """
