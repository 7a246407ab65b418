from dataclasses import dataclass
from typing import Union

from eth_typing import ChecksumAddress
from eth_utils import is_address, to_bytes, to_checksum_address

from nethermind.v4_index.exceptions import EventValidationError
from nethermind.v4_index.math.shared import (
    INT_24_MAX,
    INT_24_MIN,
    INT_128_MAX,
    INT_128_MIN,
    INT_256_MAX,
    INT_256_MIN,
    UINT_24_MAX,
    UINT_128_MAX,
    UINT_160_MAX,
    check_bounds,
)

# pylint: disable=invalid-name


def _address(value: str | bytes, name: str) -> ChecksumAddress:
    if isinstance(value, bytes) and len(value) == 20:
        return to_checksum_address(value)
    if isinstance(value, str) and is_address(value):
        return to_checksum_address(value)
    raise EventValidationError(f"{name} is not a valid 20 byte address: {value!r}")


def _bytes32(value: str | bytes, name: str) -> str:
    try:
        raw = value if isinstance(value, bytes) else to_bytes(hexstr=value)
    except ValueError as exc:
        raise EventValidationError(f"{name} is not valid hex: {value!r}") from exc
    if len(raw) != 32:
        raise EventValidationError(f"{name} must be 32 bytes, got {len(raw)}")
    return "0x" + raw.hex()


def _bounded(value: int, lower: int, upper: int, name: str) -> int:
    try:
        return check_bounds(value, lower, upper, name)
    except ValueError as exc:
        raise EventValidationError(str(exc)) from exc


@dataclass(frozen=True, slots=True)
class EventMetadata:
    """Fields shared by every PoolManager event delivered to the reconciler"""

    chain_id: int
    block_number: int
    log_id: str
    """ Unique identifier of the log: '<block_hash>-<log_index>' """


@dataclass(frozen=True, slots=True)
class InitializeEvent:
    """PoolManager Initialize event.  Creates a pool"""

    meta: EventMetadata
    pool_id: str
    currency0: ChecksumAddress
    currency1: ChecksumAddress
    fee: int
    tick_spacing: int
    hooks: ChecksumAddress
    sqrt_price_x96: int
    tick: int

    def __post_init__(self):
        object.__setattr__(self, "pool_id", _bytes32(self.pool_id, "pool_id"))
        object.__setattr__(self, "currency0", _address(self.currency0, "currency0"))
        object.__setattr__(self, "currency1", _address(self.currency1, "currency1"))
        object.__setattr__(self, "hooks", _address(self.hooks, "hooks"))
        _bounded(self.fee, 0, UINT_24_MAX, "fee")
        _bounded(self.tick_spacing, INT_24_MIN, INT_24_MAX, "tick_spacing")
        _bounded(self.sqrt_price_x96, 0, UINT_160_MAX, "sqrt_price_x96")
        _bounded(self.tick, INT_24_MIN, INT_24_MAX, "tick")


@dataclass(frozen=True, slots=True)
class SwapEvent:
    """PoolManager Swap event.  Moves the pool price and active liquidity"""

    meta: EventMetadata
    pool_id: str
    sender: ChecksumAddress
    amount0: int
    amount1: int
    sqrt_price_x96: int
    liquidity: int
    tick: int
    fee: int

    def __post_init__(self):
        object.__setattr__(self, "pool_id", _bytes32(self.pool_id, "pool_id"))
        object.__setattr__(self, "sender", _address(self.sender, "sender"))
        _bounded(self.amount0, INT_128_MIN, INT_128_MAX, "amount0")
        _bounded(self.amount1, INT_128_MIN, INT_128_MAX, "amount1")
        _bounded(self.sqrt_price_x96, 0, UINT_160_MAX, "sqrt_price_x96")
        _bounded(self.liquidity, 0, UINT_128_MAX, "liquidity")
        _bounded(self.tick, INT_24_MIN, INT_24_MAX, "tick")
        _bounded(self.fee, 0, UINT_24_MAX, "fee")


@dataclass(frozen=True, slots=True)
class ModifyLiquidityEvent:
    """PoolManager ModifyLiquidity event.  Adds or removes liquidity from a position"""

    meta: EventMetadata
    pool_id: str
    sender: ChecksumAddress
    tick_lower: int
    tick_upper: int
    liquidity_delta: int
    salt: str

    def __post_init__(self):
        object.__setattr__(self, "pool_id", _bytes32(self.pool_id, "pool_id"))
        object.__setattr__(self, "sender", _address(self.sender, "sender"))
        object.__setattr__(self, "salt", _bytes32(self.salt, "salt"))
        _bounded(self.tick_lower, INT_24_MIN, INT_24_MAX, "tick_lower")
        _bounded(self.tick_upper, INT_24_MIN, INT_24_MAX, "tick_upper")
        _bounded(self.liquidity_delta, INT_256_MIN, INT_256_MAX, "liquidity_delta")
        if self.tick_lower > self.tick_upper:
            raise EventValidationError(f"tick_lower {self.tick_lower} is larger than tick_upper {self.tick_upper}")


PoolManagerEvent = Union[InitializeEvent, SwapEvent, ModifyLiquidityEvent]
