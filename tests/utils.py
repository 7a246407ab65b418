from typing import Any

from eth_abi import encode as eth_abi_encode
from eth_utils import keccak, to_bytes

from nethermind.v4_index.types.events import (
    EventMetadata,
    InitializeEvent,
    ModifyLiquidityEvent,
    SwapEvent,
)

CHAIN_ID = 1

USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
NATIVE = "0x0000000000000000000000000000000000000000"
NO_HOOKS = "0x0000000000000000000000000000000000000000"

POOL_ID = "0x21c67e77068de97969ba93d4aab21826d33ca12bb9f565d8496e8fda8a82ca27"
ZERO_SALT = "0x" + "00" * 32


def expand_to_decimals(num: int, decimals: int = 18) -> int:
    return (10**decimals) * num


def meta(block_number: int = 21_700_000, log_index: int = 0, chain_id: int = CHAIN_ID) -> EventMetadata:
    return EventMetadata(chain_id=chain_id, block_number=block_number, log_id=f"0x{'ab' * 32}-{block_number}-{log_index}")


def initialize_event(**kwargs) -> InitializeEvent:
    params: dict[str, Any] = {
        "meta": meta(),
        "pool_id": POOL_ID,
        "currency0": USDC,
        "currency1": WETH,
        "fee": 3000,
        "tick_spacing": 60,
        "hooks": NO_HOOKS,
        "sqrt_price_x96": 2**96,
        "tick": 0,
    }
    params.update(kwargs)
    return InitializeEvent(**params)


def swap_event(**kwargs) -> SwapEvent:
    params: dict[str, Any] = {
        "meta": meta(log_index=1),
        "pool_id": POOL_ID,
        "sender": "0x66a9893cc07d91d95644aedd05d03f95e1dba8af",
        "amount0": -1_000,
        "amount1": 1_000,
        "sqrt_price_x96": 2**96,
        "liquidity": 1_000,
        "tick": 0,
        "fee": 3000,
    }
    params.update(kwargs)
    return SwapEvent(**params)


def modify_liquidity_event(**kwargs) -> ModifyLiquidityEvent:
    params: dict[str, Any] = {
        "meta": meta(log_index=2),
        "pool_id": POOL_ID,
        "sender": "0xbd216513d74c8cf14cf4747e6aaa6420ff64ee9e",
        "tick_lower": -100,
        "tick_upper": 100,
        "liquidity_delta": 500,
        "salt": ZERO_SALT,
    }
    params.update(kwargs)
    return ModifyLiquidityEvent(**params)


def _topic_for_address(address: str) -> str:
    return "0x" + eth_abi_encode(["address"], [address]).hex()


def encode_log(
    signature: str,
    topics: list[str],
    data_types: list[str],
    data_values: list[Any],
    block_number: int = 21_700_000,
    log_index: int = 0,
) -> dict[str, Any]:
    """Builds a raw JSON RPC log dictionary, with hex encoded fields"""
    return {
        "address": "0x000000000004444c5dc75cb358380d2e3de08a90",
        "topics": ["0x" + keccak(text=signature).hex(), *topics],
        "data": "0x" + eth_abi_encode(data_types, data_values).hex(),
        "blockNumber": hex(block_number),
        "blockHash": "0x" + "cd" * 32,
        "logIndex": hex(log_index),
        "transactionHash": "0x" + "ef" * 32,
        "transactionIndex": "0x0",
    }


def initialize_log(currency0: str = USDC, currency1: str = WETH, sqrt_price_x96: int = 2**96, tick: int = 0, **kwargs):
    return encode_log(
        "Initialize(bytes32,address,address,uint24,int24,address,uint160,int24)",
        [POOL_ID, _topic_for_address(currency0), _topic_for_address(currency1)],
        ["uint24", "int24", "address", "uint160", "int24"],
        [3000, 60, NO_HOOKS, sqrt_price_x96, tick],
        **kwargs,
    )


def swap_log(sender: str, sqrt_price_x96: int, liquidity: int, tick: int, **kwargs):
    return encode_log(
        "Swap(bytes32,address,int128,int128,uint160,uint128,int24,uint24)",
        [POOL_ID, _topic_for_address(sender)],
        ["int128", "int128", "uint160", "uint128", "int24", "uint24"],
        [-5_000, 4_990, sqrt_price_x96, liquidity, tick, 3000],
        **kwargs,
    )


def modify_liquidity_log(
    sender: str, tick_lower: int, tick_upper: int, liquidity_delta: int, salt: str = ZERO_SALT, **kwargs
):
    return encode_log(
        "ModifyLiquidity(bytes32,address,int24,int24,int256,bytes32)",
        [POOL_ID, _topic_for_address(sender)],
        ["int24", "int24", "int256", "bytes32"],
        [tick_lower, tick_upper, liquidity_delta, to_bytes(hexstr=salt)],
        **kwargs,
    )
