import logging
from typing import Any, Callable, Mapping, Sequence

from eth_abi import decode as eth_abi_decode
from eth_abi.exceptions import DecodingError as ABIDecodingError
from eth_utils import keccak, to_bytes

from nethermind.v4_index.exceptions import DecodingError, EventValidationError
from nethermind.v4_index.types.events import (
    EventMetadata,
    InitializeEvent,
    ModifyLiquidityEvent,
    PoolManagerEvent,
    SwapEvent,
)

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("v4_index").getChild("decoding")


def _to_bytes(value: str | bytes) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return to_bytes(hexstr=value)


def _to_int(value: int | str) -> int:
    if isinstance(value, int):
        return value
    return int(value, 16)


def log_id(block_hash: str | bytes, log_index: int) -> str:
    """Returns the unique identifier of a log: '<block_hash>-<log_index>'"""
    return f"0x{_to_bytes(block_hash).hex()}-{log_index}"


class PoolManagerEventDecoder:
    """
    Stores precomputed topic & data types for decoding a single PoolManager event
    """

    name: str
    event_signature: str
    selector: bytes

    _topic_names: list[str]
    _topic_types: list[str]
    _data_names: list[str]
    _data_types: list[str]

    def __init__(
        self,
        name: str,
        topics: Sequence[tuple[str, str]],
        data: Sequence[tuple[str, str]],
        builder: Callable[..., PoolManagerEvent],
    ):
        self.name = name
        self._topic_names = [param_name for param_name, _ in topics]
        self._topic_types = [param_type for _, param_type in topics]
        self._data_names = [param_name for param_name, _ in data]
        self._data_types = [param_type for _, param_type in data]
        self._builder = builder

        self.event_signature = f"{name}({','.join(self._topic_types + self._data_types)})"
        self.selector = keccak(text=self.event_signature)

        logger.debug(
            f"Adding Event Decoder for {self.event_signature} with Topic Types: {self._topic_types} and "
            f"Data Types: {self._data_types}"
        )

    def decode(self, topics: list[bytes], data: bytes, meta: EventMetadata) -> PoolManagerEvent:
        """
        Decodes Event data and topics, and builds the typed event.

        :param topics: List of topic bytes, including the selector
        :param data: ABI encoded event data
        :param meta: block & log metadata of the event
        """
        if len(topics) != len(self._topic_types) + 1:
            raise DecodingError(
                f"{self.name} expects {len(self._topic_types)} indexed topics, got {len(topics) - 1} "
                f"for log {meta.log_id}"
            )

        try:
            decoded_topics = eth_abi_decode(self._topic_types, b"".join(topics[1:]))
            decoded_data = eth_abi_decode(self._data_types, data)
        except ABIDecodingError as exc:
            raise DecodingError(f"Failed to decode {self.event_signature} for log {meta.log_id}: {exc}") from exc

        params = dict(zip(self._topic_names, decoded_topics)) | dict(zip(self._data_names, decoded_data))

        try:
            return self._builder(meta=meta, **params)
        except EventValidationError as exc:
            raise DecodingError(f"Invalid {self.name} event in log {meta.log_id}: {exc}") from exc


POOL_MANAGER_DECODERS = [
    PoolManagerEventDecoder(
        name="Initialize",
        topics=[("pool_id", "bytes32"), ("currency0", "address"), ("currency1", "address")],
        data=[
            ("fee", "uint24"),
            ("tick_spacing", "int24"),
            ("hooks", "address"),
            ("sqrt_price_x96", "uint160"),
            ("tick", "int24"),
        ],
        builder=InitializeEvent,
    ),
    PoolManagerEventDecoder(
        name="Swap",
        topics=[("pool_id", "bytes32"), ("sender", "address")],
        data=[
            ("amount0", "int128"),
            ("amount1", "int128"),
            ("sqrt_price_x96", "uint160"),
            ("liquidity", "uint128"),
            ("tick", "int24"),
            ("fee", "uint24"),
        ],
        builder=SwapEvent,
    ),
    PoolManagerEventDecoder(
        name="ModifyLiquidity",
        topics=[("pool_id", "bytes32"), ("sender", "address")],
        data=[
            ("tick_lower", "int24"),
            ("tick_upper", "int24"),
            ("liquidity_delta", "int256"),
            ("salt", "bytes32"),
        ],
        builder=ModifyLiquidityEvent,
    ),
]


class PoolManagerLogDecoder:
    """
    Decodes raw PoolManager logs into typed events.  Accepts web3 LogReceipts, or raw JSON RPC log dictionaries
    with hex encoded fields.
    """

    decoders: dict[bytes, PoolManagerEventDecoder]

    def __init__(self, decoders: Sequence[PoolManagerEventDecoder] = tuple(POOL_MANAGER_DECODERS)):
        self.decoders = {decoder.selector: decoder for decoder in decoders}

    def decode(self, log: Mapping[str, Any], chain_id: int) -> PoolManagerEvent | None:
        """
        Decodes a single log.  Returns None for logs emitted by events other than Initialize, Swap and
        ModifyLiquidity.  Raises DecodingError for malformed logs.

        :param log: raw log with topics, data, blockNumber, blockHash & logIndex
        :param chain_id: chain the log was emitted on
        """
        try:
            topics = [_to_bytes(topic) for topic in log["topics"]]
            data = _to_bytes(log["data"])
            block_number = _to_int(log["blockNumber"])
            log_index = _to_int(log["logIndex"])
            block_hash = _to_bytes(log["blockHash"])
        except (KeyError, ValueError, TypeError) as exc:
            raise DecodingError(f"Malformed log: {log}") from exc

        if not topics:
            return None

        decoder = self.decoders.get(topics[0])
        if decoder is None:
            logger.debug(f"Skipping log with unknown topic 0x{topics[0].hex()}")
            return None

        meta = EventMetadata(chain_id=chain_id, block_number=block_number, log_id=log_id(block_hash, log_index))
        return decoder.decode(topics, data, meta)
