from eth_abi.packed import encode_packed
from eth_utils import keccak, to_bytes


def calculate_position_key(owner: str, tick_lower: int, tick_upper: int, salt: str | bytes) -> str:
    """
    Computes the PoolManager position key for an owner, tick range and salt.  Matches the on-chain derivation
    ``keccak256(abi.encodePacked(owner, tickLower, tickUpper, salt))`` bit for bit.

    :param owner: address of the position owner (the ModifyLiquidity sender)
    :param tick_lower: lower tick of the position
    :param tick_upper: upper tick of the position
    :param salt: 32 byte salt, as bytes or a 0x prefixed hex string
    :return: 0x prefixed hex string of the position key
    """
    salt_bytes = salt if isinstance(salt, bytes) else to_bytes(hexstr=salt)
    packed = encode_packed(["address", "int24", "int24", "bytes32"], [owner, tick_lower, tick_upper, salt_bytes])
    return "0x" + keccak(packed).hex()
