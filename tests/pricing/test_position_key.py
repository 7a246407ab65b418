from eth_utils import keccak

from nethermind.v4_index.math import calculate_position_key

OWNER = "0xbD216513d74C8cf14cf4747E6AaA6420FF64ee9e".lower()


def _packed_key(owner: str, tick_lower: int, tick_upper: int, salt: bytes) -> str:
    packed = (
        bytes.fromhex(owner[2:])
        + (tick_lower % 2**24).to_bytes(3, "big")
        + (tick_upper % 2**24).to_bytes(3, "big")
        + salt
    )
    assert len(packed) == 58
    return "0x" + keccak(packed).hex()


def test_position_key_matches_packed_encoding():
    salt = bytes(32)
    assert calculate_position_key(OWNER, -100, 100, salt) == _packed_key(OWNER, -100, 100, salt)


def test_position_key_with_hex_salt():
    salt = bytes.fromhex("00" * 31 + "01")
    hex_salt = "0x" + salt.hex()

    assert calculate_position_key(OWNER, -887220, 887220, hex_salt) == _packed_key(OWNER, -887220, 887220, salt)
    assert calculate_position_key(OWNER, -887220, 887220, hex_salt) == calculate_position_key(
        OWNER, -887220, 887220, salt
    )


def test_position_key_is_unique_per_identity():
    zero_salt, one_salt = bytes(32), bytes.fromhex("00" * 31 + "01")
    keys = {
        calculate_position_key(OWNER, -100, 100, zero_salt),
        calculate_position_key(OWNER, -100, 100, one_salt),
        calculate_position_key(OWNER, -60, 100, zero_salt),
        calculate_position_key(OWNER, -100, 120, zero_salt),
        calculate_position_key("0x" + "11" * 20, -100, 100, zero_salt),
    }

    assert len(keys) == 5
    assert all(len(key) == 66 for key in keys)
