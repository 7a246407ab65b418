
Q96 = 2**96
Q192 = 2**192

MAX_DECIMALS = 255

UINT_24_MAX = 2**24 - 1
UINT_128_MAX = 2**128 - 1
UINT_160_MAX = 2**160 - 1

INT_24_MIN, INT_24_MAX = -(2**23), 2**23 - 1
INT_128_MIN, INT_128_MAX = -(2**127), 2**127 - 1
INT_256_MIN, INT_256_MAX = -(2**255), 2**255 - 1


def is_native_currency(address: str) -> bool:
    """Returns True if the address is the zero address, which the PoolManager uses for the native asset"""
    return int(address, 16) == 0


def check_bounds(value: int, lower: int, upper: int, name: str) -> int:
    """
    Checks that an integer lies inside [lower, upper].  Raises ValueError otherwise.

    :param value: value to check
    :param lower: inclusive lower bound
    :param upper: inclusive upper bound
    :param name: field name used in the error message
    :return: value
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {type(value).__name__}")
    if not lower <= value <= upper:
        raise ValueError(f"{name} out of bounds: {value} not in [{lower}, {upper}]")
    return value
