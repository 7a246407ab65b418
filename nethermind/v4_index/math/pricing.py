from decimal import Decimal

from .shared import MAX_DECIMALS, Q192


def _div_round_half_up(numerator: int, denominator: int) -> int:
    # Both operands are non-negative
    return (2 * numerator + denominator) // (2 * denominator)


def _scaled_decimal(coefficient: int, decimals: int) -> Decimal:
    # String construction is exact and ignores the active decimal context
    return Decimal(f"{coefficient}E-{decimals}")


def _check_decimals(decimals: int, name: str):
    if not 0 <= decimals <= MAX_DECIMALS:
        raise ValueError(f"{name} must be between 0 and {MAX_DECIMALS}, got {decimals}")


def sqrt_price_x96_to_token_prices(
    sqrt_price_x96: int,
    token_0_decimals: int,
    token_1_decimals: int,
) -> tuple[Decimal, Decimal]:
    """
    Converts a pool's sqrtPriceX96 into human readable prices for both directions of the pair.

    price_1 is the price of token 0 denominated in token 1, adjusted by the decimals of both tokens, and rounded
    half-up to token_1_decimals fractional digits.  price_0 is the inverse of the rounded price_1, rounded
    half-up to token_0_decimals fractional digits.  If price_1 rounds to zero, price_0 is defined as zero.

    All intermediate math is performed on python integers, so sqrt prices of any width are converted exactly
    before the single rounding step.

    >>> sqrt_price_x96_to_token_prices(2**96, 18, 18)
    (Decimal('1.000000000000000000'), Decimal('1.000000000000000000'))

    :param sqrt_price_x96: square root price scaled by 2**96
    :param token_0_decimals: decimals of currency0
    :param token_1_decimals: decimals of currency1
    :return: (price_0, price_1)
    """
    if sqrt_price_x96 < 0:
        raise ValueError(f"sqrt_price_x96 cannot be negative: {sqrt_price_x96}")
    _check_decimals(token_0_decimals, "token_0_decimals")
    _check_decimals(token_1_decimals, "token_1_decimals")

    # price_1 * 10**d1 == sqrt**2 * 10**d0 / 2**192
    price_1_scaled = _div_round_half_up(sqrt_price_x96**2 * 10**token_0_decimals, Q192)
    price_1 = _scaled_decimal(price_1_scaled, token_1_decimals)

    if price_1_scaled == 0:
        return _scaled_decimal(0, token_0_decimals), price_1

    # price_0 * 10**d0 == 10**d0 / price_1 == 10**(d0 + d1) / price_1_scaled
    price_0_scaled = _div_round_half_up(10 ** (token_0_decimals + token_1_decimals), price_1_scaled)
    return _scaled_decimal(price_0_scaled, token_0_decimals), price_1


def format_price(price: Decimal) -> str:
    """
    Formats a price as a plain decimal string, without exponent notation or trailing fractional zeros.

    >>> format_price(Decimal("1.000000000000000000"))
    '1'
    >>> format_price(Decimal("0.000125000"))
    '0.000125'

    """
    price_str = f"{price:f}"
    if "." in price_str:
        price_str = price_str.rstrip("0").rstrip(".")
    return price_str
