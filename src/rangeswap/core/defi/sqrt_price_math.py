"""
Sqrt Price Math - token amounts and price moves for a liquidity range.

Core relations for liquidity L between sqrt prices a <= b:

    amount0 = L * (1/sqrt(Pa) - 1/sqrt(Pb)) = L * (b - a) / (a * b)
    amount1 = L * (sqrt(Pb) - sqrt(Pa))

Rounding always favours the pool: amounts a depositor (or trader) must pay
round up, amounts paid out round down, and next-price calculations round
toward the side that leaves the pool with at least the value it is owed.
"""

from __future__ import annotations

from ..constants import MAX_UINT160, MAX_UINT256, Q96
from ..exceptions import ArithmeticOverflowError, InsufficientLiquidityError, PriceOutOfRangeError
from .safe_math import div_rounding_up, mul_div, mul_div_rounding_up, to_int256, to_uint160


def get_amount0_delta(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool,
) -> int:
    """Amount of token0 spanned by ``liquidity`` between two sqrt prices.

    Args:
        sqrt_ratio_a_x96: One bound, Q64.96
        sqrt_ratio_b_x96: The other bound, Q64.96
        liquidity: Unsigned liquidity
        round_up: True when the amount is owed to the pool

    Returns:
        amount0 (token0 base units)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96
    if sqrt_ratio_a_x96 <= 0:
        raise PriceOutOfRangeError("sqrt price must be positive")

    numerator1 = liquidity << 96
    numerator2 = sqrt_ratio_b_x96 - sqrt_ratio_a_x96

    if round_up:
        return div_rounding_up(
            mul_div_rounding_up(numerator1, numerator2, sqrt_ratio_b_x96),
            sqrt_ratio_a_x96,
        )
    return mul_div(numerator1, numerator2, sqrt_ratio_b_x96) // sqrt_ratio_a_x96


def get_amount1_delta(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool,
) -> int:
    """Amount of token1 spanned by ``liquidity`` between two sqrt prices."""
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if round_up:
        return mul_div_rounding_up(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)
    return mul_div(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)


def get_amount0_delta_signed(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity_delta: int) -> int:
    """Signed token0 delta for a signed liquidity delta.

    Positive deltas (deposits) round up; negative deltas (withdrawals) round
    down and come back negative.
    """
    if liquidity_delta < 0:
        return -to_int256(get_amount0_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, -liquidity_delta, False))
    return to_int256(get_amount0_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity_delta, True))


def get_amount1_delta_signed(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity_delta: int) -> int:
    """Signed token1 delta for a signed liquidity delta."""
    if liquidity_delta < 0:
        return -to_int256(get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, -liquidity_delta, False))
    return to_int256(get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity_delta, True))


def get_next_sqrt_price_from_amount0_rounding_up(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool,
) -> int:
    """Next sqrt price after adding (or removing) ``amount`` of token0.

    Always rounds up: adding token0 moves the price down, and rounding up
    keeps it from moving further than the amount pays for.
    """
    if amount == 0:
        return sqrt_price_x96

    numerator1 = liquidity << 96
    product = amount * sqrt_price_x96

    if add:
        # liquidity * sqrtP / (liquidity + amount * sqrtP), when it fits 256 bits
        if product <= MAX_UINT256:
            denominator = numerator1 + product
            if denominator <= MAX_UINT256:
                return mul_div_rounding_up(numerator1, sqrt_price_x96, denominator)
        # liquidity / (liquidity / sqrtP + amount)
        return div_rounding_up(numerator1, numerator1 // sqrt_price_x96 + amount)

    if product > MAX_UINT256 or numerator1 <= product:
        raise InsufficientLiquidityError(
            "Not enough token0 liquidity for requested output",
            details={"amount": amount, "liquidity": liquidity},
        )
    denominator = numerator1 - product
    return to_uint160(mul_div_rounding_up(numerator1, sqrt_price_x96, denominator))


def get_next_sqrt_price_from_amount1_rounding_down(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool,
) -> int:
    """Next sqrt price after adding (or removing) ``amount`` of token1.

    Always rounds down: adding token1 moves the price up, and rounding down
    keeps it from moving further than the amount pays for.
    """
    if add:
        if amount <= MAX_UINT160:
            quotient = (amount << 96) // liquidity
        else:
            quotient = mul_div(amount, Q96, liquidity)
        return to_uint160(sqrt_price_x96 + quotient)

    if amount <= MAX_UINT160:
        quotient = div_rounding_up(amount << 96, liquidity)
    else:
        quotient = mul_div_rounding_up(amount, Q96, liquidity)

    if sqrt_price_x96 <= quotient:
        raise InsufficientLiquidityError(
            "Not enough token1 liquidity for requested output",
            details={"amount": amount, "liquidity": liquidity},
        )
    return sqrt_price_x96 - quotient


def get_next_sqrt_price_from_input(
    sqrt_price_x96: int,
    liquidity: int,
    amount_in: int,
    zero_for_one: bool,
) -> int:
    """Next sqrt price after ``amount_in`` of the input token enters the pool."""
    _require_price_and_liquidity(sqrt_price_x96, liquidity)
    if zero_for_one:
        return get_next_sqrt_price_from_amount0_rounding_up(sqrt_price_x96, liquidity, amount_in, True)
    return get_next_sqrt_price_from_amount1_rounding_down(sqrt_price_x96, liquidity, amount_in, True)


def get_next_sqrt_price_from_output(
    sqrt_price_x96: int,
    liquidity: int,
    amount_out: int,
    zero_for_one: bool,
) -> int:
    """Next sqrt price after ``amount_out`` of the output token leaves the pool."""
    _require_price_and_liquidity(sqrt_price_x96, liquidity)
    if zero_for_one:
        return get_next_sqrt_price_from_amount1_rounding_down(sqrt_price_x96, liquidity, amount_out, False)
    return get_next_sqrt_price_from_amount0_rounding_up(sqrt_price_x96, liquidity, amount_out, False)


def _require_price_and_liquidity(sqrt_price_x96: int, liquidity: int) -> None:
    if sqrt_price_x96 <= 0:
        raise PriceOutOfRangeError("sqrt price must be positive")
    if liquidity <= 0:
        raise InsufficientLiquidityError("Liquidity must be positive")
    if sqrt_price_x96 > MAX_UINT160:
        raise ArithmeticOverflowError("sqrt price does not fit uint160")
