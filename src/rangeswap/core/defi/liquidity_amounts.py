"""
Liquidity Amounts - liquidity obtainable from desired token amounts.

Inverse of the amount-delta relations, used to size a mint from the amounts
a provider is willing to deposit:

    L = amount1 / (sqrt(Pb) - sqrt(Pa))
    L = amount0 * sqrt(Pa) * sqrt(Pb) / (sqrt(Pb) - sqrt(Pa))
"""

from __future__ import annotations

from typing import Tuple

from ..constants import Q96
from .safe_math import mul_div, to_uint128
from .sqrt_price_math import get_amount0_delta, get_amount1_delta


def get_liquidity_for_amount0(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, amount0: int) -> int:
    """Liquidity that ``amount0`` buys across [a, b]."""
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96
    if sqrt_ratio_b_x96 == sqrt_ratio_a_x96:
        return 0

    intermediate = mul_div(sqrt_ratio_a_x96, sqrt_ratio_b_x96, Q96)
    return to_uint128(mul_div(amount0, intermediate, sqrt_ratio_b_x96 - sqrt_ratio_a_x96))


def get_liquidity_for_amount1(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, amount1: int) -> int:
    """Liquidity that ``amount1`` buys across [a, b]."""
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96
    if sqrt_ratio_b_x96 == sqrt_ratio_a_x96:
        return 0

    return to_uint128(mul_div(amount1, Q96, sqrt_ratio_b_x96 - sqrt_ratio_a_x96))


def get_liquidity_for_amounts(
    sqrt_ratio_x96: int,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    amount0: int,
    amount1: int,
) -> int:
    """Maximum liquidity mintable at the current price from both amounts.

    Args:
        sqrt_ratio_x96: Current sqrt price
        sqrt_ratio_a_x96: Range lower bound
        sqrt_ratio_b_x96: Range upper bound
        amount0: token0 available
        amount1: token1 available

    Returns:
        Liquidity (the binding constraint of the two amounts)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if sqrt_ratio_x96 <= sqrt_ratio_a_x96:
        return get_liquidity_for_amount0(sqrt_ratio_a_x96, sqrt_ratio_b_x96, amount0)
    if sqrt_ratio_x96 < sqrt_ratio_b_x96:
        liquidity0 = get_liquidity_for_amount0(sqrt_ratio_x96, sqrt_ratio_b_x96, amount0)
        liquidity1 = get_liquidity_for_amount1(sqrt_ratio_a_x96, sqrt_ratio_x96, amount1)
        return min(liquidity0, liquidity1)
    return get_liquidity_for_amount1(sqrt_ratio_a_x96, sqrt_ratio_b_x96, amount1)


def get_amounts_for_liquidity(
    sqrt_ratio_x96: int,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
) -> Tuple[int, int]:
    """Token amounts (rounded down) represented by ``liquidity`` at the current price."""
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if sqrt_ratio_x96 <= sqrt_ratio_a_x96:
        return get_amount0_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, False), 0
    if sqrt_ratio_x96 < sqrt_ratio_b_x96:
        return (
            get_amount0_delta(sqrt_ratio_x96, sqrt_ratio_b_x96, liquidity, False),
            get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_x96, liquidity, False),
        )
    return 0, get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, False)
