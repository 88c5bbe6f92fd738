"""
Swap Math - a single in-range swap step.

The pool covers one fixed price range, so a swap is exactly one step from
the current price toward a target (the caller's limit or the range bound,
whichever is tighter).
"""

from __future__ import annotations

from typing import NamedTuple

from ..constants import FEE_DENOMINATOR
from ..exceptions import InvalidAmountError
from .safe_math import mul_div, mul_div_rounding_up
from .sqrt_price_math import (
    get_amount0_delta,
    get_amount1_delta,
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
)


class SwapStep(NamedTuple):
    """Result of one swap step."""
    sqrt_price_next_x96: int
    amount_in: int  # excludes fee
    amount_out: int
    fee_amount: int


def compute_swap_step(
    sqrt_price_current_x96: int,
    sqrt_price_target_x96: int,
    liquidity: int,
    amount_remaining: int,
    fee_pips: int,
) -> SwapStep:
    """
    Compute how far price moves toward the target for the remaining amount.

    Direction follows from the prices: a target at or below the current
    price means token0 is sold for token1. A positive ``amount_remaining``
    is an exact input (fee included); a negative one is an exact output.

    Args:
        sqrt_price_current_x96: Current sqrt price
        sqrt_price_target_x96: Price the step may not move past
        liquidity: Active liquidity
        amount_remaining: Input still to be spent (>0) or output still owed (<0)
        fee_pips: Fee in hundredths of a basis point

    Returns:
        SwapStep(sqrt_price_next_x96, amount_in, amount_out, fee_amount)
    """
    if not 0 <= fee_pips < FEE_DENOMINATOR:
        raise InvalidAmountError(f"Fee out of range: {fee_pips}")

    zero_for_one = sqrt_price_current_x96 >= sqrt_price_target_x96
    exact_in = amount_remaining >= 0

    amount_in = 0
    amount_out = 0

    if exact_in:
        amount_remaining_less_fee = mul_div(amount_remaining, FEE_DENOMINATOR - fee_pips, FEE_DENOMINATOR)
        if zero_for_one:
            amount_in = get_amount0_delta(sqrt_price_target_x96, sqrt_price_current_x96, liquidity, True)
        else:
            amount_in = get_amount1_delta(sqrt_price_current_x96, sqrt_price_target_x96, liquidity, True)

        if amount_remaining_less_fee >= amount_in:
            sqrt_price_next_x96 = sqrt_price_target_x96
        else:
            sqrt_price_next_x96 = get_next_sqrt_price_from_input(
                sqrt_price_current_x96, liquidity, amount_remaining_less_fee, zero_for_one
            )
    else:
        if zero_for_one:
            amount_out = get_amount1_delta(sqrt_price_target_x96, sqrt_price_current_x96, liquidity, False)
        else:
            amount_out = get_amount0_delta(sqrt_price_current_x96, sqrt_price_target_x96, liquidity, False)

        if -amount_remaining >= amount_out:
            sqrt_price_next_x96 = sqrt_price_target_x96
        else:
            sqrt_price_next_x96 = get_next_sqrt_price_from_output(
                sqrt_price_current_x96, liquidity, -amount_remaining, zero_for_one
            )

    reached_target = sqrt_price_target_x96 == sqrt_price_next_x96

    # Recompute whichever side was not fixed by reaching the target
    if zero_for_one:
        if not (reached_target and exact_in):
            amount_in = get_amount0_delta(sqrt_price_next_x96, sqrt_price_current_x96, liquidity, True)
        if not (reached_target and not exact_in):
            amount_out = get_amount1_delta(sqrt_price_next_x96, sqrt_price_current_x96, liquidity, False)
    else:
        if not (reached_target and exact_in):
            amount_in = get_amount1_delta(sqrt_price_current_x96, sqrt_price_next_x96, liquidity, True)
        if not (reached_target and not exact_in):
            amount_out = get_amount0_delta(sqrt_price_current_x96, sqrt_price_next_x96, liquidity, False)

    # Never pay out more than an exact output asked for
    if not exact_in and amount_out > -amount_remaining:
        amount_out = -amount_remaining

    if exact_in and not reached_target:
        # Price stopped short of the target, so the whole remainder was spent
        fee_amount = amount_remaining - amount_in
    else:
        fee_amount = mul_div_rounding_up(amount_in, fee_pips, FEE_DENOMINATOR - fee_pips)

    return SwapStep(sqrt_price_next_x96, amount_in, amount_out, fee_amount)
