"""
Tick Math - tick <-> sqrt price conversion.

Prices are stored as the square root of token1-per-token0 in Q64.96 fixed
point. Ticks discretize price geometrically:

    price = 1.0001^tick
    sqrt_price_x96 = sqrt(1.0001^tick) * 2^96

Both directions use integer-only arithmetic so results are bit-exact and
reproducible. ``get_sqrt_ratio_at_tick`` computes a Q128.128 ratio by binary
decomposition of |tick| and rounds up into Q64.96, so precision loss is
confined to the 32 low bits dropped in that final shift.
"""

from __future__ import annotations

import math

from ..constants import MAX_SQRT_RATIO, MAX_TICK, MIN_SQRT_RATIO, MIN_TICK
from ..exceptions import InvalidAmountError, PriceOutOfRangeError, TickOutOfRangeError

# Q128.128 values of 1/sqrt(1.0001)^(2^i), one per bit of |tick|
_TICK_BIT_FACTORS = (
    (0x2, 0xfff97272373d413259a46990580e213a),
    (0x4, 0xfff2e50f5f656932ef12357cf3c7fdcc),
    (0x8, 0xffe5caca7e10e4e61c3624eaa0941cd0),
    (0x10, 0xffcb9843d60f6159c9db58835c926644),
    (0x20, 0xff973b41fa98c081472e6896dfb254c0),
    (0x40, 0xff2ea16466c96a3843ec78b326b52861),
    (0x80, 0xfe5dee046a99a2a811c461f1969c3053),
    (0x100, 0xfcbe86c7900a88aedcffc83b479aa3a4),
    (0x200, 0xf987a7253ac413176f2b074cf7815e54),
    (0x400, 0xf3392b0822b70005940c7a398e4b70f3),
    (0x800, 0xe7159475a2c29b7443b29c7fa6e889d9),
    (0x1000, 0xd097f3bdfd2022b8845ad8f792aa5825),
    (0x2000, 0xa9f746462d870fdf8a65dc1f90e061e5),
    (0x4000, 0x70d869a156d2a1b890bb3df62baf32f7),
    (0x8000, 0x31be135f97d08fd981231505542fcfa6),
    (0x10000, 0x9aa508b5b7a84e1c677de54f3e99bc9),
    (0x20000, 0x5d6af8dedb81196699c329225ee604),
    (0x40000, 0x2216e584f5fa1ea926041bedfe98),
    (0x80000, 0x48a170391f7dc42444e8fa2),
)

_MAX_UINT256 = 2 ** 256 - 1


def get_sqrt_ratio_at_tick(tick: int) -> int:
    """Calculate sqrt(1.0001^tick) * 2^96.

    Args:
        tick: Tick index in [MIN_TICK, MAX_TICK]

    Returns:
        sqrt price in Q64.96

    Raises:
        TickOutOfRangeError: If the tick is outside the supported range
    """
    if tick < MIN_TICK or tick > MAX_TICK:
        raise TickOutOfRangeError(
            f"Tick out of range: {tick} (range: {MIN_TICK} ~ {MAX_TICK})"
        )

    abs_tick = abs(tick)

    ratio = (
        0xfffcb933bd6fad37aa2d162d1a594001
        if abs_tick & 0x1
        else 0x100000000000000000000000000000000
    )
    for bit, factor in _TICK_BIT_FACTORS:
        if abs_tick & bit:
            ratio = (ratio * factor) >> 128

    if tick > 0:
        ratio = _MAX_UINT256 // ratio

    # Q128.128 -> Q64.96, rounding up so the result never undershoots the tick
    return (ratio >> 32) + (0 if ratio % (1 << 32) == 0 else 1)


def get_tick_at_sqrt_ratio(sqrt_price_x96: int) -> int:
    """Calculate the greatest tick whose sqrt ratio is <= sqrt_price_x96.

    Args:
        sqrt_price_x96: sqrt price in Q64.96, in [MIN_SQRT_RATIO, MAX_SQRT_RATIO)

    Returns:
        Tick index

    Raises:
        PriceOutOfRangeError: If the price is outside the supported range
    """
    if sqrt_price_x96 < MIN_SQRT_RATIO or sqrt_price_x96 >= MAX_SQRT_RATIO:
        raise PriceOutOfRangeError(f"sqrt price out of range: {sqrt_price_x96}")

    ratio = sqrt_price_x96 << 32

    msb = ratio.bit_length() - 1
    if msb >= 128:
        r = ratio >> (msb - 127)
    else:
        r = ratio << (127 - msb)

    log_2 = (msb - 128) << 64

    # 14 fractional bits of log2 by repeated squaring
    for i in range(14):
        r = (r * r) >> 127
        f = r >> 128
        log_2 |= f << (63 - i)
        r >>= f

    log_sqrt10001 = log_2 * 255738958999603826347141

    tick_low = (log_sqrt10001 - 3402992956809132418596140100660247210) >> 128
    tick_high = (log_sqrt10001 + 291339464771989622907027621153398088495) >> 128

    if tick_low == tick_high:
        return tick_low
    if get_sqrt_ratio_at_tick(tick_high) <= sqrt_price_x96:
        return tick_high
    return tick_low


def encode_sqrt_ratio_x96(amount1: int, amount0: int) -> int:
    """Encode the price amount1/amount0 as a Q64.96 sqrt price (rounded down).

    Example:
        >>> encode_sqrt_ratio_x96(1, 1) == 2 ** 96
        True
    """
    if amount0 <= 0 or amount1 <= 0:
        raise InvalidAmountError("Price ratio amounts must be positive")
    return math.isqrt((amount1 << 192) // amount0)


def tick_to_price(tick: int) -> float:
    """Convert a tick to a human-readable token1/token0 price (display only)."""
    return 1.0001 ** tick
