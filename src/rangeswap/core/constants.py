"""
Engine-wide constants.

Fixed-point scales, tick bounds and integer width limits shared by the math
modules and the pool.
"""

from typing import Dict

# Fixed-point scales
Q96: int = 2 ** 96
Q128: int = 2 ** 128
Q192: int = 2 ** 192

# Tick bounds (price = 1.0001^tick)
MIN_TICK: int = -887272
MAX_TICK: int = 887272

# sqrt prices at MIN_TICK and MAX_TICK, Q64.96
MIN_SQRT_RATIO: int = 4295128739
MAX_SQRT_RATIO: int = 1461446703485210103287273052203988822378723970342

# Fees are expressed in pips (hundredths of a basis point)
FEE_DENOMINATOR: int = 1_000_000

FEE_TIERS: Dict[int, str] = {
    100: "0.01%",
    500: "0.05%",
    3000: "0.30%",
    10000: "1.00%",
}

# Integer width limits
MAX_UINT128: int = 2 ** 128 - 1
MAX_UINT160: int = 2 ** 160 - 1
MAX_UINT256: int = 2 ** 256 - 1
MAX_INT256: int = 2 ** 255 - 1
MIN_INT256: int = -(2 ** 255)
