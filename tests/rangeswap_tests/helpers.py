"""
Constants and callbacks shared by rangeswap tests.

The standard scenario: a 0.30% pool over [tick(1:1), tick(40000:1)] opened
at a price of 10000 token1 per token0.
"""

from rangeswap.core.defi.periphery import pay_from  # noqa: F401
from rangeswap.core.defi.tick_math import encode_sqrt_ratio_x96, get_tick_at_sqrt_ratio

TOKEN_A = "0x1f9840a85d5aF5bf1D1762F925BDADdC4201F984"
TOKEN_B = "0xEcd0D12E21805803f70de03B72B1C162dB0898d9"
TOKEN_C = "0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599"
TOKEN_D = "0x6B175474E89094C44Da98b954EedeAC495271d0F"

TICK_LOWER = get_tick_at_sqrt_ratio(encode_sqrt_ratio_x96(1, 1))
TICK_UPPER = get_tick_at_sqrt_ratio(encode_sqrt_ratio_x96(40000, 1))
FEE = 3000
INITIAL_SQRT_PRICE = encode_sqrt_ratio_x96(10000, 1)

LP = "0xliquidity_provider"
TRADER = "0xtrader"
INITIAL_BALANCE = 100_000_000_000 * 10**18
LIQUIDITY = 10**27


def underpay_from(ledger, payer, shortfall=1):
    """Payment callback that delivers ``shortfall`` less than asked."""
    def callback(request):
        for token in (request.token0, request.token1):
            owed = request.amount_owed(token)
            if owed > 0:
                ledger.transfer(token, payer, request.pool, owed - shortfall)
    return callback
