"""
End-to-end pool lifecycle with known exact amounts.

Range [tick(1:1), tick(40000:1)], fee 0.30%, opened at 10000:1 with 10^27
liquidity; a trader sells 100 token0 and the provider then exits.
"""

import pytest

from rangeswap.core.defi.events import Swap
from rangeswap.core.defi.tick_math import encode_sqrt_ratio_x96
from rangeswap_tests.helpers import (
    FEE,
    INITIAL_BALANCE,
    INITIAL_SQRT_PRICE,
    LIQUIDITY,
    LP,
    TICK_LOWER,
    TICK_UPPER,
    TOKEN_A,
    TOKEN_B,
    TRADER,
    pay_from,
)

pytestmark = pytest.mark.integration

LP_TOKEN0_AFTER_MINT = 99995000161384542080378486215
SWAP_AMOUNT1 = -996990060009101709255958
PRICE_AFTER_SWAP = 7922737261735934252089901697281
LP_TOKEN0_AFTER_EXIT = 100000000099999999999999999998


class TestReferenceScenario:
    """Mint, swap, burn and collect on the standard pool."""

    def test_lifecycle(self, pool_manager, ledger):
        pool = pool_manager.create_and_initialize_pool_if_necessary({
            "token0": TOKEN_A,
            "token1": TOKEN_B,
            "fee": FEE,
            "tick_lower": TICK_LOWER,
            "tick_upper": TICK_UPPER,
            "sqrt_price_x96": INITIAL_SQRT_PRICE,
        })
        assert (pool.token0, pool.token1) == (TOKEN_A, TOKEN_B)
        assert pool.sqrt_price_x96 == INITIAL_SQRT_PRICE

        # Provide liquidity
        ledger.mint(TOKEN_A, LP, INITIAL_BALANCE)
        ledger.mint(TOKEN_B, LP, INITIAL_BALANCE)
        pool.mint(LP, LP, LIQUIDITY, pay_from(ledger, LP))

        assert pool.get_position(LP).as_tuple() == (LIQUIDITY, 0, 0, 0, 0)
        assert pool.liquidity == LIQUIDITY
        assert pool.balance0() == INITIAL_BALANCE - ledger.balance_of(TOKEN_A, LP)
        assert pool.balance1() == INITIAL_BALANCE - ledger.balance_of(TOKEN_B, LP)
        assert ledger.balance_of(TOKEN_A, LP) == LP_TOKEN0_AFTER_MINT
        assert ledger.balance_of(TOKEN_B, LP) == 10**27

        # Sell 100 token0
        ledger.mint(TOKEN_A, TRADER, 300 * 10**18)
        amount0, amount1 = pool.swap(
            TRADER, TRADER, True, 100 * 10**18,
            encode_sqrt_ratio_x96(1000, 1), pay_from(ledger, TRADER),
        )

        swap_event = pool.events[-1]
        assert isinstance(swap_event, Swap)
        assert (swap_event.amount0, swap_event.amount1) == (100 * 10**18, SWAP_AMOUNT1)
        assert (amount0, amount1) == (100 * 10**18, SWAP_AMOUNT1)
        assert pool.sqrt_price_x96 == PRICE_AFTER_SWAP
        assert INITIAL_SQRT_PRICE - pool.sqrt_price_x96 == 78989690499507264493336319
        assert pool.liquidity == LIQUIDITY
        assert ledger.balance_of(TOKEN_A, TRADER) == 200 * 10**18
        assert ledger.balance_of(TOKEN_B, TRADER) == -SWAP_AMOUNT1

        # Exit: burn leaves tokens owed, collect pays them out
        pool.burn(LP, LIQUIDITY)
        assert ledger.balance_of(TOKEN_A, LP) == LP_TOKEN0_AFTER_MINT

        pool.collect(LP, LP)
        assert ledger.balance_of(TOKEN_A, LP) == LP_TOKEN0_AFTER_EXIT
        assert pool.collect(LP, LP) == (0, 0)
