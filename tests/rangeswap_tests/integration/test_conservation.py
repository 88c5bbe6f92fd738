"""
Multi-provider, multi-swap flows that must leave only rounding dust behind.
"""

import pytest

from rangeswap_tests.helpers import INITIAL_BALANCE, pay_from

pytestmark = pytest.mark.integration

PROVIDERS = ("0xlp_one", "0xlp_two")
TRADERS = ("0xtrader_one", "0xtrader_two")


@pytest.fixture
def busy_pool(pool, ledger):
    """Standard pool with two providers and a round of trades in both directions."""
    for account in PROVIDERS + TRADERS:
        ledger.mint(pool.token0, account, INITIAL_BALANCE)
        ledger.mint(pool.token1, account, INITIAL_BALANCE)

    pool.mint(PROVIDERS[0], PROVIDERS[0], 10**27, pay_from(ledger, PROVIDERS[0]))
    pool.mint(PROVIDERS[1], PROVIDERS[1], 3 * 10**26, pay_from(ledger, PROVIDERS[1]))

    trades = [
        (TRADERS[0], True, 250 * 10**18),
        (TRADERS[1], False, 4_000_000 * 10**18),
        (TRADERS[0], True, -(1_000_000 * 10**18)),
        (TRADERS[1], False, -(75 * 10**18)),
        (TRADERS[0], True, 10**24),
    ]
    for trader, zero_for_one, amount in trades:
        pool.swap(trader, trader, zero_for_one, amount, None, pay_from(ledger, trader))
    return pool


class TestConservation:
    def test_price_stays_in_range(self, busy_pool):
        assert busy_pool.sqrt_price_lower_x96 <= busy_pool.sqrt_price_x96 <= busy_pool.sqrt_price_upper_x96
        assert busy_pool.tick_lower <= busy_pool.tick <= busy_pool.tick_upper

    def test_full_exit_leaves_dust(self, busy_pool, ledger):
        """Every provider exits; the pool keeps a few units per asset at most."""
        for provider in PROVIDERS:
            busy_pool.burn(provider, busy_pool.get_position(provider).liquidity)
            busy_pool.collect(provider, provider)

        assert busy_pool.liquidity == 0
        assert 0 <= busy_pool.balance0() <= 10
        assert 0 <= busy_pool.balance1() <= 10

    def test_supply_is_conserved(self, busy_pool, ledger):
        accounts = PROVIDERS + TRADERS + (busy_pool.address,)
        for token in (busy_pool.token0, busy_pool.token1):
            assert sum(ledger.balance_of(token, account) for account in accounts) == ledger.total_supply(token)
            assert ledger.total_supply(token) == 4 * INITIAL_BALANCE

    def test_fees_split_by_liquidity(self, busy_pool, ledger):
        """Providers earn fees in proportion to their liquidity."""
        for provider in PROVIDERS:
            # Burning one unit settles accrued fees into tokens owed
            busy_pool.burn(provider, 1)

        owed_one = busy_pool.get_position(PROVIDERS[0]).tokens_owed0
        owed_two = busy_pool.get_position(PROVIDERS[1]).tokens_owed0
        assert owed_one > 0
        assert abs(owed_one * 3 - owed_two * 10) <= 10 * 3
