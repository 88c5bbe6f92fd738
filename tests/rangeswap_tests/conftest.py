"""
Shared fixtures for rangeswap tests.
"""

import pytest
from prometheus_client import CollectorRegistry

from rangeswap.core.defi.factory import Factory
from rangeswap.core.defi.pool_manager import PoolManager
from rangeswap.core.ledger import InMemoryLedger
from rangeswap.core.metrics import DEXMetrics
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
    pay_from,
)


@pytest.fixture
def ledger():
    return InMemoryLedger()


@pytest.fixture
def factory(ledger):
    return Factory(ledger=ledger, address="0xfactory")


@pytest.fixture
def pool_manager(ledger):
    return PoolManager(ledger=ledger, address="0xpoolmanager")


@pytest.fixture
def metrics():
    """Metrics bound to a private registry."""
    return DEXMetrics(registry=CollectorRegistry())


@pytest.fixture
def pool(factory):
    """Initialized, empty standard pool."""
    pool = factory.create_pool(TOKEN_A, TOKEN_B, TICK_LOWER, TICK_UPPER, FEE)
    pool.initialize(INITIAL_SQRT_PRICE)
    return pool


@pytest.fixture
def funded_pool(pool, ledger):
    """Standard pool holding LIQUIDITY minted by LP."""
    ledger.mint(pool.token0, LP, INITIAL_BALANCE)
    ledger.mint(pool.token1, LP, INITIAL_BALANCE)
    pool.mint(LP, LP, LIQUIDITY, pay_from(ledger, LP))
    return pool
