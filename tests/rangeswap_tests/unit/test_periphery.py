"""
Tests for the shared periphery base and payment callback.
"""

import pytest

from rangeswap.core.defi.events import PaymentRequest
from rangeswap.core.defi.periphery import Periphery, pay_from
from rangeswap.core.defi.position_manager import PositionManager
from rangeswap.core.defi.swap_router import SwapRouter
from rangeswap.core.exceptions import DeadlineExceededError
from rangeswap_tests.helpers import TOKEN_A, TOKEN_B


def _request(**overrides):
    values = {
        "pool": "0xpool",
        "payer": "0xpayer",
        "token0": TOKEN_A,
        "token1": TOKEN_B,
        "amount0": 30,
        "amount1": 0,
    }
    values.update(overrides)
    return PaymentRequest(**values)


class TestPayFrom:
    def test_defaults_to_request_payer(self, ledger):
        ledger.mint(TOKEN_A, "0xpayer", 100)
        pay_from(ledger)(_request())

        assert ledger.balance_of(TOKEN_A, "0xpayer") == 70
        assert ledger.balance_of(TOKEN_A, "0xpool") == 30

    def test_explicit_payer_wins(self, ledger):
        ledger.mint(TOKEN_A, "0xsponsor", 100)
        pay_from(ledger, "0xsponsor")(_request())

        assert ledger.balance_of(TOKEN_A, "0xsponsor") == 70
        assert ledger.balance_of(TOKEN_A, "0xpayer") == 0

    def test_pays_both_tokens_and_skips_negatives(self, ledger):
        ledger.mint(TOKEN_A, "0xpayer", 100)
        ledger.mint(TOKEN_B, "0xpayer", 100)
        pay_from(ledger)(_request(amount0=-5, amount1=40))

        assert ledger.balance_of(TOKEN_A, "0xpayer") == 100
        assert ledger.balance_of(TOKEN_B, "0xpool") == 40


class TestPeriphery:
    def test_addresses_differ_by_kind(self, pool_manager):
        manager = PositionManager(pool_manager)
        router = SwapRouter(pool_manager)

        assert manager.address.startswith("0x") and len(manager.address) == 42
        assert manager.address != router.address
        assert SwapRouter(pool_manager).address == router.address

    def test_explicit_address_kept(self, pool_manager):
        assert Periphery(pool_manager, address="0xrouter").address == "0xrouter"

    def test_deadline_is_inclusive(self, pool_manager):
        periphery = Periphery(pool_manager, time_provider=lambda: 100)

        periphery._check_deadline(None)
        periphery._check_deadline(100)
        with pytest.raises(DeadlineExceededError, match="too old") as exc_info:
            periphery._check_deadline(99)
        assert exc_info.value.details == {"deadline": 99, "now": 100}
