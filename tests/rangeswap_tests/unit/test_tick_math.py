"""
Tests for tick <-> sqrt price conversion.
"""

import pytest

from rangeswap.core.constants import MAX_SQRT_RATIO, MAX_TICK, MIN_SQRT_RATIO, MIN_TICK, Q96
from rangeswap.core.defi.tick_math import (
    encode_sqrt_ratio_x96,
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
    tick_to_price,
)
from rangeswap.core.exceptions import InvalidAmountError, PriceOutOfRangeError, TickOutOfRangeError


class TestGetSqrtRatioAtTick:
    """Tests for the tick -> sqrt price direction."""

    def test_tick_zero_is_one(self):
        assert get_sqrt_ratio_at_tick(0) == Q96

    def test_bounds(self):
        assert get_sqrt_ratio_at_tick(MIN_TICK) == MIN_SQRT_RATIO
        assert get_sqrt_ratio_at_tick(MAX_TICK) == MAX_SQRT_RATIO

    def test_known_values(self):
        assert get_sqrt_ratio_at_tick(MIN_TICK + 1) == 4295343490
        assert get_sqrt_ratio_at_tick(MAX_TICK - 1) == 1461373636630004318706518188784493106690254656249

    @pytest.mark.parametrize("tick", [MIN_TICK - 1, MAX_TICK + 1])
    def test_out_of_range(self, tick):
        with pytest.raises(TickOutOfRangeError, match="Tick out of range"):
            get_sqrt_ratio_at_tick(tick)

    def test_monotonic(self):
        ticks = [MIN_TICK, -500000, -50000, -1, 0, 1, 50000, 500000, MAX_TICK]
        ratios = [get_sqrt_ratio_at_tick(t) for t in ticks]
        assert ratios == sorted(ratios)
        assert len(set(ratios)) == len(ratios)


class TestGetTickAtSqrtRatio:
    """Tests for the sqrt price -> tick direction."""

    def test_bounds(self):
        assert get_tick_at_sqrt_ratio(MIN_SQRT_RATIO) == MIN_TICK
        assert get_tick_at_sqrt_ratio(MAX_SQRT_RATIO - 1) == MAX_TICK - 1

    @pytest.mark.parametrize(
        "tick",
        [MIN_TICK, MIN_TICK + 1, -276325, -46054, -1, 0, 1, 46054, 92108, 276324, MAX_TICK - 1],
    )
    def test_round_trip(self, tick):
        assert get_tick_at_sqrt_ratio(get_sqrt_ratio_at_tick(tick)) == tick

    @pytest.mark.parametrize("tick", [-200000, -60, 0, 59, 123456])
    def test_floor_between_ticks(self, tick):
        """Any price strictly between two ticks maps to the lower one."""
        ratio = get_sqrt_ratio_at_tick(tick)
        next_ratio = get_sqrt_ratio_at_tick(tick + 1)
        assert get_tick_at_sqrt_ratio(ratio + 1) == tick
        assert get_tick_at_sqrt_ratio(next_ratio - 1) == tick

    @pytest.mark.parametrize("ratio", [MIN_SQRT_RATIO - 1, MAX_SQRT_RATIO, 0])
    def test_out_of_range(self, ratio):
        with pytest.raises(PriceOutOfRangeError):
            get_tick_at_sqrt_ratio(ratio)


class TestEncodeSqrtRatio:
    """Tests for encoding a price ratio."""

    def test_one_to_one(self):
        assert encode_sqrt_ratio_x96(1, 1) == Q96

    def test_perfect_square(self):
        assert encode_sqrt_ratio_x96(10000, 1) == 100 * Q96
        assert encode_sqrt_ratio_x96(1, 100) == Q96 // 10

    def test_registry_ticks(self):
        """Ticks of the ranges used across the registry tests."""
        assert get_tick_at_sqrt_ratio(encode_sqrt_ratio_x96(1, 1)) == 0
        assert get_tick_at_sqrt_ratio(encode_sqrt_ratio_x96(10000, 1)) == 92108
        assert get_tick_at_sqrt_ratio(encode_sqrt_ratio_x96(100, 1)) == 46054
        assert get_tick_at_sqrt_ratio(encode_sqrt_ratio_x96(5000, 1)) == 85176

    @pytest.mark.parametrize("amount1,amount0", [(0, 1), (1, 0), (-1, 1)])
    def test_rejects_non_positive(self, amount1, amount0):
        with pytest.raises(InvalidAmountError):
            encode_sqrt_ratio_x96(amount1, amount0)

    def test_tick_to_price(self):
        assert tick_to_price(0) == 1.0
        assert tick_to_price(92108) == pytest.approx(10000, rel=1e-4)
