"""
Tests for checked fixed-point arithmetic.

Tests cover:
- Full-width mul_div with floor and ceiling rounding
- uint256 operand and result checks
- Width narrowing casts
- Signed liquidity deltas
"""

import pytest

from rangeswap.core.constants import MAX_INT256, MAX_UINT128, MAX_UINT160, MAX_UINT256, MIN_INT256, Q96, Q128
from rangeswap.core.defi.safe_math import (
    add_delta,
    checked_add_uint256,
    div_rounding_up,
    mul_div,
    mul_div_rounding_up,
    to_int256,
    to_uint128,
    to_uint160,
)
from rangeswap.core.exceptions import ArithmeticOverflowError, DivisionByZeroError, MathError


class TestMulDiv:
    """Tests for mul_div and mul_div_rounding_up."""

    def test_rounds_down(self):
        assert mul_div(5, 3, 2) == 7

    def test_exact_division(self):
        assert mul_div(Q128, 35, 5) == Q128 * 7

    def test_intermediate_may_exceed_uint256(self):
        """The product is not truncated, only the result is checked."""
        assert mul_div(MAX_UINT256, MAX_UINT256, MAX_UINT256) == MAX_UINT256
        assert mul_div(Q128, Q128, Q96) == Q128 * 2 ** 32

    def test_result_overflow_raises(self):
        with pytest.raises(ArithmeticOverflowError, match="overflows uint256"):
            mul_div(MAX_UINT256, 2, 1)

    def test_operand_outside_uint256_raises(self):
        with pytest.raises(ArithmeticOverflowError):
            mul_div(-1, 1, 1)
        with pytest.raises(ArithmeticOverflowError):
            mul_div(MAX_UINT256 + 1, 1, 2)

    def test_zero_denominator_raises(self):
        with pytest.raises(DivisionByZeroError):
            mul_div(1, 1, 0)

    def test_rounding_up(self):
        assert mul_div_rounding_up(5, 3, 2) == 8
        assert mul_div_rounding_up(6, 3, 2) == 9

    def test_rounding_up_overflow_at_max(self):
        """Rounding MAX_UINT256 up would leave the type."""
        with pytest.raises(ArithmeticOverflowError):
            mul_div_rounding_up(MAX_UINT256, MAX_UINT256 - 1, MAX_UINT256 - 2)

    def test_errors_share_math_base(self):
        assert issubclass(ArithmeticOverflowError, MathError)
        assert issubclass(DivisionByZeroError, MathError)


class TestDivRoundingUp:
    def test_exact(self):
        assert div_rounding_up(6, 2) == 3

    def test_remainder(self):
        assert div_rounding_up(7, 2) == 4
        assert div_rounding_up(1, Q96) == 1

    def test_zero_numerator(self):
        assert div_rounding_up(0, 5) == 0

    def test_zero_denominator(self):
        with pytest.raises(DivisionByZeroError):
            div_rounding_up(1, 0)


class TestCasts:
    """Tests for width narrowing."""

    def test_uint128_bounds(self):
        assert to_uint128(MAX_UINT128) == MAX_UINT128
        with pytest.raises(ArithmeticOverflowError, match="uint128"):
            to_uint128(MAX_UINT128 + 1)
        with pytest.raises(ArithmeticOverflowError):
            to_uint128(-1)

    def test_uint160_bounds(self):
        assert to_uint160(MAX_UINT160) == MAX_UINT160
        with pytest.raises(ArithmeticOverflowError, match="uint160"):
            to_uint160(MAX_UINT160 + 1)

    def test_int256_bounds(self):
        assert to_int256(MIN_INT256) == MIN_INT256
        assert to_int256(MAX_INT256) == MAX_INT256
        with pytest.raises(ArithmeticOverflowError):
            to_int256(MAX_INT256 + 1)
        with pytest.raises(ArithmeticOverflowError):
            to_int256(MIN_INT256 - 1)

    def test_checked_add(self):
        assert checked_add_uint256(MAX_UINT256 - 1, 1) == MAX_UINT256
        with pytest.raises(ArithmeticOverflowError):
            checked_add_uint256(MAX_UINT256, 1)


class TestAddDelta:
    """Tests for applying signed liquidity deltas."""

    def test_add(self):
        assert add_delta(10, 5) == 15

    def test_remove_all(self):
        assert add_delta(10, -10) == 0

    def test_underflow(self):
        with pytest.raises(ArithmeticOverflowError, match="underflow"):
            add_delta(10, -11)

    def test_overflow(self):
        with pytest.raises(ArithmeticOverflowError):
            add_delta(MAX_UINT128, 1)
