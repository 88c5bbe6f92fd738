"""
Checked fixed-point arithmetic.

Python integers never wrap, so every fixed-point multiply/divide here is a
full-width multiply followed by a divide, with the result checked against
the width of the type it is stored in. Anything that would have overflowed
a uint256 (or the narrower storage types) raises instead of wrapping.
"""

from __future__ import annotations

from ..constants import (
    MAX_INT256,
    MAX_UINT128,
    MAX_UINT160,
    MAX_UINT256,
    MIN_INT256,
)
from ..exceptions import ArithmeticOverflowError, DivisionByZeroError


def mul_div(a: int, b: int, denominator: int) -> int:
    """
    Calculate floor(a * b / denominator) with a full-width intermediate.

    Args:
        a: Multiplicand (uint256)
        b: Multiplier (uint256)
        denominator: Divisor, must be non-zero

    Returns:
        The rounded-down quotient

    Raises:
        DivisionByZeroError: If denominator is zero
        ArithmeticOverflowError: If an operand or the result exceeds uint256
    """
    if denominator == 0:
        raise DivisionByZeroError("Division by zero")
    _require_uint256(a)
    _require_uint256(b)

    result = (a * b) // denominator
    if result > MAX_UINT256:
        raise ArithmeticOverflowError(
            "mul_div result overflows uint256",
            details={"a": a, "b": b, "denominator": denominator},
        )
    return result


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """Calculate ceil(a * b / denominator); same checks as mul_div."""
    result = mul_div(a, b, denominator)
    if (a * b) % denominator > 0:
        if result >= MAX_UINT256:
            raise ArithmeticOverflowError("mul_div_rounding_up result overflows uint256")
        result += 1
    return result


def div_rounding_up(numerator: int, denominator: int) -> int:
    """Calculate ceil(numerator / denominator) for non-negative operands."""
    if denominator == 0:
        raise DivisionByZeroError("Division by zero")
    return -(-numerator // denominator)


def to_uint128(value: int) -> int:
    """Narrow to uint128, raising if the value does not fit."""
    if value < 0 or value > MAX_UINT128:
        raise ArithmeticOverflowError(f"Value does not fit uint128: {value}")
    return value


def to_uint160(value: int) -> int:
    """Narrow to uint160, raising if the value does not fit."""
    if value < 0 or value > MAX_UINT160:
        raise ArithmeticOverflowError(f"Value does not fit uint160: {value}")
    return value


def to_int256(value: int) -> int:
    """Narrow to int256, raising if the value does not fit."""
    if value < MIN_INT256 or value > MAX_INT256:
        raise ArithmeticOverflowError(f"Value does not fit int256: {value}")
    return value


def add_delta(x: int, y: int) -> int:
    """Apply a signed liquidity delta to a uint128 liquidity value."""
    z = x + y
    if z < 0:
        raise ArithmeticOverflowError("Liquidity underflow", details={"x": x, "delta": y})
    return to_uint128(z)


def checked_add_uint256(a: int, b: int) -> int:
    """Add two uint256 values, raising on overflow."""
    result = a + b
    _require_uint256(result)
    return result


def _require_uint256(value: int) -> None:
    if value < 0 or value > MAX_UINT256:
        raise ArithmeticOverflowError(f"Value does not fit uint256: {value}")
