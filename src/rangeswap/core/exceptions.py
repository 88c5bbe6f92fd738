"""
Exception hierarchy for the rangeswap engine.

Every public pool, registry and router operation is all-or-nothing; when one
fails it raises one of the typed exceptions below after discarding its
effects. Callers can catch ``RangeSwapError`` for catch-all handling or a
specific subclass for precise recovery.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class RangeSwapError(Exception):
    """Base exception for all engine errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the operation can be retried as-is
    """

    recoverable = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: Optional[bool] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if recoverable is not None:
            self.recoverable = recoverable


# ==================== Validation (Configuration) Errors ====================


class ValidationError(RangeSwapError):
    """Raised when call parameters are rejected before any state mutation."""
    pass


class InvalidTickRangeError(ValidationError):
    """Raised when tick_lower is not strictly below tick_upper."""
    pass


class TickOutOfRangeError(ValidationError):
    """Raised when a tick lies outside [MIN_TICK, MAX_TICK]."""
    pass


class PriceOutOfRangeError(ValidationError):
    """Raised when a sqrt price lies outside the allowed interval."""
    pass


class UnsupportedFeeTierError(ValidationError):
    """Raised when a fee is not one of the supported tiers."""
    pass


class IdenticalTokensError(ValidationError):
    """Raised when both sides of a pair are the same asset."""
    pass


class InvalidAmountError(ValidationError):
    """Raised for zero, negative or otherwise unusable amounts."""
    pass


class InvalidPriceLimitError(ValidationError):
    """Raised when a swap price limit is on the wrong side of the price."""
    pass


class InvalidParamsError(ValidationError):
    """Raised when a parameter object fails schema validation."""
    pass


# ==================== Pool State Errors ====================


class PoolStateError(RangeSwapError):
    """Raised when an operation is not allowed in the pool's current state."""
    pass


class PoolNotInitializedError(PoolStateError):
    """Raised when operating on a pool that has no price yet."""
    pass


class PoolAlreadyInitializedError(PoolStateError):
    """Raised when initialize is called a second time."""
    pass


class InsufficientLiquidityError(PoolStateError):
    """Raised when a burn exceeds the position, or a swap finds no liquidity."""
    pass


class ReentrancyError(PoolStateError):
    """Raised when a callback re-enters a pool that is mid-operation."""
    pass


# ==================== Arithmetic Errors ====================


class MathError(RangeSwapError):
    """Raised when fixed-point arithmetic cannot produce an exact result."""
    pass


class ArithmeticOverflowError(MathError):
    """Raised when a result does not fit its fixed-width type."""
    pass


class DivisionByZeroError(MathError):
    """Raised on division by a zero denominator."""
    pass


# ==================== Funding Errors ====================


class FundingError(RangeSwapError):
    """Raised when value owed to or by a pool cannot be moved."""
    pass


class InsufficientPaymentError(FundingError):
    """Raised when a payment callback delivers less than was requested."""

    def __init__(
        self,
        message: str,
        token: Optional[str] = None,
        required: int = 0,
        received: int = 0,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.token = token
        self.required = required
        self.received = received


class InsufficientBalanceError(FundingError):
    """Raised by the ledger when an account cannot cover a transfer."""
    pass


# ==================== Trade Protection Errors ====================


class SlippageError(RangeSwapError):
    """Raised when a trade would execute outside the caller's limits."""
    recoverable = True


class DeadlineExceededError(RangeSwapError):
    """Raised when a call arrives after its deadline."""
    pass


# ==================== Registry Errors ====================


class RegistryError(RangeSwapError):
    """Raised when a registry or manager lookup fails."""
    pass


class PoolNotFoundError(RegistryError):
    """Raised when no pool exists for a pair/index or address."""
    pass


class PositionNotFoundError(RegistryError):
    """Raised when a position handle is unknown."""
    pass


class NotAuthorizedError(RegistryError):
    """Raised when a caller may not act on a position handle."""
    pass


# ==================== Configuration Errors ====================


class ConfigurationError(RangeSwapError):
    """Raised when engine configuration is missing or invalid."""
    recoverable = False


# ==================== Utility Functions ====================


def is_recoverable_error(exc: Exception) -> bool:
    """Check if an exception represents a recoverable error.

    Args:
        exc: The exception to check

    Returns:
        True if the operation can be retried with fresh inputs
    """
    if isinstance(exc, RangeSwapError):
        return exc.recoverable
    return False


def get_error_context(exc: Exception) -> Dict[str, Any]:
    """Extract error context from an exception for logging.

    Args:
        exc: The exception to extract context from

    Returns:
        Dictionary containing error type, message, and any additional details
    """
    context: Dict[str, Any] = {
        "error_type": type(exc).__name__,
        "error_message": str(exc),
    }

    if isinstance(exc, RangeSwapError):
        context["recoverable"] = exc.recoverable
        if exc.details:
            context["details"] = exc.details

    if isinstance(exc, InsufficientPaymentError):
        context["token"] = exc.token
        context["required"] = exc.required
        context["received"] = exc.received

    return context
