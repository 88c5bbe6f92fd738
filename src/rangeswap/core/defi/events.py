"""
Records emitted by pools and the registry, and the payment request message
pools send to their callers.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Callable


@dataclass(frozen=True)
class PoolCreated:
    """A pool was allocated by the registry."""
    pool: str
    token0: str
    token1: str
    index: int
    tick_lower: int
    tick_upper: int
    fee: int


@dataclass(frozen=True)
class Mint:
    sender: str
    owner: str
    amount: int
    amount0: int
    amount1: int


@dataclass(frozen=True)
class Burn:
    owner: str
    amount: int
    amount0: int  # principal moved to owed, token0
    amount1: int


@dataclass(frozen=True)
class Collect:
    owner: str
    recipient: str
    amount0: int
    amount1: int


@dataclass(frozen=True)
class Swap:
    """
    A swap executed against a pool.

    amount0/amount1 are signed from the pool's point of view: positive means
    the asset moved into the pool, negative means it was paid out.
    """
    sender: str
    recipient: str
    amount0: int
    amount1: int
    sqrt_price_x96: int
    liquidity: int
    tick: int


@dataclass(frozen=True)
class PaymentRequest:
    """
    Amounts a pool expects to receive before it finalizes an operation.

    Issued to the caller's callback during mint and swap. Entries that are
    zero or negative mean nothing is owed in that asset. The callback must
    move at least the positive amounts to ``pool`` through the ledger
    before returning; the pool verifies its balances afterwards. If the
    operation fails, whatever reached the pool is returned to ``payer``.
    """
    pool: str
    payer: str
    token0: str
    token1: str
    amount0: int
    amount1: int
    data: Any = None

    def amount_owed(self, token: str) -> int:
        """Positive amount owed in ``token`` (0 if none)."""
        if token == self.token0:
            return max(self.amount0, 0)
        if token == self.token1:
            return max(self.amount1, 0)
        return 0


PaymentCallback = Callable[[PaymentRequest], None]


def event_to_dict(event: Any) -> dict:
    """Flatten a record for logging/serialization, tagged with its type."""
    payload = asdict(event)
    payload["type"] = type(event).__name__
    return payload
