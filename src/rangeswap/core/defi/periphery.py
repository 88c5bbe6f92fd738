"""
Shared plumbing for contracts that act on pools for other accounts.

``pay_from`` builds the standard payment callback. ``Periphery`` is the base
of the position manager and the swap router: it carries the pool manager,
the shared ledger, a derived address and the clock used for deadlines.
"""

from __future__ import annotations

import hashlib
import time
from typing import Callable, Optional

from ..exceptions import DeadlineExceededError
from ..ledger import BalanceLedger
from .events import PaymentCallback, PaymentRequest
from .pool_manager import PoolManager


def pay_from(ledger: BalanceLedger, payer: Optional[str] = None) -> PaymentCallback:
    """
    Callback that moves exactly what a pool asks for.

    Tokens come from ``payer``, or from the request's own payer when none is
    given.
    """
    def pay(request: PaymentRequest) -> None:
        source = payer or request.payer
        for token in (request.token0, request.token1):
            owed = request.amount_owed(token)
            if owed > 0:
                ledger.transfer(token, source, request.pool, owed)
    return pay


class Periphery:
    """Base for pool callers that settle on behalf of their users."""

    kind = "periphery"

    def __init__(
        self,
        pool_manager: PoolManager,
        address: Optional[str] = None,
        time_provider: Callable[[], float] | None = None,
    ):
        self.pool_manager = pool_manager
        self.ledger = pool_manager.ledger
        if not address:
            addr_hash = hashlib.sha3_256(f"{self.kind}:{pool_manager.address}".encode()).digest()
            address = f"0x{addr_hash[-20:].hex()}"
        self.address = address
        self._time_provider = time_provider or time.time
        self._pay = pay_from(self.ledger)

    def _check_deadline(self, deadline: Optional[float]) -> None:
        if deadline is None:
            return
        now = self._time_provider()
        if now > deadline:
            raise DeadlineExceededError(
                "Transaction too old",
                details={"deadline": deadline, "now": now},
            )
