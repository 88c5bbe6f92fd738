"""
Balance ledger collaborator.

Pools never own asset balances directly: they ask a ledger for their balance
and move value with ``transfer``. Anything implementing ``BalanceLedger``
can back the engine. ``InMemoryLedger`` is a plain multi-asset ledger for
tests, simulations and local tooling.

Usage:
    ledger = InMemoryLedger()
    ledger.mint("0xtoken0", "alice", 10**24)
    ledger.transfer("0xtoken0", "alice", pool.address, 10**18)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Protocol, runtime_checkable

from .exceptions import InsufficientBalanceError, InvalidAmountError

logger = logging.getLogger(__name__)


@runtime_checkable
class BalanceLedger(Protocol):
    """
    Protocol for the fungible balance service pools settle against.

    ``transfer`` must either move the full amount or raise.
    """

    def balance_of(self, token: str, owner: str) -> int:
        """Get ``owner``'s balance of ``token``."""
        ...

    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> None:
        """Move ``amount`` of ``token`` from ``sender`` to ``recipient``."""
        ...


class InMemoryLedger:
    """Multi-asset balance ledger held in memory."""

    def __init__(self) -> None:
        self._balances: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
        self._total_supply: dict[str, int] = defaultdict(int)

    def balance_of(self, token: str, owner: str) -> int:
        return self._balances.get(token, {}).get(owner, 0)

    def total_supply(self, token: str) -> int:
        return self._total_supply.get(token, 0)

    def mint(self, token: str, owner: str, amount: int) -> None:
        """Create ``amount`` of ``token`` for ``owner``."""
        if amount < 0:
            raise InvalidAmountError("Mint amount must be non-negative")
        self._balances[token][owner] += amount
        self._total_supply[token] += amount

    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise InvalidAmountError("Transfer amount must be non-negative")

        balance = self.balance_of(token, sender)
        if balance < amount:
            raise InsufficientBalanceError(
                f"Insufficient {token} balance for {sender}",
                details={"token": token, "owner": sender, "balance": balance, "amount": amount},
            )

        self._balances[token][sender] = balance - amount
        self._balances[token][recipient] += amount

        logger.debug(
            "Ledger transfer",
            extra={
                "event": "ledger.transfer",
                "token": token,
                "sender": sender,
                "recipient": recipient,
                "amount": amount,
            },
        )
