"""
Pool Factory - creates and indexes single-range pools.

Pools are keyed by ``(token0, token1, tick_lower, tick_upper, fee)`` with the
tokens in canonical order. All pools of one pair share a list whose position
is the pool's index. Both indexes are append-only.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable, Optional

from ..constants import FEE_TIERS, MAX_TICK, MIN_TICK
from ..exceptions import (
    IdenticalTokensError,
    InvalidTickRangeError,
    PoolNotFoundError,
    TickOutOfRangeError,
    UnsupportedFeeTierError,
)
from ..ledger import BalanceLedger
from .events import PoolCreated, event_to_dict
from .pool import Pool

if TYPE_CHECKING:
    from ..metrics import DEXMetrics

logger = logging.getLogger(__name__)


def sort_tokens(token_a: str, token_b: str) -> tuple[str, str]:
    """
    Order two token identifiers canonically.

    Comparison ignores case so checksummed and lower-case spellings of the
    same address sort identically; the original spelling is kept.
    """
    if token_a.lower() == token_b.lower():
        raise IdenticalTokensError(f"Identical tokens: {token_a}", details={"token": token_a})
    if token_a.lower() < token_b.lower():
        return token_a, token_b
    return token_b, token_a


def compute_pool_address(
    factory: str,
    token0: str,
    token1: str,
    tick_lower: int,
    tick_upper: int,
    fee: int,
) -> str:
    """Deterministic pool address derived from the factory and pool key."""
    addr_hash = hashlib.sha3_256(
        f"pool:{factory}:{token0.lower()}:{token1.lower()}:{tick_lower}:{tick_upper}:{fee}".encode()
    ).digest()
    return f"0x{addr_hash[-20:].hex()}"


@dataclass
class Factory:
    """Registry that allocates pools and looks them up by pair or address."""

    ledger: BalanceLedger
    address: str = ""
    fee_tiers: Iterable[int] = tuple(FEE_TIERS)
    metrics: Optional["DEXMetrics"] = None

    # Deployed pools, insertion ordered
    pools: dict[str, Pool] = field(default_factory=dict)

    # Pool lookup by canonical pair; list position is the pool index
    pool_by_pair: dict[tuple[str, str], list[str]] = field(default_factory=dict)

    events: list[Any] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Initialize factory."""
        self.fee_tiers = frozenset(self.fee_tiers)
        if not self.address:
            addr_hash = hashlib.sha3_256(f"factory:{id(self)}".encode()).digest()
            self.address = f"0x{addr_hash[-20:].hex()}"

    def create_pool(
        self,
        token_a: str,
        token_b: str,
        tick_lower: int,
        tick_upper: int,
        fee: int,
    ) -> Pool:
        """
        Create a pool for a pair and range, or return the existing one.

        Args:
            token_a: One token of the pair (any order)
            token_b: The other token
            tick_lower: Lower bound of the range
            tick_upper: Upper bound of the range
            fee: Fee in pips, one of the supported tiers

        Returns:
            The new (uninitialized) pool, or the pool already holding this key
        """
        token0, token1 = sort_tokens(token_a, token_b)
        self._validate_key(tick_lower, tick_upper, fee)

        existing = self._find(token0, token1, tick_lower, tick_upper, fee)
        if existing is not None:
            return existing

        address = compute_pool_address(self.address, token0, token1, tick_lower, tick_upper, fee)
        pool = Pool(
            address=address,
            factory=self.address,
            token0=token0,
            token1=token1,
            tick_lower=tick_lower,
            tick_upper=tick_upper,
            fee=fee,
            ledger=self.ledger,
            metrics=self.metrics,
        )

        self.pools[address] = pool
        addresses = self.pool_by_pair.setdefault(self._pair_key(token0, token1), [])
        addresses.append(address)

        event = PoolCreated(
            pool=address,
            token0=token0,
            token1=token1,
            index=len(addresses) - 1,
            tick_lower=tick_lower,
            tick_upper=tick_upper,
            fee=fee,
        )
        self.events.append(event)

        if self.metrics:
            self.metrics.pool_creations.labels(fee=str(fee)).inc()
            self.metrics.pools_total.set(len(self.pools))

        logger.info(
            "Pool created",
            extra={"event": "factory.pool_created", **event_to_dict(event)}
        )

        return pool

    def get_pool(self, token_a: str, token_b: str, index: int) -> Pool:
        """Get the ``index``-th pool created for a pair."""
        token0, token1 = sort_tokens(token_a, token_b)
        addresses = self.pool_by_pair.get(self._pair_key(token0, token1), [])
        if not 0 <= index < len(addresses):
            raise PoolNotFoundError(
                f"No pool {index} for {token0}/{token1}",
                details={"token0": token0, "token1": token1, "index": index},
            )
        return self.pools[addresses[index]]

    def get_pool_by_address(self, address: str) -> Pool:
        pool = self.pools.get(address)
        if pool is None:
            raise PoolNotFoundError(f"Unknown pool {address}", details={"address": address})
        return pool

    def pools_for_pair(self, token_a: str, token_b: str) -> list[Pool]:
        """All pools of a pair, in index order."""
        token0, token1 = sort_tokens(token_a, token_b)
        return [self.pools[addr] for addr in self.pool_by_pair.get(self._pair_key(token0, token1), [])]

    def _find(self, token0: str, token1: str, tick_lower: int, tick_upper: int, fee: int) -> Optional[Pool]:
        for address in self.pool_by_pair.get(self._pair_key(token0, token1), []):
            pool = self.pools[address]
            if (pool.tick_lower, pool.tick_upper, pool.fee) == (tick_lower, tick_upper, fee):
                return pool
        return None

    def _validate_key(self, tick_lower: int, tick_upper: int, fee: int) -> None:
        if tick_lower >= tick_upper:
            raise InvalidTickRangeError(
                f"tick_lower {tick_lower} must be less than tick_upper {tick_upper}",
                details={"tick_lower": tick_lower, "tick_upper": tick_upper},
            )
        if tick_lower < MIN_TICK or tick_upper > MAX_TICK:
            raise TickOutOfRangeError(
                f"Ticks must lie within [{MIN_TICK}, {MAX_TICK}]",
                details={"tick_lower": tick_lower, "tick_upper": tick_upper},
            )
        if fee not in self.fee_tiers:
            raise UnsupportedFeeTierError(
                f"Unsupported fee tier {fee}",
                details={"fee": fee, "supported": sorted(self.fee_tiers)},
            )

    @staticmethod
    def _pair_key(token0: str, token1: str) -> tuple[str, str]:
        return token0.lower(), token1.lower()
