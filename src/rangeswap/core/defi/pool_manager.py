"""
Pool Manager - discovery and idempotent setup on top of the factory.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

from ..exceptions import PriceOutOfRangeError
from ..schemas import CreateAndInitializeParams, parse_params
from .factory import Factory
from .pool import Pool
from .tick_math import get_tick_at_sqrt_ratio

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Pair:
    token0: str
    token1: str


@dataclass(frozen=True)
class PoolInfo:
    """Point-in-time view of one pool."""
    pool: str
    token0: str
    token1: str
    index: int
    fee: int
    tick_lower: int
    tick_upper: int
    tick: int
    sqrt_price_x96: int
    liquidity: int

    def to_dict(self) -> dict:
        return asdict(self)


class PoolManager(Factory):
    """Factory with pair enumeration and create-and-initialize in one call."""

    def create_and_initialize_pool_if_necessary(self, params: CreateAndInitializeParams | dict[str, Any]) -> Pool:
        """
        Create the pool for ``params`` if needed and set its price if unset.

        Calling again with the same key returns the same pool and leaves an
        already-initialized price untouched.
        """
        params = parse_params(CreateAndInitializeParams, params)

        # Reject a bad opening price before a pool is allocated for it
        self._validate_key(params.tick_lower, params.tick_upper, params.fee)
        existing = self._find(params.token0, params.token1, params.tick_lower, params.tick_upper, params.fee)
        if existing is None or not existing.initialized:
            tick = get_tick_at_sqrt_ratio(params.sqrt_price_x96)
            if not params.tick_lower <= tick < params.tick_upper:
                raise PriceOutOfRangeError(
                    f"Initial price tick {tick} outside [{params.tick_lower}, {params.tick_upper})",
                    details={"tick": tick, "tick_lower": params.tick_lower, "tick_upper": params.tick_upper},
                )

        pool = self.create_pool(
            params.token0,
            params.token1,
            params.tick_lower,
            params.tick_upper,
            params.fee,
        )

        if not pool.initialized:
            pool.initialize(params.sqrt_price_x96)
        else:
            logger.debug(
                "Pool already initialized",
                extra={"event": "pool_manager.skip_initialize", "pool": pool.address[:10]}
            )

        return pool

    def get_pairs(self) -> list[Pair]:
        """Distinct pairs with at least one pool, in creation order."""
        pairs = []
        for addresses in self.pool_by_pair.values():
            first = self.pools[addresses[0]]
            pairs.append(Pair(first.token0, first.token1))
        return pairs

    def get_all_pools(self) -> list[PoolInfo]:
        """Info records for every pool, in creation order."""
        infos = []
        for pool in self.pools.values():
            addresses = self.pool_by_pair[self._pair_key(pool.token0, pool.token1)]
            infos.append(PoolInfo(
                pool=pool.address,
                token0=pool.token0,
                token1=pool.token1,
                index=addresses.index(pool.address),
                fee=pool.fee,
                tick_lower=pool.tick_lower,
                tick_upper=pool.tick_upper,
                tick=pool.tick,
                sqrt_price_x96=pool.sqrt_price_x96,
                liquidity=pool.liquidity,
            ))
        return infos
