"""
Position Manager - per-owner position handles across many pools.

Providers deposit desired token amounts; the manager sizes liquidity at the
pool's current price, mints it into the pool for the recipient and pulls the
owed tokens from the paying account through the ledger. Each
``(pool, owner)`` pair gets one integer handle, and later mints for the same
pair add to it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, NamedTuple, Optional

from ..exceptions import (
    InvalidAmountError,
    NotAuthorizedError,
    PoolNotInitializedError,
    PositionNotFoundError,
)
from ..schemas import MintParams, parse_params
from .liquidity_amounts import get_liquidity_for_amounts
from .periphery import Periphery
from .pool import Pool
from .pool_manager import PoolManager

logger = logging.getLogger(__name__)


@dataclass
class PositionHandle:
    id: int
    pool: str
    owner: str
    operator: Optional[str] = None


@dataclass(frozen=True)
class PositionInfo:
    """Live view of a handle, read from its pool."""
    id: int
    owner: str
    operator: Optional[str]
    pool: str
    token0: str
    token1: str
    fee: int
    tick_lower: int
    tick_upper: int
    liquidity: int
    fee_growth_inside0_last_x128: int
    fee_growth_inside1_last_x128: int
    tokens_owed0: int
    tokens_owed1: int


class MintResult(NamedTuple):
    position_id: int
    liquidity: int
    amount0: int
    amount1: int


class PositionManager(Periphery):
    """Mints, burns and collects pool positions on behalf of their owners."""

    kind = "position_manager"

    def __init__(
        self,
        pool_manager: PoolManager,
        address: Optional[str] = None,
        time_provider: Callable[[], float] | None = None,
    ):
        super().__init__(pool_manager, address, time_provider)
        self.positions: dict[int, PositionHandle] = {}
        self._handle_by_key: dict[tuple[str, str], int] = {}
        self.next_position_id = 1

    def mint(self, caller: str, params: MintParams | dict[str, Any]) -> MintResult:
        """
        Add liquidity sized from the desired amounts.

        Args:
            caller: Account the tokens are pulled from
            params: Pool (pair and index), desired amounts, recipient and
                optional deadline

        Returns:
            MintResult(position_id, liquidity, amount0, amount1)
        """
        params = parse_params(MintParams, params)
        self._check_deadline(params.deadline)

        pool = self.pool_manager.get_pool(params.token0, params.token1, params.index)
        if not pool.initialized:
            raise PoolNotInitializedError(f"Pool {pool.address} is not initialized")

        # Desired amounts are given in the caller's token order
        amount0_desired, amount1_desired = params.amount0_desired, params.amount1_desired
        if pool.token0.lower() != params.token0.lower():
            amount0_desired, amount1_desired = amount1_desired, amount0_desired

        liquidity = get_liquidity_for_amounts(
            pool.sqrt_price_x96,
            pool.sqrt_price_lower_x96,
            pool.sqrt_price_upper_x96,
            amount0_desired,
            amount1_desired,
        )
        if liquidity == 0:
            raise InvalidAmountError(
                "Desired amounts buy no liquidity at the current price",
                details={"amount0_desired": amount0_desired, "amount1_desired": amount1_desired},
            )

        amount0, amount1 = pool.mint(
            caller=self.address,
            recipient=params.recipient,
            amount=liquidity,
            callback=self._pay,
            payer=caller,
        )

        handle = self._handle_for(pool, params.recipient)

        logger.info(
            "Position minted via manager",
            extra={
                "event": "position_manager.mint",
                "position_id": handle.id,
                "pool": pool.address[:10],
                "owner": params.recipient,
                "liquidity": liquidity,
            }
        )

        return MintResult(handle.id, liquidity, amount0, amount1)

    def burn(
        self,
        caller: str,
        position_id: int,
        liquidity: Optional[int] = None,
        deadline: Optional[float] = None,
    ) -> tuple[int, int]:
        """Burn ``liquidity`` (default: all) from a handle's position."""
        self._check_deadline(deadline)
        handle = self._authorized_handle(caller, position_id)
        pool = self.pool_manager.get_pool_by_address(handle.pool)

        if liquidity is None:
            liquidity = pool.get_position(handle.owner).liquidity

        return pool.burn(handle.owner, liquidity)

    def collect(
        self,
        caller: str,
        position_id: int,
        recipient: Optional[str] = None,
        deadline: Optional[float] = None,
    ) -> tuple[int, int]:
        """Collect everything owed to a handle's position."""
        self._check_deadline(deadline)
        handle = self._authorized_handle(caller, position_id)
        pool = self.pool_manager.get_pool_by_address(handle.pool)

        return pool.collect(handle.owner, recipient or handle.owner)

    def approve(self, caller: str, position_id: int, operator: Optional[str]) -> None:
        """Let ``operator`` burn and collect for the handle (None revokes)."""
        handle = self._get_handle(position_id)
        if caller != handle.owner:
            raise NotAuthorizedError(
                f"{caller} does not own position {position_id}",
                details={"position_id": position_id, "caller": caller},
            )
        handle.operator = operator

        logger.info(
            "Position operator updated",
            extra={"event": "position_manager.approve", "position_id": position_id, "operator": operator}
        )

    def get_position(self, position_id: int) -> PositionInfo:
        handle = self._get_handle(position_id)
        pool = self.pool_manager.get_pool_by_address(handle.pool)
        position = pool.get_position(handle.owner)
        return PositionInfo(
            id=handle.id,
            owner=handle.owner,
            operator=handle.operator,
            pool=pool.address,
            token0=pool.token0,
            token1=pool.token1,
            fee=pool.fee,
            tick_lower=pool.tick_lower,
            tick_upper=pool.tick_upper,
            liquidity=position.liquidity,
            fee_growth_inside0_last_x128=position.fee_growth_inside0_last_x128,
            fee_growth_inside1_last_x128=position.fee_growth_inside1_last_x128,
            tokens_owed0=position.tokens_owed0,
            tokens_owed1=position.tokens_owed1,
        )

    def positions_of(self, owner: str) -> list[PositionInfo]:
        return [
            self.get_position(handle.id)
            for handle in self.positions.values()
            if handle.owner == owner
        ]

    def _handle_for(self, pool: Pool, owner: str) -> PositionHandle:
        key = (pool.address, owner)
        position_id = self._handle_by_key.get(key)
        if position_id is not None:
            return self.positions[position_id]

        handle = PositionHandle(id=self.next_position_id, pool=pool.address, owner=owner)
        self.next_position_id += 1
        self.positions[handle.id] = handle
        self._handle_by_key[key] = handle.id
        return handle

    def _get_handle(self, position_id: int) -> PositionHandle:
        handle = self.positions.get(position_id)
        if handle is None:
            raise PositionNotFoundError(f"Position {position_id} not found", details={"position_id": position_id})
        return handle

    def _authorized_handle(self, caller: str, position_id: int) -> PositionHandle:
        handle = self._get_handle(position_id)
        if caller != handle.owner and caller != handle.operator:
            raise NotAuthorizedError(
                f"{caller} may not act on position {position_id}",
                details={"position_id": position_id, "caller": caller},
            )
        return handle
