"""
Single-Range Concentrated Liquidity Pool.

Each pool holds liquidity for exactly one price range ``[tick_lower,
tick_upper]`` fixed at creation. Providers mint liquidity into that range,
traders swap against it, and swap fees accrue to providers through a global
fee growth accumulator.

Security features:
- Reentrancy protection (per-pool lock flag)
- Checks-effects-interactions ordering for every external call
- Snapshot/restore so a failed operation leaves no trace
- Checked fixed-point arithmetic (overflow raises, never wraps)

Value never sits on the pool object itself: balances live in the ledger the
pool was created with, and the pool verifies its ledger balance after asking
a caller to pay.
"""

from __future__ import annotations

import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterator, NamedTuple, Optional

from ..constants import Q128
from ..exceptions import (
    InsufficientLiquidityError,
    InsufficientPaymentError,
    InvalidAmountError,
    InvalidPriceLimitError,
    PoolAlreadyInitializedError,
    PoolNotInitializedError,
    PriceOutOfRangeError,
    ReentrancyError,
    SlippageError,
    get_error_context,
)
from ..ledger import BalanceLedger
from .events import Burn, Collect, Mint, PaymentCallback, PaymentRequest, Swap, event_to_dict
from .safe_math import add_delta, checked_add_uint256, mul_div, to_int256, to_uint160
from .sqrt_price_math import get_amount0_delta_signed, get_amount1_delta_signed
from .swap_math import compute_swap_step
from .tick_math import get_sqrt_ratio_at_tick, get_tick_at_sqrt_ratio

if TYPE_CHECKING:
    from ..metrics import DEXMetrics

logger = logging.getLogger(__name__)


@dataclass
class Position:
    """Liquidity position of one owner in one pool."""
    liquidity: int = 0
    fee_growth_inside0_last_x128: int = 0
    fee_growth_inside1_last_x128: int = 0
    tokens_owed0: int = 0
    tokens_owed1: int = 0

    def as_tuple(self) -> tuple[int, int, int, int, int]:
        return (
            self.liquidity,
            self.fee_growth_inside0_last_x128,
            self.fee_growth_inside1_last_x128,
            self.tokens_owed0,
            self.tokens_owed1,
        )


class SwapResult(NamedTuple):
    """Outcome of a swap computation, signed from the pool's point of view."""
    amount0: int
    amount1: int
    sqrt_price_x96: int
    tick: int
    fee_amount: int


@dataclass
class Pool:
    """
    Liquidity pool over a single fixed tick range.

    Pools are allocated by the factory and start uninitialized
    (``sqrt_price_x96 == 0``) until ``initialize`` sets the opening price.
    """

    address: str
    factory: str
    token0: str
    token1: str
    tick_lower: int
    tick_upper: int
    fee: int
    ledger: BalanceLedger
    metrics: Optional["DEXMetrics"] = None

    # Current state
    sqrt_price_x96: int = 0  # Q64.96, 0 until initialized
    tick: int = 0
    liquidity: int = 0

    # Fee tracking
    fee_growth_global0_x128: int = 0  # Q128.128
    fee_growth_global1_x128: int = 0

    positions: dict[str, Position] = field(default_factory=dict)
    events: list[Any] = field(default_factory=list)

    # Reentrancy guard
    _locked: bool = False

    @property
    def initialized(self) -> bool:
        return self.sqrt_price_x96 != 0

    @property
    def sqrt_price_lower_x96(self) -> int:
        return get_sqrt_ratio_at_tick(self.tick_lower)

    @property
    def sqrt_price_upper_x96(self) -> int:
        return get_sqrt_ratio_at_tick(self.tick_upper)

    # ==================== Lifecycle ====================

    def initialize(self, sqrt_price_x96: int) -> None:
        """
        Set the opening price.

        Args:
            sqrt_price_x96: Opening sqrt price (Q64.96); its tick must satisfy
                ``tick_lower <= tick < tick_upper``

        Raises:
            PoolAlreadyInitializedError: If a price was already set
            PriceOutOfRangeError: If the price lies outside the range
        """
        if self.initialized:
            raise PoolAlreadyInitializedError(
                f"Pool {self.address} already initialized",
                details={"sqrt_price_x96": self.sqrt_price_x96},
            )

        tick = get_tick_at_sqrt_ratio(sqrt_price_x96)
        if not self.tick_lower <= tick < self.tick_upper:
            raise PriceOutOfRangeError(
                f"Initial price tick {tick} outside [{self.tick_lower}, {self.tick_upper})",
                details={"tick": tick, "tick_lower": self.tick_lower, "tick_upper": self.tick_upper},
            )

        self.sqrt_price_x96 = sqrt_price_x96
        self.tick = tick
        self._record_price()

        logger.info(
            "Pool initialized",
            extra={
                "event": "pool.initialize",
                "pool": self.address[:10],
                "sqrt_price_x96": sqrt_price_x96,
                "tick": tick,
            }
        )

    # ==================== Liquidity ====================

    def mint(
        self,
        caller: str,
        recipient: str,
        amount: int,
        callback: PaymentCallback,
        data: Any = None,
        payer: Optional[str] = None,
    ) -> tuple[int, int]:
        """
        Add ``amount`` of liquidity to ``recipient``'s position.

        The owed token amounts are requested from ``callback``; the pool
        checks its ledger balances afterwards and rolls everything back if
        the payment fell short.

        Args:
            caller: Account minting the liquidity (recorded as sender)
            recipient: Position owner
            amount: Liquidity to add
            callback: Payment callback receiving a ``PaymentRequest``
            data: Opaque value passed through to the callback
            payer: Account the tokens come from (default: caller); refunded
                whatever reached the pool if the mint fails

        Returns:
            (amount0, amount1) paid into the pool
        """
        if amount <= 0:
            raise InvalidAmountError("Mint amount must be positive", details={"amount": amount})
        self._require_initialized()

        payer = payer or caller

        with self._transaction("mint", payer):
            position = self._update_position(recipient, amount)

            amount0 = get_amount0_delta_signed(self.sqrt_price_x96, self.sqrt_price_upper_x96, amount)
            amount1 = get_amount1_delta_signed(self.sqrt_price_lower_x96, self.sqrt_price_x96, amount)

            self.liquidity = add_delta(self.liquidity, amount)

            balance0_before = self.balance0() if amount0 > 0 else 0
            balance1_before = self.balance1() if amount1 > 0 else 0

            callback(PaymentRequest(
                pool=self.address,
                payer=payer,
                token0=self.token0,
                token1=self.token1,
                amount0=amount0,
                amount1=amount1,
                data=data,
            ))

            if amount0 > 0:
                self._require_paid(self.token0, balance0_before, amount0)
            if amount1 > 0:
                self._require_paid(self.token1, balance1_before, amount1)

            self._emit(Mint(sender=caller, owner=recipient, amount=amount, amount0=amount0, amount1=amount1))

        if self.metrics:
            self.metrics.liquidity_added.labels(pool=self.address).inc(amount)
            self._record_price()

        logger.info(
            "Liquidity minted",
            extra={
                "event": "pool.mint",
                "pool": self.address[:10],
                "owner": recipient,
                "liquidity": amount,
                "position_liquidity": position.liquidity,
                "amount0": amount0,
                "amount1": amount1,
            }
        )

        return amount0, amount1

    def burn(self, caller: str, amount: int) -> tuple[int, int]:
        """
        Remove liquidity from the caller's position.

        Withdrawn principal is credited to the position's owed balances and
        paid out by ``collect``.

        Returns:
            (amount0, amount1) principal moved to owed
        """
        if amount <= 0:
            raise InvalidAmountError("Burn amount must be positive", details={"amount": amount})

        position = self.positions.get(caller)
        available = position.liquidity if position else 0
        if amount > available:
            raise InsufficientLiquidityError(
                f"Cannot burn {amount}, position holds {available}",
                details={"owner": caller, "amount": amount, "liquidity": available},
            )

        with self._transaction("burn"):
            position = self._update_position(caller, -amount)

            amount0 = -get_amount0_delta_signed(self.sqrt_price_x96, self.sqrt_price_upper_x96, -amount)
            amount1 = -get_amount1_delta_signed(self.sqrt_price_lower_x96, self.sqrt_price_x96, -amount)

            self.liquidity = add_delta(self.liquidity, -amount)

            if amount0 > 0 or amount1 > 0:
                position.tokens_owed0 += amount0
                position.tokens_owed1 += amount1

            self._emit(Burn(owner=caller, amount=amount, amount0=amount0, amount1=amount1))

        if self.metrics:
            self.metrics.liquidity_removed.labels(pool=self.address).inc(amount)
            self._record_price()

        logger.info(
            "Liquidity burned",
            extra={
                "event": "pool.burn",
                "pool": self.address[:10],
                "owner": caller,
                "liquidity": amount,
                "amount0": amount0,
                "amount1": amount1,
            }
        )

        return amount0, amount1

    def collect(
        self,
        caller: str,
        recipient: Optional[str] = None,
        amount0_requested: Optional[int] = None,
        amount1_requested: Optional[int] = None,
    ) -> tuple[int, int]:
        """
        Pay out owed principal and fees of the caller's position.

        Args:
            caller: Position owner
            recipient: Receiver of the tokens (default: caller)
            amount0_requested: Cap on token0 paid (default: all owed)
            amount1_requested: Cap on token1 paid (default: all owed)

        Returns:
            (amount0, amount1) actually transferred
        """
        recipient = recipient or caller
        for requested in (amount0_requested, amount1_requested):
            if requested is not None and requested < 0:
                raise InvalidAmountError("Requested amounts must be non-negative")

        with self._transaction("collect"):
            position = self.positions.get(caller) or Position()

            amount0 = position.tokens_owed0
            if amount0_requested is not None:
                amount0 = min(amount0_requested, amount0)
            amount1 = position.tokens_owed1
            if amount1_requested is not None:
                amount1 = min(amount1_requested, amount1)

            if amount0 > 0:
                position.tokens_owed0 -= amount0
                self.ledger.transfer(self.token0, self.address, recipient, amount0)
            if amount1 > 0:
                position.tokens_owed1 -= amount1
                self.ledger.transfer(self.token1, self.address, recipient, amount1)

            self._emit(Collect(owner=caller, recipient=recipient, amount0=amount0, amount1=amount1))

        if self.metrics:
            self.metrics.tokens_collected.labels(pool=self.address, token=self.token0).inc(amount0)
            self.metrics.tokens_collected.labels(pool=self.address, token=self.token1).inc(amount1)

        logger.info(
            "Tokens collected",
            extra={
                "event": "pool.collect",
                "pool": self.address[:10],
                "owner": caller,
                "recipient": recipient,
                "amount0": amount0,
                "amount1": amount1,
            }
        )

        return amount0, amount1

    # ==================== Swaps ====================

    def swap(
        self,
        caller: str,
        recipient: str,
        zero_for_one: bool,
        amount_specified: int,
        sqrt_price_limit_x96: Optional[int] = None,
        callback: Optional[PaymentCallback] = None,
        data: Any = None,
        payer: Optional[str] = None,
    ) -> tuple[int, int]:
        """
        Swap against the pool's liquidity.

        Args:
            caller: Account initiating the swap (recorded as sender)
            recipient: Receiver of the output
            zero_for_one: True to sell token0 for token1
            amount_specified: Exact input if positive, exact output if negative
            sqrt_price_limit_x96: Price the swap may not move past
                (default: the range bound in the trade direction)
            callback: Payment callback for the input amount
            data: Opaque value passed through to the callback
            payer: Account the input comes from (default: caller); refunded
                whatever reached the pool if the swap fails

        Returns:
            (amount0, amount1) signed amounts; positive entered the pool
        """
        try:
            return self._swap(
                caller, recipient, zero_for_one, amount_specified,
                sqrt_price_limit_x96, callback, data, payer or caller,
            )
        except Exception:
            self._count_swap(zero_for_one, "failed")
            raise

    def _swap(
        self,
        caller: str,
        recipient: str,
        zero_for_one: bool,
        amount_specified: int,
        sqrt_price_limit_x96: Optional[int],
        callback: Optional[PaymentCallback],
        data: Any,
        payer: str,
    ) -> tuple[int, int]:
        if callback is None:
            raise InvalidAmountError("Swap requires a payment callback")

        result = self.simulate_swap(zero_for_one, amount_specified, sqrt_price_limit_x96)

        if sqrt_price_limit_x96 is not None and (
            (zero_for_one and result.sqrt_price_x96 < sqrt_price_limit_x96)
            or (not zero_for_one and result.sqrt_price_x96 > sqrt_price_limit_x96)
        ):
            raise SlippageError(
                "Swap would move price past the limit",
                details={"sqrt_price_x96": result.sqrt_price_x96, "limit": sqrt_price_limit_x96},
            )

        amount0, amount1 = result.amount0, result.amount1
        if zero_for_one:
            token_in, amount_in, token_out, amount_out = self.token0, amount0, self.token1, -amount1
        else:
            token_in, amount_in, token_out, amount_out = self.token1, amount1, self.token0, -amount0

        with self._transaction("swap", payer):
            self.sqrt_price_x96 = result.sqrt_price_x96
            self.tick = result.tick

            if result.fee_amount > 0:
                fee_growth = mul_div(result.fee_amount, Q128, self.liquidity)
                if zero_for_one:
                    self.fee_growth_global0_x128 = checked_add_uint256(self.fee_growth_global0_x128, fee_growth)
                else:
                    self.fee_growth_global1_x128 = checked_add_uint256(self.fee_growth_global1_x128, fee_growth)

            balance_before = self.ledger.balance_of(token_in, self.address)
            callback(PaymentRequest(
                pool=self.address,
                payer=payer,
                token0=self.token0,
                token1=self.token1,
                amount0=amount0 if zero_for_one else 0,
                amount1=0 if zero_for_one else amount1,
                data=data,
            ))
            self._require_paid(token_in, balance_before, amount_in)

            if amount_out > 0:
                self.ledger.transfer(token_out, self.address, recipient, amount_out)

            self._emit(Swap(
                sender=caller,
                recipient=recipient,
                amount0=amount0,
                amount1=amount1,
                sqrt_price_x96=self.sqrt_price_x96,
                liquidity=self.liquidity,
                tick=self.tick,
            ))

        self._count_swap(zero_for_one, "success")
        if self.metrics:
            self.metrics.swap_volume.labels(pool=self.address, token=token_in).inc(amount_in)
            self.metrics.swap_fees_collected.labels(pool=self.address, token=token_in).inc(result.fee_amount)
            self._record_price()

        logger.info(
            "Swap executed",
            extra={
                "event": "pool.swap",
                "pool": self.address[:10],
                "sender": caller,
                "recipient": recipient,
                "zero_for_one": zero_for_one,
                "amount0": amount0,
                "amount1": amount1,
                "fee": result.fee_amount,
                "sqrt_price_x96": self.sqrt_price_x96,
                "tick": self.tick,
            }
        )

        return amount0, amount1

    def simulate_swap(
        self,
        zero_for_one: bool,
        amount_specified: int,
        sqrt_price_limit_x96: Optional[int] = None,
    ) -> SwapResult:
        """
        Compute a swap's outcome without touching pool state.

        Performs every check ``swap`` performs before its effects, so a
        quote that succeeds here executes identically if nothing changes in
        between.
        """
        if amount_specified == 0:
            raise InvalidAmountError("Amount specified must be non-zero")
        self._require_initialized()
        if self.liquidity == 0:
            raise InsufficientLiquidityError(f"Pool {self.address} has no liquidity")

        bound = self.sqrt_price_lower_x96 if zero_for_one else self.sqrt_price_upper_x96
        if sqrt_price_limit_x96 is None:
            if self.sqrt_price_x96 == bound:
                raise InsufficientLiquidityError(
                    "Price already at the range bound in the trade direction",
                    details={"sqrt_price_x96": self.sqrt_price_x96},
                )
            target = bound
        else:
            self._validate_price_limit(zero_for_one, sqrt_price_limit_x96, bound)
            target = sqrt_price_limit_x96

        exact_input = amount_specified > 0
        step = compute_swap_step(self.sqrt_price_x96, target, self.liquidity, amount_specified, self.fee)

        if exact_input:
            amount_remaining = amount_specified - (step.amount_in + step.fee_amount)
            amount_calculated = -step.amount_out
        else:
            amount_remaining = amount_specified + step.amount_out
            amount_calculated = step.amount_in + step.fee_amount

        if zero_for_one == exact_input:
            amount0, amount1 = amount_specified - amount_remaining, amount_calculated
        else:
            amount0, amount1 = amount_calculated, amount_specified - amount_remaining

        sqrt_price_next = to_uint160(step.sqrt_price_next_x96)
        return SwapResult(
            amount0=to_int256(amount0),
            amount1=to_int256(amount1),
            sqrt_price_x96=sqrt_price_next,
            tick=get_tick_at_sqrt_ratio(sqrt_price_next),
            fee_amount=step.fee_amount,
        )

    # ==================== Views ====================

    def get_position(self, owner: str) -> Position:
        """Position of ``owner`` (an empty one if none exists)."""
        return self.positions.get(owner) or Position()

    def balance0(self) -> int:
        return self.ledger.balance_of(self.token0, self.address)

    def balance1(self) -> int:
        return self.ledger.balance_of(self.token1, self.address)

    def state(self) -> dict:
        """Snapshot of pool state for display and serialization."""
        return {
            "address": self.address,
            "factory": self.factory,
            "token0": self.token0,
            "token1": self.token1,
            "tick_lower": self.tick_lower,
            "tick_upper": self.tick_upper,
            "fee": self.fee,
            "initialized": self.initialized,
            "sqrt_price_x96": self.sqrt_price_x96,
            "tick": self.tick,
            "liquidity": self.liquidity,
            "fee_growth_global0_x128": self.fee_growth_global0_x128,
            "fee_growth_global1_x128": self.fee_growth_global1_x128,
            "position_count": len(self.positions),
        }

    # ==================== Internal ====================

    def _update_position(self, owner: str, liquidity_delta: int) -> Position:
        """Accrue fees earned since the last touch, then apply the delta."""
        position = self.positions.setdefault(owner, Position())

        if position.liquidity > 0:
            position.tokens_owed0 += mul_div(
                self.fee_growth_global0_x128 - position.fee_growth_inside0_last_x128,
                position.liquidity,
                Q128,
            )
            position.tokens_owed1 += mul_div(
                self.fee_growth_global1_x128 - position.fee_growth_inside1_last_x128,
                position.liquidity,
                Q128,
            )
        position.fee_growth_inside0_last_x128 = self.fee_growth_global0_x128
        position.fee_growth_inside1_last_x128 = self.fee_growth_global1_x128

        position.liquidity = add_delta(position.liquidity, liquidity_delta)
        return position

    def _validate_price_limit(self, zero_for_one: bool, limit: int, bound: int) -> None:
        if zero_for_one:
            valid = bound < limit < self.sqrt_price_x96
        else:
            valid = self.sqrt_price_x96 < limit < bound
        if not valid:
            raise InvalidPriceLimitError(
                "Price limit must lie between the current price and the range bound",
                details={
                    "limit": limit,
                    "sqrt_price_x96": self.sqrt_price_x96,
                    "bound": bound,
                    "zero_for_one": zero_for_one,
                },
            )

    def _require_paid(self, token: str, balance_before: int, required: int) -> None:
        received = self.ledger.balance_of(token, self.address) - balance_before
        if received < required:
            raise InsufficientPaymentError(
                f"Pool received {received} of {required} {token}",
                token=token,
                required=required,
                received=received,
            )

    def _require_initialized(self) -> None:
        if not self.initialized:
            raise PoolNotInitializedError(f"Pool {self.address} is not initialized")

    def _require_not_locked(self) -> None:
        if self._locked:
            raise ReentrancyError(f"Pool {self.address} is locked")

    def _emit(self, event: Any) -> None:
        self.events.append(event)
        logger.debug("Pool event", extra={"event": "pool.record", "pool": self.address[:10], **event_to_dict(event)})

    def _snapshot(self) -> dict:
        return {
            "sqrt_price_x96": self.sqrt_price_x96,
            "tick": self.tick,
            "liquidity": self.liquidity,
            "fee_growth_global0_x128": self.fee_growth_global0_x128,
            "fee_growth_global1_x128": self.fee_growth_global1_x128,
            "positions": copy.deepcopy(self.positions),
            "event_count": len(self.events),
        }

    def _restore(self, snapshot: dict) -> None:
        self.sqrt_price_x96 = snapshot["sqrt_price_x96"]
        self.tick = snapshot["tick"]
        self.liquidity = snapshot["liquidity"]
        self.fee_growth_global0_x128 = snapshot["fee_growth_global0_x128"]
        self.fee_growth_global1_x128 = snapshot["fee_growth_global1_x128"]
        self.positions = snapshot["positions"]
        del self.events[snapshot["event_count"]:]

    @contextmanager
    def _transaction(self, operation: str, payer: Optional[str] = None) -> Iterator[None]:
        """
        Hold the pool lock; undo every state change if the body raises.

        With a ``payer``, tokens that reached the pool during a failed
        operation are sent back to it.
        """
        self._require_not_locked()
        snapshot = self._snapshot()
        balances = {token: self.ledger.balance_of(token, self.address) for token in (self.token0, self.token1)}
        self._locked = True
        try:
            yield
        except Exception as exc:
            self._restore(snapshot)
            if payer is not None:
                self._refund(payer, balances)
            if self.metrics:
                self.metrics.operation_failures.labels(
                    pool=self.address, operation=operation, error_type=type(exc).__name__
                ).inc()
            logger.warning(
                "Pool %s rolled back",
                operation,
                extra={"event": f"pool.{operation}_failed", "pool": self.address[:10], **get_error_context(exc)},
            )
            raise
        finally:
            self._locked = False

    def _refund(self, payer: str, balances: dict[str, int]) -> None:
        for token, before in balances.items():
            excess = self.ledger.balance_of(token, self.address) - before
            if excess > 0:
                self.ledger.transfer(token, self.address, payer, excess)
                logger.info(
                    "Payment refunded",
                    extra={"event": "pool.refund", "pool": self.address[:10], "payer": payer, "token": token, "amount": excess},
                )

    def _count_swap(self, zero_for_one: bool, status: str) -> None:
        if self.metrics:
            direction = "zero_for_one" if zero_for_one else "one_for_zero"
            self.metrics.swaps_total.labels(pool=self.address, direction=direction, status=status).inc()

    def _record_price(self) -> None:
        if self.metrics:
            self.metrics.pool_liquidity.labels(pool=self.address).set(self.liquidity)
            self.metrics.pool_sqrt_price.labels(pool=self.address).set(self.sqrt_price_x96)
