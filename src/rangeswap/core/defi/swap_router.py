"""
Swap Router - exact-input and exact-output trades across the pools of a pair.

A route is a list of pool indices for one token pair. The router plans the
whole route against read-only simulations first, checks the caller's amount
limits and balance, and only then executes the legs in order. Every pool of
the route is distinct, so the plan matches execution exactly.
"""

from __future__ import annotations

import logging
from typing import Any, NamedTuple, Optional

from ..exceptions import (
    InsufficientBalanceError,
    InsufficientLiquidityError,
    InvalidParamsError,
    SlippageError,
)
from ..schemas import ExactInputParams, ExactOutputParams, QuoteParams, parse_params
from .factory import sort_tokens
from .periphery import Periphery
from .pool import Pool, SwapResult

logger = logging.getLogger(__name__)


class RouteLeg(NamedTuple):
    pool: Pool
    amount_specified: int
    sqrt_price_limit_x96: Optional[int]
    result: SwapResult


class RouteResult(NamedTuple):
    amount_in: int
    amount_out: int


class SwapRouter(Periphery):
    """Routes trades for one pair through a caller-chosen list of pools."""

    kind = "swap_router"

    # ==================== Swaps ====================

    def exact_input(self, caller: str, params: ExactInputParams | dict[str, Any]) -> RouteResult:
        """
        Sell exactly ``amount_in`` of ``token_in`` (or as much as the route
        can absorb) for ``token_out``.

        Raises:
            SlippageError: If the total output is below ``amount_out_minimum``
        """
        params = parse_params(ExactInputParams, params)
        self._check_deadline(params.deadline)

        legs = self._plan(
            params.token_in, params.token_out, params.index_path,
            params.amount_in, params.sqrt_price_limit_x96,
        )
        quote = self._totals(legs, params.token_in, params.token_out)
        if quote.amount_out < params.amount_out_minimum:
            raise SlippageError(
                f"Output {quote.amount_out} below minimum {params.amount_out_minimum}",
                details={"amount_out": quote.amount_out, "amount_out_minimum": params.amount_out_minimum},
            )

        result = self._execute(caller, params.recipient, params.token_in, params.token_out, legs, quote)

        logger.info(
            "Exact input swap routed",
            extra={
                "event": "router.exact_input",
                "token_in": params.token_in,
                "token_out": params.token_out,
                "amount_in": result.amount_in,
                "amount_out": result.amount_out,
                "legs": len(legs),
            }
        )
        return result

    def exact_output(self, caller: str, params: ExactOutputParams | dict[str, Any]) -> RouteResult:
        """
        Buy exactly ``amount_out`` of ``token_out`` (or as much as the route
        can supply) with ``token_in``.

        Raises:
            SlippageError: If the total input exceeds ``amount_in_maximum``
        """
        params = parse_params(ExactOutputParams, params)
        self._check_deadline(params.deadline)

        legs = self._plan(
            params.token_in, params.token_out, params.index_path,
            -params.amount_out, params.sqrt_price_limit_x96,
        )
        quote = self._totals(legs, params.token_in, params.token_out)
        if params.amount_in_maximum is not None and quote.amount_in > params.amount_in_maximum:
            raise SlippageError(
                f"Input {quote.amount_in} above maximum {params.amount_in_maximum}",
                details={"amount_in": quote.amount_in, "amount_in_maximum": params.amount_in_maximum},
            )

        result = self._execute(caller, params.recipient, params.token_in, params.token_out, legs, quote)

        logger.info(
            "Exact output swap routed",
            extra={
                "event": "router.exact_output",
                "token_in": params.token_in,
                "token_out": params.token_out,
                "amount_in": result.amount_in,
                "amount_out": result.amount_out,
                "legs": len(legs),
            }
        )
        return result

    # ==================== Quotes ====================

    def quote_exact_input(self, params: QuoteParams | dict[str, Any]) -> RouteResult:
        """Amounts an ``exact_input`` of ``params.amount`` would trade now."""
        params = parse_params(QuoteParams, params)
        legs = self._plan(
            params.token_in, params.token_out, params.index_path,
            params.amount, params.sqrt_price_limit_x96,
        )
        return self._totals(legs, params.token_in, params.token_out)

    def quote_exact_output(self, params: QuoteParams | dict[str, Any]) -> RouteResult:
        """Amounts an ``exact_output`` of ``params.amount`` would trade now."""
        params = parse_params(QuoteParams, params)
        legs = self._plan(
            params.token_in, params.token_out, params.index_path,
            -params.amount, params.sqrt_price_limit_x96,
        )
        return self._totals(legs, params.token_in, params.token_out)

    # ==================== Internal ====================

    def _plan(
        self,
        token_in: str,
        token_out: str,
        index_path: list[int],
        amount_specified: int,
        sqrt_price_limit_x96: Optional[int],
    ) -> list[RouteLeg]:
        """Simulate the route leg by leg until the amount is used up."""
        if len(set(index_path)) != len(index_path):
            raise InvalidParamsError("index_path must not repeat a pool", details={"index_path": index_path})

        token0, _ = sort_tokens(token_in, token_out)
        zero_for_one = token_in == token0
        exact_input = amount_specified > 0

        legs = []
        remaining = amount_specified
        for index in index_path:
            if remaining == 0:
                break
            pool = self.pool_manager.get_pool(token_in, token_out, index)
            tradable, limit = self._leg_limit(pool, zero_for_one, sqrt_price_limit_x96)
            if not tradable:
                logger.debug(
                    "Skipping pool with no room to trade",
                    extra={"event": "router.skip_pool", "pool": pool.address[:10], "index": index}
                )
                continue

            result = pool.simulate_swap(zero_for_one, remaining, limit)
            amount_in, amount_out = self._leg_amounts(result, zero_for_one)
            legs.append(RouteLeg(pool, remaining, limit, result))
            remaining = remaining - amount_in if exact_input else remaining + amount_out

        if not legs:
            raise InsufficientLiquidityError(
                f"No pool on the route can trade {token_in} for {token_out}",
                details={"index_path": index_path},
            )
        return legs

    def _execute(
        self,
        caller: str,
        recipient: str,
        token_in: str,
        token_out: str,
        legs: list[RouteLeg],
        quote: RouteResult,
    ) -> RouteResult:
        token0, _ = sort_tokens(token_in, token_out)
        zero_for_one = token_in == token0
        first = legs[0].pool
        pool_token_in = first.token0 if zero_for_one else first.token1

        balance = self.ledger.balance_of(pool_token_in, caller)
        if balance < quote.amount_in:
            raise InsufficientBalanceError(
                f"Insufficient {pool_token_in} balance for {caller}",
                details={"token": pool_token_in, "balance": balance, "required": quote.amount_in},
            )

        total_in = 0
        total_out = 0
        for leg in legs:
            amount0, amount1 = leg.pool.swap(
                caller=self.address,
                recipient=recipient,
                zero_for_one=zero_for_one,
                amount_specified=leg.amount_specified,
                sqrt_price_limit_x96=leg.sqrt_price_limit_x96,
                callback=self._pay,
                payer=caller,
            )
            if zero_for_one:
                total_in += amount0
                total_out -= amount1
            else:
                total_in += amount1
                total_out -= amount0

        return RouteResult(total_in, total_out)

    def _totals(self, legs: list[RouteLeg], token_in: str, token_out: str) -> RouteResult:
        token0, _ = sort_tokens(token_in, token_out)
        zero_for_one = token_in == token0
        total_in = 0
        total_out = 0
        for leg in legs:
            amount_in, amount_out = self._leg_amounts(leg.result, zero_for_one)
            total_in += amount_in
            total_out += amount_out
        return RouteResult(total_in, total_out)

    @staticmethod
    def _leg_amounts(result: SwapResult, zero_for_one: bool) -> tuple[int, int]:
        if zero_for_one:
            return result.amount0, -result.amount1
        return result.amount1, -result.amount0

    @staticmethod
    def _leg_limit(pool: Pool, zero_for_one: bool, limit: Optional[int]) -> tuple[bool, Optional[int]]:
        """
        Whether the pool can move in the trade direction, and the limit to
        pass it. A route-wide limit at or past a pool's bound becomes the
        bound itself (None).
        """
        if not pool.initialized or pool.liquidity == 0:
            return False, None

        price = pool.sqrt_price_x96
        if zero_for_one:
            bound = pool.sqrt_price_lower_x96
            if price <= bound or (limit is not None and limit >= price):
                return False, None
            return True, limit if limit is not None and limit > bound else None

        bound = pool.sqrt_price_upper_x96
        if price >= bound or (limit is not None and limit <= price):
            return False, None
        return True, limit if limit is not None and limit < bound else None
