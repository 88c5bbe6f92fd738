"""
Input schemas for the manager and router entry points.

Parameters arriving from outside the engine are validated here before any
pool is touched. ``parse_params`` re-raises pydantic failures as
``InvalidParamsError`` so callers only ever see engine exceptions.
"""

from __future__ import annotations

from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, Field, conint, constr, model_validator
from pydantic import ValidationError as PydanticValidationError

from .constants import MAX_SQRT_RATIO, MAX_TICK, MIN_SQRT_RATIO, MIN_TICK
from .exceptions import InvalidParamsError

ModelT = TypeVar("ModelT", bound=BaseModel)

Token = constr(min_length=1)
Tick = conint(ge=MIN_TICK, le=MAX_TICK)
Amount = conint(ge=0)


class CreateAndInitializeParams(BaseModel):
    token0: Token
    token1: Token
    fee: conint(gt=0)
    tick_lower: Tick
    tick_upper: Tick
    sqrt_price_x96: conint(ge=MIN_SQRT_RATIO, lt=MAX_SQRT_RATIO)

    @model_validator(mode="after")
    def _check_ordering(self) -> "CreateAndInitializeParams":
        if self.token0.lower() >= self.token1.lower():
            raise ValueError("token0 must sort strictly before token1")
        if self.tick_lower >= self.tick_upper:
            raise ValueError("tick_lower must be less than tick_upper")
        return self


class MintParams(BaseModel):
    token0: Token
    token1: Token
    index: conint(ge=0)
    amount0_desired: Amount
    amount1_desired: Amount
    recipient: Token
    deadline: Optional[float] = None

    @model_validator(mode="after")
    def _check_amounts(self) -> "MintParams":
        if self.amount0_desired == 0 and self.amount1_desired == 0:
            raise ValueError("At least one desired amount must be positive")
        return self


class ExactInputParams(BaseModel):
    token_in: Token
    token_out: Token
    index_path: list[conint(ge=0)] = Field(min_length=1)
    recipient: Token
    amount_in: conint(gt=0)
    amount_out_minimum: Amount = 0
    sqrt_price_limit_x96: Optional[conint(gt=0)] = None
    deadline: Optional[float] = None


class ExactOutputParams(BaseModel):
    token_in: Token
    token_out: Token
    index_path: list[conint(ge=0)] = Field(min_length=1)
    recipient: Token
    amount_out: conint(gt=0)
    amount_in_maximum: Optional[conint(gt=0)] = None
    sqrt_price_limit_x96: Optional[conint(gt=0)] = None
    deadline: Optional[float] = None


class QuoteParams(BaseModel):
    token_in: Token
    token_out: Token
    index_path: list[conint(ge=0)] = Field(min_length=1)
    amount: conint(gt=0)
    sqrt_price_limit_x96: Optional[conint(gt=0)] = None


def parse_params(model: Type[ModelT], payload: Any) -> ModelT:
    """
    Validate ``payload`` against ``model``.

    Accepts an instance of the model (returned as-is) or a mapping.

    Raises:
        InvalidParamsError: If validation fails
    """
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise InvalidParamsError(
            f"Invalid {model.__name__}",
            details={"errors": exc.errors(include_url=False)},
        ) from exc
