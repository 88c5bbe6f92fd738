"""
Tests for parameter schemas.
"""

import pytest

from rangeswap.core.exceptions import InvalidParamsError
from rangeswap.core.schemas import (
    CreateAndInitializeParams,
    ExactInputParams,
    MintParams,
    QuoteParams,
    parse_params,
)
from rangeswap_tests.helpers import FEE, INITIAL_SQRT_PRICE, TICK_LOWER, TICK_UPPER, TOKEN_A, TOKEN_B


def create_payload(**overrides):
    payload = {
        "token0": TOKEN_A,
        "token1": TOKEN_B,
        "fee": FEE,
        "tick_lower": TICK_LOWER,
        "tick_upper": TICK_UPPER,
        "sqrt_price_x96": INITIAL_SQRT_PRICE,
    }
    payload.update(overrides)
    return payload


class TestParseParams:
    def test_mapping(self):
        params = parse_params(CreateAndInitializeParams, create_payload())
        assert params.sqrt_price_x96 == INITIAL_SQRT_PRICE

    def test_instance_passthrough(self):
        params = CreateAndInitializeParams(**create_payload())
        assert parse_params(CreateAndInitializeParams, params) is params

    def test_errors_in_details(self):
        with pytest.raises(InvalidParamsError, match="Invalid CreateAndInitializeParams") as excinfo:
            parse_params(CreateAndInitializeParams, create_payload(fee=-1))
        assert excinfo.value.details["errors"][0]["loc"] == ("fee",)


class TestCreateAndInitializeParams:
    def test_unsorted_tokens(self):
        with pytest.raises(InvalidParamsError):
            parse_params(CreateAndInitializeParams, create_payload(token0=TOKEN_B, token1=TOKEN_A))

    def test_same_token_different_case(self):
        with pytest.raises(InvalidParamsError):
            parse_params(CreateAndInitializeParams, create_payload(token1=TOKEN_A.lower()))

    def test_inverted_ticks(self):
        with pytest.raises(InvalidParamsError):
            parse_params(CreateAndInitializeParams, create_payload(tick_lower=TICK_UPPER, tick_upper=TICK_LOWER))

    @pytest.mark.parametrize("price", [0, 4295128738, 1461446703485210103287273052203988822378723970342])
    def test_price_outside_bounds(self, price):
        with pytest.raises(InvalidParamsError):
            parse_params(CreateAndInitializeParams, create_payload(sqrt_price_x96=price))


class TestMintParams:
    def test_one_sided_amount_allowed(self):
        params = parse_params(MintParams, {
            "token0": TOKEN_A, "token1": TOKEN_B, "index": 0,
            "amount0_desired": 5, "amount1_desired": 0, "recipient": "0xlp",
        })
        assert params.deadline is None

    def test_both_zero(self):
        with pytest.raises(InvalidParamsError):
            parse_params(MintParams, {
                "token0": TOKEN_A, "token1": TOKEN_B, "index": 0,
                "amount0_desired": 0, "amount1_desired": 0, "recipient": "0xlp",
            })


class TestTradeParams:
    def test_exact_input_defaults(self):
        params = parse_params(ExactInputParams, {
            "token_in": TOKEN_A, "token_out": TOKEN_B, "index_path": [0],
            "recipient": "0xtrader", "amount_in": 1,
        })
        assert params.amount_out_minimum == 0
        assert params.sqrt_price_limit_x96 is None

    def test_zero_amount(self):
        with pytest.raises(InvalidParamsError):
            parse_params(QuoteParams, {"token_in": TOKEN_A, "token_out": TOKEN_B, "index_path": [0], "amount": 0})

    def test_negative_index(self):
        with pytest.raises(InvalidParamsError):
            parse_params(QuoteParams, {"token_in": TOKEN_A, "token_out": TOKEN_B, "index_path": [-1], "amount": 1})
