"""Tests for request validation and result serialization."""

import pytest
from pydantic import ValidationError

from txsim.models.schemas import (
    DecodedError,
    SimulateRequest,
    SimulateResponse,
    SimulationFailure,
    SimulationSuccess,
)

from helpers import RECIPIENT, SENDER


def validate(**fields) -> SimulateRequest:
    payload = {"from": SENDER, "to": RECIPIENT}
    payload.update(fields)
    return SimulateRequest.model_validate(payload)


class TestSimulateRequest:
    def test_defaults(self):
        request = validate()

        assert request.from_address == SENDER
        assert request.to_address == RECIPIENT
        assert request.value == "0x0"
        assert request.data == "0x"
        assert request.gas_limit is None
        assert request.block_tag == "latest"

    def test_nulls_use_defaults(self):
        request = validate(value=None, data=None, blockTag=None)

        assert request.value == "0x0"
        assert request.data == "0x"
        assert request.block_tag == "latest"

    @pytest.mark.parametrize(
        "value,expected",
        [("1000", "0x3e8"), ("0", "0x0"), ("0x0", "0x0"), ("0xde0b6b3a7640000", "0xde0b6b3a7640000")],
    )
    def test_value_normalized_to_hex(self, value, expected):
        assert validate(value=value).value == expected

    @pytest.mark.parametrize("block_tag", ["latest", "pending", 0, 19_000_000])
    def test_valid_block_tags(self, block_tag):
        assert validate(blockTag=block_tag).block_tag == block_tag

    @pytest.mark.parametrize(
        "field,value",
        [
            ("from", "0x123"),
            ("from", "1111111111111111111111111111111111111111"),
            ("to", "0xZZ22222222222222222222222222222222222222"),
            ("value", "1.5"),
            ("value", "0xg1"),
            ("value", 100),
            ("data", "0x123"),
            ("data", "abcd"),
            ("gasLimit", "lots"),
            ("blockTag", "earliest"),
            ("blockTag", 1.5),
        ],
    )
    def test_invalid_fields(self, field, value):
        with pytest.raises(ValidationError):
            validate(**{field: value})

    def test_missing_address(self):
        with pytest.raises(ValidationError):
            SimulateRequest.model_validate({"from": SENDER})

    def test_mixed_case_addresses_accepted(self):
        mixed = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
        assert validate(to=mixed).to_address == mixed


class TestResultSerialization:
    def test_success_wire_shape(self):
        result = SimulationSuccess(gas_estimate="21000", return_data="0x")

        data = SimulateResponse(result=result).model_dump(by_alias=True)

        assert data["result"] == {
            "success": True,
            "gasEstimate": "21000",
            "returnData": "0x",
            "ethTransfer": None,
            "tokenTransfers": [],
            "approvalChanges": [],
        }

    def test_failure_wire_shape(self):
        error = DecodedError(
            type="custom",
            message="Contract Error",
            user_message="The contract returned an error (0xdeadbeef).",
            suggestion="Check the contract documentation.",
            selector="0xdeadbeef",
            raw="0xdeadbeef",
        )

        data = SimulationFailure(error=error).model_dump(by_alias=True)

        assert data["success"] is False
        assert data["gasEstimate"] is None
        assert data["error"]["userMessage"] == "The contract returned an error (0xdeadbeef)."
        assert data["error"]["selector"] == "0xdeadbeef"

    def test_success_flag_is_fixed(self):
        with pytest.raises(ValidationError):
            SimulationSuccess(success=False, gas_estimate="1", return_data="0x")
