"""Tests for the simulation pipeline."""

import pytest

from txsim.analyzers.token_analyzer import TRANSFER_SELECTOR
from txsim.models.schemas import SimulateRequest, SimulationFailure, SimulationSuccess
from txsim.pipelines.simulate_tx import build_call_object, build_eth_transfer
from txsim.providers.rpc_client import RPCError

from helpers import RECIPIENT, SENDER, TOKEN, calldata, panic_payload, revert_payload


def make_request(**overrides) -> SimulateRequest:
    payload = {"from": SENDER, "to": RECIPIENT}
    payload.update(overrides)
    return SimulateRequest.model_validate(payload)


class TestSuccess:
    @pytest.mark.asyncio
    async def test_eth_transfer(self, simulator, fake_chain):
        fake_chain.call_result = "0x"

        result = await simulator.simulate(make_request(value="0xde0b6b3a7640000"))

        assert isinstance(result, SimulationSuccess)
        assert result.success is True
        assert result.gas_estimate == "21000"
        assert result.return_data == "0x"
        assert result.eth_transfer.value == "1000000000000000000"
        assert result.eth_transfer.formatted_value == "1.0"
        assert result.eth_transfer.from_address == SENDER
        assert result.token_transfers == []
        assert result.approval_changes == []

    @pytest.mark.asyncio
    async def test_zero_value_has_no_eth_transfer(self, simulator):
        result = await simulator.simulate(make_request())

        assert result.eth_transfer is None

    @pytest.mark.asyncio
    async def test_gas_estimate_failure_is_unknown(self, simulator, fake_chain):
        fake_chain.gas_error = RPCError(code=-32000, message="gas required exceeds allowance")

        result = await simulator.simulate(make_request())

        assert isinstance(result, SimulationSuccess)
        assert result.gas_estimate == "unknown"

    @pytest.mark.asyncio
    async def test_token_transfer(self, simulator, fake_chain):
        fake_chain.call_result = "0x" + "00" * 31 + "01"
        data = calldata(TRANSFER_SELECTOR, ["address", "uint256"], [RECIPIENT, 3_000_000])

        result = await simulator.simulate(make_request(to=TOKEN, data=data))

        assert result.return_data == fake_chain.call_result
        assert len(result.token_transfers) == 1
        assert result.token_transfers[0].formatted_amount == "3.0"

    @pytest.mark.asyncio
    async def test_token_analysis_error_does_not_fail_call(self, simulator, analyzer, monkeypatch):
        async def boom(*args, **kwargs):
            raise RuntimeError("analyzer exploded")

        monkeypatch.setattr(analyzer, "analyze_transaction", boom)

        result = await simulator.simulate(make_request(data="0xa9059cbb"))

        assert isinstance(result, SimulationSuccess)
        assert result.token_transfers == []

    @pytest.mark.asyncio
    async def test_call_object(self, simulator, fake_chain):
        await simulator.simulate(
            make_request(value="1000", gasLimit="100000", blockTag=19_000_000, data="0xabcd")
        )

        tx, block = fake_chain.calls[0]
        assert tx == {
            "from": SENDER,
            "to": RECIPIENT,
            "value": "0x3e8",
            "data": "0xabcd",
            "gas": hex(100000),
        }
        assert block == 19_000_000


class TestFailure:
    @pytest.mark.asyncio
    async def test_revert_with_reason(self, simulator, fake_chain):
        fake_chain.call_error = RPCError(
            code=3,
            message="execution reverted: Pausable: paused",
            data=revert_payload("Pausable: paused"),
        )
        fake_chain.gas_error = RPCError(code=3, message="execution reverted")

        result = await simulator.simulate(make_request())

        assert isinstance(result, SimulationFailure)
        assert result.success is False
        assert result.error.type == "revert"
        assert result.error.message == "Contract Paused"
        # Decoded-reason wording, not the provider-text wording
        assert result.error.user_message == (
            "This contract is temporarily paused and not accepting transactions."
        )
        assert result.gas_estimate is None

    @pytest.mark.asyncio
    async def test_gas_retried_on_failure(self, simulator, fake_chain):
        fake_chain.call_error = RPCError(code=3, message="execution reverted", data=panic_payload(0x12))

        result = await simulator.simulate(make_request())

        assert result.error.type == "panic"
        assert result.error.panic_code == 0x12
        assert result.gas_estimate == "21000"
        assert fake_chain.gas_calls == 2

    @pytest.mark.asyncio
    async def test_info_error_data_shape(self, simulator, fake_chain):
        fake_chain.call_error = RPCError(
            code=3, message="execution reverted", info={"error": {"data": "0xe450d38c"}}
        )

        result = await simulator.simulate(make_request())

        assert result.error.type == "custom"
        assert result.error.message == "Insufficient Token Balance"

    @pytest.mark.asyncio
    async def test_falls_back_to_message_heuristics(self, simulator, fake_chain):
        fake_chain.call_error = RPCError(code=-32000, message="nonce too low")

        result = await simulator.simulate(make_request())

        assert result.error.message == "Nonce Error"

    @pytest.mark.asyncio
    async def test_empty_revert_data_uses_message(self, simulator, fake_chain):
        fake_chain.call_error = RPCError(
            code=3, message="execution reverted: Pausable: paused", data="0x"
        )

        result = await simulator.simulate(make_request())

        assert result.error.type == "revert"
        assert result.error.user_message == "This contract is temporarily paused."

    @pytest.mark.asyncio
    async def test_transport_error(self, simulator, fake_chain):
        fake_chain.call_error = RPCError(code=-32001, message="Request timeout")

        result = await simulator.simulate(make_request())

        assert result.error.type == "unknown"
        assert result.error.message == "Network Error"

    @pytest.mark.asyncio
    async def test_plain_exception_message(self, simulator, fake_chain):
        fake_chain.call_error = ConnectionError("could not connect to node")

        result = await simulator.simulate(make_request())

        assert result.error.message == "Network Error"

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_unknown(self, simulator, fake_chain):
        # Non-string return data cannot be put into the result model
        fake_chain.call_result = 12345

        result = await simulator.simulate(make_request())

        assert isinstance(result, SimulationFailure)
        assert result.error.type == "unknown"
        assert result.error.message == "Transaction Failed"


class TestBuildHelpers:
    @pytest.mark.parametrize("value", [None, "", "0x", "0x0", "0", "0x00", "not-a-number"])
    def test_no_eth_transfer(self, value):
        assert build_eth_transfer(SENDER, RECIPIENT, value) is None

    def test_eth_transfer_from_hex_and_decimal(self):
        assert build_eth_transfer(SENDER, RECIPIENT, "0x10").value == "16"
        assert build_eth_transfer(SENDER, RECIPIENT, "500000000000000000").formatted_value == "0.5"

    def test_call_object_without_gas_limit(self):
        tx = build_call_object(make_request())

        assert "gas" not in tx
        assert tx["value"] == "0x0"
        assert tx["data"] == "0x"

    def test_call_object_strips_leading_zeros(self):
        tx = build_call_object(make_request(value="0x00ff", gasLimit="0x5208"))

        assert tx["value"] == "0xff"
        assert tx["gas"] == "0x5208"
