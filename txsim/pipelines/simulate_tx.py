"""Transaction simulation pipeline."""
import asyncio
import logging
from typing import Any, Optional

from ..analyzers.token_analyzer import TokenAnalyzer
from ..decoders.error_decoder import decode_error, extract_error_data
from ..decoders.message_heuristics import parse_provider_error
from ..decoders.units import format_ether, parse_quantity
from ..models.schemas import (
    DecodedError,
    EthTransfer,
    SimulateRequest,
    SimulationFailure,
    SimulationResult,
    SimulationSuccess,
)

logger = logging.getLogger(__name__)


class TransactionSimulator:
    """Runs a read-only call, gas estimate and token analysis for a request."""

    def __init__(self, client: Any, token_analyzer: TokenAnalyzer) -> None:
        self.client = client
        self.token_analyzer = token_analyzer

    async def simulate(self, request: SimulateRequest) -> SimulationResult:
        """Simulate a transaction and return comprehensive analysis."""
        try:
            tx = build_call_object(request)

            call_result, gas_estimate, token_analysis = await asyncio.gather(
                self.client.eth_call(tx, request.block_tag),
                self._estimate_gas(tx, default="unknown"),
                self.token_analyzer.analyze_transaction(
                    request.from_address,
                    request.to_address,
                    request.data,
                    request.value,
                ),
                return_exceptions=True,
            )

            if isinstance(call_result, Exception):
                return await self._build_failure(call_result, tx)

            if isinstance(token_analysis, Exception):
                logger.warning(f"Token analysis failed: {token_analysis}")
                token_analysis = ([], [])

            transfers, approvals = token_analysis

            return SimulationSuccess(
                gas_estimate=gas_estimate,
                return_data=call_result or "0x",
                eth_transfer=build_eth_transfer(
                    request.from_address, request.to_address, request.value
                ),
                token_transfers=transfers,
                approval_changes=approvals,
            )

        except Exception as e:
            logger.error(f"Unexpected simulation error: {e}", exc_info=True)
            return SimulationFailure(
                error=DecodedError(
                    type="unknown",
                    message="Transaction Failed",
                    user_message="The transaction could not be completed.",
                    suggestion="Please verify all parameters are correct and try again.",
                    raw="0x",
                ),
                gas_estimate=None,
            )

    async def _estimate_gas(self, tx: dict, default: Optional[str]) -> Optional[str]:
        """Best-effort gas estimate as a decimal string."""
        try:
            gas = await self.client.eth_estimate_gas(tx)
            return str(gas)
        except Exception as e:
            logger.debug(f"Gas estimation failed: {e}")
            return default

    async def _build_failure(self, error: Exception, tx: dict) -> SimulationFailure:
        """Decode a failed call into a user-facing error."""
        error_data = extract_error_data(error)
        decoded = decode_error(error_data)

        # Retry gas estimation on its own
        gas_estimate = await self._estimate_gas(tx, default=None)

        if decoded.type == "unknown":
            message = getattr(error, "message", None) or str(error)
            decoded = parse_provider_error(message, decoded)

        logger.info(f"Simulation failed: {decoded.type} - {decoded.message}")

        return SimulationFailure(error=decoded, gas_estimate=gas_estimate)


def build_call_object(request: SimulateRequest) -> dict:
    """Build JSON-RPC transaction object for eth_call and eth_estimateGas."""
    tx = {
        "from": request.from_address,
        "to": request.to_address,
        "value": hex(parse_quantity(request.value or "0x0")),
        "data": request.data or "0x",
    }

    if request.gas_limit:
        tx["gas"] = hex(parse_quantity(request.gas_limit))

    return tx


def build_eth_transfer(from_address: str, to_address: str, value: Optional[str]) -> Optional[EthTransfer]:
    """Build ETH transfer info if value is nonzero."""
    if not value or value in ("0x0", "0x", "0"):
        return None

    try:
        wei = parse_quantity(value)
    except ValueError:
        return None

    if wei == 0:
        return None

    return EthTransfer(
        from_address=from_address,
        to_address=to_address,
        value=str(wei),
        formatted_value=format_ether(wei),
    )
