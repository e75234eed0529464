"""JSON-RPC client for Ethereum-compatible nodes."""
import logging
from typing import Any, Optional, Sequence, Union

import httpx

from ..config import config
from ..decoders.abi_codec import decode_values, encode_call

logger = logging.getLogger(__name__)

BlockTag = Union[str, int]


class RPCClient:
    """Async JSON-RPC 2.0 client."""

    def __init__(
        self,
        url: str,
        timeout: int = 5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.transport = transport
        self._request_id = 0

    async def call(
        self,
        method: str,
        params: list[Any] | None = None,
        timeout: Optional[int] = None,
    ) -> Any:
        """Make JSON-RPC call."""
        self._request_id += 1

        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": self._request_id,
        }

        timeout_val = timeout or self.timeout

        try:
            async with httpx.AsyncClient(
                timeout=timeout_val, transport=self.transport
            ) as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()

                data = response.json()

                if "error" in data:
                    error = data["error"] or {}
                    raise RPCError(
                        code=error.get("code"),
                        message=error.get("message") or "RPC error",
                        data=error.get("data"),
                        info={"error": error},
                    )

                return data.get("result")

        except RPCError:
            raise
        except httpx.TimeoutException:
            raise RPCError(code=-32001, message="Request timeout")
        except httpx.HTTPError as e:
            raise RPCError(code=-32002, message=f"HTTP error: {e}")
        except Exception as e:
            raise RPCError(code=-32003, message=f"Unknown error: {e}")

    async def eth_call(self, tx: dict, block: BlockTag = "latest") -> str:
        """Execute call without creating transaction."""
        return await self.call("eth_call", [tx, format_block_tag(block)])

    async def eth_estimate_gas(self, tx: dict) -> int:
        """Estimate gas needed to execute the transaction."""
        result = await self.call("eth_estimateGas", [tx])
        return int(result, 16)

    async def contract_read(
        self,
        address: str,
        signature: str,
        args: Sequence[Any] = (),
        output_types: Sequence[str] = ("uint256",),
        block: BlockTag = "latest",
    ) -> Any:
        """
        Call a view function and decode its single return value.

        Args:
            address: Contract address
            signature: Function signature, e.g. "balanceOf(address)"
            args: Positional arguments matching the signature
            output_types: ABI types of the return data

        Returns:
            First decoded return value
        """
        calldata = encode_call(signature, args)
        result = await self.eth_call({"to": address, "data": calldata}, block)

        if not result or result == "0x":
            raise RPCError(code=-32000, message=f"Empty result for {signature} on {address}")

        return decode_values(output_types, result)[0]


class RPCError(Exception):
    """RPC error exception."""

    def __init__(
        self,
        code: Optional[int] = None,
        message: str = "RPC error",
        data: Any = None,
        info: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.data = data
        self.info = info
        super().__init__(f"RPC Error {code}: {message}")


def format_block_tag(block: BlockTag) -> str:
    """Convert block number to hex quantity, keep named tags."""
    if isinstance(block, int):
        return hex(block)
    return block


def get_rpc_client() -> RPCClient:
    """Create client for the configured Ethereum node."""
    if not config.ethereum_rpc_url:
        raise RuntimeError("ETHEREUM_RPC_URL not set")

    return RPCClient(config.ethereum_rpc_url, timeout=config.rpc_timeout_default)
