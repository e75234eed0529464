"""ERC-20 transfer and approval detection from calldata."""
import asyncio
import logging
from typing import Any, Optional

from ..decoders.abi_codec import MAX_UINT256, decode_call_arguments, split_selector
from ..decoders.units import format_units
from ..models.schemas import ApprovalChange, TokenInfo, TokenTransfer
from ..state.token_cache import TokenCache

logger = logging.getLogger(__name__)

# ERC20 function selectors
TRANSFER_SELECTOR = "0xa9059cbb"  # transfer(address,uint256)
TRANSFER_FROM_SELECTOR = "0x23b872dd"  # transferFrom(address,address,uint256)
APPROVE_SELECTOR = "0x095ea7b3"  # approve(address,uint256)

# View functions: name -> (signature, output types)
ERC20_READS: dict[str, tuple[str, list[str]]] = {
    "symbol": ("symbol()", ["string"]),
    "decimals": ("decimals()", ["uint8"]),
    "name": ("name()", ["string"]),
    "allowance": ("allowance(address,address)", ["uint256"]),
    "balanceOf": ("balanceOf(address)", ["uint256"]),
}

DEFAULT_DECIMALS = 18


class TokenAnalyzer:
    """Analyzes transactions for ERC20 transfers and approval changes."""

    def __init__(self, client: Any, cache: Optional[TokenCache] = None) -> None:
        self.client = client
        self.cache = cache if cache is not None else TokenCache()

    async def _read(self, token: str, function: str, *args: Any) -> Any:
        signature, output_types = ERC20_READS[function]
        # Mixed-case input addresses need not carry a valid checksum
        args = tuple(arg.lower() if isinstance(arg, str) else arg for arg in args)
        return await self.client.contract_read(token, signature, args, output_types)

    async def analyze_transaction(
        self,
        from_address: str,
        to_address: str,
        data: Optional[str],
        value: Optional[str] = None,
    ) -> tuple[list[TokenTransfer], list[ApprovalChange]]:
        """
        Detect token movements and allowance changes in calldata.

        Args:
            from_address: Transaction sender
            to_address: Called contract (the token for ERC20 calls)
            data: Transaction calldata
            value: Native value, unused by token detection

        Returns:
            Tuple of (transfers, approvals); both empty for non-ERC20 calls
        """
        transfers: list[TokenTransfer] = []
        approvals: list[ApprovalChange] = []

        # Plain ETH transfer
        if not data or data == "0x" or len(data) < 10:
            return transfers, approvals

        selector, _ = split_selector(data)

        try:
            if selector == TRANSFER_SELECTOR:
                recipient, amount = decode_call_arguments(["address", "uint256"], data)
                token_info = await self.get_token_info(to_address)
                if token_info:
                    transfers.append(
                        self._build_transfer(token_info, from_address, recipient, amount)
                    )

            elif selector == TRANSFER_FROM_SELECTOR:
                sender, recipient, amount = decode_call_arguments(
                    ["address", "address", "uint256"], data
                )
                token_info = await self.get_token_info(to_address)
                if token_info:
                    transfers.append(
                        self._build_transfer(token_info, sender, recipient, amount)
                    )

            elif selector == APPROVE_SELECTOR:
                spender, amount = decode_call_arguments(["address", "uint256"], data)
                token_info = await self.get_token_info(to_address)
                if token_info:
                    current_allowance = await self.get_allowance(
                        to_address, from_address, spender
                    )
                    approvals.append(
                        ApprovalChange(
                            token=to_address,
                            symbol=token_info.symbol,
                            owner=from_address,
                            spender=spender,
                            current_allowance=current_allowance,
                            new_allowance=str(amount),
                            is_unlimited=amount == MAX_UINT256,
                        )
                    )

        except Exception as e:
            # Target may not be an ERC20 token at all
            logger.debug(f"Token analysis skipped for {to_address}: {e}")
            return [], []

        return transfers, approvals

    def _build_transfer(
        self, token_info: TokenInfo, sender: str, recipient: str, amount: int
    ) -> TokenTransfer:
        return TokenTransfer(
            token=token_info.address,
            symbol=token_info.symbol,
            decimals=token_info.decimals,
            from_address=sender,
            to_address=recipient,
            amount=str(amount),
            formatted_amount=format_units(amount, token_info.decimals),
        )

    async def get_token_info(self, token_address: str) -> Optional[TokenInfo]:
        """Get token metadata (symbol, decimals, name), cached per address."""
        cached = self.cache.get(token_address)
        if cached:
            return cached

        try:
            symbol, decimals, name = await asyncio.gather(
                self._read(token_address, "symbol"),
                self._read(token_address, "decimals"),
                self._read(token_address, "name"),
                return_exceptions=True,
            )

            # No symbol means this probably isn't an ERC20 token
            if isinstance(symbol, BaseException) or not symbol:
                return None

            token_info = TokenInfo(
                address=token_address,
                symbol=symbol,
                decimals=DEFAULT_DECIMALS if isinstance(decimals, BaseException) else int(decimals),
                name=None if isinstance(name, BaseException) else (name or None),
            )

            self.cache.set(token_address, token_info)
            logger.debug(f"Cached token {token_info.symbol} at {token_address}")

            return token_info

        except Exception as e:
            logger.debug(f"Token metadata lookup failed for {token_address}: {e}")
            return None

    async def get_allowance(self, token_address: str, owner: str, spender: str) -> str:
        """Get current allowance, "0" if it cannot be read."""
        try:
            allowance = await self._read(token_address, "allowance", owner, spender)
            return str(allowance)
        except Exception as e:
            logger.debug(f"Allowance lookup failed for {token_address}: {e}")
            return "0"

    async def get_balance(self, token_address: str, account: str) -> str:
        """Get token balance, "0" if it cannot be read."""
        try:
            balance = await self._read(token_address, "balanceOf", account)
            return str(balance)
        except Exception as e:
            logger.debug(f"Balance lookup failed for {token_address}: {e}")
            return "0"

    def clear_cache(self) -> int:
        """Clear the token metadata cache."""
        return self.cache.clear()
