"""Error decoding for simulated transaction reverts."""
import logging
from typing import Any, NamedTuple, Optional

from ..models.schemas import DecodedError
from .abi_codec import DecodeFailure, decode_string, decode_uint256, split_selector

logger = logging.getLogger(__name__)


class FriendlyMessage(NamedTuple):
    """Title, explanation and suggestion shown to the user."""
    title: str
    explanation: str
    suggestion: str


class CustomError(NamedTuple):
    """Known custom error selector."""
    signature: str
    title: str
    explanation: str
    suggestion: str


# Standard error signatures
ERROR_STRING_SELECTOR = "0x08c379a0"  # Error(string)
PANIC_SELECTOR = "0x4e487b71"  # Panic(uint256)
MAX_PANIC_CODE = 0xFFFFFFFF

# Solidity panic codes
PANIC_CODES: dict[int, FriendlyMessage] = {
    0x00: FriendlyMessage(
        "Generic compiler panic",
        "An unexpected error occurred in the smart contract.",
        "This is likely a bug in the contract. Contact the project team.",
    ),
    0x01: FriendlyMessage(
        "Assertion failed",
        "A condition the contract expected to be true was false.",
        "The contract's internal state doesn't match expected conditions.",
    ),
    0x11: FriendlyMessage(
        "Arithmetic overflow or underflow",
        "A math operation resulted in a number too large or below zero.",
        "Try a smaller amount or check if the values are correct.",
    ),
    0x12: FriendlyMessage(
        "Division by zero",
        "The contract tried to divide by zero.",
        "Check input values - one of them might be zero when it shouldn't be.",
    ),
    0x21: FriendlyMessage(
        "Invalid enum value",
        "An invalid option was selected in the contract.",
        "The input parameters may be incorrect.",
    ),
    0x22: FriendlyMessage(
        "Storage encoding error",
        "The contract's storage data is corrupted.",
        "This is a serious contract bug. Do not interact with this contract.",
    ),
    0x31: FriendlyMessage(
        "Empty array error",
        "The contract tried to remove an item from an empty list.",
        "There may be nothing left to withdraw or remove.",
    ),
    0x32: FriendlyMessage(
        "Array index out of bounds",
        "The contract tried to access an item that doesn't exist.",
        "Check if the index or ID you're using is valid.",
    ),
    0x41: FriendlyMessage(
        "Out of memory",
        "The transaction requires too much memory to execute.",
        "Try processing smaller batches of data.",
    ),
    0x51: FriendlyMessage(
        "Internal function error",
        "The contract tried to call an uninitialized function.",
        "This is a contract bug. Contact the project team.",
    ),
}

# Revert reason substrings, checked in order (first match wins)
REVERT_REASON_MESSAGES: list[tuple[str, FriendlyMessage]] = [
    # ERC20
    ("insufficient balance", FriendlyMessage(
        "Insufficient Balance",
        "You don't have enough tokens to complete this transfer.",
        "Check your token balance and try a smaller amount.",
    )),
    ("transfer amount exceeds balance", FriendlyMessage(
        "Insufficient Balance",
        "The transfer amount is more than your available balance.",
        "Reduce the amount or add more tokens to your wallet.",
    )),
    ("insufficient allowance", FriendlyMessage(
        "Approval Required",
        "You haven't approved the contract to spend your tokens.",
        "First approve the contract to spend your tokens, then try again.",
    )),
    ("approve from the zero address", FriendlyMessage(
        "Invalid Approval",
        "Cannot approve from an empty address.",
        "Make sure your wallet is connected properly.",
    )),
    ("transfer to the zero address", FriendlyMessage(
        "Invalid Recipient",
        "Cannot send tokens to the zero address (0x000...000).",
        "Double-check the recipient address.",
    )),
    # Ownership
    ("ownable: caller is not the owner", FriendlyMessage(
        "Not Authorized",
        "Only the contract owner can perform this action.",
        "This function is restricted to the contract administrator.",
    )),
    ("caller is not the owner", FriendlyMessage(
        "Not Authorized",
        "You don't have permission to call this function.",
        "Only the contract owner can perform this action.",
    )),
    # Pausable
    ("pausable: paused", FriendlyMessage(
        "Contract Paused",
        "This contract is temporarily paused and not accepting transactions.",
        "Wait for the contract to be unpaused, or check project announcements.",
    )),
    ("contract is paused", FriendlyMessage(
        "Contract Paused",
        "The contract has been paused by the administrator.",
        "Try again later when the contract is active.",
    )),
    # Reentrancy
    ("reentrant call", FriendlyMessage(
        "Reentrancy Blocked",
        "The contract blocked a potentially dangerous recursive call.",
        "This is a security feature. Your transaction structure may be incorrect.",
    )),
    ("reentrancyguard: reentrant call", FriendlyMessage(
        "Reentrancy Blocked",
        "Multiple calls to the contract in one transaction are not allowed.",
        "Try calling the function directly without batching.",
    )),
    # DEX / swaps
    ("insufficient liquidity", FriendlyMessage(
        "Not Enough Liquidity",
        "The trading pool doesn't have enough tokens for this swap.",
        "Try a smaller amount or use a different trading pair.",
    )),
    ("insufficient output amount", FriendlyMessage(
        "Slippage Too High",
        "The price moved and you would receive less than your minimum.",
        "Increase slippage tolerance or try a smaller trade.",
    )),
    ("insufficient input amount", FriendlyMessage(
        "Invalid Input",
        "The input amount is too small for this trade.",
        "Increase the input amount.",
    )),
    ("expired", FriendlyMessage(
        "Transaction Expired",
        "The transaction deadline has passed.",
        "Try again with a new transaction.",
    )),
    ("deadline", FriendlyMessage(
        "Deadline Passed",
        "The transaction took too long and expired.",
        "Increase the deadline or try again immediately.",
    )),
    ("slippage", FriendlyMessage(
        "Price Slippage",
        "The price changed more than your allowed tolerance.",
        "Increase slippage tolerance in your settings.",
    )),
    # NFT
    ("erc721: invalid token id", FriendlyMessage(
        "NFT Not Found",
        "This NFT token ID doesn't exist.",
        "Verify the token ID is correct.",
    )),
    ("erc721: caller is not token owner or approved", FriendlyMessage(
        "Not NFT Owner",
        "You don't own this NFT or have approval to transfer it.",
        "Check that you own this NFT in your wallet.",
    )),
    # General
    ("execution reverted", FriendlyMessage(
        "Transaction Reverted",
        "The smart contract rejected this transaction.",
        "Check the transaction parameters and try again.",
    )),
    ("out of gas", FriendlyMessage(
        "Out of Gas",
        "The transaction ran out of gas before completing.",
        "Increase the gas limit for this transaction.",
    )),
    ("gas required exceeds allowance", FriendlyMessage(
        "Gas Limit Too Low",
        "The transaction needs more gas than provided.",
        "Increase the gas limit.",
    )),
]

# Custom error selectors
KNOWN_CUSTOM_ERRORS: dict[str, CustomError] = {
    # ERC20 (EIP-6093)
    "0xe450d38c": CustomError(
        "ERC20InsufficientBalance(address,uint256,uint256)",
        "Insufficient Token Balance",
        "Your token balance is less than the amount you're trying to send.",
        "Check your balance and reduce the transfer amount.",
    ),
    "0xfb8f41b2": CustomError(
        "ERC20InsufficientAllowance(address,uint256,uint256)",
        "Approval Required",
        "The contract doesn't have permission to spend your tokens.",
        "Approve the contract to spend tokens first.",
    ),
    "0x96c6fd1e": CustomError(
        "ERC20InvalidSender(address)",
        "Invalid Sender",
        "The sender address is not valid for this operation.",
        "Check the 'from' address is correct.",
    ),
    "0xec442f05": CustomError(
        "ERC20InvalidReceiver(address)",
        "Invalid Recipient",
        "Cannot send tokens to this address.",
        "Verify the recipient address is correct and can receive tokens.",
    ),
    # Uniswap
    "0x5a59f53c": CustomError(
        "InsufficientInputAmount()",
        "Input Too Low",
        "The input amount is too small for this swap.",
        "Increase the amount you're swapping.",
    ),
    "0x849eaf98": CustomError(
        "InsufficientOutputAmount()",
        "Slippage Exceeded",
        "You would receive less than your minimum due to price movement.",
        "Increase slippage tolerance or reduce trade size.",
    ),
    "0xced3e100": CustomError(
        "InsufficientLiquidity()",
        "Low Liquidity",
        "Not enough liquidity in the pool for this trade.",
        "Try a smaller amount or different trading pair.",
    ),
    # OpenZeppelin access control / pausable
    "0x118cdaa7": CustomError(
        "OwnableUnauthorizedAccount(address)",
        "Not Authorized",
        "Your wallet is not authorized to perform this action.",
        "This function is restricted to specific addresses.",
    ),
    "0x1e4fbdf7": CustomError(
        "OwnableInvalidOwner(address)",
        "Invalid Owner",
        "The provided owner address is invalid.",
        "Check the owner address parameter.",
    ),
    # Keyed by the keccak selectors of the Pausable errors
    "0xd93c0665": CustomError(
        "EnforcedPause()",
        "Contract Paused",
        "This contract is currently paused.",
        "Wait for the contract to be unpaused.",
    ),
    "0x8dfc202b": CustomError(
        "ExpectedPause()",
        "Contract Not Paused",
        "This action requires the contract to be paused.",
        "The contract must be paused first.",
    ),
    # Transfers
    "0xd92e233d": CustomError(
        "ZeroAddress()",
        "Zero Address",
        "Cannot use the zero address (0x000...000) for this operation.",
        "Provide a valid Ethereum address.",
    ),
    "0x2e076300": CustomError(
        "NotEnoughBalance()",
        "Insufficient Balance",
        "Not enough balance to complete this transaction.",
        "Add more funds or reduce the amount.",
    ),
}


def lookup_custom_error(selector: str) -> Optional[CustomError]:
    """Find a known custom error by its 4-byte selector."""
    return KNOWN_CUSTOM_ERRORS.get(selector.lower())


def decode_error(error_data: Optional[str]) -> DecodedError:
    """
    Decode revert data into a user-friendly error.

    Args:
        error_data: Hex-encoded revert data (0x-prefixed), may be empty

    Returns:
        DecodedError classified as revert, panic, custom or unknown
    """
    if not error_data or error_data == "0x" or len(error_data) < 10:
        return DecodedError(
            type="unknown",
            message="Transaction failed",
            user_message="The transaction was rejected by the smart contract.",
            suggestion="Double-check all transaction parameters and try again.",
            raw=error_data or "0x",
        )

    selector, data = split_selector(error_data)

    if selector == ERROR_STRING_SELECTOR:
        return _decode_revert_string(data, error_data)

    if selector == PANIC_SELECTOR:
        return _decode_panic(data, error_data)

    known = lookup_custom_error(selector)
    if known:
        return DecodedError(
            type="custom",
            message=known.title,
            user_message=known.explanation,
            suggestion=known.suggestion,
            selector=selector,
            raw=error_data,
        )

    return DecodedError(
        type="custom",
        message="Contract Error",
        user_message=f"The contract returned an error ({selector}).",
        suggestion="This may be a custom error from the contract. Check the contract documentation.",
        selector=selector,
        raw=error_data,
    )


def _decode_revert_string(data: str, raw: str) -> DecodedError:
    """Decode Error(string) and map the reason to a friendly message."""
    try:
        reason = decode_string(data)
    except DecodeFailure as e:
        logger.debug(f"Undecodable Error(string) payload: {e}")
        return DecodedError(
            type="revert",
            message="Transaction Reverted",
            user_message="The contract rejected this transaction but didn't provide a clear reason.",
            suggestion="Try with different parameters or contact the project team.",
            raw=raw,
        )

    reason_lower = reason.lower().strip()
    for key, friendly in REVERT_REASON_MESSAGES:
        if key in reason_lower:
            return DecodedError(
                type="revert",
                message=friendly.title,
                user_message=friendly.explanation,
                suggestion=friendly.suggestion,
                raw=raw,
            )

    return DecodedError(
        type="revert",
        message=reason or "Transaction Reverted",
        user_message=reason or "The contract rejected this transaction.",
        suggestion="Review the error message above and check your transaction parameters.",
        raw=raw,
    )


def _decode_panic(data: str, raw: str) -> DecodedError:
    """Decode Panic(uint256) and look up the panic code."""
    try:
        code = decode_uint256(data)
    except DecodeFailure as e:
        logger.debug(f"Undecodable Panic(uint256) payload: {e}")
        return DecodedError(
            type="panic",
            message="Panic Error",
            user_message="The contract encountered a critical error.",
            suggestion="Do not retry. This may indicate a serious issue with the contract.",
            raw=raw,
        )

    panic = PANIC_CODES.get(code)
    if panic:
        return DecodedError(
            type="panic",
            message=panic.title,
            user_message=panic.explanation,
            suggestion=panic.suggestion,
            panic_code=code,
            raw=raw,
        )

    # Codes wider than 32 bits are only shown in the message
    reported_code = code if code <= MAX_PANIC_CODE else None
    return DecodedError(
        type="panic",
        message=f"Panic Error ({hex(code)})",
        user_message="The smart contract encountered an unexpected error.",
        suggestion="This may be a bug in the contract. Contact the project team.",
        panic_code=reported_code,
        raw=raw,
    )


def _field(obj: Any, name: str) -> Any:
    """Read a field from a mapping or an object attribute."""
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def extract_error_data(error: Any) -> Optional[str]:
    """
    Extract revert data from the different provider error shapes.

    Checks ``data``, then ``error.data``, then ``info.error.data``.
    """
    if error is None or isinstance(error, (str, bytes, int, float, bool)):
        return None

    data = _field(error, "data")
    if data and isinstance(data, str):
        return data

    nested = _field(error, "error")
    if nested is not None:
        data = _field(nested, "data")
        if data and isinstance(data, str):
            return data

    info = _field(error, "info")
    if info is not None:
        info_error = _field(info, "error")
        if info_error is not None:
            data = _field(info_error, "data")
            if data and isinstance(data, str):
                return data

    return None


def get_error_summary(error: DecodedError) -> str:
    """One-line summary for quick display."""
    return f"{error.message}: {error.user_message}"
