"""Fallback classification of provider error messages."""
import re
from typing import NamedTuple

from ..models.schemas import DecodedError, ErrorType

REASON_STRING_RE = re.compile(r"reverted with reason string ['\"](.*?)['\"]")
EXECUTION_REVERTED_RE = re.compile(
    r"execution reverted(?::\s*(.+?))?(?:\s*\(|$)", re.IGNORECASE
)

MAX_TITLE_LENGTH = 50


class ReasonMapping(NamedTuple):
    """Keywords mapped to a friendly message."""
    keywords: tuple[str, ...]
    message: str
    user_message: str
    suggestion: str


# Checked in order, first keyword hit wins
REASON_MAPPINGS: list[ReasonMapping] = [
    ReasonMapping(
        ("insufficient balance", "transfer amount exceeds balance", "exceeds balance"),
        "Insufficient Balance",
        "You don't have enough tokens to complete this transfer.",
        "Check your token balance and try a smaller amount.",
    ),
    ReasonMapping(
        ("insufficient allowance", "allowance"),
        "Approval Required",
        "You haven't approved the contract to spend your tokens.",
        "First approve the contract to spend your tokens, then try again.",
    ),
    ReasonMapping(
        ("not owner", "caller is not the owner", "unauthorized"),
        "Not Authorized",
        "You don't have permission to perform this action.",
        "Only the contract owner or authorized addresses can do this.",
    ),
    ReasonMapping(
        ("paused", "pausable"),
        "Contract Paused",
        "This contract is temporarily paused.",
        "Wait for the contract to be unpaused before trying again.",
    ),
    ReasonMapping(
        ("zero address", "invalid address"),
        "Invalid Address",
        "One of the addresses provided is invalid.",
        "Double-check the recipient address.",
    ),
    ReasonMapping(
        ("expired", "deadline"),
        "Transaction Expired",
        "The transaction deadline has passed.",
        "Try again with a new transaction.",
    ),
    ReasonMapping(
        ("slippage", "output amount"),
        "Slippage Too High",
        "The price changed more than your allowed tolerance.",
        "Increase slippage tolerance or try a smaller trade.",
    ),
    ReasonMapping(
        ("liquidity",),
        "Insufficient Liquidity",
        "Not enough liquidity in the pool for this trade.",
        "Try a smaller amount or different trading pair.",
    ),
]


def create_user_friendly_error(error_type: ErrorType, reason: str) -> DecodedError:
    """Map a free-text revert reason to a friendly error."""
    reason_lower = reason.lower()

    for mapping in REASON_MAPPINGS:
        if any(keyword in reason_lower for keyword in mapping.keywords):
            return DecodedError(
                type=error_type,
                message=mapping.message,
                user_message=mapping.user_message,
                suggestion=mapping.suggestion,
                raw=reason,
            )

    title = reason if len(reason) <= MAX_TITLE_LENGTH else f"{reason[:MAX_TITLE_LENGTH]}..."
    return DecodedError(
        type=error_type,
        message=title,
        user_message=reason,
        suggestion="Review the error message and check your transaction parameters.",
        raw=reason,
    )


def parse_provider_error(message: str, fallback: DecodedError) -> DecodedError:
    """
    Classify a provider error message when no revert data was decodable.

    Checks run in a fixed order and the first hit wins, so a message that
    mentions several conditions is classified by the earliest check.

    Args:
        message: Free-text error message from the node or client
        fallback: Result of decoding the (missing) revert data

    Returns:
        DecodedError for the most specific matching condition
    """
    message = message or ""
    raw = fallback.raw

    reason_match = REASON_STRING_RE.search(message)
    if reason_match:
        return create_user_friendly_error("revert", reason_match.group(1))

    if "execution reverted" in message:
        match = EXECUTION_REVERTED_RE.search(message)
        reason = (match.group(1) or "").strip() if match else ""
        if reason:
            return create_user_friendly_error("revert", reason)

        return DecodedError(
            type="revert",
            message="Transaction Reverted",
            user_message="The smart contract rejected this transaction.",
            suggestion="The contract didn't provide a specific reason. Check your input parameters.",
            raw=raw,
        )

    if "insufficient funds" in message or "insufficient balance" in message:
        return DecodedError(
            type="revert",
            message="Insufficient Funds",
            user_message="You don't have enough ETH to cover the transaction value and gas fees.",
            suggestion="Add more ETH to your wallet or reduce the transaction amount.",
            raw=raw,
        )

    if "gas required exceeds" in message or "out of gas" in message:
        return DecodedError(
            type="revert",
            message="Gas Limit Exceeded",
            user_message="The transaction requires more gas than allowed.",
            suggestion="Increase the gas limit or simplify the transaction.",
            raw=raw,
        )

    if "nonce" in message:
        return DecodedError(
            type="revert",
            message="Nonce Error",
            user_message="There's a transaction sequencing issue with your account.",
            suggestion="Wait for pending transactions to complete or reset your wallet nonce.",
            raw=raw,
        )

    # Contract reverted without an ABI-encoded reason
    if "missing revert data" in message:
        return DecodedError(
            type="revert",
            message="Transaction Would Fail",
            user_message="The contract rejected this transaction but didn't specify why.",
            suggestion="Common causes: insufficient token balance, missing approval, or invalid parameters.",
            raw=raw,
        )

    if "network" in message or "connect" in message or "timeout" in message:
        return DecodedError(
            type="unknown",
            message="Network Error",
            user_message="Could not connect to the Ethereum network.",
            suggestion="Check your internet connection and try again.",
            raw=raw,
        )

    return DecodedError(
        type="unknown",
        message="Transaction Failed",
        user_message="The transaction could not be completed.",
        suggestion="Please verify all parameters are correct and try again.",
        raw=raw,
    )
