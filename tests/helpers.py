"""Addresses and payload builders shared by the tests."""

from __future__ import annotations

from typing import Any

from eth_abi import encode

SENDER = "0x1111111111111111111111111111111111111111"
RECIPIENT = "0x2222222222222222222222222222222222222222"
SPENDER = "0x3333333333333333333333333333333333333333"
TOKEN = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
NOT_A_TOKEN = "0x4444444444444444444444444444444444444444"


def revert_payload(reason: str) -> str:
    """Error(string) revert data."""
    return "0x08c379a0" + encode(["string"], [reason]).hex()


def panic_payload(code: int) -> str:
    """Panic(uint256) revert data."""
    return "0x4e487b71" + encode(["uint256"], [code]).hex()


def calldata(selector: str, types: list[str], args: list[Any]) -> str:
    """Selector followed by ABI-encoded arguments."""
    return selector + encode(types, args).hex()
