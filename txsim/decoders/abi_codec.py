"""ABI scalar decoding helpers on top of eth_abi."""
from typing import Any, Sequence, Union
from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError, NonEmptyPaddingBytes
from eth_utils import (
    function_signature_to_4byte_selector,
    remove_0x_prefix,
    to_checksum_address,
    to_hex,
)


MAX_UINT256 = 2**256 - 1

SELECTOR_HEX_LENGTH = 10  # "0x" + 4 bytes


class DecodeFailure(Exception):
    """Payload could not be decoded as the requested ABI types."""


def to_bytes(data: Union[str, bytes]) -> bytes:
    """Convert hex string (with or without 0x) to bytes."""
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    try:
        return bytes.fromhex(remove_0x_prefix(data))
    except (TypeError, ValueError) as e:
        raise DecodeFailure(f"Invalid hex data: {e}") from e


def decode_values(types: Sequence[str], data: Union[str, bytes]) -> tuple:
    """
    Decode ABI-encoded data.

    Args:
        types: ABI type strings, e.g. ["address", "uint256"]
        data: Hex string or raw bytes without a selector

    Returns:
        Tuple of decoded values

    Raises:
        DecodeFailure: On truncated or malformed input
    """
    data_bytes = to_bytes(data)
    try:
        try:
            return decode(list(types), data_bytes)
        except NonEmptyPaddingBytes:
            _check_dynamic_lengths(types, data_bytes)
            return decode(list(types), data_bytes, strict=False)
    except (DecodingError, ValueError, TypeError, OverflowError) as e:
        raise DecodeFailure(f"Cannot decode {list(types)}: {e}") from e


def _check_dynamic_lengths(types: Sequence[str], data_bytes: bytes) -> None:
    """Reject top-level string/bytes values whose declared length overruns the payload."""
    for index, abi_type in enumerate(types):
        if abi_type not in ("string", "bytes"):
            continue
        head = data_bytes[32 * index : 32 * (index + 1)]
        offset = int.from_bytes(head, "big")
        length = int.from_bytes(data_bytes[offset : offset + 32], "big")
        if len(head) < 32 or offset + 32 + length > len(data_bytes):
            raise DecodeFailure(f"Declared {abi_type} length {length} exceeds payload")


def decode_string(data: Union[str, bytes]) -> str:
    """Decode a single ABI string."""
    return decode_values(["string"], data)[0]


def decode_uint256(data: Union[str, bytes]) -> int:
    """Decode a single uint256."""
    return decode_values(["uint256"], data)[0]


def decode_address(data: Union[str, bytes]) -> str:
    """Decode a single address as a checksummed 0x string."""
    return to_checksum_address(decode_values(["address"], data)[0])


def split_selector(payload: str) -> tuple[str, str]:
    """Split 0x-prefixed payload into (lowercase selector, remaining hex)."""
    if not payload.startswith("0x"):
        payload = f"0x{payload}"
    return payload[:SELECTOR_HEX_LENGTH].lower(), payload[SELECTOR_HEX_LENGTH:]


def decode_call_arguments(types: Sequence[str], calldata: str) -> tuple:
    """Decode function arguments following the 4-byte selector."""
    _, args_hex = split_selector(calldata)
    values = decode_values(types, args_hex)
    args_bytes = to_bytes(args_hex)
    # Address arguments are static, so each sits in its own head word
    return tuple(
        decode_address(args_bytes[32 * index : 32 * (index + 1)]) if abi_type == "address" else value
        for index, (abi_type, value) in enumerate(zip(types, values))
    )


def signature_types(signature: str) -> list[str]:
    """Parse argument types from a signature like "allowance(address,address)"."""
    inner = signature[signature.index("(") + 1 : signature.rindex(")")]
    return [t.strip() for t in inner.split(",")] if inner.strip() else []


def encode_call(signature: str, args: Sequence[Any] = ()) -> str:
    """Build 0x-prefixed calldata for a function signature and arguments."""
    selector = function_signature_to_4byte_selector(signature)
    try:
        encoded = encode(signature_types(signature), list(args))
    except EncodingError as e:
        raise ValueError(f"Cannot encode arguments for {signature}: {e}") from e
    return to_hex(selector + encoded)
