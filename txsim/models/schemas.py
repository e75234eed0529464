"""Pydantic schemas for simulation requests and results."""
import re
from typing import Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator
from pydantic.alias_generators import to_camel


ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
HEX_DATA_RE = re.compile(r"^0x(?:[a-fA-F0-9]{2})*$")
HEX_NUMBER_RE = re.compile(r"^0x[a-fA-F0-9]+$")
DECIMAL_NUMBER_RE = re.compile(r"^\d+$")

ErrorType = Literal["revert", "panic", "custom", "unknown"]


class CamelModel(BaseModel):
    """Base model serialized with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _is_numeric_string(value: str) -> bool:
    if value.startswith("0x"):
        return bool(HEX_NUMBER_RE.match(value))
    return bool(DECIMAL_NUMBER_RE.match(value))


# Request
class SimulateRequest(CamelModel):
    """Validated and normalized simulation request."""

    from_address: str = Field(..., alias="from")
    to_address: str = Field(..., alias="to")
    value: Optional[str] = "0x0"
    data: Optional[str] = "0x"
    gas_limit: Optional[str] = None
    block_tag: Union[Literal["latest", "pending"], StrictInt] = "latest"

    @field_validator("from_address", "to_address")
    @classmethod
    def check_address(cls, v: str) -> str:
        if not ADDRESS_RE.match(v):
            raise ValueError("must be a valid Ethereum address (0x + 40 hex characters)")
        return v

    @field_validator("value", mode="before")
    @classmethod
    def normalize_value(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return "0x0"
        if not isinstance(v, str):
            raise ValueError("must be a string")
        if not _is_numeric_string(v):
            raise ValueError("must be a valid number (decimal or hex)")
        if v in ("0", "0x0"):
            return "0x0"
        if v.startswith("0x"):
            return v
        return hex(int(v))

    @field_validator("data", mode="before")
    @classmethod
    def check_data(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return "0x"
        if not isinstance(v, str):
            raise ValueError("must be a string")
        if not HEX_DATA_RE.match(v):
            raise ValueError("must be valid hex data (0x...)")
        return v

    @field_validator("gas_limit")
    @classmethod
    def check_gas_limit(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not _is_numeric_string(v):
            raise ValueError("must be a valid number (decimal or hex)")
        return v

    @field_validator("block_tag", mode="before")
    @classmethod
    def default_block_tag(cls, v):
        return "latest" if v is None else v


# Errors
class DecodedError(CamelModel):
    """User-facing explanation of a failed call."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    type: ErrorType
    message: str
    user_message: str
    suggestion: str
    selector: Optional[str] = None
    panic_code: Optional[int] = None
    raw: str


# Tokens
class TokenInfo(CamelModel):
    """ERC-20 token metadata."""

    address: str
    symbol: str
    decimals: int = 18
    name: Optional[str] = None


class TokenTransfer(CamelModel):
    """Token movement implied by transfer/transferFrom calldata."""

    token: str
    symbol: Optional[str] = None
    decimals: int
    from_address: str = Field(..., alias="from")
    to_address: str = Field(..., alias="to")
    amount: str
    formatted_amount: str


class ApprovalChange(CamelModel):
    """Allowance change implied by approve calldata."""

    token: str
    symbol: Optional[str] = None
    owner: str
    spender: str
    current_allowance: str
    new_allowance: str
    is_unlimited: bool


class EthTransfer(CamelModel):
    """Native value sent with the transaction."""

    from_address: str = Field(..., alias="from")
    to_address: str = Field(..., alias="to")
    value: str
    formatted_value: str


# Simulation results
class SimulationSuccess(CamelModel):
    """Call executed without reverting."""

    success: Literal[True] = True
    gas_estimate: str
    return_data: str
    eth_transfer: Optional[EthTransfer] = None
    token_transfers: list[TokenTransfer] = Field(default_factory=list)
    approval_changes: list[ApprovalChange] = Field(default_factory=list)


class SimulationFailure(CamelModel):
    """Call reverted or could not be executed."""

    success: Literal[False] = False
    error: DecodedError
    gas_estimate: Optional[str] = None


SimulationResult = Union[SimulationSuccess, SimulationFailure]


# API envelopes
class SimulateResponse(BaseModel):
    """Simulation endpoint response."""
    result: SimulationResult


class ApiError(BaseModel):
    """API error details."""
    code: str
    message: str
    field: Optional[str] = None


class ErrorResponse(BaseModel):
    """API error response."""
    error: ApiError


# Health Check
class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    service: str = "transaction-simulator"
    timestamp: int


class CacheClearResponse(BaseModel):
    """Token cache clear response."""
    cleared: int
