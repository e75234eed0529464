"""Shared fixtures for the txsim test suite."""

from __future__ import annotations

from typing import Any

import pytest

from txsim.analyzers.token_analyzer import TokenAnalyzer
from txsim.pipelines.simulate_tx import TransactionSimulator
from txsim.providers.rpc_client import RPCError
from txsim.state.token_cache import TokenCache

from helpers import TOKEN


# ── Fake chain ───────────────────────────────────────────────────────────────


class FakeChain:
    """In-memory stand-in for the JSON-RPC client."""

    def __init__(self) -> None:
        self.tokens: dict[str, dict[str, Any]] = {}
        self.reads: list[tuple[str, str, tuple]] = []
        self.calls: list[tuple[dict, Any]] = []
        self.call_result: Any = "0x"
        self.call_error: Exception | None = None
        self.gas: int = 21000
        self.gas_error: Exception | None = None
        self.gas_calls = 0

    def read_count(self, function: str) -> int:
        return sum(1 for _, sig, _ in self.reads if sig.startswith(f"{function}("))

    async def eth_call(self, tx: dict, block: Any = "latest") -> str:
        self.calls.append((tx, block))
        if self.call_error is not None:
            raise self.call_error
        return self.call_result

    async def eth_estimate_gas(self, tx: dict) -> int:
        self.gas_calls += 1
        if self.gas_error is not None:
            raise self.gas_error
        return self.gas

    async def contract_read(
        self,
        address: str,
        signature: str,
        args=(),
        output_types=("uint256",),
        block: Any = "latest",
    ) -> Any:
        self.reads.append((address.lower(), signature, tuple(args)))
        token = self.tokens.get(address.lower())
        function = signature.split("(")[0]
        if token is None or function not in token:
            raise RPCError(code=3, message="execution reverted")
        return token[function]


# ── Fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture
def fake_chain() -> FakeChain:
    """Chain with a single USDC-like token deployed at TOKEN."""
    chain = FakeChain()
    chain.tokens[TOKEN] = {
        "symbol": "USDC",
        "decimals": 6,
        "name": "USD Coin",
        "allowance": 100,
        "balanceOf": 5_000_000,
    }
    return chain


@pytest.fixture
def token_cache() -> TokenCache:
    return TokenCache()


@pytest.fixture
def analyzer(fake_chain: FakeChain, token_cache: TokenCache) -> TokenAnalyzer:
    return TokenAnalyzer(fake_chain, token_cache)


@pytest.fixture
def simulator(fake_chain: FakeChain, analyzer: TokenAnalyzer) -> TransactionSimulator:
    return TransactionSimulator(fake_chain, analyzer)
