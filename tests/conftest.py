"""
Pytest fixtures for Token Fanout tests.

FakeToken stands in for Erc20Token: it keeps balances in memory and records
every call, together with the pauses taken by the recording sleep, in one
shared event list so tests can assert on ordering.
"""

from __future__ import annotations

from typing import Any, Optional

import pytest
from eth_account import Account

from token_fanout.config import Settings
from token_fanout.erc20 import TokenContractError, TransferReverted

# Deterministic, well-formed secp256k1 keys for tests only
KEY_A = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
KEY_B = "0x" + "11" * 32
KEY_C = "0x" + "22" * 32

TOKEN_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"

GAS_PRICE = 7_000_000_000


class FakeToken:
    """In-memory ERC20 with the Erc20Token coroutine interface."""

    def __init__(
        self,
        events: list,
        decimals: int = 18,
        balances: Optional[dict[str, int]] = None,
        chain_id: int = 93384,
    ) -> None:
        self.events = events
        self._decimals = decimals
        self.balances = balances or {}
        self.chain_id = chain_id
        self.settings: Optional[Settings] = None
        self.fail_decimals = False
        self.fail_balance_for: set[str] = set()
        self.fail_transfer_at: set[int] = set()  # 0-based submission index
        self.revert_at: set[int] = set()
        self.closed = False
        self._submissions = 0
        self._hash_index: dict[str, int] = {}

    def __call__(self, address: str, settings: Settings) -> "FakeToken":
        # Lets a FakeToken instance be passed where a token factory is expected.
        self.address = address
        self.settings = settings
        return self

    async def __aenter__(self) -> "FakeToken":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.closed = True

    async def check_chain_id(self) -> None:
        if self.settings is not None and self.chain_id != self.settings.chain_id:
            raise TokenContractError(
                f"Connected to chain {self.chain_id}, expected {self.settings.chain_id}"
            )

    async def decimals(self) -> int:
        self.events.append(("decimals",))
        if self.fail_decimals:
            raise ValueError("execution reverted")
        return self._decimals

    async def balance_of(self, address: str) -> int:
        self.events.append(("balance", address))
        if address in self.fail_balance_for:
            raise ConnectionError("rpc unavailable")
        return self.balances.get(address, 0)

    async def gas_price(self) -> int:
        self.events.append(("gas_price",))
        return GAS_PRICE

    async def transfer(self, wallet, to, amount, gas_limit, gas_price) -> str:
        index = self._submissions
        self._submissions += 1
        self.events.append(("transfer", wallet.address, to, amount, gas_limit, gas_price))
        if index in self.fail_transfer_at:
            raise ValueError("nonce too low")
        tx_hash = f"0x{index + 1:064x}"
        self._hash_index[tx_hash] = index
        return tx_hash

    async def wait_for_receipt(self, tx_hash: str, timeout: float) -> dict:
        index = self._hash_index[tx_hash]
        self.events.append(("wait", tx_hash))
        if index in self.revert_at:
            raise TransferReverted(f"Transaction {tx_hash} reverted")
        return {"status": 1, "blockNumber": 100 + index, "transactionHash": tx_hash}

    @property
    def transfers(self) -> list:
        return [e for e in self.events if e[0] == "transfer"]


@pytest.fixture
def events() -> list:
    return []


@pytest.fixture
def sleep(events):
    """Recording replacement for asyncio.sleep."""

    async def _sleep(seconds: float) -> None:
        events.append(("sleep", seconds))

    return _sleep


@pytest.fixture
def settings() -> Settings:
    return Settings(delay_seconds=1.0, receipt_timeout_s=5.0)


@pytest.fixture
def wallet_a():
    return Account.from_key(KEY_A)


@pytest.fixture
def wallet_b():
    return Account.from_key(KEY_B)


@pytest.fixture
def wallet_c():
    return Account.from_key(KEY_C)


@pytest.fixture
def fake_token(events) -> FakeToken:
    return FakeToken(events)
