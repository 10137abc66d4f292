from __future__ import annotations

from typing import Any

import pytest
from eth_account import Account

from mini_wallet.storage import MemoryStore
from mini_wallet.wallet import SessionManager

TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
RECIPIENT = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"


class StubTimer:
    def __init__(self, interval: float, callback):
        self.interval = interval
        self.callback = callback
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


class FakeChain:
    """In-memory stand-in for ``ChainClient``."""

    explorer_url = "https://sepolia.etherscan.io"

    def __init__(self):
        self.balances: dict[str, int] = {}
        self.names: dict[str, str | None] = {}
        self.receipts: dict[str, dict[str, Any]] = {}
        self.sent: list[dict[str, Any]] = []
        self.gas = 21000
        self.gas_price = 10**9
        self.receipt_status: int | None = 1
        self.balance_error: Exception | None = None
        self.estimate_error: Exception | None = None
        self.send_error: Exception | None = None
        self.resolve_error: Exception | None = None
        self.balance_calls = 0
        self.estimate_calls = 0

    def set_balance(self, address: str, wei: int) -> None:
        self.balances[address.lower()] = wei

    def get_balance(self, address: str) -> int:
        self.balance_calls += 1
        if self.balance_error is not None:
            raise self.balance_error
        return self.balances.get(address.lower(), 0)

    def get_gas_price(self) -> int:
        return self.gas_price

    def estimate_gas(self, from_address: str, to_address: str, value_wei: int) -> int:
        self.estimate_calls += 1
        if self.estimate_error is not None:
            raise self.estimate_error
        return self.gas

    def resolve_name(self, name: str) -> str | None:
        if self.resolve_error is not None:
            raise self.resolve_error
        return self.names.get(name)

    def send_transfer(self, private_key, to_address, value_wei, gas=None, gas_price=None):
        if self.send_error is not None:
            raise self.send_error
        tx_hash = "0x" + f"{len(self.sent) + 1:064x}"
        self.sent.append(
            {
                "hash": tx_hash,
                "to": to_address,
                "value": value_wei,
                "gas": gas,
                "gas_price": gas_price,
            }
        )
        if self.receipt_status is not None:
            self.receipts[tx_hash] = {"status": self.receipt_status}
        return tx_hash

    def get_receipt(self, tx_hash: str) -> dict[str, Any] | None:
        return self.receipts.get(tx_hash)


@pytest.fixture(autouse=True)
def isolate_wallet_storage(monkeypatch, tmp_path):
    """Keep config, session and log files inside the test's temp dir."""
    monkeypatch.setenv("MINI_WALLET_DIR", str(tmp_path / "wallet"))
    monkeypatch.setenv("XDG_RUNTIME_DIR", str(tmp_path / "runtime"))
    monkeypatch.setenv("MINI_WALLET_LOG_DIR", str(tmp_path / "logs"))
    for name in (
        "MINI_WALLET_RPC_URL",
        "MINI_WALLET_ETHERSCAN_API_KEY",
        "MINI_WALLET_SESSION_PASSPHRASE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def test_private_key():
    return TEST_PRIVATE_KEY


@pytest.fixture
def test_address():
    return Account.from_key(TEST_PRIVATE_KEY).address


@pytest.fixture
def recipient_address():
    return RECIPIENT


@pytest.fixture
def chain():
    return FakeChain()


@pytest.fixture
def session_store():
    return MemoryStore()


@pytest.fixture
def timers():
    return []


@pytest.fixture
def sessions(chain, session_store, timers):
    """SessionManager that refreshes inline and never starts real timers."""

    def scheduler(interval, callback):
        timer = StubTimer(interval, callback)
        timers.append(timer)
        return timer

    return SessionManager(
        chain,
        session_store,
        refresh_interval=15.0,
        scheduler=scheduler,
        dispatch=lambda work: work(),
    )
