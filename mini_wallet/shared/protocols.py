"""Collaborator interfaces shared across Mini Wallet modules."""

from __future__ import annotations

from typing import Any, Protocol


class KeyValueStore(Protocol):
    """Scoped string key-value persistence."""

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
    def remove(self, key: str) -> None: ...


class ChainClientProtocol(Protocol):
    """Read and write primitives the wallet needs from the chain."""

    explorer_url: str

    def get_balance(self, address: str) -> int: ...
    def get_gas_price(self) -> int: ...
    def estimate_gas(self, from_address: str, to_address: str, value_wei: int) -> int: ...
    def resolve_name(self, name: str) -> str | None: ...
    def send_transfer(
        self,
        private_key: bytes,
        to_address: str,
        value_wei: int,
        gas: int | None = None,
        gas_price: int | None = None,
    ) -> str: ...
    def get_receipt(self, tx_hash: str) -> dict[str, Any] | None: ...
