"""Web3 chain client for the wallet's Ethereum network."""

from __future__ import annotations

import logging
from typing import Any

from web3 import Web3
from web3.exceptions import TransactionNotFound

from mini_wallet.config import WalletSettings

logger = logging.getLogger(__name__)


class ChainClient:
    """Thin wrapper over a ``Web3`` HTTP connection.

    Every method raises whatever web3/requests raise on network failure;
    callers decide how to surface it.
    """

    def __init__(self, settings: WalletSettings, web3: Web3 | None = None):
        self.settings = settings
        self.chain_id = settings.chain_id
        self.explorer_url = settings.explorer_url.rstrip("/")
        self.w3 = web3 or Web3(
            Web3.HTTPProvider(
                settings.rpc_url,
                request_kwargs={"timeout": settings.timeout_config.request_timeout},
            )
        )

    def get_balance(self, address: str) -> int:
        return self.w3.eth.get_balance(Web3.to_checksum_address(address))

    def get_gas_price(self) -> int:
        return self.w3.eth.gas_price

    def estimate_gas(self, from_address: str, to_address: str, value_wei: int) -> int:
        return self.w3.eth.estimate_gas(
            {
                "from": Web3.to_checksum_address(from_address),
                "to": Web3.to_checksum_address(to_address),
                "value": value_wei,
            }
        )

    def resolve_name(self, name: str) -> str | None:
        address = self.w3.ens.address(name)
        if address is None:
            return None
        return Web3.to_checksum_address(address)

    def send_transfer(
        self,
        private_key: bytes,
        to_address: str,
        value_wei: int,
        gas: int | None = None,
        gas_price: int | None = None,
    ) -> str:
        """Build, sign, and broadcast a native-token transfer.

        When ``gas`` and ``gas_price`` come from a fresh estimate they are
        used as-is (legacy pricing) so the broadcast fee matches the checked
        one. Otherwise EIP-1559 fees are derived from the latest block, with
        a legacy gas price fallback.

        Returns the transaction hash as a ``0x``-prefixed hex string.
        """
        account = self.w3.eth.account.from_key(private_key)
        tx: dict[str, Any] = {
            "to": Web3.to_checksum_address(to_address),
            "value": value_wei,
            "nonce": self.w3.eth.get_transaction_count(account.address),
            "chainId": self.chain_id,
        }

        if gas_price is not None:
            tx["gasPrice"] = gas_price
        else:
            latest = self.w3.eth.get_block("latest")
            base_fee = latest.get("baseFeePerGas")
            if base_fee is not None:
                max_priority = Web3.to_wei(1.5, "gwei")
                tx["maxFeePerGas"] = base_fee * 2 + max_priority
                tx["maxPriorityFeePerGas"] = max_priority
            else:
                tx["gasPrice"] = self.w3.eth.gas_price

        tx["gas"] = gas if gas is not None else self.w3.eth.estimate_gas(
            {"from": account.address, "to": tx["to"], "value": value_wei}
        )

        signed = self.w3.eth.account.sign_transaction(tx, private_key)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        hex_hash = Web3.to_hex(tx_hash)
        logger.info("Transfer broadcast: hash=%s", hex_hash)
        return hex_hash

    def get_receipt(self, tx_hash: str) -> dict[str, Any] | None:
        try:
            receipt = self.w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None
        return dict(receipt)
