"""Transaction history lookup through the Etherscan account API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from web3 import Web3

from mini_wallet.config import WalletSettings
from mini_wallet.shared.network import NetworkClient, NetworkError

logger = logging.getLogger(__name__)

NO_TRANSACTIONS_MESSAGE = "No transactions found"


class HistoryStatus(Enum):
    FOUND = "found"
    NONE = "none"
    ERROR = "error"
    NOT_CONFIGURED = "not_configured"


@dataclass(frozen=True)
class TransferRecord:
    tx_hash: str
    direction: str
    counterparty: str
    value_wei: int
    timestamp: int
    failed: bool = False

    @property
    def is_outgoing(self) -> bool:
        return self.direction == "OUT"

    @property
    def value_ether(self) -> Decimal:
        return Decimal(str(Web3.from_wei(self.value_wei, "ether")))


@dataclass
class HistoryResult:
    status: HistoryStatus
    records: list[TransferRecord] = field(default_factory=list)
    error_message: str | None = None


class HistoryService:
    def __init__(
        self,
        settings: WalletSettings,
        client: NetworkClient | None = None,
    ):
        self.settings = settings
        self.limit = settings.history_limit
        self.client = client or NetworkClient(
            settings.etherscan_api_url,
            timeout_config=settings.timeout_config,
            retry_config=settings.retry_config,
        )

    def fetch_history(self, address: str) -> HistoryResult:
        """Return the newest transactions touching ``address``, newest first."""
        if not self.settings.history_enabled:
            return HistoryResult(
                status=HistoryStatus.NOT_CONFIGURED,
                error_message="Add an Etherscan API key to view history.",
            )

        params = {
            "chainid": self.settings.chain_id,
            "module": "account",
            "action": "txlist",
            "address": address,
            "startblock": 0,
            "endblock": 99999999,
            "sort": "desc",
            "apikey": self.settings.etherscan_api_key,
        }
        try:
            data = self.client.get(params=params, context="Fetch transaction history")
        except NetworkError as e:
            logger.warning("History request failed: %s", e)
            return HistoryResult(
                status=HistoryStatus.ERROR,
                error_message="Could not load transaction history.",
            )

        if not isinstance(data, dict):
            return HistoryResult(
                status=HistoryStatus.ERROR,
                error_message="Could not load transaction history.",
            )

        if data.get("status") != "1":
            if data.get("message") == NO_TRANSACTIONS_MESSAGE:
                return HistoryResult(status=HistoryStatus.NONE)
            logger.warning("Etherscan returned an error: %s", data.get("message"))
            return HistoryResult(
                status=HistoryStatus.ERROR,
                error_message=data.get("message") or "Could not fetch history.",
            )

        entries = data.get("result") or []
        records = [
            record
            for record in (
                self._parse_entry(entry, address) for entry in entries[: self.limit]
            )
            if record is not None
        ]
        if not records:
            return HistoryResult(status=HistoryStatus.NONE)
        return HistoryResult(status=HistoryStatus.FOUND, records=records)

    @staticmethod
    def _parse_entry(entry: Any, address: str) -> TransferRecord | None:
        if not isinstance(entry, dict):
            return None
        try:
            sender = str(entry.get("from", ""))
            receiver = str(entry.get("to", ""))
            is_out = sender.lower() == address.lower()
            return TransferRecord(
                tx_hash=str(entry["hash"]),
                direction="OUT" if is_out else "IN",
                counterparty=receiver if is_out else sender,
                value_wei=int(entry.get("value", 0)),
                timestamp=int(entry.get("timeStamp", 0)),
                failed=entry.get("isError") == "1"
                or entry.get("txreceipt_status") == "0",
            )
        except (KeyError, ValueError) as e:
            logger.debug("Skipping malformed history entry: %s", e)
            return None
