"""Transaction history feature for Mini Wallet."""

from mini_wallet.features.history.handlers import HistoryHandlersMixin
from mini_wallet.features.history.service import (
    HistoryResult,
    HistoryService,
    HistoryStatus,
    TransferRecord,
)

__all__ = [
    "HistoryHandlersMixin",
    "HistoryService",
    "HistoryResult",
    "HistoryStatus",
    "TransferRecord",
]
