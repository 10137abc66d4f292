"""Transfer feature module for Mini Wallet."""

from mini_wallet.features.transfer.handlers import TransferHandlersMixin
from mini_wallet.features.transfer.screen import TransferConfirmScreen
from mini_wallet.features.transfer.service import (
    CostEstimate,
    EstimateStatus,
    TransferOutcome,
    TransferService,
    TransferState,
    TransferStatus,
)

__all__ = [
    "TransferHandlersMixin",
    "TransferConfirmScreen",
    "TransferService",
    "TransferState",
    "TransferStatus",
    "TransferOutcome",
    "CostEstimate",
    "EstimateStatus",
]
