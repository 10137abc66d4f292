"""Mini Wallet - a terminal-first Ethereum Sepolia wallet.

This package is organized into feature-based modules:
- features.account: Wallet creation, import, restore and logout
- features.transfer: Fee estimation and the send flow
- features.address_book: Saved contacts
- features.history: Recent transfers from the block explorer
- otp: Email one-time passcode service
- shared: Shared utilities (network, validation, logging, etc.)
"""

from mini_wallet.shared import (
    AddressValidator,
    AmountValidator,
    NetworkClient,
    NetworkError,
    NetworkErrorType,
    PrivateKeyValidator,
    RetryConfig,
    TimeoutConfig,
    ValidationResult,
)
from mini_wallet.wallet import SessionManager, WalletError, WalletSession

__version__ = "0.1.0"
__all__ = [
    "SessionManager",
    "WalletSession",
    "WalletError",
    "NetworkClient",
    "NetworkError",
    "NetworkErrorType",
    "RetryConfig",
    "TimeoutConfig",
    "AddressValidator",
    "AmountValidator",
    "PrivateKeyValidator",
    "ValidationResult",
]
