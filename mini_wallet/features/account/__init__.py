"""Account management feature for Mini Wallet."""

from mini_wallet.features.account.handlers import AccountHandlersMixin
from mini_wallet.features.account.screens import ImportWalletScreen

__all__ = ["AccountHandlersMixin", "ImportWalletScreen"]
