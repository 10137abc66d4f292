"""Account management event handlers for Mini Wallet TUI."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from textual.containers import Container
from textual.widgets import Input, Static
from web3 import Web3

from mini_wallet.features.account.screens import ImportWalletScreen
from mini_wallet.screens import LogoutConfirmScreen
from mini_wallet.shared.clipboard import copy_text
from mini_wallet.shared.validation import ValidationResult
from mini_wallet.wallet import SessionEvent, SessionManager, WalletError, WalletSession

if TYPE_CHECKING:
    from mini_wallet.__main__ import WalletApp

logger = logging.getLogger(__name__)

FAUCET_HINT = (
    "Your balance is zero. Request test ETH from a Sepolia faucet, "
    "e.g. https://sepoliafaucet.com"
)


class AccountHandlersMixin:
    """Mixin class providing wallet session handlers for WalletApp."""

    sessions: SessionManager

    def create_wallet(self: "WalletApp") -> None:
        try:
            self.sessions.create_session()
        except WalletError as e:
            logger.error("Wallet creation failed: %s", e)
            self.notify("Could not generate wallet.", severity="error")
            return
        self.notify("New wallet created successfully!", severity="information")

    def show_import_wallet_dialog(self: "WalletApp") -> None:
        self.push_screen(ImportWalletScreen(self.import_wallet))

    def import_wallet(self: "WalletApp", private_key: str) -> ValidationResult:
        result = self.sessions.import_session(private_key)
        if result.is_valid:
            self.notify("Wallet imported successfully!", severity="information")
        return result

    def restore_wallet(self: "WalletApp") -> None:
        if self.sessions.restore_session() is None:
            self.update_dashboard()

    def show_logout_dialog(self: "WalletApp") -> None:
        if self.sessions.session is None:
            return
        self.push_screen(LogoutConfirmScreen())

    def on_logout_confirm_screen_logout_confirmed(
        self: "WalletApp", event: Any
    ) -> None:
        self.sessions.end_session()
        self.notify("Wallet cleared from this session.", severity="information")

    def copy_address(self: "WalletApp") -> None:
        session = self.sessions.session
        if session is None:
            return
        result = copy_text(session.address, prefer_osc52=True)
        if result.success:
            logger.info("Address copied using %s", result.method)
            self.notify("Address copied to clipboard!", severity="information")
        else:
            self.notify(f"Failed to copy address. {session.address}", severity="error")

    def refresh_wallet(self: "WalletApp") -> None:
        if self.sessions.session is None:
            return
        self.sessions.request_refresh()
        self.refresh_history_async()

    def on_session_event(
        self: "WalletApp", event: SessionEvent, session: WalletSession | None
    ) -> None:
        if event == SessionEvent.ACTIVATED:
            self._clear_send_form()
            self.update_dashboard()
            self.refresh_history_async()
        elif event == SessionEvent.BALANCE_UPDATED:
            if self.sessions.is_current(session):
                self.update_dashboard()
        elif event == SessionEvent.ENDED:
            self._clear_send_form()
            self.update_dashboard()
            self.refresh_history_async()

    def _clear_send_form(self: "WalletApp") -> None:
        self.query_main("#recipient-input", Input).value = ""
        self.query_main("#amount-input", Input).value = ""
        for widget_id in ("#recipient-resolution", "#send-error", "#tx-status"):
            self.query_main(widget_id, Static).update("")
        self._set_fee_text("Estimated fee: -")

    def update_dashboard(self: "WalletApp") -> None:
        session = self.sessions.session
        details = self.query_main("#wallet-details", Container)
        prompt = self.query_main("#wallet-prompt", Static)
        faucet = self.query_main("#faucet-hint", Static)

        if session is None:
            details.display = False
            prompt.display = True
            faucet.display = False
            return

        details.display = True
        prompt.display = False
        self.query_main("#wallet-address", Static).update(
            f"Address: {session.address}"
        )
        self.query_main("#wallet-key", Static).update(
            f"Private key: {session.display_key}"
        )

        balance_widget = self.query_main("#wallet-balance", Static)
        if session.balance_error:
            balance_widget.update(f"Balance: [red]{session.balance_error}[/red]")
            faucet.display = False
        elif session.balance_wei is None:
            balance_widget.update("Balance: Fetching...")
            faucet.display = False
        else:
            ether = Web3.from_wei(session.balance_wei, "ether")
            balance_widget.update(f"Balance: {ether} {self.settings.native_symbol}")
            faucet.display = session.balance_wei == 0
