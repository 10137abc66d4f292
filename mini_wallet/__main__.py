"""Main application entry point for Mini Wallet."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, TypeVar

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.widget import Widget
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Input,
    Label,
    Static,
    Tab,
    Tabs,
)

from mini_wallet.chain import ChainClient
from mini_wallet.config import WalletSettings, load_settings, resolve_wallet_dir
from mini_wallet.features.account.handlers import FAUCET_HINT, AccountHandlersMixin
from mini_wallet.features.address_book.handlers import AddressBookHandlersMixin
from mini_wallet.features.address_book.service import AddressBookService
from mini_wallet.features.history.handlers import HistoryHandlersMixin
from mini_wallet.features.history.service import HistoryService
from mini_wallet.features.transfer.handlers import TransferHandlersMixin
from mini_wallet.features.transfer.service import TransferService
from mini_wallet.shared.logging import setup_logging
from mini_wallet.shared.protocols import ChainClientProtocol, KeyValueStore
from mini_wallet.shared.scheduling import Debouncer, TimerHandle
from mini_wallet.storage import open_durable_store, open_session_store
from mini_wallet.styles import CSS
from mini_wallet.wallet import SessionEvent, SessionManager, WalletSession

logger = logging.getLogger(__name__)

WidgetType = TypeVar("WidgetType", bound=Widget)

TAB_CONTAINERS = {
    "dashboard-tab-btn": "dashboard-tab",
    "send-tab-btn": "send-tab",
    "history-tab-btn": "history-tab",
}


class WalletApp(
    TransferHandlersMixin,
    AddressBookHandlersMixin,
    AccountHandlersMixin,
    HistoryHandlersMixin,
    App,
):
    CSS = CSS
    TITLE = "Mini Wallet"

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("c", "create_wallet", "Create"),
        ("i", "import_wallet", "Import"),
        ("b", "address_book", "Address Book"),
        ("r", "refresh", "Refresh"),
        ("ctrl+l", "logout", "Logout"),
    ]

    def __init__(
        self,
        settings: WalletSettings | None = None,
        wallet_dir: Path | None = None,
        chain: ChainClientProtocol | None = None,
        session_store: KeyValueStore | None = None,
        durable_store: KeyValueStore | None = None,
    ):
        super().__init__()
        self.wallet_dir = resolve_wallet_dir(wallet_dir)
        self.settings = settings or load_settings(self.wallet_dir)
        self.chain = chain or ChainClient(self.settings)

        self.sessions = SessionManager(
            self.chain,
            session_store
            or open_session_store(passphrase=self.settings.session_passphrase),
            refresh_interval=self.settings.refresh_interval_seconds,
            scheduler=self._start_interval,
        )
        self.sessions.add_listener(self._on_session_event_threadsafe)
        self.transfer_service = TransferService(
            self.chain,
            self.sessions,
            poll_interval_seconds=self.settings.receipt_poll_interval_seconds,
        )
        self.address_book = AddressBookService(
            durable_store or open_durable_store(self.wallet_dir)
        )
        self.history_service = HistoryService(self.settings)

        self._ui_thread_id: int | None = None
        self._estimate_debouncer: Debouncer | None = None
        self._estimate_generation = 0
        self._last_fee_text = "Estimated fee: -"
        self._history_hashes: list[str] = []

    def _start_interval(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        return self.set_interval(interval, callback)

    def _start_timer(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return self.set_timer(delay, callback)

    def query_main(self, selector: str, expect_type: type[WidgetType]) -> WidgetType:
        """Query the base screen, even while a modal is on top of it."""
        return self.screen_stack[0].query_one(selector, expect_type)

    def switch_tab(self, tab_id: str) -> None:
        self.screen_stack[0].query_one(Tabs).active = tab_id

    def _on_session_event_threadsafe(
        self, event: SessionEvent, session: WalletSession | None
    ) -> None:
        if threading.get_ident() == self._ui_thread_id:
            self.on_session_event(event, session)
        else:
            self.call_from_thread(self.on_session_event, event, session)

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(
            f"[dim]● {self.settings.network_name} · {self.settings.rpc_url}[/dim]",
            id="network-status",
        )
        yield Tabs(
            Tab("Dashboard", id="dashboard-tab-btn"),
            Tab("Send", id="send-tab-btn"),
            Tab("History", id="history-tab-btn"),
        )

        with Container(id="dashboard-tab"):
            yield Label("📊 Dashboard", id="dashboard-title")
            yield Static(
                "No wallet loaded. Create a new wallet or import a private key.",
                id="wallet-prompt",
            )
            with Container(id="wallet-details"):
                yield Static(id="wallet-address")
                yield Static(id="wallet-key")
                yield Static(id="wallet-balance")
            yield Static(FAUCET_HINT, id="faucet-hint")
            yield Horizontal(
                Button("🔑 Create Wallet", id="create-wallet-button", variant="primary"),
                Button("📥 Import Wallet", id="import-wallet-button"),
                Button("📋 Copy Address", id="copy-address-button"),
            )
            yield Horizontal(
                Button("📒 Address Book", id="address-book-button"),
                Button("🔄 Refresh", id="refresh-button"),
                Button("🚪 Logout", id="logout-button", variant="error"),
            )

        with Container(id="send-tab", classes="hidden"):
            yield Label("📤 Send", id="send-title")
            yield Label("Recipient (address or ENS name)")
            yield Input(placeholder="0x... or name.eth", id="recipient-input")
            yield Static(id="recipient-resolution")
            yield Label("Amount")
            yield Input(placeholder="0.01", id="amount-input")
            yield Static(self._last_fee_text, id="fee-estimate")
            yield Static(id="send-error")
            yield Horizontal(
                Button("📒 Select Contact", id="select-contact-button"),
                Button("🚀 Send", id="send-button", variant="primary"),
            )
            yield Static(id="tx-status")

        with Container(id="history-tab", classes="hidden"):
            yield Label("📜 Transaction History", id="history-title")
            yield DataTable(id="history-table", cursor_type="row")
            yield Button("🔄 Refresh", id="refresh-history-button")

        yield Footer()

    def on_mount(self) -> None:
        self._ui_thread_id = threading.get_ident()
        self._estimate_debouncer = Debouncer(
            self.settings.estimate_debounce_seconds,
            self.run_estimate,
            scheduler=self._start_timer,
        )
        logger.info("Mini Wallet started, data dir %s", self.wallet_dir)
        self.restore_wallet()

    def on_unmount(self) -> None:
        self.sessions.close()

    def on_tabs_tab_activated(self, event: Tabs.TabActivated) -> None:
        if not event.tab:
            return
        target = TAB_CONTAINERS.get(event.tab.id or "")
        if target is None:
            return
        for container_id in TAB_CONTAINERS.values():
            widget = self.query_one(f"#{container_id}")
            widget.set_class(container_id != target, "hidden")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        actions = {
            "create-wallet-button": self.create_wallet,
            "import-wallet-button": self.show_import_wallet_dialog,
            "copy-address-button": self.copy_address,
            "address-book-button": self.show_address_book,
            "select-contact-button": self.show_address_book,
            "refresh-button": self.refresh_wallet,
            "refresh-history-button": self.refresh_history_async,
            "logout-button": self.show_logout_dialog,
            "send-button": self.send_transaction,
        }
        action = actions.get(event.button.id or "")
        if action is not None:
            action()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "amount-input":
            self.send_transaction()

    def action_create_wallet(self) -> None:
        self.create_wallet()

    def action_import_wallet(self) -> None:
        self.show_import_wallet_dialog()

    def action_address_book(self) -> None:
        self.show_address_book()

    def action_refresh(self) -> None:
        self.refresh_wallet()

    def action_logout(self) -> None:
        self.show_logout_dialog()


def main():
    """Entry point for the application."""
    setup_logging()
    app = WalletApp()
    app.run()


if __name__ == "__main__":
    main()
