"""History table handlers for Mini Wallet TUI."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from textual.widgets import DataTable

from mini_wallet.features.history.service import (
    HistoryResult,
    HistoryService,
    HistoryStatus,
)
from mini_wallet.shared.validation import truncate_address
from mini_wallet.wallet import SessionManager, WalletSession

if TYPE_CHECKING:
    from mini_wallet.__main__ import WalletApp

logger = logging.getLogger(__name__)


class HistoryHandlersMixin:
    """Mixin class providing transaction history handlers for WalletApp."""

    history_service: HistoryService
    sessions: SessionManager
    _history_hashes: list[str]

    def _show_history_message(self: "WalletApp", message: str) -> None:
        table = self.query_main("#history-table", DataTable)
        table.clear(columns=True)
        table.add_column("History", key="message")
        table.add_row(message)
        self._history_hashes = []

    def refresh_history_async(self: "WalletApp") -> None:
        session = self.sessions.session
        if session is None:
            self._show_history_message("[dim]No wallet loaded[/dim]")
            return

        self._show_history_message("[yellow]Loading history...[/yellow]")

        def worker() -> None:
            result = self.history_service.fetch_history(session.address)
            self.call_from_thread(self._on_history_refresh_finished, session, result)

        threading.Thread(target=worker, daemon=True).start()

    def _on_history_refresh_finished(
        self: "WalletApp", session: WalletSession, result: HistoryResult
    ) -> None:
        if not self.sessions.is_current(session):
            logger.debug("Dropping history for replaced session %d", session.generation)
            return

        if result.status == HistoryStatus.NOT_CONFIGURED:
            self._show_history_message(f"[dim]{result.error_message}[/dim]")
            return
        if result.status == HistoryStatus.NONE:
            self._show_history_message("No transactions found for this address.")
            return
        if result.status == HistoryStatus.ERROR:
            self._show_history_message(f"[red]{result.error_message}[/red]")
            return

        table = self.query_main("#history-table", DataTable)
        table.clear(columns=True)
        table.add_column("Dir", key="direction")
        table.add_column("Amount", key="amount")
        table.add_column("Counterparty", key="counterparty")
        table.add_column("Hash", key="hash")
        self._history_hashes = []
        symbol = self.settings.native_symbol
        for record in result.records:
            direction = (
                "[red]OUT[/red]" if record.is_outgoing else "[green]IN[/green]"
            )
            label = "To" if record.is_outgoing else "From"
            amount = f"{record.value_ether:.5f} {symbol}"
            if record.failed:
                amount += " [red](failed)[/red]"
            table.add_row(
                direction,
                amount,
                f"{label}: {truncate_address(record.counterparty)}",
                truncate_address(record.tx_hash),
            )
            self._history_hashes.append(record.tx_hash)

    def on_data_table_row_selected(self: "WalletApp", event: DataTable.RowSelected) -> None:
        if event.data_table.id != "history-table":
            return
        if 0 <= event.cursor_row < len(self._history_hashes):
            tx_hash = self._history_hashes[event.cursor_row]
            self.notify(self.transfer_service.explorer_url(tx_hash), title="Transaction")
