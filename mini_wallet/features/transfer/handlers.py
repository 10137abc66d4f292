"""Transfer event handlers for Mini Wallet TUI."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from textual.widgets import Button, Input, Static
from web3 import Web3

from mini_wallet.features.transfer.screen import TransferConfirmScreen
from mini_wallet.features.transfer.service import (
    CostEstimate,
    EstimateStatus,
    TransferOutcome,
    TransferService,
    TransferState,
    TransferStatus,
)
from mini_wallet.shared.scheduling import Debouncer
from mini_wallet.shared.validation import AmountValidator, ValidationResult, is_ens_name
from mini_wallet.wallet import SessionManager, WalletSession

if TYPE_CHECKING:
    from mini_wallet.__main__ import WalletApp

logger = logging.getLogger(__name__)

FEE_PLACEHOLDER = "Estimated fee: -"


class TransferHandlersMixin:
    """Mixin class providing transfer-related event handlers for WalletApp."""

    transfer_service: TransferService
    sessions: SessionManager
    _estimate_debouncer: Debouncer | None
    _estimate_generation: int
    _last_fee_text: str

    def schedule_estimate(self: "WalletApp") -> None:
        if self._estimate_debouncer is not None:
            self._estimate_debouncer.trigger()

    def on_input_changed(self: "WalletApp", event: Input.Changed) -> None:
        if event.input.id in ("recipient-input", "amount-input"):
            self.query_main("#send-error", Static).update("")
            self.schedule_estimate()

    def _set_fee_text(self: "WalletApp", text: str) -> None:
        self._last_fee_text = text
        self.query_main("#fee-estimate", Static).update(text)

    def run_estimate(self: "WalletApp") -> None:
        """Re-price the form in the background; stale answers are dropped."""
        self._estimate_generation += 1
        generation = self._estimate_generation
        resolution_widget = self.query_main("#recipient-resolution", Static)

        session = self.sessions.session
        recipient = self.query_main("#recipient-input", Input).value.strip()
        amount = self.query_main("#amount-input", Input).value.strip()
        if session is None or not recipient:
            resolution_widget.update("")
            self._set_fee_text(FEE_PLACEHOLDER)
            return
        if not AmountValidator.validate_full(amount).is_valid:
            self._set_fee_text(FEE_PLACEHOLDER)
            return

        if is_ens_name(recipient):
            resolution_widget.update("[dim]Resolving ENS name...[/dim]")
        self._set_fee_text("Estimated fee: calculating...")

        def worker() -> None:
            resolution = self.transfer_service.resolve_recipient(recipient)
            estimate = None
            if resolution.is_valid:
                estimate = self.transfer_service.estimate_cost(
                    resolution.normalized_value, amount
                )
            self.call_from_thread(
                self._on_estimate_finished,
                generation,
                session,
                recipient,
                resolution,
                estimate,
            )

        threading.Thread(target=worker, daemon=True).start()

    def _on_estimate_finished(
        self: "WalletApp",
        generation: int,
        session: WalletSession,
        recipient: str,
        resolution: ValidationResult,
        estimate: CostEstimate | None,
    ) -> None:
        if generation != self._estimate_generation or not self.sessions.is_current(
            session
        ):
            return

        resolution_widget = self.query_main("#recipient-resolution", Static)
        if not resolution.is_valid:
            resolution_widget.update(f"[red]{resolution.error_message}[/red]")
            self._set_fee_text(FEE_PLACEHOLDER)
            return
        if is_ens_name(recipient):
            resolution_widget.update(f"[green]Resolved: {resolution.normalized_value}[/green]")
        else:
            resolution_widget.update("")

        if estimate is None or estimate.status == EstimateStatus.INVALID:
            self._set_fee_text(FEE_PLACEHOLDER)
        elif estimate.status == EstimateStatus.UNAVAILABLE:
            self._set_fee_text("Estimated fee: Unavailable")
        else:
            fee = Web3.from_wei(estimate.fee_wei, "ether")
            self._set_fee_text(f"Estimated fee: {fee} {self.settings.native_symbol}")

    def _set_send_enabled(self: "WalletApp", enabled: bool) -> None:
        button = self.query_main("#send-button", Button)
        button.disabled = not enabled
        button.label = "🚀 Send" if enabled else "Sending..."

    def send_transaction(self: "WalletApp") -> None:
        if self.sessions.session is None:
            self.notify("Please create or import a wallet first.", severity="information")
            return
        if self.transfer_service.is_submitting:
            self.notify("A transaction is already being sent.", severity="warning")
            return

        recipient = self.query_main("#recipient-input", Input).value.strip()
        amount = self.query_main("#amount-input", Input).value.strip()
        error_widget = self.query_main("#send-error", Static)
        if not recipient:
            error_widget.update("[red]Please enter a valid address or ENS name.[/red]")
            return
        if not AmountValidator.validate_full(amount).is_valid:
            error_widget.update("[red]Please enter a valid amount greater than 0.[/red]")
            return

        def on_confirmed(confirmed: Any) -> None:
            if confirmed:
                self._submit_transfer_async(recipient, amount)

        self.push_screen(
            TransferConfirmScreen(
                recipient, amount, self.settings.native_symbol, self._last_fee_text
            ),
            on_confirmed,
        )

    def _submit_transfer_async(self: "WalletApp", recipient: str, amount: str) -> None:
        session = self.sessions.session
        self._set_send_enabled(False)
        self.query_main("#tx-status", Static).update("")

        def on_state(state: TransferState, detail: str) -> None:
            self.call_from_thread(self._on_transfer_state, session, state, detail)

        def on_broadcast(tx_hash: str) -> None:
            self.call_from_thread(self._on_transfer_broadcast, session, tx_hash)

        def worker() -> None:
            try:
                outcome = self.transfer_service.submit_transfer(
                    recipient, amount, on_state=on_state, on_broadcast=on_broadcast
                )
            except Exception as e:
                logger.error("Transfer worker crashed: %s", e, exc_info=True)
                outcome = TransferOutcome(
                    status=TransferStatus.FAILED, error_message=str(e)
                )
            self.call_from_thread(self._on_transfer_finished, session, outcome)

        threading.Thread(target=worker, daemon=True).start()

    def _on_transfer_state(
        self: "WalletApp", session: WalletSession | None, state: TransferState, detail: str
    ) -> None:
        if not self.sessions.is_current(session):
            return
        if state in (
            TransferState.VALIDATING,
            TransferState.ESTIMATING,
            TransferState.SUBMITTING,
        ):
            self.query_main("#tx-status", Static).update(
                f"[yellow]{detail}...[/yellow]"
            )

    def _on_transfer_broadcast(
        self: "WalletApp", session: WalletSession | None, tx_hash: str
    ) -> None:
        if not self.sessions.is_current(session):
            return
        url = self.transfer_service.explorer_url(tx_hash)
        self.query_main("#tx-status", Static).update(
            f"[yellow]Transaction sent! Waiting for confirmation...[/yellow]\n{url}"
        )

    def _on_transfer_finished(
        self: "WalletApp", session: WalletSession | None, outcome: TransferOutcome
    ) -> None:
        self._set_send_enabled(True)
        if not self.sessions.is_current(session):
            logger.info(
                "Dropping %s outcome of a replaced session: hash=%s",
                outcome.status.value,
                outcome.tx_hash,
            )
            return
        status_widget = self.query_main("#tx-status", Static)
        error_widget = self.query_main("#send-error", Static)
        url = self.transfer_service.explorer_url(outcome.tx_hash) if outcome.tx_hash else ""

        if outcome.status == TransferStatus.CONFIRMED:
            status_widget.update(f"[green]Transaction confirmed! ✅[/green]\n{url}")
            self.notify("Transaction successful!", severity="information")
            self.query_main("#recipient-input", Input).value = ""
            self.query_main("#amount-input", Input).value = ""
            self.refresh_history_async()
        elif outcome.status == TransferStatus.REVERTED:
            status_widget.update(f"[red]Transaction failed. ❌[/red]\n{url}")
            self.notify("Transaction failed to confirm.", severity="error")
            self.refresh_history_async()
        elif outcome.status == TransferStatus.PENDING:
            status_widget.update(f"[yellow]{outcome.error_message}[/yellow]\n{url}")
        elif outcome.status == TransferStatus.INVALID:
            status_widget.update("")
            error_widget.update(f"[red]{outcome.error_message}[/red]")
        elif outcome.status == TransferStatus.INSUFFICIENT_FUNDS:
            status_widget.update("")
            self.notify(outcome.error_message or "Insufficient funds.", severity="error")
        elif outcome.status == TransferStatus.BUSY:
            self.notify(outcome.error_message or "Busy", severity="warning")
        else:
            status_widget.update(f"[red]Error: {outcome.error_message}[/red]")
            self.notify(outcome.error_message or "Transaction failed.", severity="error")
