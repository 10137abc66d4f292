"""Transfer-related modal screens for Mini Wallet."""

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Button, Label, Static

from mini_wallet.screens import BaseModalScreen


class TransferConfirmScreen(BaseModalScreen):
    """Asks for confirmation before signing; dismisses with ``True`` or ``False``."""

    BINDINGS = BaseModalScreen.BINDINGS + [("enter", "confirm", "Confirm")]

    def __init__(self, recipient: str, amount: str, symbol: str, fee_text: str):
        super().__init__()
        self.recipient = recipient
        self.amount = amount
        self.symbol = symbol
        self.fee_text = fee_text

    def compose(self) -> ComposeResult:
        yield Label("✅ Confirm Transaction", id="confirm-title")
        yield Static(f"📤 Recipient: {self.recipient}")
        yield Static(f"💰 Amount: {self.amount} {self.symbol}")
        yield Static(f"⚡ {self.fee_text}")
        yield Horizontal(
            Button("✓ Confirm", id="confirm-button", variant="primary"),
            Button("✗ Cancel", id="cancel-button"),
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "confirm-button":
            self.dismiss(True)
        elif event.button.id == "cancel-button":
            self.dismiss(False)

    def action_confirm(self) -> None:
        self.dismiss(True)
