"""Account-related modal screens for Mini Wallet."""

from __future__ import annotations

from typing import Callable, cast

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Button, Input, Label, Static

from mini_wallet.screens import BaseModalScreen
from mini_wallet.shared.validation import ValidationResult


class ImportWalletScreen(BaseModalScreen):
    """Private key prompt; rejected keys keep the dialog open with an inline error."""

    def __init__(self, on_import: Callable[[str], ValidationResult]):
        super().__init__()
        self.on_import = on_import

    def compose(self) -> ComposeResult:
        yield Label("📥 Import Wallet")
        yield Input(
            placeholder="Private Key (0x...)", id="private-key-input", password=True
        )
        yield Static("", id="import-error")
        yield Label("⚠️ Never share your private key with anyone!")
        yield Horizontal(
            Button("✓ Import", id="import-button", variant="primary"),
            Button("✗ Cancel", id="cancel-button"),
        )

    def on_mount(self) -> None:
        cast(Input, self.query_one("#private-key-input")).focus()

    def _submit(self) -> None:
        key_input = cast(Input, self.query_one("#private-key-input"))
        private_key = key_input.value
        key_input.value = ""
        result = self.on_import(private_key)
        if result.is_valid:
            self.app.pop_screen()
            return
        cast(Static, self.query_one("#import-error")).update(
            f"[red]{result.error_message}[/red]"
        )
        key_input.focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "private-key-input":
            self._submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "import-button":
            self._submit()
        elif event.button.id == "cancel-button":
            self.app.pop_screen()
