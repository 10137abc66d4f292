"""Modal screens shared across Mini Wallet features."""

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.message import Message
from textual.screen import ModalScreen
from textual.widgets import Button, Label


class BaseModalScreen(ModalScreen):
    """Base modal screen with common key bindings."""

    BINDINGS = [
        ("escape", "app.pop_screen", "Close"),
        ("tab", "focus_next", "Next"),
        ("shift+tab", "focus_previous", "Previous"),
    ]


class LogoutConfirmScreen(BaseModalScreen):
    def compose(self) -> ComposeResult:
        yield Label("🚪 Logout?")
        yield Label("The session key is removed from this machine.")
        yield Label("Make sure you saved the private key if you need it again.")
        yield Horizontal(
            Button("🚪 Logout", id="confirm-button", variant="error"),
            Button("✗ Cancel", id="cancel-button"),
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "confirm-button":
            self.post_message(self.LogoutConfirmed())
            self.app.pop_screen()
        elif event.button.id == "cancel-button":
            self.app.pop_screen()

    class LogoutConfirmed(Message):
        pass
