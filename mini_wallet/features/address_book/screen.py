"""Address book modal screens for Mini Wallet."""

from __future__ import annotations

import logging
from typing import Callable, cast

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.message import Message
from textual.widgets import Button, DataTable, Input, Label, Static

from mini_wallet.features.address_book.service import Contact
from mini_wallet.screens import BaseModalScreen
from mini_wallet.shared.validation import ValidationResult

logger = logging.getLogger(__name__)


class AddressBookScreen(BaseModalScreen):
    """Lists contacts; rows can be used as recipient, added or deleted."""

    BINDINGS = BaseModalScreen.BINDINGS + [("enter", "use_selected", "Use")]

    def __init__(self, search_contacts: Callable[[str], list[Contact]]):
        super().__init__()
        self.search_contacts = search_contacts
        self._addresses: list[str] = []

    def compose(self) -> ComposeResult:
        yield Label("📒 Address Book")
        yield Input(placeholder="Search by name or address", id="contact-search-input")
        yield DataTable(id="address-book-table", cursor_type="row")
        yield Static("", id="address-book-empty")
        yield Horizontal(
            Button("📤 Use", id="use-button", variant="primary"),
            Button("➕ Add", id="add-button"),
            Button("🗑️ Delete", id="delete-button", variant="error"),
            Button("❌ Close", id="close-button"),
        )

    def on_mount(self) -> None:
        table = cast(DataTable, self.query_one("#address-book-table"))
        table.add_column("Name", key="name")
        table.add_column("Address", key="address")
        self.refresh_contacts()

    def on_screen_resume(self) -> None:
        self.refresh_contacts()

    def refresh_contacts(self) -> None:
        query = cast(Input, self.query_one("#contact-search-input")).value
        table = cast(DataTable, self.query_one("#address-book-table"))
        table.clear()
        contacts = self.search_contacts(query)
        self._addresses = [contact.address for contact in contacts]
        for contact in contacts:
            table.add_row(contact.name, contact.address, key=contact.address)

        empty = cast(Static, self.query_one("#address-book-empty"))
        if contacts:
            empty.update("")
        elif query:
            empty.update("[dim]No matching contacts[/dim]")
        else:
            empty.update("[dim]No contacts yet[/dim]")

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "contact-search-input":
            self.refresh_contacts()

    def _get_selected_address(self) -> str | None:
        table = cast(DataTable, self.query_one("#address-book-table"))
        cursor_row = table.cursor_row
        if cursor_row is not None and 0 <= cursor_row < len(self._addresses):
            return self._addresses[cursor_row]
        return None

    def action_use_selected(self) -> None:
        address = self._get_selected_address()
        if address:
            self.post_message(self.SendToAddress(address=address))
            self.app.pop_screen()

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        self.action_use_selected()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "use-button":
            self.action_use_selected()
        elif event.button.id == "add-button":
            self.post_message(self.AddContactRequested())
        elif event.button.id == "delete-button":
            address = self._get_selected_address()
            if address:
                self.post_message(self.DeleteContactRequested(address=address))
        elif event.button.id == "close-button":
            self.app.pop_screen()

    class SendToAddress(Message):
        def __init__(self, address: str):
            super().__init__()
            self.address = address

    class AddContactRequested(Message):
        pass

    class DeleteContactRequested(Message):
        def __init__(self, address: str):
            super().__init__()
            self.address = address


class AddContactScreen(BaseModalScreen):
    """Collects a name and address; stays open with an inline error on rejection."""

    def __init__(self, on_save: Callable[[str, str], ValidationResult]):
        super().__init__()
        self.on_save = on_save

    def compose(self) -> ComposeResult:
        yield Label("➕ Add to Address Book")
        yield Input(placeholder="Name", id="name-input")
        yield Input(placeholder="Address (0x...)", id="address-input")
        yield Static("", id="contact-error")
        yield Horizontal(
            Button("✓ Save", id="save-button", variant="primary"),
            Button("✗ Cancel", id="cancel-button"),
        )

    def on_mount(self) -> None:
        cast(Input, self.query_one("#name-input")).focus()

    def _save(self) -> None:
        name = cast(Input, self.query_one("#name-input")).value
        address = cast(Input, self.query_one("#address-input")).value
        result = self.on_save(name, address)
        if result.is_valid:
            self.app.pop_screen()
            return
        cast(Static, self.query_one("#contact-error")).update(
            f"[red]{result.error_message}[/red]"
        )
        focus_id = "#name-input" if result.field == "name" else "#address-input"
        cast(Input, self.query_one(focus_id)).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._save()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "save-button":
            self._save()
        elif event.button.id == "cancel-button":
            self.app.pop_screen()


class DeleteContactConfirmScreen(BaseModalScreen):
    def __init__(self, contact: Contact):
        super().__init__()
        self.contact = contact

    def compose(self) -> ComposeResult:
        yield Label("🗑️ Delete Contact?")
        yield Label(f"Are you sure you want to delete '{self.contact.name}'?")
        yield Label(self.contact.address)
        yield Horizontal(
            Button("🗑️ Delete", id="confirm-button", variant="error"),
            Button("✗ Cancel", id="cancel-button"),
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "confirm-button":
            self.post_message(self.DeleteContactConfirmed(address=self.contact.address))
            self.app.pop_screen()
        elif event.button.id == "cancel-button":
            self.app.pop_screen()

    class DeleteContactConfirmed(Message):
        def __init__(self, address: str):
            super().__init__()
            self.address = address
