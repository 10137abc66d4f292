"""Address book event handlers for Mini Wallet TUI."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from textual.widgets import Input

from mini_wallet.features.address_book.screen import (
    AddContactScreen,
    AddressBookScreen,
    DeleteContactConfirmScreen,
)
from mini_wallet.features.address_book.service import AddressBookService
from mini_wallet.shared.validation import ValidationResult

if TYPE_CHECKING:
    from mini_wallet.__main__ import WalletApp

logger = logging.getLogger(__name__)


class AddressBookHandlersMixin:
    """Mixin class providing address book-related event handlers for WalletApp."""

    address_book: AddressBookService

    def show_address_book(self: "WalletApp") -> None:
        self.push_screen(AddressBookScreen(self.address_book.search))

    def save_contact(self: "WalletApp", name: str, address: str) -> ValidationResult:
        result = self.address_book.add_contact(name, address)
        if result.is_valid:
            self.notify("Contact saved", severity="information")
        return result

    def on_address_book_screen_add_contact_requested(
        self: "WalletApp", event: Any
    ) -> None:
        self.push_screen(AddContactScreen(self.save_contact))

    def on_address_book_screen_delete_contact_requested(
        self: "WalletApp", event: Any
    ) -> None:
        contact = self.address_book.find_contact(event.address)
        if contact is None:
            self.notify("Contact not found", severity="warning")
            return
        self.push_screen(DeleteContactConfirmScreen(contact))

    def on_delete_contact_confirm_screen_delete_contact_confirmed(
        self: "WalletApp", event: Any
    ) -> None:
        if self.address_book.remove_contact(event.address, confirmed=True):
            self.notify("Contact deleted", severity="information")
        if isinstance(self.screen, AddressBookScreen):
            self.screen.refresh_contacts()

    def on_address_book_screen_send_to_address(
        self: "WalletApp", event: Any
    ) -> None:
        self.query_main("#recipient-input", Input).value = event.address
        self.switch_tab("send-tab-btn")
        self.schedule_estimate()
