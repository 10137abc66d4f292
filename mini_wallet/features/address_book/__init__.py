"""Address book feature module for Mini Wallet."""

from mini_wallet.features.address_book.handlers import AddressBookHandlersMixin
from mini_wallet.features.address_book.screen import (
    AddContactScreen,
    AddressBookScreen,
    DeleteContactConfirmScreen,
)
from mini_wallet.features.address_book.service import AddressBookService, Contact

__all__ = [
    "AddressBookHandlersMixin",
    "AddressBookService",
    "Contact",
    "AddressBookScreen",
    "AddContactScreen",
    "DeleteContactConfirmScreen",
]
