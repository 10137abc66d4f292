"""Address book business logic service for Mini Wallet."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass

from mini_wallet.shared.protocols import KeyValueStore
from mini_wallet.shared.validation import AddressValidator, ValidationResult

logger = logging.getLogger(__name__)

ADDRESS_BOOK_KEY = "miniWalletAddressBook"


@dataclass(frozen=True)
class Contact:
    name: str
    address: str


class AddressBookService:
    """Ordered contact list kept as a JSON array in the durable store."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def _load(self) -> list[Contact]:
        raw = self.store.get(ADDRESS_BOOK_KEY)
        if not raw:
            return []
        try:
            entries = json.loads(raw)
        except ValueError:
            logger.warning("Address book data is corrupt, ignoring it")
            return []
        if not isinstance(entries, list):
            return []

        contacts = []
        for entry in entries:
            if (
                isinstance(entry, dict)
                and isinstance(entry.get("name"), str)
                and isinstance(entry.get("address"), str)
            ):
                contacts.append(Contact(name=entry["name"], address=entry["address"]))
        return contacts

    def _save(self, contacts: list[Contact]) -> None:
        self.store.set(
            ADDRESS_BOOK_KEY, json.dumps([asdict(contact) for contact in contacts])
        )

    def list_contacts(self) -> list[Contact]:
        """Get all contacts in insertion order."""
        return self._load()

    def find_contact(self, address: str) -> Contact | None:
        needle = (address or "").strip().lower()
        for contact in self._load():
            if contact.address.lower() == needle:
                return contact
        return None

    def add_contact(self, name: str, address: str) -> ValidationResult:
        """Add a contact; on success ``normalized_value`` is the new ``Contact``."""
        name = (name or "").strip()
        if not name:
            return ValidationResult(
                is_valid=False,
                error_message="Please enter a contact name.",
                field="name",
            )

        address_result = AddressValidator.validate(address)
        if not address_result.is_valid:
            return address_result

        checksummed = address_result.normalized_value
        contacts = self._load()
        if any(c.address.lower() == checksummed.lower() for c in contacts):
            return ValidationResult(
                is_valid=False,
                error_message="Contact with this address already exists.",
                field="address",
            )

        contact = Contact(name=name, address=checksummed)
        contacts.append(contact)
        self._save(contacts)
        logger.info("Added contact %s", contact.address)
        return ValidationResult(is_valid=True, normalized_value=contact)

    def remove_contact(self, address: str, confirmed: bool = False) -> bool:
        """Remove a contact by address.

        Nothing changes unless ``confirmed`` is true. Returns whether a
        contact was removed.
        """
        if not confirmed:
            return False

        needle = (address or "").strip().lower()
        contacts = self._load()
        remaining = [c for c in contacts if c.address.lower() != needle]
        if len(remaining) == len(contacts):
            return False

        self._save(remaining)
        logger.info("Removed contact %s", address)
        return True

    def search(self, query: str) -> list[Contact]:
        """Search contacts by name or address."""
        query_lower = (query or "").strip().lower()
        return [
            contact
            for contact in self._load()
            if query_lower in contact.name.lower()
            or query_lower in contact.address.lower()
        ]
