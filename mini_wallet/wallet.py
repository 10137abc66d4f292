"""Wallet session lifecycle: credentials, the active session and balance refresh."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from eth_account import Account

from mini_wallet.shared.protocols import ChainClientProtocol, KeyValueStore
from mini_wallet.shared.scheduling import Scheduler, TimerHandle, start_interval
from mini_wallet.shared.validation import PrivateKeyValidator, ValidationResult

logger = logging.getLogger(__name__)

SESSION_KEY_SLOT = "miniWalletSessionKey"
HIDDEN_KEY_LABEL = "Imported (hidden)"


class WalletError(Exception):
    pass


@dataclass(frozen=True)
class Credential:
    private_key: bytes = field(repr=False)
    address: str

    @classmethod
    def generate(cls) -> "Credential":
        account = Account.create()
        return cls(private_key=bytes(account.key), address=account.address)

    @classmethod
    def from_key(cls, private_key_hex: str) -> "Credential":
        account = Account.from_key(private_key_hex)
        return cls(private_key=bytes(account.key), address=account.address)

    @property
    def private_key_hex(self) -> str:
        return "0x" + self.private_key.hex()


@dataclass(eq=False)
class WalletSession:
    credential: Credential
    generation: int
    key_hidden: bool = False
    balance_wei: int | None = None
    balance_error: str | None = None
    refresh_timer: TimerHandle | None = field(default=None, repr=False)
    ended: threading.Event = field(default_factory=threading.Event, repr=False)

    @property
    def address(self) -> str:
        return self.credential.address

    @property
    def display_key(self) -> str:
        if self.key_hidden:
            return HIDDEN_KEY_LABEL
        return self.credential.private_key_hex


class SessionEvent(Enum):
    ACTIVATED = "activated"
    BALANCE_UPDATED = "balance_updated"
    ENDED = "ended"


SessionListener = Callable[[SessionEvent, "WalletSession | None"], None]


def _run_in_thread(work: Callable[[], object]) -> None:
    threading.Thread(target=work, daemon=True).start()


class SessionManager:
    """Owns the single active ``WalletSession``.

    Replacing or ending a session stops its refresh timer and marks it ended;
    any network response that resolves for a session that is no longer
    current is discarded.
    """

    def __init__(
        self,
        chain: ChainClientProtocol,
        session_store: KeyValueStore,
        refresh_interval: float = 15.0,
        scheduler: Scheduler = start_interval,
        dispatch: Callable[[Callable[[], object]], None] = _run_in_thread,
    ):
        self.chain = chain
        self.session_store = session_store
        self.refresh_interval = refresh_interval
        self.scheduler = scheduler
        self.dispatch = dispatch
        self._session: WalletSession | None = None
        self._generation = 0
        self._lock = threading.Lock()
        self._listeners: list[SessionListener] = []

    @property
    def session(self) -> WalletSession | None:
        return self._session

    def add_listener(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def _notify(self, event: SessionEvent, session: WalletSession | None) -> None:
        for listener in self._listeners:
            try:
                listener(event, session)
            except Exception as e:
                logger.error("Session listener failed on %s: %s", event.value, e)

    def is_current(self, session: WalletSession | None) -> bool:
        return session is not None and session is self._session

    def _stop_session(self, session: WalletSession) -> None:
        if session.refresh_timer is not None:
            session.refresh_timer.stop()
            session.refresh_timer = None
        session.ended.set()

    def _activate(self, credential: Credential, key_hidden: bool) -> WalletSession:
        with self._lock:
            previous = self._session
            if previous is not None:
                self._stop_session(previous)
            self._generation += 1
            session = WalletSession(
                credential=credential,
                generation=self._generation,
                key_hidden=key_hidden,
            )
            self._session = session
            session.refresh_timer = self.scheduler(
                self.refresh_interval, self.request_refresh
            )

        logger.info(
            "Session %d active for %s", session.generation, session.address
        )
        self._notify(SessionEvent.ACTIVATED, session)
        self.request_refresh()
        return session

    def create_session(self) -> WalletSession:
        try:
            credential = Credential.generate()
        except Exception as e:
            logger.error("Wallet generation failed: %s", e)
            raise WalletError(f"Could not generate wallet: {e}") from e

        self.session_store.set(SESSION_KEY_SLOT, credential.private_key_hex)
        return self._activate(credential, key_hidden=False)

    def import_session(self, raw_key: str) -> ValidationResult:
        """Activate a session from a user-supplied key.

        Returns a failed ``ValidationResult`` (field ``private_key``) and
        leaves the current state untouched when the key is malformed. On
        success ``normalized_value`` holds the new session.
        """
        result = PrivateKeyValidator.validate(raw_key)
        if not result.is_valid:
            return result

        try:
            credential = Credential.from_key(result.normalized_value)
        except Exception as e:
            logger.warning("Rejected private key on import: %s", type(e).__name__)
            return ValidationResult(
                is_valid=False,
                error_message="Invalid private key format.",
                field="private_key",
            )

        self.session_store.set(SESSION_KEY_SLOT, credential.private_key_hex)
        session = self._activate(credential, key_hidden=True)
        return ValidationResult(is_valid=True, normalized_value=session)

    def restore_session(self) -> WalletSession | None:
        stored = self.session_store.get(SESSION_KEY_SLOT)
        if stored is None:
            return None

        result = PrivateKeyValidator.validate(stored)
        credential = None
        if result.is_valid:
            try:
                credential = Credential.from_key(result.normalized_value)
            except Exception:
                credential = None

        if credential is None:
            logger.warning("Discarding malformed session key from storage")
            self.session_store.remove(SESSION_KEY_SLOT)
            return None

        logger.info("Found wallet in session, loading")
        return self._activate(credential, key_hidden=True)

    def end_session(self) -> None:
        self.session_store.remove(SESSION_KEY_SLOT)
        with self._lock:
            session = self._session
            self._session = None
            if session is not None:
                self._stop_session(session)
        logger.info("Wallet cleared from session")
        self._notify(SessionEvent.ENDED, None)

    def close(self) -> None:
        """Forget the key at shutdown; listeners are not notified."""
        self.session_store.remove(SESSION_KEY_SLOT)
        with self._lock:
            session = self._session
            self._session = None
            if session is not None:
                self._stop_session(session)

    def request_refresh(self) -> None:
        self.dispatch(self.refresh_balance)

    def refresh_balance(self) -> int | None:
        session = self._session
        if session is None:
            return None

        try:
            balance = self.chain.get_balance(session.address)
        except Exception as e:
            logger.warning("Could not fetch balance for %s: %s", session.address, e)
            if self.is_current(session):
                session.balance_error = "Error fetching balance"
                self._notify(SessionEvent.BALANCE_UPDATED, session)
            return None

        if not self.is_current(session):
            logger.debug(
                "Discarding balance for replaced session %d", session.generation
            )
            return None

        session.balance_wei = balance
        session.balance_error = None
        self._notify(SessionEvent.BALANCE_UPDATED, session)
        return balance
