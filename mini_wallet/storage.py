"""Key-value persistence for the session key and the address book.

Two lifetimes are provided, mirroring what a browser wallet gets from
session and local storage:

- session-scoped: a JSON file under ``$XDG_RUNTIME_DIR`` (tmpfs, cleared at
  logout/reboot), or process memory when no runtime dir exists
- durable: a JSON file in the wallet directory
"""

from __future__ import annotations

import base64
import json
import logging
import os
import threading
from pathlib import Path

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from mini_wallet.shared.protocols import KeyValueStore

logger = logging.getLogger(__name__)

SESSION_FILENAME = "session.json"
DURABLE_FILENAME = "storage.json"


class MemoryStore:
    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """Flat ``{key: string}`` JSON document on disk."""

    def __init__(self, path: Path, file_mode: int = 0o600):
        self.path = path
        self.file_mode = file_mode
        self._lock = threading.Lock()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Failed to read %s, starting empty: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed store file %s", self.path)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, self.file_mode)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, self.path)

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)


class EncryptedStore:
    """Wraps a store so values are Fernet tokens derived from a passphrase.

    Values are stored as ``<salt>$<token>``. A value that cannot be decrypted
    reads as malformed text so callers treat it like any corrupt entry.
    """

    ITERATIONS = 390_000

    def __init__(self, inner: KeyValueStore, passphrase: str):
        if not passphrase:
            raise ValueError("Passphrase is required for an encrypted store")
        self.inner = inner
        self._passphrase = passphrase.encode("utf-8")

    def _fernet(self, salt: bytes) -> Fernet:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=self.ITERATIONS,
        )
        return Fernet(base64.urlsafe_b64encode(kdf.derive(self._passphrase)))

    def get(self, key: str) -> str | None:
        stored = self.inner.get(key)
        if stored is None:
            return None
        try:
            salt_b64, token = stored.split("$", 1)
            salt = base64.urlsafe_b64decode(salt_b64)
            return self._fernet(salt).decrypt(token.encode("ascii")).decode("utf-8")
        except (ValueError, InvalidToken):
            logger.warning("Stored value for %s could not be decrypted", key)
            return ""

    def set(self, key: str, value: str) -> None:
        salt = os.urandom(16)
        token = self._fernet(salt).encrypt(value.encode("utf-8")).decode("ascii")
        self.inner.set(key, f"{base64.urlsafe_b64encode(salt).decode('ascii')}${token}")

    def remove(self, key: str) -> None:
        self.inner.remove(key)


def default_session_dir() -> Path | None:
    runtime_dir = os.getenv("XDG_RUNTIME_DIR")
    if not runtime_dir:
        return None
    return Path(runtime_dir) / "mini-wallet"


def open_session_store(
    session_dir: Path | None = None, passphrase: str | None = None
) -> KeyValueStore:
    session_dir = session_dir or default_session_dir()
    store: KeyValueStore
    if session_dir is None:
        logger.info("No runtime directory available, session key kept in memory")
        store = MemoryStore()
    else:
        store = JsonFileStore(session_dir / SESSION_FILENAME)
    if passphrase:
        store = EncryptedStore(store, passphrase)
    return store


def open_durable_store(wallet_dir: Path) -> KeyValueStore:
    return JsonFileStore(wallet_dir / DURABLE_FILENAME)
