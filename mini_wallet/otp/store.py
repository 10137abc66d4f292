"""In-memory OTP storage with per-entry expiry."""

from __future__ import annotations

import hmac
import threading
import time
from dataclasses import dataclass
from typing import Callable


@dataclass
class _Entry:
    code: str
    expires_at: float


class OTPStore:
    """Maps an email address to its latest code.

    Entries older than ``ttl_seconds`` behave as if they were never stored.
    All operations hold one lock, so concurrent requests see a consistent map.
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def _live_entry(self, email: str) -> _Entry | None:
        entry = self._entries.get(email)
        if entry is None:
            return None
        if entry.expires_at <= self.clock():
            del self._entries[email]
            return None
        return entry

    def put(self, email: str, code: str) -> None:
        with self._lock:
            self._entries[email] = _Entry(code, self.clock() + self.ttl_seconds)

    def get(self, email: str) -> str | None:
        with self._lock:
            entry = self._live_entry(email)
            return entry.code if entry else None

    def pop_if_match(self, email: str, code: str) -> bool:
        """Delete and return ``True`` only when ``code`` is the live code for ``email``."""
        with self._lock:
            entry = self._live_entry(email)
            if entry is None:
                return False
            if not hmac.compare_digest(entry.code.encode(), code.encode()):
                return False
            del self._entries[email]
            return True

    def discard(self, email: str, code: str | None = None) -> None:
        """Remove the entry; with ``code``, only if it is still that code."""
        with self._lock:
            entry = self._entries.get(email)
            if entry is None:
                return
            if code is None or entry.code == code:
                del self._entries[email]

    def purge_expired(self) -> int:
        with self._lock:
            now = self.clock()
            expired = [e for e, entry in self._entries.items() if entry.expires_at <= now]
            for email in expired:
                del self._entries[email]
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
