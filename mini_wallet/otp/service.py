"""Issue and verify one-time passcodes delivered by email."""

from __future__ import annotations

import logging
import secrets
from typing import Callable

from mini_wallet.otp.mailer import MailTransport, MailTransportError
from mini_wallet.otp.store import OTPStore
from mini_wallet.shared.logging import ContextAdapter

logger = ContextAdapter(logging.getLogger(__name__), {"component": "otp"})

OTP_SUBJECT = "Your Wallet Verification OTP"
OTP_BODY = "Your OTP for wallet creation is: {code}"


def generate_code() -> str:
    """Return a uniformly random six-digit code in [100000, 999999]."""
    return str(100000 + secrets.randbelow(900000))


class OTPService:
    def __init__(
        self,
        store: OTPStore,
        transport: MailTransport,
        subject: str = OTP_SUBJECT,
        code_factory: Callable[[], str] = generate_code,
    ):
        self.store = store
        self.transport = transport
        self.subject = subject
        self.code_factory = code_factory

    def issue(self, email: str) -> None:
        """Store a fresh code for ``email`` and mail it.

        The new code replaces any earlier one. If delivery fails the new code
        is withdrawn and :class:`MailTransportError` propagates.
        """
        self.store.purge_expired()
        code = self.code_factory()
        self.store.put(email, code)
        try:
            self.transport.send(email, self.subject, OTP_BODY.format(code=code))
        except MailTransportError:
            self.store.discard(email, code)
            logger.exception("OTP delivery failed", extra={"context": {"email": email}})
            raise
        logger.info("OTP issued", extra={"context": {"email": email}})

    def verify(self, email: str, code: str) -> bool:
        verified = self.store.pop_if_match(email, code)
        logger.info(
            "OTP verification %s",
            "succeeded" if verified else "failed",
            extra={"context": {"email": email}},
        )
        return verified
