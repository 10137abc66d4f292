"""Mail transports for delivering OTP codes over provider HTTP APIs."""

from __future__ import annotations

import logging
from typing import Protocol

from mini_wallet.otp.config import OTPSettings, SUPPORTED_PROVIDERS
from mini_wallet.shared.network import (
    NO_RETRY_CONFIG,
    NetworkClient,
    NetworkError,
    TimeoutConfig,
)

logger = logging.getLogger(__name__)

MAIL_TIMEOUT = TimeoutConfig(connect_timeout=5.0, read_timeout=30.0)


class MailTransportError(Exception):
    pass


class MailTransport(Protocol):
    def send(self, to: str, subject: str, text: str) -> None: ...


class ResendTransport:
    """Send email via the Resend API."""

    API_URL = "https://api.resend.com"

    def __init__(
        self,
        api_key: str,
        from_address: str,
        from_name: str = "",
        client: NetworkClient | None = None,
    ):
        self.api_key = api_key
        self.from_address = from_address
        self.from_name = from_name
        self.client = client or NetworkClient(
            self.API_URL, timeout_config=MAIL_TIMEOUT, retry_config=NO_RETRY_CONFIG
        )

    def send(self, to: str, subject: str, text: str) -> None:
        sender = (
            f"{self.from_name} <{self.from_address}>"
            if self.from_name
            else self.from_address
        )
        payload = {"from": sender, "to": [to], "subject": subject, "text": text}
        try:
            self.client.post(
                "/emails",
                context="Send OTP email via Resend",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except NetworkError as e:
            raise MailTransportError(f"Resend API error: {e}") from e


class SendGridTransport:
    """Send email via the SendGrid v3 API."""

    API_URL = "https://api.sendgrid.com"

    def __init__(
        self,
        api_key: str,
        from_address: str,
        from_name: str = "",
        client: NetworkClient | None = None,
    ):
        self.api_key = api_key
        self.from_address = from_address
        self.from_name = from_name
        self.client = client or NetworkClient(
            self.API_URL, timeout_config=MAIL_TIMEOUT, retry_config=NO_RETRY_CONFIG
        )

    def send(self, to: str, subject: str, text: str) -> None:
        sender = {"email": self.from_address}
        if self.from_name:
            sender["name"] = self.from_name
        payload = {
            "personalizations": [{"to": [{"email": to}]}],
            "from": sender,
            "subject": subject,
            "content": [{"type": "text/plain", "value": text}],
        }
        try:
            self.client.post(
                "/v3/mail/send",
                context="Send OTP email via SendGrid",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except NetworkError as e:
            raise MailTransportError(f"SendGrid API error: {e}") from e


class UnconfiguredTransport:
    """Stand-in used when no mail credentials are configured; every send fails."""

    def send(self, to: str, subject: str, text: str) -> None:
        raise MailTransportError(
            "Mail is not configured. Set OTP_MAIL_API_KEY and OTP_MAIL_FROM."
        )


def build_transport(settings: OTPSettings) -> MailTransport:
    if settings.mail_provider not in SUPPORTED_PROVIDERS:
        raise ValueError(
            f"Unsupported mail provider {settings.mail_provider!r}; "
            f"expected one of {', '.join(SUPPORTED_PROVIDERS)}"
        )
    if not settings.mail_configured:
        logger.warning("OTP mail transport is not configured; sends will fail")
        return UnconfiguredTransport()
    if settings.mail_provider == "sendgrid":
        return SendGridTransport(
            settings.mail_api_key, settings.mail_from, settings.mail_from_name
        )
    return ResendTransport(
        settings.mail_api_key, settings.mail_from, settings.mail_from_name
    )
