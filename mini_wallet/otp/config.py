"""Settings for the OTP mail service, read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_PORT = 3000
DEFAULT_TTL_SECONDS = 300.0
SUPPORTED_PROVIDERS = ("resend", "sendgrid")


def _split_origins(value: str) -> list[str]:
    origins = [origin.strip() for origin in value.split(",")]
    return [origin for origin in origins if origin] or ["*"]


@dataclass
class OTPSettings:
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    ttl_seconds: float = DEFAULT_TTL_SECONDS
    mail_provider: str = "resend"
    mail_api_key: str = field(default="", repr=False)
    mail_from: str = ""
    mail_from_name: str = ""
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    @property
    def mail_configured(self) -> bool:
        return bool(self.mail_api_key and self.mail_from)

    @classmethod
    def from_environment(cls) -> "OTPSettings":
        defaults = cls()
        try:
            port = int(os.getenv("PORT", str(DEFAULT_PORT)))
        except ValueError:
            port = DEFAULT_PORT
        try:
            ttl_seconds = float(os.getenv("OTP_TTL_SECONDS", str(DEFAULT_TTL_SECONDS)))
        except ValueError:
            ttl_seconds = DEFAULT_TTL_SECONDS

        return cls(
            host=os.getenv("OTP_HOST", defaults.host),
            port=port,
            ttl_seconds=ttl_seconds,
            mail_provider=os.getenv("OTP_MAIL_PROVIDER", defaults.mail_provider)
            .strip()
            .lower(),
            mail_api_key=os.getenv("OTP_MAIL_API_KEY", ""),
            mail_from=os.getenv("OTP_MAIL_FROM", ""),
            mail_from_name=os.getenv("OTP_MAIL_FROM_NAME", ""),
            cors_origins=_split_origins(os.getenv("OTP_CORS_ORIGINS", "*")),
        )
