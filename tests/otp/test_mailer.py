from unittest.mock import MagicMock

import pytest

from mini_wallet.otp.config import OTPSettings
from mini_wallet.otp.mailer import (
    MailTransportError,
    ResendTransport,
    SendGridTransport,
    UnconfiguredTransport,
    build_transport,
)
from mini_wallet.shared.network import NetworkError, NetworkErrorType


@pytest.fixture
def client():
    return MagicMock()


@pytest.mark.unit
class TestResendTransport:
    def test_payload(self, client):
        transport = ResendTransport("re_key", "otp@example.com", "Mini Wallet", client=client)

        transport.send("a@example.com", "Subject", "Body")

        args, kwargs = client.post.call_args
        assert args == ("/emails",)
        assert kwargs["json"] == {
            "from": "Mini Wallet <otp@example.com>",
            "to": ["a@example.com"],
            "subject": "Subject",
            "text": "Body",
        }
        assert kwargs["headers"] == {"Authorization": "Bearer re_key"}

    def test_sender_without_name(self, client):
        ResendTransport("re_key", "otp@example.com", client=client).send("a@b.c", "S", "B")
        assert client.post.call_args.kwargs["json"]["from"] == "otp@example.com"

    def test_network_error_is_wrapped(self, client):
        client.post.side_effect = NetworkError(
            error_type=NetworkErrorType.HTTP_ERROR, message="HTTP error 422"
        )
        transport = ResendTransport("re_key", "otp@example.com", client=client)

        with pytest.raises(MailTransportError):
            transport.send("a@example.com", "S", "B")


@pytest.mark.unit
class TestSendGridTransport:
    def test_payload(self, client):
        transport = SendGridTransport("SG.key", "otp@example.com", "Mini Wallet", client=client)

        transport.send("a@example.com", "Subject", "Body")

        args, kwargs = client.post.call_args
        assert args == ("/v3/mail/send",)
        assert kwargs["json"] == {
            "personalizations": [{"to": [{"email": "a@example.com"}]}],
            "from": {"email": "otp@example.com", "name": "Mini Wallet"},
            "subject": "Subject",
            "content": [{"type": "text/plain", "value": "Body"}],
        }
        assert kwargs["headers"] == {"Authorization": "Bearer SG.key"}

    def test_network_error_is_wrapped(self, client):
        client.post.side_effect = NetworkError(
            error_type=NetworkErrorType.TIMEOUT, message="timeout"
        )
        with pytest.raises(MailTransportError):
            SendGridTransport("k", "f@x.y", client=client).send("a@b.c", "S", "B")


@pytest.mark.unit
class TestBuildTransport:
    def test_unconfigured(self):
        transport = build_transport(OTPSettings())
        assert isinstance(transport, UnconfiguredTransport)
        with pytest.raises(MailTransportError):
            transport.send("a@b.c", "S", "B")

    def test_resend(self):
        settings = OTPSettings(mail_api_key="k", mail_from="f@x.y")
        assert isinstance(build_transport(settings), ResendTransport)

    def test_sendgrid(self):
        settings = OTPSettings(mail_provider="sendgrid", mail_api_key="k", mail_from="f@x.y")
        assert isinstance(build_transport(settings), SendGridTransport)

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            build_transport(OTPSettings(mail_provider="carrier-pigeon"))


@pytest.mark.unit
class TestOTPSettings:
    def test_defaults(self, monkeypatch):
        for name in ("PORT", "OTP_TTL_SECONDS", "OTP_CORS_ORIGINS", "OTP_MAIL_PROVIDER"):
            monkeypatch.delenv(name, raising=False)
        settings = OTPSettings.from_environment()

        assert settings.port == 3000
        assert settings.ttl_seconds == 300.0
        assert settings.cors_origins == ["*"]
        assert settings.mail_provider == "resend"

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("OTP_TTL_SECONDS", "60")
        monkeypatch.setenv("OTP_MAIL_PROVIDER", " SendGrid ")
        monkeypatch.setenv("OTP_MAIL_API_KEY", "secret-key")
        monkeypatch.setenv("OTP_CORS_ORIGINS", "https://a.example, https://b.example")

        settings = OTPSettings.from_environment()

        assert settings.port == 8080
        assert settings.ttl_seconds == 60.0
        assert settings.mail_provider == "sendgrid"
        assert settings.cors_origins == ["https://a.example", "https://b.example"]
        assert "secret-key" not in repr(settings)

    def test_bad_port_falls_back(self, monkeypatch):
        monkeypatch.setenv("PORT", "http")
        assert OTPSettings.from_environment().port == 3000
