import pytest
from fastapi.testclient import TestClient

from mini_wallet.otp.app import create_app
from mini_wallet.otp.config import OTPSettings
from mini_wallet.otp.mailer import MailTransportError
from mini_wallet.otp.service import OTPService
from mini_wallet.otp.store import OTPStore


class RecordingTransport:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to, subject, text):
        if self.fail:
            raise MailTransportError("provider down")
        self.sent.append((to, subject, text))


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def client(transport):
    codes = iter(["111111", "222222", "333333"])
    service = OTPService(OTPStore(), transport, code_factory=lambda: next(codes))
    app = create_app(OTPSettings(), service=service)
    with TestClient(app) as test_client:
        yield test_client


@pytest.mark.unit
class TestSendOtp:
    def test_sends_code(self, client, transport):
        response = client.post("/send-otp", json={"email": "a@example.com"})

        assert response.status_code == 200
        assert response.json() == {"status": "OTP sent"}
        assert transport.sent[0][0] == "a@example.com"
        assert transport.sent[0][2].endswith("111111")

    @pytest.mark.parametrize("body", [{}, {"email": ""}, {"email": None}])
    def test_email_required(self, client, body):
        response = client.post("/send-otp", json=body)

        assert response.status_code == 400
        assert response.text == "Email is required"

    def test_missing_body(self, client):
        response = client.post("/send-otp")
        assert response.status_code == 400

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"data": {"email": "a@example.com"}},
            {"content": b"not json", "headers": {"Content-Type": "application/json"}},
            {"json": ["a@example.com"]},
            {"json": {"email": 42}},
        ],
    )
    def test_unusable_body_is_bad_request(self, client, transport, kwargs):
        response = client.post("/send-otp", **kwargs)

        assert response.status_code == 400
        assert response.text == "Email is required"
        assert transport.sent == []

    def test_mail_failure(self, client, transport):
        transport.fail = True
        response = client.post("/send-otp", json={"email": "a@example.com"})

        assert response.status_code == 500
        assert response.text == "Failed to send OTP"


@pytest.mark.unit
class TestVerifyOtp:
    def test_verifies_once(self, client):
        client.post("/send-otp", json={"email": "a@example.com"})

        first = client.post("/verify-otp", json={"email": "a@example.com", "otp": "111111"})
        second = client.post("/verify-otp", json={"email": "a@example.com", "otp": "111111"})

        assert first.status_code == 200
        assert first.json() == {"verified": True}
        assert second.status_code == 401
        assert second.json() == {"verified": False}

    def test_wrong_code(self, client):
        client.post("/send-otp", json={"email": "a@example.com"})
        response = client.post("/verify-otp", json={"email": "a@example.com", "otp": "999999"})

        assert response.status_code == 401
        assert response.json() == {"verified": False}

    def test_double_send_only_latest_code_works(self, client):
        client.post("/send-otp", json={"email": "a@example.com"})
        client.post("/send-otp", json={"email": "a@example.com"})

        stale = client.post("/verify-otp", json={"email": "a@example.com", "otp": "111111"})
        fresh = client.post("/verify-otp", json={"email": "a@example.com", "otp": "222222"})

        assert stale.status_code == 401
        assert fresh.status_code == 200

    def test_unknown_email(self, client):
        response = client.post("/verify-otp", json={"email": "x@example.com", "otp": "111111"})
        assert response.status_code == 401

    def test_numeric_code_is_unauthorized(self, client):
        client.post("/send-otp", json={"email": "a@example.com"})
        response = client.post("/verify-otp", json={"email": "a@example.com", "otp": 111111})

        assert response.status_code == 401
        assert response.json() == {"verified": False}

    def test_non_json_body_is_bad_request(self, client):
        response = client.post("/verify-otp", data={"email": "a@example.com", "otp": "1"})

        assert response.status_code == 400
        assert response.text == "Email and OTP are required"

    @pytest.mark.parametrize(
        "body",
        [{}, {"email": "a@example.com"}, {"otp": "111111"}, {"email": "", "otp": ""}],
    )
    def test_fields_required(self, client, body):
        response = client.post("/verify-otp", json=body)

        assert response.status_code == 400
        assert response.text == "Email and OTP are required"


@pytest.mark.unit
def test_cors_allows_any_origin(client):
    response = client.options(
        "/send-otp",
        headers={
            "Origin": "https://wallet.example",
            "Access-Control-Request-Method": "POST",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] in ("*", "https://wallet.example")
