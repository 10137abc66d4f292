"""HTTP front end of the OTP mail service."""

from __future__ import annotations

import logging
from typing import Any

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from mini_wallet.otp.config import OTPSettings
from mini_wallet.otp.mailer import MailTransportError, build_transport
from mini_wallet.otp.service import OTPService
from mini_wallet.otp.store import OTPStore
from mini_wallet.shared.logging import LoggingConfig, setup_logging

logger = logging.getLogger(__name__)


class SendOtpRequest(BaseModel):
    """Fields are left untyped so bad input maps to 400/401, never 422."""

    email: Any = None


class VerifyOtpRequest(BaseModel):
    email: Any = None
    otp: Any = None


async def json_object(request: Request) -> dict[str, Any]:
    """Request body as a JSON object; anything else reads as ``{}``."""
    try:
        payload = await request.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def create_app(
    settings: OTPSettings | None = None,
    service: OTPService | None = None,
) -> FastAPI:
    settings = settings or OTPSettings.from_environment()
    if service is None:
        service = OTPService(
            OTPStore(ttl_seconds=settings.ttl_seconds),
            build_transport(settings),
        )

    app = FastAPI(title="Mini Wallet OTP")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.otp_service = service

    @app.post("/send-otp")
    def send_otp(payload: dict[str, Any] = Depends(json_object)):
        email = _text(SendOtpRequest.model_validate(payload).email)
        if email is None:
            return PlainTextResponse("Email is required", status_code=400)
        try:
            service.issue(email)
        except MailTransportError:
            return PlainTextResponse("Failed to send OTP", status_code=500)
        return {"status": "OTP sent"}

    @app.post("/verify-otp")
    def verify_otp(payload: dict[str, Any] = Depends(json_object)):
        body = VerifyOtpRequest.model_validate(payload)
        email = _text(body.email)
        if email is None or not body.otp:
            return PlainTextResponse("Email and OTP are required", status_code=400)
        # Only an exact string can match; a numeric code is simply wrong.
        if isinstance(body.otp, str) and service.verify(email, body.otp):
            return {"verified": True}
        return JSONResponse({"verified": False}, status_code=401)

    return app


def main():
    setup_logging(LoggingConfig.from_environment(log_to_stdout=True, log_filename="otp.log"))
    settings = OTPSettings.from_environment()
    logger.info("Starting OTP service on %s:%d", settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
