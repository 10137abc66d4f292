"""Email one-time passcode service used during wallet onboarding."""

from mini_wallet.otp.config import OTPSettings
from mini_wallet.otp.service import OTPService, generate_code
from mini_wallet.otp.store import OTPStore

__all__ = ["OTPSettings", "OTPService", "OTPStore", "generate_code"]
