"""Input validation for ETH amounts, addresses and private keys.

Validators never raise; they return a ``ValidationResult`` naming the
offending ``field`` so screens can put the message next to the right input.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from web3 import Web3

ENS_SUFFIX = ".eth"
ETHER_DECIMALS = 18
HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


@dataclass
class ValidationResult:
    is_valid: bool
    error_message: str | None = None
    normalized_value: Any = None
    field: str | None = None


def _invalid(message: str, field: str) -> ValidationResult:
    return ValidationResult(is_valid=False, error_message=message, field=field)


def _valid(value: Any) -> ValidationResult:
    return ValidationResult(is_valid=True, normalized_value=value)


class AmountValidator:
    MAX_WEI = 2**256 - 1

    @staticmethod
    def parse_human_amount(value: str | Decimal) -> ValidationResult:
        """Parse user text such as ``"1,000.5"`` into a positive ``Decimal``."""
        text = str(value).strip() if value is not None else ""
        if not text:
            return _invalid("Amount is required", "amount")

        text = text.replace(",", "").replace(" ", "")
        if text[0] in "+-":
            return _invalid("Amount must be a positive number", "amount")

        try:
            amount = Decimal(text)
        except (InvalidOperation, ValueError):
            return _invalid("Amount must be a valid number", "amount")

        if not amount.is_finite():
            return _invalid("Invalid numeric format (special value detected)", "amount")
        if amount <= 0:
            return _invalid("Amount must be greater than zero", "amount")
        return _valid(amount)

    @classmethod
    def convert_to_wei(cls, amount: Decimal) -> ValidationResult:
        exponent = amount.as_tuple().exponent
        if not isinstance(exponent, int):
            return _invalid("Invalid numeric format", "amount")
        if -exponent > ETHER_DECIMALS:
            return _invalid(
                f"Too many decimal places. Maximum {ETHER_DECIMALS} allowed", "amount"
            )

        wei = int(amount.scaleb(ETHER_DECIMALS))
        if wei <= 0:
            return _invalid("Amount must be greater than zero", "amount")
        if wei > cls.MAX_WEI:
            return _invalid("Amount exceeds maximum allowed value", "amount")
        return _valid(wei)

    @classmethod
    def validate_full(cls, value: str | Decimal) -> ValidationResult:
        """Parse a human ETH amount and return it in wei."""
        parsed = cls.parse_human_amount(value)
        return cls.convert_to_wei(parsed.normalized_value) if parsed.is_valid else parsed


class AddressValidator:
    @staticmethod
    def validate(value: str) -> ValidationResult:
        candidate = (value or "").strip()
        if not candidate:
            return _invalid("Address is required", "address")
        if not candidate.startswith("0x"):
            return _invalid("Address must start with '0x'", "address")
        if not Web3.is_address(candidate) or (
            _is_mixed_case(candidate) and not Web3.is_checksum_address(candidate)
        ):
            return _invalid("Please enter a valid Ethereum address.", "address")
        return _valid(Web3.to_checksum_address(candidate))


def _is_mixed_case(address: str) -> bool:
    digits = address[2:]
    return digits != digits.lower() and digits != digits.upper()


class PrivateKeyValidator:
    PREFIX = "0x"
    HEX_LENGTH = 64

    @classmethod
    def validate(cls, value: str | None) -> ValidationResult:
        candidate = (value or "").strip()
        if not candidate:
            return _invalid("Private key is required", "private_key")
        if not candidate.startswith(cls.PREFIX):
            return _invalid(
                "Please enter a valid private key (starting with 0x).", "private_key"
            )

        digits = candidate[len(cls.PREFIX) :]
        if len(digits) != cls.HEX_LENGTH:
            return _invalid(
                f"Private key must be {cls.HEX_LENGTH} hex characters after 0x",
                "private_key",
            )
        if not HEX_DIGITS.issuperset(digits):
            return _invalid("Invalid private key format.", "private_key")
        return _valid(cls.PREFIX + digits.lower())


def is_ens_name(value: str) -> bool:
    candidate = value.strip().lower()
    return len(candidate) > len(ENS_SUFFIX) and candidate.endswith(ENS_SUFFIX)


def truncate_address(address: str) -> str:
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"
