"""Logging setup shared by the wallet TUI and the OTP service.

Everything written to a handler passes through redaction first, so private
keys, passphrases, API keys and OTP codes never reach a log file. The same
module turns raw exceptions into short messages fit for a notification.
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


@dataclass
class LoggingConfig:
    log_level: LogLevel = LogLevel.INFO
    log_to_file: bool = True
    log_to_stdout: bool = False
    log_dir: Path | None = None
    log_filename: str = "wallet.log"
    sanitize_sensitive: bool = True
    include_context: bool = True

    @classmethod
    def from_environment(cls, **overrides: Any) -> "LoggingConfig":
        """Read ``MINI_WALLET_LOG_*`` variables; keyword overrides win."""
        level_name = os.getenv("MINI_WALLET_LOG_LEVEL", LogLevel.INFO.value).upper()
        level = LogLevel.__members__.get(level_name, LogLevel.INFO)
        env_dir = os.getenv("MINI_WALLET_LOG_DIR")

        config = cls(
            log_level=level,
            log_to_stdout=_env_flag("MINI_WALLET_LOG_STDOUT"),
            log_dir=Path(env_dir).expanduser() if env_dir else None,
        )
        for name, value in overrides.items():
            setattr(config, name, value)
        return config


REDACTED = "[REDACTED]"

# Order matters: labelled secrets first, then anything still shaped like a key.
REDACTION_RULES: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(
            r"(private[_-]?key['\"]?\s*[:=]\s*['\"]?)(?:0x)?[0-9a-f]{64}", re.I
        ),
        rf"\1{REDACTED}",
    ),
    (
        re.compile(
            r"((?:passphrase|password|api[_-]?key)['\"]?\s*[:=]\s*['\"]?)[^\s'\",]+",
            re.I,
        ),
        rf"\1{REDACTED}",
    ),
    (re.compile(r"((?:otp|code)['\"]?\s*[:=]\s*['\"]?)\d{6}\b", re.I), rf"\1{REDACTED}"),
    (re.compile(r"(apikey=)[^&\s]+", re.I), rf"\1{REDACTED}"),
    # Transaction hashes look like keys; they survive only as ``hash=<value>``.
    (re.compile(r"(?<!hash=)(?<!hash: )\b(?:0x)?[0-9a-fA-F]{64}\b"), "[KEY_REDACTED]"),
]

ETH_ADDRESS = re.compile(r"\b0x[0-9a-fA-F]{40}\b")

SENSITIVE_KEYS = (
    "private_key",
    "privatekey",
    "password",
    "passphrase",
    "secret",
    "api_key",
    "otp",
)


def sanitize_message(message: str, preserve_addresses: bool = True) -> str:
    if not message:
        return message
    for pattern, replacement in REDACTION_RULES:
        message = pattern.sub(replacement, message)
    if not preserve_addresses:
        message = ETH_ADDRESS.sub("[ADDRESS_REDACTED]", message)
    return message


def _sanitize_value(value: Any, preserve_addresses: bool) -> Any:
    if isinstance(value, str):
        return sanitize_message(value, preserve_addresses)
    if isinstance(value, dict):
        return sanitize_dict(value, preserve_addresses)
    if isinstance(value, list):
        return [_sanitize_value(item, preserve_addresses) for item in value]
    return value


def sanitize_dict(
    data: dict[str, Any], preserve_addresses: bool = True
) -> dict[str, Any]:
    """Copy ``data`` with secret-named keys masked and string values redacted."""
    return {
        key: REDACTED
        if any(marker in key.lower() for marker in SENSITIVE_KEYS)
        else _sanitize_value(value, preserve_addresses)
        for key, value in data.items()
    }


# (regex over the lowercased error text, message, suggested next step)
FRIENDLY_ERRORS: list[tuple[str, str, str | None]] = [
    (
        r"timeout|timed out",
        "Connection timed out. The RPC endpoint may be slow or unavailable.",
        "Try again later or check your network connection.",
    ),
    (
        r"connection refused|cannot connect|connection error|max retries exceeded",
        "Unable to connect to the server.",
        "Check your internet connection and try again.",
    ),
    (
        r"insufficient funds|insufficient balance",
        "Insufficient funds for this transaction.",
        "Ensure you have enough ETH for the amount and the network fee.",
    ),
    (
        r"nonce too low|replacement transaction underpriced|already known",
        "A conflicting transaction is already pending.",
        "Wait for the pending transaction to confirm and try again.",
    ),
    (
        r"intrinsic gas too low|gas required exceeds|out of gas",
        "The transaction ran out of gas.",
        "Re-estimate the fee and try again.",
    ),
    (
        r"invalid.*address|ens name not found",
        "The address provided is not valid.",
        "Please check the recipient address or ENS name.",
    ),
    (
        r"invalid.*key|invalid.*private",
        "The provided key is not valid.",
        "Please verify the key format and try again.",
    ),
    (
        r"unauthorized|forbidden|\b40[13]\b",
        "Access denied. Authentication failed.",
        "Check your credentials and permissions.",
    ),
    (
        r"rate limit|too many requests|\b429\b",
        "Too many requests. Please slow down.",
        "Wait a moment and try again.",
    ),
    (
        r"network.*error",
        "A network error occurred.",
        "Check your internet connection.",
    ),
]


def get_user_friendly_error(error: Exception | str) -> tuple[str, str | None]:
    text = str(error).lower()
    for pattern, message, suggestion in FRIENDLY_ERRORS:
        if re.search(pattern, text):
            return message, suggestion
    return "An unexpected error occurred.", None


def format_error_for_user(error: Exception | str) -> str:
    message, suggestion = get_user_friendly_error(error)
    return f"{message} {suggestion}" if suggestion else message


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, with ``context`` from ``ContextAdapter``."""

    def __init__(
        self,
        sanitize: bool = True,
        include_context: bool = True,
        preserve_addresses: bool = True,
    ):
        super().__init__()
        self.sanitize = sanitize
        self.include_context = include_context
        self.preserve_addresses = preserve_addresses

    def _clean(self, text: str) -> str:
        return sanitize_message(text, self.preserve_addresses) if self.sanitize else text

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": self._clean(record.getMessage()),
        }
        if self.include_context:
            entry.update(
                module=record.module, function=record.funcName, line=record.lineno
            )

        context = getattr(record, "context", None)
        if isinstance(context, dict) and context:
            entry["context"] = (
                sanitize_dict(context, self.preserve_addresses)
                if self.sanitize
                else context
            )
        if record.exc_info:
            entry["exception"] = self._clean(self.formatException(record.exc_info))

        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    def __init__(self, sanitize: bool = True, preserve_addresses: bool = True):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.sanitize = sanitize
        self.preserve_addresses = preserve_addresses

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        return sanitize_message(text, self.preserve_addresses) if self.sanitize else text


class ContextAdapter(logging.LoggerAdapter):
    """Merges fixed context with per-call ``extra={"context": {...}}``."""

    def __init__(self, logger: logging.Logger, context: dict[str, Any] | None = None):
        super().__init__(logger, dict(context or {}))

    def process(
        self, msg: str, kwargs: dict[str, Any]
    ) -> tuple[str, dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        merged = {**self.extra, **extra.get("context", {})}
        if merged:
            extra["context"] = merged
        kwargs["extra"] = extra
        return msg, kwargs

    def with_context(self, **fields: Any) -> "ContextAdapter":
        return ContextAdapter(self.logger, {**self.extra, **fields})


_logging_initialized = False


def _build_handlers(config: LoggingConfig) -> list[logging.Handler]:
    use_json = os.getenv("MINI_WALLET_LOG_FORMAT", "human").strip().lower() == "json"

    def formatter() -> logging.Formatter:
        if use_json:
            return StructuredFormatter(
                sanitize=config.sanitize_sensitive,
                include_context=config.include_context,
            )
        return HumanReadableFormatter(sanitize=config.sanitize_sensitive)

    handlers: list[logging.Handler] = []
    if config.log_to_file:
        log_dir = config.log_dir or Path.home() / ".config" / "mini-wallet"
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.FileHandler(log_dir / config.log_filename, encoding="utf-8")
        )
    if config.log_to_stdout:
        handlers.append(logging.StreamHandler(sys.stdout))
    for handler in handlers:
        handler.setFormatter(formatter())
    return handlers


def setup_logging(config: LoggingConfig | None = None, force: bool = False) -> None:
    """Install handlers on the root logger once per process (or again with ``force``)."""
    global _logging_initialized
    if _logging_initialized and not force:
        return

    config = config or LoggingConfig.from_environment()
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(config.log_level.value)
    for handler in _build_handlers(config):
        root.addHandler(handler)

    _logging_initialized = True


__all__ = [
    "LogLevel",
    "LoggingConfig",
    "ContextAdapter",
    "StructuredFormatter",
    "HumanReadableFormatter",
    "sanitize_message",
    "sanitize_dict",
    "get_user_friendly_error",
    "setup_logging",
    "format_error_for_user",
]
