import json
import logging

import pytest

from mini_wallet.shared import logging as wallet_logging
from mini_wallet.shared.logging import (
    ContextAdapter,
    LoggingConfig,
    LogLevel,
    StructuredFormatter,
    format_error_for_user,
    get_user_friendly_error,
    sanitize_dict,
    sanitize_message,
    setup_logging,
)

PRIVATE_KEY = "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
ADDRESS = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"


@pytest.mark.unit
class TestSanitizeMessage:
    def test_private_key_is_redacted(self):
        result = sanitize_message(f"private_key=0x{PRIVATE_KEY}")
        assert PRIVATE_KEY not in result
        assert "[REDACTED]" in result

    def test_bare_key_shaped_hex_is_redacted(self):
        assert PRIVATE_KEY not in sanitize_message(f"loaded 0x{PRIVATE_KEY}")

    def test_transaction_hash_is_kept(self):
        message = f"Transfer broadcast: hash=0x{PRIVATE_KEY}"
        assert sanitize_message(message) == message

    def test_otp_code_is_redacted(self):
        assert "123456" not in sanitize_message("otp: 123456")

    def test_api_key_query_is_redacted(self):
        result = sanitize_message("GET /api?module=account&apikey=ABC123")
        assert "ABC123" not in result

    def test_address_kept_by_default(self):
        assert ADDRESS in sanitize_message(f"sending to {ADDRESS}")

    def test_address_redacted_on_request(self):
        result = sanitize_message(f"sending to {ADDRESS}", preserve_addresses=False)
        assert ADDRESS not in result


@pytest.mark.unit
class TestSanitizeDict:
    def test_sensitive_keys(self):
        result = sanitize_dict(
            {"private_key": "x", "otp": "123456", "nested": {"api_key": "k"}, "n": 1}
        )
        assert result == {
            "private_key": "[REDACTED]",
            "otp": "[REDACTED]",
            "nested": {"api_key": "[REDACTED]"},
            "n": 1,
        }


@pytest.mark.unit
class TestUserFriendlyErrors:
    def test_timeout(self):
        message, suggestion = get_user_friendly_error(TimeoutError("read timed out"))
        assert "timed out" in message.lower()
        assert suggestion is not None

    def test_insufficient_funds(self):
        message = format_error_for_user("insufficient funds for gas * price + value")
        assert message.startswith("Insufficient funds")

    def test_unknown(self):
        assert get_user_friendly_error("weird")[0] == "An unexpected error occurred."


@pytest.mark.unit
class TestLoggingConfig:
    def test_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("MINI_WALLET_LOG_LEVEL", "debug")
        monkeypatch.setenv("MINI_WALLET_LOG_STDOUT", "true")
        monkeypatch.setenv("MINI_WALLET_LOG_DIR", str(tmp_path))

        config = LoggingConfig.from_environment()

        assert config.log_level == LogLevel.DEBUG
        assert config.log_to_stdout is True
        assert config.log_dir == tmp_path

    def test_overrides(self):
        config = LoggingConfig.from_environment(log_filename="otp.log")
        assert config.log_filename == "otp.log"

    def test_invalid_level_falls_back(self, monkeypatch):
        monkeypatch.setenv("MINI_WALLET_LOG_LEVEL", "loud")
        assert LoggingConfig.from_environment().log_level == LogLevel.INFO


@pytest.mark.unit
class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def restore_root_logger(self, monkeypatch):
        root = logging.getLogger()
        handlers = root.handlers[:]
        level = root.level
        monkeypatch.setattr(wallet_logging, "_logging_initialized", False)
        yield
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(level)

    def test_writes_sanitized_file_log(self, tmp_path):
        setup_logging(LoggingConfig(log_dir=tmp_path), force=True)

        logging.getLogger("mini_wallet.test").info("private_key=0x%s", PRIVATE_KEY)
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = (tmp_path / "wallet.log").read_text(encoding="utf-8")
        assert "[REDACTED]" in content
        assert PRIVATE_KEY not in content


@pytest.mark.unit
class TestStructuredFormatter:
    def test_context_is_included(self):
        logger = logging.getLogger("mini_wallet.ctx")
        adapter = ContextAdapter(logger, {"component": "otp"})
        msg, kwargs = adapter.process("hello", {"extra": {"context": {"email": "a@b.c"}}})

        record = logger.makeRecord(
            logger.name, logging.INFO, __file__, 1, msg, (), None, extra=kwargs["extra"]
        )
        payload = json.loads(StructuredFormatter().format(record))

        assert payload["message"] == "hello"
        assert payload["context"] == {"component": "otp", "email": "a@b.c"}
