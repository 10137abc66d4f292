"""Wallet settings stored in ``config.json`` with environment overrides."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from mini_wallet.shared.network import RetryConfig, TimeoutConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"

SEPOLIA_CHAIN_ID = 11155111
DEFAULT_RPC_URL = "https://ethereum-sepolia-rpc.publicnode.com"
DEFAULT_EXPLORER_URL = "https://sepolia.etherscan.io"
DEFAULT_ETHERSCAN_API_URL = "https://api.etherscan.io/v2/api"


def resolve_wallet_dir(wallet_dir: str | Path | None = None) -> Path:
    if wallet_dir:
        return Path(wallet_dir).expanduser()

    env_dir = os.getenv("MINI_WALLET_DIR")
    if env_dir:
        return Path(env_dir).expanduser()

    return Path.home() / ".config" / "mini-wallet"


@dataclass
class WalletSettings:
    rpc_url: str = DEFAULT_RPC_URL
    chain_id: int = SEPOLIA_CHAIN_ID
    network_name: str = "sepolia"
    native_symbol: str = "ETH"
    explorer_url: str = DEFAULT_EXPLORER_URL
    etherscan_api_url: str = DEFAULT_ETHERSCAN_API_URL
    etherscan_api_key: str = ""
    refresh_interval_seconds: float = 15.0
    estimate_debounce_seconds: float = 0.3
    receipt_poll_interval_seconds: float = 4.0
    history_limit: int = 15
    timeout_config: TimeoutConfig = field(default_factory=TimeoutConfig)
    retry_config: RetryConfig = field(default_factory=RetryConfig)
    session_passphrase: str = field(default="", repr=False)

    @property
    def history_enabled(self) -> bool:
        return bool(self.etherscan_api_key)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rpc_url": self.rpc_url,
            "chain_id": self.chain_id,
            "network_name": self.network_name,
            "native_symbol": self.native_symbol,
            "explorer_url": self.explorer_url,
            "etherscan_api_url": self.etherscan_api_url,
            "etherscan_api_key": self.etherscan_api_key,
            "refresh_interval_seconds": self.refresh_interval_seconds,
            "estimate_debounce_seconds": self.estimate_debounce_seconds,
            "receipt_poll_interval_seconds": self.receipt_poll_interval_seconds,
            "history_limit": self.history_limit,
            "timeout": asdict(self.timeout_config),
            "retry": {
                "max_retries": self.retry_config.max_retries,
                "base_delay": self.retry_config.base_delay,
                "max_delay": self.retry_config.max_delay,
            },
        }

    @classmethod
    def from_dict(cls, data: Any) -> "WalletSettings":
        """Build settings from parsed JSON; non-object sections fall back to defaults."""
        defaults = cls()
        data = _section(data)
        timeout_cfg = _section(data.get("timeout"))
        retry_cfg = _section(data.get("retry"))
        return cls(
            rpc_url=data.get("rpc_url", defaults.rpc_url),
            chain_id=int(data.get("chain_id", defaults.chain_id)),
            network_name=data.get("network_name", defaults.network_name),
            native_symbol=data.get("native_symbol", defaults.native_symbol),
            explorer_url=data.get("explorer_url", defaults.explorer_url),
            etherscan_api_url=data.get(
                "etherscan_api_url", defaults.etherscan_api_url
            ),
            etherscan_api_key=data.get("etherscan_api_key", ""),
            refresh_interval_seconds=float(
                data.get("refresh_interval_seconds", defaults.refresh_interval_seconds)
            ),
            estimate_debounce_seconds=float(
                data.get(
                    "estimate_debounce_seconds", defaults.estimate_debounce_seconds
                )
            ),
            receipt_poll_interval_seconds=float(
                data.get(
                    "receipt_poll_interval_seconds",
                    defaults.receipt_poll_interval_seconds,
                )
            ),
            history_limit=int(data.get("history_limit", defaults.history_limit)),
            timeout_config=TimeoutConfig(
                connect_timeout=timeout_cfg.get("connect_timeout", 5.0),
                read_timeout=timeout_cfg.get("read_timeout", 15.0),
            ),
            retry_config=RetryConfig(
                max_retries=retry_cfg.get("max_retries", 3),
                base_delay=retry_cfg.get("base_delay", 1.0),
                max_delay=retry_cfg.get("max_delay", 30.0),
            ),
        )

    def apply_environment(self) -> "WalletSettings":
        rpc_url = os.getenv("MINI_WALLET_RPC_URL")
        if rpc_url:
            self.rpc_url = rpc_url
        api_key = os.getenv("MINI_WALLET_ETHERSCAN_API_KEY")
        if api_key:
            self.etherscan_api_key = api_key
        self.session_passphrase = os.getenv("MINI_WALLET_SESSION_PASSPHRASE", "")
        return self


def _section(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def load_settings(wallet_dir: Path) -> WalletSettings:
    config_file = wallet_dir / CONFIG_FILENAME
    if config_file.exists():
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                settings = WalletSettings.from_dict(json.load(f))
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Invalid %s, using defaults: %s", config_file, e)
            settings = WalletSettings()
    else:
        settings = WalletSettings()
        save_settings(wallet_dir, settings)
    return settings.apply_environment()


def save_settings(wallet_dir: Path, settings: WalletSettings) -> None:
    wallet_dir.mkdir(parents=True, exist_ok=True)
    with open(wallet_dir / CONFIG_FILENAME, "w", encoding="utf-8") as f:
        json.dump(settings.to_dict(), f, indent=2)
