"""
Configuration helpers for the BSC MCP server.

This module centralizes RPC endpoint selection, signing key loading, default
timeouts, and HTTP surface settings. No secrets are stored in the repository;
the private key is read from environment or a local file if present.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# Default connection settings
DEFAULT_RPC_URL = os.getenv("BSC_RPC_URL", "https://bsc-dataseed.binance.org/")
DEFAULT_EXPLORER_URL = os.getenv("BSC_EXPLORER_URL", "https://bscscan.com")
NATIVE_SYMBOL = "BNB"


def _load_float(env_var: str, default: float) -> float:
    raw_value = os.getenv(env_var)
    if raw_value:
        try:
            return float(raw_value)
        except ValueError:
            return default
    return default


def _load_timeout() -> float:
    return _load_float("BSC_HTTP_TIMEOUT", 10.0)


def _load_port() -> int:
    raw_port = os.getenv("PORT")
    if raw_port:
        try:
            return int(raw_port, 10)
        except ValueError:
            return 3000
    return 3000


DEFAULT_TIMEOUT = _load_timeout()
DEFAULT_PORT = _load_port()
DEFAULT_HOST = os.getenv("BSC_MCP_HOST", "0.0.0.0")
DEFAULT_RECEIPT_TIMEOUT = _load_float("BSC_RECEIPT_TIMEOUT", 120.0)
DEFAULT_RECEIPT_POLL_INTERVAL = _load_float("BSC_RECEIPT_POLL_INTERVAL", 2.0)

# Signing key handling
PRIVATE_KEY_ENV_VAR = "BSC_PRIVATE_KEY"
PRIVATE_KEY_FILE_ENV_VAR = "BSC_PRIVATE_KEY_FILE"

DEFAULT_RATE_LIMIT_QPS = _load_float("BSC_MCP_RATE_LIMIT_QPS", 5.0)
LOG_LEVEL = os.getenv("BSC_MCP_LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("BSC_MCP_LOG_FORMAT", "json")  # json or plain


def load_private_key() -> Optional[str]:
    """
    Load the deployment signing key from environment or a local file.

    Returns:
        The key string if available, otherwise None. The key is never logged
        or returned to callers.
    """
    env_key = os.getenv(PRIVATE_KEY_ENV_VAR)
    if env_key and env_key.strip():
        return env_key.strip()

    key_path = os.getenv(PRIVATE_KEY_FILE_ENV_VAR)
    if key_path:
        path = Path(key_path)
        if path.is_file():
            return path.read_text(encoding="utf-8").strip() or None

    return None


@dataclass(slots=True)
class BscConfig:
    """Runtime configuration for BSC RPC access and the MCP transports."""

    rpc_url: str = DEFAULT_RPC_URL
    private_key: Optional[str] = field(default_factory=load_private_key, repr=False)
    timeout: float = DEFAULT_TIMEOUT
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    receipt_poll_interval: float = DEFAULT_RECEIPT_POLL_INTERVAL
    explorer_url: str = DEFAULT_EXPLORER_URL
    native_symbol: str = NATIVE_SYMBOL
    rate_limit_qps: float = DEFAULT_RATE_LIMIT_QPS
    log_level: str = LOG_LEVEL
    log_format: str = LOG_FORMAT
    per_tool_rate_limits: dict[str, float] = field(default_factory=dict)

    @property
    def has_signer(self) -> bool:
        return bool(self.private_key)


default_config = BscConfig()
