"""
Connection settings for the wallet daemon.

Settings come from, in increasing precedence: built-in defaults,
``~/.upxwallet/.env``, the process environment, explicit overrides.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from .rpc.transport import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TIMEOUT, ConnectionConfig

UPXWALLET_DIR = Path.home() / ".upxwallet"
UPXWALLET_ENV = UPXWALLET_DIR / ".env"

ENV_HOST = "UPX_WALLET_HOST"
ENV_PORT = "UPX_WALLET_PORT"
ENV_USERNAME = "UPX_WALLET_USERNAME"
ENV_PASSWORD = "UPX_WALLET_PASSWORD"
ENV_TIMEOUT = "UPX_WALLET_TIMEOUT"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def load_config(
    env_path: Optional[Path] = None,
    *,
    host: Optional[str] = None,
    port: Optional[int] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    timeout: Optional[float] = None,
) -> ConnectionConfig:
    """
    Build a ConnectionConfig.

    Args:
        env_path: .env file to load (default: ~/.upxwallet/.env); variables
                  already set in the environment are not overridden
        host, port, username, password, timeout: Explicit values; None
                  falls back to the environment, then the defaults

    Returns:
        ConnectionConfig

    Raises:
        ValueError: If UPX_WALLET_PORT / UPX_WALLET_TIMEOUT are malformed
    """
    env_path = env_path or UPXWALLET_ENV
    if env_path.exists():
        load_dotenv(env_path, override=False)

    values: dict[str, Any] = {
        "host": os.environ.get(ENV_HOST) or DEFAULT_HOST,
        "port": _env_int(ENV_PORT, DEFAULT_PORT),
        "username": os.environ.get(ENV_USERNAME) or None,
        "password": os.environ.get(ENV_PASSWORD, ""),
        "timeout": _env_float(ENV_TIMEOUT, DEFAULT_TIMEOUT),
    }
    overrides = {
        "host": host,
        "port": port,
        "username": username,
        "password": password,
        "timeout": timeout,
    }
    values.update({k: v for k, v in overrides.items() if v is not None})

    return ConnectionConfig(**values)
