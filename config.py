"""
Runtime configuration.

Settings are read from the environment (optionally from a .env file in the
project root) once per process.

Environment variables:
- REVENUECAT_WEBHOOK_AUTH_TOKEN: Shared secret expected in the Authorization header
- SUPABASE_URL: Your Supabase project URL
- SUPABASE_KEY: Your Supabase API key (use a server-side key only on the backend)
- CATALOG_PATH: Optional JSON catalog file replacing the built-in catalog
- LOG_LEVEL: Optional logging level (default: INFO), applied by api.main
- LEDGER_RPC_NAME: Optional ledger function name (default: process_transaction)
- LEDGER_SEND_UPGRADE_FLAG: Optional, "false" to omit p_is_upgrade from the RPC call
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

env_path = Path(__file__).parent / ".env"

_REQUIRED = (
    "REVENUECAT_WEBHOOK_AUTH_TOKEN",
    "SUPABASE_URL",
    "SUPABASE_KEY",
)


class ConfigurationError(RuntimeError):
    """Raised when a required environment variable is missing."""


@dataclass(frozen=True, slots=True)
class Settings:
    webhook_auth_token: str
    supabase_url: str
    supabase_key: str
    catalog_path: Optional[str] = None
    ledger_rpc: str = "process_transaction"
    send_upgrade_flag: bool = True


def _read(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def _flag(name: str, default: bool) -> bool:
    value = _read(name)
    if value is None:
        return default
    return value.lower() not in {"0", "false", "no", "off"}


def load_settings() -> Settings:
    """
    Build Settings from the environment.

    Raises:
        ConfigurationError: naming the first missing required variable
    """
    load_dotenv(dotenv_path=env_path)

    for name in _REQUIRED:
        if _read(name) is None:
            raise ConfigurationError(f"Missing environment variable: {name}.")

    return Settings(
        webhook_auth_token=os.environ["REVENUECAT_WEBHOOK_AUTH_TOKEN"].strip(),
        supabase_url=os.environ["SUPABASE_URL"].strip(),
        supabase_key=os.environ["SUPABASE_KEY"].strip(),
        catalog_path=_read("CATALOG_PATH"),
        ledger_rpc=_read("LEDGER_RPC_NAME") or "process_transaction",
        send_upgrade_flag=_flag("LEDGER_SEND_UPGRADE_FLAG", True),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide Settings (loaded on first use)."""

    return load_settings()


__all__ = [
    "ConfigurationError",
    "Settings",
    "load_settings",
    "get_settings",
]
