"""
Environment variable loading for the consolidator.

- CONSOLIDATOR_SERVER_URL: trading backend base URL (fallback: TRADING_SERVER_URL)
- MAX_BUNDLES_PER_SECOND: bundle submissions allowed per one-second window (default: 2)
- MAX_TXS_PER_BUNDLE: transactions per bundle, at most 5 (default: 5)
- BUNDLE_DELAY_MS: pause between consecutive bundles (default: 500)
- REQUEST_TIMEOUT_SEC: optional HTTP timeout; unset means no timeout
- DRY_RUN: sign and bundle but skip submission
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is sol_consolidator/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"


def load_consolidator_env() -> None:
    """Load .env from project root. Safe to call multiple times."""
    load_dotenv(_ENV_PATH)


def parse_bool_env(name: str, default: bool = False) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    return default


def parse_int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def parse_float_env(name: str) -> float | None:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def get_server_url() -> str:
    """
    Resolve the trading backend base URL from env.
    Order: CONSOLIDATOR_SERVER_URL > TRADING_SERVER_URL > "" (relative paths).
    Trailing slashes are stripped.
    """
    load_consolidator_env()
    url = (os.getenv("CONSOLIDATOR_SERVER_URL") or os.getenv("TRADING_SERVER_URL") or "").strip()
    return url.rstrip("/")


def mask_url(url: str, limit: int = 50) -> str:
    """Hide api-key query values and shorten long URLs for log output."""
    if "api-key=" in url:
        url = url.split("api-key=")[0] + "api-key=***"
    return url[:limit] + "..." if len(url) > limit else url
