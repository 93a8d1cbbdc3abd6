"""
Application settings for the consolidator.

Responsibilities:
- Build a typed ConsolidatorConfig from environment variables (.env aware).
- Clamp out-of-range values to safe defaults.
- Provide get_settings() as the cached process-wide settings object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache

from sol_consolidator.config.env import (
    get_server_url,
    load_consolidator_env,
    parse_bool_env,
    parse_float_env,
    parse_int_env,
)

DEFAULT_MAX_BUNDLES_PER_SECOND = 2
# Block engine rejects bundles with more than 5 transactions
MAX_TXS_PER_BUNDLE_CEILING = 5
DEFAULT_MAX_TXS_PER_BUNDLE = MAX_TXS_PER_BUNDLE_CEILING
DEFAULT_BUNDLE_DELAY_MS = 500
PARTIAL_TRANSACTIONS_PATH = "/api/wallets/consolidate"
SEND_BUNDLE_PATH = "/api/transactions/send"


@dataclass
class ConsolidatorConfig:
    """Config for the consolidation pipeline (env or explicit). Base URL is injected, never read at call time."""

    server_url: str = field(default_factory=get_server_url)
    max_bundles_per_second: int = field(
        default_factory=lambda: parse_int_env("MAX_BUNDLES_PER_SECOND", DEFAULT_MAX_BUNDLES_PER_SECOND)
    )
    max_txs_per_bundle: int = field(
        default_factory=lambda: parse_int_env("MAX_TXS_PER_BUNDLE", DEFAULT_MAX_TXS_PER_BUNDLE)
    )
    bundle_delay_ms: int = field(default_factory=lambda: parse_int_env("BUNDLE_DELAY_MS", DEFAULT_BUNDLE_DELAY_MS))
    request_timeout_sec: float | None = field(default_factory=lambda: parse_float_env("REQUEST_TIMEOUT_SEC"))
    dry_run: bool = field(default_factory=lambda: parse_bool_env("DRY_RUN", False))

    def __post_init__(self) -> None:
        self.server_url = (self.server_url or "").strip().rstrip("/")
        if self.max_bundles_per_second < 1:
            self.max_bundles_per_second = 1
        if self.max_txs_per_bundle < 1:
            self.max_txs_per_bundle = 1
        if self.max_txs_per_bundle > MAX_TXS_PER_BUNDLE_CEILING:
            self.max_txs_per_bundle = MAX_TXS_PER_BUNDLE_CEILING
        if self.bundle_delay_ms < 0:
            self.bundle_delay_ms = 0
        if self.request_timeout_sec is not None and self.request_timeout_sec <= 0:
            self.request_timeout_sec = None

    @property
    def partial_transactions_url(self) -> str:
        return f"{self.server_url}{PARTIAL_TRANSACTIONS_PATH}"

    @property
    def send_bundle_url(self) -> str:
        return f"{self.server_url}{SEND_BUNDLE_PATH}"


@lru_cache(maxsize=1)
def get_settings() -> ConsolidatorConfig:
    """
    Return the process-wide settings built from env.

    Returns:
        ConsolidatorConfig with server_url, max_bundles_per_second,
        max_txs_per_bundle, bundle_delay_ms, request_timeout_sec and dry_run.
    """
    load_consolidator_env()
    return ConsolidatorConfig()


def settings_from_env(**overrides: object) -> ConsolidatorConfig:
    """Fresh (uncached) config from env with explicit field overrides, e.g. from CLI flags."""
    load_consolidator_env()
    cfg = ConsolidatorConfig()
    for key, value in overrides.items():
        if value is None:
            continue
        if not hasattr(cfg, key):
            raise AttributeError(f"Unknown config field: {key}")
        setattr(cfg, key, value)
    cfg.__post_init__()
    return cfg


__all__ = [
    "DEFAULT_BUNDLE_DELAY_MS",
    "DEFAULT_MAX_BUNDLES_PER_SECOND",
    "DEFAULT_MAX_TXS_PER_BUNDLE",
    "MAX_TXS_PER_BUNDLE_CEILING",
    "ConsolidatorConfig",
    "get_settings",
    "settings_from_env",
]
