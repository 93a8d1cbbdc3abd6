"""
Consolidation preview and wallet selection helpers.

Pure functions over balances (in SOL) used before a consolidation is confirmed:
how much each source contributes, what the receiver ends up with, and which
wallets are eligible as sources or receiver.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from sol_consolidator.consolidation.models import WalletRecord

HIGH_BALANCE_THRESHOLD = 0.1
BALANCE_FILTERS = ("all", "high", "low")


@dataclass(frozen=True)
class ConsolidationEstimate:
    per_wallet: dict[str, float] = field(default_factory=dict)
    total_amount: float = 0.0
    projected_receiver_balance: float = 0.0


def _balance(balances: Mapping[str, float], address: str) -> float:
    return float(balances.get(address) or 0)


def estimate_consolidation(
    source_addresses: Sequence[str],
    source_balances: Mapping[str, float],
    percentage: float,
    receiver_balance: float = 0.0,
) -> ConsolidationEstimate:
    per_wallet = {
        address: _balance(source_balances, address) * percentage / 100
        for address in source_addresses
    }
    total = sum(per_wallet.values())
    return ConsolidationEstimate(
        per_wallet=per_wallet,
        total_amount=total,
        projected_receiver_balance=receiver_balance + total,
    )


def available_source_wallets(
    wallets: Iterable[WalletRecord],
    receiver_address: str | None,
    balances: Mapping[str, float],
) -> list[WalletRecord]:
    """Funded wallets other than the receiver."""
    return [
        w for w in wallets
        if w.address != receiver_address and _balance(balances, w.address) > 0
    ]


def available_receiver_wallets(
    wallets: Iterable[WalletRecord],
    source_addresses: Iterable[str],
    balances: Mapping[str, float],
) -> list[WalletRecord]:
    """Funded wallets not already selected as sources."""
    selected = set(source_addresses)
    return [
        w for w in wallets
        if w.address not in selected and _balance(balances, w.address) > 0
    ]


def filter_wallets(
    wallets: Iterable[WalletRecord],
    balances: Mapping[str, float],
    search: str = "",
    balance_filter: str = "all",
    sort_by_balance: str | None = None,
) -> list[WalletRecord]:
    """Address search, high/low balance filter (0.1 SOL cut), optional asc/desc balance sort."""
    if balance_filter not in BALANCE_FILTERS:
        raise ValueError(f"Unknown balance filter: {balance_filter}")
    if sort_by_balance not in (None, "asc", "desc"):
        raise ValueError(f"Unknown sort direction: {sort_by_balance}")

    needle = search.strip().lower()
    out = [w for w in wallets if needle in w.address.lower()]
    if balance_filter == "high":
        out = [w for w in out if _balance(balances, w.address) >= HIGH_BALANCE_THRESHOLD]
    elif balance_filter == "low":
        out = [w for w in out if _balance(balances, w.address) < HIGH_BALANCE_THRESHOLD]

    if sort_by_balance is not None:
        out.sort(key=lambda w: _balance(balances, w.address), reverse=sort_by_balance == "desc")
    return out
