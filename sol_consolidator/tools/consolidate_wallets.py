"""
Consolidate SOL from the wallets in a CSV file into one receiver wallet.

How to run:
    From project root (with .env configured):
        python -m sol_consolidator.tools.consolidate_wallets \
            --wallets wallets.csv --receiver <ADDRESS> --percentage 50
    Preview only (no network calls):
        python -m sol_consolidator.tools.consolidate_wallets \
            --wallets wallets.csv --receiver <ADDRESS> --percentage 50 --preview

Input CSV columns:
    address, private_key, balance   (balance in SOL)
    The receiver's row, if present, supplies its key and balance; otherwise the
    receiver key is read from RECEIVER_PRIVATE_KEY (see --receiver-key-env).

Env vars:
    CONSOLIDATOR_SERVER_URL, MAX_BUNDLES_PER_SECOND, MAX_TXS_PER_BUNDLE,
    BUNDLE_DELAY_MS, REQUEST_TIMEOUT_SEC, DRY_RUN

Output:
    JSON summary on stdout; exit code 0 on success, 1 on failure.
"""

from __future__ import annotations

import argparse
import asyncio
import csv
import json
import os
import sys
from pathlib import Path
from typing import Any

from sol_consolidator.config.env import load_consolidator_env
from sol_consolidator.config.settings import settings_from_env
from sol_consolidator.consolidation.models import WalletRecord
from sol_consolidator.consolidation.orchestrator import consolidate_sol
from sol_consolidator.consolidation.planning import estimate_consolidation
from sol_consolidator.logging import get_logger
from sol_consolidator.utils.wallet_utils import is_valid_wallet, short_address

logger = get_logger(__name__)

DEFAULT_RECEIVER_KEY_ENV = "RECEIVER_PRIVATE_KEY"


def load_wallets_csv(path: Path) -> tuple[list[WalletRecord], dict[str, float]]:
    """Read address,private_key,balance rows. Rows without an address are skipped."""
    wallets: list[WalletRecord] = []
    balances: dict[str, float] = {}
    with path.open(newline="", encoding="utf-8") as f:
        for row in csv.DictReader(f):
            wallet = WalletRecord.from_dict(row)
            if not wallet.address:
                continue
            wallets.append(wallet)
            balances[wallet.address] = float((row.get("balance") or "0").strip() or 0)
    return wallets, balances


def invalid_addresses(wallets: list[WalletRecord], receiver_address: str) -> list[str]:
    """Receiver and CSV addresses that do not parse as Solana public keys, receiver first."""
    candidates = [receiver_address] + [w.address for w in wallets]
    return [a for a in dict.fromkeys(candidates) if not is_valid_wallet(a)]


def split_receiver(
    wallets: list[WalletRecord],
    receiver_address: str,
    receiver_key_env: str,
) -> tuple[list[WalletRecord], WalletRecord]:
    """Separate the receiver from the sources; fall back to the env var for its key."""
    sources = [w for w in wallets if w.address != receiver_address]
    receiver = next((w for w in wallets if w.address == receiver_address), None)
    if receiver is None:
        receiver = WalletRecord(receiver_address, (os.getenv(receiver_key_env) or "").strip())
    return sources, receiver


def _preview(sources: list[WalletRecord], receiver_address: str, balances: dict[str, float], percentage: float) -> dict[str, Any]:
    est = estimate_consolidation(
        [w.address for w in sources],
        balances,
        percentage,
        receiver_balance=balances.get(receiver_address, 0.0),
    )
    return {
        "percentage": percentage,
        "per_wallet": est.per_wallet,
        "total_amount": round(est.total_amount, 9),
        "projected_receiver_balance": round(est.projected_receiver_balance, 9),
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Consolidate SOL from many source wallets into one receiver via the trading backend.",
    )
    parser.add_argument("--wallets", type=Path, required=True, help="CSV with columns: address, private_key, balance")
    parser.add_argument("--receiver", required=True, help="Receiver wallet address (fee payer)")
    parser.add_argument("--percentage", type=float, required=True, help="Percent of each source balance to move (0-100]")
    parser.add_argument(
        "--receiver-key-env",
        default=DEFAULT_RECEIVER_KEY_ENV,
        help=f"Env var holding the receiver private key when it is not in the CSV (default: {DEFAULT_RECEIVER_KEY_ENV})",
    )
    parser.add_argument("--server-url", default=None, help="Trading backend base URL (overrides CONSOLIDATOR_SERVER_URL)")
    parser.add_argument("--dry-run", action="store_true", help="Sign and bundle but do not submit")
    parser.add_argument("--preview", action="store_true", help="Print the consolidation estimate and exit")
    args = parser.parse_args(argv)

    load_consolidator_env()
    try:
        wallets, balances = load_wallets_csv(args.wallets)
    except (OSError, ValueError) as e:
        logger.exception("consolidate_wallets_csv_failed", path=str(args.wallets), error=str(e))
        print("ERROR:", e, file=sys.stderr)
        return 1

    invalid = invalid_addresses(wallets, args.receiver)
    if invalid:
        shown = [short_address(a) + "..." for a in invalid]
        logger.warning("consolidate_wallets_invalid_addresses", addresses=shown)
        print("ERROR: invalid wallet address(es):", ", ".join(shown), file=sys.stderr)
        return 1

    sources, receiver = split_receiver(wallets, args.receiver, args.receiver_key_env)

    if args.preview:
        print(json.dumps(_preview(sources, receiver.address, balances, args.percentage), indent=2))
        return 0

    config = settings_from_env(server_url=args.server_url, dry_run=True if args.dry_run else None)
    outcome = asyncio.run(consolidate_sol(sources, receiver, args.percentage, balances, config))
    print(json.dumps(outcome.to_dict(), indent=2))
    return 0 if outcome.success else 1


if __name__ == "__main__":
    sys.exit(main())
