"""
Input validation for a consolidation request.

Runs before any keypair derivation or backend call. Checks are ordered and the
first failing check wins:
    1. receiver has address and private key
    2. at least one source wallet
    3. every source has address and private key (first offender)
    4. every source has a finite, strictly positive balance (first offender, address shortened)
    5. percentage is a finite number in (0, 100]
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from numbers import Real

from sol_consolidator.consolidation.models import ValidationResult, WalletRecord
from sol_consolidator.utils.wallet_utils import short_address


def _has_fields(wallet: WalletRecord | None) -> bool:
    return bool(wallet is not None and wallet.address and wallet.private_key)


def _positive_balance(balance: object) -> bool:
    if isinstance(balance, bool) or not isinstance(balance, Real):
        return False
    return math.isfinite(float(balance)) and balance > 0


def _valid_percentage(percentage: object) -> bool:
    if isinstance(percentage, bool) or not isinstance(percentage, Real):
        return False
    value = float(percentage)
    return math.isfinite(value) and 0 < value <= 100


def validate_consolidation_inputs(
    source_wallets: Sequence[WalletRecord],
    receiver_wallet: WalletRecord | None,
    percentage: float,
    source_balances: Mapping[str, float] | None,
) -> ValidationResult:
    """
    Validate consolidation inputs. Pure; no side effects.

    source_balances=None skips the balance check (caller has no balances);
    any mapping, even empty, applies it with missing addresses counted as 0.
    """
    if not _has_fields(receiver_wallet):
        return ValidationResult(False, "Invalid receiver wallet")

    if not source_wallets:
        return ValidationResult(False, "No source wallets")

    for wallet in source_wallets:
        if not _has_fields(wallet):
            return ValidationResult(False, "Invalid source wallet data")

    if source_balances is not None:
        for wallet in source_wallets:
            if not _positive_balance(source_balances.get(wallet.address)):
                return ValidationResult(
                    False, f"Source wallet {short_address(wallet.address)}... has no balance"
                )

    if not _valid_percentage(percentage):
        return ValidationResult(False, "Percentage must be between 1 and 100")

    return ValidationResult(True)
