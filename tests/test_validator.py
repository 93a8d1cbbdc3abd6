"""
Tests for consolidation input validation (validate_consolidation_inputs).

Check precedence: receiver fields, empty sources, source fields, balances, percentage.
"""

from __future__ import annotations

import math

import pytest

from sol_consolidator.consolidation.models import WalletRecord
from sol_consolidator.consolidation.validator import validate_consolidation_inputs
from sol_consolidator.core.exceptions import ValidationError

RECEIVER = WalletRecord("ReceiverAddr1111111111111111111111111111111", "receiver-secret")
SOURCE_A = WalletRecord("AaaaaaSource111111111111111111111111111111", "secret-a")
SOURCE_B = WalletRecord("BbbbbbSource222222222222222222222222222222", "secret-b")
SOURCE_C = WalletRecord("CcccccSource333333333333333333333333333333", "secret-c")
BALANCES = {SOURCE_A.address: 1.5, SOURCE_B.address: 0.2, SOURCE_C.address: 3.0}


def test_valid_inputs():
    result = validate_consolidation_inputs([SOURCE_A, SOURCE_B], RECEIVER, 50, BALANCES)
    assert result.valid is True
    assert result.error is None
    result.raise_for_error()


def test_receiver_missing_private_key_checked_before_sources():
    """Receiver field check precedes every source and balance check."""
    receiver = WalletRecord(RECEIVER.address, "")
    result = validate_consolidation_inputs([SOURCE_A], receiver, 50, BALANCES)
    assert result.valid is False
    assert result.error == "Invalid receiver wallet"


def test_receiver_missing_address():
    receiver = WalletRecord("", "receiver-secret")
    result = validate_consolidation_inputs([SOURCE_A], receiver, 50, {})
    assert result.error == "Invalid receiver wallet"


def test_receiver_none():
    result = validate_consolidation_inputs([SOURCE_A], None, 50, BALANCES)
    assert result.error == "Invalid receiver wallet"


def test_no_source_wallets():
    result = validate_consolidation_inputs([], RECEIVER, 50, BALANCES)
    assert result.valid is False
    assert result.error == "No source wallets"


def test_source_missing_fields_reported_before_balance():
    bad = WalletRecord(SOURCE_B.address, "")
    # SOURCE_C has no balance entry, but the field check runs over all sources first
    result = validate_consolidation_inputs([SOURCE_C, bad], RECEIVER, 50, {SOURCE_B.address: 1.0})
    assert result.error == "Invalid source wallet data"


def test_first_zero_balance_wallet_reported_truncated():
    balances = {SOURCE_A.address: 1.0, SOURCE_B.address: 0, SOURCE_C.address: 0}
    result = validate_consolidation_inputs([SOURCE_A, SOURCE_B, SOURCE_C], RECEIVER, 50, balances)
    assert result.valid is False
    assert result.error == "Source wallet Bbbbbb... has no balance"


def test_missing_balance_treated_as_zero():
    result = validate_consolidation_inputs([SOURCE_A], RECEIVER, 50, {})
    assert result.error == "Source wallet Aaaaaa... has no balance"


def test_negative_balance_rejected():
    result = validate_consolidation_inputs([SOURCE_A], RECEIVER, 50, {SOURCE_A.address: -0.5})
    assert result.error == "Source wallet Aaaaaa... has no balance"


@pytest.mark.parametrize("balance", [math.nan, math.inf, None, "1.0", True])
def test_non_numeric_or_non_finite_balance_rejected(balance):
    """NaN compares false against zero; it must still count as no balance."""
    result = validate_consolidation_inputs([SOURCE_A], RECEIVER, 50, {SOURCE_A.address: balance})
    assert result.valid is False
    assert result.error == "Source wallet Aaaaaa... has no balance"


def test_balance_check_skipped_without_balances():
    result = validate_consolidation_inputs([SOURCE_A], RECEIVER, 50, None)
    assert result.valid is True


@pytest.mark.parametrize("percentage", [0, 101, -1, 100.0001, math.nan, math.inf, "50", None, True])
def test_percentage_rejected(percentage):
    result = validate_consolidation_inputs([SOURCE_A], RECEIVER, percentage, BALANCES)
    assert result.valid is False
    assert result.error == "Percentage must be between 1 and 100"


@pytest.mark.parametrize("percentage", [1, 100, 0.5, 99.9])
def test_percentage_accepted(percentage):
    assert validate_consolidation_inputs([SOURCE_A], RECEIVER, percentage, BALANCES).valid is True


def test_balance_error_precedes_percentage_error():
    result = validate_consolidation_inputs([SOURCE_A], RECEIVER, 0, {})
    assert "has no balance" in result.error


def test_raise_for_error():
    result = validate_consolidation_inputs([], RECEIVER, 50, BALANCES)
    with pytest.raises(ValidationError, match="No source wallets") as exc_info:
        result.raise_for_error()
    assert exc_info.value.code == "validation_error"
