from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

import pytest

from ledger_import.errors import TransactionValidationError
from ledger_import.models import CanonicalTransaction, RowOutcome, TransactionKind, TransferType
from ledger_import.validation import validate_transaction

VALID = CanonicalTransaction(
    kind=TransactionKind.BUY,
    btc_amount=Decimal("0.1"),
    price_per_btc=Decimal(45000),
    currency="USD",
    total_amount=Decimal(4500),
    fees=Decimal("22.5"),
    fees_currency="USD",
    transaction_date="2024-01-15",
)


def test_valid_transaction_is_returned_unchanged() -> None:
    assert validate_transaction(VALID) is VALID


@pytest.mark.parametrize(
    ("changes", "message"),
    [
        ({"btc_amount": Decimal(0)}, "BTC amount must be greater than 0"),
        ({"btc_amount": Decimal("-0.5")}, "BTC amount must be greater than 0"),
        ({"btc_amount": Decimal("NaN")}, "BTC amount must be greater than 0"),
        ({"price_per_btc": Decimal(-1)}, "Price per BTC must be 0 or greater"),
        ({"currency": "U"}, "Currency must be at least 2 characters"),
        ({"currency": ""}, "Currency must be at least 2 characters"),
        ({"total_amount": Decimal(-1)}, "Total amount must be 0 or greater"),
        ({"fees": Decimal("-0.01")}, "Fees must be 0 or greater"),
        ({"transaction_date": "01/15/2024"}, "Transaction date must be YYYY-MM-DD"),
        ({"transaction_date": ""}, "Transaction date must be YYYY-MM-DD"),
        (
            {"transfer_type": TransferType.TRANSFER_OUT},
            "only allowed on transfers",
        ),
        (
            {"destination_address": "bc1qsomewhere"},
            "only allowed on transfers",
        ),
    ],
)
def test_each_rule_names_itself(changes: dict, message: str) -> None:
    with pytest.raises(TransactionValidationError, match=message):
        validate_transaction(replace(VALID, **changes))


def test_zero_price_and_total_are_allowed() -> None:
    tx = replace(VALID, price_per_btc=Decimal(0), total_amount=Decimal(0), fees=Decimal(0))
    assert validate_transaction(tx) is tx


def test_transfer_may_carry_destination() -> None:
    tx = replace(
        VALID,
        kind=TransactionKind.TRANSFER,
        price_per_btc=Decimal(0),
        total_amount=Decimal(0),
        transfer_type=TransferType.TO_COLD_WALLET,
        destination_address="bc1qcold",
    )
    assert validate_transaction(tx) is tx


def test_validation_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        validate_transaction(replace(VALID, btc_amount=Decimal(0)))


def test_record_outcome_validates() -> None:
    assert RowOutcome.record(VALID).transaction is VALID
    with pytest.raises(TransactionValidationError):
        RowOutcome.record(replace(VALID, fees=Decimal(-1)))


def test_as_record_uses_plain_decimal_strings() -> None:
    record = replace(VALID, btc_amount=Decimal("1E-8")).as_record()
    assert record["btc_amount"] == "0.00000001"
    assert record["type"] == "BUY"
    assert record["transaction_date"] == "2024-01-15"
