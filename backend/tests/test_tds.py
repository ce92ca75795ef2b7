from datetime import date
from decimal import Decimal
from types import SimpleNamespace
import logging

import pytest

from crud.tds import adjust_for_create, adjust_for_update, compute_tds_amount
from models.payments import PaymentType
from utils.exceptions import ValidationError

PAYMENT_DATE = date(2025, 2, 1)


def test_gross_receipt_is_stored_net_of_tds():
    adjustment = adjust_for_create(
        amount=Decimal("10000"),
        payment_type=PaymentType.RECEIPT,
        payment_date=PAYMENT_DATE,
        tds_applicable=True,
        tds_rate=Decimal("10"),
    )
    assert adjustment.tds_amount == Decimal("1000.00")
    assert adjustment.amount == Decimal("9000.00")
    assert adjustment.tds_date == PAYMENT_DATE


def test_explicit_tds_date_is_kept():
    adjustment = adjust_for_create(
        Decimal("5000"), PaymentType.RECEIPT, PAYMENT_DATE,
        tds_applicable=True, tds_rate=Decimal("2"), tds_date=date(2025, 3, 31),
    )
    assert adjustment.tds_date == date(2025, 3, 31)
    assert adjustment.tds_amount == Decimal("100.00")


@pytest.mark.parametrize("payment_type", [PaymentType.ADVANCE, PaymentType.PAYMENT])
def test_tds_cleared_for_non_receipts(payment_type):
    adjustment = adjust_for_create(
        Decimal("10000"), payment_type, PAYMENT_DATE,
        tds_applicable=True, tds_rate=Decimal("10"),
    )
    assert adjustment.amount == Decimal("10000")
    assert adjustment.tds_applicable is False
    assert adjustment.tds_rate is None
    assert adjustment.tds_amount is None
    assert adjustment.tds_date is None


def test_tds_not_applicable_passes_amount_through():
    adjustment = adjust_for_create(Decimal("750"), PaymentType.RECEIPT, PAYMENT_DATE, tds_rate=Decimal("10"))
    assert adjustment.as_fields() == {
        "amount": Decimal("750"),
        "tds_applicable": False,
        "tds_rate": None,
        "tds_amount": None,
        "tds_date": None,
    }


def test_missing_rate_is_a_validation_error():
    with pytest.raises(ValidationError) as exc_info:
        adjust_for_create(Decimal("10000"), PaymentType.RECEIPT, PAYMENT_DATE, tds_applicable=True)
    assert "tds_rate" in exc_info.value.field_errors


def test_supplied_tds_amount_keeps_amount_as_net():
    adjustment = adjust_for_create(
        Decimal("9000"), PaymentType.RECEIPT, PAYMENT_DATE,
        tds_applicable=True, tds_rate=Decimal("10"), tds_amount=Decimal("1000"),
    )
    assert adjustment.amount == Decimal("9000")
    assert adjustment.tds_amount == Decimal("1000")


def test_inconsistent_supplied_tds_amount_logs_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="crud.tds"):
        adjustment = adjust_for_create(
            Decimal("9000"), PaymentType.RECEIPT, PAYMENT_DATE,
            tds_applicable=True, tds_rate=Decimal("10"), tds_amount=Decimal("450"),
        )
    assert adjustment.amount == Decimal("9000")
    assert "does not match" in caplog.text


def test_compute_tds_amount_rounds_to_paise():
    assert compute_tds_amount(Decimal("333.33"), Decimal("2")) == Decimal("6.67")


def _existing(**overrides):
    values = dict(
        amount=Decimal("9000"),
        type=PaymentType.RECEIPT,
        date=PAYMENT_DATE,
        tds_applicable=True,
        tds_rate=Decimal("10"),
        tds_amount=Decimal("1000"),
        tds_date=PAYMENT_DATE,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_update_without_tds_keys_is_untouched():
    assert adjust_for_update(_existing(), {"notes": "cheque cleared"}) == {"notes": "cheque cleared"}


def test_update_with_new_amount_treats_it_as_gross():
    changes = adjust_for_update(_existing(), {"amount": Decimal("20000")})
    assert changes["tds_amount"] == Decimal("2000.00")
    assert changes["amount"] == Decimal("18000.00")


def test_update_rate_only_uses_stored_amount():
    changes = adjust_for_update(_existing(), {"tds_rate": Decimal("5")})
    assert changes["tds_rate"] == Decimal("5")
    assert changes["tds_amount"] == Decimal("450.00")
    assert "amount" not in changes


def test_update_tds_date_only_keeps_withheld_amount():
    changes = adjust_for_update(_existing(), {"tds_date": date(2025, 3, 1)})
    assert changes["tds_date"] == date(2025, 3, 1)
    assert "tds_amount" not in changes
    assert "amount" not in changes


@pytest.mark.parametrize("changes", [
    {"type": PaymentType.RECEIPT},
    {"tds_applicable": True},
    {"tds_rate": Decimal("10.00")},
])
def test_update_with_unchanged_tds_inputs_keeps_withheld_amount(changes):
    updated = adjust_for_update(_existing(), changes)
    assert "tds_amount" not in updated
    assert "amount" not in updated
    assert updated["tds_date"] == PAYMENT_DATE


def test_update_payment_date_only_is_untouched():
    assert adjust_for_update(_existing(), {"date": date(2025, 2, 5)}) == {"date": date(2025, 2, 5)}


def test_enabling_tds_later_derives_from_stored_amount():
    existing = _existing(amount=Decimal("10000"), tds_applicable=False, tds_rate=None, tds_amount=None, tds_date=None)
    changes = adjust_for_update(existing, {"tds_applicable": True, "tds_rate": Decimal("10")})
    assert changes["tds_amount"] == Decimal("1000.00")
    assert "amount" not in changes
    assert changes["tds_date"] == PAYMENT_DATE


def test_update_switching_tds_off_clears_fields():
    changes = adjust_for_update(_existing(), {"tds_applicable": False})
    assert changes["tds_applicable"] is False
    assert changes["tds_rate"] is None
    assert changes["tds_amount"] is None
    assert changes["tds_date"] is None


def test_update_enabling_tds_without_rate_fails():
    existing = _existing(tds_applicable=False, tds_rate=None, tds_amount=None, tds_date=None)
    with pytest.raises(ValidationError):
        adjust_for_update(existing, {"tds_applicable": True})


def test_update_tds_date_falls_back_to_new_payment_date():
    existing = _existing(tds_date=None)
    changes = adjust_for_update(existing, {"tds_rate": Decimal("10"), "date": date(2025, 4, 1)})
    assert changes["tds_date"] == date(2025, 4, 1)
