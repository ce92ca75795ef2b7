"""
TDS (Tax Deducted at Source) adjustment for customer receipts.

A receipt subject to TDS arrives as a gross amount. The customer withholds
`tds_rate` percent and remits it to the tax department, so the amount that
actually lands in the bank, and the amount stored on the Payment, is the net:

    tds_amount = gross * tds_rate / 100
    amount     = gross - tds_amount

When the caller already supplies `tds_amount`, `amount` is taken to be net and
is stored unchanged. For any payment that is not a Receipt, or when TDS is not
applicable, every TDS field is cleared.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional
import logging

from models.payments import PaymentType
from utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class TdsAdjustment:
    amount: Decimal
    tds_applicable: bool
    tds_rate: Optional[Decimal] = None
    tds_amount: Optional[Decimal] = None
    tds_date: Optional[date] = None

    def as_fields(self) -> Dict[str, Any]:
        return {
            "amount": self.amount,
            "tds_applicable": self.tds_applicable,
            "tds_rate": self.tds_rate,
            "tds_amount": self.tds_amount,
            "tds_date": self.tds_date,
        }


def compute_tds_amount(amount: Decimal, tds_rate: Decimal) -> Decimal:
    return (Decimal(amount) * Decimal(tds_rate) / Decimal("100")).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _require_rate(tds_rate: Optional[Decimal]) -> Decimal:
    if tds_rate is None:
        raise ValidationError.for_field("tds_rate", "TDS rate is required when TDS is applicable")
    if tds_rate < 0 or tds_rate > 100:
        raise ValidationError.for_field("tds_rate", "TDS rate must be between 0 and 100")
    return Decimal(tds_rate)


def _warn_if_inconsistent(amount: Decimal, tds_rate: Decimal, tds_amount: Decimal) -> None:
    # A supplied tds_amount makes `amount` net. Flag it when it matches neither reading.
    expected_on_net = compute_tds_amount(amount, tds_rate)
    expected_on_gross = compute_tds_amount(amount + tds_amount, tds_rate)
    if tds_amount not in (expected_on_net, expected_on_gross):
        logger.warning(
            f"Supplied TDS amount {tds_amount} does not match {tds_rate}% of amount {amount} "
            f"(net reading {expected_on_net}, gross reading {expected_on_gross}). Storing amount as net."
        )


def adjust_for_create(
    amount: Decimal,
    payment_type: PaymentType,
    payment_date: date,
    tds_applicable: bool = False,
    tds_rate: Optional[Decimal] = None,
    tds_amount: Optional[Decimal] = None,
    tds_date: Optional[date] = None,
) -> TdsAdjustment:
    """Resolve the stored amount and TDS fields for a new payment."""
    amount = Decimal(amount)
    if not tds_applicable or payment_type != PaymentType.RECEIPT:
        return TdsAdjustment(amount=amount, tds_applicable=False)

    rate = _require_rate(tds_rate)
    if tds_amount is None:
        tds_amount = compute_tds_amount(amount, rate)
        final_amount = amount - tds_amount
    else:
        tds_amount = Decimal(tds_amount)
        _warn_if_inconsistent(amount, rate, tds_amount)
        final_amount = amount

    return TdsAdjustment(
        amount=final_amount,
        tds_applicable=True,
        tds_rate=rate,
        tds_amount=tds_amount,
        tds_date=tds_date or payment_date,
    )


def adjust_for_update(existing, changes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Re-derive TDS fields for a partial update of `existing`.

    `changes` is the `exclude_unset` dump of the update payload. The returned
    dict is `changes` with the amount/TDS keys rewritten; keys the caller did
    not touch are left out so untouched columns stay as they are.
    """
    updates = dict(changes)
    tds_keys = {"amount", "type", "tds_applicable", "tds_rate", "tds_amount", "tds_date"}
    if not tds_keys & updates.keys():
        return updates

    payment_type = updates.get("type", existing.type)
    applicable = updates.get("tds_applicable", existing.tds_applicable)

    if not applicable or payment_type != PaymentType.RECEIPT:
        updates.update(tds_applicable=False, tds_rate=None, tds_amount=None, tds_date=None)
        return updates

    rate = _require_rate(updates.get("tds_rate", existing.tds_rate))
    supplied_tds = updates.get("tds_amount")
    tds_date = updates.get("tds_date") or existing.tds_date or updates.get("date") or existing.date

    if supplied_tds is not None:
        tds_amount = Decimal(supplied_tds)
        if "amount" in updates:
            _warn_if_inconsistent(Decimal(updates["amount"]), rate, tds_amount)
    elif "amount" in updates:
        tds_amount = compute_tds_amount(updates["amount"], rate)
        updates["amount"] = Decimal(updates["amount"]) - tds_amount
    elif rate != existing.tds_rate or not existing.tds_applicable or existing.tds_amount is None:
        tds_amount = compute_tds_amount(existing.amount, rate)
    else:
        # Only dates or an unchanged flag were sent; the withheld amount stands
        updates.pop("tds_amount", None)
        updates.update(tds_applicable=True, tds_rate=rate, tds_date=tds_date)
        return updates

    updates.update(
        tds_applicable=True,
        tds_rate=rate,
        tds_amount=tds_amount,
        tds_date=tds_date,
    )
    return updates
