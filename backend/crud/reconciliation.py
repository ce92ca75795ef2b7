"""
Paid / balance / status reconciliation for truck hiring notes and invoices.

Both documents carry a tri-state status derived from the payments recorded
against them. The status columns are never set by hand: every payment
create/update/delete, and every read of a truck hiring note, calls the
recompute functions below. They are idempotent and never raise, so they can be
run speculatively over stale lists.
"""

from collections import namedtuple
from decimal import Decimal
from typing import Iterable
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.invoices import Invoice, InvoiceStatus
from models.payments import Payment, PaymentType
from models.truck_hiring_notes import TruckHiringNote, THNStatus

logger = logging.getLogger(__name__)

Settlement = namedtuple("Settlement", ["paid_amount", "balance_amount", "status"])


def derive_status(balance_amount: Decimal, total_paid: Decimal, status_enum):
    """PAID once nothing is due, PARTIALLY_PAID when something was paid, else UNPAID."""
    if balance_amount <= 0:
        return status_enum.PAID
    if total_paid > 0:
        return status_enum.PARTIALLY_PAID
    return status_enum.UNPAID


def settle(total_amount: Decimal, total_paid: Decimal, status_enum) -> Settlement:
    total_amount = Decimal(total_amount or 0)
    total_paid = Decimal(total_paid or 0)
    balance_amount = max(Decimal("0"), total_amount - total_paid)
    return Settlement(total_paid, balance_amount, derive_status(balance_amount, total_paid, status_enum))


def _sum_payments(db: Session, *criteria) -> Decimal:
    total = db.query(func.coalesce(func.sum(Payment.amount), 0)).filter(*criteria).scalar()
    return Decimal(str(total or 0))


def advance_payment_exists(db: Session, thn: TruckHiringNote) -> bool:
    return db.query(Payment.id).filter(
        Payment.truck_hiring_note_id == thn.id,
        Payment.type == PaymentType.ADVANCE,
        Payment.reference_no == thn.advance_reference,
    ).first() is not None


def effective_paid_amount(db: Session, thn: TruckHiringNote) -> Decimal:
    """
    Everything paid against a truck hiring note.

    The advance is normally recorded as its own Advance payment and is already
    part of the payment sum. Notes created before that existed only carry
    `advance_amount`, which is then added on top.
    """
    paid_from_records = _sum_payments(db, Payment.truck_hiring_note_id == thn.id)
    if advance_payment_exists(db, thn):
        return paid_from_records
    return paid_from_records + Decimal(thn.advance_amount or 0)


def thn_total_amount(thn: TruckHiringNote) -> Decimal:
    return Decimal(thn.freight_rate or 0) + Decimal(thn.additional_charges or 0)


def recompute_thn_status(db: Session, thn_id: int) -> None:
    """
    Recalculate paid_amount, balance_amount and status of one truck hiring note.

    A missing note is logged and ignored. Errors are logged and rolled back,
    never raised. The write is a bulk UPDATE so ORM validators on the note do
    not block the recompute.
    """
    try:
        thn = db.query(TruckHiringNote).filter(TruckHiringNote.id == thn_id).first()
        if thn is None:
            logger.warning(f"THN {thn_id} not found, skipping status recompute.")
            return

        total_paid = effective_paid_amount(db, thn)
        settlement = settle(thn_total_amount(thn), total_paid, THNStatus)

        db.query(TruckHiringNote).filter(TruckHiringNote.id == thn_id).update(
            {
                TruckHiringNote.paid_amount: settlement.paid_amount,
                TruckHiringNote.balance_amount: settlement.balance_amount,
                TruckHiringNote.status: settlement.status,
            },
            synchronize_session=False,
        )
        db.commit()
        logger.info(
            f"THN {thn.thn_number}: paid {settlement.paid_amount}, balance {settlement.balance_amount}, "
            f"status {settlement.status.value}"
        )
    except Exception:
        db.rollback()
        logger.exception(f"Error updating THN status for {thn_id}")


def recompute_thn_statuses(db: Session, thn_ids: Iterable[int]) -> None:
    """Recompute many notes. Each note is independent; one failure does not stop the rest."""
    for thn_id in thn_ids:
        recompute_thn_status(db, thn_id)


def recompute_invoice_status(db: Session, invoice_id: int) -> None:
    """Recalculate paid_amount, balance_amount and status of one invoice against its grand total."""
    try:
        invoice = db.query(Invoice).filter(Invoice.id == invoice_id).first()
        if invoice is None:
            logger.warning(f"Invoice {invoice_id} not found, skipping status recompute.")
            return

        total_paid = _sum_payments(db, Payment.invoice_id == invoice_id)
        settlement = settle(invoice.grand_total, total_paid, InvoiceStatus)

        db.query(Invoice).filter(Invoice.id == invoice_id).update(
            {
                Invoice.paid_amount: settlement.paid_amount,
                Invoice.balance_amount: settlement.balance_amount,
                Invoice.status: settlement.status,
            },
            synchronize_session=False,
        )
        db.commit()
        logger.info(
            f"Invoice {invoice.invoice_number}: paid {settlement.paid_amount}, balance {settlement.balance_amount}, "
            f"status {settlement.status.value}"
        )
    except Exception:
        db.rollback()
        logger.exception(f"Error updating invoice status for {invoice_id}")


def recompute_parent(db: Session, invoice_id=None, truck_hiring_note_id=None) -> None:
    """Recompute whichever document a payment is attached to."""
    if invoice_id:
        recompute_invoice_status(db, invoice_id)
    elif truck_hiring_note_id:
        recompute_thn_status(db, truck_hiring_note_id)
