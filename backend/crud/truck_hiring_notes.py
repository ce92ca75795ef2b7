from decimal import Decimal
from typing import List, Optional
import logging

from sqlalchemy.orm import Session, selectinload

from crud import numbering as crud_numbering
from crud.audit_log import log_change
from crud.reconciliation import recompute_thn_status, recompute_thn_statuses, settle, thn_total_amount
from models.payments import Payment, PaymentMode, PaymentType
from models.truck_hiring_notes import TruckHiringNote, THNStatus
from schemas.truck_hiring_notes import TruckHiringNoteCreate, TruckHiringNoteUpdate
from utils import sqlalchemy_to_dict
from utils.exceptions import NotFoundError

logger = logging.getLogger(__name__)

FINANCIAL_FIELDS = ("freight_rate", "advance_amount", "additional_charges")


def _advance_mode(payment_mode: Optional[str]) -> PaymentMode:
    # THN payment modes are free text ("Bank Transfer", "Other"); anything unknown is booked as Cash
    for mode in PaymentMode:
        if payment_mode and payment_mode.strip().lower() == mode.value.lower():
            return mode
    return PaymentMode.CASH


def _find_advance_payment(db: Session, thn: TruckHiringNote) -> Optional[Payment]:
    return db.query(Payment).filter(
        Payment.truck_hiring_note_id == thn.id,
        Payment.type == PaymentType.ADVANCE,
        Payment.reference_no == thn.advance_reference,
    ).first()


def create_advance_payment(db: Session, thn: TruckHiringNote, amount: Decimal, user_id: Optional[str] = None) -> Payment:
    """Record the advance of a truck hiring note as an Advance payment tagged THN-<number>-ADVANCE."""
    payment = Payment(
        payment_number=crud_numbering.next_number(db, crud_numbering.PAYMENT_SEQUENCE),
        truck_hiring_note_id=thn.id,
        customer_id=None,
        date=thn.date,
        amount=amount,
        type=PaymentType.ADVANCE,
        mode=_advance_mode(thn.payment_mode),
        reference_no=thn.advance_reference,
        notes=f"Advance payment for THN #{thn.thn_number}",
        created_by=user_id,
    )
    db.add(payment)
    db.commit()
    db.refresh(payment)
    logger.info(f"Advance payment {payment.payment_number} of {amount} recorded for THN {thn.thn_number}")
    return payment


def get_thn(db: Session, thn_id: int) -> Optional[TruckHiringNote]:
    return db.query(TruckHiringNote).options(selectinload(TruckHiringNote.payments)).filter(TruckHiringNote.id == thn_id).first()


def get_thn_or_raise(db: Session, thn_id: int) -> TruckHiringNote:
    thn = get_thn(db, thn_id)
    if thn is None:
        raise NotFoundError("Truck Hiring Note", thn_id)
    return thn


def list_thns(db: Session) -> List[TruckHiringNote]:
    """All notes, newest first, with paid/balance/status refreshed from their payments."""
    thn_ids = [row.id for row in db.query(TruckHiringNote.id).all()]
    recompute_thn_statuses(db, thn_ids)
    return db.query(TruckHiringNote).options(selectinload(TruckHiringNote.payments)).order_by(TruckHiringNote.thn_number.desc()).all()


def read_thn(db: Session, thn_id: int) -> TruckHiringNote:
    """A single note with freshly recomputed figures."""
    get_thn_or_raise(db, thn_id)
    recompute_thn_status(db, thn_id)
    db.expire_all()
    return get_thn_or_raise(db, thn_id)


def create_thn(db: Session, note: TruckHiringNoteCreate, user_id: Optional[str] = None) -> TruckHiringNote:
    note_data = note.model_dump()
    advance_amount = note_data.get("advance_amount") or Decimal("0")
    note_data["advance_amount"] = advance_amount
    note_data["additional_charges"] = note_data.get("additional_charges") or Decimal("0")

    db_thn = TruckHiringNote(
        thn_number=crud_numbering.next_number(db, crud_numbering.THN_SEQUENCE),
        created_by=user_id,
        **note_data,
    )
    # Initial figures from the advance alone; the recompute below confirms them from payments
    settlement = settle(thn_total_amount(db_thn), advance_amount, THNStatus)
    db_thn.paid_amount = settlement.paid_amount
    db_thn.balance_amount = settlement.balance_amount
    db_thn.status = settlement.status
    db.add(db_thn)
    db.commit()
    db.refresh(db_thn)
    logger.info(f"THN {db_thn.thn_number} created by {user_id}")

    if advance_amount > 0:
        try:
            create_advance_payment(db, db_thn, advance_amount, user_id)
        except Exception:
            # The note stays; its advance_amount is still counted by the recompute fallback
            db.rollback()
            logger.exception(
                f"Inconsistent state: THN {db_thn.thn_number} saved but its advance payment record could not be created."
            )

    recompute_thn_status(db, db_thn.id)
    db.expire_all()
    return get_thn_or_raise(db, db_thn.id)


def _sync_advance_payment(db: Session, thn: TruckHiringNote, new_advance: Decimal, user_id: Optional[str]) -> None:
    existing_advance = _find_advance_payment(db, thn)
    if new_advance > 0:
        if existing_advance is not None:
            existing_advance.amount = new_advance
            existing_advance.date = thn.date
            existing_advance.mode = _advance_mode(thn.payment_mode)
            existing_advance.updated_by = user_id
            db.commit()
            logger.info(f"Updated advance payment for THN {thn.thn_number} to {new_advance}")
        else:
            try:
                create_advance_payment(db, thn, new_advance, user_id)
            except Exception:
                db.rollback()
                logger.exception(f"Inconsistent state: could not create advance payment for THN {thn.thn_number} during update.")
    elif existing_advance is not None:
        db.delete(existing_advance)
        db.commit()
        logger.info(f"Removed advance payment for THN {thn.thn_number}")


def _restamp_advance_payment(db: Session, thn: TruckHiringNote, user_id: Optional[str]) -> None:
    """Carry the note's date and payment mode over to its advance payment."""
    advance = _find_advance_payment(db, thn)
    if advance is None:
        return
    advance.date = thn.date
    advance.mode = _advance_mode(thn.payment_mode)
    advance.updated_by = user_id
    db.commit()
    logger.info(f"Advance payment of THN {thn.thn_number} moved to {thn.date} ({advance.mode.value})")


def update_thn(db: Session, thn_id: int, note_update: TruckHiringNoteUpdate, user_id: Optional[str] = None) -> TruckHiringNote:
    db_thn = get_thn_or_raise(db, thn_id)
    old_values = sqlalchemy_to_dict(db_thn)
    old_advance = Decimal(db_thn.advance_amount or 0)

    update_data = note_update.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        if key in FINANCIAL_FIELDS and value is None:
            continue
        setattr(db_thn, key, value)
    db_thn.updated_by = user_id
    db.flush()
    log_change(db, 'truck_hiring_notes', db_thn, 'UPDATE', user_id or "system", old_values)
    db.commit()

    new_advance = update_data.get("advance_amount")
    if new_advance is not None and Decimal(new_advance) != old_advance:
        logger.info(f"Advance amount of THN {db_thn.thn_number} changed from {old_advance} to {new_advance}")
        _sync_advance_payment(db, db_thn, Decimal(new_advance), user_id)
    elif {"date", "payment_mode"} & update_data.keys():
        _restamp_advance_payment(db, db_thn, user_id)

    recompute_thn_status(db, thn_id)
    db.expire_all()
    return get_thn_or_raise(db, thn_id)


def delete_thn(db: Session, thn_id: int, user_id: Optional[str] = None) -> None:
    """Delete a note together with every payment recorded against it."""
    db_thn = get_thn_or_raise(db, thn_id)
    old_values = sqlalchemy_to_dict(db_thn)
    payments = db.query(Payment).filter(Payment.truck_hiring_note_id == thn_id).all()
    for payment in payments:
        log_change(db, 'payments', payment, 'DELETE', user_id or "system", sqlalchemy_to_dict(payment))
        db.delete(payment)
    deleted = len(payments)
    log_change(db, 'truck_hiring_notes', db_thn, 'DELETE', user_id or "system", old_values)
    db.delete(db_thn)
    db.commit()
    logger.info(f"THN {old_values['thn_number']} deleted with {deleted} payment record(s) by {user_id}")
