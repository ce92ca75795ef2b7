from typing import List, Optional
import logging

from sqlalchemy.orm import Session, joinedload

from crud import numbering as crud_numbering
from crud import tds as crud_tds
from crud.audit_log import log_change
from crud.reconciliation import recompute_parent
from models.customers import Customer
from models.invoices import Invoice
from models.payments import Payment
from models.truck_hiring_notes import TruckHiringNote
from schemas.payments import PaymentCreate, PaymentUpdate
from utils import sqlalchemy_to_dict
from utils.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _query(db: Session):
    return db.query(Payment).options(
        joinedload(Payment.customer),
        joinedload(Payment.invoice).joinedload(Invoice.customer),
        joinedload(Payment.truck_hiring_note),
    )


def list_payments(db: Session, invoice_id: Optional[int] = None, truck_hiring_note_id: Optional[int] = None) -> List[Payment]:
    query = _query(db)
    if invoice_id is not None:
        query = query.filter(Payment.invoice_id == invoice_id)
    if truck_hiring_note_id is not None:
        query = query.filter(Payment.truck_hiring_note_id == truck_hiring_note_id)
    return query.order_by(Payment.date.asc(), Payment.id.asc()).all()


def get_payment(db: Session, payment_id: int) -> Optional[Payment]:
    return _query(db).filter(Payment.id == payment_id).first()


def get_payment_or_raise(db: Session, payment_id: int) -> Payment:
    payment = get_payment(db, payment_id)
    if payment is None:
        raise NotFoundError("Payment", payment_id)
    return payment


def _check_links(db: Session, payment: PaymentCreate) -> None:
    if payment.invoice_id is not None:
        if db.query(Invoice.id).filter(Invoice.id == payment.invoice_id).first() is None:
            raise NotFoundError("Invoice", payment.invoice_id)
    if payment.truck_hiring_note_id is not None:
        if db.query(TruckHiringNote.id).filter(TruckHiringNote.id == payment.truck_hiring_note_id).first() is None:
            raise NotFoundError("Truck Hiring Note", payment.truck_hiring_note_id)
    if payment.customer_id is not None:
        if db.query(Customer.id).filter(Customer.id == payment.customer_id).first() is None:
            raise ValidationError.for_field("customer_id", "Customer does not exist")


def create_payment(db: Session, payment: PaymentCreate, user_id: Optional[str] = None) -> Payment:
    """Record a payment, store it net of TDS and refresh the parent invoice or THN."""
    _check_links(db, payment)

    adjustment = crud_tds.adjust_for_create(
        amount=payment.amount,
        payment_type=payment.type,
        payment_date=payment.date,
        tds_applicable=payment.tds_applicable,
        tds_rate=payment.tds_rate,
        tds_amount=payment.tds_amount,
        tds_date=payment.tds_date,
    )

    payment_data = payment.model_dump()
    payment_data.update(adjustment.as_fields())
    db_payment = Payment(
        payment_number=crud_numbering.next_number(db, crud_numbering.PAYMENT_SEQUENCE),
        created_by=user_id,
        **payment_data,
    )
    db.add(db_payment)
    db.commit()
    db.refresh(db_payment)
    logger.info(
        f"Payment {db_payment.payment_number} of {db_payment.amount} ({db_payment.type.value}) recorded "
        f"for invoice {db_payment.invoice_id} / THN {db_payment.truck_hiring_note_id} by {user_id}"
    )

    recompute_parent(db, db_payment.invoice_id, db_payment.truck_hiring_note_id)
    return get_payment_or_raise(db, db_payment.id)


def update_payment(db: Session, payment_id: int, payment_update: PaymentUpdate, user_id: Optional[str] = None) -> Payment:
    db_payment = get_payment_or_raise(db, payment_id)
    old_values = sqlalchemy_to_dict(db_payment)

    changes = crud_tds.adjust_for_update(db_payment, payment_update.model_dump(exclude_unset=True))
    if db_payment.invoice_id and "customer_id" in changes and changes["customer_id"] is None:
        raise ValidationError.for_field("customer_id", "Customer is required for invoice payments")

    for key, value in changes.items():
        setattr(db_payment, key, value)
    db_payment.updated_by = user_id
    db.flush()
    log_change(db, 'payments', db_payment, 'UPDATE', user_id or "system", old_values)
    db.commit()
    logger.info(f"Payment {db_payment.payment_number} updated by {user_id}")

    recompute_parent(db, db_payment.invoice_id, db_payment.truck_hiring_note_id)
    db.expire_all()
    return get_payment_or_raise(db, payment_id)


def delete_payment(db: Session, payment_id: int, user_id: Optional[str] = None) -> None:
    db_payment = get_payment_or_raise(db, payment_id)
    invoice_id, thn_id = db_payment.invoice_id, db_payment.truck_hiring_note_id
    old_values = sqlalchemy_to_dict(db_payment)

    log_change(db, 'payments', db_payment, 'DELETE', user_id or "system", old_values)
    db.delete(db_payment)
    db.commit()
    logger.info(f"Payment {old_values['payment_number']} deleted by {user_id}")

    recompute_parent(db, invoice_id, thn_id)
