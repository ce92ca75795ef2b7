from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional
import logging

from sqlalchemy.orm import Session, selectinload

from crud import numbering as crud_numbering
from crud.audit_log import log_change
from crud.reconciliation import recompute_invoice_status
from models.customers import Customer
from models.invoices import Invoice, GstType
from models.lorry_receipts import LorryReceipt, LorryReceiptStatus
from models.payments import Payment
from schemas.invoices import InvoiceCreate, InvoiceUpdate
from utils import sqlalchemy_to_dict
from utils.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


def _percent_of(amount: Decimal, rate: Decimal) -> Decimal:
    return (Decimal(amount) * Decimal(rate) / Decimal("100")).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def compute_invoice_totals(invoice: InvoiceCreate) -> Dict[str, Decimal]:
    """
    GST components and grand total for a new invoice.

    Without manual GST the components follow the rates: CGST+SGST for intra-state
    invoices, IGST for inter-state ones. Reverse-charge (RCM) invoices carry no
    GST on the face of the invoice. A supplied grand_total is kept as given.
    """
    zero = Decimal("0")
    if invoice.is_rcm:
        cgst = sgst = igst = zero
    elif invoice.is_manual_gst:
        cgst = invoice.cgst_amount or zero
        sgst = invoice.sgst_amount or zero
        igst = invoice.igst_amount or zero
    elif invoice.gst_type == GstType.IGST:
        cgst = sgst = zero
        igst = _percent_of(invoice.total_amount, invoice.igst_rate)
    else:
        cgst = _percent_of(invoice.total_amount, invoice.cgst_rate)
        sgst = _percent_of(invoice.total_amount, invoice.sgst_rate)
        igst = zero

    grand_total = invoice.grand_total
    if grand_total is None:
        grand_total = Decimal(invoice.total_amount) + cgst + sgst + igst

    return {
        "cgst_amount": cgst,
        "sgst_amount": sgst,
        "igst_amount": igst,
        "grand_total": grand_total,
    }


def _query(db: Session):
    return db.query(Invoice).options(
        selectinload(Invoice.customer),
        selectinload(Invoice.lorry_receipts),
        selectinload(Invoice.payments),
    )


def list_invoices(db: Session, customer_id: Optional[int] = None) -> List[Invoice]:
    query = _query(db)
    if customer_id is not None:
        query = query.filter(Invoice.customer_id == customer_id)
    return query.order_by(Invoice.invoice_number.desc()).all()


def get_invoice_or_raise(db: Session, invoice_id: int) -> Invoice:
    invoice = _query(db).filter(Invoice.id == invoice_id).first()
    if invoice is None:
        raise NotFoundError("Invoice", invoice_id)
    return invoice


def create_invoice(db: Session, invoice: InvoiceCreate, user_id: Optional[str] = None) -> Invoice:
    if db.query(Customer.id).filter(Customer.id == invoice.customer_id).first() is None:
        raise ValidationError.for_field("customer_id", "Customer does not exist")

    lr_ids = list(dict.fromkeys(invoice.lorry_receipt_ids))
    lorry_receipts = db.query(LorryReceipt).filter(LorryReceipt.id.in_(lr_ids)).all()
    missing = sorted(set(lr_ids) - {lr.id for lr in lorry_receipts})
    if missing:
        raise ValidationError.for_field("lorry_receipt_ids", f"Lorry receipts not found: {missing}")
    already_invoiced = sorted(lr.lr_number for lr in lorry_receipts if lr.invoice_id is not None)
    if already_invoiced:
        raise ValidationError.for_field("lorry_receipt_ids", f"Lorry receipts already invoiced: {already_invoiced}")

    invoice_data = invoice.model_dump(exclude={"lorry_receipt_ids", "cgst_amount", "sgst_amount", "igst_amount", "grand_total"})
    invoice_data.update(compute_invoice_totals(invoice))

    db_invoice = Invoice(
        invoice_number=crud_numbering.next_number(db, crud_numbering.INVOICE_SEQUENCE),
        paid_amount=Decimal("0"),
        balance_amount=invoice_data["grand_total"],
        created_by=user_id,
        **invoice_data,
    )
    db.add(db_invoice)
    db.flush()

    for lr in lorry_receipts:
        lr.invoice_id = db_invoice.id
        lr.status = LorryReceiptStatus.INVOICED
    db.commit()
    logger.info(f"Invoice {db_invoice.invoice_number} created for customer {invoice.customer_id} with {len(lorry_receipts)} LR(s) by {user_id}")

    recompute_invoice_status(db, db_invoice.id)
    db.expire_all()
    return get_invoice_or_raise(db, db_invoice.id)


def update_invoice(db: Session, invoice_id: int, invoice_update: InvoiceUpdate, user_id: Optional[str] = None) -> Invoice:
    db_invoice = get_invoice_or_raise(db, invoice_id)
    old_values = sqlalchemy_to_dict(db_invoice)

    for key, value in invoice_update.model_dump(exclude_unset=True).items():
        if value is None and key != "remarks":
            continue
        setattr(db_invoice, key, value)
    db_invoice.updated_by = user_id
    db.flush()
    log_change(db, 'invoices', db_invoice, 'UPDATE', user_id or "system", old_values)
    db.commit()

    recompute_invoice_status(db, invoice_id)
    db.expire_all()
    return get_invoice_or_raise(db, invoice_id)


def delete_invoice(db: Session, invoice_id: int, user_id: Optional[str] = None) -> None:
    """Delete an invoice, its payments, and release its lorry receipts back to Created."""
    db_invoice = get_invoice_or_raise(db, invoice_id)
    old_values = sqlalchemy_to_dict(db_invoice)

    for lr in db_invoice.lorry_receipts:
        lr.invoice_id = None
        lr.status = LorryReceiptStatus.CREATED
    for payment in db.query(Payment).filter(Payment.invoice_id == invoice_id).all():
        log_change(db, 'payments', payment, 'DELETE', user_id or "system", sqlalchemy_to_dict(payment))
        db.delete(payment)
    log_change(db, 'invoices', db_invoice, 'DELETE', user_id or "system", old_values)
    db.delete(db_invoice)
    db.commit()
    logger.info(f"Invoice {old_values['invoice_number']} deleted by {user_id}")
