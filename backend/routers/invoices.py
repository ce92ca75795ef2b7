from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging
from utils.auth_utils import get_current_user, get_user_identifier

from database import get_db
from crud import invoices as crud_invoices
from crud.reconciliation import recompute_invoice_status
from schemas.invoices import Invoice, InvoiceCreate, InvoiceUpdate

router = APIRouter(prefix="/invoices", tags=["Invoices"])
logger = logging.getLogger("invoices")

@router.post("/", response_model=Invoice, status_code=status.HTTP_201_CREATED)
def create_invoice(
    invoice: InvoiceCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    """Create an invoice over one or more unbilled lorry receipts."""
    return crud_invoices.create_invoice(db, invoice, get_user_identifier(user))

@router.get("/", response_model=List[Invoice])
def read_invoices(customer_id: Optional[int] = None, db: Session = Depends(get_db)):
    return crud_invoices.list_invoices(db, customer_id=customer_id)

@router.get("/{invoice_id}", response_model=Invoice)
def read_invoice(invoice_id: int, db: Session = Depends(get_db)):
    return crud_invoices.get_invoice_or_raise(db, invoice_id)

@router.patch("/{invoice_id}", response_model=Invoice)
def update_invoice(
    invoice_id: int,
    invoice: InvoiceUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    return crud_invoices.update_invoice(db, invoice_id, invoice, get_user_identifier(user))

@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    crud_invoices.delete_invoice(db, invoice_id, get_user_identifier(user))
    return None

@router.post("/{invoice_id}/recalculate", response_model=Invoice)
def recalculate_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    """Recompute paid amount, balance and status from the recorded payments."""
    crud_invoices.get_invoice_or_raise(db, invoice_id)
    recompute_invoice_status(db, invoice_id)
    db.expire_all()
    logger.info(f"Invoice ID {invoice_id} recalculated by user {get_user_identifier(user)}")
    return crud_invoices.get_invoice_or_raise(db, invoice_id)
