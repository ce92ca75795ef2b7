from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging
from utils.auth_utils import get_current_user, get_user_identifier

from database import get_db
from crud import payments as crud_payments
from schemas.payments import Payment, PaymentCreate, PaymentUpdate

router = APIRouter(prefix="/payments", tags=["Payments"])
logger = logging.getLogger("payments")

@router.post("/", response_model=Payment, status_code=status.HTTP_201_CREATED)
def create_payment(
    payment: PaymentCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    """Record a payment against an invoice or a truck hiring note."""
    return crud_payments.create_payment(db, payment, get_user_identifier(user))

@router.get("/", response_model=List[Payment])
def read_payments(
    invoice_id: Optional[int] = None,
    truck_hiring_note_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    return crud_payments.list_payments(db, invoice_id=invoice_id, truck_hiring_note_id=truck_hiring_note_id)

@router.get("/{payment_id}", response_model=Payment)
def read_payment(payment_id: int, db: Session = Depends(get_db)):
    db_payment = crud_payments.get_payment(db, payment_id)
    if db_payment is None:
        raise HTTPException(status_code=404, detail="Payment not found")
    return db_payment

@router.patch("/{payment_id}", response_model=Payment)
def update_payment(
    payment_id: int,
    payment: PaymentUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    return crud_payments.update_payment(db, payment_id, payment, get_user_identifier(user))

@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    crud_payments.delete_payment(db, payment_id, get_user_identifier(user))
    return None
