from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
import logging
from utils.auth_utils import get_current_user, get_user_identifier
from crud.audit_log import log_change
from utils import sqlalchemy_to_dict

from database import get_db
from models.customers import Customer as CustomerModel
from models.invoices import Invoice as InvoiceModel
from models.payments import Payment as PaymentModel
from schemas.customers import Customer, CustomerCreate, CustomerUpdate

router = APIRouter(prefix="/customers", tags=["Customers"])
logger = logging.getLogger("customers")

@router.post("/", response_model=Customer, status_code=status.HTTP_201_CREATED)
def create_customer(
    customer: CustomerCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    if db.query(CustomerModel).filter(CustomerModel.name == customer.name).first():
        raise HTTPException(status_code=400, detail="Customer with this name already exists")

    db_customer = CustomerModel(**customer.model_dump(), created_by=get_user_identifier(user))
    db.add(db_customer)
    db.commit()
    db.refresh(db_customer)
    logger.info(f"Customer '{db_customer.name}' created by user {get_user_identifier(user)}")
    return db_customer

@router.get("/", response_model=List[Customer])
def read_customers(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return db.query(CustomerModel).order_by(CustomerModel.name).offset(skip).limit(limit).all()

@router.get("/{customer_id}", response_model=Customer)
def read_customer(customer_id: int, db: Session = Depends(get_db)):
    db_customer = db.query(CustomerModel).filter(CustomerModel.id == customer_id).first()
    if db_customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return db_customer

@router.patch("/{customer_id}", response_model=Customer)
def update_customer(
    customer_id: int,
    customer: CustomerUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    db_customer = db.query(CustomerModel).filter(CustomerModel.id == customer_id).first()
    if db_customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")

    if customer.name is not None and customer.name != db_customer.name:
        if db.query(CustomerModel).filter(CustomerModel.name == customer.name).first():
            raise HTTPException(status_code=400, detail="Customer with this name already exists")

    old_values = sqlalchemy_to_dict(db_customer)
    for key, value in customer.model_dump(exclude_unset=True).items():
        setattr(db_customer, key, value)
    db_customer.updated_by = get_user_identifier(user)
    db.flush()
    log_change(db, 'customers', db_customer, 'UPDATE', get_user_identifier(user), old_values)
    db.commit()
    db.refresh(db_customer)
    logger.info(f"Customer '{db_customer.name}' (ID: {customer_id}) updated by user {get_user_identifier(user)}")
    return db_customer

@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    db_customer = db.query(CustomerModel).filter(CustomerModel.id == customer_id).first()
    if db_customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")

    has_invoices = db.query(InvoiceModel.id).filter(InvoiceModel.customer_id == customer_id).first()
    has_payments = db.query(PaymentModel.id).filter(PaymentModel.customer_id == customer_id).first()
    if has_invoices or has_payments:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Customer '{db_customer.name}' has invoices or payments and cannot be deleted."
        )

    old_values = sqlalchemy_to_dict(db_customer)
    log_change(db, 'customers', db_customer, 'DELETE', get_user_identifier(user), old_values)
    db.delete(db_customer)
    db.commit()
    logger.info(f"Customer '{old_values['name']}' (ID: {customer_id}) deleted by user {get_user_identifier(user)}")
    return None
