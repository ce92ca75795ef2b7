from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date
from decimal import Decimal
import logging

from database import get_db
from crud import ledgers as crud_ledgers
from schemas.ledgers import ClientLedgerData, CompanyLedgerData, LedgerFilters, VoucherType

router = APIRouter(prefix="/ledgers", tags=["Ledgers"])
logger = logging.getLogger("ledgers")


def ledger_filters(
    start_date: Optional[date] = Query(None, description="Inclusive start date (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="Inclusive end date (YYYY-MM-DD)"),
    filter_customer_id: Optional[int] = Query(None, alias="customer_id"),
    voucher_type: Optional[VoucherType] = Query(None),
    min_amount: Optional[Decimal] = Query(None, ge=0),
    max_amount: Optional[Decimal] = Query(None, ge=0),
) -> LedgerFilters:
    # Named apart from the client ledger's customer_id path parameter
    return LedgerFilters(
        start_date=start_date,
        end_date=end_date,
        customer_id=filter_customer_id,
        voucher_type=voucher_type,
        min_amount=min_amount,
        max_amount=max_amount,
    )


@router.get("/client/{customer_id}", response_model=ClientLedgerData)
def get_client_ledger(
    customer_id: int,
    filters: LedgerFilters = Depends(ledger_filters),
    db: Session = Depends(get_db),
):
    """Invoices (debit) and payments (credit) of one customer with a running balance."""
    return crud_ledgers.get_client_ledger(db, customer_id, filters)


@router.get("/company", response_model=CompanyLedgerData)
def get_company_ledger(
    filters: LedgerFilters = Depends(ledger_filters),
    db: Session = Depends(get_db),
):
    """Double-entry ledger of the business for a period, the trailing year by default."""
    return crud_ledgers.get_company_ledger(db, filters)
