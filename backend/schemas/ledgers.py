from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
import datetime as dt
import enum


class BalanceType(str, enum.Enum):
    DR = "DR"
    CR = "CR"


class VoucherType(str, enum.Enum):
    INVOICE = "INVOICE"
    ADVANCE = "ADVANCE"
    PAYMENT = "PAYMENT"
    TDS = "TDS"
    THN = "THN"


class LedgerFilters(BaseModel):
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    customer_id: Optional[int] = None
    voucher_type: Optional[VoucherType] = None
    min_amount: Optional[Decimal] = Field(default=None, ge=0)
    max_amount: Optional[Decimal] = Field(default=None, ge=0)


# Client Ledger
class ClientLedgerEntry(BaseModel):
    date: dt.date
    voucher_number: Optional[str] = None
    voucher_type: VoucherType
    particulars: str
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")
    balance: Decimal
    balance_type: BalanceType
    reference: Optional[str] = None
    payment_mode: Optional[str] = None
    notes: Optional[str] = None


class LedgerSummary(BaseModel):
    opening_balance: Decimal = Decimal("0")
    opening_balance_type: BalanceType = BalanceType.DR
    total_debits: Decimal
    total_credits: Decimal
    closing_balance: Decimal
    closing_balance_type: BalanceType
    transaction_count: int


class ClientLedgerData(BaseModel):
    customer_id: int
    customer_name: str
    opening_balance: Decimal = Decimal("0")
    opening_balance_type: BalanceType = BalanceType.DR
    transactions: List[ClientLedgerEntry]
    summary: LedgerSummary


# Company Ledger
class CompanyLedgerEntry(BaseModel):
    date: dt.date
    account: str
    voucher_type: VoucherType
    particulars: str
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")
    balance: Decimal
    balance_type: BalanceType
    reference: Optional[str] = None
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    notes: Optional[str] = None


class LedgerPeriod(BaseModel):
    start_date: dt.date
    end_date: dt.date


class CompanyLedgerSummary(BaseModel):
    total_revenue: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    # Not derived yet; always zero
    total_assets: Decimal = Decimal("0")
    total_liabilities: Decimal = Decimal("0")


class CompanyLedgerData(BaseModel):
    period: LedgerPeriod
    transactions: List[CompanyLedgerEntry]
    summary: CompanyLedgerSummary
