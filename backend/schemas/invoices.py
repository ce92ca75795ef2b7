from pydantic import BaseModel, Field
from typing import Optional, List
import datetime as dt
from decimal import Decimal
from models.invoices import InvoiceStatus, GstType
from schemas.customers import Customer as CustomerSchema
from schemas.lorry_receipts import LorryReceipt as LorryReceiptSchema
from schemas.payments import Payment as PaymentSchema

class InvoiceBase(BaseModel):
    customer_id: int
    date: dt.date
    total_amount: Decimal = Field(ge=0)
    gst_type: GstType = GstType.CGST_SGST
    cgst_rate: Decimal = Field(default=Decimal("0"), ge=0)
    sgst_rate: Decimal = Field(default=Decimal("0"), ge=0)
    igst_rate: Decimal = Field(default=Decimal("0"), ge=0)
    is_rcm: bool = False
    is_manual_gst: bool = False
    remarks: Optional[str] = None

class InvoiceCreate(InvoiceBase):
    lorry_receipt_ids: List[int] = Field(min_length=1)
    # Only read when is_manual_gst is set; otherwise derived from the rates
    cgst_amount: Optional[Decimal] = Field(default=None, ge=0)
    sgst_amount: Optional[Decimal] = Field(default=None, ge=0)
    igst_amount: Optional[Decimal] = Field(default=None, ge=0)
    grand_total: Optional[Decimal] = Field(default=None, ge=0)

class InvoiceUpdate(BaseModel):
    """Monetary totals are fixed at creation; only descriptive fields change."""
    date: Optional[dt.date] = None
    remarks: Optional[str] = None

class Invoice(InvoiceBase):
    id: int
    invoice_number: int
    cgst_amount: Decimal
    sgst_amount: Decimal
    igst_amount: Decimal
    grand_total: Decimal
    paid_amount: Decimal
    balance_amount: Decimal
    status: InvoiceStatus
    customer: Optional[CustomerSchema] = None
    lorry_receipts: List[LorryReceiptSchema] = []
    payments: List[PaymentSchema] = []
    created_by: Optional[str] = None
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True
