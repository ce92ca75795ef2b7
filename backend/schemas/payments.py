from pydantic import BaseModel, Field, model_validator
from typing import Optional
import datetime as dt
from decimal import Decimal
from models.payments import PaymentType, PaymentMode

class PaymentBase(BaseModel):
    invoice_id: Optional[int] = None
    truck_hiring_note_id: Optional[int] = None
    customer_id: Optional[int] = None
    date: dt.date
    amount: Decimal = Field(gt=0)
    type: PaymentType
    mode: PaymentMode
    reference_no: Optional[str] = None
    notes: Optional[str] = None
    tds_applicable: bool = False
    tds_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    tds_amount: Optional[Decimal] = Field(default=None, ge=0)
    tds_date: Optional[dt.date] = None

class PaymentCreate(PaymentBase):

    @model_validator(mode="after")
    def check_links_and_tds(self):
        if not self.invoice_id and not self.truck_hiring_note_id:
            raise ValueError("Either invoice_id or truck_hiring_note_id is required")
        if self.invoice_id and self.truck_hiring_note_id:
            raise ValueError("A payment can reference an invoice or a truck hiring note, not both")
        if self.invoice_id and not self.customer_id:
            raise ValueError("Customer is required for invoice payments")
        if self.tds_applicable and self.type != PaymentType.RECEIPT:
            raise ValueError("TDS can only be applied to Receipts")
        if self.tds_applicable and self.tds_rate is None:
            raise ValueError("TDS rate is required when TDS is applicable")
        return self

class PaymentUpdate(BaseModel):
    """Partial update. The parent invoice/THN of a payment cannot be changed."""
    customer_id: Optional[int] = None
    date: Optional[dt.date] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)
    type: Optional[PaymentType] = None
    mode: Optional[PaymentMode] = None
    reference_no: Optional[str] = None
    notes: Optional[str] = None
    tds_applicable: Optional[bool] = None
    tds_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    tds_amount: Optional[Decimal] = Field(default=None, ge=0)
    tds_date: Optional[dt.date] = None

    @model_validator(mode="after")
    def check_tds(self):
        if self.tds_applicable and self.type is not None and self.type != PaymentType.RECEIPT:
            raise ValueError("TDS can only be applied to Receipts")
        return self

class Payment(PaymentBase):
    id: int
    # Stored net of TDS, so a full deduction leaves zero
    amount: Decimal
    payment_number: Optional[int] = None
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    class Config:
        from_attributes = True
