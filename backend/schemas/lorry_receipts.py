from pydantic import BaseModel, Field
from typing import Optional, List
import datetime as dt
from decimal import Decimal
from models.lorry_receipts import LorryReceiptStatus, GstPayableBy, RiskBearer

class Package(BaseModel):
    count: int = Field(gt=0)
    packing_method: str = Field(min_length=1)
    description: str = Field(min_length=1)
    actual_weight: Decimal = Field(ge=0)
    charged_weight: Decimal = Field(ge=0)

class LorryReceiptBase(BaseModel):
    date: dt.date
    consignor_id: int
    consignee_id: int
    vehicle_number: str = Field(min_length=1)
    from_location: str = Field(min_length=1)
    to_location: str = Field(min_length=1)
    loading_address: Optional[str] = None
    delivery_address: Optional[str] = None
    packages: List[Package] = Field(min_length=1)
    freight: Decimal = Field(default=Decimal("0"), ge=0)
    aoc: Decimal = Field(default=Decimal("0"), ge=0)
    hamali: Decimal = Field(default=Decimal("0"), ge=0)
    b_ch: Decimal = Field(default=Decimal("0"), ge=0)
    tr_ch: Decimal = Field(default=Decimal("0"), ge=0)
    detention_ch: Decimal = Field(default=Decimal("0"), ge=0)
    total_amount: Decimal = Field(ge=0)
    e_way_bill_no: Optional[str] = None
    value_goods: Optional[Decimal] = None
    gst_payable_by: GstPayableBy
    risk_bearer: RiskBearer
    has_insurance: bool = False
    invoice_no: Optional[str] = None
    seal_no: Optional[str] = None

class LorryReceiptCreate(LorryReceiptBase):
    pass

class LorryReceipt(LorryReceiptBase):
    id: int
    lr_number: int
    status: LorryReceiptStatus
    invoice_id: Optional[int] = None
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True
