from pydantic import BaseModel, Field
from typing import Optional, List
import datetime as dt
from decimal import Decimal
from models.truck_hiring_notes import THNStatus
from schemas.payments import Payment as PaymentSchema

class TruckHiringNoteBase(BaseModel):
    date: dt.date
    truck_number: str = Field(min_length=1)
    truck_type: str = Field(min_length=1)
    vehicle_capacity: Decimal = Field(gt=0)
    loading_location: str = Field(min_length=1)
    unloading_location: str = Field(min_length=1)
    loading_date_time: dt.datetime
    expected_delivery_date: dt.date
    goods_type: str = Field(min_length=1)
    agency_name: str = Field(min_length=1)
    truck_owner_name: str = Field(min_length=1)
    truck_owner_contact: Optional[str] = None
    freight_rate: Decimal = Field(ge=0)
    freight_rate_type: str = Field(min_length=1)
    advance_amount: Decimal = Field(default=Decimal("0"), ge=0)
    payment_mode: str = Field(min_length=1)
    payment_terms: Optional[str] = None
    additional_charges: Decimal = Field(default=Decimal("0"), ge=0)
    remarks: Optional[str] = None
    linked_lr: Optional[str] = None
    linked_invoice: Optional[str] = None

class TruckHiringNoteCreate(TruckHiringNoteBase):
    pass

class TruckHiringNoteUpdate(BaseModel):
    date: Optional[dt.date] = None
    truck_number: Optional[str] = Field(default=None, min_length=1)
    truck_type: Optional[str] = Field(default=None, min_length=1)
    vehicle_capacity: Optional[Decimal] = Field(default=None, gt=0)
    loading_location: Optional[str] = Field(default=None, min_length=1)
    unloading_location: Optional[str] = Field(default=None, min_length=1)
    loading_date_time: Optional[dt.datetime] = None
    expected_delivery_date: Optional[dt.date] = None
    goods_type: Optional[str] = Field(default=None, min_length=1)
    agency_name: Optional[str] = Field(default=None, min_length=1)
    truck_owner_name: Optional[str] = Field(default=None, min_length=1)
    truck_owner_contact: Optional[str] = None
    freight_rate: Optional[Decimal] = Field(default=None, ge=0)
    freight_rate_type: Optional[str] = Field(default=None, min_length=1)
    advance_amount: Optional[Decimal] = Field(default=None, ge=0)
    payment_mode: Optional[str] = Field(default=None, min_length=1)
    payment_terms: Optional[str] = None
    additional_charges: Optional[Decimal] = Field(default=None, ge=0)
    remarks: Optional[str] = None
    linked_lr: Optional[str] = None
    linked_invoice: Optional[str] = None

class TruckHiringNote(TruckHiringNoteBase):
    id: int
    thn_number: int
    paid_amount: Decimal
    balance_amount: Decimal
    status: THNStatus
    payments: List[PaymentSchema] = []
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True
