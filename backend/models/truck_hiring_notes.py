from sqlalchemy import Column, Integer, String, Text, Numeric, Date, DateTime, Enum
from sqlalchemy.orm import relationship, validates
from database import Base
import enum
from models.audit_mixin import TimestampMixin

class THNStatus(enum.Enum):
    UNPAID = "Unpaid"
    PARTIALLY_PAID = "Partially Paid"
    PAID = "Paid"

class TruckHiringNote(Base, TimestampMixin):
    __tablename__ = "truck_hiring_notes"

    id = Column(Integer, primary_key=True, index=True)
    thn_number = Column(Integer, unique=True, index=True)
    date = Column(Date, nullable=False)
    truck_number = Column(String, nullable=False)
    truck_type = Column(String, nullable=False)
    vehicle_capacity = Column(Numeric(10, 2), nullable=False)
    loading_location = Column(String, nullable=False)
    unloading_location = Column(String, nullable=False)
    loading_date_time = Column(DateTime, nullable=False)
    expected_delivery_date = Column(Date, nullable=False)
    goods_type = Column(String, nullable=False)
    agency_name = Column(String, nullable=False)
    truck_owner_name = Column(String, nullable=False)
    truck_owner_contact = Column(String, nullable=True)
    freight_rate = Column(Numeric(12, 2), nullable=False)
    freight_rate_type = Column(String, nullable=False)  # per_trip, per_ton, per_km
    advance_amount = Column(Numeric(12, 2), default=0, nullable=False)
    additional_charges = Column(Numeric(12, 2), default=0, nullable=False)
    payment_mode = Column(String, nullable=False)
    payment_terms = Column(String, nullable=True)
    remarks = Column(Text, nullable=True)
    linked_lr = Column(String, nullable=True)
    linked_invoice = Column(String, nullable=True)
    # Derived from payments, see crud.reconciliation
    paid_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    balance_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    status = Column(Enum(THNStatus), default=THNStatus.UNPAID, nullable=False)

    # Relationships
    payments = relationship("Payment", back_populates="truck_hiring_note", order_by="Payment.id")

    @validates("freight_rate", "advance_amount", "additional_charges")
    def validate_non_negative(self, key, value):
        if value is not None and value < 0:
            raise ValueError(f"{key} must not be negative")
        return value

    @property
    def advance_reference(self) -> str:
        """Reference tag carried by the Advance payment synthesized for this note."""
        return f"THN-{self.thn_number}-ADVANCE"
