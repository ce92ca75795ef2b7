from sqlalchemy import Column, Integer, Numeric, Date, String, ForeignKey, Text, Enum, Boolean, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin

class PaymentType(enum.Enum):
    ADVANCE = "Advance"
    RECEIPT = "Receipt"
    PAYMENT = "Payment"

class PaymentMode(enum.Enum):
    CASH = "Cash"
    CHEQUE = "Cheque"
    NEFT = "NEFT"
    RTGS = "RTGS"
    UPI = "UPI"

class Payment(Base, TimestampMixin):
    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint(
            "NOT (invoice_id IS NOT NULL AND truck_hiring_note_id IS NOT NULL)",
            name="ck_payment_single_parent",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    payment_number = Column(Integer, unique=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=True, index=True)
    truck_hiring_note_id = Column(Integer, ForeignKey("truck_hiring_notes.id"), nullable=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True)
    date = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)  # Net of TDS for receipts
    type = Column(Enum(PaymentType), nullable=False)
    mode = Column(Enum(PaymentMode), nullable=False)
    reference_no = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    tds_applicable = Column(Boolean, default=False, nullable=False)
    tds_rate = Column(Numeric(5, 2), nullable=True)
    tds_amount = Column(Numeric(12, 2), nullable=True)
    tds_date = Column(Date, nullable=True)

    # Relationships
    invoice = relationship("Invoice", back_populates="payments")
    truck_hiring_note = relationship("TruckHiringNote", back_populates="payments")
    customer = relationship("Customer", back_populates="payments")
