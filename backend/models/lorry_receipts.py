from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, Enum, JSON, Boolean
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin

class LorryReceiptStatus(enum.Enum):
    CREATED = "Created"
    IN_TRANSIT = "In Transit"
    DELIVERED = "Delivered"
    INVOICED = "Invoiced"
    PAID = "Paid"
    UNBILLED = "Unbilled"

class GstPayableBy(enum.Enum):
    CONSIGNOR = "Consignor"
    CONSIGNEE = "Consignee"
    TRANSPORTER = "Transporter"

class RiskBearer(enum.Enum):
    CARRIER = "AT CARRIER'S RISK"
    OWNER = "AT OWNER'S RISK"

class LorryReceipt(Base, TimestampMixin):
    __tablename__ = "lorry_receipts"

    id = Column(Integer, primary_key=True, index=True)
    lr_number = Column(Integer, unique=True, index=True)
    date = Column(Date, nullable=False)
    consignor_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    consignee_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    vehicle_number = Column(String, nullable=False)
    from_location = Column(String, nullable=False)
    to_location = Column(String, nullable=False)
    loading_address = Column(Text, nullable=True)
    delivery_address = Column(Text, nullable=True)
    packages = Column(JSON, nullable=False, default=list)
    freight = Column(Numeric(12, 2), default=0, nullable=False)
    aoc = Column(Numeric(12, 2), default=0, nullable=False)
    hamali = Column(Numeric(12, 2), default=0, nullable=False)
    b_ch = Column(Numeric(12, 2), default=0, nullable=False)
    tr_ch = Column(Numeric(12, 2), default=0, nullable=False)
    detention_ch = Column(Numeric(12, 2), default=0, nullable=False)
    total_amount = Column(Numeric(12, 2), default=0, nullable=False)
    e_way_bill_no = Column(String, nullable=True)
    value_goods = Column(Numeric(14, 2), nullable=True)
    gst_payable_by = Column(Enum(GstPayableBy), nullable=False)
    risk_bearer = Column(Enum(RiskBearer), nullable=False)
    has_insurance = Column(Boolean, default=False, nullable=False)
    invoice_no = Column(String, nullable=True)
    seal_no = Column(String, nullable=True)
    status = Column(Enum(LorryReceiptStatus), default=LorryReceiptStatus.CREATED, nullable=False)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=True)

    # Relationships
    consignor = relationship("Customer", foreign_keys=[consignor_id])
    consignee = relationship("Customer", foreign_keys=[consignee_id])
    invoice = relationship("Invoice", back_populates="lorry_receipts")
