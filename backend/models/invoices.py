from sqlalchemy import Column, Integer, Text, Numeric, Date, ForeignKey, Enum, Boolean
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin

class InvoiceStatus(enum.Enum):
    UNPAID = "Unpaid"
    PARTIALLY_PAID = "Partially Paid"
    PAID = "Paid"

class GstType(enum.Enum):
    CGST_SGST = "CGST/SGST"
    IGST = "IGST"

class Invoice(Base, TimestampMixin):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(Integer, unique=True, index=True)
    date = Column(Date, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    total_amount = Column(Numeric(12, 2), default=0, nullable=False)
    gst_type = Column(Enum(GstType), default=GstType.CGST_SGST, nullable=False)
    cgst_rate = Column(Numeric(5, 2), default=0, nullable=False)
    sgst_rate = Column(Numeric(5, 2), default=0, nullable=False)
    igst_rate = Column(Numeric(5, 2), default=0, nullable=False)
    cgst_amount = Column(Numeric(12, 2), default=0, nullable=False)
    sgst_amount = Column(Numeric(12, 2), default=0, nullable=False)
    igst_amount = Column(Numeric(12, 2), default=0, nullable=False)
    grand_total = Column(Numeric(12, 2), default=0, nullable=False)
    is_rcm = Column(Boolean, default=False, nullable=False)
    is_manual_gst = Column(Boolean, default=False, nullable=False)
    remarks = Column(Text, nullable=True)
    # Derived from payments, see crud.reconciliation
    paid_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    balance_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False)
    status = Column(Enum(InvoiceStatus), default=InvoiceStatus.UNPAID, nullable=False)

    # Relationships
    customer = relationship("Customer", back_populates="invoices")
    lorry_receipts = relationship("LorryReceipt", back_populates="invoice")
    payments = relationship("Payment", back_populates="invoice", order_by="Payment.date")
