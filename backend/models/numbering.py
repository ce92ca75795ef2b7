from sqlalchemy import Column, Integer, String
from database import Base
from models.audit_mixin import TimestampMixin

class NumberingConfig(Base, TimestampMixin):
    """Named document counter (invoiceId, paymentId, truckHiringNoteId, lorryReceiptId)."""
    __tablename__ = "numbering_config"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(50), nullable=False, unique=True, index=True)
    current_number = Column(Integer, nullable=False, default=1)
