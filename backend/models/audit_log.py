from sqlalchemy import Column, Integer, String, DateTime, JSON, Index
from database import Base
from datetime import datetime
import pytz

class AuditLog(Base):
    """Old/new snapshots of every updated or deleted financial record."""
    __tablename__ = "audit_log"
    __table_args__ = (
        Index("ix_audit_log_record", "table_name", "record_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    table_name = Column(String, nullable=False)  # customers, invoices, truck_hiring_notes or payments
    record_id = Column(Integer, nullable=False)
    changed_at = Column(DateTime, default=lambda: datetime.now(pytz.timezone('Asia/Kolkata')))
    changed_by = Column(String, nullable=False)
    action = Column(String(10), nullable=False)
    old_values = Column(JSON)
    new_values = Column(JSON)
