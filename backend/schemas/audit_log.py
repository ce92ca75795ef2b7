from pydantic import BaseModel
from typing import Optional, Dict, Any, Literal
import datetime as dt

AuditAction = Literal["UPDATE", "DELETE"]

class AuditLogCreate(BaseModel):
    table_name: Literal["customers", "invoices", "truck_hiring_notes", "payments"]
    record_id: int
    changed_by: str
    action: AuditAction
    old_values: Dict[str, Any] = {}
    new_values: Dict[str, Any] = {}

class AuditLogEntry(AuditLogCreate):
    id: int
    changed_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True
