from sqlalchemy.orm import Session
from models.audit_log import AuditLog
from schemas.audit_log import AuditLogCreate
from utils import sqlalchemy_to_dict


def create_audit_log(db: Session, log_entry: AuditLogCreate, commit: bool = True):
    db_log_entry = AuditLog(**log_entry.model_dump())
    db.add(db_log_entry)
    if commit:
        db.commit()
        db.refresh(db_log_entry)
    return db_log_entry


def record_history(db: Session, table_name: str, record_id: int):
    """Audit rows of one record, oldest first."""
    return db.query(AuditLog).filter(
        AuditLog.table_name == table_name, AuditLog.record_id == record_id
    ).order_by(AuditLog.id).all()


def log_change(db: Session, table_name: str, record, action: str, changed_by: str, old_values=None):
    """Stage an audit row for `record` in the caller's transaction."""
    new_values = {} if action == 'DELETE' else sqlalchemy_to_dict(record)
    log_entry = AuditLogCreate(
        table_name=table_name,
        record_id=record.id,
        changed_by=changed_by,
        action=action,
        old_values=old_values or {},
        new_values=new_values,
    )
    return create_audit_log(db, log_entry, commit=False)
