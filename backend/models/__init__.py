from models.audit_log import AuditLog
from models.customers import Customer
from models.lorry_receipts import LorryReceipt
from models.invoices import Invoice
from models.truck_hiring_notes import TruckHiringNote
from models.payments import Payment
from models.numbering import NumberingConfig

__all__ = ['AuditLog', 'Customer', 'Invoice', 'LorryReceipt', 'NumberingConfig', 'Payment', 'TruckHiringNote',]
