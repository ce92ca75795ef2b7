"""
Explicit resolution of a payment's links to its invoice, truck hiring note and customer.

A payment may arrive with its relationship loaded (`payment.invoice`) or with only
the foreign key (`payment.invoice_id`). Callers resolve once and match on the
result instead of probing attributes at every use site.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union


@dataclass(frozen=True)
class Resolved:
    record: Any


@dataclass(frozen=True)
class Unresolved:
    id: Any


Reference = Union[Resolved, Unresolved]


def _resolve(record, record_id, lookup: Optional[Mapping]) -> Optional[Reference]:
    if record is not None:
        return Resolved(record)
    if record_id is None:
        return None
    if lookup and record_id in lookup:
        return Resolved(lookup[record_id])
    return Unresolved(record_id)


def resolve_invoice(payment, invoices_by_id: Optional[Mapping] = None) -> Optional[Reference]:
    return _resolve(getattr(payment, "invoice", None), payment.invoice_id, invoices_by_id)


def resolve_thn(payment, thns_by_id: Optional[Mapping] = None) -> Optional[Reference]:
    return _resolve(getattr(payment, "truck_hiring_note", None), payment.truck_hiring_note_id, thns_by_id)


def invoice_label(ref: Optional[Reference]) -> Optional[str]:
    """'INV-<number>' for a resolved invoice, 'INV-<id>' when only the id is known."""
    if ref is None:
        return None
    if isinstance(ref, Resolved):
        return f"INV-{ref.record.invoice_number}"
    return f"INV-{ref.id}"


def thn_label(ref: Optional[Reference]) -> Optional[str]:
    if ref is None:
        return None
    if isinstance(ref, Resolved):
        return f"THN-{ref.record.thn_number}"
    return f"THN-{ref.id}"


def payment_customer(payment, invoices_by_id: Optional[Mapping] = None, customers_by_id: Optional[Mapping] = None):
    """
    The customer a payment belongs to, or None.

    Order: the loaded `customer` relationship, the `customer_id` looked up in
    `customers_by_id`, then the customer of the linked invoice.
    """
    customer = getattr(payment, "customer", None)
    if customer is not None:
        return customer
    if payment.customer_id is not None and customers_by_id and payment.customer_id in customers_by_id:
        return customers_by_id[payment.customer_id]
    invoice_ref = resolve_invoice(payment, invoices_by_id)
    if isinstance(invoice_ref, Resolved):
        return getattr(invoice_ref.record, "customer", None)
    return None


def payment_customer_id(payment, invoices_by_id: Optional[Mapping] = None):
    """The owning customer id: explicit customer_id, else the linked invoice's customer_id."""
    if payment.customer_id is not None:
        return payment.customer_id
    customer = getattr(payment, "customer", None)
    if customer is not None:
        return customer.id
    invoice_ref = resolve_invoice(payment, invoices_by_id)
    if isinstance(invoice_ref, Resolved):
        return invoice_ref.record.customer_id
    return None
