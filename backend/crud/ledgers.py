"""
Client and company ledgers built from invoices, payments and truck hiring notes.

`generate_client_ledger` and `generate_company_ledger` are pure: they read the
records they are given (ORM objects or anything with the same attributes) and
return fresh ledger schemas. Nothing is persisted. The `get_*` functions load
the records from the database and hand them to the builders.

Running balance convention: entries are sorted by date (stable, so records of
one day keep their input order) and

    running += debit - credit
    balance  = abs(running)
    side     = DR if running >= 0 else CR
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence
import logging
import os

from sqlalchemy.orm import Session, selectinload
import pytz

from models.customers import Customer
from models.invoices import Invoice
from models.payments import Payment, PaymentType
from models.truck_hiring_notes import TruckHiringNote
from schemas.ledgers import (
    BalanceType,
    ClientLedgerData,
    ClientLedgerEntry,
    CompanyLedgerData,
    CompanyLedgerEntry,
    CompanyLedgerSummary,
    LedgerFilters,
    LedgerPeriod,
    LedgerSummary,
    VoucherType,
)
from utils.exceptions import NotFoundError, ValidationError
from utils.formatting import format_indian_currency, format_rate
from utils.references import (
    Resolved,
    invoice_label,
    payment_customer,
    payment_customer_id,
    resolve_invoice,
    resolve_thn,
    thn_label,
)

logger = logging.getLogger(__name__)

UNKNOWN_CUSTOMER = "Unknown Customer"
LEDGER_LOOKBACK_DAYS = int(os.getenv("LEDGER_LOOKBACK_DAYS", "365"))

# Company ledger account heads
REVENUE_ACCOUNT = "Freight Revenue"
RECEIVABLES_ACCOUNT = "Accounts Receivable"
ADVANCE_ACCOUNT = "Advance Received"
CASH_ACCOUNT = "Cash/Bank"
TDS_PAYABLE_ACCOUNT = "TDS Payable"
FREIGHT_EXPENSE_ACCOUNT = "Freight Expense"

ZERO = Decimal("0")


def _amount(value) -> Decimal:
    return Decimal(str(value)) if value is not None else ZERO


def _mode(payment) -> str:
    mode = payment.mode
    return getattr(mode, "value", mode)


def _customer_name(customer) -> str:
    return getattr(customer, "name", None) or UNKNOWN_CUSTOMER


def _payment_reference(payment) -> str:
    if payment.reference_no:
        return payment.reference_no
    return f"PAY-{payment.payment_number or payment.id}"


def today() -> date:
    return datetime.now(pytz.timezone('Asia/Kolkata')).date()


def default_period(filters: Optional[LedgerFilters] = None):
    """The requested period, defaulting to the trailing LEDGER_LOOKBACK_DAYS through today."""
    end_date = filters.end_date if filters and filters.end_date else today()
    start_date = filters.start_date if filters and filters.start_date else end_date - timedelta(days=LEDGER_LOOKBACK_DAYS)
    return start_date, end_date


def _within_amount_bounds(amount: Decimal, filters: LedgerFilters) -> bool:
    if filters.min_amount is not None and amount < filters.min_amount:
        return False
    if filters.max_amount is not None and amount > filters.max_amount:
        return False
    return True


def _passes_filters(entry: dict, filters: Optional[LedgerFilters], check_dates: bool = True,
                    check_amounts: bool = True) -> bool:
    if filters is None:
        return True
    if check_dates:
        if filters.start_date and entry["date"] < filters.start_date:
            return False
        if filters.end_date and entry["date"] > filters.end_date:
            return False
    if filters.voucher_type and entry["voucher_type"] != filters.voucher_type:
        return False
    if check_amounts and not _within_amount_bounds(max(entry["debit"], entry["credit"]), filters):
        return False
    return True


def apply_running_balance(transactions: List[dict], entry_cls) -> list:
    """Sort by date and attach the running balance and its side to every entry."""
    transactions.sort(key=lambda t: t["date"])
    running_balance = ZERO
    entries = []
    for t in transactions:
        running_balance += t["debit"] - t["credit"]
        entries.append(entry_cls(
            **t,
            balance=abs(running_balance),
            balance_type=BalanceType.DR if running_balance >= 0 else BalanceType.CR,
        ))
    return entries


def get_invoice_description(invoice, customer_name: Optional[str] = None) -> str:
    lr_count = len(getattr(invoice, "lorry_receipts", None) or [])
    name = customer_name or _customer_name(getattr(invoice, "customer", None))
    return f"Freight charges for {lr_count} LR{'s' if lr_count > 1 else ''} - {name}"


def get_payment_particulars(payment, customer_name: str, invoices_by_id=None, thns_by_id=None) -> str:
    mode = _mode(payment)
    if payment.type == PaymentType.ADVANCE:
        return f"Advance received from {customer_name} (Ref: {payment.reference_no or 'ADVANCE'}) - Mode: {mode}"

    invoice_ref = resolve_invoice(payment, invoices_by_id)
    if invoice_ref is not None:
        return f"Payment for Invoice {invoice_label(invoice_ref)} - {customer_name} (Mode: {mode})"

    thn_ref = resolve_thn(payment, thns_by_id)
    if thn_ref is not None:
        return f"Payment for {thn_label(thn_ref)} - {customer_name} (Mode: {mode})"

    return f"Payment received from {customer_name} (Mode: {mode})"


def _belongs_to_customer(payment, customer_id, customer, invoices_by_id, thns_by_id) -> bool:
    owner_id = payment_customer_id(payment, invoices_by_id)
    if owner_id is not None:
        return owner_id == customer_id
    # No customer on the payment: fall back to the truck owner of its THN
    thn_ref = resolve_thn(payment, thns_by_id)
    if isinstance(thn_ref, Resolved) and customer is not None:
        return thn_ref.record.truck_owner_name == customer.name
    return False


def generate_client_ledger(
    customer_id: int,
    customer,
    invoices: Sequence,
    payments: Sequence,
    truck_hiring_notes: Sequence,
    filters: Optional[LedgerFilters] = None,
) -> ClientLedgerData:
    """
    Ledger of one customer: invoices debit the account, payments credit it.

    Opening balance is always 0/DR; no carry-forward from earlier periods.
    """
    if filters and filters.customer_id is not None and filters.customer_id != customer_id:
        raise ValidationError.for_field("customer_id", "Filter customer does not match the ledger customer")

    customer_name = _customer_name(customer)
    invoices_by_id = {inv.id: inv for inv in invoices}
    thns_by_id = {thn.id: thn for thn in truck_hiring_notes}

    transactions = []
    for invoice in invoices:
        if invoice.customer_id != customer_id:
            continue
        number = f"INV-{invoice.invoice_number}"
        transactions.append({
            "date": invoice.date,
            "voucher_number": number,
            "voucher_type": VoucherType.INVOICE,
            "particulars": f"Invoice No: {number} - {get_invoice_description(invoice, customer_name)}",
            "debit": _amount(invoice.grand_total),
            "credit": ZERO,
            "reference": number,
            "payment_mode": None,
            "notes": invoice.remarks or None,
        })

    for payment in payments:
        if not _belongs_to_customer(payment, customer_id, customer, invoices_by_id, thns_by_id):
            continue
        transactions.append({
            "date": payment.date,
            "voucher_number": _payment_reference(payment),
            "voucher_type": VoucherType.ADVANCE if payment.type == PaymentType.ADVANCE else VoucherType.PAYMENT,
            "particulars": get_payment_particulars(payment, customer_name, invoices_by_id, thns_by_id),
            "debit": ZERO,
            "credit": _amount(payment.amount),
            "reference": invoice_label(resolve_invoice(payment, invoices_by_id)),
            "payment_mode": _mode(payment),
            "notes": payment.notes or None,
        })

    transactions = [t for t in transactions if _passes_filters(t, filters)]
    entries = apply_running_balance(transactions, ClientLedgerEntry)

    summary = LedgerSummary(
        total_debits=sum((e.debit for e in entries), ZERO),
        total_credits=sum((e.credit for e in entries), ZERO),
        closing_balance=entries[-1].balance if entries else ZERO,
        closing_balance_type=entries[-1].balance_type if entries else BalanceType.DR,
        transaction_count=len(entries),
    )

    return ClientLedgerData(
        customer_id=customer_id,
        customer_name=customer_name,
        transactions=entries,
        summary=summary,
    )


def _company_entry(entry_date, account, voucher_type, particulars, debit=ZERO, credit=ZERO,
                   reference=None, customer_id=None, customer_name=None, notes=None) -> dict:
    return {
        "date": entry_date,
        "account": account,
        "voucher_type": voucher_type,
        "particulars": particulars,
        "debit": debit,
        "credit": credit,
        "reference": reference,
        "customer_id": customer_id,
        "customer_name": customer_name,
        "notes": notes,
    }


def _invoice_entries(invoice) -> List[dict]:
    customer = getattr(invoice, "customer", None)
    name = _customer_name(customer)
    number = f"INV-{invoice.invoice_number}"
    particulars = f"Invoice No: {number} - {name}"
    amount = _amount(invoice.grand_total)
    common = dict(reference=number, customer_id=invoice.customer_id,
                  customer_name=getattr(customer, "name", None), notes=invoice.remarks or None)
    return [
        _company_entry(invoice.date, REVENUE_ACCOUNT, VoucherType.INVOICE, particulars, credit=amount, **common),
        _company_entry(invoice.date, RECEIVABLES_ACCOUNT, VoucherType.INVOICE, particulars, debit=amount, **common),
    ]


def _payment_entries(payment, invoices_by_id, customers_by_id) -> List[dict]:
    customer = payment_customer(payment, invoices_by_id, customers_by_id)
    name = _customer_name(customer)
    ref = _payment_reference(payment)
    mode = _mode(payment)
    amount = _amount(payment.amount)
    common = dict(customer_id=payment_customer_id(payment, invoices_by_id), customer_name=getattr(customer, "name", None))
    default_notes = payment.notes or f"Payment Mode: {mode}"

    if payment.type == PaymentType.ADVANCE:
        return [
            _company_entry(payment.date, ADVANCE_ACCOUNT, VoucherType.ADVANCE,
                           f"Advance received from {name} (Ref: {ref})",
                           credit=amount, reference=ref, notes=default_notes, **common),
            _company_entry(payment.date, CASH_ACCOUNT, VoucherType.ADVANCE,
                           f"Advance received from {name}",
                           debit=amount, reference=ref, notes=default_notes, **common),
        ]

    tds_amount = _amount(payment.tds_amount)
    has_tds = bool(payment.tds_applicable) and payment.type == PaymentType.RECEIPT and tds_amount > 0
    gross_amount = amount + tds_amount if has_tds else amount
    invoice_ref = invoice_label(resolve_invoice(payment, invoices_by_id))

    entries = []
    if has_tds:
        rate = format_rate(payment.tds_rate)
        tds_text = format_indian_currency(tds_amount)
        cash_particulars = f"Payment received from {name} (Net after TDS: {tds_text})"
        cash_notes = f"{payment.notes or ''} Payment Mode: {mode}. TDS @ {rate}%: {tds_text}".strip()
    else:
        cash_particulars = f"Payment received from {name}"
        cash_notes = default_notes
    entries.append(_company_entry(payment.date, CASH_ACCOUNT, VoucherType.PAYMENT, cash_particulars,
                                  debit=amount, reference=ref, notes=cash_notes, **common))

    if has_tds:
        entries.append(_company_entry(
            payment.tds_date or payment.date, TDS_PAYABLE_ACCOUNT, VoucherType.TDS,
            f"TDS deducted from payment received from {name} @ {rate}%",
            credit=tds_amount, reference=ref,
            notes=f"TDS @ {rate}% on gross payment of {format_indian_currency(gross_amount)}",
            **common,
        ))

    receivable_particulars = f"Payment for {invoice_ref or 'General Payment'} - {name}"
    if has_tds:
        receivable_particulars += f" (Gross: {format_indian_currency(gross_amount)}, TDS: {format_indian_currency(tds_amount)})"
    entries.append(_company_entry(payment.date, RECEIVABLES_ACCOUNT, VoucherType.PAYMENT, receivable_particulars,
                                  credit=gross_amount, reference=invoice_ref, notes=default_notes, **common))
    return entries


def _thn_entries(thn) -> List[dict]:
    number = f"THN-{thn.thn_number}"
    freight = _amount(thn.freight_rate)
    notes = f"Route: {thn.loading_location} to {thn.unloading_location}"
    common = dict(reference=number, customer_name=thn.truck_owner_name, notes=notes)
    return [
        _company_entry(thn.date, FREIGHT_EXPENSE_ACCOUNT, VoucherType.THN,
                       f"THN No: {number} - {thn.truck_owner_name}", debit=freight, **common),
        _company_entry(thn.date, CASH_ACCOUNT, VoucherType.THN,
                       f"Payment for THN No: {number}", credit=freight, **common),
    ]


def generate_company_ledger(
    customers: Sequence,
    invoices: Sequence,
    payments: Sequence,
    truck_hiring_notes: Sequence,
    filters: Optional[LedgerFilters] = None,
) -> CompanyLedgerData:
    """
    Double-entry view of the whole business for a period.

    Each invoice posts revenue (CR) and receivables (DR). An advance posts
    advance received (CR) and cash (DR). A receipt posts cash (DR, net) and
    receivables (CR, gross), with the withheld TDS credited to TDS payable so
    that net + TDS equals the gross receivable cleared. A truck hiring note
    posts freight expense (DR) and cash (CR) for its freight rate.

    Summary totals are taken over all records passed in, not over the entries.
    """
    start_date, end_date = default_period(filters)

    def in_period(record_date) -> bool:
        return start_date <= record_date <= end_date

    customers_by_id = {c.id: c for c in customers}
    invoices_by_id = {inv.id: inv for inv in invoices}

    vouchers = []
    for invoice in invoices:
        if in_period(invoice.date):
            vouchers.append(_invoice_entries(invoice))
    for payment in payments:
        if in_period(payment.date):
            vouchers.append(_payment_entries(payment, invoices_by_id, customers_by_id))
    for thn in truck_hiring_notes:
        if in_period(thn.date):
            vouchers.append(_thn_entries(thn))

    if filters and (filters.min_amount is not None or filters.max_amount is not None):
        # Amount bounds keep or drop a voucher whole, judged on its largest leg
        vouchers = [
            legs for legs in vouchers
            if _within_amount_bounds(max(max(t["debit"], t["credit"]) for t in legs), filters)
        ]
    transactions = [t for legs in vouchers for t in legs]

    if filters and filters.customer_id is not None:
        transactions = [t for t in transactions if t["customer_id"] == filters.customer_id]
    # The period already bounds records; a TDS entry may carry a later tds_date
    transactions = [t for t in transactions if _passes_filters(t, filters, check_dates=False, check_amounts=False)]
    entries = apply_running_balance(transactions, CompanyLedgerEntry)

    total_revenue = sum((_amount(inv.grand_total) for inv in invoices), ZERO)
    total_expenses = sum((_amount(thn.freight_rate) for thn in truck_hiring_notes), ZERO)

    return CompanyLedgerData(
        period=LedgerPeriod(start_date=start_date, end_date=end_date),
        transactions=entries,
        summary=CompanyLedgerSummary(
            total_revenue=total_revenue,
            total_expenses=total_expenses,
            net_profit=total_revenue - total_expenses,
        ),
    )


def _between(column, start_date: Optional[date], end_date: Optional[date]) -> Iterable:
    criteria = []
    if start_date:
        criteria.append(column >= start_date)
    if end_date:
        criteria.append(column <= end_date)
    return criteria


def get_client_ledger(db: Session, customer_id: int, filters: Optional[LedgerFilters] = None) -> ClientLedgerData:
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if customer is None:
        raise NotFoundError("Customer", customer_id)

    invoices = db.query(Invoice).options(
        selectinload(Invoice.customer), selectinload(Invoice.lorry_receipts)
    ).filter(Invoice.customer_id == customer_id).order_by(Invoice.invoice_number).all()
    invoice_ids = [inv.id for inv in invoices]
    # Payments tagged to the customer, paying one of its invoices, or without any customer (THN side)
    payments = db.query(Payment).options(
        selectinload(Payment.customer), selectinload(Payment.invoice), selectinload(Payment.truck_hiring_note)
    ).filter(
        (Payment.customer_id == customer_id)
        | (Payment.invoice_id.in_(invoice_ids))
        | (Payment.customer_id.is_(None))
    ).order_by(Payment.id).all()
    thns = db.query(TruckHiringNote).filter(TruckHiringNote.truck_owner_name == customer.name).all()

    ledger = generate_client_ledger(customer_id, customer, invoices, payments, thns, filters)
    logger.info(f"Client ledger for customer {customer_id}: {ledger.summary.transaction_count} entries")
    return ledger


def get_company_ledger(db: Session, filters: Optional[LedgerFilters] = None) -> CompanyLedgerData:
    filters = filters or LedgerFilters()
    start_date, end_date = default_period(filters)
    filters = filters.model_copy(update={"start_date": start_date, "end_date": end_date})

    customers = db.query(Customer).all()
    invoices = db.query(Invoice).options(
        selectinload(Invoice.customer), selectinload(Invoice.lorry_receipts)
    ).filter(*_between(Invoice.date, start_date, end_date)).order_by(Invoice.invoice_number).all()
    payments = db.query(Payment).options(
        selectinload(Payment.customer),
        selectinload(Payment.invoice).selectinload(Invoice.customer),
        selectinload(Payment.truck_hiring_note),
    ).filter(*_between(Payment.date, start_date, end_date)).order_by(Payment.id).all()
    thns = db.query(TruckHiringNote).filter(
        *_between(TruckHiringNote.date, start_date, end_date)
    ).order_by(TruckHiringNote.thn_number).all()

    ledger = generate_company_ledger(customers, invoices, payments, thns, filters)
    logger.info(f"Company ledger {start_date} to {end_date}: {len(ledger.transactions)} entries")
    return ledger
