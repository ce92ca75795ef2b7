from datetime import date
from decimal import Decimal

import pytest

from crud.invoices import compute_invoice_totals
from models.audit_log import AuditLog
from models.customers import Customer
from models.invoices import GstType
from schemas.invoices import InvoiceCreate
from tests.factories import lr_json


def invoice_create(**overrides):
    values = dict(
        customer_id=1,
        date=date(2025, 1, 6),
        total_amount=Decimal("10000"),
        cgst_rate=Decimal("9"),
        sgst_rate=Decimal("9"),
        igst_rate=Decimal("18"),
        lorry_receipt_ids=[1],
    )
    values.update(overrides)
    return InvoiceCreate(**values)


def test_intra_state_gst():
    totals = compute_invoice_totals(invoice_create())
    assert totals["cgst_amount"] == Decimal("900.00")
    assert totals["sgst_amount"] == Decimal("900.00")
    assert totals["igst_amount"] == Decimal("0")
    assert totals["grand_total"] == Decimal("11800.00")


def test_inter_state_gst():
    totals = compute_invoice_totals(invoice_create(gst_type=GstType.IGST))
    assert totals["igst_amount"] == Decimal("1800.00")
    assert totals["cgst_amount"] == totals["sgst_amount"] == Decimal("0")
    assert totals["grand_total"] == Decimal("11800.00")


def test_reverse_charge_carries_no_gst():
    totals = compute_invoice_totals(invoice_create(is_rcm=True))
    assert totals["grand_total"] == Decimal("10000")


def test_manual_gst_and_supplied_grand_total():
    totals = compute_invoice_totals(invoice_create(
        is_manual_gst=True, cgst_amount=Decimal("450"), sgst_amount=Decimal("450"), grand_total=Decimal("10900"),
    ))
    assert totals["cgst_amount"] == Decimal("450")
    assert totals["grand_total"] == Decimal("10900")


@pytest.fixture
def lorry_receipts(client, customer):
    return [client.post("/lorry-receipts/", json=lr_json(customer.id, customer.id)).json() for _ in range(2)]


def create_invoice(client, customer, lr_ids, **overrides):
    payload = {
        "customer_id": customer.id,
        "date": "2025-01-01",
        "total_amount": "12000",
        "lorry_receipt_ids": lr_ids,
    }
    payload.update(overrides)
    return client.post("/invoices/", json=payload)


def test_lorry_receipts_are_numbered(lorry_receipts):
    assert [lr["lr_number"] for lr in lorry_receipts] == [1, 2]
    assert all(lr["status"] == "Created" for lr in lorry_receipts)


def test_create_invoice_links_lorry_receipts(client, customer, lorry_receipts):
    response = create_invoice(client, customer, [lr["id"] for lr in lorry_receipts])

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["invoice_number"] == 1
    assert body["status"] == "Unpaid"
    assert Decimal(body["balance_amount"]) == Decimal("12000")
    assert body["customer"]["name"] == "Sharma Traders"
    assert {lr["status"] for lr in body["lorry_receipts"]} == {"Invoiced"}


def test_lorry_receipt_cannot_be_invoiced_twice(client, customer, lorry_receipts):
    create_invoice(client, customer, [lorry_receipts[0]["id"]])

    response = create_invoice(client, customer, [lorry_receipts[0]["id"]])

    assert response.status_code == 400
    assert "lorry_receipt_ids" in response.json()["errors"]["fieldErrors"]


def test_invoice_needs_lorry_receipts(client, customer):
    response = create_invoice(client, customer, [])
    assert response.status_code == 400
    assert "lorry_receipt_ids" in response.json()["errors"]["fieldErrors"]


def test_invoice_for_unknown_customer(client, customer, lorry_receipts):
    response = client.post("/invoices/", json={
        "customer_id": 999, "date": "2025-01-01", "total_amount": "100", "lorry_receipt_ids": [lorry_receipts[0]["id"]],
    })
    assert response.status_code == 400
    assert response.json()["errors"]["fieldErrors"]["customer_id"] == ["Customer does not exist"]


def test_update_keeps_grand_total(client, customer, lorry_receipts):
    invoice = create_invoice(client, customer, [lorry_receipts[0]["id"]]).json()

    response = client.patch(f"/invoices/{invoice['id']}", json={"remarks": "Rate revised", "grand_total": "1"})

    assert response.status_code == 200
    assert response.json()["remarks"] == "Rate revised"
    assert Decimal(response.json()["grand_total"]) == Decimal("12000")


def test_reverse_charge_cannot_be_switched_after_creation(client, customer, lorry_receipts):
    invoice = create_invoice(client, customer, [lorry_receipts[0]["id"]], cgst_rate="9", sgst_rate="9").json()

    body = client.patch(f"/invoices/{invoice['id']}", json={"is_rcm": True}).json()

    assert body["is_rcm"] is False
    assert Decimal(body["cgst_amount"]) == Decimal("1080.00")
    assert Decimal(body["grand_total"]) == Decimal("14160.00")


def test_delete_invoice_releases_lorry_receipts(client, customer, lorry_receipts, db_session):
    invoice = create_invoice(client, customer, [lorry_receipts[0]["id"]]).json()
    payment = client.post("/payments/", json={
        "invoice_id": invoice["id"], "customer_id": customer.id, "date": "2025-01-10",
        "amount": "500", "type": "Receipt", "mode": "Cash",
    }).json()

    assert client.delete(f"/invoices/{invoice['id']}").status_code == 204

    assert client.get(f"/invoices/{invoice['id']}").status_code == 404
    assert client.get(f"/lorry-receipts/{lorry_receipts[0]['id']}").json()["status"] == "Created"
    assert client.get("/payments/").json() == []
    deleted = db_session.query(AuditLog).filter(AuditLog.table_name == "payments", AuditLog.action == "DELETE").one()
    assert deleted.record_id == payment["id"]
    assert deleted.changed_by == "accounts@example.com"


def test_client_ledger_endpoint(client, customer, lorry_receipts):
    invoice = create_invoice(client, customer, [lr["id"] for lr in lorry_receipts]).json()
    client.post("/payments/", json={
        "invoice_id": invoice["id"], "customer_id": customer.id, "date": "2025-01-15",
        "amount": "5000", "type": "Receipt", "mode": "NEFT",
    })

    response = client.get(f"/ledgers/client/{customer.id}")

    assert response.status_code == 200, response.text
    ledger = response.json()
    assert ledger["customer_name"] == "Sharma Traders"
    assert [Decimal(t["balance"]) for t in ledger["transactions"]] == [Decimal("12000"), Decimal("7000")]
    assert ledger["summary"]["closing_balance_type"] == "DR"
    assert ledger["transactions"][0]["particulars"] == "Invoice No: INV-1 - Freight charges for 2 LRs - Sharma Traders"

    filtered = client.get(f"/ledgers/client/{customer.id}", params={"start_date": "2025-01-10"}).json()
    assert filtered["summary"]["transaction_count"] == 1


def test_client_ledger_unknown_customer(client, db_session):
    response = client.get("/ledgers/client/999")
    assert response.status_code == 404
    assert response.json() == {"detail": "Customer not found"}


def test_client_ledger_accepts_matching_customer_filter(client, customer):
    response = client.get(f"/ledgers/client/{customer.id}", params={"customer_id": customer.id})
    assert response.status_code == 200, response.text
    assert response.json()["customer_id"] == customer.id


def test_client_ledger_rejects_other_customer_filter(client, customer):
    response = client.get(f"/ledgers/client/{customer.id}", params={"customer_id": customer.id + 1})
    assert response.status_code == 400


def test_company_ledger_endpoint(client, customer, lorry_receipts, db_session):
    create_invoice(client, customer, [lorry_receipts[0]["id"]])
    other = Customer(name="Gupta & Sons", address="4 Park Street", state="West Bengal")
    db_session.add(other)
    db_session.commit()

    response = client.get("/ledgers/company", params={"start_date": "2025-01-01", "end_date": "2025-01-31"})

    assert response.status_code == 200, response.text
    ledger = response.json()
    assert ledger["period"] == {"start_date": "2025-01-01", "end_date": "2025-01-31"}
    assert [t["account"] for t in ledger["transactions"]] == ["Freight Revenue", "Accounts Receivable"]
    assert Decimal(ledger["summary"]["net_profit"]) == Decimal("12000")

    only_other = client.get("/ledgers/company", params={
        "start_date": "2025-01-01", "end_date": "2025-01-31", "customer_id": other.id,
    }).json()
    assert only_other["transactions"] == []
