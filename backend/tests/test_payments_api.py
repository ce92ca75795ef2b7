from decimal import Decimal

import pytest

from crud.audit_log import record_history
from schemas.audit_log import AuditLogEntry
from tests.factories import lr_json


@pytest.fixture
def invoice(client, customer):
    lr = client.post("/lorry-receipts/", json=lr_json(customer.id, customer.id)).json()
    response = client.post("/invoices/", json={
        "customer_id": customer.id,
        "date": "2025-01-06",
        "total_amount": "10000",
        "cgst_rate": "9",
        "sgst_rate": "9",
        "lorry_receipt_ids": [lr["id"]],
    })
    assert response.status_code == 201, response.text
    return response.json()


def receipt_json(invoice, **overrides):
    payload = {
        "invoice_id": invoice["id"],
        "customer_id": invoice["customer_id"],
        "date": "2025-01-20",
        "amount": "11800",
        "type": "Receipt",
        "mode": "NEFT",
        "reference_no": "UTR0001",
    }
    payload.update(overrides)
    return payload


def invoice_state(client, invoice_id):
    body = client.get(f"/invoices/{invoice_id}").json()
    return Decimal(body["paid_amount"]), Decimal(body["balance_amount"]), body["status"]


def test_full_receipt_pays_invoice(client, invoice):
    response = client.post("/payments/", json=receipt_json(invoice))

    assert response.status_code == 201, response.text
    assert response.json()["payment_number"] == 1
    assert invoice_state(client, invoice["id"]) == (Decimal("11800"), Decimal("0"), "Paid")


def test_partial_receipt(client, invoice):
    client.post("/payments/", json=receipt_json(invoice, amount="5000"))
    assert invoice_state(client, invoice["id"]) == (Decimal("5000"), Decimal("6800"), "Partially Paid")


def test_receipt_with_tds_is_stored_net(client, invoice):
    response = client.post("/payments/", json=receipt_json(
        invoice, amount="10000", tds_applicable=True, tds_rate="10",
    ))

    body = response.json()
    assert Decimal(body["amount"]) == Decimal("9000")
    assert Decimal(body["tds_amount"]) == Decimal("1000")
    assert body["tds_date"] == "2025-01-20"
    assert invoice_state(client, invoice["id"])[0] == Decimal("9000")


def test_moving_tds_date_keeps_withheld_amount(client, invoice):
    payment = client.post("/payments/", json=receipt_json(
        invoice, amount="10000", tds_applicable=True, tds_rate="10",
    )).json()

    response = client.patch(f"/payments/{payment['id']}", json={"tds_date": "2025-02-01"})

    assert response.status_code == 200, response.text
    body = response.json()
    assert Decimal(body["amount"]) == Decimal("9000")
    assert Decimal(body["tds_amount"]) == Decimal("1000")
    assert body["tds_date"] == "2025-02-01"


def test_update_and_delete_recompute_invoice(client, invoice, db_session):
    payment = client.post("/payments/", json=receipt_json(invoice)).json()

    response = client.patch(f"/payments/{payment['id']}", json={"amount": "1800"})
    assert response.status_code == 200, response.text
    assert invoice_state(client, invoice["id"]) == (Decimal("1800"), Decimal("10000"), "Partially Paid")

    assert client.delete(f"/payments/{payment['id']}").status_code == 204
    assert invoice_state(client, invoice["id"]) == (Decimal("0"), Decimal("11800"), "Unpaid")
    assert client.get(f"/payments/{payment['id']}").status_code == 404

    history = [AuditLogEntry.model_validate(row) for row in record_history(db_session, "payments", payment["id"])]
    assert [entry.action for entry in history] == ["UPDATE", "DELETE"]
    assert history[0].old_values["amount"] != history[0].new_values["amount"]
    assert history[1].new_values == {}


def test_list_payments_filters_by_parent(client, invoice):
    client.post("/payments/", json=receipt_json(invoice, amount="100"))
    client.post("/payments/", json=receipt_json(invoice, amount="200"))

    payments = client.get("/payments/", params={"invoice_id": invoice["id"]}).json()
    assert [Decimal(p["amount"]) for p in payments] == [Decimal("100"), Decimal("200")]
    assert client.get("/payments/", params={"truck_hiring_note_id": 1}).json() == []


def test_payment_needs_exactly_one_parent(client, invoice):
    response = client.post("/payments/", json=receipt_json(invoice, truck_hiring_note_id=1))

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation failed"
    assert body["errors"]["fieldErrors"] == {}
    assert "not both" in body["errors"]["formErrors"][0]

    orphan = receipt_json(invoice)
    del orphan["invoice_id"]
    assert client.post("/payments/", json=orphan).status_code == 400


def test_invoice_payment_requires_customer(client, invoice):
    response = client.post("/payments/", json=receipt_json(invoice, customer_id=None))
    assert response.status_code == 400
    assert "Customer is required" in response.json()["errors"]["formErrors"][0]


def test_tds_requires_rate(client, invoice):
    response = client.post("/payments/", json=receipt_json(invoice, tds_applicable=True))
    assert response.status_code == 400
    assert "TDS rate is required" in response.json()["errors"]["formErrors"][0]


def test_field_errors_are_keyed_by_field(client, invoice):
    response = client.post("/payments/", json=receipt_json(invoice, amount="0", mode="Barter"))
    assert response.status_code == 400
    field_errors = response.json()["errors"]["fieldErrors"]
    assert set(field_errors) == {"amount", "mode"}


def test_payment_for_missing_invoice_is_not_found(client, invoice):
    response = client.post("/payments/", json=receipt_json(invoice, invoice_id=999))
    assert response.status_code == 404
    assert response.json() == {"detail": "Invoice not found"}


def test_payment_for_missing_customer_is_rejected(client, invoice):
    response = client.post("/payments/", json=receipt_json(invoice, customer_id=999))
    assert response.status_code == 400
    assert response.json()["errors"]["fieldErrors"] == {"customer_id": ["Customer does not exist"]}


def test_update_missing_payment(client):
    response = client.patch("/payments/42", json={"notes": "x"})
    assert response.status_code == 404
    assert response.json() == {"detail": "Payment not found"}
