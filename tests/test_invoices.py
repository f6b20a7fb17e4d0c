from decimal import Decimal

import pytest

from clinic.models import InvoiceStatus
from clinic.services.billing import derive_invoice_status


@pytest.mark.parametrize(
    ("total", "paid", "expected"),
    [
        ("100", "0", InvoiceStatus.UNPAID),
        ("100", "0.01", InvoiceStatus.PARTIAL),
        ("100", "99.99", InvoiceStatus.PARTIAL),
        ("100", "100", InvoiceStatus.PAID),
        ("100", "150", InvoiceStatus.PAID),
        ("0", "0", InvoiceStatus.UNPAID),
    ],
)
def test_derive_invoice_status(total, paid, expected):
    assert derive_invoice_status(Decimal(total), Decimal(paid)) is expected


def _create_invoice(client, patient_id, **fields):
    payload = {"patientId": patient_id, "totalAmount": 100000}
    payload.update(fields)
    response = client.post("/api/invoices", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_payment_scenario(client, patient):
    invoice = _create_invoice(client, patient["id"])
    assert invoice["status"] == "Unpaid"
    assert invoice["paidAmount"] == "0.00"
    assert invoice["balance"] == "100000.00"

    response = client.put(
        f"/api/invoices/{invoice['id']}", json={"paidAmount": 40000, "status": "Partial"}
    )
    assert response.status_code == 200

    listed = {row["id"]: row for row in client.get("/api/invoices").json()}
    row = listed[invoice["id"]]
    assert Decimal(row["balance"]) == Decimal("60000")
    assert row["status"] == "Partial"
    assert row["totalAmount"] == "100000.00"


def test_balance_identity_holds_for_every_invoice(client, patient):
    _create_invoice(client, patient["id"], totalAmount="250.50", paidAmount="100.25")
    _create_invoice(client, patient["id"], totalAmount="80", paidAmount="80")
    _create_invoice(client, patient["id"], totalAmount="10")

    for row in client.get("/api/invoices").json():
        assert Decimal(row["balance"]) == Decimal(row["totalAmount"]) - Decimal(row["paidAmount"])


def test_status_is_derived_not_trusted(client, patient):
    invoice = _create_invoice(client, patient["id"], status="Paid")
    assert invoice["status"] == "Unpaid"

    body = client.put(
        f"/api/invoices/{invoice['id']}", json={"paidAmount": 100000, "status": "Partial"}
    ).json()
    assert body["status"] == "Paid"
    assert body["balance"] == "0.00"


def test_changing_total_rederives_status(client, patient):
    invoice = _create_invoice(client, patient["id"], paidAmount=50)
    assert invoice["status"] == "Partial"

    body = client.put(f"/api/invoices/{invoice['id']}", json={"totalAmount": 50}).json()
    assert body["status"] == "Paid"


def test_repeated_update_is_idempotent(client, patient):
    invoice = _create_invoice(client, patient["id"])
    update = {"paidAmount": "1234.56", "paymentMethod": "Cash"}
    once = client.put(f"/api/invoices/{invoice['id']}", json=update).json()
    twice = client.put(f"/api/invoices/{invoice['id']}", json=update).json()
    assert once == twice


def test_record_payment_accumulates(client, patient):
    invoice = _create_invoice(client, patient["id"], totalAmount=1000)

    first = client.post(
        f"/api/invoices/{invoice['id']}/payments",
        json={"amount": 400, "paymentMethod": "Mobile Banking"},
    )
    assert first.status_code == 200
    assert first.json()["paidAmount"] == "400.00"
    assert first.json()["status"] == "Partial"
    assert first.json()["paymentMethod"] == "Mobile Banking"

    second = client.post(f"/api/invoices/{invoice['id']}/payments", json={"amount": "600"})
    body = second.json()
    assert body["paidAmount"] == "1000.00"
    assert body["balance"] == "0.00"
    assert body["status"] == "Paid"
    assert body["paymentMethod"] == "Mobile Banking"


def test_overpayment_leaves_negative_balance(client, patient):
    invoice = _create_invoice(client, patient["id"], totalAmount=100)
    body = client.post(
        f"/api/invoices/{invoice['id']}/payments", json={"amount": 150}
    ).json()
    assert body["status"] == "Paid"
    assert body["balance"] == "-50.00"


def test_payment_amount_must_be_positive(client, patient):
    invoice = _create_invoice(client, patient["id"])
    response = client.post(f"/api/invoices/{invoice['id']}/payments", json={"amount": 0})
    assert response.status_code == 400
    assert response.json()["field"] == "amount"


def test_payment_on_unknown_invoice_returns_404(client):
    response = client.post("/api/invoices/77/payments", json={"amount": 10})
    assert response.status_code == 404
    assert response.json() == {"message": "Invoice not found"}


def test_invalid_invoice_body_is_400(client):
    response = client.post("/api/invoices", json={"patientId": 1, "totalAmount": "lots"})
    assert response.status_code == 400
    assert response.json()["field"] == "totalAmount"


def test_update_unknown_invoice_returns_404(client):
    response = client.put("/api/invoices/5", json={"paidAmount": 1})
    assert response.status_code == 404


def test_payment_overflowing_amount_column_is_400(client, patient):
    invoice = _create_invoice(
        client, patient["id"], totalAmount="9999999999.99", paidAmount="9999999999.99"
    )

    response = client.post(
        f"/api/invoices/{invoice['id']}/payments", json={"amount": "0.01"}
    )

    assert response.status_code == 400
    assert "paidAmount" in response.json()["message"]
    listed = client.get("/api/invoices").json()
    assert [row["paidAmount"] for row in listed] == ["9999999999.99"]
