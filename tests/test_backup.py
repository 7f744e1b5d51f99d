from datetime import date
from decimal import Decimal
from io import BytesIO

import pytest
from openpyxl import load_workbook

from conftest import money
from haype.schemas.backup import (
    BackupBundle,
    BackupCar,
    BackupCustomer,
    BackupEmployee,
    BackupInvoice,
    BackupInvoiceLine,
    BackupItem,
    BackupPayment,
)
from haype.services.backup_workbook import CAR_COLUMNS, PAYMENT_COLUMNS, build_workbook, read_workbook


def _bundle():
    return BackupBundle(
        employees=[BackupEmployee(id=4, name="Ali", category="driver", balance=Decimal("25.00"))],
        items=[BackupItem(id=2, name="Gravel", price=Decimal("10.00"))],
        cars=[BackupCar(id=7, name="Truck", number_plate="T-7", driver_id=4, driver_name="Ali",
                        balance=Decimal("30.00"), left=Decimal("12.00"))],
        customers=[BackupCustomer(id=3, name="Acme", balance=Decimal("18.50"))],
        invoices=[BackupInvoice(
            id=9, invoice_no="INV-005", car_id=7, invoice_date=date(2025, 3, 1),
            total=Decimal("30.00"), total_left=Decimal("12.00"),
            items=[
                BackupInvoiceLine(item_id=2, customer_id=3, quantity=2, price=Decimal("10.00"),
                                  total=Decimal("20.00"), left_amount=Decimal("12.00"),
                                  payment_method="credit"),
                BackupInvoiceLine(item_id=2, customer_id=3, quantity=1, price=Decimal("10.00"),
                                  total=Decimal("10.00")),
            ],
        )],
        payments=[
            BackupPayment(id=5, payment_no="PYN-0002", type="receive", customer_id=3,
                          amount=Decimal("1.50"), payment_date=date(2025, 3, 2)),
            BackupPayment(id=6, payment_no="BAL-0001", type="balance_add", employee_id=4,
                          amount=Decimal("25.00"), payment_date=date(2025, 3, 2), description="Start"),
        ],
    )


def test_workbook_layout():
    wb = load_workbook(BytesIO(build_workbook(_bundle())))

    assert wb.sheetnames == [
        "Backup_Info", "Cars", "Employees", "Items", "Customers", "Invoices", "Invoice_Items", "Payments",
    ]
    assert [c.value for c in wb["Cars"][1]] == CAR_COLUMNS
    assert [c.value for c in wb["Payments"][1]][:12] == PAYMENT_COLUMNS[:12]

    info = {row[0]: row[1] for row in wb["Backup_Info"].iter_rows(values_only=True)}
    assert info["Total Invoices"] == 1
    assert info["System Version"] == "1.0.0"


def test_empty_collections_get_no_sheet():
    wb = load_workbook(BytesIO(build_workbook(BackupBundle())))
    assert wb.sheetnames == ["Backup_Info"]


def test_workbook_reads_back():
    bundle = read_workbook(build_workbook(_bundle()))

    assert bundle.cars[0].driver_id == 4
    assert bundle.cars[0].left == Decimal("12.00")
    assert bundle.customers[0].balance == Decimal("18.50")
    invoice = bundle.invoices[0]
    assert invoice.invoice_no == "INV-005"
    assert invoice.invoice_date == date(2025, 3, 1)
    assert [line.quantity for line in invoice.items] == [2, 1]
    assert invoice.items[0].payment_method.value == "credit"
    assert [p.type.value for p in bundle.payments] == ["receive", "balance_add"]
    assert bundle.payments[1].employee_id == 4


def test_unreadable_workbook():
    with pytest.raises(ValueError):
        read_workbook(b"definitely not a zip file")


def test_json_import_replaces_data(api):
    api.car(name="Old", plate="OLD-1")

    resp = api.post("/api/backup/import", _bundle().model_dump(mode="json"))
    assert resp.status_code == 200, resp.text
    assert resp.json()["total_records"] == 7

    cars = api.get("/api/cars").json()["cars"]
    assert [(c["id"], c["name"]) for c in cars] == [(7, "Truck")]
    assert money(cars[0]["left"]) == 12
    assert money(api.get("/api/customers/3").json()["balance"]) == money("18.50")

    entries = api.get("/api/cars/7/ledger").json()["entries"]
    assert {e["ref_type"] for e in entries} == {"ADJUSTMENT"}

    assert api.get("/api/invoices/next-number").json()["next_number"] == "INV-006"
    assert api.get("/api/payments/next-number").json()["next_number"] == "PYN-0003"


def test_export_then_restore(api):
    car = api.car()
    customer = api.customer()
    item = api.item()
    api.create("/api/invoices", {
        "car_id": car["id"], "invoice_date": "2025-03-01",
        "items": [{"item_id": item["id"], "customer_id": customer["id"], "quantity": 2, "price": 10,
                   "payment_method": "credit"}],
    })
    exported = api.get("/api/backup/export").json()
    assert exported["invoices"][0]["items"][0]["customer_name"] == "Acme"

    api.create("/api/payments/receive", {
        "customer_id": customer["id"], "amount": 5, "payment_date": "2025-03-02",
    })
    assert money(api.get(f"/api/customers/{customer['id']}").json()["balance"]) == 15

    resp = api.post("/api/backup/import", exported)
    assert resp.status_code == 200, resp.text

    assert money(api.get(f"/api/customers/{customer['id']}").json()["balance"]) == 20
    assert api.get("/api/payments").json()["total"] == 0
    assert api.get("/api/invoices").json()["total"] == 1


def test_workbook_endpoints(api):
    api.car(balance=40)

    resp = api.get("/api/backup/export.xlsx")
    assert resp.status_code == 200
    assert "Haype_System_Backup_" in resp.headers["content-disposition"]

    api.car(name="Extra", plate="X-1")
    resp = api.post(
        "/api/backup/import.xlsx",
        files={"file": ("backup.xlsx", resp.content, "application/octet-stream")},
    )
    assert resp.status_code == 200, resp.text

    cars = api.get("/api/cars").json()["cars"]
    assert [c["number_plate"] for c in cars] == ["ABC-123"]
    assert money(cars[0]["balance"]) == 40


def test_workbook_upload_errors(api):
    resp = api.post("/api/backup/import.xlsx", files={"file": ("backup.csv", b"a,b", "text/csv")})
    assert resp.status_code == 400

    resp = api.post("/api/backup/import.xlsx", files={"file": ("backup.xlsx", b"garbage", "application/octet-stream")})
    assert resp.status_code == 400


def test_import_rejects_dangling_references(api):
    api.car()
    bundle = _bundle()
    bundle.invoices[0].car_id = 99

    resp = api.post("/api/backup/import", bundle.model_dump(mode="json"))

    assert resp.status_code == 400
    assert api.get("/api/cars").json()["total"] == 1


def test_import_requires_admin(client, operator_headers):
    resp = client.post("/api/backup/import", json=BackupBundle().model_dump(mode="json"), headers=operator_headers)
    assert resp.status_code == 403
    assert client.get("/api/backup/export", headers=operator_headers).status_code == 200
