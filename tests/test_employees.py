from conftest import money


def _change(api, employee_id, action, amount, description="Advance"):
    return api.post(f"/api/employees/{employee_id}/{action}", {
        "amount": amount, "date": "2025-03-05", "description": description,
    })


def test_add_and_deduct_balance(api):
    employee = api.employee(balance=100)

    resp = _change(api, employee["id"], "add-balance", 50, "Overtime")
    assert resp.status_code == 200, resp.text
    assert resp.json()["payment_no"] == "BAL-0001"
    assert money(resp.json()["new_balance"]) == 150

    resp = _change(api, employee["id"], "deduct-balance", 30)
    assert resp.json()["payment_no"] == "BAL-0002"
    assert money(resp.json()["new_balance"]) == 120
    assert money(api.get(f"/api/employees/{employee['id']}").json()["balance"]) == 120


def test_deduct_more_than_balance_is_rejected(api):
    employee = api.employee(balance=10)

    resp = _change(api, employee["id"], "deduct-balance", 10.01)

    assert resp.status_code == 400
    assert money(api.get(f"/api/employees/{employee['id']}").json()["balance"]) == 10


def test_balance_change_requires_description_and_positive_amount(api):
    employee = api.employee()
    resp = api.post(f"/api/employees/{employee['id']}/add-balance", {"amount": 5, "date": "2025-03-05"})
    assert resp.status_code == 422
    assert _change(api, employee["id"], "add-balance", 0).status_code == 422


def test_balance_numbers_do_not_consume_payment_numbers(api):
    employee = api.employee()
    car = api.car()
    _change(api, employee["id"], "add-balance", 5)
    payment = api.create("/api/payments/payment-out", {
        "account_type": "car", "recipient_id": car["id"], "amount": 5, "payment_date": "2025-03-05",
    })
    assert payment["payment_no"] == "PYN-0001"


def test_payment_history(api):
    employee = api.employee(balance=100)
    _change(api, employee["id"], "add-balance", 20)
    api.create("/api/payments/payment-out", {
        "account_type": "employee", "recipient_id": employee["id"], "amount": 40, "payment_date": "2025-03-06",
    })

    history = api.get(f"/api/employees/{employee['id']}/payment-history").json()

    assert {p["type"] for p in history} == {"balance_add", "payment_out"}
    assert api.get("/api/employees/999/payment-history").status_code == 404


def test_deleting_a_balance_entry_reverses_it(api):
    employee = api.employee(balance=100)
    _change(api, employee["id"], "deduct-balance", 60)
    payment = api.get(f"/api/employees/{employee['id']}/payment-history").json()[0]

    api.delete(f"/api/payments/{payment['id']}")

    assert money(api.get(f"/api/employees/{employee['id']}").json()["balance"]) == 100


def test_employee_ledger(api):
    employee = api.employee(balance=100)
    _change(api, employee["id"], "add-balance", 20)

    data = api.get(f"/api/employees/{employee['id']}/ledger").json()

    assert data["total"] == 2
    latest = data["entries"][0]
    assert latest["ref_type"] == "PAYMENT"
    assert latest["ref_id"] == "BAL-0001"
    assert money(latest["change"]) == 20
    assert money(latest["value_after"]) == 120


def test_employee_crud(api):
    employee = api.employee(name="Omar", category="kirishboy")

    resp = api.put(f"/api/employees/{employee['id']}", {"phone": "0700", "status": "Inactive"})
    assert resp.json()["phone"] == "0700"
    assert resp.json()["status"] == "Inactive"

    assert api.get("/api/employees", params={"category": "kirishboy"}).json()["total"] == 1
    assert api.get("/api/employees", params={"status": "Active"}).json()["total"] == 0

    assert api.delete(f"/api/employees/{employee['id']}").status_code == 204
    assert api.get(f"/api/employees/{employee['id']}").status_code == 404


def test_deleting_employee_unassigns_cars(api):
    driver = api.employee(name="Driver")
    car = api.car(driver_id=driver["id"])
    assert car["driver"]["name"] == "Driver"

    api.delete(f"/api/employees/{driver['id']}")

    car = api.get(f"/api/cars/{car['id']}").json()
    assert car["driver_id"] is None


def test_employee_with_payments_cannot_be_deleted(api):
    employee = api.employee()
    _change(api, employee["id"], "add-balance", 5)

    resp = api.delete(f"/api/employees/{employee['id']}")
    assert resp.status_code == 400
