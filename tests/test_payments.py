from conftest import money


def _customer_with_debt(api, amount=100):
    return api.customer("Debtor", balance=amount)


def _payment_out(api, car_id, amount, **extra):
    return api.create("/api/payments/payment-out", {
        "account_type": "car", "recipient_id": car_id, "amount": amount,
        "payment_date": "2025-03-02", **extra,
    })


def test_payment_out_touches_only_that_car(api):
    car = api.car()
    other = api.car(name="Truck 2", plate="XYZ-999")
    customer = _customer_with_debt(api)

    payment = _payment_out(api, car["id"], 50, category="fuel", account_month="2025-03")

    assert payment["payment_no"] == "PYN-0001"
    assert payment["type"] == "payment_out"
    assert money(payment["balance_after"]) == 50
    assert money(api.get(f"/api/cars/{car['id']}").json()["left"]) == 50
    assert money(api.get(f"/api/cars/{other['id']}").json()["left"]) == 0
    assert money(api.get(f"/api/customers/{customer['id']}").json()["balance"]) == 100


def test_edit_with_same_amount_changes_nothing(api):
    car = api.car()
    payment = _payment_out(api, car["id"], 100)
    ledger_before = api.get(f"/api/cars/{car['id']}/ledger").json()["total"]

    resp = api.put(f"/api/payments/{payment['id']}", {"amount": 100, "description": "same"})

    assert resp.status_code == 200
    assert resp.json()["description"] == "same"
    assert money(api.get(f"/api/cars/{car['id']}").json()["left"]) == 100
    assert api.get(f"/api/cars/{car['id']}/ledger").json()["total"] == ledger_before


def test_edit_then_revert_restores_balance(api):
    customer = _customer_with_debt(api, 500)
    payment = api.create("/api/payments/receive", {
        "customer_id": customer["id"], "amount": 100, "payment_date": "2025-03-02",
    })
    assert money(api.get(f"/api/customers/{customer['id']}").json()["balance"]) == 400

    api.put(f"/api/payments/{payment['id']}", {"amount": 150})
    assert money(api.get(f"/api/customers/{customer['id']}").json()["balance"]) == 350

    api.put(f"/api/payments/{payment['id']}", {"amount": 100})
    assert money(api.get(f"/api/customers/{customer['id']}").json()["balance"]) == 400


def test_receive_then_delete_is_net_zero(api):
    customer = _customer_with_debt(api, 100)

    payment = api.create("/api/payments/receive", {
        "customer_id": customer["id"], "amount": 30, "payment_date": "2025-03-02",
    })
    assert money(payment["balance_after"]) == 70

    assert api.delete(f"/api/payments/{payment['id']}").status_code == 204
    assert money(api.get(f"/api/customers/{customer['id']}").json()["balance"]) == 100


def test_receive_above_outstanding_balance_is_rejected(api):
    customer = _customer_with_debt(api, 20)

    resp = api.post("/api/payments/receive", {
        "customer_id": customer["id"], "amount": 30, "payment_date": "2025-03-02",
    })

    assert resp.status_code == 400
    assert "exceeds customer outstanding balance" in resp.json()["message"]
    assert api.get("/api/payments").json()["total"] == 0


def test_deleting_car_payment_reduces_left_not_a_customer(api):
    car = api.car()
    customer = _customer_with_debt(api, 100)
    payment = _payment_out(api, car["id"], 40)

    api.delete(f"/api/payments/{payment['id']}")

    assert money(api.get(f"/api/cars/{car['id']}").json()["left"]) == 0
    assert money(api.get(f"/api/customers/{customer['id']}").json()["balance"]) == 100


def test_edit_clamps_at_zero(api):
    car = api.car()
    payment = _payment_out(api, car["id"], 100)
    api.put(f"/api/cars/{car['id']}", {"left": 30})

    api.put(f"/api/payments/{payment['id']}", {"amount": 10})

    assert money(api.get(f"/api/cars/{car['id']}").json()["left"]) == 0


def test_employee_payment_out(api):
    employee = api.employee(balance=200)

    payment = api.create("/api/payments/payment-out", {
        "account_type": "employee", "recipient_id": employee["id"], "amount": 75,
        "payment_date": "2025-03-02", "category": "advance",
    })
    assert payment["employee"]["name"] == employee["name"]
    assert money(api.get(f"/api/employees/{employee['id']}").json()["balance"]) == 125

    api.delete(f"/api/payments/{payment['id']}")
    assert money(api.get(f"/api/employees/{employee['id']}").json()["balance"]) == 200


def test_payment_to_unknown_recipient(api):
    resp = api.post("/api/payments/payment-out", {
        "account_type": "car", "recipient_id": 42, "amount": 10, "payment_date": "2025-03-02",
    })
    assert resp.status_code == 400


def test_amount_validation(api):
    car = api.car()
    for amount in (0, -5, "10.001"):
        resp = api.post("/api/payments/payment-out", {
            "account_type": "car", "recipient_id": car["id"], "amount": amount, "payment_date": "2025-03-02",
        })
        assert resp.status_code == 422


def test_duplicate_payment_number_conflicts(api):
    car = api.car()
    _payment_out(api, car["id"], 10, payment_no="PYN-0005")

    resp = api.post("/api/payments/payment-out", {
        "account_type": "car", "recipient_id": car["id"], "amount": 10,
        "payment_date": "2025-03-02", "payment_no": "PYN-0005",
    })
    assert resp.status_code == 409
    assert money(api.get(f"/api/cars/{car['id']}").json()["left"]) == 10
    assert api.get("/api/payments/next-number").json()["next_number"] == "PYN-0006"


def test_list_filters_and_total_amount(api):
    car = api.car()
    customer = _customer_with_debt(api, 100)
    _payment_out(api, car["id"], 10)
    _payment_out(api, car["id"], 15.5)
    api.create("/api/payments/receive", {"customer_id": customer["id"], "amount": 30, "payment_date": "2025-03-02"})

    data = api.get("/api/payments", params={"type": "payment_out"}).json()
    assert data["total"] == 2
    assert money(data["total_amount"]) == money("25.5")

    data = api.get("/api/payments", params={"customer_id": customer["id"]}).json()
    assert data["total"] == 1
    assert data["payments"][0]["customer"]["name"] == "Debtor"


def test_unknown_payment(api):
    assert api.get("/api/payments/999").status_code == 404
    assert api.put("/api/payments/999", {"amount": 5}).status_code == 404
    assert api.delete("/api/payments/999").status_code == 404
