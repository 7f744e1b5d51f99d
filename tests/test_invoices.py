from conftest import money


def _setup(api):
    car = api.car()
    other = api.car(name="Truck 2", plate="XYZ-999")
    a = api.customer("Customer A")
    b = api.customer("Customer B")
    item = api.item()
    return car, other, a, b, item


def _lines(item, a, b):
    return [
        {"item_id": item["id"], "customer_id": a["id"], "quantity": 2, "price": 30,
         "left_amount": 20, "payment_method": "credit"},
        {"item_id": item["id"], "customer_id": b["id"], "quantity": 1, "price": 40,
         "payment_method": "cash"},
    ]


def test_invoice_distribution(api):
    car, other, a, b, item = _setup(api)

    invoice = api.create("/api/invoices", {
        "car_id": car["id"], "invoice_date": "2025-03-01", "items": _lines(item, a, b),
    })

    assert invoice["invoice_no"] == "INV-001"
    assert money(invoice["total"]) == 100
    assert money(invoice["total_left"]) == 20
    assert money(invoice["total_profit"]) == 0
    assert [money(line["total"]) for line in invoice["lines"]] == [60, 40]

    car = api.get(f"/api/cars/{car['id']}").json()
    assert money(car["balance"]) == 100
    assert money(car["left"]) == 20
    assert money(api.get(f"/api/customers/{a['id']}").json()["balance"]) == 60
    assert money(api.get(f"/api/customers/{b['id']}").json()["balance"]) == 0
    assert money(api.get(f"/api/cars/{other['id']}").json()["balance"]) == 0


def test_invoice_numbers_continue_from_highest(api):
    car, _, a, b, item = _setup(api)
    payload = {"car_id": car["id"], "invoice_date": "2025-03-01", "items": _lines(item, a, b)}

    api.create("/api/invoices", {**payload, "invoice_no": "INV-001"})
    api.create("/api/invoices", {**payload, "invoice_no": "INV-007"})

    assert api.get("/api/invoices/next-number").json()["next_number"] == "INV-008"
    assert api.create("/api/invoices", payload)["invoice_no"] == "INV-008"


def test_duplicate_invoice_number_conflicts(api):
    car, _, a, b, item = _setup(api)
    payload = {"car_id": car["id"], "invoice_no": "INV-001", "invoice_date": "2025-03-01",
               "items": _lines(item, a, b)}
    api.create("/api/invoices", payload)

    resp = api.post("/api/invoices", payload)
    assert resp.status_code == 409
    # the rejected invoice left no trace on the car
    assert money(api.get(f"/api/cars/{car['id']}").json()["balance"]) == 100


def test_left_amount_cannot_exceed_line_total(api):
    car, _, a, b, item = _setup(api)
    lines = _lines(item, a, b)
    lines[0]["left_amount"] = 61

    resp = api.post("/api/invoices", {"car_id": car["id"], "invoice_date": "2025-03-01", "items": lines})
    assert resp.status_code == 422
    assert resp.json()["success"] is False


def test_invoice_needs_lines(api):
    car = api.car()
    resp = api.post("/api/invoices", {"car_id": car["id"], "invoice_date": "2025-03-01", "items": []})
    assert resp.status_code == 422


def test_unknown_car_is_rejected_without_side_effects(api):
    _, _, a, b, item = _setup(api)
    resp = api.post("/api/invoices", {"car_id": 999, "invoice_date": "2025-03-01", "items": _lines(item, a, b)})
    assert resp.status_code == 400
    assert money(api.get(f"/api/customers/{a['id']}").json()["balance"]) == 0


def test_delete_invoice_reverses_distribution(api):
    car, _, a, b, item = _setup(api)
    invoice = api.create("/api/invoices", {
        "car_id": car["id"], "invoice_date": "2025-03-01", "items": _lines(item, a, b),
    })

    assert api.delete(f"/api/invoices/{invoice['id']}").status_code == 204

    car = api.get(f"/api/cars/{car['id']}").json()
    assert money(car["balance"]) == 0
    assert money(car["left"]) == 0
    assert money(api.get(f"/api/customers/{a['id']}").json()["balance"]) == 0
    assert api.get(f"/api/invoices/{invoice['id']}").status_code == 404


def test_update_invoice_moves_effect_to_new_version(api):
    car, other, a, b, item = _setup(api)
    invoice = api.create("/api/invoices", {
        "car_id": car["id"], "invoice_date": "2025-03-01", "items": _lines(item, a, b),
    })

    resp = api.put(f"/api/invoices/{invoice['id']}", {
        "car_id": other["id"],
        "items": [{"item_id": item["id"], "customer_id": b["id"], "quantity": 5, "price": 10,
                   "left_amount": 5, "payment_method": "credit"}],
    })
    assert resp.status_code == 200, resp.text
    assert money(resp.json()["total"]) == 50
    assert len(resp.json()["lines"]) == 1

    first = api.get(f"/api/cars/{car['id']}").json()
    second = api.get(f"/api/cars/{other['id']}").json()
    assert money(first["balance"]) == 0 and money(first["left"]) == 0
    assert money(second["balance"]) == 50 and money(second["left"]) == 5
    assert money(api.get(f"/api/customers/{a['id']}").json()["balance"]) == 0
    assert money(api.get(f"/api/customers/{b['id']}").json()["balance"]) == 50


def test_cancelled_invoice_has_no_effect(api):
    car, _, a, b, item = _setup(api)
    invoice = api.create("/api/invoices", {
        "car_id": car["id"], "invoice_date": "2025-03-01", "items": _lines(item, a, b),
    })

    resp = api.put(f"/api/invoices/{invoice['id']}", {"status": "Cancelled"})
    assert resp.status_code == 200
    assert money(api.get(f"/api/cars/{car['id']}").json()["balance"]) == 0

    api.put(f"/api/invoices/{invoice['id']}", {"status": "Active"})
    assert money(api.get(f"/api/cars/{car['id']}").json()["balance"]) == 100


def test_list_invoices_filters_by_customer(api):
    car, _, a, b, item = _setup(api)
    api.create("/api/invoices", {"car_id": car["id"], "invoice_date": "2025-03-01", "items": _lines(item, a, b)})
    api.create("/api/invoices", {
        "car_id": car["id"], "invoice_date": "2025-03-02",
        "items": [{"item_id": item["id"], "customer_id": b["id"], "quantity": 1, "price": 5}],
    })

    data = api.get("/api/invoices", params={"customer_id": a["id"]}).json()
    assert data["total"] == 1
    assert api.get("/api/invoices").json()["total"] == 2


def test_edit_refused_when_reversal_would_go_below_zero(api):
    car, _, a, b, item = _setup(api)
    invoice = api.create("/api/invoices", {
        "car_id": car["id"], "invoice_date": "2025-03-01", "items": _lines(item, a, b),
    })
    api.put(f"/api/cars/{car['id']}", {"balance": 30})

    resp = api.put(f"/api/invoices/{invoice['id']}", {"invoice_date": "2025-03-04"})

    assert resp.status_code == 400
    assert money(api.get(f"/api/cars/{car['id']}").json()["balance"]) == 30
    assert money(api.get(f"/api/customers/{a['id']}").json()["balance"]) == 60
    assert api.get(f"/api/invoices/{invoice['id']}").json()["invoice_date"] == "2025-03-01"

    assert api.delete(f"/api/invoices/{invoice['id']}").status_code == 204
    assert money(api.get(f"/api/cars/{car['id']}").json()["balance"]) == 0
