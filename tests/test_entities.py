from conftest import money


def test_car_crud_and_plate_uniqueness(api):
    car = api.car(balance=10, left=5)
    assert money(car["balance"]) == 10
    assert money(car["left"]) == 5

    resp = api.post("/api/cars", {"name": "Copy", "number_plate": "ABC-123"})
    assert resp.status_code == 400

    resp = api.put(f"/api/cars/{car['id']}", {"status": "Maintenance", "name": "Renamed"})
    assert resp.json()["status"] == "Maintenance"
    assert resp.json()["name"] == "Renamed"

    assert api.get("/api/cars", params={"search": "abc"}).json()["total"] == 1
    assert api.delete(f"/api/cars/{car['id']}").status_code == 204
    assert api.get(f"/api/cars/{car['id']}").status_code == 404


def test_car_crew_must_match_category(api):
    kirishboy = api.employee(name="K", category="kirishboy")
    driver = api.employee(name="D", category="driver")

    resp = api.post("/api/cars", {"name": "T", "number_plate": "P-1", "driver_id": kirishboy["id"]})
    assert resp.status_code == 400

    car = api.car(driver_id=driver["id"], kirishboy_id=kirishboy["id"])
    assert car["kirishboy"]["id"] == kirishboy["id"]

    resp = api.put(f"/api/cars/{car['id']}", {"driver_id": None})
    assert resp.json()["driver_id"] is None
    assert resp.json()["kirishboy_id"] == kirishboy["id"]


def test_manual_balance_correction_is_audited(api):
    customer = api.customer(balance=80)

    resp = api.put(f"/api/customers/{customer['id']}", {"balance": 50})
    assert money(resp.json()["balance"]) == 50

    entries = api.get(f"/api/customers/{customer['id']}/ledger").json()["entries"]
    assert [e["ref_type"] for e in entries] == ["ADJUSTMENT", "ADJUSTMENT"]
    assert money(entries[0]["change"]) == -30

    assert api.put(f"/api/customers/{customer['id']}", {"balance": -1}).status_code == 422


def test_referenced_records_cannot_be_deleted(api):
    car = api.car()
    customer = api.customer()
    item = api.item()
    api.create("/api/invoices", {
        "car_id": car["id"], "invoice_date": "2025-03-01",
        "items": [{"item_id": item["id"], "customer_id": customer["id"], "quantity": 1, "price": 5}],
    })

    assert api.delete(f"/api/cars/{car['id']}").status_code == 400
    assert api.delete(f"/api/customers/{customer['id']}").status_code == 400
    assert api.delete(f"/api/items/{item['id']}").status_code == 400


def test_item_crud(api):
    item = api.create("/api/items", {
        "name": "Cement", "price": 12.5, "driver_price": 1, "kirishboy_price": 0.5, "quantity": 3,
    })
    assert money(item["kirishboy_price"]) == money("0.5")

    resp = api.put(f"/api/items/{item['id']}", {"quantity": 7})
    assert resp.json()["quantity"] == 7
    assert money(resp.json()["price"]) == money("12.5")

    assert api.get("/api/items", params={"search": "cem"}).json()["total"] == 1
    assert api.delete(f"/api/items/{item['id']}").status_code == 204


def test_customer_list_with_balance(api):
    api.customer("Owes", balance=10)
    api.customer("Clear")

    data = api.get("/api/customers", params={"with_balance": True}).json()
    assert [c["name"] for c in data["customers"]] == ["Owes"]


def test_not_found_uses_error_envelope(api):
    resp = api.get("/api/customers/404")
    assert resp.status_code == 404
    assert resp.json() == {
        "success": False, "message": "Customer not found", "errors": [], "status_code": 404,
    }


def test_dashboard(api):
    car = api.car()
    api.car(name="Parked", plate="P-2")
    parked = api.get("/api/cars", params={"search": "P-2"}).json()["cars"][0]
    api.put(f"/api/cars/{parked['id']}", {"status": "Closed"})
    customer = api.customer()
    item = api.item()
    api.create("/api/invoices", {
        "car_id": car["id"], "invoice_date": "2025-03-01",
        "items": [{"item_id": item["id"], "customer_id": customer["id"], "quantity": 3, "price": 10,
                   "left_amount": 12, "payment_method": "credit"}],
    })

    data = api.get("/api/dashboard").json()

    assert [c["name"] for c in data["cars"]] == ["Truck 1"]
    assert money(data["cars"][0]["balance"]) == 30
    stats = data["stats"]
    assert stats["total_cars"] == 1
    assert stats["total_customers"] == 1
    assert stats["total_invoices"] == 1
    assert money(stats["total_revenue"]) == 30
    assert money(stats["total_outstanding"]) == 12
    assert money(stats["total_profit"]) == 0
