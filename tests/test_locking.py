"""Balance changes committed by another session between load and mutation are not lost."""

from datetime import date
from decimal import Decimal

import pytest

from haype.core.database import SessionLocal
from haype.models import Car, Customer
from haype.services.car_service import create_car
from haype.services.customer_service import create_customer
from haype.services.invoice_service import create_invoice, delete_invoice, get_invoice_by_id, update_invoice
from haype.services.item_service import create_item
from haype.services.payment_service import PaymentService


def _commit_elsewhere(model, entity_id, **values):
    other = SessionLocal()
    try:
        other.query(model).filter(model.id == entity_id).update(values)
        other.commit()
    finally:
        other.close()


@pytest.fixture
def receive(db):
    customer = create_customer(db, name="Acme", balance=Decimal("100"))
    service = PaymentService(db)
    payment = service.create_receive(customer_id=customer.id, amount=Decimal("30"), payment_date=date(2025, 3, 2))

    loaded = service.get_payment(payment.id)
    assert loaded.customer.balance == Decimal("70")
    _commit_elsewhere(Customer, customer.id, balance=Decimal("500"))
    return service, payment.id, customer.id


def test_payment_delete_uses_committed_balance(db, receive):
    service, payment_id, customer_id = receive

    service.delete_payment(payment_id)

    assert db.get(Customer, customer_id).balance == Decimal("530")


def test_payment_edit_uses_committed_balance(db, receive):
    service, payment_id, customer_id = receive

    service.update_payment(payment_id, {"amount": Decimal("50")})

    assert db.get(Customer, customer_id).balance == Decimal("480")


@pytest.fixture
def invoice(db):
    car = create_car(db, name="Tipper", number_plate="T-1")
    customer = create_customer(db, name="Acme")
    item = create_item(db, name="Sand", price=Decimal("10"))
    created = create_invoice(
        db,
        car_id=car.id,
        invoice_date=date(2025, 3, 1),
        items=[{"item_id": item.id, "customer_id": customer.id, "quantity": 3, "price": Decimal("10")}],
    )

    loaded = get_invoice_by_id(db, created.id)
    assert loaded.car.balance == Decimal("30")
    _commit_elsewhere(Car, car.id, balance=Decimal("500"))
    return created.id, car.id, item.id, customer.id


def test_invoice_delete_uses_committed_balance(db, invoice):
    invoice_id, car_id, _, _ = invoice

    delete_invoice(db, invoice_id)

    assert db.get(Car, car_id).balance == Decimal("470")


def test_invoice_edit_uses_committed_balance(db, invoice):
    invoice_id, car_id, item_id, customer_id = invoice

    update_invoice(db, invoice_id, {
        "items": [{"item_id": item_id, "customer_id": customer_id, "quantity": 5, "price": Decimal("10")}],
    })

    assert db.get(Car, car_id).balance == Decimal("520")
