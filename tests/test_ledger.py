from datetime import date
from decimal import Decimal

import pytest

from haype.models import (
    BalanceLedger,
    Car,
    Customer,
    Employee,
    EmployeeCategory,
    Invoice,
    InvoiceLine,
    Item,
    LedgerAccount,
    LedgerField,
    LedgerRef,
    LinePaymentMethod,
    Payment,
    PaymentKind,
)
from haype.services.ledger import LedgerService, clamp_non_negative


def test_clamp_only_when_negative():
    assert clamp_non_negative(Decimal("5.00")) == (Decimal("5.00"), False)
    assert clamp_non_negative(Decimal("0")) == (Decimal("0"), False)
    assert clamp_non_negative(Decimal("-0.01")) == (Decimal("0.00"), True)


@pytest.fixture
def accounts(db):
    car = Car(name="Tipper", number_plate="T-1", balance=0, left=0)
    other_car = Car(name="Loader", number_plate="L-1", balance=0, left=0)
    a = Customer(name="A", balance=0)
    b = Customer(name="B", balance=0)
    driver = Employee(name="Sam", category=EmployeeCategory.driver, balance=Decimal("100"))
    item = Item(name="Sand", price=10)
    db.add_all([car, other_car, a, b, driver, item])
    db.commit()
    return {"car": car, "other_car": other_car, "a": a, "b": b, "driver": driver, "item": item}


def _invoice(accounts):
    return Invoice(
        invoice_no="INV-001",
        car_id=accounts["car"].id,
        invoice_date=date(2025, 3, 1),
        total=Decimal("100"),
        total_left=Decimal("20"),
        total_profit=0,
        lines=[
            InvoiceLine(position=0, item_id=accounts["item"].id, customer_id=accounts["a"].id, quantity=1,
                        price=Decimal("60"), total=Decimal("60"), left_amount=Decimal("20"),
                        payment_method=LinePaymentMethod.credit),
            InvoiceLine(position=1, item_id=accounts["item"].id, customer_id=accounts["b"].id, quantity=1,
                        price=Decimal("40"), total=Decimal("40"), left_amount=0,
                        payment_method=LinePaymentMethod.cash),
        ],
    )


def test_distribute_invoice(db, accounts):
    invoice = _invoice(accounts)
    db.add(invoice)
    db.flush()

    LedgerService(db).distribute_invoice(invoice)
    db.commit()

    assert accounts["car"].balance == Decimal("100")
    assert accounts["car"].left == Decimal("20")
    assert accounts["a"].balance == Decimal("60")
    assert accounts["b"].balance == Decimal("0")
    assert accounts["other_car"].balance == Decimal("0")

    rows = db.query(BalanceLedger).filter(BalanceLedger.ref_id == "INV-001").all()
    assert len(rows) == 3
    assert {r.ref_type for r in rows} == {LedgerRef.INVOICE}


def test_reverse_invoice_restores_balances(db, accounts):
    invoice = _invoice(accounts)
    db.add(invoice)
    db.flush()
    ledger = LedgerService(db)

    ledger.distribute_invoice(invoice)
    ledger.reverse_invoice(invoice)
    db.commit()

    assert accounts["car"].balance == Decimal("0")
    assert accounts["car"].left == Decimal("0")
    assert accounts["a"].balance == Decimal("0")


def test_reversal_clamps_at_zero(db, accounts):
    invoice = _invoice(accounts)
    db.add(invoice)
    db.flush()
    ledger = LedgerService(db)
    ledger.distribute_invoice(invoice)

    # someone corrected the car balance down by hand in the meantime
    ledger.set_value(accounts["car"], LedgerField.balance, Decimal("30"))
    ledger.reverse_invoice(invoice)
    db.commit()

    assert accounts["car"].balance == Decimal("0")
    last = (
        db.query(BalanceLedger)
        .filter(
            BalanceLedger.account_type == LedgerAccount.car,
            BalanceLedger.account_id == accounts["car"].id,
            BalanceLedger.field == LedgerField.balance,
        )
        .order_by(BalanceLedger.id.desc())
        .first()
    )
    assert last.change == Decimal("-30")
    assert last.value_after == Decimal("0")


def test_receive_above_outstanding_balance_is_rejected(db, accounts):
    payment = Payment(payment_no="PYN-0001", type=PaymentKind.receive, customer_id=accounts["a"].id,
                      amount=Decimal("10"), payment_date=date(2025, 3, 2))
    db.add(payment)
    db.flush()

    with pytest.raises(ValueError, match="exceeds customer outstanding balance"):
        LedgerService(db).apply_payment(payment)


def test_adjust_payment_moves_only_the_difference(db, accounts):
    payment = Payment(payment_no="PYN-0001", type=PaymentKind.payment_out, car_id=accounts["car"].id,
                      amount=Decimal("100"), payment_date=date(2025, 3, 2))
    db.add(payment)
    db.flush()
    ledger = LedgerService(db)
    ledger.apply_payment(payment)
    assert accounts["car"].left == Decimal("100")

    assert ledger.adjust_payment(payment, Decimal("100")) is None
    assert accounts["car"].left == Decimal("100")

    payment.amount = Decimal("150")
    ledger.adjust_payment(payment, Decimal("100"))
    assert accounts["car"].left == Decimal("150")

    payment.amount = Decimal("100")
    ledger.adjust_payment(payment, Decimal("150"))
    assert accounts["car"].left == Decimal("100")
    assert payment.balance_after == Decimal("100")


@pytest.mark.parametrize(
    "kind, expected",
    [
        (PaymentKind.payment_out, Decimal("130")),
        (PaymentKind.balance_add, Decimal("70")),
        (PaymentKind.balance_deduct, Decimal("130")),
    ],
)
def test_reverse_employee_payment_branches_on_type(db, accounts, kind, expected):
    payment = Payment(payment_no="BAL-0001", type=kind, employee_id=accounts["driver"].id,
                      amount=Decimal("30"), payment_date=date(2025, 3, 2))
    db.add(payment)
    db.flush()

    LedgerService(db).reverse_payment(payment)
    assert accounts["driver"].balance == expected


def test_creation_cannot_push_a_balance_negative(db, accounts):
    payment = Payment(payment_no="BAL-0001", type=PaymentKind.balance_deduct, employee_id=accounts["driver"].id,
                      amount=Decimal("100.01"), payment_date=date(2025, 3, 2))
    db.add(payment)
    db.flush()

    with pytest.raises(ValueError, match="cannot go below zero"):
        LedgerService(db).apply_payment(payment)


def test_set_value_records_adjustment(db, accounts):
    LedgerService(db).set_value(accounts["b"], LedgerField.balance, Decimal("45.50"))
    db.commit()

    row = db.query(BalanceLedger).one()
    assert row.ref_type == LedgerRef.ADJUSTMENT
    assert row.change == Decimal("45.50")
    assert row.value_after == Decimal("45.50")

    with pytest.raises(ValueError):
        LedgerService(db).set_value(accounts["b"], LedgerField.balance, Decimal("-1"))


def test_history_lists_newest_first(db, accounts):
    ledger = LedgerService(db)
    ledger.set_value(accounts["car"], LedgerField.balance, Decimal("10"))
    ledger.set_value(accounts["car"], LedgerField.left, Decimal("5"))
    db.commit()

    entries, total = ledger.history(LedgerAccount.car, accounts["car"].id)
    assert total == 2
    assert entries[0].field == LedgerField.left


def test_strict_reversal_refuses_to_clamp(db, accounts):
    invoice = _invoice(accounts)
    db.add(invoice)
    db.flush()
    ledger = LedgerService(db)
    ledger.distribute_invoice(invoice)
    ledger.set_value(accounts["car"], LedgerField.balance, Decimal("30"))

    with pytest.raises(ValueError, match="cannot go below zero"):
        ledger.reverse_invoice(invoice, clamp=False)
