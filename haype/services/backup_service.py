"""
Backup Service
Full export of the business data and a destructive restore.

Restore replaces everything in one transaction:
- validate the bundle (unique ids, every reference resolvable)
- wipe:   payments -> invoices (and lines) -> customers -> items -> cars -> employees
- insert: employees -> items -> cars -> customers -> invoices -> payments
Ids are kept so references in the bundle stay valid. Balances are restored as
stored; invoices and payments are not replayed through the ledger. The audit
trail is reset and every restored non-zero balance opens with one
ADJUSTMENT row.
"""

from datetime import datetime, timezone
from typing import Dict, Iterable

from sqlalchemy import text
from sqlalchemy.orm import Session, joinedload

from haype.logger_config import logger
from haype.models.balance_ledger import BalanceLedger, LedgerField
from haype.models.car import Car
from haype.models.customer import Customer
from haype.models.employee import Employee
from haype.models.invoice import Invoice, InvoiceLine
from haype.models.item import Item
from haype.models.payment import Payment, PaymentKind
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
from haype.services.ledger import LedgerService

SYSTEM_VERSION = "1.0.0"

RESTORED_TABLES = ("employees", "items", "cars", "customers", "invoices", "invoice_lines", "payments")


def export_bundle(db: Session) -> BackupBundle:
    """Every car, employee, item, customer, invoice and payment with display names resolved."""
    cars = db.query(Car).options(joinedload(Car.driver), joinedload(Car.kirishboy)).order_by(Car.id).all()
    invoices = (
        db.query(Invoice)
        .options(
            joinedload(Invoice.car),
            joinedload(Invoice.lines).joinedload(InvoiceLine.item),
            joinedload(Invoice.lines).joinedload(InvoiceLine.customer),
        )
        .order_by(Invoice.id)
        .all()
    )
    payments = (
        db.query(Payment)
        .options(joinedload(Payment.customer), joinedload(Payment.car))
        .order_by(Payment.id)
        .all()
    )

    return BackupBundle(
        export_date=datetime.now(timezone.utc),
        version=SYSTEM_VERSION,
        employees=[BackupEmployee.model_validate(e) for e in db.query(Employee).order_by(Employee.id).all()],
        items=[BackupItem.model_validate(i) for i in db.query(Item).order_by(Item.id).all()],
        customers=[BackupCustomer.model_validate(c) for c in db.query(Customer).order_by(Customer.id).all()],
        cars=[
            BackupCar(
                id=car.id,
                name=car.name,
                number_plate=car.number_plate,
                driver_id=car.driver_id,
                driver_name=car.driver.name if car.driver else None,
                kirishboy_id=car.kirishboy_id,
                kirishboy_name=car.kirishboy.name if car.kirishboy else None,
                balance=car.balance,
                left=car.left,
                status=car.status,
                created_at=car.created_at,
            )
            for car in cars
        ],
        invoices=[
            BackupInvoice(
                id=inv.id,
                invoice_no=inv.invoice_no,
                car_id=inv.car_id,
                car_name=inv.car.name if inv.car else None,
                invoice_date=inv.invoice_date,
                total=inv.total,
                total_left=inv.total_left,
                total_profit=inv.total_profit,
                status=inv.status,
                created_at=inv.created_at,
                items=[
                    BackupInvoiceLine(
                        item_id=line.item_id,
                        item_name=line.item.name if line.item else None,
                        customer_id=line.customer_id,
                        customer_name=line.customer.name if line.customer else None,
                        description=line.description,
                        quantity=line.quantity,
                        price=line.price,
                        total=line.total,
                        left_amount=line.left_amount,
                        payment_method=line.payment_method,
                    )
                    for line in inv.lines
                ],
            )
            for inv in invoices
        ],
        payments=[
            BackupPayment(
                id=p.id,
                payment_no=p.payment_no,
                type=p.type,
                customer_id=p.customer_id,
                customer_name=p.customer.name if p.customer else None,
                car_id=p.car_id,
                car_name=p.car.name if p.car else None,
                employee_id=p.employee_id,
                amount=p.amount,
                payment_date=p.payment_date,
                category=p.category,
                description=p.description,
                account_month=p.account_month,
                balance_after=p.balance_after,
                created_at=p.created_at,
            )
            for p in payments
        ],
    )


def _unique_ids(name: str, records: Iterable) -> set:
    ids = set()
    for record in records:
        if record.id in ids:
            raise ValueError(f"Duplicate {name} id {record.id}")
        ids.add(record.id)
    return ids


def validate_bundle(bundle: BackupBundle) -> None:
    """Reject a bundle whose references do not resolve inside the bundle itself."""
    employee_ids = _unique_ids("employee", bundle.employees)
    item_ids = _unique_ids("item", bundle.items)
    car_ids = _unique_ids("car", bundle.cars)
    customer_ids = _unique_ids("customer", bundle.customers)
    _unique_ids("invoice", bundle.invoices)
    _unique_ids("payment", bundle.payments)

    plates = [car.number_plate for car in bundle.cars]
    if len(plates) != len(set(plates)):
        raise ValueError("Duplicate number plate in backup")
    numbers = [inv.invoice_no for inv in bundle.invoices]
    if len(numbers) != len(set(numbers)):
        raise ValueError("Duplicate invoice number in backup")
    numbers = [p.payment_no for p in bundle.payments]
    if len(numbers) != len(set(numbers)):
        raise ValueError("Duplicate payment number in backup")

    for car in bundle.cars:
        for crew_id in (car.driver_id, car.kirishboy_id):
            if crew_id is not None and crew_id not in employee_ids:
                raise ValueError(f"Car {car.id} references unknown employee {crew_id}")

    for inv in bundle.invoices:
        if inv.car_id not in car_ids:
            raise ValueError(f"Invoice {inv.invoice_no} references unknown car {inv.car_id}")
        for line in inv.items:
            if line.item_id not in item_ids:
                raise ValueError(f"Invoice {inv.invoice_no} references unknown item {line.item_id}")
            if line.customer_id not in customer_ids:
                raise ValueError(f"Invoice {inv.invoice_no} references unknown customer {line.customer_id}")

    for p in bundle.payments:
        if p.customer_id is not None and p.customer_id not in customer_ids:
            raise ValueError(f"Payment {p.payment_no} references unknown customer {p.customer_id}")
        if p.car_id is not None and p.car_id not in car_ids:
            raise ValueError(f"Payment {p.payment_no} references unknown car {p.car_id}")
        if p.employee_id is not None and p.employee_id not in employee_ids:
            raise ValueError(f"Payment {p.payment_no} references unknown employee {p.employee_id}")
        if p.type == PaymentKind.receive and p.customer_id is None:
            raise ValueError(f"Payment {p.payment_no} has no customer")


def _created(record) -> dict:
    """Keep the original creation time; let the database stamp records that have none."""
    return {"created_at": record.created_at} if record.created_at else {}


def _wipe(db: Session) -> None:
    db.query(Payment).delete(synchronize_session=False)
    db.query(InvoiceLine).delete(synchronize_session=False)
    db.query(Invoice).delete(synchronize_session=False)
    db.query(Customer).delete(synchronize_session=False)
    db.query(Item).delete(synchronize_session=False)
    db.query(Car).delete(synchronize_session=False)
    db.query(Employee).delete(synchronize_session=False)
    db.query(BalanceLedger).delete(synchronize_session=False)


def _reset_sequences(db: Session) -> None:
    """Move PostgreSQL id sequences past the restored ids."""
    if db.get_bind().dialect.name != "postgresql":
        return
    for table in RESTORED_TABLES:
        db.execute(text(
            f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
            f"COALESCE((SELECT MAX(id) FROM {table}), 0) + 1, false)"
        ))


def import_bundle(db: Session, bundle: BackupBundle) -> Dict[str, int]:
    """Replace all business data with the bundle. Returns the restored count per collection."""
    validate_bundle(bundle)
    logger.info(
        f"Restoring backup from {bundle.export_date}: {len(bundle.cars)} cars, "
        f"{len(bundle.employees)} employees, {len(bundle.invoices)} invoices, "
        f"{len(bundle.payments)} payments"
    )

    try:
        _wipe(db)
        db.flush()
        db.expunge_all()

        restored = []
        for e in bundle.employees:
            employee = Employee(id=e.id, name=e.name, phone=e.phone, category=e.category,
                                balance=0, status=e.status, **_created(e))
            db.add(employee)
            restored.append((employee, LedgerField.balance, e.balance))
        db.flush()

        for i in bundle.items:
            db.add(Item(id=i.id, name=i.name, price=i.price, driver_price=i.driver_price,
                        kirishboy_price=i.kirishboy_price, quantity=i.quantity, **_created(i)))
        db.flush()

        for c in bundle.cars:
            car = Car(id=c.id, name=c.name, number_plate=c.number_plate, driver_id=c.driver_id,
                      kirishboy_id=c.kirishboy_id, balance=0, left=0, status=c.status, **_created(c))
            db.add(car)
            restored.append((car, LedgerField.balance, c.balance))
            restored.append((car, LedgerField.left, c.left))
        db.flush()

        for c in bundle.customers:
            customer = Customer(id=c.id, name=c.name, phone=c.phone, balance=0, status=c.status, **_created(c))
            db.add(customer)
            restored.append((customer, LedgerField.balance, c.balance))
        db.flush()

        for inv in bundle.invoices:
            invoice = Invoice(id=inv.id, invoice_no=inv.invoice_no, car_id=inv.car_id,
                              invoice_date=inv.invoice_date, total=inv.total, total_left=inv.total_left,
                              total_profit=inv.total_profit, status=inv.status, **_created(inv))
            invoice.lines = [
                InvoiceLine(position=index, item_id=line.item_id, customer_id=line.customer_id,
                            description=line.description, quantity=line.quantity, price=line.price,
                            total=line.total, left_amount=line.left_amount,
                            payment_method=line.payment_method)
                for index, line in enumerate(inv.items)
            ]
            db.add(invoice)
        db.flush()

        for p in bundle.payments:
            db.add(Payment(id=p.id, payment_no=p.payment_no, type=p.type, customer_id=p.customer_id,
                           car_id=p.car_id, employee_id=p.employee_id, amount=p.amount,
                           category=p.category, description=p.description, payment_date=p.payment_date,
                           account_month=p.account_month, balance_after=p.balance_after, **_created(p)))
        db.flush()

        ledger = LedgerService(db)
        for entity, field, value in restored:
            ledger.set_value(entity, field, value)

        _reset_sequences(db)
        db.commit()
    except ValueError:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error restoring backup: {str(e)}")
        raise ValueError(f"Restore failed: {str(e)}")

    results = {
        "cars": len(bundle.cars),
        "employees": len(bundle.employees),
        "items": len(bundle.items),
        "customers": len(bundle.customers),
        "invoices": len(bundle.invoices),
        "payments": len(bundle.payments),
    }
    logger.info(f"Backup restored: {results}")
    return results
