from decimal import Decimal
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from haype.logger_config import logger
from haype.models.balance_ledger import LedgerField
from haype.models.car import Car, CarStatus
from haype.models.employee import Employee, EmployeeCategory
from haype.models.invoice import Invoice
from haype.models.payment import Payment
from haype.services.ledger import LedgerService


def get_car_by_id(db: Session, car_id: int) -> Optional[Car]:
    return (
        db.query(Car)
        .options(joinedload(Car.driver), joinedload(Car.kirishboy))
        .filter(Car.id == car_id)
        .first()
    )


def get_car_by_plate(db: Session, number_plate: str) -> Optional[Car]:
    return db.query(Car).filter(Car.number_plate == number_plate).first()


def get_all_cars(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    status: Optional[CarStatus] = None,
) -> tuple[List[Car], int]:
    """Get all cars, newest first."""
    query = db.query(Car).options(joinedload(Car.driver), joinedload(Car.kirishboy))

    if status:
        query = query.filter(Car.status == status)
    if search:
        search_term = f"%{search}%"
        query = query.filter(or_(Car.name.ilike(search_term), Car.number_plate.ilike(search_term)))

    total = query.count()
    cars = query.order_by(Car.created_at.desc(), Car.id.desc()).offset(skip).limit(limit).all()
    return cars, total


def _check_crew_member(db: Session, employee_id: Optional[int], category: EmployeeCategory) -> None:
    """A car's driver must be a driver and its kirishboy a kirishboy."""
    if employee_id is None:
        return
    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if not employee:
        raise ValueError(f"Employee {employee_id} not found")
    if employee.category != category:
        raise ValueError(f"Employee {employee_id} is not a {category.value}")


def create_car(
    db: Session,
    name: str,
    number_plate: str,
    driver_id: Optional[int] = None,
    kirishboy_id: Optional[int] = None,
    balance: Decimal = Decimal("0"),
    left: Decimal = Decimal("0"),
) -> Car:
    """Create a car. Opening balance/left figures are posted to the ledger."""
    if get_car_by_plate(db, number_plate):
        raise ValueError("Number plate already exists")

    _check_crew_member(db, driver_id, EmployeeCategory.driver)
    _check_crew_member(db, kirishboy_id, EmployeeCategory.kirishboy)

    car = Car(
        name=name,
        number_plate=number_plate,
        driver_id=driver_id,
        kirishboy_id=kirishboy_id,
        balance=Decimal("0"),
        left=Decimal("0"),
    )
    db.add(car)
    db.flush()

    ledger = LedgerService(db)
    if balance:
        ledger.set_value(car, LedgerField.balance, balance)
    if left:
        ledger.set_value(car, LedgerField.left, left)

    try:
        db.commit()
        db.refresh(car)
        return car
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating car: {str(e)}")
        raise ValueError("Number plate already exists")


def update_car(db: Session, car_id: int, fields: dict) -> Optional[Car]:
    """
    Partial update from the edit form. Only keys present in `fields` are
    touched, so a driver can be unassigned by sending driver_id=None.
    """
    car = get_car_by_id(db, car_id)
    if not car:
        return None

    fields = dict(fields)
    balance = fields.pop("balance", None)
    left = fields.pop("left", None)

    plate = fields.get("number_plate")
    if plate and plate != car.number_plate and get_car_by_plate(db, plate):
        raise ValueError("Number plate already exists")
    if "driver_id" in fields:
        _check_crew_member(db, fields["driver_id"], EmployeeCategory.driver)
    if "kirishboy_id" in fields:
        _check_crew_member(db, fields["kirishboy_id"], EmployeeCategory.kirishboy)

    for key, value in fields.items():
        if value is None and key not in ("driver_id", "kirishboy_id"):
            continue
        setattr(car, key, value)

    try:
        ledger = LedgerService(db)
        if balance is not None:
            ledger.set_value(car, LedgerField.balance, balance)
        if left is not None:
            ledger.set_value(car, LedgerField.left, left)
        db.commit()
        db.refresh(car)
        return car
    except ValueError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating car: {str(e)}")
        raise ValueError("Failed to update car.")


def delete_car(db: Session, car_id: int) -> bool:
    car = db.query(Car).filter(Car.id == car_id).first()
    if not car:
        return False

    if db.query(Invoice).filter(Invoice.car_id == car_id).first():
        raise ValueError("Car has invoices and cannot be deleted")
    if db.query(Payment).filter(Payment.car_id == car_id).first():
        raise ValueError("Car has payments and cannot be deleted")

    db.delete(car)
    try:
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting car: {str(e)}")
        raise ValueError("Failed to delete car.")
