from decimal import Decimal
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from haype.logger_config import logger
from haype.models.balance_ledger import LedgerField
from haype.models.car import Car
from haype.models.common import RecordStatus
from haype.models.employee import Employee, EmployeeCategory
from haype.models.payment import Payment
from haype.services.ledger import LedgerService


def get_employee_by_id(db: Session, employee_id: int) -> Optional[Employee]:
    return db.query(Employee).filter(Employee.id == employee_id).first()


def get_all_employees(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    category: Optional[EmployeeCategory] = None,
    status: Optional[RecordStatus] = None,
) -> tuple[List[Employee], int]:
    """Get all employees, newest first, with optional search/category/status filters."""
    query = db.query(Employee)

    if category:
        query = query.filter(Employee.category == category)
    if status:
        query = query.filter(Employee.status == status)
    if search:
        search_term = f"%{search}%"
        query = query.filter(or_(Employee.name.ilike(search_term), Employee.phone.ilike(search_term)))

    total = query.count()
    employees = (
        query.order_by(Employee.created_at.desc(), Employee.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return employees, total


def create_employee(
    db: Session,
    name: str,
    category: EmployeeCategory,
    phone: Optional[str] = None,
    balance: Decimal = Decimal("0"),
) -> Employee:
    """Create an employee; an opening balance is recorded as an adjustment."""
    employee = Employee(name=name, phone=phone, category=category, balance=Decimal("0"))
    db.add(employee)
    db.flush()

    if balance:
        LedgerService(db).set_value(employee, LedgerField.balance, balance)

    try:
        db.commit()
        db.refresh(employee)
        return employee
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating employee: {str(e)}")
        raise ValueError("Failed to create employee.")


def update_employee(db: Session, employee_id: int, **fields) -> Optional[Employee]:
    """Partial update. A changed balance is posted to the ledger as an adjustment."""
    employee = get_employee_by_id(db, employee_id)
    if not employee:
        return None

    balance = fields.pop("balance", None)
    for key, value in fields.items():
        if value is not None:
            setattr(employee, key, value)

    try:
        if balance is not None:
            LedgerService(db).set_value(employee, LedgerField.balance, balance)
        db.commit()
        db.refresh(employee)
        return employee
    except ValueError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating employee: {str(e)}")
        raise ValueError("Failed to update employee.")


def delete_employee(db: Session, employee_id: int) -> bool:
    """Delete an employee. Cars they are assigned to are unassigned."""
    employee = get_employee_by_id(db, employee_id)
    if not employee:
        return False

    if db.query(Payment).filter(Payment.employee_id == employee_id).first():
        raise ValueError("Employee has payment history and cannot be deleted")

    db.query(Car).filter(Car.driver_id == employee_id).update({Car.driver_id: None})
    db.query(Car).filter(Car.kirishboy_id == employee_id).update({Car.kirishboy_id: None})

    db.delete(employee)
    try:
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting employee: {str(e)}")
        raise ValueError("Failed to delete employee.")
