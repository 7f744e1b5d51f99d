from decimal import Decimal
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from typing import Optional, List

from haype.models.balance_ledger import LedgerField
from haype.models.common import RecordStatus
from haype.models.customer import Customer
from haype.models.invoice import InvoiceLine
from haype.models.payment import Payment
from haype.services.ledger import LedgerService
from haype.logger_config import logger


def get_customer_by_id(db: Session, customer_id: int) -> Optional[Customer]:
    """Get customer by database ID."""
    return db.query(Customer).filter(Customer.id == customer_id).first()


def get_all_customers(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    status: Optional[RecordStatus] = None,
    with_balance: bool = False,
) -> tuple[List[Customer], int]:
    """Get all customers with optional search filtering."""
    query = db.query(Customer)

    if status:
        query = query.filter(Customer.status == status)
    if with_balance:
        query = query.filter(Customer.balance > 0)
    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                Customer.name.ilike(search_term),
                Customer.phone.ilike(search_term),
            )
        )

    total = query.count()
    customers = (
        query.order_by(Customer.created_at.desc(), Customer.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )

    return customers, total


def create_customer(
    db: Session,
    name: str,
    phone: Optional[str] = None,
    balance: Decimal = Decimal("0"),
) -> Customer:
    """Create a new customer. An opening balance is posted to the ledger."""
    customer = Customer(name=name, phone=phone, balance=Decimal("0"))
    db.add(customer)
    db.flush()

    if balance:
        LedgerService(db).set_value(customer, LedgerField.balance, balance)

    try:
        db.commit()
        db.refresh(customer)
        return customer
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating customer: {str(e)}")
        raise ValueError("Failed to create customer.")


def update_customer(
    db: Session,
    customer_id: int,
    name: Optional[str] = None,
    phone: Optional[str] = None,
    status: Optional[RecordStatus] = None,
    balance: Optional[Decimal] = None,
) -> Optional[Customer]:
    """Update customer information."""
    customer = get_customer_by_id(db, customer_id)
    if not customer:
        return None

    if name is not None:
        customer.name = name
    if phone is not None:
        customer.phone = phone
    if status is not None:
        customer.status = status

    try:
        if balance is not None:
            LedgerService(db).set_value(customer, LedgerField.balance, balance)
        db.commit()
        db.refresh(customer)
        return customer
    except ValueError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating customer: {str(e)}")
        raise ValueError("Failed to update customer.")


def delete_customer(db: Session, customer_id: int) -> bool:
    """Delete a customer that no invoice line or payment refers to."""
    customer = get_customer_by_id(db, customer_id)
    if not customer:
        return False

    if db.query(InvoiceLine).filter(InvoiceLine.customer_id == customer_id).first():
        raise ValueError("Customer appears on invoices and cannot be deleted")
    if db.query(Payment).filter(Payment.customer_id == customer_id).first():
        raise ValueError("Customer has payments and cannot be deleted")

    db.delete(customer)
    try:
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting customer: {str(e)}")
        raise ValueError("Failed to delete customer.")
