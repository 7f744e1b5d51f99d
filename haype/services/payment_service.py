"""
Payment Service
Money received from customers, expenses paid against cars or employees,
and manual employee balance changes.

Every operation writes the payment row and its balance effect in a single
commit. Example:
- Customer balance 100, receive 30   -> balance 70, payment PYN-0001
- Edit PYN-0001 to 50                -> balance 50 (only the difference moves)
- Delete PYN-0001                    -> balance 100
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from haype.logger_config import logger
from haype.models.car import Car
from haype.models.customer import Customer
from haype.models.employee import Employee
from haype.models.payment import Payment, PaymentKind
from haype.services.ledger import LedgerService, to_decimal
from haype.utils.sequence import (
    BALANCE_PREFIX,
    BALANCE_WIDTH,
    PAYMENT_PREFIX,
    PAYMENT_WIDTH,
    DuplicateNumberError,
    next_number,
)

EMPLOYEE_HISTORY_TYPES = (PaymentKind.balance_add, PaymentKind.balance_deduct, PaymentKind.payment_out)


class PaymentService:
    """Service for creating, editing and deleting payments with their ledger effect."""

    def __init__(self, db: Session):
        self.db = db
        self.ledger = LedgerService(db)

    def _query(self):
        return self.db.query(Payment).options(
            joinedload(Payment.customer),
            joinedload(Payment.car),
            joinedload(Payment.employee),
        )

    def get_payment(self, payment_id: int) -> Optional[Payment]:
        return self._query().filter(Payment.id == payment_id).first()

    def list_payments(
        self,
        skip: int = 0,
        limit: int = 100,
        payment_type: Optional[PaymentKind] = None,
        customer_id: Optional[int] = None,
        car_id: Optional[int] = None,
        employee_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Dict[str, Any]:
        """Payments newest first with the filtered count and amount sum."""
        query = self.db.query(Payment)
        if payment_type is not None:
            query = query.filter(Payment.type == payment_type)
        if customer_id is not None:
            query = query.filter(Payment.customer_id == customer_id)
        if car_id is not None:
            query = query.filter(Payment.car_id == car_id)
        if employee_id is not None:
            query = query.filter(Payment.employee_id == employee_id)
        if start_date is not None:
            query = query.filter(Payment.payment_date >= start_date)
        if end_date is not None:
            query = query.filter(Payment.payment_date <= end_date)

        total = query.count()
        total_amount = query.with_entities(func.coalesce(func.sum(Payment.amount), 0)).scalar()

        payments = (
            query.options(
                joinedload(Payment.customer),
                joinedload(Payment.car),
                joinedload(Payment.employee),
            )
            .order_by(Payment.created_at.desc(), Payment.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return {
            "total": total,
            "total_amount": to_decimal(total_amount),
            "payments": payments,
        }

    # ------------------------------------------------------------------
    # Numbering
    # ------------------------------------------------------------------

    def next_payment_number(self) -> str:
        existing = [row[0] for row in self.db.query(Payment.payment_no).all()]
        return next_number(existing, PAYMENT_PREFIX, PAYMENT_WIDTH)

    def next_balance_number(self) -> str:
        existing = [row[0] for row in self.db.query(Payment.payment_no).all()]
        return next_number(existing, BALANCE_PREFIX, BALANCE_WIDTH)

    def _check_number_free(self, payment_no: str, payment_id: Optional[int] = None) -> None:
        query = self.db.query(Payment.id).filter(Payment.payment_no == payment_no)
        if payment_id is not None:
            query = query.filter(Payment.id != payment_id)
        if query.first():
            raise DuplicateNumberError("Payment number already exists")

    def _save(self, payment: Payment) -> Payment:
        """Insert a payment, apply it and commit both together."""
        try:
            self._check_number_free(payment.payment_no)
            self.db.add(payment)
            self.db.flush()
            self.ledger.apply_payment(payment)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Error saving payment: {str(e)}")
            raise DuplicateNumberError("Payment number already exists")
        except ValueError:
            self.db.rollback()
            raise

        logger.info(
            f"Payment {payment.payment_no} ({payment.type.value}) created: "
            f"amount={payment.amount} balance_after={payment.balance_after}"
        )
        return self.get_payment(payment.id)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create_receive(
        self,
        customer_id: int,
        amount: Decimal,
        payment_date: date,
        description: Optional[str] = None,
        payment_no: Optional[str] = None,
    ) -> Payment:
        """Record money received from a customer; their outstanding balance goes down."""
        if amount <= 0:
            raise ValueError("Amount must be positive")
        if not self.db.query(Customer.id).filter(Customer.id == customer_id).first():
            raise ValueError(f"Customer {customer_id} not found")

        payment = Payment(
            payment_no=payment_no or self.next_payment_number(),
            type=PaymentKind.receive,
            customer_id=customer_id,
            amount=amount,
            description=description,
            payment_date=payment_date,
        )
        return self._save(payment)

    def create_payment_out(
        self,
        account_type: str,
        recipient_id: int,
        amount: Decimal,
        payment_date: date,
        category: Optional[str] = None,
        description: Optional[str] = None,
        account_month: Optional[str] = None,
        payment_no: Optional[str] = None,
    ) -> Payment:
        """
        Record an expense.

        account_type "car": the amount is added to that car's left.
        account_type "employee": the amount is taken off that employee's balance.
        """
        if amount <= 0:
            raise ValueError("Amount must be positive")

        payment = Payment(
            type=PaymentKind.payment_out,
            amount=amount,
            category=category,
            description=description,
            payment_date=payment_date,
            account_month=account_month,
        )
        if account_type == "car":
            if not self.db.query(Car.id).filter(Car.id == recipient_id).first():
                raise ValueError(f"Car {recipient_id} not found")
            payment.car_id = recipient_id
        elif account_type == "employee":
            if not self.db.query(Employee.id).filter(Employee.id == recipient_id).first():
                raise ValueError(f"Employee {recipient_id} not found")
            payment.employee_id = recipient_id
        else:
            raise ValueError(f"Unknown account type: {account_type}")

        payment.payment_no = payment_no or self.next_payment_number()
        return self._save(payment)

    def change_employee_balance(
        self,
        employee_id: int,
        kind: PaymentKind,
        amount: Decimal,
        entry_date: date,
        description: str,
    ) -> Optional[Payment]:
        """Add to or deduct from an employee balance, recorded as a BAL-#### entry."""
        if kind not in (PaymentKind.balance_add, PaymentKind.balance_deduct):
            raise ValueError(f"Unsupported balance operation: {kind}")
        if amount <= 0:
            raise ValueError("Amount must be positive")
        if not self.db.query(Employee.id).filter(Employee.id == employee_id).first():
            return None

        payment = Payment(
            payment_no=self.next_balance_number(),
            type=kind,
            employee_id=employee_id,
            amount=amount,
            description=description,
            payment_date=entry_date,
        )
        return self._save(payment)

    # ------------------------------------------------------------------
    # Edit / delete
    # ------------------------------------------------------------------

    def update_payment(self, payment_id: int, fields: Dict[str, Any]) -> Optional[Payment]:
        """
        Edit a payment. The counterpart is moved by new amount - original
        amount only; an unchanged amount leaves every balance untouched.
        """
        payment = self.get_payment(payment_id)
        if not payment:
            return None

        original_amount = to_decimal(payment.amount)
        try:
            if fields.get("payment_no"):
                self._check_number_free(fields["payment_no"], payment_id)
                payment.payment_no = fields["payment_no"]
            for key in ("category", "description", "payment_date", "account_month"):
                if fields.get(key) is not None:
                    setattr(payment, key, fields[key])
            if fields.get("amount") is not None:
                payment.amount = to_decimal(fields["amount"])

            self.ledger.adjust_payment(payment, original_amount)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Error updating payment: {str(e)}")
            raise DuplicateNumberError("Payment number already exists")
        except ValueError:
            self.db.rollback()
            raise

        logger.info(f"Payment {payment.payment_no} updated: {original_amount} -> {payment.amount}")
        return self.get_payment(payment_id)

    def delete_payment(self, payment_id: int) -> bool:
        """Reverse a payment's effect according to its type, then delete it."""
        payment = self.get_payment(payment_id)
        if not payment:
            return False

        payment_no = payment.payment_no
        try:
            self.ledger.reverse_payment(payment)
            self.db.delete(payment)
            self.db.commit()
        except ValueError:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error deleting payment: {str(e)}")
            raise ValueError("Failed to delete payment.")

        logger.info(f"Payment {payment_no} deleted")
        return True

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def employee_payment_history(self, employee_id: int) -> Optional[List[Payment]]:
        """Balance changes and expenses recorded against an employee, newest first."""
        if not self.db.query(Employee.id).filter(Employee.id == employee_id).first():
            return None
        return (
            self._query()
            .filter(
                Payment.employee_id == employee_id,
                Payment.type.in_(EMPLOYEE_HISTORY_TYPES),
            )
            .order_by(Payment.created_at.desc(), Payment.id.desc())
            .all()
        )
