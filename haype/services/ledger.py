"""
Ledger Service
Owns every balance mutation on cars, customers and employees.

Rules:
- Invoice: car.balance += total, car.left += total_left, and every `credit`
  line adds its total to the line customer's balance. `cash` lines are
  settled on the spot and never touch a customer balance.
- Receive: customer.balance -= amount (amount may not exceed the balance).
- Payment out: car.left += amount, or employee.balance -= amount.
- Employee balance add/deduct: employee.balance +/- amount.
- Edit: only the difference between new and original amount is applied.
- Delete: the payment's effect is reversed according to its type.

Creating a document that would push a balance below zero is rejected, and
so is an invoice edit whose reversal would. Deletes and payment edits clamp
at zero instead, and the clamp is logged.

The service never commits. The caller commits once per operation, so the
document write and all of its balance effects succeed or fail together.
Every mutation re-reads the row with a lock and writes one BalanceLedger row.
"""

from decimal import Decimal
from typing import List, Optional, Tuple, Union

from sqlalchemy.orm import Session

from haype.logger_config import logger
from haype.models.balance_ledger import BalanceLedger, LedgerAccount, LedgerField, LedgerRef
from haype.models.car import Car
from haype.models.customer import Customer
from haype.models.employee import Employee
from haype.models.invoice import Invoice, LinePaymentMethod
from haype.models.payment import Payment, PaymentKind

ZERO = Decimal("0.00")

Account = Union[Car, Customer, Employee]

_ACCOUNT_TYPES = {
    Car: LedgerAccount.car,
    Customer: LedgerAccount.customer,
    Employee: LedgerAccount.employee,
}


def to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def clamp_non_negative(value: Decimal) -> Tuple[Decimal, bool]:
    """Return (value, False) when value >= 0, else (0, True)."""
    if value < 0:
        return ZERO, True
    return value, False


class LedgerService:
    """Applies and reverses the financial effect of invoices and payments."""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Low level
    # ------------------------------------------------------------------

    def _lock(self, model, entity_id: Optional[int]) -> Account:
        """
        Fresh read of an account row, locked for the rest of the transaction.

        Pending changes are flushed first so the reload keeps this
        operation's own earlier posts and only drops stale loaded values.
        """
        if entity_id is None:
            raise ValueError(f"{model.__name__} reference is required")
        self.db.flush()
        entity = (
            self.db.query(model)
            .filter(model.id == entity_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if not entity:
            raise ValueError(f"{model.__name__} {entity_id} not found")
        return entity

    def _post(
        self,
        entity: Account,
        field: LedgerField,
        change: Decimal,
        ref_type: LedgerRef,
        ref_id: Optional[str],
        clamp: bool = False,
    ) -> Decimal:
        """Add `change` to entity.<field>, record it, and return the new value."""
        current = to_decimal(getattr(entity, field.value))
        if change == 0:
            return current

        new_value = current + change
        if clamp:
            new_value, clamped = clamp_non_negative(new_value)
            if clamped:
                logger.warning(
                    f"{type(entity).__name__} {entity.id} {field.value} clamped at 0 "
                    f"({current} {change:+} would be {current + change}) [{ref_id}]"
                )
        elif new_value < 0:
            raise ValueError(
                f"{type(entity).__name__} {entity.id} {field.value} cannot go below zero "
                f"(current {current}, change {change})"
            )

        setattr(entity, field.value, new_value)
        applied = new_value - current

        self.db.add(BalanceLedger(
            account_type=_ACCOUNT_TYPES[type(entity)],
            account_id=entity.id,
            field=field,
            ref_type=ref_type,
            ref_id=ref_id,
            change=applied,
            value_after=new_value,
        ))
        logger.info(
            f"{type(entity).__name__} {entity.id} {field.value}: {current} {applied:+} = {new_value} [{ref_id}]"
        )
        return new_value

    # ------------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------------

    def distribute_invoice(self, invoice: Invoice) -> None:
        """Propagate a newly saved invoice to its car and credit customers."""
        ref = invoice.invoice_no
        car = self._lock(Car, invoice.car_id)

        self._post(car, LedgerField.balance, to_decimal(invoice.total), LedgerRef.INVOICE, ref)

        total_left = to_decimal(invoice.total_left)
        if total_left > 0:
            self._post(car, LedgerField.left, total_left, LedgerRef.INVOICE, ref)

        for line in invoice.lines:
            if line.payment_method != LinePaymentMethod.credit:
                continue
            customer = self._lock(Customer, line.customer_id)
            self._post(customer, LedgerField.balance, to_decimal(line.total), LedgerRef.INVOICE, ref)

    def reverse_invoice(self, invoice: Invoice, clamp: bool = True) -> None:
        """
        Undo distribute_invoice. With clamp=True each account stops at zero;
        with clamp=False a reversal that would go below zero raises ValueError.
        """
        ref = invoice.invoice_no
        car = self._lock(Car, invoice.car_id)

        self._post(car, LedgerField.balance, -to_decimal(invoice.total), LedgerRef.INVOICE, ref, clamp=clamp)

        total_left = to_decimal(invoice.total_left)
        if total_left > 0:
            self._post(car, LedgerField.left, -total_left, LedgerRef.INVOICE, ref, clamp=clamp)

        for line in invoice.lines:
            if line.payment_method != LinePaymentMethod.credit:
                continue
            customer = self._lock(Customer, line.customer_id)
            self._post(customer, LedgerField.balance, -to_decimal(line.total), LedgerRef.INVOICE, ref, clamp=clamp)

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def _payment_target(self, payment: Payment) -> Tuple[Account, LedgerField, int]:
        """
        Account touched by a payment, the field, and the sign of the effect
        of a positive amount when the payment is applied.
        """
        if payment.type == PaymentKind.receive:
            return self._lock(Customer, payment.customer_id), LedgerField.balance, -1

        if payment.type == PaymentKind.payment_out:
            if payment.car_id is not None:
                return self._lock(Car, payment.car_id), LedgerField.left, 1
            return self._lock(Employee, payment.employee_id), LedgerField.balance, -1

        if payment.type == PaymentKind.balance_add:
            return self._lock(Employee, payment.employee_id), LedgerField.balance, 1

        if payment.type == PaymentKind.balance_deduct:
            return self._lock(Employee, payment.employee_id), LedgerField.balance, -1

        raise ValueError(f"Unsupported payment type: {payment.type}")

    def apply_payment(self, payment: Payment) -> Decimal:
        """Apply a newly created payment to its counterpart. Returns the new value."""
        account, field, sign = self._payment_target(payment)
        amount = to_decimal(payment.amount)

        if payment.type == PaymentKind.receive:
            outstanding = to_decimal(account.balance)
            if amount > outstanding:
                raise ValueError(
                    f"Payment amount exceeds customer outstanding balance ({outstanding})"
                )

        new_value = self._post(account, field, sign * amount, LedgerRef.PAYMENT, payment.payment_no)
        payment.balance_after = new_value
        return new_value

    def adjust_payment(self, payment: Payment, original_amount: Decimal) -> Optional[Decimal]:
        """
        Re-point the counterpart by the difference between the payment's
        current amount and `original_amount`. Returns the new value, or None
        when the amount did not change.
        """
        delta = to_decimal(payment.amount) - to_decimal(original_amount)
        if delta == 0:
            return None

        account, field, sign = self._payment_target(payment)
        new_value = self._post(account, field, sign * delta, LedgerRef.PAYMENT, payment.payment_no, clamp=True)
        payment.balance_after = new_value
        return new_value

    def reverse_payment(self, payment: Payment) -> Decimal:
        """Remove a payment's effect from its counterpart before the payment is deleted."""
        account, field, sign = self._payment_target(payment)
        amount = to_decimal(payment.amount)
        return self._post(account, field, -sign * amount, LedgerRef.PAYMENT, payment.payment_no, clamp=True)

    # ------------------------------------------------------------------
    # Manual corrections
    # ------------------------------------------------------------------

    def set_value(self, entity: Account, field: LedgerField, new_value: Decimal) -> Decimal:
        """Overwrite a balance from an edit form, recording the difference as an adjustment."""
        new_value = to_decimal(new_value)
        if new_value < 0:
            raise ValueError(f"{field.value} cannot be negative")
        entity = self._lock(type(entity), entity.id)
        current = to_decimal(getattr(entity, field.value))
        return self._post(entity, field, new_value - current, LedgerRef.ADJUSTMENT, None)

    # ------------------------------------------------------------------
    # Audit trail
    # ------------------------------------------------------------------

    def history(
        self,
        account_type: LedgerAccount,
        account_id: int,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[List[BalanceLedger], int]:
        """Ledger rows for one account, newest first."""
        query = self.db.query(BalanceLedger).filter(
            BalanceLedger.account_type == account_type,
            BalanceLedger.account_id == account_id,
        )
        total = query.count()
        entries = (
            query.order_by(BalanceLedger.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return entries, total
