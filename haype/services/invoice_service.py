"""
Invoice Service
Creates, edits and deletes invoices together with their ledger effect.

An active invoice always has its effect applied exactly once:
- create  -> distribute
- update  -> reverse the stored version, save the edit, distribute again.
             An edit is refused when the reversal would take an account
             below zero (e.g. after a manual correction).
- cancel  -> reverse (status Cancelled carries no effect)
- delete  -> reverse, then delete
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from haype.logger_config import logger
from haype.models.car import Car
from haype.models.customer import Customer
from haype.models.invoice import Invoice, InvoiceLine, InvoiceStatus
from haype.models.item import Item
from haype.services.ledger import LedgerService
from haype.utils.sequence import INVOICE_PREFIX, INVOICE_WIDTH, DuplicateNumberError, next_number

CENT = Decimal("0.01")


def _invoice_query(db: Session):
    return db.query(Invoice).options(
        joinedload(Invoice.car),
        joinedload(Invoice.lines).joinedload(InvoiceLine.item),
        joinedload(Invoice.lines).joinedload(InvoiceLine.customer),
    )


def get_invoice_by_id(db: Session, invoice_id: int) -> Optional[Invoice]:
    return _invoice_query(db).filter(Invoice.id == invoice_id).first()


def get_all_invoices(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    car_id: Optional[int] = None,
    customer_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    search: Optional[str] = None,
) -> tuple[List[Invoice], int]:
    """Invoices newest first, filtered by car, line customer, date range or number."""
    query = db.query(Invoice)

    if car_id is not None:
        query = query.filter(Invoice.car_id == car_id)
    if customer_id is not None:
        query = query.filter(Invoice.lines.any(InvoiceLine.customer_id == customer_id))
    if start_date is not None:
        query = query.filter(Invoice.invoice_date >= start_date)
    if end_date is not None:
        query = query.filter(Invoice.invoice_date <= end_date)
    if search:
        search_term = f"%{search}%"
        query = query.outerjoin(Car, Invoice.car_id == Car.id).filter(
            or_(Invoice.invoice_no.ilike(search_term), Car.name.ilike(search_term))
        )

    total = query.count()
    ids = [
        row.id for row in query.with_entities(Invoice.id)
        .order_by(Invoice.created_at.desc(), Invoice.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    ]
    if not ids:
        return [], total

    invoices = _invoice_query(db).filter(Invoice.id.in_(ids)).all()
    invoices.sort(key=lambda inv: ids.index(inv.id))
    return invoices, total


def next_invoice_number(db: Session) -> str:
    """Next INV-### number from the numbers already stored."""
    existing = [row[0] for row in db.query(Invoice.invoice_no).all()]
    return next_number(existing, INVOICE_PREFIX, INVOICE_WIDTH)


def _build_lines(db: Session, lines: List[Dict[str, Any]]) -> List[InvoiceLine]:
    """Validate references and compute each line total as quantity x price."""
    item_ids = {line["item_id"] for line in lines}
    customer_ids = {line["customer_id"] for line in lines}

    found_items = {row[0] for row in db.query(Item.id).filter(Item.id.in_(item_ids)).all()}
    missing = item_ids - found_items
    if missing:
        raise ValueError(f"Item {sorted(missing)[0]} not found")

    found_customers = {row[0] for row in db.query(Customer.id).filter(Customer.id.in_(customer_ids)).all()}
    missing = customer_ids - found_customers
    if missing:
        raise ValueError(f"Customer {sorted(missing)[0]} not found")

    built = []
    for position, line in enumerate(lines):
        price = Decimal(str(line["price"]))
        total = (price * line["quantity"]).quantize(CENT, rounding=ROUND_HALF_UP)
        left_amount = Decimal(str(line.get("left_amount") or 0))
        if left_amount > total:
            raise ValueError(f"Line {position + 1}: left amount exceeds line total")
        built.append(InvoiceLine(
            position=position,
            item_id=line["item_id"],
            customer_id=line["customer_id"],
            description=line.get("description"),
            quantity=line["quantity"],
            price=price,
            total=total,
            left_amount=left_amount,
            payment_method=line.get("payment_method") or "cash",
        ))
    return built


def _apply_totals(invoice: Invoice) -> None:
    invoice.total = sum((line.total for line in invoice.lines), Decimal("0.00"))
    invoice.total_left = sum((line.left_amount for line in invoice.lines), Decimal("0.00"))


def _check_car(db: Session, car_id: int) -> None:
    if not db.query(Car.id).filter(Car.id == car_id).first():
        raise ValueError(f"Car {car_id} not found")


def _check_number_free(db: Session, invoice_no: str, invoice_id: Optional[int] = None) -> None:
    query = db.query(Invoice.id).filter(Invoice.invoice_no == invoice_no)
    if invoice_id is not None:
        query = query.filter(Invoice.id != invoice_id)
    if query.first():
        raise DuplicateNumberError("Invoice number already exists")


def create_invoice(
    db: Session,
    car_id: int,
    invoice_date: date,
    items: List[Dict[str, Any]],
    invoice_no: Optional[str] = None,
) -> Invoice:
    """Save an invoice and distribute it to the car and credit customers in one transaction."""
    if not items:
        raise ValueError("Invoice needs at least one line")

    try:
        _check_car(db, car_id)
        invoice_no = invoice_no or next_invoice_number(db)
        _check_number_free(db, invoice_no)

        invoice = Invoice(
            invoice_no=invoice_no,
            car_id=car_id,
            invoice_date=invoice_date,
            total_profit=Decimal("0.00"),
            status=InvoiceStatus.active,
        )
        invoice.lines = _build_lines(db, items)
        _apply_totals(invoice)

        db.add(invoice)
        db.flush()

        LedgerService(db).distribute_invoice(invoice)

        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating invoice: {str(e)}")
        raise DuplicateNumberError("Invoice number already exists")
    except ValueError:
        db.rollback()
        raise

    logger.info(f"Invoice {invoice.invoice_no} created: total={invoice.total} left={invoice.total_left}")
    return get_invoice_by_id(db, invoice.id)


def update_invoice(db: Session, invoice_id: int, fields: Dict[str, Any]) -> Optional[Invoice]:
    """Edit an invoice, moving its ledger effect from the old version to the new one."""
    invoice = get_invoice_by_id(db, invoice_id)
    if not invoice:
        return None

    ledger = LedgerService(db)
    try:
        if invoice.status == InvoiceStatus.active:
            ledger.reverse_invoice(invoice, clamp=False)

        if fields.get("invoice_no"):
            _check_number_free(db, fields["invoice_no"], invoice_id)
            invoice.invoice_no = fields["invoice_no"]
        if fields.get("car_id") is not None:
            _check_car(db, fields["car_id"])
            invoice.car_id = fields["car_id"]
        if fields.get("invoice_date") is not None:
            invoice.invoice_date = fields["invoice_date"]
        if fields.get("status") is not None:
            invoice.status = fields["status"]
        if fields.get("items"):
            invoice.lines = _build_lines(db, fields["items"])
            _apply_totals(invoice)

        db.flush()

        if invoice.status == InvoiceStatus.active:
            ledger.distribute_invoice(invoice)

        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating invoice: {str(e)}")
        raise DuplicateNumberError("Invoice number already exists")
    except ValueError:
        db.rollback()
        raise

    logger.info(f"Invoice {invoice.invoice_no} updated")
    db.expire_all()
    return get_invoice_by_id(db, invoice_id)


def delete_invoice(db: Session, invoice_id: int) -> bool:
    """Reverse an invoice's effect and delete it."""
    invoice = get_invoice_by_id(db, invoice_id)
    if not invoice:
        return False

    invoice_no = invoice.invoice_no
    try:
        if invoice.status == InvoiceStatus.active:
            LedgerService(db).reverse_invoice(invoice)
        db.delete(invoice)
        db.commit()
    except ValueError:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting invoice: {str(e)}")
        raise ValueError("Failed to delete invoice.")

    logger.info(f"Invoice {invoice_no} deleted")
    return True
