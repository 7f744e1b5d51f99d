from decimal import Decimal
from typing import Any, Dict

from sqlalchemy import func
from sqlalchemy.orm import Session

from haype.models.car import Car, CarStatus
from haype.models.common import RecordStatus
from haype.models.customer import Customer
from haype.models.employee import Employee
from haype.models.invoice import Invoice, InvoiceStatus


def get_dashboard(db: Session) -> Dict[str, Any]:
    """Active cars with their balances and headline totals over active invoices."""
    cars = (
        db.query(Car)
        .filter(Car.status == CarStatus.active)
        .order_by(Car.name.asc())
        .all()
    )

    revenue, profit, outstanding = (
        db.query(
            func.coalesce(func.sum(Invoice.total), 0),
            func.coalesce(func.sum(Invoice.total_profit), 0),
            func.coalesce(func.sum(Invoice.total_left), 0),
        )
        .filter(Invoice.status == InvoiceStatus.active)
        .one()
    )

    stats = {
        "total_cars": len(cars),
        "total_employees": db.query(Employee).filter(Employee.status == RecordStatus.active).count(),
        "total_customers": db.query(Customer).filter(Customer.status == RecordStatus.active).count(),
        "total_invoices": db.query(Invoice).filter(Invoice.status == InvoiceStatus.active).count(),
        "total_revenue": Decimal(str(revenue)),
        "total_profit": Decimal(str(profit)),
        "total_outstanding": Decimal(str(outstanding)),
    }
    return {"cars": cars, "stats": stats}
