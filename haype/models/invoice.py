import enum
from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from haype.core.database import Base


class InvoiceStatus(str, enum.Enum):
    active = "Active"
    cancelled = "Cancelled"


class LinePaymentMethod(str, enum.Enum):
    cash = "cash"
    credit = "credit"


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_no = Column(String(30), unique=True, nullable=False, index=True)
    car_id = Column(Integer, ForeignKey("cars.id"), nullable=False)
    invoice_date = Column(Date, nullable=False)

    total = Column(Numeric(15, 2), nullable=False, default=0)
    total_left = Column(Numeric(15, 2), nullable=False, default=0)
    # Profit is settled by a manual monthly close, always 0 when the invoice is created
    total_profit = Column(Numeric(15, 2), nullable=False, default=0)

    status = Column(Enum(InvoiceStatus), nullable=False, default=InvoiceStatus.active)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    car = relationship("Car", back_populates="invoices")
    lines = relationship(
        "InvoiceLine",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLine.position",
    )


class InvoiceLine(Base):
    __tablename__ = "invoice_lines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    description = Column(Text, nullable=True)

    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(15, 2), nullable=False)
    total = Column(Numeric(15, 2), nullable=False)
    left_amount = Column(Numeric(15, 2), nullable=False, default=0)
    payment_method = Column(Enum(LinePaymentMethod), nullable=False, default=LinePaymentMethod.cash)

    invoice = relationship("Invoice", back_populates="lines")
    item = relationship("Item")
    customer = relationship("Customer")
