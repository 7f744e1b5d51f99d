import enum
from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from haype.core.database import Base


class PaymentKind(str, enum.Enum):
    receive = "receive"
    payment_out = "payment_out"
    balance_add = "balance_add"
    balance_deduct = "balance_deduct"


class Payment(Base):
    """
    Money movement against one counterpart.

    receive        -> customer_id
    payment_out    -> car_id or employee_id
    balance_add    -> employee_id
    balance_deduct -> employee_id
    """
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    payment_no = Column(String(30), unique=True, nullable=False, index=True)
    type = Column(Enum(PaymentKind), nullable=False)

    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True)
    car_id = Column(Integer, ForeignKey("cars.id"), nullable=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=True)

    amount = Column(Numeric(15, 2), nullable=False)
    category = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    payment_date = Column(Date, nullable=False)
    # Label only, no period closing is enforced
    account_month = Column(String(30), nullable=True)
    balance_after = Column(Numeric(15, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    customer = relationship("Customer")
    car = relationship("Car")
    employee = relationship("Employee")
