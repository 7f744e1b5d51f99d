import enum
from sqlalchemy import Column, DateTime, Enum, Integer, Numeric, String
from sqlalchemy.sql import func
from haype.core.database import Base


class LedgerAccount(str, enum.Enum):
    car = "car"
    customer = "customer"
    employee = "employee"


class LedgerField(str, enum.Enum):
    balance = "balance"
    left = "left"


class LedgerRef(str, enum.Enum):
    INVOICE = "INVOICE"
    PAYMENT = "PAYMENT"
    ADJUSTMENT = "ADJUSTMENT"


class BalanceLedger(Base):
    """One row per balance mutation; the running value is kept in value_after."""
    __tablename__ = "balance_ledger"

    id = Column(Integer, primary_key=True, autoincrement=True)

    account_type = Column(Enum(LedgerAccount), nullable=False, index=True)
    account_id = Column(Integer, nullable=False, index=True)
    field = Column(Enum(LedgerField), nullable=False, default=LedgerField.balance)

    ref_type = Column(Enum(LedgerRef), nullable=False)
    ref_id = Column(String(30), nullable=True)     # INV-### / PYN-#### / BAL-####

    change = Column(Numeric(15, 2), nullable=False)
    value_after = Column(Numeric(15, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
