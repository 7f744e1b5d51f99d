from sqlalchemy import Column, DateTime, Enum, Integer, Numeric, String
from sqlalchemy.sql import func
from haype.core.database import Base
from haype.models.common import RecordStatus


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(30), nullable=True)
    # Outstanding credit owed to the company
    balance = Column(Numeric(15, 2), nullable=False, default=0)
    status = Column(Enum(RecordStatus), nullable=False, default=RecordStatus.active)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Customer(id={self.id}, name='{self.name}')>"
