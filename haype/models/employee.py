import enum
from sqlalchemy import Column, DateTime, Enum, Integer, Numeric, String
from sqlalchemy.sql import func
from haype.core.database import Base
from haype.models.common import RecordStatus


class EmployeeCategory(str, enum.Enum):
    driver = "driver"
    kirishboy = "kirishboy"


class Employee(Base):
    """Driver or kirishboy (loader) assigned to cars; balance is what the company owes them."""
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(30), nullable=True)
    category = Column(Enum(EmployeeCategory), nullable=False)
    balance = Column(Numeric(15, 2), nullable=False, default=0)
    status = Column(Enum(RecordStatus), nullable=False, default=RecordStatus.active)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Employee(id={self.id}, name='{self.name}', category='{self.category}')>"
