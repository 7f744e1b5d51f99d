import enum
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from haype.core.database import Base


class CarStatus(str, enum.Enum):
    active = "Active"
    maintenance = "Maintenance"
    closed = "Closed"


class Car(Base):
    __tablename__ = "cars"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    number_plate = Column(String(50), unique=True, nullable=False)

    driver_id = Column(Integer, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    kirishboy_id = Column(Integer, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)

    # balance: cumulative invoice totals; left: outstanding amount from jobs and expenses
    balance = Column(Numeric(15, 2), nullable=False, default=0)
    left = Column("left_amount", Numeric(15, 2), nullable=False, default=0)

    status = Column(Enum(CarStatus), nullable=False, default=CarStatus.active)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    driver = relationship("Employee", foreign_keys=[driver_id])
    kirishboy = relationship("Employee", foreign_keys=[kirishboy_id])
    invoices = relationship("Invoice", back_populates="car")

    def __repr__(self):
        return f"<Car(id={self.id}, name='{self.name}', plate='{self.number_plate}')>"
