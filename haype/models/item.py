from sqlalchemy import Column, DateTime, Integer, Numeric, String
from sqlalchemy.sql import func
from haype.core.database import Base


class Item(Base):
    __tablename__ = "items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(15, 2), nullable=False, default=0)
    driver_price = Column(Numeric(15, 2), nullable=False, default=0)
    kirishboy_price = Column(Numeric(15, 2), nullable=False, default=0)
    quantity = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
