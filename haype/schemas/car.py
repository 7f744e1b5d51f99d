from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from haype.models.car import CarStatus


class CarBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    number_plate: str = Field(..., min_length=1, max_length=50)
    driver_id: Optional[int] = None
    kirishboy_id: Optional[int] = None


class CarCreate(CarBase):
    balance: Decimal = Field(Decimal("0"), ge=0)
    left: Decimal = Field(Decimal("0"), ge=0)


class CarUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    number_plate: Optional[str] = Field(None, min_length=1, max_length=50)
    driver_id: Optional[int] = None
    kirishboy_id: Optional[int] = None
    status: Optional[CarStatus] = None
    balance: Optional[Decimal] = Field(None, ge=0)
    left: Optional[Decimal] = Field(None, ge=0)


class EmployeeRef(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class CarResponse(CarBase):
    id: int
    balance: Decimal
    left: Decimal
    status: CarStatus
    driver: Optional[EmployeeRef] = None
    kirishboy: Optional[EmployeeRef] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CarListResponse(BaseModel):
    total: int
    cars: list[CarResponse]
