from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime

# Alias to avoid field name 'date' shadowing type 'date' in annotations (Pydantic v2)
DateType = date
from haype.models.employee import EmployeeCategory
from haype.models.common import RecordStatus


class EmployeeBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=30)
    category: EmployeeCategory


class EmployeeCreate(EmployeeBase):
    balance: Decimal = Field(Decimal("0"), ge=0)


class EmployeeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=30)
    category: Optional[EmployeeCategory] = None
    status: Optional[RecordStatus] = None
    balance: Optional[Decimal] = Field(None, ge=0)


class EmployeeResponse(EmployeeBase):
    id: int
    balance: Decimal
    status: RecordStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EmployeeListResponse(BaseModel):
    total: int
    employees: list[EmployeeResponse]


class EmployeeBalanceChange(BaseModel):
    """Add-balance / deduct-balance form: all fields required."""
    amount: Decimal = Field(..., gt=0)
    date: DateType
    description: str = Field(..., min_length=1)


class EmployeeBalanceResponse(BaseModel):
    success: bool = True
    message: str
    payment_no: str
    new_balance: Decimal
