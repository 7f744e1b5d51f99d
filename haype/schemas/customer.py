from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from haype.models.common import RecordStatus


class CustomerBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=30)


class CustomerCreate(CustomerBase):
    balance: Decimal = Field(Decimal("0"), ge=0)


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=30)
    status: Optional[RecordStatus] = None
    balance: Optional[Decimal] = Field(None, ge=0)


class CustomerResponse(CustomerBase):
    id: int
    balance: Decimal
    status: RecordStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CustomerListResponse(BaseModel):
    total: int
    customers: list[CustomerResponse]
