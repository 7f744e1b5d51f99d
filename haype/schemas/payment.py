"""Payment Schemas"""

import enum
from decimal import Decimal
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from haype.models.payment import PaymentKind


def _two_places(v):
    if v is not None and v.as_tuple().exponent < -2:
        raise ValueError('Max 2 decimal places')
    return v


class PaymentOutAccount(str, enum.Enum):
    car = "car"
    employee = "employee"


class PaymentReceiveCreate(BaseModel):
    """Money received from a customer"""
    customer_id: int = Field(..., gt=0)
    payment_no: Optional[str] = Field(None, max_length=30)
    amount: Decimal = Field(..., gt=0)
    description: Optional[str] = Field(default=None, max_length=500)
    payment_date: date

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        return _two_places(v)

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": 1,
                "payment_no": "PYN-0001",
                "amount": 30.00,
                "description": "Cash collected",
                "payment_date": "2025-03-02"
            }
        }


class PaymentOutCreate(BaseModel):
    """Expense paid against a car or an employee"""
    account_type: PaymentOutAccount = PaymentOutAccount.car
    recipient_id: int = Field(..., gt=0)
    payment_no: Optional[str] = Field(None, max_length=30)
    amount: Decimal = Field(..., gt=0)
    category: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    payment_date: date
    account_month: Optional[str] = Field(default=None, max_length=30)

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        return _two_places(v)

    class Config:
        json_schema_extra = {
            "example": {
                "account_type": "car",
                "recipient_id": 1,
                "amount": 50.00,
                "category": "fuel",
                "description": "Diesel",
                "payment_date": "2025-03-02",
                "account_month": "2025-03"
            }
        }


class PaymentUpdate(BaseModel):
    """Edit a payment; the counterpart is re-pointed by the amount difference."""
    payment_no: Optional[str] = Field(None, min_length=1, max_length=30)
    amount: Optional[Decimal] = Field(None, gt=0)
    category: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    payment_date: Optional[date] = None
    account_month: Optional[str] = Field(default=None, max_length=30)

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        return _two_places(v)


class RefName(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class PaymentResponse(BaseModel):
    id: int
    payment_no: str
    type: PaymentKind
    customer_id: Optional[int] = None
    car_id: Optional[int] = None
    employee_id: Optional[int] = None
    amount: Decimal
    category: Optional[str] = None
    description: Optional[str] = None
    payment_date: date
    account_month: Optional[str] = None
    balance_after: Optional[Decimal] = None
    created_at: Optional[datetime] = None
    customer: Optional[RefName] = None
    car: Optional[RefName] = None
    employee: Optional[RefName] = None

    class Config:
        from_attributes = True


class PaymentListResponse(BaseModel):
    total: int
    total_amount: Decimal
    payments: List[PaymentResponse]
