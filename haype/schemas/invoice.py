from decimal import Decimal
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from datetime import date, datetime
from haype.models.invoice import InvoiceStatus, LinePaymentMethod


class InvoiceLineCreate(BaseModel):
    item_id: int = Field(..., gt=0)
    customer_id: int = Field(..., gt=0)
    description: Optional[str] = None
    quantity: int = Field(..., gt=0)
    price: Decimal = Field(..., ge=0)
    # Manually entered outstanding portion of the line
    left_amount: Decimal = Field(Decimal("0"), ge=0)
    payment_method: LinePaymentMethod = LinePaymentMethod.cash

    @field_validator('price', 'left_amount')
    @classmethod
    def validate_amount(cls, v):
        if v.as_tuple().exponent < -2:
            raise ValueError('Max 2 decimal places')
        return v

    @model_validator(mode='after')
    def left_within_total(self):
        if self.left_amount > self.quantity * self.price:
            raise ValueError("left_amount cannot exceed the line total")
        return self


class InvoiceCreate(BaseModel):
    invoice_no: Optional[str] = Field(None, max_length=30, description="Assigned by the server when omitted")
    car_id: int = Field(..., gt=0)
    invoice_date: date
    items: List[InvoiceLineCreate] = Field(..., min_length=1)

    class Config:
        json_schema_extra = {
            "example": {
                "car_id": 1,
                "invoice_date": "2025-03-01",
                "items": [
                    {"item_id": 1, "customer_id": 1, "quantity": 2, "price": 30,
                     "left_amount": 20, "payment_method": "credit"},
                    {"item_id": 2, "customer_id": 2, "quantity": 1, "price": 40,
                     "payment_method": "cash"}
                ]
            }
        }


class InvoiceUpdate(BaseModel):
    invoice_no: Optional[str] = Field(None, min_length=1, max_length=30)
    car_id: Optional[int] = Field(None, gt=0)
    invoice_date: Optional[date] = None
    status: Optional[InvoiceStatus] = None
    items: Optional[List[InvoiceLineCreate]] = Field(None, min_length=1)


class RefName(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class InvoiceLineResponse(BaseModel):
    id: int
    position: int
    item_id: int
    customer_id: int
    description: Optional[str] = None
    quantity: int
    price: Decimal
    total: Decimal
    left_amount: Decimal
    payment_method: LinePaymentMethod
    item: Optional[RefName] = None
    customer: Optional[RefName] = None

    class Config:
        from_attributes = True


class InvoiceResponse(BaseModel):
    id: int
    invoice_no: str
    car_id: int
    invoice_date: date
    total: Decimal
    total_left: Decimal
    total_profit: Decimal
    status: InvoiceStatus
    car: Optional[RefName] = None
    lines: List[InvoiceLineResponse]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InvoiceListResponse(BaseModel):
    total: int
    invoices: List[InvoiceResponse]


class NextNumberResponse(BaseModel):
    next_number: str
