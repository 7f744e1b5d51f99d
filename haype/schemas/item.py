from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ItemBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(Decimal("0"), ge=0)
    driver_price: Decimal = Field(Decimal("0"), ge=0)
    kirishboy_price: Decimal = Field(Decimal("0"), ge=0)
    quantity: int = Field(0, ge=0)


class ItemCreate(ItemBase):
    pass


class ItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(None, ge=0)
    driver_price: Optional[Decimal] = Field(None, ge=0)
    kirishboy_price: Optional[Decimal] = Field(None, ge=0)
    quantity: Optional[int] = Field(None, ge=0)


class ItemResponse(ItemBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ItemListResponse(BaseModel):
    total: int
    items: list[ItemResponse]
