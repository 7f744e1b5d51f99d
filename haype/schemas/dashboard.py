from decimal import Decimal
from pydantic import BaseModel
from typing import List


class DashboardCar(BaseModel):
    id: int
    name: str
    balance: Decimal
    left: Decimal

    class Config:
        from_attributes = True


class DashboardStats(BaseModel):
    total_cars: int
    total_employees: int
    total_customers: int
    total_invoices: int
    total_revenue: Decimal
    total_profit: Decimal
    total_outstanding: Decimal


class DashboardResponse(BaseModel):
    cars: List[DashboardCar]
    stats: DashboardStats
