"""Backup bundle schemas: the full data set as one JSON document."""

from decimal import Decimal
from datetime import date, datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from haype.models.car import CarStatus
from haype.models.common import RecordStatus
from haype.models.employee import EmployeeCategory
from haype.models.invoice import InvoiceStatus, LinePaymentMethod
from haype.models.payment import PaymentKind


class BackupEmployee(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    category: EmployeeCategory
    balance: Decimal = Decimal("0")
    status: RecordStatus = RecordStatus.active
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BackupItem(BaseModel):
    id: int
    name: str
    price: Decimal = Decimal("0")
    driver_price: Decimal = Decimal("0")
    kirishboy_price: Decimal = Decimal("0")
    quantity: int = 0
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BackupCar(BaseModel):
    id: int
    name: str
    number_plate: str
    driver_id: Optional[int] = None
    driver_name: Optional[str] = None
    kirishboy_id: Optional[int] = None
    kirishboy_name: Optional[str] = None
    balance: Decimal = Decimal("0")
    left: Decimal = Decimal("0")
    status: CarStatus = CarStatus.active
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BackupCustomer(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    balance: Decimal = Decimal("0")
    status: RecordStatus = RecordStatus.active
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BackupInvoiceLine(BaseModel):
    item_id: int
    item_name: Optional[str] = None
    customer_id: int
    customer_name: Optional[str] = None
    description: Optional[str] = None
    quantity: int = 0
    price: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    left_amount: Decimal = Decimal("0")
    payment_method: LinePaymentMethod = LinePaymentMethod.cash


class BackupInvoice(BaseModel):
    id: int
    invoice_no: str
    car_id: int
    car_name: Optional[str] = None
    invoice_date: date
    total: Decimal = Decimal("0")
    total_left: Decimal = Decimal("0")
    total_profit: Decimal = Decimal("0")
    status: InvoiceStatus = InvoiceStatus.active
    items: List[BackupInvoiceLine] = []
    created_at: Optional[datetime] = None


class BackupPayment(BaseModel):
    id: int
    payment_no: str
    type: PaymentKind
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    car_id: Optional[int] = None
    car_name: Optional[str] = None
    employee_id: Optional[int] = None
    amount: Decimal = Decimal("0")
    payment_date: date
    category: Optional[str] = None
    description: Optional[str] = None
    account_month: Optional[str] = None
    balance_after: Optional[Decimal] = None
    created_at: Optional[datetime] = None


class BackupBundle(BaseModel):
    export_date: Optional[datetime] = None
    version: str = "1.0.0"
    cars: List[BackupCar] = Field(default_factory=list)
    employees: List[BackupEmployee] = Field(default_factory=list)
    items: List[BackupItem] = Field(default_factory=list)
    customers: List[BackupCustomer] = Field(default_factory=list)
    invoices: List[BackupInvoice] = Field(default_factory=list)
    payments: List[BackupPayment] = Field(default_factory=list)


class ImportResponse(BaseModel):
    success: bool = True
    message: str
    import_results: Dict[str, int]
    total_records: int
