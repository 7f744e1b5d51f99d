# haype/models/__init__.py
from .user import User, UserRole, UserStatus
from .employee import Employee, EmployeeCategory
from .car import Car, CarStatus
from .item import Item
from .customer import Customer
from .invoice import Invoice, InvoiceLine, InvoiceStatus, LinePaymentMethod
from .payment import Payment, PaymentKind
from .balance_ledger import BalanceLedger, LedgerAccount, LedgerField, LedgerRef
from .common import RecordStatus
