"""
Excel backup format.

One sheet per collection plus a Backup_Info cover sheet. Sheet names and the
leading columns of every sheet are fixed so that files produced by earlier
releases still import. Columns after those (Status on Invoices, Employee ID,
Category and Balance After on Payments) are extensions that older readers
ignore.
"""

from collections import OrderedDict
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from io import BytesIO
from typing import Any, Dict, Iterable, List, Optional
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from haype.logger_config import logger
from haype.schemas.backup import (
    BackupBundle,
    BackupCar,
    BackupCustomer,
    BackupEmployee,
    BackupInvoice,
    BackupInvoiceLine,
    BackupItem,
    BackupPayment,
)
from haype.services.backup_service import SYSTEM_VERSION

INFO_SHEET = "Backup_Info"

CAR_COLUMNS = [
    "ID", "Car Name", "Number Plate", "Driver ID", "Driver Name", "Kirishboy ID",
    "Kirishboy Name", "Balance", "Left Amount", "Status", "Created Date",
]
EMPLOYEE_COLUMNS = ["ID", "Employee Name", "Phone Number", "Category", "Balance", "Status", "Created Date"]
ITEM_COLUMNS = ["ID", "Item Name", "Price", "Driver Price", "Kirishboy Price", "Quantity", "Created Date"]
CUSTOMER_COLUMNS = ["ID", "Customer Name", "Phone Number", "Balance", "Status", "Created Date"]
INVOICE_COLUMNS = [
    "ID", "Invoice No", "Car ID", "Car Name", "Invoice Date", "Total", "Total Left",
    "Total Profit", "Items Count", "Created Date", "Status",
]
INVOICE_LINE_COLUMNS = [
    "Invoice ID", "Invoice No", "Item Index", "Item ID", "Item Name", "Customer ID",
    "Customer Name", "Description", "Quantity", "Price", "Total", "Left Amount", "Payment Method",
]
PAYMENT_COLUMNS = [
    "ID", "Payment No", "Type", "Customer ID", "Customer Name", "Car ID", "Car Name",
    "Amount", "Payment Date", "Description", "Account Month", "Created Date",
    "Employee ID", "Category", "Balance After",
]


# ----------------------------------------------------------------------
# Writing
# ----------------------------------------------------------------------

def _iso(value: Optional[Any]) -> str:
    if value is None:
        return ""
    return value.isoformat()


def _money(value: Optional[Decimal]) -> float:
    return float(value or 0)


def _blank(value: Optional[Any]) -> Any:
    return "" if value is None else value


def _autosize(ws, max_width: int = 50) -> None:
    for col in ws.columns:
        longest = max(len("" if cell.value is None else str(cell.value)) for cell in col)
        ws.column_dimensions[get_column_letter(col[0].column)].width = min(longest + 2, max_width)


def _add_sheet(wb: Workbook, title: str, columns: List[str], rows: Iterable[List[Any]]) -> None:
    ws = wb.create_sheet(title)
    ws.append(columns)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for row in rows:
        ws.append(row)
    _autosize(ws)


def _info_rows(bundle: BackupBundle) -> List[List[Any]]:
    return [
        ["HAYPE CONSTRUCTION - COMPLETE SYSTEM BACKUP", ""],
        ["", ""],
        ["Backup Information", ""],
        ["Export Date", _iso(bundle.export_date or datetime.now(timezone.utc))],
        ["System Version", bundle.version or SYSTEM_VERSION],
        ["Total Cars", len(bundle.cars)],
        ["Total Employees", len(bundle.employees)],
        ["Total Items", len(bundle.items)],
        ["Total Customers", len(bundle.customers)],
        ["Total Invoices", len(bundle.invoices)],
        ["Total Payments", len(bundle.payments)],
        ["", ""],
        ["Instructions", ""],
        ["This file contains complete system backup", ""],
        ["Use Import function to restore data", ""],
        ["All sheets must be present for successful import", ""],
    ]


def build_workbook(bundle: BackupBundle) -> bytes:
    """Render a backup bundle as .xlsx bytes. Empty collections get no sheet."""
    wb = Workbook()
    info = wb.active
    info.title = INFO_SHEET
    info.append(["Field", "Value"])
    info["A1"].font = Font(bold=True)
    info["B1"].font = Font(bold=True)
    for row in _info_rows(bundle):
        info.append(row)
    _autosize(info, max_width=60)

    if bundle.cars:
        _add_sheet(wb, "Cars", CAR_COLUMNS, (
            [c.id, c.name, c.number_plate, _blank(c.driver_id), _blank(c.driver_name),
             _blank(c.kirishboy_id), _blank(c.kirishboy_name), _money(c.balance), _money(c.left),
             c.status.value, _iso(c.created_at)]
            for c in bundle.cars
        ))

    if bundle.employees:
        _add_sheet(wb, "Employees", EMPLOYEE_COLUMNS, (
            [e.id, e.name, _blank(e.phone), e.category.value, _money(e.balance), e.status.value,
             _iso(e.created_at)]
            for e in bundle.employees
        ))

    if bundle.items:
        _add_sheet(wb, "Items", ITEM_COLUMNS, (
            [i.id, i.name, _money(i.price), _money(i.driver_price), _money(i.kirishboy_price),
             i.quantity, _iso(i.created_at)]
            for i in bundle.items
        ))

    if bundle.customers:
        _add_sheet(wb, "Customers", CUSTOMER_COLUMNS, (
            [c.id, c.name, _blank(c.phone), _money(c.balance), c.status.value, _iso(c.created_at)]
            for c in bundle.customers
        ))

    if bundle.invoices:
        _add_sheet(wb, "Invoices", INVOICE_COLUMNS, (
            [inv.id, inv.invoice_no, inv.car_id, _blank(inv.car_name), _iso(inv.invoice_date),
             _money(inv.total), _money(inv.total_left), _money(inv.total_profit), len(inv.items),
             _iso(inv.created_at), inv.status.value]
            for inv in bundle.invoices
        ))
        line_rows = [
            [inv.id, inv.invoice_no, index, line.item_id, _blank(line.item_name), line.customer_id,
             _blank(line.customer_name), _blank(line.description), line.quantity, _money(line.price),
             _money(line.total), _money(line.left_amount), line.payment_method.value]
            for inv in bundle.invoices
            for index, line in enumerate(inv.items)
        ]
        if line_rows:
            _add_sheet(wb, "Invoice_Items", INVOICE_LINE_COLUMNS, line_rows)

    if bundle.payments:
        _add_sheet(wb, "Payments", PAYMENT_COLUMNS, (
            [p.id, p.payment_no, p.type.value, _blank(p.customer_id), _blank(p.customer_name),
             _blank(p.car_id), _blank(p.car_name), _money(p.amount), _iso(p.payment_date),
             _blank(p.description), _blank(p.account_month), _iso(p.created_at),
             _blank(p.employee_id), _blank(p.category),
             "" if p.balance_after is None else _money(p.balance_after)]
            for p in bundle.payments
        ))

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


# ----------------------------------------------------------------------
# Reading
# ----------------------------------------------------------------------

def _sheet_records(wb, title: str) -> List[Dict[str, Any]]:
    """Rows of a sheet as dicts keyed by the header row. Missing sheet -> []."""
    if title not in wb.sheetnames:
        return []
    rows = wb[title].iter_rows(values_only=True)
    header = next(rows, None)
    if not header:
        return []
    keys = [str(h).strip() if h is not None else "" for h in header]
    records = []
    for row in rows:
        if row is None or all(v is None or v == "" for v in row):
            continue
        records.append({k: v for k, v in zip(keys, row) if k})
    return records


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def _decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        return Decimal(str(value)).quantize(Decimal("0.01"))
    except InvalidOperation:
        return Decimal("0")


def _date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return date.fromisoformat(text[:10])


def _datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError:
        return None


def read_workbook(data: bytes) -> BackupBundle:
    """Parse .xlsx bytes back into a backup bundle."""
    try:
        wb = load_workbook(BytesIO(data), data_only=True, read_only=True)
    except (BadZipFile, KeyError, OSError, ValueError) as e:
        logger.error(f"Unreadable backup workbook: {str(e)}")
        raise ValueError("File is not a valid Excel backup workbook")

    try:
        export_date = None
        version = SYSTEM_VERSION
        for record in _sheet_records(wb, INFO_SHEET):
            if record.get("Field") == "Export Date":
                export_date = _datetime(record.get("Value"))
            elif record.get("Field") == "System Version" and record.get("Value"):
                version = str(record["Value"])

        cars = [
            BackupCar(
                id=_int(r.get("ID")),
                name=_text(r.get("Car Name")) or "",
                number_plate=_text(r.get("Number Plate")) or "",
                driver_id=_int(r.get("Driver ID")),
                driver_name=_text(r.get("Driver Name")),
                kirishboy_id=_int(r.get("Kirishboy ID")),
                kirishboy_name=_text(r.get("Kirishboy Name")),
                balance=_decimal(r.get("Balance")),
                left=_decimal(r.get("Left Amount")),
                status=_text(r.get("Status")) or "Active",
                created_at=_datetime(r.get("Created Date")),
            )
            for r in _sheet_records(wb, "Cars")
        ]

        employees = [
            BackupEmployee(
                id=_int(r.get("ID")),
                name=_text(r.get("Employee Name")) or "",
                phone=_text(r.get("Phone Number")),
                category=_text(r.get("Category")),
                balance=_decimal(r.get("Balance")),
                status=_text(r.get("Status")) or "Active",
                created_at=_datetime(r.get("Created Date")),
            )
            for r in _sheet_records(wb, "Employees")
        ]

        items = [
            BackupItem(
                id=_int(r.get("ID")),
                name=_text(r.get("Item Name")) or "",
                price=_decimal(r.get("Price")),
                driver_price=_decimal(r.get("Driver Price")),
                kirishboy_price=_decimal(r.get("Kirishboy Price")),
                quantity=_int(r.get("Quantity")) or 0,
                created_at=_datetime(r.get("Created Date")),
            )
            for r in _sheet_records(wb, "Items")
        ]

        customers = [
            BackupCustomer(
                id=_int(r.get("ID")),
                name=_text(r.get("Customer Name")) or "",
                phone=_text(r.get("Phone Number")),
                balance=_decimal(r.get("Balance")),
                status=_text(r.get("Status")) or "Active",
                created_at=_datetime(r.get("Created Date")),
            )
            for r in _sheet_records(wb, "Customers")
        ]

        lines_by_invoice: Dict[int, List[tuple]] = OrderedDict()
        for r in _sheet_records(wb, "Invoice_Items"):
            line = BackupInvoiceLine(
                item_id=_int(r.get("Item ID")),
                item_name=_text(r.get("Item Name")),
                customer_id=_int(r.get("Customer ID")),
                customer_name=_text(r.get("Customer Name")),
                description=_text(r.get("Description")),
                quantity=_int(r.get("Quantity")) or 0,
                price=_decimal(r.get("Price")),
                total=_decimal(r.get("Total")),
                left_amount=_decimal(r.get("Left Amount")),
                payment_method=_text(r.get("Payment Method")) or "cash",
            )
            index = _int(r.get("Item Index")) or 0
            lines_by_invoice.setdefault(_int(r.get("Invoice ID")), []).append((index, line))

        invoices = []
        for r in _sheet_records(wb, "Invoices"):
            invoice_id = _int(r.get("ID"))
            lines = sorted(lines_by_invoice.get(invoice_id, []), key=lambda pair: pair[0])
            invoices.append(BackupInvoice(
                id=invoice_id,
                invoice_no=_text(r.get("Invoice No")) or "",
                car_id=_int(r.get("Car ID")),
                car_name=_text(r.get("Car Name")),
                invoice_date=_date(r.get("Invoice Date")),
                total=_decimal(r.get("Total")),
                total_left=_decimal(r.get("Total Left")),
                total_profit=_decimal(r.get("Total Profit")),
                status=_text(r.get("Status")) or "Active",
                items=[line for _, line in lines],
                created_at=_datetime(r.get("Created Date")),
            ))

        payments = []
        for r in _sheet_records(wb, "Payments"):
            balance_after = r.get("Balance After")
            payments.append(BackupPayment(
                id=_int(r.get("ID")),
                payment_no=_text(r.get("Payment No")) or "",
                type=_text(r.get("Type")),
                customer_id=_int(r.get("Customer ID")),
                customer_name=_text(r.get("Customer Name")),
                car_id=_int(r.get("Car ID")),
                car_name=_text(r.get("Car Name")),
                employee_id=_int(r.get("Employee ID")),
                amount=_decimal(r.get("Amount")),
                payment_date=_date(r.get("Payment Date")),
                category=_text(r.get("Category")),
                description=_text(r.get("Description")),
                account_month=_text(r.get("Account Month")),
                balance_after=None if balance_after in (None, "") else _decimal(balance_after),
                created_at=_datetime(r.get("Created Date")),
            ))
    except ValueError as e:
        # pydantic.ValidationError is a ValueError
        raise ValueError(f"Invalid backup workbook: {str(e)}")
    finally:
        wb.close()

    return BackupBundle(
        export_date=export_date,
        version=version,
        cars=cars,
        employees=employees,
        items=items,
        customers=customers,
        invoices=invoices,
        payments=payments,
    )
