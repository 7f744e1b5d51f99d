"""
Fill a migrated database with demo data.

Everything goes through the services, so balances are built by the same
ledger rules the API applies.
"""

import random
from datetime import date, timedelta
from decimal import Decimal

from faker import Faker

from haype.core.config import settings
from haype.core.database import SessionLocal
from haype.models import EmployeeCategory, LinePaymentMethod, PaymentKind
from haype.services.car_service import create_car
from haype.services.customer_service import create_customer
from haype.services.employee_service import create_employee
from haype.services.invoice_service import create_invoice
from haype.services.item_service import create_item
from haype.services.payment_service import PaymentService
from haype.services.user_service import ensure_admin_user

fake = Faker()


def money(low: float, high: float) -> Decimal:
    return Decimal(str(round(random.uniform(low, high), 2)))


def phone() -> str:
    return ''.join(filter(str.isdigit, fake.phone_number()))[:15]


db = SessionLocal()

try:
    ensure_admin_user(db, settings.ADMIN_USERNAME, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)

    print("🔄 Creating employees...")
    drivers = [create_employee(db, name=fake.name(), category=EmployeeCategory.driver, phone=phone())
               for _ in range(6)]
    kirishboys = [create_employee(db, name=fake.name(), category=EmployeeCategory.kirishboy, phone=phone())
                  for _ in range(6)]
    print(f"✅ Seeded {len(drivers) + len(kirishboys)} employees")

    print("🔄 Creating cars...")
    cars = []
    for driver, kirishboy in zip(drivers, kirishboys):
        cars.append(create_car(
            db,
            name=f"{fake.color_name()} {random.choice(['Truck', 'Tipper', 'Loader', 'Van'])}",
            number_plate=fake.unique.license_plate(),
            driver_id=driver.id,
            kirishboy_id=kirishboy.id,
        ))
    print(f"✅ Seeded {len(cars)} cars")

    print("🔄 Creating items and customers...")
    items = []
    for _ in range(10):
        price = money(20, 200)
        items.append(create_item(
            db,
            name=fake.word().capitalize(),
            price=price,
            driver_price=(price * Decimal("0.10")).quantize(Decimal("0.01")),
            kirishboy_price=(price * Decimal("0.05")).quantize(Decimal("0.01")),
            quantity=random.randint(0, 50),
        ))
    customers = [create_customer(db, name=fake.company(), phone=phone()) for _ in range(15)]
    print(f"✅ Seeded {len(items)} items and {len(customers)} customers")

    print("🔄 Creating invoices...")
    start = date.today() - timedelta(days=90)
    for _ in range(30):
        lines = []
        for _ in range(random.randint(1, 4)):
            item = random.choice(items)
            quantity = random.randint(1, 5)
            total = item.price * quantity
            lines.append({
                "item_id": item.id,
                "customer_id": random.choice(customers).id,
                "description": fake.sentence(nb_words=4),
                "quantity": quantity,
                "price": item.price,
                "left_amount": (total * Decimal(random.choice(["0", "0.25", "0.5"]))).quantize(Decimal("0.01")),
                "payment_method": random.choice(list(LinePaymentMethod)),
            })
        create_invoice(
            db,
            car_id=random.choice(cars).id,
            invoice_date=start + timedelta(days=random.randint(0, 90)),
            items=lines,
        )
    print("✅ Seeded 30 invoices")

    print("🔄 Creating payments...")
    payments = PaymentService(db)
    for customer in customers:
        db.refresh(customer)
        if customer.balance >= 1:
            payments.create_receive(
                customer_id=customer.id,
                amount=(customer.balance * Decimal("0.5")).quantize(Decimal("0.01")),
                payment_date=date.today(),
                description="Partial settlement",
            )
    for car in cars:
        payments.create_payment_out(
            account_type="car",
            recipient_id=car.id,
            amount=money(10, 80),
            payment_date=date.today(),
            category=random.choice(["fuel", "repair", "toll"]),
            account_month=date.today().strftime("%Y-%m"),
        )
    for employee in drivers + kirishboys:
        payments.change_employee_balance(
            employee_id=employee.id,
            kind=PaymentKind.balance_add,
            amount=money(50, 300),
            entry_date=date.today(),
            description="Monthly wage",
        )
    print("✅ Seeded payments")
finally:
    db.close()
