"""initial schema

Revision ID: 0a1b2c3d4e5f
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0a1b2c3d4e5f"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum("administrator", "manager", "operator", name="userrole")
user_status = sa.Enum("active", "inactive", name="userstatus")
record_status = sa.Enum("active", "inactive", "closed", name="recordstatus")
employee_category = sa.Enum("driver", "kirishboy", name="employeecategory")
car_status = sa.Enum("active", "maintenance", "closed", name="carstatus")
invoice_status = sa.Enum("active", "cancelled", name="invoicestatus")
line_payment_method = sa.Enum("cash", "credit", name="linepaymentmethod")
payment_kind = sa.Enum("receive", "payment_out", "balance_add", "balance_deduct", name="paymentkind")
ledger_account = sa.Enum("car", "customer", "employee", name="ledgeraccount")
ledger_field = sa.Enum("balance", "left", name="ledgerfield")
ledger_ref = sa.Enum("INVOICE", "PAYMENT", "ADJUSTMENT", name="ledgerref")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("status", user_status, nullable=False),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=True)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "employees",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=30), nullable=True),
        sa.Column("category", employee_category, nullable=False),
        sa.Column("balance", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("status", record_status, nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("price", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("driver_price", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("kirishboy_price", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=30), nullable=True),
        sa.Column("balance", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("status", record_status, nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "cars",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("number_plate", sa.String(length=50), nullable=False),
        sa.Column("driver_id", sa.Integer(), nullable=True),
        sa.Column("kirishboy_id", sa.Integer(), nullable=True),
        sa.Column("balance", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("left_amount", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("status", car_status, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["driver_id"], ["employees.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["kirishboy_id"], ["employees.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("number_plate"),
    )

    op.create_table(
        "invoices",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("invoice_no", sa.String(length=30), nullable=False),
        sa.Column("car_id", sa.Integer(), nullable=False),
        sa.Column("invoice_date", sa.Date(), nullable=False),
        sa.Column("total", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("total_left", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("total_profit", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("status", invoice_status, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["car_id"], ["cars.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_invoices_invoice_no"), "invoices", ["invoice_no"], unique=True)

    op.create_table(
        "invoice_lines",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("invoice_id", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("total", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("left_amount", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("payment_method", line_payment_method, nullable=False),
        sa.ForeignKeyConstraint(["invoice_id"], ["invoices.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["item_id"], ["items.id"]),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("payment_no", sa.String(length=30), nullable=False),
        sa.Column("type", payment_kind, nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=True),
        sa.Column("car_id", sa.Integer(), nullable=True),
        sa.Column("employee_id", sa.Integer(), nullable=True),
        sa.Column("amount", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("account_month", sa.String(length=30), nullable=True),
        sa.Column("balance_after", sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"]),
        sa.ForeignKeyConstraint(["car_id"], ["cars.id"]),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_payments_payment_no"), "payments", ["payment_no"], unique=True)

    op.create_table(
        "balance_ledger",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("account_type", ledger_account, nullable=False),
        sa.Column("account_id", sa.Integer(), nullable=False),
        sa.Column("field", ledger_field, nullable=False),
        sa.Column("ref_type", ledger_ref, nullable=False),
        sa.Column("ref_id", sa.String(length=30), nullable=True),
        sa.Column("change", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("value_after", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_balance_ledger_account_type"), "balance_ledger", ["account_type"], unique=False)
    op.create_index(op.f("ix_balance_ledger_account_id"), "balance_ledger", ["account_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_balance_ledger_account_id"), table_name="balance_ledger")
    op.drop_index(op.f("ix_balance_ledger_account_type"), table_name="balance_ledger")
    op.drop_table("balance_ledger")
    op.drop_index(op.f("ix_payments_payment_no"), table_name="payments")
    op.drop_table("payments")
    op.drop_table("invoice_lines")
    op.drop_index(op.f("ix_invoices_invoice_no"), table_name="invoices")
    op.drop_table("invoices")
    op.drop_table("cars")
    op.drop_table("customers")
    op.drop_table("items")
    op.drop_table("employees")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_index(op.f("ix_users_username"), table_name="users")
    op.drop_table("users")

    for enum_type in (
        ledger_ref, ledger_field, ledger_account, payment_kind, line_payment_method,
        invoice_status, car_status, employee_category, record_status, user_status, user_role,
    ):
        enum_type.drop(op.get_bind(), checkfirst=True)
