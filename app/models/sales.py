# app/models/sales.py
from sqlmodel import Field, Column, Text, DateTime
from typing import Optional
from datetime import datetime
from decimal import Decimal

from app.models.mixins import SyncMixin


class Customer(SyncMixin, table=True):
    __tablename__ = "customers"

    name: str = Field(max_length=200)
    phone: Optional[str] = Field(default=None, max_length=50, index=True)
    email: Optional[str] = Field(default=None, max_length=255)
    address: Optional[str] = Field(default=None, max_length=500)
    credit_limit: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    balance: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    notes: Optional[str] = Field(default=None, sa_column=Column(Text))
    created_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime)


class Invoice(SyncMixin, table=True):
    __tablename__ = "invoices"

    invoice_number: Optional[str] = Field(default=None, max_length=50, index=True)
    customer_id: Optional[str] = Field(default=None, max_length=100, index=True)
    shift_id: Optional[str] = Field(default=None, max_length=100)
    total: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    discount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    tax: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    net_total: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    paid_amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    remaining_amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    payment_status: str = Field(default="unpaid", max_length=20)
    invoice_date: Optional[datetime] = Field(default=None, sa_type=DateTime)
    notes: Optional[str] = Field(default=None, sa_column=Column(Text))
    created_by: Optional[str] = Field(default=None, max_length=100)


class InvoiceItem(SyncMixin, table=True):
    """Invoice line. Restoring a till backup re-creates these with fresh ids."""
    __tablename__ = "invoice_items"

    invoice_id: str = Field(max_length=100, index=True)
    product_id: str = Field(max_length=100, index=True)
    quantity: Decimal = Field(max_digits=12, decimal_places=3)
    unit_price: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    discount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    tax: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    total: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    created_at: Optional[datetime] = Field(default=None, sa_type=DateTime)


class SalesReturn(SyncMixin, table=True):
    __tablename__ = "sales_returns"

    original_invoice_id: Optional[str] = Field(default=None, max_length=100, index=True)
    customer_id: Optional[str] = Field(default=None, max_length=100)
    total_amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    reason: Optional[str] = Field(default=None, max_length=500)
    status: str = Field(default="completed", max_length=20)
    created_at: Optional[datetime] = Field(default=None, sa_type=DateTime)


class Payment(SyncMixin, table=True):
    __tablename__ = "payments"

    invoice_id: Optional[str] = Field(default=None, max_length=100, index=True)
    customer_id: Optional[str] = Field(default=None, max_length=100)
    payment_method_id: Optional[str] = Field(default=None, max_length=100)
    amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    paid_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    notes: Optional[str] = Field(default=None, sa_column=Column(Text))
