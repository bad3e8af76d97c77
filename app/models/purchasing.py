# app/models/purchasing.py
from sqlmodel import Field, Column, Text, DateTime
from typing import Optional
from datetime import datetime
from decimal import Decimal

from app.models.mixins import SyncMixin


class Supplier(SyncMixin, table=True):
    __tablename__ = "suppliers"

    name: str = Field(max_length=200)
    phone: Optional[str] = Field(default=None, max_length=50)
    email: Optional[str] = Field(default=None, max_length=255)
    address: Optional[str] = Field(default=None, max_length=500)
    tax_number: Optional[str] = Field(default=None, max_length=50)
    balance: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    notes: Optional[str] = Field(default=None, sa_column=Column(Text))
    created_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime)


class Purchase(SyncMixin, table=True):
    __tablename__ = "purchases"

    purchase_number: Optional[str] = Field(default=None, max_length=50, index=True)
    supplier_id: Optional[str] = Field(default=None, max_length=100, index=True)
    total: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    discount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    tax: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    net_total: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    paid_amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    remaining_amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    payment_status: str = Field(default="unpaid", max_length=20)
    purchase_date: Optional[datetime] = Field(default=None, sa_type=DateTime)
    notes: Optional[str] = Field(default=None, sa_column=Column(Text))
    created_by: Optional[str] = Field(default=None, max_length=100)


class PurchaseItem(SyncMixin, table=True):
    __tablename__ = "purchase_items"

    purchase_id: str = Field(max_length=100, index=True)
    product_id: str = Field(max_length=100, index=True)
    quantity: Decimal = Field(max_digits=12, decimal_places=3)
    unit_cost: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    total: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    created_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
