# app/models/finance.py
from sqlmodel import Field, Column, Text, DateTime
from typing import Optional
from datetime import datetime, date
from decimal import Decimal

from app.models.mixins import SyncMixin


class PaymentMethod(SyncMixin, table=True):
    __tablename__ = "payment_methods"

    name: str = Field(max_length=100)
    type: str = Field(default="cash", max_length=30)
    active: bool = Field(default=True)
    created_at: Optional[datetime] = Field(default=None, sa_type=DateTime)


class ExpenseCategory(SyncMixin, table=True):
    __tablename__ = "expense_categories"

    name: str = Field(max_length=200)
    name_en: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = Field(default=None, sa_column=Column(Text))
    active: bool = Field(default=True)
    created_at: Optional[datetime] = Field(default=None, sa_type=DateTime)


class Expense(SyncMixin, table=True):
    __tablename__ = "expenses"

    category_id: Optional[str] = Field(default=None, max_length=100, index=True)
    payment_method_id: Optional[str] = Field(default=None, max_length=100)
    shift_id: Optional[str] = Field(default=None, max_length=100)
    amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    expense_date: Optional[date] = Field(default=None)
    description: Optional[str] = Field(default=None, sa_column=Column(Text))
    receipt_number: Optional[str] = Field(default=None, max_length=100)


class CashMovement(SyncMixin, table=True):
    __tablename__ = "cash_movements"

    shift_id: Optional[str] = Field(default=None, max_length=100, index=True)
    type: str = Field(max_length=20)  # "in" / "out"
    amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    reason: Optional[str] = Field(default=None, max_length=500)
    created_by: Optional[str] = Field(default=None, max_length=100)
    created_at: Optional[datetime] = Field(default=None, sa_type=DateTime)


class Shift(SyncMixin, table=True):
    __tablename__ = "shifts"

    user_id: Optional[str] = Field(default=None, max_length=100, index=True)
    start_time: Optional[datetime] = Field(default=None, sa_type=DateTime)
    end_time: Optional[datetime] = Field(default=None, sa_type=DateTime)
    starting_cash: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    ending_cash: Optional[Decimal] = Field(default=None, max_digits=12, decimal_places=2)
    status: str = Field(default="open", max_length=20)
