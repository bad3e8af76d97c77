# app/models/store.py
from sqlmodel import Field, Column, Text, DateTime
from typing import Optional
from datetime import datetime, date
from decimal import Decimal

from app.models.mixins import SyncMixin


class Employee(SyncMixin, table=True):
    __tablename__ = "employees"

    name: str = Field(max_length=200)
    phone: Optional[str] = Field(default=None, max_length=50)
    email: Optional[str] = Field(default=None, max_length=255)
    position: Optional[str] = Field(default=None, max_length=100)
    salary: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    hire_date: Optional[date] = Field(default=None)
    active: bool = Field(default=True)
    notes: Optional[str] = Field(default=None, sa_column=Column(Text))


class StoreSetting(SyncMixin, table=True):
    """
    Key/value store settings.

    Devices address settings by key ("currency", "receipt_footer", ...) rather
    than by UUID, so the stored id is prefixed with the tenant's client_id.
    """
    __tablename__ = "settings"

    key: str = Field(max_length=100, index=True)
    value: Optional[str] = Field(default=None, sa_column=Column(Text))
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
