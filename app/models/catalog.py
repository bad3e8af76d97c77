# app/models/catalog.py
from sqlmodel import Field, Column, Text, DateTime
from typing import Optional
from datetime import datetime
from decimal import Decimal

from app.models.mixins import SyncMixin


class ProductCategory(SyncMixin, table=True):
    __tablename__ = "product_categories"

    name: str = Field(max_length=200)
    name_en: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = Field(default=None, sa_column=Column(Text))
    color: Optional[str] = Field(default=None, max_length=20)
    active: bool = Field(default=True)
    created_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime)


class Product(SyncMixin, table=True):
    __tablename__ = "products"

    name: str = Field(max_length=200)
    name_en: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = Field(default=None, sa_column=Column(Text))
    barcode: Optional[str] = Field(default=None, max_length=100, index=True)
    sku: Optional[str] = Field(default=None, max_length=100)
    category_id: Optional[str] = Field(default=None, max_length=100, index=True)
    unit: Optional[str] = Field(default=None, max_length=50)
    cost_price: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    selling_price: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    stock: Decimal = Field(default=Decimal("0.000"), max_digits=12, decimal_places=3)
    min_stock: Decimal = Field(default=Decimal("0.000"), max_digits=12, decimal_places=3)
    tax_rate: Decimal = Field(default=Decimal("0.00"), max_digits=5, decimal_places=2)
    active: bool = Field(default=True)
    created_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime)


class Unit(SyncMixin, table=True):
    __tablename__ = "units"

    name: str = Field(max_length=100)
    symbol: Optional[str] = Field(default=None, max_length=20)
    active: bool = Field(default=True)
    created_at: Optional[datetime] = Field(default=None, sa_type=DateTime)


class ProductUnit(SyncMixin, table=True):
    __tablename__ = "product_units"

    product_id: str = Field(max_length=100, index=True)
    unit_id: str = Field(max_length=100)
    barcode: Optional[str] = Field(default=None, max_length=100)
    conversion_factor: Decimal = Field(default=Decimal("1.000"), max_digits=12, decimal_places=3)
    price: Optional[Decimal] = Field(default=None, max_digits=12, decimal_places=2)
    created_at: Optional[datetime] = Field(default=None, sa_type=DateTime)


class Warehouse(SyncMixin, table=True):
    __tablename__ = "warehouses"

    name: str = Field(max_length=200)
    location: Optional[str] = Field(default=None, max_length=255)
    is_default: bool = Field(default=False)
    active: bool = Field(default=True)
    created_at: Optional[datetime] = Field(default=None, sa_type=DateTime)


class ProductStock(SyncMixin, table=True):
    __tablename__ = "product_stock"

    product_id: str = Field(max_length=100, index=True)
    warehouse_id: str = Field(max_length=100, index=True)
    quantity: Decimal = Field(default=Decimal("0.000"), max_digits=12, decimal_places=3)
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
