# app/services/sync/registry.py
"""
Schema registry for offline sync.

Holds the allow-list of entities devices may replicate, the alias map from the
devices' naming convention (camelCase) to canonical table names, and the known
column shape of every entity. The registry is built once at startup and passed
to every sync component; tests build smaller registries of their own.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple, Type

from sqlmodel import SQLModel

from app.models.mixins import SYNC_METADATA_COLUMNS
from app.models.catalog import ProductCategory, Product, Unit, ProductUnit, Warehouse, ProductStock
from app.models.sales import Customer, Invoice, InvoiceItem, SalesReturn, Payment
from app.models.purchasing import Supplier, Purchase, PurchaseItem
from app.models.finance import PaymentMethod, ExpenseCategory, Expense, CashMovement, Shift
from app.models.store import Employee, StoreSetting
from app.services.sync.errors import UnsyncableEntityError

logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)


@dataclass(frozen=True)
class SyncEntity:
    """
    One synchronizable entity.

    Attributes:
        name: Canonical entity (table) name
        model: SQLModel table class storing the entity
        aliases: Alternate names devices may use for the entity
        natural_key: Columns identifying the same real-world fact across
            regenerated ids (enables duplicate-insert detection)
        field_aliases: Device field name -> column, for fields whose name does
            not follow the camelCase/snake_case convention
        tenant_scoped_ids: Record ids are only unique per tenant (e.g. setting
            keys) and get prefixed with client_id and branch_id when stored
    """
    name: str
    model: Type[SQLModel]
    aliases: Tuple[str, ...] = ()
    natural_key: Optional[Tuple[str, ...]] = None
    field_aliases: Dict[str, str] = field(default_factory=dict)
    tenant_scoped_ids: bool = False

    @property
    def table(self):
        return self.model.__table__

    @property
    def columns(self) -> Tuple[str, ...]:
        """Business columns, i.e. everything except the sync metadata."""
        return tuple(
            column.name for column in self.table.columns
            if column.name not in SYNC_METADATA_COLUMNS
        )

    def column_type(self, column_name: str) -> Optional[type]:
        """Python type of a business column, or None if unknown."""
        column = self.table.columns.get(column_name)
        if column is None:
            return None
        try:
            return column.type.python_type
        except NotImplementedError:
            return None

    def storage_id(self, record_id: str, client_id: str, branch_id: str) -> str:
        """Primary key under which a device record id is stored."""
        if not self.tenant_scoped_ids:
            return record_id
        prefix = f"{client_id}-{branch_id}-"
        if UUID_PATTERN.match(record_id) or record_id.startswith(prefix):
            return record_id
        return f"{prefix}{record_id}"


class SchemaRegistry:
    """Allow-list and alias map of synchronizable entities."""

    def __init__(self, entities: Iterable[SyncEntity]):
        self._entities: Dict[str, SyncEntity] = {}
        self._aliases: Dict[str, str] = {}

        for entity in entities:
            if entity.name in self._entities:
                raise ValueError(f"Entity {entity.name} registered twice")

            missing = [c for c in SYNC_METADATA_COLUMNS if c not in entity.table.columns]
            if missing:
                raise ValueError(
                    f"Entity {entity.name} is missing sync columns: {', '.join(missing)}"
                )

            if entity.natural_key:
                unknown = [c for c in entity.natural_key if c not in entity.columns]
                if unknown:
                    raise ValueError(
                        f"Natural key of {entity.name} references unknown columns: {', '.join(unknown)}"
                    )

            self._entities[entity.name] = entity

        for entity in self._entities.values():
            for alias in entity.aliases:
                if alias in self._entities or alias in self._aliases:
                    raise ValueError(f"Alias {alias} collides with an existing entity or alias")
                self._aliases[alias] = entity.name

    @property
    def entity_names(self) -> List[str]:
        """Canonical names in declaration order."""
        return list(self._entities)

    @property
    def entities(self) -> List[SyncEntity]:
        return list(self._entities.values())

    def canonicalize(self, name: str) -> str:
        return self._aliases.get(name, name)

    def is_syncable(self, name: str) -> bool:
        return self.canonicalize(name) in self._entities

    def get(self, name: str) -> SyncEntity:
        canonical = self.canonicalize(name)
        entity = self._entities.get(canonical)
        if entity is None:
            raise UnsyncableEntityError(name, canonical)
        return entity

    def __contains__(self, name: str) -> bool:
        return self.is_syncable(name)

    def __len__(self) -> int:
        return len(self._entities)


def serialize_value(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, Enum):
        return value.value
    return value


def serialize_row(row: SQLModel, exclude: Iterable[str] = ()) -> Dict:
    """JSON-safe dict of a stored row."""
    excluded = set(exclude)
    return {
        key: serialize_value(value)
        for key, value in row.model_dump().items()
        if key not in excluded
    }


# ===========================
# POS entity declarations
# ===========================

# Order matters: pulls and diagnostics walk entities in this order.
POS_ENTITIES: Tuple[SyncEntity, ...] = (
    SyncEntity("product_categories", ProductCategory, aliases=("productCategories",),
               field_aliases={"nameAr": "name"}),
    SyncEntity("products", Product,
               field_aliases={"nameAr": "name", "price": "selling_price", "cost": "cost_price",
                              "category": "category_id"}),
    SyncEntity("units", Unit),
    SyncEntity("product_units", ProductUnit, aliases=("productUnits",)),
    SyncEntity("warehouses", Warehouse),
    SyncEntity("product_stock", ProductStock, aliases=("productStock",)),
    SyncEntity("customers", Customer, field_aliases={"currentBalance": "balance"}),
    SyncEntity("suppliers", Supplier),
    SyncEntity("invoices", Invoice, field_aliases={"userId": "created_by"}),
    SyncEntity("invoice_items", InvoiceItem, aliases=("invoiceItems",),
               natural_key=("invoice_id", "product_id", "quantity"),
               field_aliases={"price": "unit_price"}),
    SyncEntity("sales_returns", SalesReturn, aliases=("salesReturns",),
               field_aliases={"invoiceId": "original_invoice_id", "total": "total_amount"}),
    SyncEntity("payments", Payment),
    SyncEntity("purchases", Purchase,
               field_aliases={"totalAmount": "total", "userId": "created_by"}),
    SyncEntity("purchase_items", PurchaseItem, aliases=("purchaseItems",),
               natural_key=("purchase_id", "product_id", "quantity"),
               field_aliases={"cost": "unit_cost"}),
    SyncEntity("payment_methods", PaymentMethod, aliases=("paymentMethods",)),
    SyncEntity("expense_categories", ExpenseCategory, aliases=("expenseCategories",)),
    SyncEntity("expenses", Expense),
    SyncEntity("cash_movements", CashMovement, aliases=("cashMovements",)),
    SyncEntity("shifts", Shift),
    SyncEntity("employees", Employee),
    SyncEntity("settings", StoreSetting, tenant_scoped_ids=True),
)


def build_default_registry() -> SchemaRegistry:
    registry = SchemaRegistry(POS_ENTITIES)
    logger.info(f"Sync registry loaded with {len(registry)} entities")
    return registry
