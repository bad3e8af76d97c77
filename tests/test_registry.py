import pytest
from datetime import datetime, date
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, SQLModel

from app.models.catalog import Product
from app.models.mixins import SYNC_METADATA_COLUMNS
from app.models.sales import Customer, InvoiceItem
from app.models.store import StoreSetting
from app.models.sync import SyncOperation
from app.services.sync import SchemaRegistry, SyncEntity, UnsyncableEntityError
from app.services.sync.registry import POS_ENTITIES, serialize_row, serialize_value


class LegacyNote(SQLModel, table=True):
    """Table without sync metadata, must never be registered."""
    __tablename__ = "legacy_notes"

    id: Optional[int] = Field(default=None, primary_key=True)
    body: str


class TestDefaultRegistry:
    def test_all_pos_entities_are_registered(self, registry: SchemaRegistry):
        assert len(registry) == 21
        assert registry.entity_names[:3] == ["product_categories", "products", "units"]
        assert "sync_queue" not in registry

    def test_every_entity_has_sync_metadata(self, registry: SchemaRegistry):
        for entity in registry.entities:
            for column in SYNC_METADATA_COLUMNS:
                assert column in entity.table.columns, f"{entity.name}.{column}"
            assert not set(entity.columns) & set(SYNC_METADATA_COLUMNS)

    @pytest.mark.parametrize("alias, canonical", [
        ("invoiceItems", "invoice_items"),
        ("productCategories", "product_categories"),
        ("salesReturns", "sales_returns"),
        ("cashMovements", "cash_movements"),
        ("customers", "customers"),
        ("loyaltyCards", "loyaltyCards"),
    ])
    def test_canonicalize(self, registry: SchemaRegistry, alias, canonical):
        assert registry.canonicalize(alias) == canonical

    def test_is_syncable(self, registry: SchemaRegistry):
        assert registry.is_syncable("invoiceItems")
        assert registry.is_syncable("settings")
        assert not registry.is_syncable("loyaltyCards")
        assert not registry.is_syncable("sync_queue")
        assert "customers" in registry

    def test_get_unknown_entity(self, registry: SchemaRegistry):
        with pytest.raises(UnsyncableEntityError) as exc_info:
            registry.get("loyaltyCards")

        assert str(exc_info.value) == "Entity loyaltyCards is not syncable"

    def test_get_by_alias(self, registry: SchemaRegistry):
        entity = registry.get("invoiceItems")

        assert entity.name == "invoice_items"
        assert entity.model is InvoiceItem
        assert entity.natural_key == ("invoice_id", "product_id", "quantity")

    def test_column_types(self, registry: SchemaRegistry):
        customers = registry.get("customers")

        assert customers.column_type("credit_limit") is Decimal
        assert customers.column_type("created_at") is datetime
        assert customers.column_type("name") in (str, None)
        assert customers.column_type("nope") is None
        assert registry.get("employees").column_type("hire_date") is date


class TestStorageIds:
    def test_plain_entities_keep_device_ids(self, registry: SchemaRegistry):
        assert registry.get("customers").storage_id("c1", "client-a", "branch-1") == "c1"

    def test_setting_keys_are_prefixed(self, registry: SchemaRegistry):
        settings = registry.get("settings")

        assert settings.storage_id("currency", "client-a", "branch-1") == "client-a-branch-1-currency"
        assert settings.storage_id("client-a-branch-1-currency", "client-a", "branch-1") == "client-a-branch-1-currency"

    def test_setting_keys_differ_per_branch(self, registry: SchemaRegistry):
        settings = registry.get("settings")

        assert settings.storage_id("currency", "client-a", "branch-2") == "client-a-branch-2-currency"
        # A client-only prefix is not the branch prefix
        assert settings.storage_id("client-a-currency", "client-a", "branch-1") == "client-a-branch-1-client-a-currency"

    def test_uuid_setting_ids_are_kept(self, registry: SchemaRegistry):
        record_id = "3f1c2a9e-6b0d-4f43-9a57-1c8f0e2d7b11"

        assert registry.get("settings").storage_id(record_id, "client-a", "branch-1") == record_id


class TestRegistryValidation:
    def test_duplicate_entity(self):
        with pytest.raises(ValueError, match="registered twice"):
            SchemaRegistry([SyncEntity("customers", Customer), SyncEntity("customers", Customer)])

    def test_missing_sync_columns(self):
        with pytest.raises(ValueError, match="missing sync columns"):
            SchemaRegistry([SyncEntity("legacy_notes", LegacyNote)])

    def test_unknown_natural_key_column(self):
        with pytest.raises(ValueError, match="unknown columns"):
            SchemaRegistry([SyncEntity("customers", Customer, natural_key=("name", "vat_number"))])

    def test_alias_collision(self):
        with pytest.raises(ValueError, match="collides"):
            SchemaRegistry([
                SyncEntity("customers", Customer, aliases=("clients",)),
                SyncEntity("products", Product, aliases=("clients",)),
            ])

    def test_alias_shadowing_entity(self):
        with pytest.raises(ValueError, match="collides"):
            SchemaRegistry([
                SyncEntity("customers", Customer),
                SyncEntity("products", Product, aliases=("customers",)),
            ])

    def test_small_registry(self):
        registry = SchemaRegistry([SyncEntity("settings", StoreSetting, tenant_scoped_ids=True)])

        assert registry.entity_names == ["settings"]
        assert not registry.is_syncable("customers")

    def test_declared_entities_are_unique(self):
        names = [entity.name for entity in POS_ENTITIES]
        assert len(names) == len(set(names))


class TestSerialization:
    def test_serialize_value(self):
        assert serialize_value(datetime(2025, 11, 2, 9, 15)) == "2025-11-02T09:15:00"
        assert serialize_value(date(2025, 11, 2)) == "2025-11-02"
        assert serialize_value(Decimal("12.50")) == 12.5
        assert serialize_value(SyncOperation.CREATE) == "create"
        assert serialize_value("text") == "text"
        assert serialize_value(None) is None

    def test_serialize_row_excludes_fields(self):
        customer = Customer(
            id="c1", client_id="client-a", branch_id="branch-1", name="Mona",
            server_updated_at=datetime(2025, 11, 2, 9, 15), sync_version=3
        )

        data = serialize_row(customer, exclude=("server_updated_at", "sync_version"))

        assert data["id"] == "c1"
        assert data["name"] == "Mona"
        assert data["balance"] == 0.0
        assert "server_updated_at" not in data
        assert "sync_version" not in data
