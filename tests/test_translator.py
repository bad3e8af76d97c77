import pytest
from datetime import datetime, date
from decimal import Decimal

from app.services.sync import FieldTranslationError, RegistryFieldTranslator, UnsyncableEntityError
from app.services.sync.translator import camel_to_snake

CLIENT_ID = "client-a"
BRANCH_ID = "branch-1"


@pytest.mark.parametrize("name, expected", [
    ("creditLimit", "credit_limit"),
    ("invoiceId", "invoice_id"),
    ("name", "name"),
    ("already_snake", "already_snake"),
    ("taxRate2", "tax_rate2"),
])
def test_camel_to_snake(name, expected):
    assert camel_to_snake(name) == expected


class TestClientToServer:
    def test_camel_case_fields_are_mapped(self, translator: RegistryFieldTranslator):
        data = translator.client_to_server(
            "customers", {"name": "Mona", "creditLimit": 500, "phone": "+20100"}, CLIENT_ID, BRANCH_ID
        )

        assert data == {
            "name": "Mona",
            "credit_limit": Decimal("500"),
            "phone": "+20100",
            "client_id": CLIENT_ID,
            "branch_id": BRANCH_ID,
        }

    def test_field_aliases(self, translator: RegistryFieldTranslator):
        data = translator.client_to_server(
            "invoiceItems",
            {"invoiceId": "inv-1", "productId": "p-1", "quantity": "2.5", "price": 10},
            CLIENT_ID, BRANCH_ID
        )

        assert data["invoice_id"] == "inv-1"
        assert data["quantity"] == Decimal("2.5")
        assert data["unit_price"] == Decimal("10")
        assert "price" not in data

    def test_snake_case_field_wins_over_alias(self, translator: RegistryFieldTranslator):
        data = translator.client_to_server(
            "products", {"price": 10, "selling_price": 12, "name": "Tea"}, CLIENT_ID, BRANCH_ID
        )

        assert data["selling_price"] == Decimal("12")

    def test_tenant_comes_from_arguments(self, translator: RegistryFieldTranslator):
        data = translator.client_to_server(
            "customers", {"name": "Mona", "client_id": "client-b", "branchId": "branch-9"}, CLIENT_ID, BRANCH_ID
        )

        assert data["client_id"] == CLIENT_ID
        assert data["branch_id"] == BRANCH_ID

    def test_engine_metadata_is_dropped(self, translator: RegistryFieldTranslator):
        data = translator.client_to_server("customers", {
            "name": "Mona",
            "id": "other-id",
            "isDeleted": True,
            "syncVersion": 7,
            "serverUpdatedAt": "2025-01-01T00:00:00Z",
            "localUpdatedAt": "2025-01-01T00:00:00Z",
            "syncStatus": "pending",
        }, CLIENT_ID, BRANCH_ID)

        assert data == {"name": "Mona", "client_id": CLIENT_ID, "branch_id": BRANCH_ID}

    def test_unknown_fields_are_dropped(self, translator: RegistryFieldTranslator):
        data = translator.client_to_server(
            "customers", {"name": "Mona", "favouriteColour": "green"}, CLIENT_ID, BRANCH_ID
        )

        assert "favourite_colour" not in data
        assert "favouriteColour" not in data

    def test_datetimes_become_naive_utc(self, translator: RegistryFieldTranslator):
        data = translator.client_to_server(
            "invoices", {"invoiceDate": "2025-11-02T11:15:00+02:00"}, CLIENT_ID, BRANCH_ID
        )

        assert data["invoice_date"] == datetime(2025, 11, 2, 9, 15)

    def test_zulu_datetimes(self, translator: RegistryFieldTranslator):
        data = translator.client_to_server(
            "invoices", {"invoiceDate": "2025-11-02T09:15:00Z"}, CLIENT_ID, BRANCH_ID
        )

        assert data["invoice_date"] == datetime(2025, 11, 2, 9, 15)

    def test_dates(self, translator: RegistryFieldTranslator):
        data = translator.client_to_server(
            "employees", {"name": "Ali", "hireDate": "2024-03-01T00:00:00.000Z"}, CLIENT_ID, BRANCH_ID
        )

        assert data["hire_date"] == date(2024, 3, 1)

    @pytest.mark.parametrize("value, expected", [
        (True, True), (0, False), (1, True), ("true", True), ("0", False), ("false", False),
    ])
    def test_booleans(self, translator: RegistryFieldTranslator, value, expected):
        data = translator.client_to_server("products", {"name": "Tea", "active": value}, CLIENT_ID, BRANCH_ID)

        assert data["active"] is expected

    def test_nulls_are_kept(self, translator: RegistryFieldTranslator):
        data = translator.client_to_server("customers", {"name": "Mona", "phone": None}, CLIENT_ID, BRANCH_ID)

        assert data["phone"] is None

    def test_inline_images_are_skipped(self, translator: RegistryFieldTranslator):
        data = translator.client_to_server(
            "products", {"name": "Tea", "description": "data:image/png;base64,iVBORw0KGgo="}, CLIENT_ID, BRANCH_ID
        )

        assert "description" not in data

    def test_numbers_in_text_columns_become_strings(self, translator: RegistryFieldTranslator):
        data = translator.client_to_server("products", {"name": "Tea", "barcode": 622100123}, CLIENT_ID, BRANCH_ID)

        assert data["barcode"] == "622100123"

    def test_invalid_number(self, translator: RegistryFieldTranslator):
        with pytest.raises(FieldTranslationError, match="customers.credit_limit"):
            translator.client_to_server("customers", {"creditLimit": "lots"}, CLIENT_ID, BRANCH_ID)

    def test_boolean_is_not_a_number(self, translator: RegistryFieldTranslator):
        with pytest.raises(FieldTranslationError):
            translator.client_to_server("customers", {"creditLimit": True}, CLIENT_ID, BRANCH_ID)

    def test_invalid_datetime(self, translator: RegistryFieldTranslator):
        with pytest.raises(FieldTranslationError):
            translator.client_to_server("invoices", {"invoiceDate": "yesterday"}, CLIENT_ID, BRANCH_ID)

    def test_nested_values_are_rejected(self, translator: RegistryFieldTranslator):
        with pytest.raises(FieldTranslationError, match="Nested value"):
            translator.client_to_server("customers", {"notes": {"text": "vip"}}, CLIENT_ID, BRANCH_ID)

    def test_unknown_entity(self, translator: RegistryFieldTranslator):
        with pytest.raises(UnsyncableEntityError):
            translator.client_to_server("loyaltyCards", {}, CLIENT_ID, BRANCH_ID)
