# app/services/sync/translator.py
"""
Field translation between the devices' record shape and the stored columns.

Devices send camelCase records with ISO-8601 strings and plain numbers. The
write path converts them to the registry's column layout before anything
reaches the database. Only the write path uses a translator.
"""

import logging
import re
from datetime import datetime, date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Protocol

from app.models.mixins import SYNC_METADATA_COLUMNS
from app.services.sync.clock import to_naive_utc
from app.services.sync.errors import FieldTranslationError
from app.services.sync.registry import SchemaRegistry, SyncEntity

logger = logging.getLogger(__name__)

# Device-side bookkeeping that never maps to a column
CLIENT_ONLY_FIELDS = {"local_updated_at", "localUpdatedAt", "syncStatus", "sync_status"}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def camel_to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub(r"_\1", name).lower()


class FieldTranslator(Protocol):
    """
    Contract of the field translator used by the sync write path.

    Implementations must be pure and must never emit server_updated_at or
    sync_version, which are owned by the sync engine.
    """

    def client_to_server(
        self,
        entity_name: str,
        data: Dict[str, Any],
        client_id: str,
        branch_id: str
    ) -> Dict[str, Any]:
        ...


class RegistryFieldTranslator:
    """
    Default translator driven by the schema registry.

    For each device field:
    1. Skip device-only bookkeeping and engine-owned metadata
    2. Resolve the column (explicit field alias, then camelCase -> snake_case)
    3. Drop fields the registry does not know for the entity
    4. Coerce the value to the column's Python type
    The tenant columns are always taken from the arguments, never the payload.
    """

    def __init__(self, registry: SchemaRegistry):
        self.registry = registry

    def client_to_server(
        self,
        entity_name: str,
        data: Dict[str, Any],
        client_id: str,
        branch_id: str
    ) -> Dict[str, Any]:
        entity = self.registry.get(entity_name)
        columns = set(entity.columns)
        server_data: Dict[str, Any] = {}

        for key, value in (data or {}).items():
            if key in CLIENT_ONLY_FIELDS:
                continue

            column = entity.field_aliases.get(key) or camel_to_snake(key)
            if column in SYNC_METADATA_COLUMNS:
                continue
            if column not in columns:
                logger.debug(f"Dropping unknown field {key} for {entity.name}")
                continue
            # An explicit snake_case field wins over an aliased duplicate
            if column in server_data and key != column:
                continue

            coerced = self._coerce(entity, column, value)
            if coerced is _SKIP:
                continue
            server_data[column] = coerced

        server_data["client_id"] = client_id
        server_data["branch_id"] = branch_id
        return server_data

    def _coerce(self, entity: SyncEntity, column: str, value: Any) -> Any:
        if value is None:
            return None

        python_type = entity.column_type(column)
        try:
            if python_type is datetime:
                if isinstance(value, datetime):
                    return to_naive_utc(value)
                return to_naive_utc(datetime.fromisoformat(str(value).replace("Z", "+00:00")))
            if python_type is date:
                if isinstance(value, datetime):
                    return value.date()
                if isinstance(value, date):
                    return value
                return date.fromisoformat(str(value)[:10])
            if python_type is Decimal:
                if isinstance(value, bool):
                    raise ValueError("boolean is not a number")
                return Decimal(str(value))
            if python_type is bool:
                if isinstance(value, str):
                    return value.strip().lower() in ("1", "true", "yes")
                return bool(value)
            if python_type is int:
                return int(value)
        except (ValueError, TypeError, InvalidOperation) as e:
            raise FieldTranslationError(
                f"Invalid value for {entity.name}.{column}: {value!r} ({e})"
            )

        if isinstance(value, str):
            if value.startswith("data:"):
                # Inline base64 images are kept on the device only
                return _SKIP
            return value
        if isinstance(value, (dict, list)):
            raise FieldTranslationError(f"Nested value not supported for {entity.name}.{column}")
        return str(value)


_SKIP = object()
