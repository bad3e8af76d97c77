# app/services/sync/conflict_resolver.py
"""
Explicit resolution of conflicts reported by a previous push.

Invoked out-of-band once the user (or a client-side policy) has decided which
version wins. Runs in its own transaction, independent of any batch.
"""

import logging
from typing import Dict, Any, Optional

from sqlmodel import Session

from app.models.sync import SyncOperation
from app.schemas.sync import ConflictResolutionStrategy
from app.services.sync.batch_processor import append_outbox_entry, apply_update, find_tenant_row
from app.services.sync.errors import InvalidResolutionError, RecordNotFoundError
from app.services.sync.registry import SchemaRegistry
from app.services.sync.translator import FieldTranslator

logger = logging.getLogger(__name__)

# Recorded as the origin of overrides applied without a device id
SERVER_DEVICE_ID = "server"


class ConflictResolver:
    """Finalizes conflicts by keeping the server version or forcing the client's."""

    def __init__(self, registry: SchemaRegistry, translator: FieldTranslator):
        self.registry = registry
        self.translator = translator

    def resolve_conflict(
        self,
        db: Session,
        client_id: str,
        branch_id: str,
        entity_name: str,
        record_id: str,
        resolution: ConflictResolutionStrategy,
        client_data: Optional[Dict[str, Any]] = None,
        device_id: Optional[str] = None,
        is_deleted: bool = False
    ) -> None:
        """
        Apply a conflict resolution.

        ACCEPT_SERVER has no storage effect: the device re-pulls the record.
        ACCEPT_CLIENT overwrites the stored row with client_data without the
        timestamp comparison used by pushes, bumps sync_version and
        server_updated_at, and queues an outbound notification.

        Raises:
            UnsyncableEntityError: Entity is not in the allow-list
            InvalidResolutionError: ACCEPT_CLIENT without client_data
            RecordNotFoundError: No such record for the tenant
        """
        entity = self.registry.get(entity_name)
        resolution = ConflictResolutionStrategy(resolution)

        if resolution == ConflictResolutionStrategy.ACCEPT_SERVER:
            logger.info(f"Conflict on {entity.name}/{record_id} resolved with accept_server")
            return

        if not client_data:
            raise InvalidResolutionError("client_data is required when accepting client version")

        stored_id = entity.storage_id(record_id, client_id, branch_id)

        try:
            row = find_tenant_row(db, entity, stored_id, client_id, branch_id, lock=True)
            if row is None:
                raise RecordNotFoundError(f"Record {record_id} of {entity.name} not found")

            data = self.translator.client_to_server(entity.name, client_data, client_id, branch_id)
            apply_update(db, row, data, is_deleted)

            operation = SyncOperation.DELETE if is_deleted else SyncOperation.UPDATE
            append_outbox_entry(
                db, client_id, branch_id, device_id or SERVER_DEVICE_ID,
                entity.name, stored_id, operation
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(
            f"Conflict on {entity.name}/{stored_id} resolved with accept_client "
            f"(client={client_id} branch={branch_id})"
        )
