# app/services/sync/batch_processor.py
"""
Push path of the sync engine.

A device pushes up to SYNC_MAX_BATCH_SIZE records at once. The whole batch runs
in one database transaction; each record runs in its own SAVEPOINT so that a
record-level failure is reported in the response without undoing the others.
Conflicts use Last-Write-Wins on timestamps: a record whose local_updated_at is
older than the stored server_updated_at is returned to the device, not written.
"""

import logging
from typing import Dict, Any, Optional, Tuple

from sqlalchemy.exc import DBAPIError, DisconnectionError, IntegrityError, OperationalError, SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from app.core.config import settings
from app.models.sync import SyncOperation, SyncQueueEntry
from app.schemas.sync import (
    SyncBatchRequest,
    SyncBatchResponse,
    SyncConflict,
    SyncRecord,
    SyncRecordError,
)
from app.services.sync.clock import next_server_timestamp, to_naive_utc
from app.services.sync.errors import BatchTooLargeError, SyncError, TenantMismatchError, UnsyncableEntityError
from app.services.sync.registry import SchemaRegistry, SyncEntity, serialize_row
from app.services.sync.translator import FieldTranslator

logger = logging.getLogger(__name__)

# Never taken from device payloads on update
IMMUTABLE_COLUMNS = ("id", "client_id", "branch_id")


def is_connection_failure(error: BaseException) -> bool:
    """Errors that leave the transaction unusable and must fail the whole batch."""
    if isinstance(error, DisconnectionError):
        return True
    if isinstance(error, DBAPIError) and error.connection_invalidated:
        return True
    return isinstance(error, OperationalError)


def find_tenant_row(
    db: Session,
    entity: SyncEntity,
    record_id: str,
    client_id: str,
    branch_id: str,
    lock: bool = False
) -> Optional[SQLModel]:
    """Row by primary key within the tenant; optionally locked for update."""
    model = entity.model
    query = select(model).where(
        model.id == record_id,
        model.client_id == client_id,
        model.branch_id == branch_id
    )
    if lock:
        query = query.with_for_update()
    return db.exec(query).first()


def apply_update(db: Session, row: SQLModel, data: Dict[str, Any], is_deleted: bool) -> SQLModel:
    """Overwrite translated fields and bump the sync bookkeeping."""
    for key, value in data.items():
        if key in IMMUTABLE_COLUMNS:
            continue
        setattr(row, key, value)

    row.is_deleted = is_deleted
    row.server_updated_at = next_server_timestamp(row.server_updated_at)
    row.sync_version = (row.sync_version or 0) + 1

    db.add(row)
    db.flush()
    return row


def append_outbox_entry(
    db: Session,
    client_id: str,
    branch_id: str,
    device_id: str,
    entity_name: str,
    record_id: str,
    operation: SyncOperation
) -> SyncQueueEntry:
    entry = SyncQueueEntry(
        client_id=client_id,
        branch_id=branch_id,
        device_id=device_id,
        entity_type=entity_name,
        entity_id=record_id,
        operation=operation,
        payload={}
    )
    db.add(entry)
    db.flush()
    return entry


class BatchSyncProcessor:
    """Applies push batches from devices."""

    def __init__(
        self,
        registry: SchemaRegistry,
        translator: FieldTranslator,
        max_batch_size: int = settings.SYNC_MAX_BATCH_SIZE
    ):
        self.registry = registry
        self.translator = translator
        self.max_batch_size = max_batch_size

    def process_batch(self, db: Session, request: SyncBatchRequest) -> SyncBatchResponse:
        """
        Apply a batch inside a single transaction.

        Per-record outcomes (unsyncable entity, translation or storage error,
        conflict) are accumulated in the response and do not prevent the commit.
        Connection-level failures and unexpected exceptions roll back the
        whole batch and propagate.

        Raises:
            BatchTooLargeError: More records than the configured ceiling
        """
        if len(request.records) > self.max_batch_size:
            raise BatchTooLargeError(len(request.records), self.max_batch_size)

        logger.info(
            f"Processing sync batch: client={request.client_id} branch={request.branch_id} "
            f"device={request.device_id} records={len(request.records)}"
        )

        response = SyncBatchResponse()

        try:
            for record in request.records:
                canonical = self.registry.canonicalize(record.entity_name)
                if not self.registry.is_syncable(canonical):
                    response.errors.append(SyncRecordError(
                        entity_name=record.entity_name,
                        record_id=record.record_id,
                        error=str(UnsyncableEntityError(record.entity_name, canonical))
                    ))
                    continue

                entity = self.registry.get(canonical)

                try:
                    with db.begin_nested():
                        conflict = self._process_record(db, request, entity, record)
                except (SyncError, SQLAlchemyError) as e:
                    if is_connection_failure(e):
                        raise
                    logger.error(
                        f"Failed to sync record {entity.name}/{record.record_id}: {e}"
                    )
                    response.errors.append(SyncRecordError(
                        entity_name=record.entity_name,
                        record_id=record.record_id,
                        error=str(e)
                    ))
                    continue

                if conflict is not None:
                    response.conflicts.append(conflict)
                    continue

                response.synced_count += 1

            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Batch processing failed, rolled back: {e}")
            raise

        logger.info(
            f"Batch processing completed: synced={response.synced_count} "
            f"conflicts={len(response.conflicts)} errors={len(response.errors)}"
        )
        return response

    def _process_record(
        self,
        db: Session,
        request: SyncBatchRequest,
        entity: SyncEntity,
        record: SyncRecord
    ) -> Optional[SyncConflict]:
        """Apply one record. Returns a conflict instead of writing when the server is newer."""
        client_id, branch_id = request.client_id, request.branch_id
        record_id = entity.storage_id(record.record_id, client_id, branch_id)

        existing = find_tenant_row(db, entity, record_id, client_id, branch_id, lock=True)

        if existing is not None:
            local_updated_at = to_naive_utc(record.local_updated_at)
            if existing.server_updated_at > local_updated_at:
                logger.info(f"Conflict on {entity.name}/{record_id}: server version is newer")
                return SyncConflict(
                    entity_name=record.entity_name,
                    record_id=record.record_id,
                    local_data=record.data,
                    server_data=serialize_row(existing),
                    local_updated_at=record.local_updated_at,
                    server_updated_at=existing.server_updated_at
                )

            data = self.translator.client_to_server(entity.name, record.data, client_id, branch_id)
            apply_update(db, existing, data, record.is_deleted)
            operation = SyncOperation.UPDATE
        else:
            data = self.translator.client_to_server(entity.name, record.data, client_id, branch_id)

            duplicate_id = self._find_natural_duplicate(db, entity, data, client_id, branch_id)
            if duplicate_id is not None:
                logger.info(
                    f"Skipping duplicate {entity.name}/{record_id}, already stored as {duplicate_id}"
                )
                return None

            operation = self._insert_or_update(db, entity, record_id, data, record.is_deleted, client_id, branch_id)

        if record.is_deleted:
            operation = SyncOperation.DELETE

        append_outbox_entry(db, client_id, branch_id, request.device_id, entity.name, record_id, operation)
        return None

    def _insert_or_update(
        self,
        db: Session,
        entity: SyncEntity,
        record_id: str,
        data: Dict[str, Any],
        is_deleted: bool,
        client_id: str,
        branch_id: str
    ) -> SyncOperation:
        """Insert a new row; falls back to an update when another pusher created it first."""
        fields = {key: value for key, value in data.items() if key != "id"}
        row = entity.model(
            **fields,
            id=record_id,
            is_deleted=is_deleted,
            server_updated_at=next_server_timestamp(),
            sync_version=1
        )

        try:
            with db.begin_nested():
                db.add(row)
                db.flush()
            return SyncOperation.CREATE
        except IntegrityError:
            current = db.get(entity.model, record_id, populate_existing=True)
            if current is None:
                raise
            if (current.client_id, current.branch_id) != (client_id, branch_id):
                raise TenantMismatchError(
                    f"Record {record_id} of {entity.name} belongs to another tenant"
                )

            logger.info(f"Concurrent insert on {entity.name}/{record_id}, applying as update")
            apply_update(db, current, data, is_deleted)
            return SyncOperation.UPDATE

    def _find_natural_duplicate(
        self,
        db: Session,
        entity: SyncEntity,
        data: Dict[str, Any],
        client_id: str,
        branch_id: str
    ) -> Optional[str]:
        """Id of a tenant row with the same natural key, if the entity declares one."""
        if not entity.natural_key:
            return None

        values: Tuple = tuple(data.get(column) for column in entity.natural_key)
        if any(value is None for value in values):
            return None

        model = entity.model
        query = select(model.id).where(
            model.client_id == client_id,
            model.branch_id == branch_id,
            *[getattr(model, column) == value for column, value in zip(entity.natural_key, values)]
        ).limit(1)
        return db.exec(query).first()
