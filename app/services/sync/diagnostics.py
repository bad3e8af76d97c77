# app/services/sync/diagnostics.py
"""Read-only sync statistics for operational visibility."""

import logging

from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlmodel import Session, select, func

from app.models.sync import SyncQueueEntry
from app.schemas.sync import SyncStatsResponse, TableStats
from app.services.sync.registry import SchemaRegistry

logger = logging.getLogger(__name__)


class SyncDiagnostics:
    def __init__(self, registry: SchemaRegistry):
        self.registry = registry

    def get_sync_stats(self, db: Session, client_id: str, branch_id: str) -> SyncStatsResponse:
        """Pending outbound notifications, last activity and live rows per entity."""
        pending = db.exec(
            select(func.count(SyncQueueEntry.id)).where(
                SyncQueueEntry.client_id == client_id,
                SyncQueueEntry.branch_id == branch_id,
                SyncQueueEntry.processed_at.is_(None)
            )
        ).one()

        last_sync_at = db.exec(
            select(func.max(SyncQueueEntry.created_at)).where(
                SyncQueueEntry.client_id == client_id,
                SyncQueueEntry.branch_id == branch_id
            )
        ).one()

        tables_stats = []
        for entity in self.registry.entities:
            model = entity.model
            try:
                with db.begin_nested():
                    count = db.exec(
                        select(func.count(model.id)).where(
                            model.client_id == client_id,
                            model.branch_id == branch_id,
                            model.is_deleted == False
                        )
                    ).one()
            except SQLAlchemyError as e:
                if isinstance(e, DBAPIError) and e.connection_invalidated:
                    raise
                logger.warning(f"Skipping {entity.name} in sync stats: {e}")
                continue

            if count:
                tables_stats.append(TableStats(entity_name=entity.name, record_count=count))

        return SyncStatsResponse(
            pending_queue_count=pending or 0,
            last_sync_at=last_sync_at,
            tables_stats=tables_stats
        )
